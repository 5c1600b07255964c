import pytest

from services.param_catalog_service.src.query_engine import (
    is_glob_pattern,
    matches_full_text,
    matches_name,
    matches_service,
    matches_type,
    search,
)
from services.param_catalog_service.src.schemas import (
    ParameterInfo,
    Query,
    ServiceType,
    SortField,
    SortOrder,
)


def names(results):
    return [info.name for info in results]


def test_empty_query_returns_everything_sorted(query_catalog):
    """Test no filters returns the whole snapshot by name ascending."""
    results = search(query_catalog, Query())
    assert names(results) == sorted(query_catalog.names())


@pytest.mark.parametrize(
    "pattern, name, expected",
    [
        (None, "osd.0", True),
        ("osd.0", "osd.0", True),
        ("osd*", "osd.0", True),
        ("*.0", "osd.0", True),
        ("osd.*", "osd.0", True),
        ("osd.*", "osd.0.cache", True),
        ("osd.*.cache", "osd.0.cache", True),
        ("osd.?", "osd.0", True),
        ("osd.[0-3]", "osd.0", True),
        ("osd.[!0]", "osd.0", False),
        ("mon*", "osd.0", False),
        ("OSD.0", "osd.0", False),
    ],
)
def test_matches_name(pattern, name, expected):
    """Test shell-glob name matching over the whole name."""
    assert matches_name(ParameterInfo(name=name), pattern) is expected


def test_is_glob_pattern():
    assert is_glob_pattern("mon_*")
    assert is_glob_pattern("osd.?")
    assert is_glob_pattern("osd.[01]")
    assert not is_glob_pattern("fsid")


def test_wildcard_name_search(query_catalog):
    """Test a wildcard keeps scanning the whole snapshot."""
    assert names(search(query_catalog, Query(name="mon_*"))) == ["mon_allow_pool_delete", "mon_host"]
    assert names(search(query_catalog, Query(name="osd.*"))) == ["osd.0", "osd.0.cache"]


def test_exact_name_returns_single_result(query_catalog):
    """Test a name without metacharacters is an equality test."""
    results = search(query_catalog, Query(name="fsid"))
    assert names(results) == ["fsid"]
    assert search(query_catalog, Query(name="this_param_does_not_exist")) == []
    assert search(query_catalog, Query(name="osd")) == []


def test_exact_name_stops_scanning(query_catalog):
    """Test the scan ends at the record carrying the exact name."""
    seen = []

    def tracking():
        for info in query_catalog:
            seen.append(info.name)
            yield info

    results = search(tracking(), Query(name="mon_host"))
    assert names(results) == ["mon_host"]
    assert seen[-1] == "mon_host"
    assert "osd.0" not in seen


def test_exact_name_with_failing_filter(query_catalog):
    """Test an exact name whose record fails another filter yields nothing."""
    assert search(query_catalog, Query(name="fsid", service="osd")) == []


def test_service_filter_is_case_insensitive(query_catalog):
    """Test service membership ignores case on both sides."""
    results = search(query_catalog, Query(service="osd"))
    assert names(results) == ["osd.0", "osd.0.cache", "osd_heartbeat_grace", "osd_max_backfills"]
    assert names(search(query_catalog, Query(service="OSD"))) == names(results)
    assert names(search(query_catalog, Query(service=ServiceType.RGW))) == ["rgw_dns_name", "rgw_thread_pool_size"]


@pytest.mark.parametrize(
    "services, service, expected",
    [
        (["osd"], None, True),
        (["osd"], "osd", True),
        (["OSD"], "osd", True),
        (["mon"], "osd", False),
        (["mon", "osd", "mgr"], "osd", True),
        (["custom"], "osd", False),
        ([], "osd", False),
    ],
)
def test_matches_service(services, service, expected):
    assert matches_service(ParameterInfo(name="x", services=services), service) is expected


def test_level_filter(query_catalog):
    """Test level equality, case-insensitive, with the developer alias."""
    assert names(search(query_catalog, Query(level="BASIC"))) == ["fsid", "mon_host", "rgw_thread_pool_size"]
    assert names(search(query_catalog, Query(level="developer"))) == ["osd.0"]
    assert search(query_catalog, Query(level="experimental")) == []


def test_type_filter(query_catalog):
    """Test type equality, case-insensitive."""
    assert names(search(query_catalog, Query(type="int"))) == ["osd.0", "osd_heartbeat_grace", "rgw_thread_pool_size"]
    assert names(search(query_catalog, Query(type="string"))) == ["mon_host", "rgw_dns_name"]
    assert matches_type(ParameterInfo(name="x", type="INT"), "int")
    assert not matches_type(ParameterInfo(name="x", type="bool"), "str")


def test_filter_conjunction(query_catalog):
    """Test every given filter must hold."""
    results = search(query_catalog, Query(service="osd", type="int"))
    assert names(results) == ["osd.0", "osd_heartbeat_grace"]
    for info in results:
        assert "osd" in [svc.lower() for svc in info.services]
        assert info.type.lower() == "int"

    results = search(query_catalog, Query(name="osd_*", service="osd", level="advanced"))
    assert names(results) == ["osd_heartbeat_grace", "osd_max_backfills"]


@pytest.mark.parametrize(
    "info, text, expected",
    [
        (ParameterInfo(name="osd.0"), "osd", True),
        (ParameterInfo(name="OSD.0"), "osd", True),
        (ParameterInfo(name="osd.0", desc="OSD description"), "description", True),
        (ParameterInfo(name="osd.0", long_desc="Detailed OSD description"), "detailed", True),
        (ParameterInfo(name="osd.0", tags=["performance", "cache"]), "cache", True),
        (ParameterInfo(name="osd.0", services=["osd", "mon"]), "mon", True),
        (ParameterInfo(name="osd.0", default="cache_size=1G"), "cache", True),
        (ParameterInfo(name="osd.0", daemon_default="cache_size=1G"), "cache", True),
        (ParameterInfo(name="osd.0", default=4096), "409", True),
        (ParameterInfo(name="osd.0", type="uint"), "uin", True),
        (ParameterInfo(name="osd.0", level="advanced"), "vanc", True),
        (ParameterInfo(name="osd.0"), "mon", False),
        (ParameterInfo(name="osd.0"), "none", False),
    ],
)
def test_matches_full_text(info, text, expected):
    """Test free text is searched across every descriptive field."""
    assert matches_full_text(info, text.lower()) is expected


def test_full_text_search(query_catalog):
    """Test free-text search is case-insensitive and matches any field."""
    results = search(query_catalog, Query(full_text="CACHE"))
    assert names(results) == ["osd.0.cache", "rgw_dns_name"]
    assert names(search(query_catalog, Query(full_text="performance"))) == ["osd.0.cache", "rgw_thread_pool_size"]


def test_sort_by_name(query_catalog):
    """Test name ordering in both directions."""
    ascending = names(search(query_catalog, Query(sort=SortField.NAME, order=SortOrder.ASC)))
    descending = names(search(query_catalog, Query(sort=SortField.NAME, order=SortOrder.DESC)))
    assert all(a <= b for a, b in zip(ascending, ascending[1:]))
    assert all(a >= b for a, b in zip(descending, descending[1:]))
    assert descending == list(reversed(ascending))


def test_sort_by_type_descending(query_catalog):
    results = search(query_catalog, Query(sort="type", order="desc"))
    types = [info.type for info in results]
    assert all(a >= b for a, b in zip(types, types[1:]))


def test_sort_by_level_is_stable(query_catalog):
    """Test equal keys keep snapshot (name) order."""
    results = search(query_catalog, Query(sort="level"))
    levels = [info.level for info in results]
    assert all(a <= b for a, b in zip(levels, levels[1:]))
    advanced = [info.name for info in results if info.level == "advanced"]
    assert advanced == sorted(advanced)


def test_sort_by_first_service(query_catalog):
    """Test service sorting uses the first listed service."""
    results = search(query_catalog, Query(sort="service"))
    firsts = [info.primary_service for info in results]
    assert firsts == sorted(firsts)
    assert results[0].primary_service == "OSD"


def test_sort_by_service_empty_first():
    """Test a parameter without services sorts as the empty string."""
    params = [ParameterInfo(name="a", services=["mon"]), ParameterInfo(name="b")]
    assert names(search(params, Query(sort="service"))) == ["b", "a"]


def test_unknown_sort_falls_back_to_name(query_catalog):
    """Test malformed sort options never fail the query."""
    results = search(query_catalog, Query(sort="bogus", order="bogus"))
    assert names(results) == sorted(query_catalog.names())


def test_search_does_not_modify_snapshot(query_catalog):
    before = query_catalog.names()
    search(query_catalog, Query(sort="name", order="desc"))
    assert query_catalog.names() == before


@pytest.mark.asyncio
async def test_bundled_dataset_queries(bundled_catalog):
    """Test searches against the shipped dataset."""
    assert names(search(bundled_catalog, Query(name="fsid"))) == ["fsid"]
    osd_int = search(bundled_catalog, Query(service="osd", type="int"))
    assert osd_int
    assert all(info.type == "int" and "osd" in info.services for info in osd_int)
    for info in search(bundled_catalog, Query(service="immutable-object-cache")):
        assert "immutable-object-cache" in info.services
    for info in search(bundled_catalog, Query(name="mon_*")):
        assert info.name.startswith("mon_")
