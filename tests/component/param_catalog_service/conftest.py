import json
import pytest
import pytest_asyncio
from pathlib import Path
from typing import Dict, List

from services.param_catalog_service.config.env_settings import CatalogSettings
from services.param_catalog_service.src.baseline_loader import DEFAULT_BASELINE_PATH, load_baseline_file
from services.param_catalog_service.src.catalog import Catalog
from services.param_catalog_service.src.executor import MockCommandExecutor
from services.param_catalog_service.src.schemas import ParameterInfo


BASE_TYPES = {
    "alpha": "str",
    "bravo": "int",
    "charlie": "bool",
    "delta": "float",
    "echo": "uuid",
}


def fetched_record(name: str) -> Dict:
    """The record the detail stub answers for any newly observed name."""
    return {"name": name, "type": "fetched", "level": "advanced", "services": ["osd"]}


def make_executor(cluster_names: List[str], failing=()) -> MockCommandExecutor:
    """Executor whose cluster lists ``cluster_names`` and knows details for all of them."""
    return MockCommandExecutor(
        responses={"config_ls": cluster_names},
        detail_responses={name: fetched_record(name) for name in cluster_names},
        failing=failing,
    )


@pytest.fixture
def base_records() -> List[Dict]:
    return [{"name": name, "type": param_type} for name, param_type in BASE_TYPES.items()]


@pytest.fixture
def base_catalog(base_records) -> Catalog:
    return Catalog(ParameterInfo.model_validate(record) for record in base_records)


@pytest.fixture
def query_catalog() -> Catalog:
    """A small catalog exercising every search axis."""
    records = [
        {"name": "fsid", "type": "uuid", "level": "basic", "desc": "cluster fsid (uuid)",
         "default": "00000000-0000-0000-0000-000000000000", "services": ["common"], "tags": ["service"]},
        {"name": "mon_allow_pool_delete", "type": "bool", "level": "advanced", "desc": "allow pool deletions",
         "default": False, "services": ["mon"]},
        {"name": "mon_host", "type": "str", "level": "basic", "desc": "list of hosts or addresses to search for a monitor",
         "default": "", "services": ["common"], "tags": ["network"]},
        {"name": "osd.0", "type": "int", "level": "dev", "desc": "OSD description",
         "services": ["osd"]},
        {"name": "osd.0.cache", "type": "size", "level": "advanced", "long_desc": "Detailed OSD cache description",
         "default": 1073741824, "services": ["OSD"], "tags": ["performance", "cache"]},
        {"name": "osd_heartbeat_grace", "type": "int", "level": "advanced", "desc": "Duration of missing heartbeats",
         "default": 20, "services": ["osd", "mon"]},
        {"name": "osd_max_backfills", "type": "uint", "level": "advanced", "desc": "Maximum number of concurrent backfills",
         "default": 1, "services": ["osd"]},
        {"name": "rgw_dns_name", "type": "str", "level": "advanced", "desc": "The host names that RGW uses.",
         "daemon_default": "cache_size=1G", "services": ["rgw"]},
        {"name": "rgw_thread_pool_size", "type": "INT", "level": "basic", "desc": "RGW requests handling thread pool size.",
         "default": 512, "services": ["rgw"], "tags": ["performance"]},
    ]
    return Catalog(ParameterInfo.model_validate(record) for record in records)


@pytest_asyncio.fixture
async def bundled_catalog() -> Catalog:
    return await load_baseline_file()


@pytest.fixture
def bundled_records() -> List[Dict]:
    with open(DEFAULT_BASELINE_PATH, "r") as f:
        return json.load(f)


@pytest.fixture
def catalog_settings() -> CatalogSettings:
    return CatalogSettings(
        EXECUTOR="mock",
        SKIP_CLUSTER_UPDATE=False,
        REFRESH_INTERVAL=0,
        RECONCILE_TIMEOUT=5,
    )


@pytest.fixture
def mock_data_dir(tmp_path) -> Path:
    """Mock executor replies laid out on disk."""
    (tmp_path / "config_help").mkdir()
    (tmp_path / "config_ls.json").write_text(json.dumps(["alpha", "golf"]))
    (tmp_path / "config_help" / "golf.json").write_text(json.dumps(fetched_record("golf")))
    return tmp_path


@pytest.fixture
def executor_factory():
    return make_executor
