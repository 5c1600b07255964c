from fnmatch import fnmatchcase
from typing import Callable, Dict, Iterable, List, Optional

from .schemas import ParameterInfo, Query, SortField, SortOrder

GLOB_METACHARACTERS = frozenset("*?[")


def is_glob_pattern(pattern: str) -> bool:
    return any(char in GLOB_METACHARACTERS for char in pattern)


def matches_service(info: ParameterInfo, service: Optional[str]) -> bool:
    if service is None:
        return True
    wanted = service.lower()
    return any(svc.lower() == wanted for svc in info.services)


def matches_level(info: ParameterInfo, level: Optional[str]) -> bool:
    if level is None:
        return True
    return info.level.lower() == level.lower()


def matches_type(info: ParameterInfo, param_type: Optional[str]) -> bool:
    if param_type is None:
        return True
    return info.type.lower() == param_type.lower()


def matches_name(info: ParameterInfo, pattern: Optional[str]) -> bool:
    if pattern is None:
        return True
    if not is_glob_pattern(pattern):
        return info.name == pattern
    return fnmatchcase(info.name, pattern)


def matches_full_text(info: ParameterInfo, full_text_lower: Optional[str]) -> bool:
    """``full_text_lower`` must already be lower-cased."""
    if full_text_lower is None:
        return True

    fields = (
        info.name,
        info.type,
        info.level,
        info.description,
        info.long_description,
        str(info.default),
        str(info.daemon_default),
    )
    if any(full_text_lower in value.lower() for value in fields):
        return True
    if any(full_text_lower in tag.lower() for tag in info.tags):
        return True
    return any(full_text_lower in svc.lower() for svc in info.services)


SORT_KEYS: Dict[SortField, Callable[[ParameterInfo], str]] = {
    SortField.NAME: lambda info: info.name,
    SortField.TYPE: lambda info: info.type,
    SortField.LEVEL: lambda info: info.level,
    SortField.SERVICE: lambda info: info.primary_service,
}


def sort_results(results: List[ParameterInfo], sort: SortField, order: SortOrder) -> List[ParameterInfo]:
    # sorted() is stable in both directions, equal keys keep snapshot order
    key = SORT_KEYS.get(sort, SORT_KEYS[SortField.NAME])
    return sorted(results, key=key, reverse=order == SortOrder.DESC)


def search(snapshot: Iterable[ParameterInfo], query: Optional[Query] = None) -> List[ParameterInfo]:
    """
    Return the parameters of ``snapshot`` that satisfy every filter in ``query``.

    A name without glob metacharacters is an equality test; since names are
    unique the scan ends once that name has been seen.
    """
    query = query or Query()
    exact_name = query.name if query.name is not None and not is_glob_pattern(query.name) else None
    full_text_lower = query.full_text.lower() if query.full_text is not None else None

    results: List[ParameterInfo] = []
    for info in snapshot:
        if exact_name is not None and info.name != exact_name:
            continue
        if (
            matches_service(info, query.service)
            and matches_level(info, query.level)
            and matches_type(info, query.type)
            and matches_name(info, query.name)
            and matches_full_text(info, full_text_lower)
        ):
            results.append(info)
        if exact_name is not None:
            break

    return sort_results(results, query.sort, query.order)
