"""
Reconciliation of a catalog against the parameters a live cluster reports.

The cluster is asked for its parameter names only. Names already in the
previous catalog keep their record untouched; detail is fetched for newly
observed names alone, so the number of detail calls equals the delta rather
than the several thousand parameters a cluster exposes.
"""

import asyncio
import time
from operator import attrgetter
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional

from pydantic import ValidationError

from shared.common_utils.logger import logger
from .catalog import Catalog
from .errors import CatalogError, CommandExecutionError, ReconcileError
from .executor import CommandExecutor, config_help_command, config_ls_command
from .schemas import ParameterInfo, ReconcileReport
from .validator import (
    CONFIG_HELP_SCHEMA,
    CONFIG_LS_SCHEMA,
    CatalogValidationError,
    decode_json_reply,
    validate_reply_structure,
)

FetchDetail = Callable[[str], Awaitable[ParameterInfo]]


@dataclass
class MergeResult:
    params: List[ParameterInfo] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class ReconcileResult:
    catalog: Catalog
    report: ReconcileReport


async def fetch_cluster_names(executor: CommandExecutor) -> List[str]:
    """Ask the cluster for the names of every parameter it knows."""
    reply = await executor.execute(config_ls_command())
    names = decode_json_reply(reply, "'config ls' reply")
    validate_reply_structure(names, CONFIG_LS_SCHEMA)
    return names


async def fetch_param_detail(executor: CommandExecutor, name: str) -> ParameterInfo:
    """Fetch full help data for a single parameter."""
    reply = await executor.execute(config_help_command(name))
    record = decode_json_reply(reply, f"'config help' reply for '{name}'")
    validate_reply_structure(record, CONFIG_HELP_SCHEMA)
    try:
        param = ParameterInfo.model_validate(record)
    except ValidationError as e:
        raise CatalogValidationError(f"Invalid 'config help' reply for '{name}': {e}") from e
    if param.name != name:
        logger.warning(f"'config help' for '{name}' answered with '{param.name}', keeping requested name")
        param = param.model_copy(update={"name": name})
    return param


async def merge_params(
    previous: Iterable[ParameterInfo],
    cluster_names: Iterable[str],
    fetch: FetchDetail,
) -> MergeResult:
    """
    Merge ``previous`` with the names the cluster reports.

    Both sides are walked once in ascending order. Names on both sides keep
    the existing record, cluster-only names are fetched, previous-only names
    are dropped. A failed fetch skips that name and is recorded in
    ``failed``; the merge carries on with the rest of the delta.
    """
    base = sorted(previous, key=attrgetter("name"))
    names = sorted(set(cluster_names))
    result = MergeResult()

    i = 0
    for name in names:
        while i < len(base) and base[i].name < name:
            result.removed.append(base[i].name)
            i += 1

        if i < len(base) and base[i].name == name:
            result.params.append(base[i])
            i += 1
            continue

        try:
            param = await fetch(name)
        except CatalogError as e:
            logger.error(f"Failed to fetch details for parameter '{name}': {e}")
            result.failed.append(name)
            continue
        result.params.append(param)
        result.added.append(name)

    result.removed.extend(param.name for param in base[i:])
    return result


async def reconcile(
    previous: Catalog,
    executor: CommandExecutor,
    timeout: Optional[float] = None,
) -> ReconcileResult:
    """
    Build the catalog that matches what the cluster currently reports.

    Raises ReconcileError when the name list cannot be obtained, the cycle
    exceeds ``timeout`` or the executor fails in an unexpected way.
    Cancellation propagates; nothing is published here, so an interrupted
    cycle leaves no trace.
    """
    started = time.monotonic()

    async def fetch(name: str) -> ParameterInfo:
        return await fetch_param_detail(executor, name)

    try:
        async with asyncio.timeout(timeout):
            try:
                cluster_names = await fetch_cluster_names(executor)
            except (CommandExecutionError, CatalogValidationError) as e:
                logger.error(f"Failed to list cluster parameters: {e}")
                raise ReconcileError(f"Could not list cluster parameters: {e}") from e

            merged = await merge_params(previous, cluster_names, fetch)
    except TimeoutError as e:
        logger.error(f"Reconciliation exceeded {timeout}s and was aborted")
        raise ReconcileError(f"Reconciliation timed out after {timeout}s") from e
    except ReconcileError:
        raise
    except Exception as e:
        logger.error(f"Reconciliation aborted by unexpected executor failure: {e!r}")
        raise ReconcileError(f"Reconciliation failed: {e!r}") from e

    catalog = Catalog(merged.params)
    report = ReconcileReport(
        added=merged.added,
        removed=merged.removed,
        failed=merged.failed,
        total=len(catalog),
        duration_seconds=time.monotonic() - started,
    )

    if report.failed_count:
        logger.warning(
            f"Reconciliation skipped {report.failed_count} parameters whose details could not be fetched"
        )
    logger.info(
        f"Reconciled catalog with cluster: total={report.total}, added={len(report.added)}, "
        f"removed={len(report.removed)}, failed={report.failed_count}"
    )
    return ReconcileResult(catalog=catalog, report=report)
