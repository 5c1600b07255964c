import asyncio
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Set, Union
from uuid import uuid4

from shared.common_utils.logger import logger
from ..config.env_settings import CatalogSettings
from .baseline_loader import DEFAULT_BASELINE_PATH, BaselineSource, load_baseline, load_baseline_file
from .catalog import Catalog
from .errors import ReconcileError
from .executor import CommandExecutor, build_executor
from .query_engine import search as search_catalog
from .reconciler import reconcile as reconcile_catalog
from .schemas import CatalogMetadata, ParameterInfo, Query, ReconcileReport
from .store import CatalogStore


class ParamCatalogService:
    def __init__(
        self,
        settings: Optional[CatalogSettings] = None,
        executor: Optional[CommandExecutor] = None,
        baseline: Optional[Union[BaselineSource, Catalog]] = None,
    ):
        self.settings = settings or CatalogSettings()
        self._executor = executor
        self._baseline = baseline
        self._store: Optional[CatalogStore] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._subscribers: Set[asyncio.Queue] = set()
        self.last_report: Optional[ReconcileReport] = None

    @property
    def store(self) -> CatalogStore:
        if self._store is None:
            raise RuntimeError("Catalog service has not been started")
        return self._store

    @property
    def executor(self) -> CommandExecutor:
        if self._executor is None:
            self._executor = build_executor(self.settings)
        return self._executor

    async def start(self) -> None:
        """Publish the baseline catalog, then bring it in line with the cluster."""
        if self._store is not None:
            logger.warning("Catalog already published, keeping the current snapshot")
        else:
            await self._publish_baseline()

        if self.settings.periodic_refresh_enabled and self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh_loop())
        logger.info(f"{self.settings.SERVICE_NAME} v{self.settings.SERVICE_VERSION} started")

    async def _publish_baseline(self) -> None:
        catalog = await self._load_baseline()
        self._store = CatalogStore(catalog)

        if self.settings.SKIP_CLUSTER_UPDATE:
            logger.info("Cluster update skipped, serving baseline catalog")
        else:
            try:
                await self.reconcile()
            except ReconcileError as e:
                logger.warning(f"Initial reconciliation failed, serving baseline catalog: {e}")

    async def stop(self) -> None:
        if self._refresh_task:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None
        logger.info(f"{self.settings.SERVICE_NAME} stopped")

    async def _load_baseline(self) -> Catalog:
        if isinstance(self._baseline, Catalog):
            return self._baseline
        if self._baseline is not None:
            return load_baseline(self._baseline)
        return await load_baseline_file(self.settings.BASELINE_PATH or DEFAULT_BASELINE_PATH)

    async def _refresh_loop(self) -> None:
        interval = self.settings.REFRESH_INTERVAL
        while True:
            await asyncio.sleep(interval)
            try:
                await self.reconcile()
            except ReconcileError as e:
                logger.error(f"Periodic reconciliation failed: {e}")
            except Exception as e:
                logger.error(f"Periodic reconciliation raised unexpectedly: {e!r}")

    def search(self, query: Optional[Query] = None, **filters: Any) -> List[ParameterInfo]:
        """Search the current snapshot, from a Query or from keyword filters."""
        if query is None:
            query = Query(**filters)
        return search_catalog(self.store.current(), query)

    def get_parameter(self, name: str) -> Optional[ParameterInfo]:
        return self.store.current().get(name)

    async def reconcile(self, timeout: Optional[float] = None) -> Optional[ReconcileReport]:
        """
        Run one reconciliation cycle and publish its result.

        Returns None without doing anything when a cycle is already running.
        Raises ReconcileError if the cycle was aborted; the published
        snapshot is unchanged in that case.
        """
        store = self.store
        if not store.try_begin_refresh():
            logger.info("Reconciliation already in progress, request dropped")
            return None

        try:
            with logger.correlation_scope(uuid4().hex[:8]):
                logger.info("Reconciliation cycle started")
                result = await reconcile_catalog(
                    store.current(),
                    self.executor,
                    timeout if timeout is not None else self.settings.RECONCILE_TIMEOUT,
                )
                metadata = store.commit(result.catalog)
                self.last_report = result.report
                await self._notify_subscribers(metadata, result.report)
                logger.info(f"Reconciliation cycle committed snapshot v{metadata.version}")
                return result.report
        finally:
            store.end_refresh()

    def get_metadata(self) -> CatalogMetadata:
        return self.store.metadata()

    async def subscribe_to_updates(self) -> asyncio.Queue:
        """Subscribe to snapshot commits."""
        queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    async def unsubscribe_from_updates(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    async def _notify_subscribers(self, metadata: CatalogMetadata, report: ReconcileReport) -> None:
        update: Dict[str, Any] = {
            "version": metadata.version,
            "checksum": metadata.checksum,
            "timestamp": datetime.now(UTC).isoformat(),
            "added": list(report.added),
            "removed": list(report.removed),
            "failed": list(report.failed),
        }
        for queue in self._subscribers:
            await queue.put(update)
