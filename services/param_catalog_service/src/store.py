import threading
from contextlib import contextmanager
from datetime import datetime, UTC
from typing import Iterator, Tuple

from shared.common_utils.logger import logger
from .catalog import Catalog
from .schemas import CatalogMetadata, CatalogSource
from .validator import generate_catalog_checksum


def _build_metadata(catalog: Catalog, version: int, source: CatalogSource) -> CatalogMetadata:
    return CatalogMetadata(
        version=version,
        source=source,
        last_updated=datetime.now(UTC).isoformat(),
        checksum=generate_catalog_checksum(catalog.to_records()),
        parameter_count=len(catalog),
    )


class CatalogStore:
    """
    Holds the published catalog snapshot and the refresh guard.

    Readers take the current ``(catalog, metadata)`` pair through a single
    reference read and never block. ``commit`` replaces the pair in one
    assignment. The refresh guard is a non-blocking lock acquire, so two
    concurrent triggers can never both start a cycle.
    """

    def __init__(self, catalog: Catalog, source: CatalogSource = CatalogSource.BASELINE):
        self._snapshot: Tuple[Catalog, CatalogMetadata] = (
            catalog,
            _build_metadata(catalog, 1, source),
        )
        self._swap_lock = threading.Lock()
        self._refresh_guard = threading.Lock()

    def snapshot(self) -> Tuple[Catalog, CatalogMetadata]:
        """The published catalog and its metadata, read together."""
        return self._snapshot

    def current(self) -> Catalog:
        return self._snapshot[0]

    def metadata(self) -> CatalogMetadata:
        return self._snapshot[1]

    def commit(self, catalog: Catalog, source: CatalogSource = CatalogSource.CLUSTER) -> CatalogMetadata:
        # checksum is computed outside the swap section
        metadata = _build_metadata(catalog, 0, source)
        with self._swap_lock:
            version = self._snapshot[1].version + 1
            metadata = metadata.model_copy(update={"version": version})
            self._snapshot = (catalog, metadata)
        logger.info(f"Committed catalog snapshot v{version} with {len(catalog)} parameters")
        return metadata

    def try_begin_refresh(self) -> bool:
        return self._refresh_guard.acquire(blocking=False)

    def end_refresh(self) -> None:
        self._refresh_guard.release()

    @property
    def refreshing(self) -> bool:
        return self._refresh_guard.locked()

    @contextmanager
    def refresh_slot(self) -> Iterator[bool]:
        """Yield True when this caller owns the refresh slot, False if a cycle is already running."""
        acquired = self.try_begin_refresh()
        try:
            yield acquired
        finally:
            if acquired:
                self.end_refresh()
