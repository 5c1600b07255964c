"""
Parameter Catalog Service
Keeps a searchable catalog of cluster configuration parameters in step with the live cluster.
"""

from .src.catalog_service import ParamCatalogService
from .src.catalog import Catalog
from .src.schemas import (
    ParameterInfo,
    Query,
    SortField,
    SortOrder,
    CatalogMetadata,
    ReconcileReport,
)
from .src.errors import BaselineLoadError, ReconcileError

__version__ = "1.0.0"
__all__ = [
    "ParamCatalogService",
    "Catalog",
    "ParameterInfo",
    "Query",
    "SortField",
    "SortOrder",
    "CatalogMetadata",
    "ReconcileReport",
    "BaselineLoadError",
    "ReconcileError",
]
