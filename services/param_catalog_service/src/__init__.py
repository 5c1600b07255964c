"""
Parameter Catalog Service Source Package
Contains the catalog model, baseline loading, reconciliation and search.
"""

from .catalog_service import ParamCatalogService
from .catalog import Catalog
from .schemas import (
    ServiceType,
    ConfigLevel,
    ParamType,
    SortField,
    SortOrder,
    CatalogSource,
    ScalarKind,
    ScalarValue,
    ParameterInfo,
    Query,
    CatalogMetadata,
    ReconcileReport,
)
from .errors import (
    CatalogError,
    BaselineLoadError,
    ReconcileError,
    CommandExecutionError,
)
from .validator import CatalogValidationError, parse_min_max
from .baseline_loader import DEFAULT_BASELINE_PATH, load_baseline, load_baseline_file
from .executor import (
    CommandDescriptor,
    CommandExecutor,
    CephCliExecutor,
    MockCommandExecutor,
    build_executor,
)
from .reconciler import merge_params, reconcile
from .store import CatalogStore
from .query_engine import search

__all__ = [
    # Main components
    "ParamCatalogService",
    "Catalog",
    "CatalogStore",

    # Schemas
    "ServiceType",
    "ConfigLevel",
    "ParamType",
    "SortField",
    "SortOrder",
    "CatalogSource",
    "ScalarKind",
    "ScalarValue",
    "ParameterInfo",
    "Query",
    "CatalogMetadata",
    "ReconcileReport",

    # Errors
    "CatalogError",
    "BaselineLoadError",
    "ReconcileError",
    "CommandExecutionError",
    "CatalogValidationError",

    # Operations
    "parse_min_max",
    "DEFAULT_BASELINE_PATH",
    "load_baseline",
    "load_baseline_file",
    "merge_params",
    "reconcile",
    "search",

    # Cluster commands
    "CommandDescriptor",
    "CommandExecutor",
    "CephCliExecutor",
    "MockCommandExecutor",
    "build_executor",
]
