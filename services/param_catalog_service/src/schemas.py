from typing import Any, Dict, List, Optional, Tuple, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .validator import parse_min_max


class ServiceType(str, Enum):
    COMMON = "common"
    MON = "mon"
    MDS = "mds"
    OSD = "osd"
    MGR = "mgr"
    RGW = "rgw"
    RBD = "rbd"
    RBD_MIRROR = "rbd-mirror"
    IMMUTABLE_OBJECT_CACHE = "immutable-object-cache"
    MDS_CLIENT = "mds_client"
    CEPHFS_MIRROR = "cephfs-mirror"
    CEPH_EXPORTER = "ceph-exporter"


class ConfigLevel(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"
    DEVELOPER = "dev"
    EXPERIMENTAL = "experimental"


class ParamType(str, Enum):
    STR = "str"
    UUID = "uuid"
    ADDR = "addr"
    ADDRVEC = "addrvec"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    UINT = "uint"
    SIZE = "size"
    SECS = "secs"
    MILLISECS = "millisecs"


class SortField(str, Enum):
    NAME = "name"
    TYPE = "type"
    LEVEL = "level"
    SERVICE = "service"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CatalogSource(str, Enum):
    BASELINE = "baseline"
    CLUSTER = "cluster"


class ScalarKind(str, Enum):
    ABSENT = "absent"
    NUMERIC = "numeric"
    TEXT = "text"


LEVEL_ALIASES: Dict[str, str] = {
    "developer": ConfigLevel.DEVELOPER.value,
}

TYPE_ALIASES: Dict[str, str] = {
    "string": ParamType.STR.value,
    "address": ParamType.ADDR.value,
    "address-vector": ParamType.ADDRVEC.value,
    "unsigned": ParamType.UINT.value,
    "seconds": ParamType.SECS.value,
    "milliseconds": ParamType.MILLISECS.value,
}

ORDER_ALIASES: Dict[str, str] = {
    "ascending": SortOrder.ASC.value,
    "descending": SortOrder.DESC.value,
}


class ScalarValue(BaseModel):
    """A default value as reported by the cluster: absent, a number, or text."""
    model_config = ConfigDict(frozen=True)

    kind: ScalarKind = ScalarKind.ABSENT
    value: Optional[Union[int, float, str]] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ScalarValue":
        if raw is None:
            return cls()
        # bool is an int subclass, keep it textual
        if isinstance(raw, bool):
            return cls(kind=ScalarKind.TEXT, value="true" if raw else "false")
        if isinstance(raw, (int, float)):
            return cls(kind=ScalarKind.NUMERIC, value=raw)
        if isinstance(raw, str):
            return cls(kind=ScalarKind.TEXT, value=raw)
        return cls()

    def to_raw(self) -> Optional[Union[int, float, str]]:
        return self.value

    @property
    def is_absent(self) -> bool:
        return self.kind == ScalarKind.ABSENT

    def __str__(self) -> str:
        if self.kind == ScalarKind.ABSENT:
            return ""
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


class ParameterInfo(BaseModel):
    """Help data for one tunable cluster parameter."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Parameter name, unique within a catalog")
    type: str = Field("", description="Value type tag, e.g. str, int, size")
    level: str = Field("", description="Safety level: basic, advanced, dev")
    description: str = Field("", alias="desc")
    long_description: str = Field("", alias="long_desc")
    default: ScalarValue = Field(default_factory=ScalarValue)
    daemon_default: ScalarValue = Field(default_factory=ScalarValue)
    tags: Tuple[str, ...] = ()
    services: Tuple[str, ...] = ()
    see_also: Tuple[str, ...] = ()
    enum_values: Tuple[str, ...] = ()
    min: Optional[float] = None
    max: Optional[float] = None
    can_update_at_runtime: bool = False
    flags: Tuple[str, ...] = ()

    @field_validator("default", "daemon_default", mode="before")
    @classmethod
    def _to_scalar(cls, value: Any) -> ScalarValue:
        if isinstance(value, ScalarValue):
            return value
        return ScalarValue.from_raw(value)

    @field_validator("min", "max", mode="before")
    @classmethod
    def _to_bound(cls, value: Any) -> Optional[float]:
        return parse_min_max(value)

    @field_validator("tags", "services", "see_also", "enum_values", "flags", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("type", "level", "description", "long_description", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_serializer("default", "daemon_default")
    def _scalar_to_raw(self, value: ScalarValue) -> Optional[Union[int, float, str]]:
        return value.to_raw()

    @property
    def primary_service(self) -> str:
        return self.services[0] if self.services else ""

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict using the cluster's field names."""
        return self.model_dump(mode="json", by_alias=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Query(BaseModel):
    """
    Search filters; every unset field leaves its axis unconstrained.
    Unknown filter names are rejected rather than ignored.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    service: Optional[str] = None
    level: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    full_text: Optional[str] = None
    sort: SortField = SortField.NAME
    order: SortOrder = SortOrder.ASC

    @field_validator("service", "name", "full_text", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("level", mode="before")
    @classmethod
    def _level_alias(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return LEVEL_ALIASES.get(value.lower(), value)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _type_alias(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return TYPE_ALIASES.get(value.lower(), value)
        return value

    @field_validator("sort", mode="before")
    @classmethod
    def _sort_or_default(cls, value: Any) -> SortField:
        value = _blank_to_none(value)
        try:
            return SortField(value.lower()) if isinstance(value, str) else SortField(value)
        except ValueError:
            return SortField.NAME

    @field_validator("order", mode="before")
    @classmethod
    def _order_or_default(cls, value: Any) -> SortOrder:
        value = _blank_to_none(value)
        if isinstance(value, str):
            value = ORDER_ALIASES.get(value.lower(), value.lower())
        try:
            return SortOrder(value)
        except ValueError:
            return SortOrder.ASC


class CatalogMetadata(BaseModel):
    version: int = Field(..., description="Snapshot version, incremented on every commit")
    source: CatalogSource = Field(..., description="Where the snapshot came from")
    last_updated: str = Field(..., description="Commit timestamp")
    checksum: str = Field(..., description="Checksum of the snapshot records")
    parameter_count: int = Field(..., description="Number of parameters in the snapshot")


class ReconcileReport(BaseModel):
    added: List[str] = Field(default_factory=list, description="Names fetched from the cluster")
    removed: List[str] = Field(default_factory=list, description="Names no longer reported by the cluster")
    failed: List[str] = Field(default_factory=list, description="New names whose detail fetch failed")
    total: int = Field(0, description="Parameters in the resulting catalog")
    duration_seconds: float = Field(0.0, description="Wall time of the cycle")

    @property
    def failed_count(self) -> int:
        return len(self.failed)
