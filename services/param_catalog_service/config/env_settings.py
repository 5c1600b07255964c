from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PARAM_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service settings
    SERVICE_NAME: str = "param_catalog_service"
    SERVICE_VERSION: str = "1.0.0"

    # Catalog settings
    BASELINE_PATH: Optional[str] = None  # bundled dataset when unset
    SKIP_CLUSTER_UPDATE: bool = False
    REFRESH_INTERVAL: float = 0.0  # seconds, 0 disables periodic refresh
    RECONCILE_TIMEOUT: Optional[float] = 300.0

    # Cluster command settings
    EXECUTOR: str = "ceph"  # "ceph" or "mock"
    CEPH_BINARY: str = "ceph"
    CEPH_CONF: Optional[str] = None
    CEPH_USER: Optional[str] = None  # e.g. client.admin
    CEPH_KEYRING: Optional[str] = None
    CEPH_MON_HOST: Optional[str] = None
    COMMAND_TIMEOUT: Optional[float] = 30.0
    MOCK_DATA_DIR: Optional[str] = None

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **overrides: Any) -> "CatalogSettings":
        """
        Build settings from a YAML mapping. Keys are matched case-insensitively;
        YAML values take precedence over the environment, ``overrides`` over both.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping, got {type(data).__name__}")
        values: Dict[str, Any] = {str(key).upper(): value for key, value in data.items()}
        values.update(overrides)
        return cls(**values)

    @property
    def ceph_base_args(self) -> List[str]:
        args: List[str] = []
        if self.CEPH_CONF:
            args += ["--conf", self.CEPH_CONF]
        if self.CEPH_USER:
            args += ["--name", self.CEPH_USER]
        if self.CEPH_KEYRING:
            args += ["--keyring", self.CEPH_KEYRING]
        if self.CEPH_MON_HOST:
            args += ["-m", self.CEPH_MON_HOST]
        if self.COMMAND_TIMEOUT:
            args += ["--connect-timeout", str(int(self.COMMAND_TIMEOUT))]
        return args

    @property
    def periodic_refresh_enabled(self) -> bool:
        return not self.SKIP_CLUSTER_UPDATE and self.REFRESH_INTERVAL > 0

