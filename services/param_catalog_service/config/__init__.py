from .env_settings import CatalogSettings

__all__ = ["CatalogSettings"]
