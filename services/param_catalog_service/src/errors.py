class CatalogError(Exception):
    """Base class for every failure raised by the parameter catalog."""


class BaselineLoadError(CatalogError):
    """The shipped baseline dataset could not be turned into a catalog."""


class ReconcileError(CatalogError):
    """A reconciliation cycle was aborted; the previous snapshot stays published."""


class CommandExecutionError(CatalogError):
    """A cluster command failed or returned an unusable reply."""

    def __init__(self, message: str, command: str = "", status: str = ""):
        super().__init__(message)
        self.command = command
        self.status = status
