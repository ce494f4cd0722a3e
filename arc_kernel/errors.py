"""Boundary errors. The core planner and reconciler never raise these."""

from typing import List


class KernelError(Exception):
    """Base class for ARC Kernel errors."""
    pass


class NotFoundError(KernelError):
    """Raised when a boundary operation names an id that does not exist."""
    pass


class InvalidNameError(KernelError):
    """Raised when a list or group name breaks the naming rules."""
    pass


class ReferenceInUseError(KernelError):
    """Raised when deleting a list or group that is still referenced."""

    def __init__(self, message: str, referenced_by: List[str]):
        super().__init__(message)
        self.referenced_by = referenced_by


class CatalogError(KernelError):
    """Raised when static venture data is malformed."""
    pass
