"""Domain exception classes for catalog and import errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ResourceExistsError(DomainError):
    """Raised when attempting to create a resource that already exists."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    pass


class ScanError(DomainError):
    """Raised when a directory cannot be read during an import or refresh.

    Wraps the underlying ``OSError`` so callers can report the failing path
    without knowing about filesystem exception types.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read directory '{path}': {reason}")
