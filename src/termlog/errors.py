"""Exception hierarchy shared by the store, service, config loader and exporter."""


class LogError(Exception):
    """Base exception for termlog operations."""
    pass


class ValidationError(LogError):
    """Raised when a request is missing a required field or has a bad value."""
    pass


class NotFoundError(LogError):
    """Raised when the referenced log id does not exist."""
    pass


class PersistenceError(LogError):
    """Raised when the underlying store fails during an operation."""
    pass


class ExportError(LogError):
    """Raised when an export cannot fetch the logs or write the report."""
    pass


class ConfigError(LogError):
    """Raised when a configuration file cannot be loaded."""
    pass
