"""Custom http_logging exceptions."""

class HttpLoggingError(Exception):
    """Base http_logging error."""
    pass


class ConfigurationError(HttpLoggingError):
    """Configuration-related error."""
    pass
