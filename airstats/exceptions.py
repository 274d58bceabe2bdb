"""Custom exceptions for the airstats package."""

class AirstatsError(Exception):
    """Base exception for airstats errors."""
    pass

class RecordNotFoundError(AirstatsError):
    """Raised when a requested record, category or content hub is not found."""
    pass

class InvalidParameterError(AirstatsError):
    """Raised when invalid parameters are provided, e.g. a malformed numeric id."""
    pass

class UpstreamError(AirstatsError):
    """Raised when the records table service fails or returns an unusable response."""
    pass

class ConfigurationError(AirstatsError):
    """Raised when a table needed for an operation is not configured."""
    pass
