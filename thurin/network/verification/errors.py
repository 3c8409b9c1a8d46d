"""Wire protocol error types."""


class ProtocolError(Exception):
    """Base error for gateway wire protocol issues."""


class SchemaError(ProtocolError):
    """Raised when a message fails schema validation."""


class SizeLimitError(ProtocolError):
    """Raised when a message exceeds configured size limits."""


class AppMismatch(ProtocolError):
    """Raised when a request names an app other than the one the listener serves."""
