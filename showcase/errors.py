"""Domain errors shared by the persistence layer, services and routers."""


class ShowcaseError(Exception):
    """Base class for all service errors."""


class ValidationError(ShowcaseError):
    """Bad input. Not retried; surfaced to the caller as a client error."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(ShowcaseError):
    """No record with the given id in either backend."""

    def __init__(self, collection: str, record_id: object) -> None:
        super().__init__(f"{collection}/{record_id} not found")
        self.collection = collection
        self.record_id = record_id


class StoreUnavailable(ShowcaseError):
    """Remote store unreachable, timed out or rejected the query.

    Callers fall back to the local cache; finer-grained causes are only kept
    as ``__cause__`` for logging.
    """

    def __init__(self, operation: str, collection: str, reason: str = "") -> None:
        super().__init__(f"{operation} on {collection} unavailable: {reason}".rstrip(": "))
        self.operation = operation
        self.collection = collection
        self.reason = reason


class CorruptState(ShowcaseError):
    """Local cache file exists but cannot be parsed."""
