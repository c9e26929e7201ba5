"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class RemoteStoreError(Exception):
    """Raised by a remote store adapter when the backend fails a call.

    Store-agnostic — works for Supabase, a plain SQL database, etc.
    """

    def __init__(self, backend: str, operation: str, message: str):
        self.backend = backend
        self.operation = operation
        self.message = message
        super().__init__(f"[{backend}] {operation}: {message}")


class WriteRejectedError(Exception):
    """Raised when the remote store refuses an insert, update or delete.

    The write intent was not applied and the local mirror is unchanged;
    the caller has to retry explicitly.
    """

    def __init__(self, table: str, operation: str, reason: str):
        self.table = table
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} on '{table}' rejected: {reason}")


class LoadPartialFailure(Exception):
    """Describes a bulk load where one or more tables could not be read.

    Never raised to callers of ``LocalMirror.load()``; it is logged and kept
    on the mirror as a diagnostic.
    """

    def __init__(self, errors: dict[str, BaseException]):
        self.errors = errors
        tables = ", ".join(sorted(errors))
        super().__init__(f"Bulk load failed for: {tables}")

    @property
    def tables(self) -> list[str]:
        return sorted(self.errors)


class FeedDisconnectedError(Exception):
    """Passed to disconnect handlers when a change subscription drops."""

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Change feed for '{table}' disconnected: {reason}")
