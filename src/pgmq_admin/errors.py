"""Error taxonomy for the queue administration services.

Store-level exceptions are translated into these classes by the persistence
layer; services and the CLI only ever see QueueAdminError subclasses.
"""

from __future__ import annotations


class QueueAdminError(Exception):
    """Base class for every failure surfaced by the admin services.

    Args:
        message: Human readable description.
        operation: Name of the service or store operation that failed.
        queue_name: Queue the operation targeted, if any.
        msg_id: Message the operation targeted, if any.
        original: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        queue_name: str | None = None,
        msg_id: int | None = None,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.queue_name = queue_name
        self.msg_id = msg_id
        self.original = original

    def to_dict(self) -> dict:
        """Return the error as a dict of structured log fields."""
        return {
            "error_type": type(self).__name__,
            "error": self.message,
            "operation": self.operation,
            "queue_name": self.queue_name,
            "msg_id": self.msg_id,
            "original": repr(self.original) if self.original else None,
        }


class ValidationError(QueueAdminError):
    """A queue name, page, page size or delay failed shape checks before any I/O."""


class NotFound(QueueAdminError):
    """The targeted queue or message does not exist."""


class QueueNotFound(NotFound):
    """The targeted queue does not exist."""


class QueueAlreadyExists(QueueAdminError):
    """A queue with the requested name is already registered."""


class StoreUnavailable(QueueAdminError):
    """The store could not be reached or the connection was lost."""


class StoreQueryError(QueueAdminError):
    """The store rejected or failed to execute a query."""
