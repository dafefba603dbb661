"""Abstract base for queue store backends.

Defines the asynchronous interface the admin services use: queue lifecycle,
send/delete/archive, paged reads of the active and archived collections, and
metrics. Implementations (e.g. PersistPGMQ) provide the concrete storage and
translate their own failures into pgmq_admin.errors exceptions.
"""

from abc import ABC, abstractmethod

from pgmq_admin.validation import QueueName


class PersistBase(ABC):
    """Abstract base class for queue persistence.

    Every method performs one unit of work on one connection. Rows are
    returned as plain dicts keyed by column name.
    """

    @abstractmethod
    async def open(self) -> None:
        """Create the connection pool."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the connection pool."""
        pass

    @abstractmethod
    async def list_queues(self) -> list[dict]:
        """Return one dict per queue: name, total_messages, in_flight_messages, archived_messages."""
        pass

    @abstractmethod
    async def create_queue(self, queue_name: QueueName) -> None:
        """Create a new queue. Raises QueueAlreadyExists if the name is taken."""
        pass

    @abstractmethod
    async def destroy_queue(self, queue_name: QueueName) -> bool:
        """Drop the queue with its active and archived messages. Returns False if nothing was dropped."""
        pass

    @abstractmethod
    async def purge_queue(self, queue_name: QueueName) -> int:
        """Remove all active messages from the queue. Returns the number purged."""
        pass

    @abstractmethod
    async def send(self, queue_name: QueueName, payload: str, delay: int = 0) -> int:
        """Append a raw payload to the queue, visible after delay seconds. Returns the message ID."""
        pass

    @abstractmethod
    async def delete(self, queue_name: QueueName, msg_id: int) -> bool:
        """Permanently delete the message. Returns False if no such message."""
        pass

    @abstractmethod
    async def archive(self, queue_name: QueueName, msg_id: int) -> bool:
        """Move the message from the queue to its archive. Returns False if no such message."""
        pass

    @abstractmethod
    async def read_page(self, queue_name: QueueName, limit: int, offset: int) -> tuple[list[dict], int]:
        """Return a page of active messages without leasing them, plus the total active count."""
        pass

    @abstractmethod
    async def read_archive_page(self, queue_name: QueueName, limit: int, offset: int) -> tuple[list[dict], int]:
        """Return a page of archived messages, newest first, plus the total archived count."""
        pass

    @abstractmethod
    async def metrics(self, queue_name: QueueName) -> dict | None:
        """Return the metrics row for the queue, or None if the store returned no row."""
        pass
