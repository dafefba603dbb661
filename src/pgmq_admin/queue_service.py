"""Queue-level lifecycle and reporting.

List, create, delete and purge queues, page through a queue's active messages
without consuming them, and read its metrics. Listing, creating, purging and
reads fail loud (errors propagate after logging); deleting a queue fails quiet
and reports False.
"""

from pgmq_admin.errors import QueueAdminError, QueueNotFound
from pgmq_admin.logging_config import log_fields
from pgmq_admin.queue_model_dto import MessageDTO, QueueDetailDTO, QueueDTO, QueueStatsDTO
from pgmq_admin.service_base import ServiceBase
from pgmq_admin.validation import QueueName, validate_page


class QueueService(ServiceBase):
    """Queue lifecycle and introspection over a PersistBase store."""

    async def list_queues(self, timeout: float | None = None) -> list[QueueDTO]:
        """Return every queue with its active, in-flight and archived counts."""
        self.logger.debug("Listing queues", extra=log_fields("list_queues"))
        try:
            rows = await self._run(self.store.list_queues(), timeout)
        except Exception as exc:
            self.logger.error("Failed to list queues", exc_info=exc, extra=log_fields("list_queues", error=exc))
            raise
        return [QueueDTO(**row) for row in rows]

    async def create_queue(self, queue_name: str, timeout: float | None = None) -> None:
        """Create an empty queue.

        Raises:
            ValidationError: the name is not a safe queue identifier.
            QueueAlreadyExists: a queue with this name exists.
            StoreQueryError, StoreUnavailable: any other store failure.
        """
        self.logger.debug("Creating queue %s", queue_name, extra=log_fields("create_queue", queue_name))
        try:
            name = QueueName(queue_name)
            await self._run(self.store.create_queue(name), timeout)
        except Exception as exc:
            self.logger.error(
                "Failed to create queue %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("create_queue", queue_name, error=exc),
            )
            raise
        self.logger.info("Queue %s created", queue_name, extra=log_fields("create_queue", queue_name))

    async def delete_queue(self, queue_name: str, timeout: float | None = None) -> bool:
        """Drop the queue with all its active and archived messages.

        Returns True when the queue was dropped. Any failure, including a
        missing queue or an invalid name, is logged and reported as False.
        """
        self.logger.debug("Deleting queue %s", queue_name, extra=log_fields("delete_queue", queue_name))
        try:
            name = QueueName(queue_name)
            dropped = await self._run(self.store.destroy_queue(name), timeout)
        except QueueAdminError as exc:
            self.logger.error(
                "Failed to delete queue %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("delete_queue", queue_name, error=exc),
            )
            return False
        if not dropped:
            self.logger.warning(
                "Queue %s was not deleted, it does not exist", queue_name, extra=log_fields("delete_queue", queue_name)
            )
            return False
        self.logger.info("Queue %s deleted", queue_name, extra=log_fields("delete_queue", queue_name))
        return True

    async def purge_queue(self, queue_name: str, timeout: float | None = None) -> int:
        """Remove all active messages from the queue. Returns the number purged."""
        self.logger.debug("Purging queue %s", queue_name, extra=log_fields("purge_queue", queue_name))
        try:
            name = QueueName(queue_name)
            purged = await self._run(self.store.purge_queue(name), timeout)
        except Exception as exc:
            self.logger.error(
                "Failed to purge queue %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("purge_queue", queue_name, error=exc),
            )
            raise
        self.logger.info("Queue %s purged, %d messages removed", queue_name, purged, extra=log_fields("purge_queue", queue_name))
        return purged

    async def get_queue_detail(
        self, queue_name: str, page: int = 1, page_size: int = 20, timeout: float | None = None
    ) -> QueueDetailDTO:
        """Return one page of active messages, ordered by message ID.

        This is a peek: messages are selected straight from the queue table,
        so no visibility timeout is set and read counts do not change.
        total_count is the number of active messages in the whole queue.
        """
        self.logger.debug(
            "Reading page %s of queue %s", page, queue_name, extra=log_fields("get_queue_detail", queue_name)
        )
        try:
            name = QueueName(queue_name)
            offset = validate_page(page, page_size, self.max_page_size)
            rows, total = await self._run(self.store.read_page(name, page_size, offset), timeout)
        except Exception as exc:
            self.logger.error(
                "Failed to get queue detail for %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("get_queue_detail", queue_name, error=exc),
            )
            raise
        return QueueDetailDTO(
            queue_name=name.value,
            messages=[MessageDTO.from_row(row) for row in rows],
            total_count=total,
            page_size=page_size,
            current_page=page,
        )

    async def get_queue_stats(self, queue_name: str, timeout: float | None = None) -> QueueStatsDTO | None:
        """Return the queue's metrics, or None if the queue does not exist."""
        self.logger.debug("Reading stats for %s", queue_name, extra=log_fields("get_queue_stats", queue_name))
        try:
            name = QueueName(queue_name)
            row = await self._run(self.store.metrics(name), timeout)
        except QueueNotFound:
            self.logger.info("No stats for %s, queue does not exist", queue_name, extra=log_fields("get_queue_stats", queue_name))
            return None
        except Exception as exc:
            self.logger.error(
                "Failed to get queue stats for %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("get_queue_stats", queue_name, error=exc),
            )
            raise
        if row is None:
            return None
        return QueueStatsDTO.from_row(row)
