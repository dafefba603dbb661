"""Per-message operations: send, delete, archive, and archive paging."""

from pgmq_admin.errors import QueueAdminError, ValidationError
from pgmq_admin.logging_config import log_fields
from pgmq_admin.queue_model_dto import MessageDTO, QueueDetailDTO
from pgmq_admin.service_base import ServiceBase
from pgmq_admin.validation import QueueName, validate_delay, validate_page


def _check_msg_id(msg_id: int) -> int:
    if isinstance(msg_id, bool) or not isinstance(msg_id, int):
        raise ValidationError(f"Message ID must be an integer, got {msg_id!r}")
    return msg_id


class MessageService(ServiceBase):
    """Message operations on a named queue.

    Sending and archive reads fail loud. Deleting and archiving fail quiet:
    they return False when the message is gone or the store fails.
    """

    async def send_message(
        self, queue_name: str, payload: str, delay_seconds: int = 0, timeout: float | None = None
    ) -> int:
        """Send a payload (JSON text) to the queue, visible after delay_seconds. Returns the new message ID."""
        self.logger.debug("Sending message to %s", queue_name, extra=log_fields("send_message", queue_name))
        try:
            name = QueueName(queue_name)
            delay = validate_delay(delay_seconds)
            if not isinstance(payload, str):
                raise ValidationError(f"Payload must be text, got {type(payload).__name__}", queue_name=queue_name)
            msg_id = await self._run(self.store.send(name, payload, delay), timeout)
        except Exception as exc:
            self.logger.error(
                "Failed to send message to %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("send_message", queue_name, error=exc),
            )
            raise
        self.logger.info(
            "Message %s sent to %s", msg_id, queue_name, extra=log_fields("send_message", queue_name, msg_id)
        )
        return msg_id

    async def delete_message(self, queue_name: str, msg_id: int, timeout: float | None = None) -> bool:
        """Permanently delete a message. False if it did not exist or the store failed."""
        return await self._remove("delete_message", self.store.delete, queue_name, msg_id, timeout)

    async def archive_message(self, queue_name: str, msg_id: int, timeout: float | None = None) -> bool:
        """Move a message to the archive. False if it did not exist or the store failed."""
        return await self._remove("archive_message", self.store.archive, queue_name, msg_id, timeout)

    async def get_archived_messages(
        self, queue_name: str, page: int = 1, page_size: int = 20, timeout: float | None = None
    ) -> QueueDetailDTO:
        """Return one page of archived messages, most recently enqueued first.

        total_count is the number of archived messages for the whole queue,
        counted in the same transaction as the page.
        """
        self.logger.debug(
            "Reading archive page %s of %s", page, queue_name, extra=log_fields("get_archived_messages", queue_name)
        )
        try:
            name = QueueName(queue_name)
            offset = validate_page(page, page_size, self.max_page_size)
            rows, total = await self._run(self.store.read_archive_page(name, page_size, offset), timeout)
        except Exception as exc:
            self.logger.error(
                "Failed to get archived messages for %s",
                queue_name,
                exc_info=exc,
                extra=log_fields("get_archived_messages", queue_name, error=exc),
            )
            raise
        return QueueDetailDTO(
            queue_name=name.value,
            messages=[MessageDTO.from_row(row) for row in rows],
            total_count=total,
            page_size=page_size,
            current_page=page,
        )

    async def _remove(self, operation: str, store_call, queue_name: str, msg_id: int, timeout: float | None) -> bool:
        verb = "delete" if operation == "delete_message" else "archive"
        self.logger.debug(
            "Attempting to %s message %s from %s", verb, msg_id, queue_name, extra=log_fields(operation, queue_name, msg_id)
        )
        try:
            name = QueueName(queue_name)
            done = await self._run(store_call(name, _check_msg_id(msg_id)), timeout)
        except QueueAdminError as exc:
            self.logger.error(
                "Failed to %s message %s from %s",
                verb,
                msg_id,
                queue_name,
                exc_info=exc,
                extra=log_fields(operation, queue_name, msg_id, error=exc),
            )
            return False
        if not done:
            self.logger.warning(
                "Message %s not found in %s", msg_id, queue_name, extra=log_fields(operation, queue_name, msg_id)
            )
            return False
        self.logger.info(
            "Message %s %sd from %s", msg_id, verb, queue_name, extra=log_fields(operation, queue_name, msg_id)
        )
        return True
