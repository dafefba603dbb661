"""Queue administration data transfer objects.

Shapes returned by QueueService and MessageService: queue summaries, messages,
pages of messages and metrics snapshots. Nothing here is persisted.
"""

from datetime import datetime
from math import ceil

from pydantic import BaseModel, Field, computed_field


class QueueDTO(BaseModel):
    """Summary of a queue with its message counts."""

    name: str = Field(..., description="Name of the queue")
    total_messages: int = Field(0, description="Active messages (visible or leased)")
    in_flight_messages: int = Field(0, description="Active messages hidden by a visibility timeout or delay")
    archived_messages: int = Field(0, description="Messages in the archive table")


class MessageDTO(BaseModel):
    """A single message, active or archived."""

    msg_id: int = Field(..., description="Store-assigned message identifier")
    message: str | None = Field(None, description="Raw payload text, conventionally JSON")
    enqueued_at: datetime = Field(..., description="When the message was sent")
    vt: datetime | None = Field(None, description="When the message becomes visible; None if visible now")
    read_count: int = Field(0, description="Times the message was read without being deleted or archived")
    archived_at: datetime | None = Field(None, description="When the message was archived, archived messages only")

    @classmethod
    def from_row(cls, row: dict) -> "MessageDTO":
        """Build from a queue or archive table row (pgmq column names)."""
        return cls(
            msg_id=row["msg_id"],
            message=row.get("message"),
            enqueued_at=row["enqueued_at"],
            vt=row.get("vt"),
            read_count=row.get("read_ct") or 0,
            archived_at=row.get("archived_at"),
        )


class QueueDetailDTO(BaseModel):
    """One page of messages from a queue or its archive.

    total_count is the size of the whole collection, not of this page.
    """

    queue_name: str = Field(..., description="Name of the queue")
    messages: list[MessageDTO] = Field(default_factory=list)
    total_count: int = Field(0, description="Messages in the full collection")
    page_size: int = Field(..., description="Requested page size")
    current_page: int = Field(..., description="1-based page number")

    @computed_field
    @property
    def total_pages(self) -> int:
        """Number of pages needed for total_count at page_size."""
        return ceil(self.total_count / self.page_size) if self.page_size else 0


class QueueStatsDTO(BaseModel):
    """Metrics snapshot as reported by pgmq.metrics()."""

    queue_name: str = Field(..., description="Name of the queue")
    queue_length: int = Field(..., description="Messages currently in the queue")
    newest_msg_age_sec: int | None = Field(None, description="Age of the newest message; None if empty")
    oldest_msg_age_sec: int | None = Field(None, description="Age of the oldest message; None if empty")
    total_messages: int = Field(..., description="Messages ever sent to the queue")
    scrape_time: datetime = Field(..., description="When the metrics were collected")

    @classmethod
    def from_row(cls, row: dict) -> "QueueStatsDTO":
        """Build from a pgmq.metrics() row; newer extensions add columns that are ignored."""
        return cls(
            queue_name=row["queue_name"],
            queue_length=row["queue_length"],
            newest_msg_age_sec=row.get("newest_msg_age_sec"),
            oldest_msg_age_sec=row.get("oldest_msg_age_sec"),
            total_messages=row["total_messages"],
            scrape_time=row["scrape_time"],
        )
