"""Caller input checks: safe queue identifiers and pagination bounds.

QueueName is the only way a queue name reaches an SQL identifier position.
Names are checked against a strict allow-list and are always double-quoted
when rendered into relation names.
"""

import re
from dataclasses import dataclass

from pgmq_admin.errors import ValidationError

# pgmq rejects names of 48 characters or more (the table prefix must fit in NAMEDATALEN)
MAX_QUEUE_NAME_LENGTH = 47
QUEUE_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_-]{0,%d}$" % (MAX_QUEUE_NAME_LENGTH - 1))

PGMQ_SCHEMA = "pgmq"
QUEUE_TABLE_PREFIX = "q_"
ARCHIVE_TABLE_PREFIX = "a_"


def quote_identifier(identifier: str) -> str:
    """Double-quote an identifier, escaping embedded quotes."""
    return '"' + identifier.replace('"', '""') + '"'


@dataclass(frozen=True)
class QueueName:
    """A queue name that passed the allow-list."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not QUEUE_NAME_PATTERN.match(self.value):
            raise ValidationError(
                f"Invalid queue name {self.value!r}: use lowercase letters, digits, '_' or '-', "
                f"starting with a letter or '_', at most {MAX_QUEUE_NAME_LENGTH} characters",
                queue_name=self.value if isinstance(self.value, str) else None,
            )

    def __str__(self) -> str:
        return self.value

    @property
    def queue_table(self) -> str:
        """Fully qualified, quoted name of the active message table."""
        return f"{PGMQ_SCHEMA}.{quote_identifier(QUEUE_TABLE_PREFIX + self.value)}"

    @property
    def archive_table(self) -> str:
        """Fully qualified, quoted name of the archive table."""
        return f"{PGMQ_SCHEMA}.{quote_identifier(ARCHIVE_TABLE_PREFIX + self.value)}"


def is_valid_queue_name(name: str) -> bool:
    """Return True if the name would be accepted by QueueName."""
    return isinstance(name, str) and QUEUE_NAME_PATTERN.match(name) is not None


def validate_page(page: int, page_size: int, max_page_size: int) -> int:
    """Check pagination arguments and return the row offset for the page."""
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValidationError(f"Page must be an integer >= 1, got {page!r}")
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise ValidationError(f"Page size must be an integer >= 1, got {page_size!r}")
    if page_size > max_page_size:
        raise ValidationError(f"Page size must not exceed {max_page_size}, got {page_size}")
    return (page - 1) * page_size


def validate_delay(delay_seconds: int) -> int:
    """Check a send delay; returns it unchanged."""
    if isinstance(delay_seconds, bool) or not isinstance(delay_seconds, int) or delay_seconds < 0:
        raise ValidationError(f"Delay must be an integer >= 0 seconds, got {delay_seconds!r}")
    return delay_seconds
