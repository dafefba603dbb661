"""PostgreSQL-backed queue store using PGMQ.

Uses the async pgmq client (asyncpg underneath) for queue lifecycle and
per-message operations, and plain SQL on the same pool for listing and the reads the
client does not offer: non-leasing page reads, archive pages, counts and
metrics by column name.
"""

import logging
import os
from contextlib import contextmanager
from urllib.parse import unquote, urlparse

from asyncpg import exceptions as pg_exc
from pgmq.async_queue import PGMQueue
from pydantic import PostgresDsn

from pgmq_admin.errors import (
    QueueAdminError,
    QueueAlreadyExists,
    QueueNotFound,
    StoreQueryError,
    StoreUnavailable,
)
from pgmq_admin.persist_base import PersistBase
from pgmq_admin.validation import QueueName, is_valid_queue_name

CONNECTION_ERRORS = (
    OSError,
    pg_exc.InterfaceError,
    pg_exc.PostgresConnectionError,
    pg_exc.CannotConnectNowError,
    pg_exc.TooManyConnectionsError,
)

LIST_QUEUES_SQL = "SELECT queue_name FROM pgmq.list_queues() ORDER BY queue_name;"

# held until commit so concurrent creates of one name serialise on the existence check
CREATE_LOCK_SQL = "SELECT pg_advisory_xact_lock(hashtext($1));"

QUEUE_EXISTS_SQL = "SELECT EXISTS (SELECT 1 FROM pgmq.meta WHERE queue_name = $1);"

# pgmq's client serialises dicts itself; raw payload text is cast to jsonb by the server instead.
SEND_SQL = "SELECT * FROM pgmq.send(queue_name=>$1::text, msg=>$2::jsonb, delay=>$3::integer);"

METRICS_SQL = "SELECT * FROM pgmq.metrics($1);"

QUEUE_COUNTS_SQL = """
SELECT
    (SELECT count(*) FROM {queue_table}) AS total_messages,
    (SELECT count(*) FROM {queue_table} WHERE vt > clock_timestamp()) AS in_flight_messages,
    (SELECT count(*) FROM {archive_table}) AS archived_messages;
"""

ACTIVE_PAGE_SQL = """
SELECT msg_id,
       read_ct,
       enqueued_at,
       CASE WHEN vt > clock_timestamp() THEN vt END AS vt,
       message::text AS message
FROM {table}
ORDER BY msg_id
LIMIT $1 OFFSET $2;
"""

ARCHIVE_PAGE_SQL = """
SELECT msg_id,
       read_ct,
       enqueued_at,
       vt,
       archived_at,
       message::text AS message
FROM {table}
ORDER BY enqueued_at DESC, msg_id DESC
LIMIT $1 OFFSET $2;
"""

COUNT_SQL = "SELECT count(*) FROM {table};"


@contextmanager
def store_errors(operation: str, queue_name: QueueName | str | None = None, msg_id: int | None = None):
    """Translate asyncpg and socket failures raised in the block into QueueAdminError subclasses."""
    name = str(queue_name) if queue_name is not None else None
    context = {"operation": operation, "queue_name": name, "msg_id": msg_id}
    try:
        yield
    except QueueAdminError:
        raise
    except CONNECTION_ERRORS as exc:
        raise StoreUnavailable(f"Store unavailable during {operation}: {exc}", original=exc, **context) from exc
    except pg_exc.UndefinedTableError as exc:
        raise QueueNotFound(f"Queue {name} does not exist", original=exc, **context) from exc
    except (pg_exc.DuplicateTableError, pg_exc.UniqueViolationError) as exc:
        raise QueueAlreadyExists(f"Queue {name} already exists", original=exc, **context) from exc
    except pg_exc.PostgresError as exc:
        raise StoreQueryError(f"Store query failed during {operation}: {exc}", original=exc, **context) from exc


class PersistPGMQ(PersistBase):
    """Queue store implementation using PGMQ (PostgreSQL Message Queue).

    Connects via a Postgres DSN and delegates to the async PGMQueue client.
    The pool is created by open() and released by close(); every operation
    acquires exactly one connection and gives it back on all exit paths.
    """

    def __init__(self, dsn: PostgresDsn | str | None = None, pool_size: int = 10) -> None:
        """Prepare a client for the given DSN (falls back to PGMQ_DSN); no I/O until open()."""
        raw = dsn or os.getenv("PGMQ_DSN", None)
        parts = urlparse(str(raw))

        # noinspection PyTypeChecker
        self.queue = PGMQueue(
            host=parts.hostname,
            port=str(parts.port or 5432),
            database=parts.path.lstrip("/"),
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
            pool_size=pool_size,
        )
        self.logger = logging.getLogger(__name__)

    @property
    def pool(self):
        """Expose the client's asyncpg connection pool."""
        return self.queue.pool

    async def open(self) -> None:
        """Create the pool and make sure the pgmq extension is installed."""
        with store_errors("open"):
            await self.queue.init()
        self.logger.debug("PGMQ connection pool ready")

    async def close(self) -> None:
        """Close the connection pool; call when done to avoid shutdown warnings."""
        if hasattr(self.queue, "pool") and self.queue.pool:
            await self.queue.pool.close()

    async def list_queues(self) -> list[dict]:
        """List all queues with active, in-flight and archived counts."""
        with store_errors("list_queues"):
            async with self.pool.acquire() as conn:
                names = [row["queue_name"] for row in await conn.fetch(LIST_QUEUES_SQL)]
                summaries = []
                for name in names:
                    if not is_valid_queue_name(name):
                        self.logger.warning("Skipping counts for queue %s: name is not a safe identifier", name)
                        summaries.append({"name": name})
                        continue
                    queue_name = QueueName(name)
                    sql = QUEUE_COUNTS_SQL.format(
                        queue_table=queue_name.queue_table,
                        archive_table=queue_name.archive_table,
                    )
                    try:
                        row = await conn.fetchrow(sql)
                    except pg_exc.UndefinedTableError:
                        # dropped between listing and counting
                        self.logger.debug("Queue %s vanished while listing", name)
                        continue
                    summaries.append({"name": name, **dict(row)})
                return summaries

    async def create_queue(self, queue_name: QueueName) -> None:
        """Create a new queue; the lock, existence check and create share one transaction."""
        with store_errors("create_queue", queue_name):
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(CREATE_LOCK_SQL, queue_name.value)
                    if await conn.fetchval(QUEUE_EXISTS_SQL, queue_name.value):
                        raise QueueAlreadyExists(
                            f"Queue {queue_name} already exists",
                            operation="create_queue",
                            queue_name=queue_name.value,
                        )
                    await self.queue.create_queue(queue_name.value, conn=conn)

    async def destroy_queue(self, queue_name: QueueName) -> bool:
        """Drop the queue and its archive."""
        with store_errors("destroy_queue", queue_name):
            async with self.pool.acquire() as conn:
                return bool(await self.queue.drop_queue(queue_name.value, conn=conn))

    async def purge_queue(self, queue_name: QueueName) -> int:
        """Remove all messages from the specified queue."""
        with store_errors("purge_queue", queue_name):
            async with self.pool.acquire() as conn:
                return await self.queue.purge(queue_name.value, conn=conn)

    async def send(self, queue_name: QueueName, payload: str, delay: int = 0) -> int:
        """Send a raw payload; the server rejects text that is not valid JSON."""
        with store_errors("send", queue_name):
            async with self.pool.acquire() as conn:
                return await conn.fetchval(SEND_SQL, queue_name.value, payload, delay)

    async def delete(self, queue_name: QueueName, msg_id: int) -> bool:
        """Permanently delete the message with the given ID from the queue."""
        with store_errors("delete", queue_name, msg_id):
            async with self.pool.acquire() as conn:
                return bool(await self.queue.delete(queue_name.value, msg_id, conn=conn))

    async def archive(self, queue_name: QueueName, msg_id: int) -> bool:
        """Move the message from the main queue to the archive."""
        with store_errors("archive", queue_name, msg_id):
            async with self.pool.acquire() as conn:
                return bool(await self.queue.archive(queue_name.value, msg_id, conn=conn))

    async def read_page(self, queue_name: QueueName, limit: int, offset: int) -> tuple[list[dict], int]:
        """Select a page of active messages; unlike pgmq.read this never sets a visibility timeout."""
        return await self._page("read_page", ACTIVE_PAGE_SQL, queue_name, queue_name.queue_table, limit, offset)

    async def read_archive_page(self, queue_name: QueueName, limit: int, offset: int) -> tuple[list[dict], int]:
        """Select a page of archived messages, most recently enqueued first."""
        return await self._page(
            "read_archive_page", ARCHIVE_PAGE_SQL, queue_name, queue_name.archive_table, limit, offset
        )

    async def metrics(self, queue_name: QueueName) -> dict | None:
        """Get metrics for the specified queue."""
        with store_errors("metrics", queue_name):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(METRICS_SQL, queue_name.value)
                return dict(row) if row is not None else None

    async def _page(
        self, operation: str, page_sql: str, queue_name: QueueName, table: str, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        with store_errors(operation, queue_name):
            async with self.pool.acquire() as conn:
                async with conn.transaction(isolation="repeatable_read", readonly=True):
                    rows = await conn.fetch(page_sql.format(table=table), limit, offset)
                    total = await conn.fetchval(COUNT_SQL.format(table=table))
                return [dict(row) for row in rows], total
