"""Enqueue a message to a queue.

CLI that creates the queue if needed and sends a JSON message to it,
optionally delayed.
"""

import asyncio
import json

import click

from pgmq_admin.cli.common import NotificationError, get_dsn, load_settings, show_success
from pgmq_admin.errors import QueueAdminError
from pgmq_admin.message_service import MessageService
from pgmq_admin.persist_pgmq import PersistPGMQ as QueueRepository
from pgmq_admin.queue_service import QueueService


async def queue_exists(queues: QueueService, queue_name: str) -> bool:
    """Return True if the given queue exists in the store."""
    return any(q.name == queue_name for q in await queues.list_queues())


async def enqueue(queue_repo: QueueRepository, queue_name: str, message: str, delay: int, timeout: float | None) -> int:
    """Create the queue if missing, then send the message. Returns the message ID."""
    queues = QueueService(queue_repo, timeout=timeout)
    messages = MessageService(queue_repo, timeout=timeout)
    try:
        await queue_repo.open()
        if not await queue_exists(queues, queue_name):
            try:
                await queues.create_queue(queue_name)
            except QueueAdminError as e:
                raise NotificationError(f"Error creating queue: {e}") from e
            show_success(f"Queue {queue_name} created")

        message_id = await messages.send_message(queue_name, message, delay_seconds=delay)
        show_success(f"Message enqueued with ID: {message_id}")
        return message_id
    except QueueAdminError as e:
        raise NotificationError(f"Error: {e}") from e
    finally:
        await queue_repo.close()


@click.command()
@click.option(
    "--queue-name",
    type=str,
    required=True,
    help="The name of the queue to enqueue the message to",
)
@click.option("--message", type=str, required=True, help="The message to enqueue (JSON)")
@click.option("--delay", type=click.IntRange(min=0), default=0, help="Seconds before the message becomes visible")
@click.option("--dsn", type=str, required=False, help="The DSN of the database to use")
@click.option("--verbose", is_flag=True, default=False, help="Configure logging from LOG_LEVEL and LOG_JSON")
def main(queue_name: str, message: str, delay: int, dsn: str, verbose: bool) -> None:
    """Enqueue a JSON message to the specified queue; creates the queue if it does not exist."""
    click.echo(f"queue-name: {queue_name}")
    click.echo(f"message: {message}")
    dsn = get_dsn(dsn)

    try:
        json.loads(message)
    except json.JSONDecodeError as err:
        raise click.ClickException(f"Invalid JSON: {message}") from err

    settings = load_settings(verbose)
    queue_repo = QueueRepository(dsn=dsn, pool_size=settings.pool_size)
    asyncio.run(enqueue(queue_repo, queue_name, message, delay, settings.operation_timeout))


if __name__ == "__main__":
    """Entry point for the enqueue CLI."""
    main()
