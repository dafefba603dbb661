"""Delete or archive a single message."""

import asyncio

import click

from pgmq_admin.cli.common import NotificationError, get_dsn, load_settings, show_success
from pgmq_admin.errors import QueueAdminError
from pgmq_admin.message_service import MessageService
from pgmq_admin.persist_pgmq import PersistPGMQ as QueueRepository

ACTIONS = ("delete", "archive")


async def run_action(
    queue_repo: QueueRepository, action: str, queue_name: str, msg_id: int, timeout: float | None
) -> bool:
    """Delete or archive the message; raises NotificationError when the service reports False."""
    messages = MessageService(queue_repo, timeout=timeout)
    try:
        await queue_repo.open()
        if action == "delete":
            done = await messages.delete_message(queue_name, msg_id)
        else:
            done = await messages.archive_message(queue_name, msg_id)
    except QueueAdminError as err:
        raise NotificationError(f"Message {action} failed: {err}") from err
    finally:
        await queue_repo.close()
    if not done:
        raise NotificationError(f"Message {msg_id} could not be {action}d from {queue_name}")
    show_success(f"Message {msg_id} {action}d from {queue_name}")
    return done


@click.command()
@click.option("--queue-name", type=str, required=True, help="The name of the queue holding the message")
@click.option("--msg-id", type=int, required=True, help="The ID of the message")
@click.option("--action", type=click.Choice(ACTIONS), required=True, help="delete or archive")
@click.option("--dsn", type=str, required=False, help="The DSN of the database to use")
@click.option("--verbose", is_flag=True, default=False, help="Configure logging from LOG_LEVEL and LOG_JSON")
def main(queue_name: str, msg_id: int, action: str, dsn: str, verbose: bool) -> None:
    """Delete a message permanently or move it to the queue's archive."""
    dsn = get_dsn(dsn)
    settings = load_settings(verbose)
    queue_repo = QueueRepository(dsn=dsn, pool_size=settings.pool_size)
    asyncio.run(run_action(queue_repo, action, queue_name, msg_id, settings.operation_timeout))


if __name__ == "__main__":
    main()
