"""Administer queues.

CLI that lists queues, creates, destroys or purges a queue, prints its metrics,
and pages through its active or archived messages.
"""

import asyncio

import click

from pgmq_admin.cli.common import NotificationError, get_dsn, load_settings, show_info, show_success
from pgmq_admin.errors import QueueAdminError
from pgmq_admin.message_service import MessageService
from pgmq_admin.persist_pgmq import PersistPGMQ as QueueRepository
from pgmq_admin.queue_model_dto import QueueDetailDTO
from pgmq_admin.queue_service import QueueService

ACTIONS = ("list", "create", "destroy", "purge", "status", "detail", "archived")


def print_page(detail: QueueDetailDTO, title: str) -> None:
    """Echo one page of messages followed by the paging footer."""
    show_info(f"{title} for {detail.queue_name}")
    for message in detail.messages:
        line = f"#{message.msg_id} read={message.read_count} enqueued={message.enqueued_at.isoformat()}"
        if message.vt is not None:
            line += f" vt={message.vt.isoformat()}"
        if message.archived_at is not None:
            line += f" archived={message.archived_at.isoformat()}"
        show_info(f"{line} {message.message}")
    show_info(
        f"Page {detail.current_page} of {max(detail.total_pages, 1)} ({detail.total_count} messages)"
    )


async def run_action(
    queue_repo: QueueRepository,
    action: str,
    queue_name: str | None,
    page: int,
    page_size: int,
    max_page_size: int,
    timeout: float | None,
):
    """Open the store, perform one action, always close the store."""
    queues = QueueService(queue_repo, max_page_size=max_page_size, timeout=timeout)
    messages = MessageService(queue_repo, max_page_size=max_page_size, timeout=timeout)
    try:
        await queue_repo.open()
        match action:
            case "list":
                summaries = await queues.list_queues()
                for q in summaries:
                    show_info(
                        f"{q.name}\ttotal={q.total_messages}\tin_flight={q.in_flight_messages}"
                        f"\tarchived={q.archived_messages}"
                    )
                show_info(f"{len(summaries)} queues")
                return summaries
            case "create":
                await queues.create_queue(queue_name)
                show_success(f"Queue {queue_name} created")
                return None
            case "destroy":
                if not await queues.delete_queue(queue_name):
                    raise NotificationError(f"Queue {queue_name} could not be destroyed")
                show_success(f"Queue {queue_name} destroyed")
                return True
            case "purge":
                purged_count = await queues.purge_queue(queue_name)
                show_success(f"Queue {queue_name} purged ({purged_count} messages)")
                return purged_count
            case "status":
                stats = await queues.get_queue_stats(queue_name)
                if stats is None:
                    raise NotificationError(f"Queue {queue_name} does not exist")
                for field, value in stats.model_dump().items():
                    show_info(f"{field}: {value}")
                return stats
            case "detail":
                detail = await queues.get_queue_detail(queue_name, page, page_size)
                print_page(detail, "Messages")
                return detail
            case "archived":
                detail = await messages.get_archived_messages(queue_name, page, page_size)
                print_page(detail, "Archived messages")
                return detail
            case _:
                raise click.ClickException(
                    f"Invalid action: {action}. Valid actions are: {', '.join(ACTIONS)}"
                )
    except QueueAdminError as err:
        raise NotificationError(f"Queue {action} failed: {err}") from err
    finally:
        await queue_repo.close()


@click.command()
@click.option("--queue-name", type=str, required=False, help="The name of the queue (not needed for list)")
@click.option("--dsn", type=str, required=False, help="The DSN of the database to use")
@click.option("--action", type=str, required=True, help=f"The action to perform: {', '.join(ACTIONS)}")
@click.option("--page", type=int, default=1, help="Page number for detail and archived, starting at 1")
@click.option("--page-size", type=int, default=None, help="Messages per page for detail and archived")
@click.option("--timeout", type=float, default=None, help="Seconds before the store call is abandoned")
@click.option("--verbose", is_flag=True, default=False, help="Configure logging from LOG_LEVEL and LOG_JSON")
def main(**kwargs) -> None:
    """Administer a queue: list, create, destroy, purge, status, detail, archived."""
    action = kwargs["action"]
    queue_name = kwargs["queue_name"]
    click.echo(f"Queue {queue_name or '*'} {action}")

    if action in ACTIONS and action != "list" and not queue_name:
        raise click.ClickException(f"--queue-name is required for action {action}")

    dsn = get_dsn(kwargs["dsn"])
    settings = load_settings(kwargs["verbose"])
    queue_repo = QueueRepository(dsn=dsn, pool_size=settings.pool_size)
    asyncio.run(
        run_action(
            queue_repo,
            action,
            queue_name,
            kwargs["page"],
            kwargs["page_size"] or settings.default_page_size,
            settings.max_page_size,
            kwargs["timeout"] or settings.operation_timeout,
        )
    )


if __name__ == "__main__":
    main()
