"""Tests for QueueService against a mocked store."""

import asyncio
from datetime import datetime, timezone
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, MagicMock

from pgmq_admin.errors import (
    QueueAlreadyExists,
    QueueNotFound,
    StoreQueryError,
    StoreUnavailable,
    ValidationError,
)
from pgmq_admin.persist_base import PersistBase
from pgmq_admin.queue_service import QueueService
from pgmq_admin.validation import QueueName

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def make_service(**kwargs):
    store = AsyncMock(spec=PersistBase)
    logger = MagicMock()
    return QueueService(store, logger=logger, **kwargs), store, logger


class TestListQueues(IsolatedAsyncioTestCase):
    async def test_maps_rows_to_dtos(self):
        service, store, _ = make_service()
        store.list_queues.return_value = [
            {"name": "orders", "total_messages": 3, "in_flight_messages": 1, "archived_messages": 7},
            {"name": "legacy"},
        ]

        queues = await service.list_queues()

        self.assertEqual([q.name for q in queues], ["orders", "legacy"])
        self.assertEqual(queues[0].total_messages, 3)
        self.assertEqual(queues[0].in_flight_messages, 1)
        self.assertEqual(queues[0].archived_messages, 7)
        self.assertEqual(queues[1].total_messages, 0)

    async def test_store_failure_is_logged_and_raised(self):
        service, store, logger = make_service()
        store.list_queues.side_effect = StoreUnavailable("down", operation="list_queues")

        with self.assertRaises(StoreUnavailable):
            await service.list_queues()
        logger.error.assert_called_once()
        self.assertEqual(logger.error.call_args.kwargs["extra"]["operation"], "list_queues")


class TestCreateQueue(IsolatedAsyncioTestCase):
    async def test_creates_with_safe_name(self):
        service, store, logger = make_service()

        await service.create_queue("orders")

        store.create_queue.assert_awaited_once_with(QueueName("orders"))
        logger.info.assert_called_once()

    async def test_already_exists_propagates(self):
        service, store, logger = make_service()
        store.create_queue.side_effect = QueueAlreadyExists("taken", queue_name="orders")

        with self.assertRaises(QueueAlreadyExists):
            await service.create_queue("orders")
        logger.error.assert_called_once()

    async def test_invalid_name_never_reaches_store(self):
        service, store, _ = make_service()

        with self.assertRaises(ValidationError):
            await service.create_queue("Bad Name")
        store.create_queue.assert_not_called()


class TestDeleteQueue(IsolatedAsyncioTestCase):
    async def test_returns_true_when_dropped(self):
        service, store, _ = make_service()
        store.destroy_queue.return_value = True

        self.assertTrue(await service.delete_queue("orders"))
        store.destroy_queue.assert_awaited_once_with(QueueName("orders"))

    async def test_returns_false_when_store_drops_nothing(self):
        service, store, logger = make_service()
        store.destroy_queue.return_value = False

        self.assertFalse(await service.delete_queue("orders"))
        logger.warning.assert_called_once()

    async def test_returns_false_on_store_error(self):
        service, store, logger = make_service()
        store.destroy_queue.side_effect = StoreQueryError("boom", queue_name="orders")

        self.assertFalse(await service.delete_queue("orders"))
        logger.error.assert_called_once()
        self.assertEqual(logger.error.call_args.kwargs["extra"]["queue_name"], "orders")

    async def test_returns_false_on_invalid_name(self):
        service, store, _ = make_service()

        self.assertFalse(await service.delete_queue("DROP TABLE"))
        store.destroy_queue.assert_not_called()

    async def test_cancellation_is_not_swallowed(self):
        service, store, _ = make_service()
        store.destroy_queue.side_effect = asyncio.CancelledError()

        with self.assertRaises(asyncio.CancelledError):
            await service.delete_queue("orders")


class TestPurgeQueue(IsolatedAsyncioTestCase):
    async def test_returns_purged_count(self):
        service, store, _ = make_service()
        store.purge_queue.return_value = 42

        self.assertEqual(await service.purge_queue("orders"), 42)


class TestGetQueueDetail(IsolatedAsyncioTestCase):
    async def test_page_and_total_count(self):
        service, store, _ = make_service()
        store.read_page.return_value = (
            [{"msg_id": 2, "read_ct": 0, "enqueued_at": NOW, "vt": None, "message": '{"order_id": 1002}'}],
            2,
        )

        detail = await service.get_queue_detail("orders", page=2, page_size=1)

        store.read_page.assert_awaited_once_with(QueueName("orders"), 1, 1)
        self.assertEqual(detail.queue_name, "orders")
        self.assertEqual(len(detail.messages), 1)
        self.assertEqual(detail.messages[0].msg_id, 2)
        self.assertEqual(detail.messages[0].message, '{"order_id": 1002}')
        self.assertEqual(detail.total_count, 2)
        self.assertEqual(detail.total_pages, 2)
        self.assertEqual(detail.current_page, 2)
        self.assertEqual(detail.page_size, 1)

    async def test_rejects_bad_pagination_before_io(self):
        service, store, _ = make_service()

        with self.assertRaises(ValidationError):
            await service.get_queue_detail("orders", page=0, page_size=10)
        with self.assertRaises(ValidationError):
            await service.get_queue_detail("orders", page=1, page_size=0)
        store.read_page.assert_not_called()

    async def test_respects_max_page_size(self):
        service, store, _ = make_service(max_page_size=50)

        with self.assertRaises(ValidationError):
            await service.get_queue_detail("orders", page=1, page_size=51)

    async def test_missing_queue_propagates(self):
        service, store, _ = make_service()
        store.read_page.side_effect = QueueNotFound("missing", queue_name="orders")

        with self.assertRaises(QueueNotFound):
            await service.get_queue_detail("orders")

    async def test_timeout_stops_waiting(self):
        service, store, _ = make_service()

        async def slow(*args):
            await asyncio.sleep(10)

        store.read_page.side_effect = slow

        with self.assertRaises(asyncio.TimeoutError):
            await service.get_queue_detail("orders", timeout=0.01)


class TestGetQueueStats(IsolatedAsyncioTestCase):
    async def test_maps_metrics_row(self):
        service, store, _ = make_service()
        store.metrics.return_value = {
            "queue_name": "orders",
            "queue_length": 2,
            "newest_msg_age_sec": 1,
            "oldest_msg_age_sec": 10,
            "total_messages": 5,
            "scrape_time": NOW,
            "queue_visible_length": 2,
        }

        stats = await service.get_queue_stats("orders")

        self.assertEqual(stats.queue_name, "orders")
        self.assertEqual(stats.queue_length, 2)
        self.assertEqual(stats.oldest_msg_age_sec, 10)
        self.assertEqual(stats.total_messages, 5)

    async def test_empty_queue_has_no_ages(self):
        service, store, _ = make_service()
        store.metrics.return_value = {
            "queue_name": "orders",
            "queue_length": 0,
            "newest_msg_age_sec": None,
            "oldest_msg_age_sec": None,
            "total_messages": 0,
            "scrape_time": NOW,
        }

        stats = await service.get_queue_stats("orders")

        self.assertIsNotNone(stats)
        self.assertIsNone(stats.newest_msg_age_sec)
        self.assertIsNone(stats.oldest_msg_age_sec)

    async def test_missing_queue_returns_none(self):
        service, store, logger = make_service()
        store.metrics.side_effect = QueueNotFound("missing", queue_name="orders")

        self.assertIsNone(await service.get_queue_stats("orders"))
        logger.error.assert_not_called()

    async def test_no_row_returns_none(self):
        service, store, _ = make_service()
        store.metrics.return_value = None

        self.assertIsNone(await service.get_queue_stats("orders"))

    async def test_store_failure_propagates(self):
        service, store, _ = make_service()
        store.metrics.side_effect = StoreQueryError("boom")

        with self.assertRaises(StoreQueryError):
            await service.get_queue_stats("orders")
