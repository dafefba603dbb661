"""Shared plumbing for the queue and message services."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from pgmq_admin.persist_base import PersistBase

T = TypeVar("T")

DEFAULT_MAX_PAGE_SIZE = 500


class ServiceBase:
    """Holds the store, logger and call limits used by every service operation.

    Services keep no state between calls. Each operation runs one store call,
    bounded by `timeout` seconds when given (or the service default). Cancelling
    the calling task cancels the store call; the pooled connection is released
    either way.
    """

    def __init__(
        self,
        store: PersistBase,
        logger: logging.Logger | None = None,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
        timeout: float | None = None,
    ) -> None:
        self.store = store
        self.logger = logger or logging.getLogger(type(self).__module__)
        self.max_page_size = max_page_size
        self.timeout = timeout

    async def _run(self, call: Awaitable[T], timeout: float | None = None) -> T:
        return await asyncio.wait_for(call, timeout if timeout is not None else self.timeout)
