"""Live snapshot subscriptions over the record collections.

A subscription yields the full materialized result of its query when it is
opened and again after every committed change to the queried collection.
Changes arriving faster than the consumer reads are coalesced into a single
refresh, so every snapshot reflects the latest committed state.

    async with hub.subscribe(admin_listing(Presentation)) as subscription:
        async for snapshot in subscription:
            ...
"""

import asyncio
import logging
from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.database import async_session_factory
from ..core.observability import metrics_collector
from .record_store import RecordQuery

logger = logging.getLogger(__name__)


class Subscription:
    """Handle for one live query. Close it (or leave its context) to release it."""

    def __init__(self, hub: "SnapshotHub", query: RecordQuery):
        self._hub = hub
        self.query = query
        self._changed = asyncio.Event()
        # The first read returns the current state
        self._changed.set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        """Mark the subscription stale; the next read refreshes it."""
        self._changed.set()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._hub._remove(self)
        # Wake a pending reader so it can observe the close
        self._changed.set()

    async def wait_for_change(self, timeout: float | None = None) -> bool:
        """
        Wait until a refresh is due.

        Returns:
            True when a snapshot should be read, False on timeout or close
        """
        if self._closed:
            return False
        try:
            await asyncio.wait_for(self._changed.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return not self._closed

    async def snapshot(self) -> list:
        """Materialize the query now and clear the pending change flag."""
        self._changed.clear()
        return await self._hub.fetch(self.query)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> list:
        if not await self.wait_for_change():
            raise StopAsyncIteration
        return await self.snapshot()


class SnapshotHub:
    """Registry of live subscriptions keyed by collection name."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._subscriptions: dict[str, set[Subscription]] = defaultdict(set)

    def subscribe(self, query: RecordQuery) -> Subscription:
        subscription = Subscription(self, query)
        self._subscriptions[query.collection].add(subscription)
        self._report(query.collection)
        logger.debug(
            "Live subscription opened",
            extra={"collection": query.collection, "order_by": list(query.order_by)}
        )
        return subscription

    def publish(self, collection: str) -> int:
        """
        Notify every subscriber of a collection that it changed.

        Returns:
            Number of subscriptions notified
        """
        subscribers = list(self._subscriptions.get(collection, ()))
        for subscription in subscribers:
            subscription.notify()
        return len(subscribers)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscriptions.get(collection, ()))

    async def fetch(self, query: RecordQuery) -> list:
        async with self._session_factory() as session:
            result = await session.execute(query.statement())
            return list(result.scalars().all())

    def _remove(self, subscription: Subscription) -> None:
        collection = subscription.query.collection
        self._subscriptions[collection].discard(subscription)
        self._report(collection)
        logger.debug("Live subscription released", extra={"collection": collection})

    def _report(self, collection: str) -> None:
        metrics_collector.set_live_subscriptions(collection, self.subscriber_count(collection))


# Global hub instance shared by the store and the streaming routes
snapshot_hub = SnapshotHub(async_session_factory)
