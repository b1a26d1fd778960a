"""Server-sent event streams over live snapshot subscriptions."""

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

from fastapi.responses import StreamingResponse

from ..core.config import settings
from ..services.record_store import RecordQuery
from ..services.subscriptions import SnapshotHub

logger = logging.getLogger(__name__)

Serializer = Callable[[Sequence[Any]], str]


async def snapshot_events(
    hub: SnapshotHub,
    query: RecordQuery,
    serialize: Serializer,
    keepalive_seconds: float,
) -> AsyncIterator[str]:
    """
    Yield one ``snapshot`` event per refresh, with keep-alive comments between.

    The subscription lives as long as this generator; it is released when
    the client disconnects and the response cancels the stream.
    """
    async with hub.subscribe(query) as subscription:
        while True:
            if await subscription.wait_for_change(timeout=keepalive_seconds):
                records = await subscription.snapshot()
                yield f"event: snapshot\ndata: {serialize(records)}\n\n"
            elif subscription.closed:
                break
            else:
                yield ": keep-alive\n\n"

    logger.debug("Snapshot stream finished", extra={"collection": query.collection})


def snapshot_response(hub: SnapshotHub, query: RecordQuery, serialize: Serializer) -> StreamingResponse:
    return StreamingResponse(
        snapshot_events(hub, query, serialize, settings.snapshot_keepalive_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
