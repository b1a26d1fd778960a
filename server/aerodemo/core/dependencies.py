"""FastAPI dependencies for the record store, notifications and the workflow engine."""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_async_session
from .middleware import client_ip
from ..services.notifier import NotificationDispatcher, notification_dispatcher
from ..services.record_store import RecordStore
from ..services.status_policy import TransitionPolicy
from ..services.subscriptions import SnapshotHub, snapshot_hub
from ..services.workflow_engine import WorkflowEngine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def get_snapshot_hub() -> SnapshotHub:
    return snapshot_hub


def get_notification_dispatcher() -> NotificationDispatcher:
    return notification_dispatcher


def get_transition_policy() -> TransitionPolicy:
    return TransitionPolicy(strict=settings.strict_status_transitions)


def get_record_store(
    db: AsyncSession = Depends(get_db),
    hub: SnapshotHub = Depends(get_snapshot_hub),
) -> RecordStore:
    return RecordStore(db, hub)


def get_workflow_engine(
    store: RecordStore = Depends(get_record_store),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    policy: TransitionPolicy = Depends(get_transition_policy),
) -> WorkflowEngine:
    return WorkflowEngine(store, dispatcher, policy)


def get_client_ip(request: Request) -> str:
    """Submitter address recorded on enlistment applications."""
    return client_ip(request)


Store = Depends(get_record_store)
Engine = Depends(get_workflow_engine)
Hub = Depends(get_snapshot_hub)
ClientIP = Depends(get_client_ip)
