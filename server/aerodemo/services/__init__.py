"""Service layer package."""

from .notifier import DiscordWebhookNotifier, NotificationDispatcher
from .record_store import RecordStore
from .status_policy import TransitionPolicy
from .subscriptions import SnapshotHub
from .workflow_engine import WorkflowCommand, WorkflowEngine

__all__ = [
    "DiscordWebhookNotifier",
    "NotificationDispatcher",
    "RecordStore",
    "SnapshotHub",
    "TransitionPolicy",
    "WorkflowCommand",
    "WorkflowEngine",
]
