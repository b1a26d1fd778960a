"""Shared column helpers and the record type registry."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class RecordType(str, Enum):
    """Record types handled by the status workflow."""
    PRESENTATION = "presentation"
    ENLISTMENT = "enlistment"

    @classmethod
    def _missing_(cls, value):
        # Collection names and older labels
        if isinstance(value, str):
            return _ALIASES.get(value.lower())
        return None


_ALIASES = {
    "presentations": RecordType.PRESENTATION,
    "booking": RecordType.PRESENTATION,
    "alistamentos": RecordType.ENLISTMENT,
    "application": RecordType.ENLISTMENT,
}


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    """Opaque identifier for a new record."""
    return str(uuid4())
