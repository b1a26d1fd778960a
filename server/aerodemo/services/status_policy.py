"""Status enums per record type and the transition policy."""

from enum import Enum
from typing import Any

from ..core.exceptions import InvalidTransitionError, ValidationError
from ..models import EnlistmentStatus, PresentationStatus, RecordType

STATUS_ENUMS: dict[RecordType, type[Enum]] = {
    RecordType.PRESENTATION: PresentationStatus,
    RecordType.ENLISTMENT: EnlistmentStatus,
}

# Edges allowed when strict transitions are enabled. Re-applying the current
# status is always allowed.
PERMITTED_TRANSITIONS: dict[RecordType, dict[str, frozenset[str]]] = {
    RecordType.PRESENTATION: {
        "pending": frozenset({"approved", "rejected", "rescheduled", "canceled"}),
        "approved": frozenset({"rescheduled", "canceled"}),
        "rescheduled": frozenset({"approved", "rejected", "canceled"}),
        "rejected": frozenset({"pending"}),
        "canceled": frozenset({"pending"}),
    },
    RecordType.ENLISTMENT: {
        "pending": frozenset({"in_progress", "approved", "rejected"}),
        "in_progress": frozenset({"pending", "approved", "rejected"}),
        "approved": frozenset({"in_progress"}),
        "rejected": frozenset({"in_progress"}),
    },
}


def parse_record_type(value: Any) -> RecordType:
    try:
        return RecordType(value)
    except ValueError as e:
        raise ValidationError(
            detail=f"Unknown record type '{value}'",
            violations=[{"path": "record_type", "message": "Unknown record type"}],
        ) from e


def parse_status(record_type: RecordType, value: Any) -> Enum:
    """
    Resolve ``value`` to a member of the record type's status enum.

    Raises:
        ValidationError: If the value is not a status of this record type
    """
    status_enum = STATUS_ENUMS[record_type]
    try:
        return status_enum(getattr(value, "value", value))
    except ValueError as e:
        allowed = [member.value for member in status_enum]
        raise ValidationError(
            detail=f"'{value}' is not a valid {record_type.value} status",
            violations=[{"path": "status", "message": f"Must be one of: {', '.join(allowed)}"}],
        ) from e


class TransitionPolicy:
    """Decides whether a record may move between two statuses."""

    def __init__(self, strict: bool = False, table: dict[RecordType, dict[str, frozenset[str]]] | None = None):
        self.strict = strict
        self.table = table or PERMITTED_TRANSITIONS

    def is_allowed(self, record_type: RecordType, current: Any, requested: Any) -> bool:
        current = getattr(current, "value", current)
        requested = getattr(requested, "value", requested)
        if not self.strict or current == requested:
            return True
        return requested in self.table[record_type].get(current, frozenset())

    def check(self, record_type: RecordType, current: Any, requested: Any) -> None:
        if not self.is_allowed(record_type, current, requested):
            raise InvalidTransitionError(
                record_type=record_type.value,
                current_status=getattr(current, "value", current),
                requested_status=getattr(requested, "value", requested),
            )
