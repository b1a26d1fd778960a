"""Notification payload assembly for workflow events."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from ..models import RecordType, utcnow
from ..models.enlistment import AviationKnowledge, YesNo

NEW_REQUEST_TITLE = "New Request"
UPDATED_TITLE = "Updated"
DEFAULT_STATUS_TITLE = "Status Updated"

STATUS_TITLES = {
    "approved": "Approved",
    "rejected": "Rejected",
    "rescheduled": "Rescheduled",
    "canceled": "Canceled",
    "in_progress": "In Progress",
}

STATUS_LABELS = {
    "pending": "Pending",
    "approved": "Approved",
    "rejected": "Rejected",
    "rescheduled": "Rescheduled",
    "canceled": "Canceled",
    "in_progress": "In Review",
}

RECORD_LABELS = {
    RecordType.PRESENTATION: "Presentation",
    RecordType.ENLISTMENT: "Enlistment",
}

# Embed colours
TITLE_COLORS = {
    NEW_REQUEST_TITLE: 0xEAB308,
    UPDATED_TITLE: 0x8B5CF6,
    "Approved": 0x22C55E,
    "Rejected": 0xEF4444,
    "Rescheduled": 0x3B82F6,
    "In Progress": 0x3B82F6,
    "Canceled": 0x6B7280,
}
DEFAULT_COLOR = 0x0EA5E9

KNOWLEDGE_LABELS = {
    AviationKnowledge.HAS_KNOWLEDGE.value: "Has aviation knowledge",
    AviationKnowledge.WILLING_TO_LEARN.value: "Willing to learn",
}

YES_NO_LABELS = {
    YesNo.YES.value: "Yes",
    YesNo.NO.value: "No",
}

# Discord rejects embed field values longer than this
MAX_FIELD_LENGTH = 1024


def _text(value: Any) -> str:
    """Plain string for enum members and raw values alike."""
    return str(getattr(value, "value", value))


def status_change_title(status: Any) -> str:
    """Title announcing that a record moved to ``status``."""
    return STATUS_TITLES.get(_text(status), DEFAULT_STATUS_TITLE)


def status_label(status: Any) -> str:
    return STATUS_LABELS.get(_text(status), _text(status).replace("_", " ").title())


@dataclass(frozen=True)
class NotificationPayload:
    """Webhook message describing one workflow event."""

    title: str
    record_type: RecordType
    record_id: str | None
    status: str
    fields: tuple[tuple[str, str], ...]
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def body(self) -> str:
        """Human-readable summary of every field, one per line."""
        return "\n".join(f"{label}: {value}" for label, value in self.fields)

    def field_value(self, label: str) -> str | None:
        for name, value in self.fields:
            if name == label:
                return value
        return None

    def to_webhook_json(self, username: str | None = None) -> dict[str, Any]:
        """Discord-compatible webhook body with a single embed."""
        embed: dict[str, Any] = {
            "title": f"{RECORD_LABELS[self.record_type]}: {self.title}",
            "color": TITLE_COLORS.get(self.title, DEFAULT_COLOR),
            "fields": [
                {
                    "name": label,
                    "value": (value or "-")[:MAX_FIELD_LENGTH],
                    "inline": len(value) <= 40,
                }
                for label, value in self.fields
            ],
            "timestamp": self.timestamp.isoformat(),
        }
        if self.record_id:
            embed["footer"] = {"text": f"ID: {self.record_id}"}

        body: dict[str, Any] = {"embeds": [embed]}
        if username:
            body["username"] = username
        return body


def _pick(record: Any, overrides: Mapping[str, Any], name: str) -> Any:
    if name in overrides:
        return overrides[name]
    return getattr(record, name)


def presentation_fields(record: Any, overrides: Mapping[str, Any]) -> tuple[tuple[str, str], ...]:
    show_date = _pick(record, overrides, "date")
    return (
        ("City", _text(_pick(record, overrides, "city"))),
        ("Date", show_date.strftime("%d/%m/%Y") if show_date else "-"),
        ("Time", _text(_pick(record, overrides, "time"))),
        ("Description", _text(_pick(record, overrides, "description"))),
        ("Email", _text(_pick(record, overrides, "email")) or "-"),
        ("Discord", _text(_pick(record, overrides, "discord_id")) or "-"),
        ("Status", status_label(_pick(record, overrides, "status"))),
    )


def enlistment_fields(record: Any, overrides: Mapping[str, Any]) -> tuple[tuple[str, str], ...]:
    first_name = _text(_pick(record, overrides, "first_name"))
    last_name = _text(_pick(record, overrides, "last_name"))
    shifts = _pick(record, overrides, "shifts") or []
    knowledge = _text(_pick(record, overrides, "aviation_knowledge"))
    sim_flight = _text(_pick(record, overrides, "sim_flight_experience"))
    knows_team = _text(_pick(record, overrides, "knows_team"))
    return (
        ("Name", f"{first_name} {last_name}".strip()),
        ("Email", _text(_pick(record, overrides, "email"))),
        ("Discord", _text(_pick(record, overrides, "discord_nick"))),
        ("Age", _text(_pick(record, overrides, "age"))),
        ("Motivation", _text(_pick(record, overrides, "motivation"))),
        ("Aviation knowledge", KNOWLEDGE_LABELS.get(knowledge, knowledge)),
        ("Sim flight experience", YES_NO_LABELS.get(sim_flight, sim_flight)),
        ("Knows the team", YES_NO_LABELS.get(knows_team, knows_team)),
        ("Shifts", ", ".join(shifts) if shifts else "-"),
        ("Status", status_label(_pick(record, overrides, "status"))),
    )


FIELD_BUILDERS = {
    RecordType.PRESENTATION: presentation_fields,
    RecordType.ENLISTMENT: enlistment_fields,
}


def build_payload(
    title: str,
    record_type: RecordType,
    record: Any,
    **overrides: Any,
) -> NotificationPayload:
    """
    Summarize a record for the webhook.

    Args:
        title: Event title, e.g. "Approved" or "New Request"
        record_type: Kind of record being described
        record: Record snapshot (ORM object or any attribute holder)
        **overrides: Attribute values that supersede the snapshot, such as
            the status just written

    Returns:
        Payload carrying every record field in display order
    """
    fields = FIELD_BUILDERS[record_type](record, overrides)
    return NotificationPayload(
        title=title,
        record_type=record_type,
        record_id=_pick(record, overrides, "id"),
        status=_text(_pick(record, overrides, "status")),
        fields=fields,
    )
