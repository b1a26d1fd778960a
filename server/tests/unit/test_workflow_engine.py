"""Unit tests for the status workflow engine."""

from datetime import date, datetime, timedelta, timezone

import pytest

from aerodemo.core.exceptions import InvalidTransitionError, NotFoundError, StoreWriteError, ValidationError
from aerodemo.models import Enlistment, Presentation
from aerodemo.services.notifier import NotificationDispatcher
from aerodemo.services.status_policy import TransitionPolicy
from aerodemo.services.workflow_engine import (
    Origin,
    WorkflowAction,
    WorkflowCommand,
    WorkflowEngine,
)

SHOW_DATE = date(2025, 6, 1)


def as_utc(value):
    # SQLite drops tzinfo; stored timestamps are UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def booking_fields(**overrides):
    fields = {
        "city": "Curitiba",
        "date": SHOW_DATE,
        "time": "14:00",
        "description": "Air show for festival",
    }
    fields.update(overrides)
    return fields


def stored_columns(record, *names):
    return {name: getattr(record, name) for name in names}


@pytest.mark.asyncio
async def test_create_booking_starts_pending(workflow_engine, record_store, notifier):
    """A booking from the public form is pending and announced as a new request."""
    before = datetime.now(timezone.utc)

    record = await workflow_engine.create_record("presentation", booking_fields())

    assert record.status == "pending"
    assert notifier.titles == ["New Request"]

    stored = await record_store.get_record(Presentation, record.id)
    assert stored.city == "Curitiba"
    assert stored.date == SHOW_DATE
    assert stored.time == "14:00"
    assert stored.email == ""
    assert before - timedelta(seconds=5) <= as_utc(stored.created_at) <= datetime.now(timezone.utc)

    records = await record_store.list_records(_all(Presentation))
    assert len(records) == 1


@pytest.mark.asyncio
async def test_submitter_status_is_ignored(workflow_engine):
    record = await workflow_engine.create_record(
        "presentation", booking_fields(status="approved")
    )
    assert record.status == "pending"


@pytest.mark.asyncio
async def test_admin_create_uses_sentinel_contacts(workflow_engine, notifier):
    """Bookings created by an administrator keep their status and carry sentinel contacts."""
    record = await workflow_engine.create_record(
        "presentation", booking_fields(status="approved"), origin=Origin.ADMIN
    )

    assert record.status == "approved"
    assert record.email == "criado-pelo-admin@eda.com"
    assert record.discord_id == "Admin"
    assert notifier.sent[0].field_value("Email") == "criado-pelo-admin@eda.com"


@pytest.mark.asyncio
async def test_create_booking_requires_long_description(workflow_engine, record_store, notifier):
    with pytest.raises(ValidationError) as exc_info:
        await workflow_engine.create_record("presentation", booking_fields(description="Too short"))

    assert [v["path"] for v in exc_info.value.violations] == ["description"]
    assert notifier.sent == []
    assert await record_store.list_records(_all(Presentation)) == []


@pytest.mark.asyncio
async def test_create_enlistment_records_submitter_ip(workflow_engine, sample_enlistment_data, notifier):
    record = await workflow_engine.create_record(
        "enlistment", dict(sample_enlistment_data, status="approved"), submitter_ip="203.0.113.7"
    )

    assert record.status == "pending"
    assert record.user_ip == "203.0.113.7"
    assert record.shifts == ["Night", "Weekend"]
    assert record.aviation_knowledge == "willing-to-learn"
    assert notifier.titles == ["New Request"]
    assert notifier.sent[0].field_value("Shifts") == "Night, Weekend"


@pytest.mark.asyncio
async def test_create_enlistment_without_ip_is_unknown(workflow_engine, sample_enlistment_data):
    record = await workflow_engine.create_record("enlistment", sample_enlistment_data)
    assert record.user_ip == "unknown"


@pytest.mark.asyncio
async def test_enlistment_rejects_empty_shifts(workflow_engine, sample_enlistment_data):
    with pytest.raises(ValidationError) as exc_info:
        await workflow_engine.create_record("enlistment", dict(sample_enlistment_data, turno=[" "]))
    assert exc_info.value.violations[0]["path"] == "turno"


@pytest.mark.asyncio
async def test_admin_cannot_create_enlistment(workflow_engine, sample_enlistment_data):
    with pytest.raises(ValidationError):
        await workflow_engine.create_record("enlistment", sample_enlistment_data, origin="admin")


@pytest.mark.asyncio
async def test_transition_updates_only_status(workflow_engine, record_store, notifier):
    """Approving a pending booking changes the status and nothing else."""
    record = await workflow_engine.create_record("presentation", booking_fields())
    fields = ("city", "email", "date", "time", "description", "discord_id", "created_at")
    before = stored_columns(await record_store.get_record(Presentation, record.id), *fields)

    await workflow_engine.transition_status("presentation", record.id, "approved")

    stored = await record_store.get_record(Presentation, record.id)
    assert stored.status == "approved"
    assert stored_columns(stored, *fields) == before
    assert notifier.titles == ["New Request", "Approved"]
    assert notifier.sent[-1].field_value("Status") == "Approved"
    assert notifier.sent[-1].field_value("City") == "Curitiba"
    assert notifier.sent[-1].record_id == record.id


@pytest.mark.asyncio
async def test_transition_back_to_pending_uses_generic_title(workflow_engine, notifier):
    record = await workflow_engine.create_record("presentation", booking_fields())
    await workflow_engine.transition_status("presentation", record.id, "rejected")
    await workflow_engine.transition_status("presentation", record.id, "pending")
    assert notifier.titles[-2:] == ["Rejected", "Status Updated"]


@pytest.mark.asyncio
async def test_transition_is_idempotent(workflow_engine, record_store, notifier):
    record = await workflow_engine.create_record("presentation", booking_fields())

    await workflow_engine.transition_status("presentation", record.id, "canceled")
    first = stored_columns(await record_store.get_record(Presentation, record.id), "status", "city", "time")
    await workflow_engine.transition_status("presentation", record.id, "canceled")
    second = stored_columns(await record_store.get_record(Presentation, record.id), "status", "city", "time")

    assert first == second
    assert notifier.titles == ["New Request", "Canceled", "Canceled"]


@pytest.mark.asyncio
async def test_transition_rejects_status_of_other_record_type(workflow_engine, record_store):
    record = await workflow_engine.create_record("presentation", booking_fields())

    with pytest.raises(ValidationError):
        await workflow_engine.transition_status("presentation", record.id, "in_progress")

    stored = await record_store.get_record(Presentation, record.id)
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_transition_unknown_record(workflow_engine, notifier):
    with pytest.raises(NotFoundError) as exc_info:
        await workflow_engine.transition_status("enlistment", "missing-id", "approved")

    assert exc_info.value.resource_id == "missing-id"
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_transition_survives_notifier_failure(record_store, sample_enlistment_data, failing_notifier):
    """A throwing webhook never fails the status change."""
    failing = failing_notifier
    engine = WorkflowEngine(record_store, NotificationDispatcher(failing, background=False))
    record = await engine.create_record("enlistment", sample_enlistment_data)

    result = await engine.transition_status("enlistment", record.id, "rejected")

    assert result.status == "rejected"
    stored = await record_store.get_record(Enlistment, record.id)
    assert stored.status == "rejected"
    assert [p.title for p in failing.sent] == ["New Request", "Rejected"]


@pytest.mark.asyncio
async def test_enlistment_in_progress_title(workflow_engine, sample_enlistment_data, notifier):
    record = await workflow_engine.create_record("enlistment", sample_enlistment_data)
    await workflow_engine.transition_status("enlistment", record.id, "in_progress")

    assert notifier.titles[-1] == "In Progress"
    assert notifier.sent[-1].field_value("Status") == "In Review"


@pytest.mark.asyncio
async def test_store_failure_skips_notification(workflow_engine, record_store, notifier, monkeypatch):
    record = await workflow_engine.create_record("presentation", booking_fields())

    async def failing_update(model, record_id, values):
        raise StoreWriteError("update", "presentation", record_id)

    monkeypatch.setattr(record_store, "update_record", failing_update)

    with pytest.raises(StoreWriteError):
        await workflow_engine.transition_status("presentation", record.id, "approved")

    assert notifier.titles == ["New Request"]


@pytest.mark.asyncio
async def test_edit_replaces_fields(workflow_engine, record_store, notifier):
    record = await workflow_engine.create_record("presentation", booking_fields())
    new_date = SHOW_DATE + timedelta(days=7)

    await workflow_engine.edit_record("presentation", record.id, {
        "city": "Londrina",
        "date": new_date,
        "time": "09:30",
        "description": "Moved to the airport",
        "status": "rescheduled",
    })

    stored = await record_store.get_record(Presentation, record.id)
    assert (stored.city, stored.date, stored.time, stored.status) == ("Londrina", new_date, "09:30", "rescheduled")
    assert stored.description == "Moved to the airport"
    assert stored.email == record.email
    assert notifier.titles[-1] == "Updated"
    assert notifier.sent[-1].field_value("City") == "Londrina"


@pytest.mark.parametrize("missing", ["city", "date", "time", "description", "status"])
@pytest.mark.asyncio
async def test_edit_requires_every_field(workflow_engine, record_store, notifier, missing, monkeypatch):
    record = await workflow_engine.create_record("presentation", booking_fields())
    fields = dict(booking_fields(), status="approved")
    del fields[missing]

    async def unexpected_update(*args, **kwargs):
        raise AssertionError("store must not be written")

    monkeypatch.setattr(record_store, "update_record", unexpected_update)

    with pytest.raises(ValidationError) as exc_info:
        await workflow_engine.edit_record("presentation", record.id, fields)

    assert exc_info.value.violations[0]["path"] == missing
    assert notifier.titles == ["New Request"]


@pytest.mark.asyncio
async def test_edit_with_empty_city_leaves_record_unchanged(workflow_engine, record_store):
    record = await workflow_engine.create_record("presentation", booking_fields())

    with pytest.raises(ValidationError):
        await workflow_engine.edit_record("presentation", record.id, {"city": ""})

    stored = await record_store.get_record(Presentation, record.id)
    assert stored.city == "Curitiba"
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_edit_unknown_record(workflow_engine):
    with pytest.raises(NotFoundError):
        await workflow_engine.edit_record(
            "presentation", "missing-id", dict(booking_fields(), status="approved")
        )


@pytest.mark.asyncio
async def test_enlistments_cannot_be_edited(workflow_engine, sample_enlistment_data):
    record = await workflow_engine.create_record("enlistment", sample_enlistment_data)
    with pytest.raises(ValidationError):
        await workflow_engine.edit_record("enlistment", record.id, {"status": "approved"})


@pytest.mark.asyncio
async def test_delete_is_permanent_and_silent(workflow_engine, record_store, notifier):
    record = await workflow_engine.create_record("presentation", booking_fields())

    await workflow_engine.delete_record("presentation", record.id)

    assert await record_store.get_record(Presentation, record.id) is None
    assert notifier.titles == ["New Request"]

    with pytest.raises(NotFoundError):
        await workflow_engine.delete_record("presentation", record.id)
    assert notifier.titles == ["New Request"]


@pytest.mark.asyncio
async def test_execute_dispatches_commands(workflow_engine, record_store, notifier):
    record = await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action=WorkflowAction.CREATE,
        payload=booking_fields(),
    ))

    updated = await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action=WorkflowAction.TRANSITION,
        record_id=record.id,
        payload={"status": "approved"},
    ))
    assert updated.status == "approved"

    assert await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action=WorkflowAction.DELETE,
        record_id=record.id,
    )) is None
    assert await record_store.get_record(Presentation, record.id) is None


@pytest.mark.asyncio
async def test_execute_requires_record_id(workflow_engine):
    with pytest.raises(ValidationError):
        await workflow_engine.execute(WorkflowCommand(
            record_type="presentation",
            action=WorkflowAction.TRANSITION,
            payload={"status": "approved"},
        ))


@pytest.mark.asyncio
async def test_unknown_record_type(workflow_engine):
    with pytest.raises(ValidationError):
        await workflow_engine.create_record("newsletter", {})


@pytest.mark.asyncio
async def test_collection_names_resolve_to_record_types(workflow_engine, sample_enlistment_data):
    record = await workflow_engine.create_record("alistamentos", sample_enlistment_data)
    assert isinstance(record, Enlistment)


@pytest.mark.asyncio
async def test_strict_policy_blocks_unlisted_edges(record_store, dispatcher, notifier):
    engine = WorkflowEngine(record_store, dispatcher, TransitionPolicy(strict=True))
    record = await engine.create_record("presentation", booking_fields())
    await engine.transition_status("presentation", record.id, "approved")

    with pytest.raises(InvalidTransitionError):
        await engine.transition_status("presentation", record.id, "pending")

    stored = await record_store.get_record(Presentation, record.id)
    assert stored.status == "approved"
    assert notifier.titles == ["New Request", "Approved"]


def _all(model):
    from aerodemo.services.record_store import admin_listing
    return admin_listing(model)


@pytest.mark.asyncio
async def test_execute_accepts_plain_string_actions(workflow_engine, record_store, notifier):
    """Commands built from request data carry plain strings, not enum members."""
    record = await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action="create",
        payload=booking_fields(),
        origin="submitter",
    ))

    await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action="transition",
        record_id=record.id,
        payload={"status": "approved"},
    ))

    stored = await record_store.get_record(Presentation, record.id)
    assert stored is not None
    assert stored.status == "approved"
    assert notifier.titles == ["New Request", "Approved"]

    await workflow_engine.execute(WorkflowCommand(
        record_type="presentation",
        action="delete",
        record_id=record.id,
    ))
    assert await record_store.get_record(Presentation, record.id) is None


@pytest.mark.asyncio
async def test_execute_rejects_unknown_action(workflow_engine, record_store):
    record = await workflow_engine.create_record("presentation", booking_fields())

    with pytest.raises(ValidationError) as exc_info:
        await workflow_engine.execute(WorkflowCommand(
            record_type="presentation",
            action="archive",
            record_id=record.id,
        ))

    assert exc_info.value.violations[0]["path"] == "action"
    stored = await record_store.get_record(Presentation, record.id)
    assert stored is not None
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_create_rejects_unknown_origin(workflow_engine, record_store, notifier):
    with pytest.raises(ValidationError) as exc_info:
        await workflow_engine.create_record("presentation", booking_fields(), origin="robot")

    assert exc_info.value.status_code == 400
    assert exc_info.value.violations[0]["path"] == "origin"
    assert await record_store.list_records(_all(Presentation)) == []
    assert notifier.sent == []
