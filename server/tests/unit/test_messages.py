"""Unit tests for notification payload assembly."""

from datetime import date
from types import SimpleNamespace

import pytest

from aerodemo.models import RecordType
from aerodemo.services.messages import (
    MAX_FIELD_LENGTH,
    build_payload,
    status_change_title,
    status_label,
)


@pytest.fixture
def booking():
    return SimpleNamespace(
        id="b-1",
        city="Curitiba",
        email="",
        date=date(2025, 6, 1),
        time="14:00",
        description="Air show for festival",
        discord_id="",
        status="pending",
    )


@pytest.fixture
def application():
    return SimpleNamespace(
        id="e-1",
        first_name="Ana",
        last_name="Souza",
        email="ana.souza@example.com",
        discord_nick="ana_pilot",
        age="24",
        motivation="Fly with the team",
        aviation_knowledge="has-knowledge",
        sim_flight_experience="sim",
        knows_team="nao",
        shifts=["Night"],
        status="in_progress",
    )


@pytest.mark.parametrize("status, title", [
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("rescheduled", "Rescheduled"),
    ("canceled", "Canceled"),
    ("in_progress", "In Progress"),
    ("pending", "Status Updated"),
])
def test_status_change_titles(status, title):
    assert status_change_title(status) == title


def test_status_label_falls_back_to_title_case():
    assert status_label("in_progress") == "In Review"
    assert status_label("on_hold") == "On Hold"


def test_booking_fields_in_display_order(booking):
    payload = build_payload("New Request", RecordType.PRESENTATION, booking)

    assert [label for label, _ in payload.fields] == [
        "City", "Date", "Time", "Description", "Email", "Discord", "Status",
    ]
    assert payload.field_value("Date") == "01/06/2025"
    assert payload.field_value("Email") == "-"
    assert payload.field_value("Status") == "Pending"
    assert payload.record_id == "b-1"
    assert "City: Curitiba" in payload.body


def test_overrides_supersede_snapshot(booking):
    payload = build_payload("Approved", RecordType.PRESENTATION, booking, status="approved")

    assert payload.status == "approved"
    assert payload.field_value("Status") == "Approved"
    assert booking.status == "pending"


def test_enlistment_summary(application):
    payload = build_payload("In Progress", RecordType.ENLISTMENT, application)

    assert payload.field_value("Name") == "Ana Souza"
    assert payload.field_value("Aviation knowledge") == "Has aviation knowledge"
    assert payload.field_value("Sim flight experience") == "Yes"
    assert payload.field_value("Knows the team") == "No"
    assert payload.field_value("Shifts") == "Night"
    assert payload.field_value("Status") == "In Review"


def test_webhook_json_truncates_long_values(booking):
    booking.description = "x" * (MAX_FIELD_LENGTH + 50)
    body = build_payload("Updated", RecordType.PRESENTATION, booking).to_webhook_json()

    embed = body["embeds"][0]
    description = next(f for f in embed["fields"] if f["name"] == "Description")
    assert len(description["value"]) == MAX_FIELD_LENGTH
    assert embed["title"] == "Presentation: Updated"
    assert "username" not in body
