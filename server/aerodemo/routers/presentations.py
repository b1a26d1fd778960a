"""Presentation router for booking requests and their status workflow."""

import logging
from enum import Enum
from typing import Sequence

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, StreamingResponse

from ..core.dependencies import Engine, Hub, Store
from ..core.exceptions import NotFoundError
from ..models import Presentation as PresentationRecord
from ..models import RecordType
from ..schemas.common import PROBLEM_RESPONSES, DeleteResponse, RecordRef
from ..schemas.presentation import (
    CreatePresentationRequest,
    EditPresentationCommand,
    ListPresentationsRequest,
    Presentation,
    PresentationList,
    PresentationStatusRequest,
    SubmitPresentationRequest,
    UpcomingPresentation,
    UpcomingPresentationList,
)
from ..services.record_store import RecordStore, admin_listing, upcoming_presentations
from ..services.subscriptions import SnapshotHub
from ..services.workflow_engine import Origin, WorkflowAction, WorkflowCommand, WorkflowEngine
from .streams import snapshot_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/presentation", tags=["presentation"], responses=PROBLEM_RESPONSES)


class StreamScope(str, Enum):
    ADMIN = "admin"
    UPCOMING = "upcoming"


def _presentation_json(record) -> dict:
    return Presentation.model_validate(record).model_dump(mode="json", by_alias=True)


def _admin_snapshot(records: Sequence[PresentationRecord]) -> str:
    listing = PresentationList(items=[Presentation.model_validate(r) for r in records])
    return listing.model_dump_json(by_alias=True)


def _upcoming_snapshot(records: Sequence[PresentationRecord]) -> str:
    listing = UpcomingPresentationList(items=[UpcomingPresentation.model_validate(r) for r in records])
    return listing.model_dump_json()


@router.post("/submit", response_model=Presentation, status_code=201)
async def submit_presentation(
    request: SubmitPresentationRequest,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """
    Submit a booking request from the public form.

    The booking always starts as pending.
    """
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.PRESENTATION,
        action=WorkflowAction.CREATE,
        payload=request.model_dump(by_alias=True),
        origin=Origin.SUBMITTER,
    ))
    return JSONResponse(status_code=201, content=_presentation_json(record))


@router.post("/create", response_model=Presentation, status_code=201)
async def create_presentation(
    request: CreatePresentationRequest,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Create a booking from the admin console with any initial status."""
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.PRESENTATION,
        action=WorkflowAction.CREATE,
        payload=request.model_dump(),
        origin=Origin.ADMIN,
    ))
    return JSONResponse(status_code=201, content=_presentation_json(record))


@router.post("/status", response_model=Presentation)
async def change_presentation_status(
    request: PresentationStatusRequest,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Move a booking to a new status and announce it."""
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.PRESENTATION,
        action=WorkflowAction.TRANSITION,
        record_id=request.id,
        payload={"status": request.status},
    ))
    return JSONResponse(status_code=200, content=_presentation_json(record))


@router.post("/edit", response_model=Presentation)
async def edit_presentation(
    request: EditPresentationCommand,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Replace a booking's city, date, time, description and status."""
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.PRESENTATION,
        action=WorkflowAction.EDIT,
        record_id=request.id,
        payload=request.model_dump(exclude={"id"}),
    ))
    return JSONResponse(status_code=200, content=_presentation_json(record))


@router.post("/delete", response_model=DeleteResponse)
async def delete_presentation(
    request: RecordRef,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Delete a booking permanently."""
    await engine.execute(WorkflowCommand(
        record_type=RecordType.PRESENTATION,
        action=WorkflowAction.DELETE,
        record_id=request.id,
    ))
    return JSONResponse(status_code=200, content=DeleteResponse(id=request.id).model_dump())


@router.post("/get", response_model=Presentation)
async def get_presentation(
    request: RecordRef,
    store: RecordStore = Store,
) -> JSONResponse:
    """Get a single booking by ID."""
    record = await store.get_record(PresentationRecord, request.id)
    if record is None:
        raise NotFoundError(resource_type=RecordType.PRESENTATION.value, resource_id=request.id)
    return JSONResponse(status_code=200, content=_presentation_json(record))


@router.post("/list", response_model=PresentationList)
async def list_presentations(
    request: ListPresentationsRequest,
    store: RecordStore = Store,
) -> JSONResponse:
    """List bookings for the admin console, newest first."""
    status = request.status.value if request.status else None
    records = await store.list_records(admin_listing(PresentationRecord, status=status))

    logger.debug(
        "Presentations listed",
        extra={"status": status, "count": len(records)}
    )

    listing = PresentationList(items=[Presentation.model_validate(r) for r in records])
    return JSONResponse(status_code=200, content=listing.model_dump(mode="json", by_alias=True))


@router.post("/upcoming", response_model=UpcomingPresentationList)
async def list_upcoming_presentations(store: RecordStore = Store) -> JSONResponse:
    """List approved shows from today onwards, earliest first."""
    records = await store.list_records(upcoming_presentations())
    listing = UpcomingPresentationList(items=[UpcomingPresentation.model_validate(r) for r in records])
    return JSONResponse(status_code=200, content=listing.model_dump(mode="json"))


@router.get("/stream")
async def stream_presentations(
    scope: StreamScope = Query(StreamScope.ADMIN),
    hub: SnapshotHub = Hub,
) -> StreamingResponse:
    """
    Live listing as server-sent events.

    Every event carries the full listing; a new one is sent after each
    committed change to the bookings.
    """
    if scope is StreamScope.UPCOMING:
        return snapshot_response(hub, upcoming_presentations(), _upcoming_snapshot)
    return snapshot_response(hub, admin_listing(PresentationRecord), _admin_snapshot)
