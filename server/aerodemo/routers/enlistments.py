"""Enlistment router for squadron applications."""

import logging
from typing import Sequence

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from ..core.dependencies import ClientIP, Engine, Hub, Store
from ..core.exceptions import NotFoundError
from ..models import Enlistment as EnlistmentRecord
from ..models import RecordType
from ..schemas.common import PROBLEM_RESPONSES, DeleteResponse, RecordRef
from ..schemas.enlistment import (
    Enlistment,
    EnlistmentList,
    EnlistmentStatusRequest,
    ListEnlistmentsRequest,
    SubmitEnlistmentRequest,
)
from ..services.record_store import RecordStore, admin_listing
from ..services.subscriptions import SnapshotHub
from ..services.workflow_engine import Origin, WorkflowAction, WorkflowCommand, WorkflowEngine
from .streams import snapshot_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/enlistment", tags=["enlistment"], responses=PROBLEM_RESPONSES)


def _enlistment_json(record) -> dict:
    return Enlistment.model_validate(record).model_dump(mode="json", by_alias=True)


def _admin_snapshot(records: Sequence[EnlistmentRecord]) -> str:
    listing = EnlistmentList(items=[Enlistment.model_validate(r) for r in records])
    return listing.model_dump_json(by_alias=True)


@router.post("/submit", response_model=Enlistment, status_code=201)
async def submit_enlistment(
    request: SubmitEnlistmentRequest,
    engine: WorkflowEngine = Engine,
    submitter_ip: str = ClientIP,
) -> JSONResponse:
    """
    Submit an application from the public form.

    The application starts as pending and records the submitter's address.
    """
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.ENLISTMENT,
        action=WorkflowAction.CREATE,
        payload=request.model_dump(by_alias=True),
        origin=Origin.SUBMITTER,
        submitter_ip=submitter_ip,
    ))
    return JSONResponse(status_code=201, content=_enlistment_json(record))


@router.post("/status", response_model=Enlistment)
async def change_enlistment_status(
    request: EnlistmentStatusRequest,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Move an application to a new status and announce it."""
    record = await engine.execute(WorkflowCommand(
        record_type=RecordType.ENLISTMENT,
        action=WorkflowAction.TRANSITION,
        record_id=request.id,
        payload={"status": request.status},
    ))
    return JSONResponse(status_code=200, content=_enlistment_json(record))


@router.post("/delete", response_model=DeleteResponse)
async def delete_enlistment(
    request: RecordRef,
    engine: WorkflowEngine = Engine,
) -> JSONResponse:
    """Delete an application permanently."""
    await engine.execute(WorkflowCommand(
        record_type=RecordType.ENLISTMENT,
        action=WorkflowAction.DELETE,
        record_id=request.id,
    ))
    return JSONResponse(status_code=200, content=DeleteResponse(id=request.id).model_dump())


@router.post("/get", response_model=Enlistment)
async def get_enlistment(
    request: RecordRef,
    store: RecordStore = Store,
) -> JSONResponse:
    """Get a single application by ID."""
    record = await store.get_record(EnlistmentRecord, request.id)
    if record is None:
        raise NotFoundError(resource_type=RecordType.ENLISTMENT.value, resource_id=request.id)
    return JSONResponse(status_code=200, content=_enlistment_json(record))


@router.post("/list", response_model=EnlistmentList)
async def list_enlistments(
    request: ListEnlistmentsRequest,
    store: RecordStore = Store,
) -> JSONResponse:
    """List applications for the admin console, newest first."""
    status = request.status.value if request.status else None
    records = await store.list_records(admin_listing(EnlistmentRecord, status=status))
    listing = EnlistmentList(items=[Enlistment.model_validate(r) for r in records])
    return JSONResponse(status_code=200, content=listing.model_dump(mode="json", by_alias=True))


@router.get("/stream")
async def stream_enlistments(hub: SnapshotHub = Hub) -> StreamingResponse:
    """Live admin listing as server-sent events."""
    return snapshot_response(hub, admin_listing(EnlistmentRecord), _admin_snapshot)
