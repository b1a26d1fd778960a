"""Status workflow for presentation requests and enlistment applications."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.database import Base
from ..core.exceptions import NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models import Enlistment, EnlistmentStatus, Presentation, PresentationStatus, RecordType, utcnow
from ..schemas.enlistment import SubmitEnlistmentRequest
from ..schemas.presentation import (
    CreatePresentationRequest,
    EditPresentationRequest,
    SubmitPresentationRequest,
)
from .messages import NEW_REQUEST_TITLE, UPDATED_TITLE, build_payload, status_change_title
from .notifier import NotificationDispatcher
from .record_store import RecordStore
from .status_policy import TransitionPolicy, parse_record_type, parse_status

logger = logging.getLogger(__name__)

RECORD_MODELS: dict[RecordType, type[Base]] = {
    RecordType.PRESENTATION: Presentation,
    RecordType.ENLISTMENT: Enlistment,
}

# Recorded against the request context when the client address is unknown
UNKNOWN_IP = "unknown"


class WorkflowAction(str, Enum):
    """Kinds of operator or submitter actions."""
    CREATE = "create"
    TRANSITION = "transition"
    EDIT = "edit"
    DELETE = "delete"


class Origin(str, Enum):
    """Who initiated a create."""
    SUBMITTER = "submitter"
    ADMIN = "admin"


@dataclass(frozen=True)
class WorkflowCommand:
    """
    One action against one record.

    ``payload`` carries the submitted fields for creates and edits, and the
    requested ``status`` for transitions.
    """

    record_type: RecordType | str
    action: WorkflowAction | str
    record_id: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)
    origin: Origin | str = Origin.SUBMITTER
    submitter_ip: str | None = None


class WorkflowEngine:
    """Applies workflow commands to the record store and announces them."""

    def __init__(
        self,
        store: RecordStore,
        dispatcher: NotificationDispatcher,
        policy: TransitionPolicy | None = None,
        admin_contact_email: str | None = None,
        admin_chat_handle: str | None = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.policy = policy or TransitionPolicy(strict=settings.strict_status_transitions)
        self.admin_contact_email = admin_contact_email or settings.admin_contact_email
        self.admin_chat_handle = admin_chat_handle or settings.admin_chat_handle

    async def execute(self, command: WorkflowCommand) -> Base | None:
        """
        Dispatch a command to the matching operation.

        Returns:
            The affected record, or None for deletes
        """
        action = _parse_choice(WorkflowAction, command.action, "action")

        if action is WorkflowAction.CREATE:
            return await self.create_record(
                command.record_type,
                command.payload,
                origin=command.origin,
                submitter_ip=command.submitter_ip,
            )

        if not command.record_id:
            raise ValidationError(
                detail=f"A record id is required to {action.value} a record",
                violations=[{"path": "id", "message": "Field required"}],
            )

        if action is WorkflowAction.TRANSITION:
            return await self.transition_status(
                command.record_type, command.record_id, command.payload.get("status")
            )
        elif action is WorkflowAction.EDIT:
            return await self.edit_record(command.record_type, command.record_id, command.payload)
        elif action is WorkflowAction.DELETE:
            await self.delete_record(command.record_type, command.record_id)
            return None

        raise ValidationError(
            detail=f"Unsupported workflow action '{action.value}'",
            violations=[{"path": "action", "message": "Unsupported action"}],
        )

    async def transition_status(self, record_type: RecordType | str, record_id: str, new_status: Any) -> Base:
        """
        Overwrite a record's status and announce the change.

        Only the status column is written. The record is read first so the
        notification can describe every field; the read does not guard the
        write, so concurrent operators resolve as last writer wins.

        Args:
            record_type: Kind of record
            record_id: Record to update
            new_status: Member of the record type's status enum

        Returns:
            The updated record

        Raises:
            ValidationError: If the status is not valid for the record type
            NotFoundError: If the record does not exist
            InvalidTransitionError: If strict transitions forbid the change
            StoreWriteError: If the update fails; nothing is announced
        """
        record_type = parse_record_type(record_type)
        status = parse_status(record_type, new_status)
        model = RECORD_MODELS[record_type]

        record = await self._require(record_type, record_id)
        previous_status = _value(record.status)
        self.policy.check(record_type, previous_status, status)

        await self.store.update_record(model, record_id, {"status": status.value})

        metrics_collector.record_status_transition(record_type.value, status.value)
        logger.info(
            "Record status changed",
            extra={
                "record_type": record_type.value,
                "record_id": record_id,
                "from_status": previous_status,
                "to_status": status.value,
            }
        )

        await self._notify(status_change_title(status), record_type, record, status=status.value)
        return record

    async def edit_record(self, record_type: RecordType | str, record_id: str, fields: Mapping[str, Any]) -> Base:
        """
        Replace a presentation's city, date, time, description and status.

        Raises:
            ValidationError: If a field is missing or empty, or the record type
                has no edit operation; raised before any store call
            NotFoundError: If the record does not exist
            StoreWriteError: If the update fails
        """
        record_type = parse_record_type(record_type)
        if record_type is not RecordType.PRESENTATION:
            raise ValidationError(
                detail=f"A {record_type.value} cannot be edited",
                violations=[{"path": "record_type", "message": "Only presentations support edits"}],
            )

        request = self._validate(EditPresentationRequest, fields)
        record = await self._require(record_type, record_id)
        self.policy.check(record_type, record.status, request.status)

        values = {
            "city": request.city,
            "date": request.date,
            "time": request.time,
            "description": request.description,
            "status": request.status.value,
        }
        await self.store.update_record(Presentation, record_id, values)

        metrics_collector.record_edited(record_type.value)
        logger.info(
            "Record edited",
            extra={"record_type": record_type.value, "record_id": record_id, "status": request.status.value}
        )

        await self._notify(UPDATED_TITLE, record_type, record, **values)
        return record

    async def create_record(
        self,
        record_type: RecordType | str,
        fields: Mapping[str, Any],
        *,
        origin: Origin | str = Origin.SUBMITTER,
        submitter_ip: str | None = None,
    ) -> Base:
        """
        Persist a new record and announce it.

        Submitter creates always start at ``pending`` whatever status the
        input carries. Administrators may create presentations with any
        status; their records carry the sentinel contact values. Enlistments
        are only created by submitters.

        Raises:
            ValidationError: If a required field is missing or malformed
            StoreWriteError: If the insert fails
        """
        record_type = parse_record_type(record_type)
        origin = _parse_choice(Origin, origin, "origin")

        if record_type is RecordType.PRESENTATION:
            values = self._presentation_values(fields, origin)
        elif origin is Origin.ADMIN:
            raise ValidationError(
                detail="Enlistments can only be created through the public form",
                violations=[{"path": "origin", "message": "Administrators cannot create enlistments"}],
            )
        else:
            values = self._enlistment_values(fields, submitter_ip)

        values["created_at"] = utcnow()
        record = await self.store.create_record(RECORD_MODELS[record_type], values)

        metrics_collector.record_created(record_type.value, origin.value)
        logger.info(
            "Record created",
            extra={
                "record_type": record_type.value,
                "record_id": record.id,
                "origin": origin.value,
                "status": values["status"],
            }
        )

        await self._notify(NEW_REQUEST_TITLE, record_type, record)
        return record

    async def delete_record(self, record_type: RecordType | str, record_id: str) -> None:
        """
        Delete a record permanently. Deletes are not announced.

        Raises:
            NotFoundError: If the record does not exist (including already deleted)
            StoreWriteError: If the delete fails
        """
        record_type = parse_record_type(record_type)
        await self.store.delete_record(RECORD_MODELS[record_type], record_id)

        metrics_collector.record_deleted(record_type.value)
        logger.info(
            "Record deleted",
            extra={"record_type": record_type.value, "record_id": record_id}
        )

    def _presentation_values(self, fields: Mapping[str, Any], origin: Origin) -> dict[str, Any]:
        if origin is Origin.ADMIN:
            request = self._validate(CreatePresentationRequest, fields)
            return {
                "city": request.city,
                "email": self.admin_contact_email,
                "date": request.date,
                "time": request.time,
                "description": request.description,
                "discord_id": self.admin_chat_handle,
                "status": request.status.value,
            }

        request = self._validate(SubmitPresentationRequest, fields)
        values = request.model_dump()
        values["status"] = PresentationStatus.PENDING.value
        return values

    def _enlistment_values(self, fields: Mapping[str, Any], submitter_ip: str | None) -> dict[str, Any]:
        request = self._validate(SubmitEnlistmentRequest, fields)
        values = request.model_dump(mode="json")
        values["user_ip"] = submitter_ip or UNKNOWN_IP
        values["status"] = EnlistmentStatus.PENDING.value
        return values

    async def _require(self, record_type: RecordType, record_id: str) -> Base:
        record = await self.store.get_record(RECORD_MODELS[record_type], record_id)
        if record is None:
            raise NotFoundError(resource_type=record_type.value, resource_id=record_id)
        return record

    @staticmethod
    def _validate(schema: type[BaseModel], fields: Mapping[str, Any]) -> Any:
        try:
            return schema.model_validate(dict(fields))
        except PydanticValidationError as e:
            violations = [
                {
                    "path": ".".join(str(part) for part in error["loc"]) or "body",
                    "message": error["msg"],
                }
                for error in e.errors()
            ]
            raise ValidationError(
                detail=f"{len(violations)} field(s) failed validation",
                violations=violations,
            ) from e

    async def _notify(self, title: str, record_type: RecordType, record: Any, **overrides: Any) -> None:
        # Announcements are advisory; the write has already been committed
        try:
            payload = build_payload(title, record_type, record, **overrides)
            await self.dispatcher.dispatch(payload)
        except Exception:
            logger.exception(
                "Notification could not be dispatched",
                extra={"title": title, "record_type": record_type.value, "record_id": getattr(record, "id", None)}
            )


def _value(status: Any) -> str:
    return getattr(status, "value", status)


def _parse_choice(choices: type[Enum], value: Any, path: str) -> Any:
    """Resolve a command field that may arrive as a member or its plain value."""
    try:
        return choices(getattr(value, "value", value))
    except ValueError as e:
        allowed = [member.value for member in choices]
        raise ValidationError(
            detail=f"Unknown {path} '{value}'",
            violations=[{"path": path, "message": f"Must be one of: {', '.join(allowed)}"}],
        ) from e
