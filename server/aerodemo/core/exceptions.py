"""Workflow exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://eda.example.com/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: Dict[str, Any] = {
            "type": self.type_uri,
            "title": self.title,
            "status": status_code,
        }

        if detail:
            self.problem_details["detail"] = detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """A required field is missing or malformed; raised before any store call."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[List[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )
        self.violations = violations or []


class NotFoundError(ProblemDetailsException):
    """The record id does not resolve to an existing record."""

    def __init__(
        self,
        resource_type: str = "record",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidTransitionError(ProblemDetailsException):
    """The status change is not permitted by the active transition policy."""

    def __init__(
        self,
        record_type: str,
        current_status: str,
        requested_status: str,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=409,
            title="Invalid Status Transition",
            detail=(
                f"A {record_type} cannot move from '{current_status}' "
                f"to '{requested_status}'"
            ),
            type_uri=f"{PROBLEM_BASE_URI}/invalid-status-transition",
            instance=instance,
            extensions={
                "record_type": record_type,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class StoreWriteError(ProblemDetailsException):
    """The record store rejected a write or could not be reached."""

    def __init__(
        self,
        operation: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The record store failed to {operation} the {resource_type}"
            if resource_id:
                detail += f" '{resource_id}'"

        extensions = {
            "operation": operation,
            "resource_type": resource_type,
            "retryable": True,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=503,
            title="Store Write Failed",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/store-write-failed",
            instance=instance,
            extensions=extensions,
        )


class NotificationError(Exception):
    """A webhook notification failed. Logged by the dispatcher, never propagated."""

    def __init__(self, title: str, record_type: str, record_id: Optional[str], reason: str):
        self.title = title
        self.record_type = record_type
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            f"Notification '{title}' for {record_type} {record_id} failed: {reason}"
        )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        content["request_id"] = request_id

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI request validation failures into Problem Details.

    Args:
        request: FastAPI request object
        exc: Request validation error raised while parsing the body

    Returns:
        JSONResponse: Problem Details formatted response with violations
    """
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]

    problem = ValidationError(
        detail="The request body failed validation",
        violations=violations,
        instance=request.url.path,
    )
    return await problem_details_handler(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "error": str(exc),
        },
        exc_info=exc,
    )

    problem_details = {
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _utc_timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
    )
