"""Common Pydantic schemas."""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field

# Wire format of calendar-local times ("14:00")
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def wire_field(python_name: str, wire_name: str, **kwargs: Any) -> Any:
    """Response field read from the ORM attribute and serialized under its wire name."""
    return Field(
        ...,
        validation_alias=AliasChoices(python_name, wire_name),
        serialization_alias=wire_name,
        **kwargs,
    )


class RecordRef(BaseModel):
    """Request schema addressing a single record."""

    id: str = Field(..., min_length=1, max_length=64, description="Record identifier")


class DeleteResponse(BaseModel):
    """Response schema for an irreversible delete."""

    id: str = Field(..., description="Identifier of the deleted record")
    deleted: bool = Field(True, description="Always true once the record is gone")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    request_id: Optional[str] = Field(None, description="Request ID for correlation")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


# Error responses documented on the workflow routers
PROBLEM_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": Problem, "description": "Validation error"},
    404: {"model": Problem, "description": "Record not found"},
    409: {"model": Problem, "description": "Status transition not permitted"},
    503: {"model": Problem, "description": "Record store write failed"},
}
