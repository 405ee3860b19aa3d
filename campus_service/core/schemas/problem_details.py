"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
            return JSONResponse(
            status_code=409,
            content=ProblemDetails(
                type="invalid-vote-transition",
                title="Conflict",
                status=409,
                detail="Cannot UPVOTE: user has already voted",
                instance="/api/v1/tags/3f1c.../votes"
            ).model_dump()
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "stale-cursor",
                "title": "Bad Request",
                "status": 400,
                "detail": "Cursor references an entity that no longer exists; restart from an empty cursor",
                "instance": "/api/v1/tags",
            }
        },
        str_strip_whitespace=True,
    )


class ValidationErrorItem(BaseModel):
    field: str
    message: str
    type: str


class ValidationProblemDetails(ProblemDetails):
    """Problem details with per-field validation errors."""

    errors: list[ValidationErrorItem] = Field(default_factory=list)
