"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PROBLEM_JSON = "application/problem+json"


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Context-specific members (``cursor``, ``strategy``, ...) are allowed
    alongside the standard ones.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
        return JSONResponse(
            status_code=400,
            content=ProblemDetails(
                type="invalid-cursor",
                title="Invalid Cursor",
                status=400,
                detail="Invalid cursor format",
                cursor="not-valid-base64!!!",
            ).model_dump(exclude_none=True),
            media_type=PROBLEM_JSON,
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
        extra="allow",
        json_schema_extra={
            "example": {
                "type": "invalid-cursor",
                "title": "Invalid Cursor",
                "status": 400,
                "detail": "Invalid cursor format",
                "instance": "http://localhost/api/v1/items?cursor=abc",
                "cursor": "abc",
            }
        },
        str_strip_whitespace=True,
    )
