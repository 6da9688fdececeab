"""Shared response schemas."""

from outpost_service.core.schemas.problem_details import PROBLEM_JSON, ProblemDetails

__all__ = ["PROBLEM_JSON", "ProblemDetails"]
