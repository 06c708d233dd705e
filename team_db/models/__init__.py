"""Pydantic models for response schemas."""

from team_db.models.schemas import HealthResponse

__all__ = ["HealthResponse"]
