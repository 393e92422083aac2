"""Base model classes for MCP Grounding."""

from datetime import datetime, UTC

from pydantic import BaseModel, ConfigDict, Field


class GroundingBaseModel(BaseModel):
    """Base model with common configuration for all MCP Grounding models."""

    model_config = ConfigDict(
        # Keep enum objects in memory, serialize values only when needed
        use_enum_values=False,
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignment after model creation
        validate_assignment=True,
        # Include extra validation info in errors
        extra='forbid',
    )


class TimestampedModel(GroundingBaseModel):
    """Base model for entities with an update timestamp."""

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the entity was last written"
    )


class StatsModel(GroundingBaseModel):
    """Base model for statistics responses."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When these statistics were generated"
    )
