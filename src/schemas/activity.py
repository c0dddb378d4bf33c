"""Activity feed Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ActivityResponse(BaseModel):
    """Schema for a single activity feed item."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Activity ID")
    user_id: UUID = Field(description="Owner user ID")
    type: str = Field(description="Activity type, e.g. order_created")
    related_id: int | None = Field(default=None, description="ID of the related record")
    title: str = Field(description="Short headline")
    description: str | None = Field(default=None, description="Longer description")
    created_at: datetime = Field(description="Creation timestamp")


class ActivityListResponse(BaseModel):
    """Schema for activity list API responses."""

    model_config = ConfigDict(from_attributes=True)

    items: list[ActivityResponse] = Field(description="Activities, newest first")
