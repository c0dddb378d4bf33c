"""Activity feed model type definitions."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID

ActivityType = Literal["order_created", "order_status_change"]


class Activity(TypedDict):
    """Activities table row representation."""

    id: int
    user_id: UUID
    type: str
    related_id: int | None
    title: str
    description: str | None
    created_at: datetime


class ActivityCreate(TypedDict):
    """Data required to record an activity."""

    user_id: str
    type: ActivityType
    related_id: int
    title: str
    description: str
