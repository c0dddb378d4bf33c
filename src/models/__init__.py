"""Database model type definitions."""

from src.models.activity import Activity, ActivityCreate
from src.models.order import Order, OrderInsert, OrderStatus, StatusTimelineEntry

__all__ = [
    "Activity",
    "ActivityCreate",
    "Order",
    "OrderInsert",
    "OrderStatus",
    "StatusTimelineEntry",
]
