"""Order model type definitions for database operations."""

from datetime import date, datetime
from enum import Enum
from typing import Any, TypedDict
from uuid import UUID


class OrderStatus(str, Enum):
    """Fulfillment states an order can be in.

    CANCELLED is reserved as a terminal state; nothing transitions into it yet.
    """

    PENDING = "pending"
    AWAITING_APPROVAL = "awaiting_approval"
    CONFIRMED = "confirmed"
    PAYMENT_RECEIVED = "payment_received"
    PRODUCTION_STARTED = "production_started"
    IN_PRODUCTION = "in_production"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class StatusTimelineEntry(TypedDict):
    """A single status transition.

    Stored as part of the status_timeline JSONB array.
    """

    status: str
    timestamp: str
    note: str


class Order(TypedDict):
    """Order table row representation.

    Maps directly to the database schema.
    """

    id: int
    order_number: str
    user_id: UUID
    product_id: int
    quantity: int
    size_breakdown: dict[str, int] | None
    colors: dict[str, int] | None
    customization: dict[str, Any] | None
    delivery_date: date | None
    status: str
    status_timeline: list[StatusTimelineEntry]
    progress_percentage: int
    subtotal: str
    customization_fee: str
    shipping_fee: str
    tax: str
    total_amount: str
    shipping_address: str
    contact_name: str
    contact_phone: str
    notes: str | None
    created_at: datetime
    updated_at: datetime


class OrderInsert(TypedDict, total=False):
    """Row inserted when an order is placed."""

    order_number: str
    user_id: str
    product_id: int
    quantity: int
    size_breakdown: dict[str, int]
    colors: dict[str, int]
    customization: dict[str, Any]
    delivery_date: str | None
    status: str
    status_timeline: list[StatusTimelineEntry]
    progress_percentage: int
    subtotal: str
    customization_fee: str
    shipping_fee: str
    tax: str
    total_amount: str
    shipping_address: str
    contact_name: str
    contact_phone: str
    notes: str | None
    created_at: str
    updated_at: str
