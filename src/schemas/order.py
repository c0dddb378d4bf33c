"""Order Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

from src.models.order import OrderStatus
from src.services.timeline_service import StepState


class OrderCreate(BaseModel):
    """Schema for placing an order via POST /orders."""

    model_config = ConfigDict(from_attributes=True)

    product_id: int = Field(ge=1, description="Catalog product ID")
    quantity: int = Field(ge=1, description="Total pieces ordered")
    size_breakdown: dict[str, NonNegativeInt] = Field(
        default_factory=dict,
        description="Pieces per size label; must sum to quantity when given",
    )
    colors: dict[str, NonNegativeInt] = Field(default_factory=dict, description="Pieces per color label")
    customization: dict[str, Any] = Field(default_factory=dict, description="Free-form customization details")
    delivery_date: date | None = Field(default=None, description="Requested delivery date")

    subtotal: Decimal = Field(ge=0, decimal_places=2, description="Goods subtotal")
    customization_fee: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2, description="Customization fee")
    shipping_fee: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2, description="Shipping fee")
    tax: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2, description="Tax")
    total_amount: Decimal = Field(ge=0, decimal_places=2, description="Grand total")

    shipping_address: str = Field(min_length=1, max_length=1000, description="Delivery address")
    contact_name: str = Field(min_length=1, max_length=200, description="Receiving contact name")
    contact_phone: str = Field(min_length=1, max_length=50, description="Receiving contact phone")
    notes: str | None = Field(default=None, max_length=2000, description="Notes for the production team")

    @model_validator(mode="after")
    def check_quantities_and_totals(self) -> "OrderCreate":
        """Reject breakdowns that disagree with quantity and totals that disagree with their parts."""
        if self.size_breakdown:
            breakdown_total = sum(self.size_breakdown.values())
            if breakdown_total != self.quantity:
                raise ValueError(
                    f"Size breakdown sums to {breakdown_total} but quantity is {self.quantity}"
                )

        expected_total = self.subtotal + self.customization_fee + self.shipping_fee + self.tax
        if self.total_amount != expected_total:
            raise ValueError(
                f"Total amount {self.total_amount} does not equal subtotal plus fees and tax ({expected_total})"
            )

        return self


class OrderStatusUpdate(BaseModel):
    """Schema for PATCH /orders/{order_id}/status."""

    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus = Field(description="New order status")
    progress_percentage: int | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Production progress; left unchanged when omitted",
    )
    note: str | None = Field(default=None, max_length=500, description="Note stored with the timeline entry")


class StatusTimelineEntrySchema(BaseModel):
    """A single recorded status change."""

    model_config = ConfigDict(from_attributes=True)

    status: str = Field(description="Status recorded")
    timestamp: datetime = Field(description="When the status was recorded")
    note: str | None = Field(default=None, description="Note stored with the change")


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Order ID")
    order_number: str = Field(description="Human-readable order number")
    user_id: UUID = Field(description="Owner user ID")
    product_id: int = Field(description="Catalog product ID")
    quantity: int = Field(description="Total pieces ordered")
    size_breakdown: dict[str, int] | None = Field(default=None, description="Pieces per size label")
    colors: dict[str, int] | None = Field(default=None, description="Pieces per color label")
    customization: dict[str, Any] | None = Field(default=None, description="Customization details")
    delivery_date: date | None = Field(default=None, description="Requested delivery date")
    status: str = Field(description="Current order status")
    status_timeline: list[StatusTimelineEntrySchema] = Field(default_factory=list, description="Recorded status changes")
    progress_percentage: int = Field(default=0, description="Production progress (0-100)")
    subtotal: Decimal = Field(description="Goods subtotal")
    customization_fee: Decimal | None = Field(default=None, description="Customization fee")
    shipping_fee: Decimal | None = Field(default=None, description="Shipping fee")
    tax: Decimal | None = Field(default=None, description="Tax")
    total_amount: Decimal = Field(description="Grand total")
    shipping_address: str = Field(description="Delivery address")
    contact_name: str = Field(description="Receiving contact name")
    contact_phone: str = Field(description="Receiving contact phone")
    notes: str | None = Field(default=None, description="Order notes")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class OrderListResponse(BaseModel):
    """Schema for order list API responses."""

    model_config = ConfigDict(from_attributes=True)

    items: list[OrderResponse] = Field(description="List of orders")


class TimelineStepSchema(BaseModel):
    """A canonical status projected onto an order."""

    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus = Field(description="Canonical status")
    state: StepState = Field(description="completed, current or future")
    timestamp: datetime | None = Field(default=None, description="Latest time the status was recorded")
    note: str | None = Field(default=None, description="Note from the latest entry")


class OrderTimelineResponse(BaseModel):
    """Schema for GET /orders/{order_id}/timeline."""

    model_config = ConfigDict(from_attributes=True)

    order_id: int = Field(description="Order ID")
    order_number: str = Field(description="Human-readable order number")
    status: str = Field(description="Current order status")
    progress_percentage: int = Field(description="Production progress (0-100)")
    steps: list[TimelineStepSchema] = Field(description="Canonical track")
    entries: list[StatusTimelineEntrySchema] = Field(description="Full recorded history")
    allowed_transitions: list[OrderStatus] = Field(description="Statuses the order may move to next")
