"""Order ledger: placement, lookup and status changes."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.core.supabase import get_supabase_client
from src.models.order import OrderStatus
from src.schemas.order import OrderCreate
from src.services.activity_service import ActivityService
from src.services.order_numbering import OrderNumberAllocator
from src.services.timeline_service import build_timeline_entry, status_label

logger = logging.getLogger(__name__)

ADVANCE_STATUS_FUNCTION = "advance_order_status"


class OrderStatusChangedError(Exception):
    """The order's status was no longer the one the caller checked against."""

    def __init__(self, order_id: int, expected_status: str, current_status: str) -> None:
        self.order_id = order_id
        self.expected_status = expected_status
        self.current_status = current_status
        super().__init__(f"Order {order_id} moved from {expected_status} to {current_status}")


class OrderService:
    """Service for order records and their status history.

    Input is assumed to be validated by the request schemas; ownership is
    checked by the route handlers.
    """

    def __init__(self) -> None:
        """Initialize order service with clients."""
        self.client = get_supabase_client()
        self.numbering = OrderNumberAllocator(self.client)
        self.activities = ActivityService(self.client)

    async def create_order(self, owner_id: UUID, data: OrderCreate) -> dict[str, Any]:
        """Place a new order.

        The order starts out ``pending`` with an empty timeline and zero
        progress, and gets a freshly allocated order number.

        Args:
            owner_id: The ordering user's UUID.
            data: Validated order payload.

        Returns:
            dict: The stored order row.
        """
        now = datetime.now(timezone.utc)
        order_number = await self.numbering.allocate(now)

        order_data = data.model_dump(mode="json")
        order_data.update(
            {
                "order_number": order_number,
                "user_id": str(owner_id),
                "status": OrderStatus.PENDING.value,
                "status_timeline": [],
                "progress_percentage": 0,
                "created_at": now.isoformat(),
                "updated_at": now.isoformat(),
            }
        )

        response = self.client.table("orders").insert(order_data).execute()
        order = response.data[0]
        logger.info("Order %s (%s) placed by %s", order["id"], order_number, owner_id)

        await self.activities.notify(
            {
                "user_id": str(owner_id),
                "type": "order_created",
                "related_id": order["id"],
                "title": "Order Placed",
                "description": f"Your order #{order_number} has been placed successfully",
            }
        )

        return order

    async def get_order(self, order_id: int) -> dict[str, Any] | None:
        """Get an order by ID.

        Args:
            order_id: The order's ID.

        Returns:
            dict | None: The order data or None if not found.
        """
        response = (
            self.client.table("orders")
            .select("*")
            .eq("id", order_id)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def get_order_by_number(self, order_number: str) -> dict[str, Any] | None:
        """Get an order by its human-readable number.

        Args:
            order_number: Order number such as ``DAS-2026-0042``.

        Returns:
            dict | None: The order data or None if not found.
        """
        response = (
            self.client.table("orders")
            .select("*")
            .eq("order_number", order_number)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def get_orders_for_user(self, owner_id: UUID) -> list[dict[str, Any]]:
        """Get all orders for a user, newest first.

        Args:
            owner_id: The owner's UUID.

        Returns:
            list[dict]: List of order data.
        """
        response = (
            self.client.table("orders")
            .select("*")
            .eq("user_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def _current_status(self, order_id: int) -> str | None:
        response = (
            self.client.table("orders")
            .select("status")
            .eq("id", order_id)
            .maybe_single()
            .execute()
        )
        return response.data["status"] if response and response.data else None

    async def advance_order_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        progress_percentage: int | None = None,
        note: str | None = None,
        expected_status: str | None = None,
    ) -> dict[str, Any] | None:
        """Move an order to a new status and record it on the timeline.

        The timeline append, status change and optional progress overwrite
        happen in a single database statement, so concurrent updates to the
        same order never drop each other's entries. Recording the same status
        twice appends a second entry.

        When ``expected_status`` is given the statement only applies while the
        order is still in that status, so a transition checked against an
        earlier read is never written over a newer one.

        Args:
            order_id: The order's ID.
            new_status: Status to move to.
            progress_percentage: New progress, or None to keep the current value.
            note: Optional note for the timeline entry.
            expected_status: Status the caller validated the transition against.

        Returns:
            dict | None: The updated order, or None if the order does not exist.

        Raises:
            OrderStatusChangedError: The order exists but is no longer in ``expected_status``.
        """
        now = datetime.now(timezone.utc)
        entry = build_timeline_entry(new_status, now=now, note=note)

        response = self.client.rpc(
            ADVANCE_STATUS_FUNCTION,
            {
                "p_order_id": order_id,
                "p_status": entry["status"],
                "p_entry": entry,
                "p_progress": progress_percentage,
                "p_updated_at": now.isoformat(),
                "p_expected_status": expected_status,
            },
        ).execute()

        rows = response.data or []
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            current_status = await self._current_status(order_id) if expected_status is not None else None
            if current_status is None:
                logger.warning("Order not found for status update: %s", order_id)
                return None
            logger.info(
                "Order %s status moved to %s before %s could be applied",
                order_id,
                current_status,
                entry["status"],
            )
            raise OrderStatusChangedError(order_id, expected_status, current_status)

        order = rows[0]
        logger.info("Order %s moved to %s", order_id, entry["status"])

        await self.activities.notify(
            {
                "user_id": order["user_id"],
                "type": "order_status_change",
                "related_id": order["id"],
                "title": "Order Status Updated",
                "description": f"Order #{order['order_number']} is now {status_label(entry['status'])}",
            }
        )

        return order
