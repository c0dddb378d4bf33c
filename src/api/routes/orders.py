"""Order API routes."""

from typing import Any

from fastapi import APIRouter, status

from src.api.deps import CurrentUser, is_staff
from src.api.middleware.error_handler import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.schemas.auth import UserContext
from src.schemas.order import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderTimelineResponse,
    StatusTimelineEntrySchema,
    TimelineStepSchema,
)
from src.services.order_numbering import parse_order_number
from src.services.order_service import OrderService, OrderStatusChangedError
from src.services.timeline_service import allowed_transitions, is_valid_transition, project_timeline

router = APIRouter(prefix="/orders", tags=["orders"])

# Re-checks against a freshly read status before giving up on a racing update.
STATUS_UPDATE_ATTEMPTS = 3


def _ensure_access(order: dict[str, Any], user: UserContext) -> None:
    """Raise unless the user owns the order or is staff."""
    if str(order["user_id"]) != str(user.user_id) and not is_staff(user):
        raise AuthorizationError("Not authorized to access this order")


async def _get_accessible_order(service: OrderService, order_id: int, user: UserContext) -> dict[str, Any]:
    order = await service.get_order(order_id)
    if not order:
        raise NotFoundError("Order not found")
    _ensure_access(order, user)
    return order


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    description="Places a bulk order for the authenticated user and assigns its order number.",
)
async def create_order(data: OrderCreate, user: CurrentUser) -> OrderResponse:
    """Place a new order.

    Args:
        data: Validated order payload.
        user: Authenticated user placing the order.

    Returns:
        OrderResponse: The created order, status ``pending``.
    """
    service = OrderService()
    order = await service.create_order(user.user_id, data)
    return OrderResponse(**order)


@router.get(
    "",
    response_model=OrderListResponse,
    summary="List my orders",
    description="Returns all orders placed by the authenticated user, newest first.",
)
async def list_orders(user: CurrentUser) -> OrderListResponse:
    """List the caller's orders."""
    service = OrderService()
    orders = await service.get_orders_for_user(user.user_id)
    return OrderListResponse(items=[OrderResponse(**order) for order in orders])


@router.get(
    "/number/{order_number}",
    response_model=OrderResponse,
    summary="Get order by order number",
    description="Looks up an order by its human-readable number. Only accessible by the order owner.",
)
async def get_order_by_number(order_number: str, user: CurrentUser) -> OrderResponse:
    """Get a single order by its order number.

    Raises:
        ValidationError: 422 if the value is not an order number.
        NotFoundError: 404 if no order has this number.
        AuthorizationError: 403 if the caller does not own the order.
    """
    if parse_order_number(order_number) is None:
        raise ValidationError(f"Malformed order number: {order_number}")

    service = OrderService()
    order = await service.get_order_by_number(order_number)
    if not order:
        raise NotFoundError("Order not found")
    _ensure_access(order, user)
    return OrderResponse(**order)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order by ID",
    description="Returns a single order by ID. Only accessible by the order owner.",
)
async def get_order(order_id: int, user: CurrentUser) -> OrderResponse:
    """Get a single order by ID.

    Raises:
        NotFoundError: 404 if order not found.
        AuthorizationError: 403 if not authorized to view this order.
    """
    service = OrderService()
    order = await _get_accessible_order(service, order_id, user)
    return OrderResponse(**order)


@router.get(
    "/{order_id}/timeline",
    response_model=OrderTimelineResponse,
    summary="Get order status timeline",
    description="Projects the order's history onto the fulfillment track.",
)
async def get_order_timeline(order_id: int, user: CurrentUser) -> OrderTimelineResponse:
    """Get the tracking view of an order.

    Every fulfillment status is marked completed, current or future, and the
    raw history is returned alongside.
    """
    service = OrderService()
    order = await _get_accessible_order(service, order_id, user)
    timeline = order.get("status_timeline") or []

    steps = project_timeline(order["status"], timeline)

    return OrderTimelineResponse(
        order_id=order["id"],
        order_number=order["order_number"],
        status=order["status"],
        progress_percentage=order.get("progress_percentage") or 0,
        steps=[
            TimelineStepSchema(status=step.status, state=step.state, timestamp=step.timestamp, note=step.note)
            for step in steps
        ],
        entries=[StatusTimelineEntrySchema(**entry) for entry in timeline],
        allowed_transitions=allowed_transitions(order["status"]),
    )


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Advance order status",
    description="Moves the order to a new status and records it on the timeline.",
)
async def update_order_status(order_id: int, data: OrderStatusUpdate, user: CurrentUser) -> OrderResponse:
    """Advance an order along the fulfillment track.

    Raises:
        NotFoundError: 404 if order not found.
        AuthorizationError: 403 if the caller is neither owner nor staff.
        InvalidTransitionError: 409 if the order cannot move to the requested status,
            including when a concurrent update moved it past the requested one.
        ConflictError: 409 if the status kept changing under the request.
    """
    service = OrderService()
    order = await _get_accessible_order(service, order_id, user)
    current_status = order["status"]

    for _ in range(STATUS_UPDATE_ATTEMPTS):
        if not is_valid_transition(current_status, data.status):
            allowed = [s.value for s in allowed_transitions(current_status)]
            raise InvalidTransitionError(current_status, data.status.value, allowed)

        try:
            updated = await service.advance_order_status(
                order_id,
                data.status,
                progress_percentage=data.progress_percentage,
                note=data.note,
                expected_status=current_status,
            )
        except OrderStatusChangedError as e:
            current_status = e.current_status
            continue

        if not updated:
            raise NotFoundError("Order not found")
        return OrderResponse(**updated)

    raise ConflictError("Order status keeps changing; retry the request")
