"""Status timeline rules and read model.

The timeline is an append-only list of ``{status, timestamp, note}`` entries.
A status may appear more than once; consumers pick the latest entry per
status. Rendering always follows CANONICAL_STATUS_ORDER rather than entry
timestamps, because statuses can be skipped or recorded again.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from src.models.order import OrderStatus, StatusTimelineEntry

CANONICAL_STATUS_ORDER: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.AWAITING_APPROVAL,
    OrderStatus.CONFIRMED,
    OrderStatus.PAYMENT_RECEIVED,
    OrderStatus.PRODUCTION_STARTED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

# Only shown on the track when the order actually went through them.
SIDE_BRANCH_STATUSES = frozenset({OrderStatus.AWAITING_APPROVAL})

TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED})

_STATUS_RANK = {status: rank for rank, status in enumerate(CANONICAL_STATUS_ORDER)}


class StepState(str, Enum):
    """How a canonical status relates to an order's history."""

    COMPLETED = "completed"
    CURRENT = "current"
    FUTURE = "future"


@dataclass(frozen=True)
class TimelineStep:
    """One canonical status projected onto an order."""

    status: OrderStatus
    state: StepState
    timestamp: datetime | None = None
    note: str | None = None


def status_label(status: str) -> str:
    """Human-readable label, e.g. ``in_production`` -> ``In Production``."""
    return " ".join(word.capitalize() for word in status.split("_"))


def status_note(status: str) -> str:
    """Default note recorded with a status change."""
    return f"Order status updated to {status}"


def build_timeline_entry(
    status: OrderStatus | str,
    now: datetime | None = None,
    note: str | None = None,
) -> StatusTimelineEntry:
    """Create the timeline entry appended for a status change.

    Args:
        status: The new status.
        now: Clock override; defaults to the current UTC time.
        note: Free-text note; defaults to a generated description.

    Returns:
        StatusTimelineEntry: Entry ready to be stored in the JSONB array.
    """
    value = status.value if isinstance(status, OrderStatus) else status
    timestamp = now or datetime.now(timezone.utc)
    return {
        "status": value,
        "timestamp": timestamp.isoformat(),
        "note": note or status_note(value),
    }


def parse_timestamp(value: str) -> datetime:
    """Parse a stored ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_status(value: str) -> OrderStatus | None:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_valid_transition(current: str, new: OrderStatus) -> bool:
    """Decide whether an order in ``current`` may move to ``new``.

    Recording the same status again is allowed, as is moving to any later
    status on the canonical track. Moving backwards is not. The approval
    side-branch can only be entered from ``pending``. Terminal statuses are
    neither entered nor left through this path, and a status outside the
    enum goes nowhere.
    """
    if new in TERMINAL_STATUSES:
        return False

    current_status = _as_status(current)
    if current_status is None or current_status in TERMINAL_STATUSES:
        return False
    if new == current_status:
        return True
    if new == OrderStatus.AWAITING_APPROVAL:
        return current_status == OrderStatus.PENDING
    return _STATUS_RANK[new] > _STATUS_RANK[current_status]


def allowed_transitions(current: str) -> list[OrderStatus]:
    """List the statuses an order in ``current`` may move to, in track order."""
    return [status for status in CANONICAL_STATUS_ORDER if is_valid_transition(current, status)]


def latest_entries(timeline: Iterable[StatusTimelineEntry] | None) -> dict[str, StatusTimelineEntry]:
    """Pick the most recent entry for every status present in the timeline."""
    latest: dict[str, tuple[datetime, StatusTimelineEntry]] = {}
    for entry in timeline or []:
        timestamp = parse_timestamp(entry["timestamp"])
        seen = latest.get(entry["status"])
        if seen is None or timestamp >= seen[0]:
            latest[entry["status"]] = (timestamp, entry)
    return {status: entry for status, (_, entry) in latest.items()}


def project_timeline(
    current_status: str,
    timeline: Iterable[StatusTimelineEntry] | None,
) -> list[TimelineStep]:
    """Project an order's history onto the canonical status track.

    Each canonical status is marked ``current`` when it equals the order's
    status, ``completed`` when it appears in the timeline, and ``future``
    otherwise. Side-branch statuses are omitted unless the order visited them.

    Args:
        current_status: The order's current status.
        timeline: The order's stored timeline entries.

    Returns:
        list[TimelineStep]: Steps in canonical order.
    """
    latest = latest_entries(timeline)
    steps: list[TimelineStep] = []

    for status in CANONICAL_STATUS_ORDER:
        entry = latest.get(status.value)
        is_current = status.value == current_status

        if status in SIDE_BRANCH_STATUSES and entry is None and not is_current:
            continue

        if is_current:
            state = StepState.CURRENT
        elif entry is not None:
            state = StepState.COMPLETED
        else:
            state = StepState.FUTURE

        steps.append(
            TimelineStep(
                status=status,
                state=state,
                timestamp=parse_timestamp(entry["timestamp"]) if entry else None,
                note=entry.get("note") if entry else None,
            )
        )

    return steps
