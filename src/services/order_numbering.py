"""Human-readable order number allocation.

Order numbers look like ``DAS-2026-0042``: a fixed prefix, the calendar year
the order was placed in, and a running sequence drawn from the
``order_number_seq`` Postgres sequence. The sequence is shared by every
service instance and is never reset or recomputed, so a number is never
handed out twice.
"""

import logging
import re
from datetime import datetime, timezone

from supabase import Client

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "DAS"
SEQUENCE_MIN_WIDTH = 4
NEXT_SEQUENCE_FUNCTION = "next_order_sequence"

ORDER_NUMBER_PATTERN = re.compile(
    rf"^{ORDER_NUMBER_PREFIX}-(?P<year>\d{{4}})-(?P<sequence>\d{{{SEQUENCE_MIN_WIDTH},}})$"
)


def format_order_number(year: int, sequence: int) -> str:
    """Build an order number from its year and sequence components.

    Args:
        year: Four-digit calendar year.
        sequence: Positive running sequence value.

    Returns:
        str: Order number such as ``DAS-2026-0042``.

    Raises:
        ValueError: If the year is not four digits or the sequence is not positive.
    """
    if not 1000 <= year <= 9999:
        raise ValueError(f"Year must have four digits, got {year}")
    if sequence < 1:
        raise ValueError(f"Sequence must be positive, got {sequence}")
    return f"{ORDER_NUMBER_PREFIX}-{year}-{sequence:0{SEQUENCE_MIN_WIDTH}d}"


def parse_order_number(order_number: str) -> tuple[int, int] | None:
    """Split an order number into (year, sequence).

    Returns:
        tuple | None: The components, or None if the value is not an order number.
    """
    match = ORDER_NUMBER_PATTERN.match(order_number)
    if not match:
        return None
    return int(match.group("year")), int(match.group("sequence"))


class OrderNumberAllocator:
    """Draws order numbers from the storage-side sequence."""

    def __init__(self, client: Client) -> None:
        self.client = client

    async def next_sequence(self) -> int:
        """Atomically take the next value of the order number sequence.

        Raises:
            RuntimeError: If the database returned no value.
        """
        response = self.client.rpc(NEXT_SEQUENCE_FUNCTION).execute()
        value = response.data
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            raise RuntimeError("Order number sequence returned no value")
        return int(value)

    async def allocate(self, now: datetime | None = None) -> str:
        """Allocate a fresh order number stamped with the current year.

        Args:
            now: Clock override; defaults to the current UTC time.

        Returns:
            str: A never-before-issued order number.
        """
        now = now or datetime.now(timezone.utc)
        sequence = await self.next_sequence()
        order_number = format_order_number(now.year, sequence)
        logger.debug("Allocated order number %s", order_number)
        return order_number
