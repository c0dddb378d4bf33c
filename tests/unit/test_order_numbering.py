"""Unit tests for order number allocation."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.services.order_numbering import (
    OrderNumberAllocator,
    format_order_number,
    parse_order_number,
)


class TestFormatOrderNumber:
    """Tests for format_order_number."""

    def test_pads_sequence_to_four_digits(self) -> None:
        assert format_order_number(2026, 42) == "DAS-2026-0042"

    def test_keeps_wide_sequences_intact(self) -> None:
        assert format_order_number(2026, 123456) == "DAS-2026-123456"

    @pytest.mark.parametrize("year", [999, 10000])
    def test_rejects_non_four_digit_year(self, year: int) -> None:
        with pytest.raises(ValueError, match="four digits"):
            format_order_number(year, 1)

    def test_rejects_non_positive_sequence(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            format_order_number(2026, 0)


class TestParseOrderNumber:
    """Tests for parse_order_number."""

    def test_splits_components(self) -> None:
        assert parse_order_number("DAS-2026-5601") == (2026, 5601)

    @pytest.mark.parametrize(
        "value",
        ["DAS-26-0001", "ABC-2026-0001", "DAS-2026-01", "DAS-2026-00x1", "das-2026-0001", ""],
    )
    def test_rejects_malformed_values(self, value: str) -> None:
        assert parse_order_number(value) is None


class TestOrderNumberAllocator:
    """Tests for OrderNumberAllocator."""

    @pytest.mark.asyncio
    async def test_uses_database_sequence(self) -> None:
        """Test that the number comes from the next_order_sequence RPC."""
        client = MagicMock()
        client.rpc.return_value.execute.return_value = MagicMock(data=5601)

        allocator = OrderNumberAllocator(client)
        number = await allocator.allocate(datetime(2026, 3, 1, tzinfo=timezone.utc))

        client.rpc.assert_called_once_with("next_order_sequence")
        assert number == "DAS-2026-5601"

    @pytest.mark.asyncio
    async def test_accepts_list_shaped_rpc_result(self) -> None:
        client = MagicMock()
        client.rpc.return_value.execute.return_value = MagicMock(data=[7])

        assert await OrderNumberAllocator(client).next_sequence() == 7

    @pytest.mark.asyncio
    async def test_raises_when_sequence_returns_nothing(self) -> None:
        client = MagicMock()
        client.rpc.return_value.execute.return_value = MagicMock(data=None)

        with pytest.raises(RuntimeError, match="no value"):
            await OrderNumberAllocator(client).next_sequence()

    @pytest.mark.asyncio
    async def test_never_counts_existing_rows(self) -> None:
        """Test that allocation does not query the orders table."""
        client = MagicMock()
        client.rpc.return_value.execute.return_value = MagicMock(data=3)

        await OrderNumberAllocator(client).allocate()

        client.table.assert_not_called()
