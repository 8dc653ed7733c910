"""Tests for the Raw Stock Table (factory_engines/raw_stock.py)."""

import pytest

from factory_engines.raw_stock import RawStockTable
from factory_kernel.domain.records import RawStockEntry
from factory_kernel.domain.values import MaterialSize, MaterialType, StockKey
from factory_kernel.exceptions import InsufficientStockError, ValidationError

WHITE = StockKey(MaterialType.DOUGH, MaterialSize.SIZE_24, "white")
BLUE = StockKey(MaterialType.DOUGH, MaterialSize.SIZE_24, "blue")
RED = StockKey(MaterialType.ANDY, MaterialSize.SIZE_18, "red")


class TestReads:
    def setup_method(self):
        self.table = RawStockTable.from_entries(
            [
                RawStockEntry(MaterialType.DOUGH, MaterialSize.SIZE_24, "white", 6),
                RawStockEntry(MaterialType.DOUGH, MaterialSize.SIZE_24, "blue", 0),
                RawStockEntry(MaterialType.ANDY, MaterialSize.SIZE_18, "red", 3),
            ]
        )

    def test_get(self):
        assert self.table.get(MaterialType.DOUGH, MaterialSize.SIZE_24, "white") == 6

    def test_missing_key_is_zero(self):
        assert self.table.count(StockKey(MaterialType.ANDY, MaterialSize.SIZE_24, "x")) == 0

    def test_available_colors_skip_empty_rows(self):
        assert self.table.available_colors(MaterialType.DOUGH, MaterialSize.SIZE_24) == ["white"]

    def test_entries_keep_order(self):
        assert [e.key for e in self.table.to_entries()] == [WHITE, BLUE, RED]


class TestAdjust:
    """Checked adjustments never go negative."""

    def test_adjust_creates_row(self):
        table = RawStockTable().adjust(RED, 5)
        assert table.count(RED) == 5

    def test_adjust_below_zero_raises(self):
        table = RawStockTable({WHITE: 2})
        with pytest.raises(InsufficientStockError) as exc_info:
            table.adjust(WHITE, -3)
        assert (exc_info.value.required, exc_info.value.available) == (3, 2)
        assert table.count(WHITE) == 2

    def test_apply_deltas_all_or_nothing(self):
        table = RawStockTable({WHITE: 5, RED: 1})
        with pytest.raises(InsufficientStockError):
            table.apply_deltas({WHITE: -5, RED: -2})
        assert table.as_dict() == {WHITE: 5, RED: 1}

    def test_upsert_keeps_existing(self):
        table = RawStockTable({WHITE: 5})
        assert table.upsert(WHITE) is table
        assert table.upsert(BLUE).count(BLUE) == 0


class TestSetCount:
    """Manual reconciliation logs the signed difference."""

    def test_scenario_d(self):
        """6 -> 20 logs +14; 20 -> 3 logs -17."""
        table = RawStockTable({WHITE: 6})
        table, up = table.set_count(WHITE, 20, log_id="l1", date="2024-01-01")
        assert up.quantity == 14
        assert table.count(WHITE) == 20
        table, down = table.set_count(WHITE, 3, log_id="l2", date="2024-01-02")
        assert down.quantity == -17
        assert down.key == WHITE
        assert table.count(WHITE) == 3

    def test_zero_delta_logs_nothing(self):
        table = RawStockTable({WHITE: 6})
        same, log = table.set_count(WHITE, 6, log_id="l1", date="2024-01-01")
        assert log is None
        assert same == table

    def test_negative_target_rejected(self):
        with pytest.raises(ValidationError):
            RawStockTable({WHITE: 6}).set_count(WHITE, -1, log_id="l1", date="2024-01-01")

    def test_new_key_created(self):
        table, log = RawStockTable().set_count(RED, 4, log_id="l1", date="2024-01-01")
        assert table.count(RED) == 4
        assert log.quantity == 4
