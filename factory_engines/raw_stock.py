"""
Module: factory_engines.raw_stock
Responsibility:
    The Raw Stock Table: bags on hand keyed by (material type, size, color),
    with checked adjustments, upserts and manual reconciliation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Every method returns a new
    table; the caller decides when (and whether) to commit it.

Invariants enforced:
    - No row is ever negative.  An adjustment that would go below zero raises
      before anything changes.
    - ``apply_deltas`` validates every key before applying any of them.
    - Row order is preserved (first-seen order) so stored documents are stable.

Failure modes:
    - InsufficientStockError(resource="raw_stock") when a row would go negative.
    - ValidationError for a negative reconciliation target.

Usage:
    table = RawStockTable.from_entries(state.raw_stock)
    table = table.adjust(key, -4)
    table, log = table.set_count(key, 20, log_id="...", date="2024-01-01")
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from factory_kernel.domain.records import RawStockEntry, WarehouseLog
from factory_kernel.domain.values import MaterialSize, MaterialType, StockKey
from factory_kernel.exceptions import InsufficientStockError, ValidationError
from factory_kernel.logging_config import get_logger

logger = get_logger("engines.raw_stock")

RAW_STOCK = "raw_stock"


class RawStockTable:
    """
    Immutable keyed balance of bagged raw material.

    Contract:
        Treat instances as values.  Mutating methods return a new table.
    """

    __slots__ = ("_counts",)

    def __init__(self, counts: Mapping[StockKey, int] | None = None):
        self._counts: dict[StockKey, int] = dict(counts or {})
        for key, count in self._counts.items():
            if count < 0:
                raise InsufficientStockError(RAW_STOCK, str(key), required=-count, available=0)

    @classmethod
    def from_entries(cls, entries: Iterable[RawStockEntry]) -> RawStockTable:
        counts: dict[StockKey, int] = {}
        for entry in entries:
            counts[entry.key] = counts.get(entry.key, 0) + entry.count
        return cls(counts)

    # -- reads ------------------------------------------------------------

    def get(self, material_type: MaterialType, size: MaterialSize, color: str) -> int:
        return self.count(StockKey(material_type, size, color))

    def count(self, key: StockKey) -> int:
        return self._counts.get(key, 0)

    def __contains__(self, key: StockKey) -> bool:
        return key in self._counts

    def __iter__(self) -> Iterator[StockKey]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawStockTable):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def as_dict(self) -> dict[StockKey, int]:
        return dict(self._counts)

    def available_colors(self, material_type: MaterialType, size: MaterialSize) -> list[str]:
        """Colors with bags on hand for a (type, size), in table order."""
        return [
            key.color
            for key, count in self._counts.items()
            if key.material_type is material_type and key.size is size and count > 0
        ]

    def to_entries(self) -> tuple[RawStockEntry, ...]:
        return tuple(
            RawStockEntry(key.material_type, key.size, key.color, count)
            for key, count in self._counts.items()
        )

    # -- writes -----------------------------------------------------------

    def upsert(self, key: StockKey, count: int = 0) -> RawStockTable:
        """Create the row if absent; an existing row is left untouched."""
        if key in self._counts:
            return self
        if count < 0:
            raise ValidationError("count", f"cannot be negative (got {count})")
        counts = dict(self._counts)
        counts[key] = count
        return RawStockTable(counts)

    def adjust(self, key: StockKey, delta: int) -> RawStockTable:
        """Add ``delta`` (signed) to one row, creating it if needed."""
        return self.apply_deltas({key: delta})

    def apply_deltas(self, deltas: Mapping[StockKey, int]) -> RawStockTable:
        """Apply signed deltas to many rows, all or nothing."""
        for key in sorted(deltas):
            delta = deltas[key]
            current = self.count(key)
            if current + delta < 0:
                raise InsufficientStockError(
                    RAW_STOCK, str(key), required=-delta, available=current
                )
        counts = dict(self._counts)
        for key, delta in deltas.items():
            if delta == 0 and key in counts:
                continue
            counts[key] = counts.get(key, 0) + delta
        return RawStockTable(counts)

    def set_count(
        self,
        key: StockKey,
        new_count: int,
        *,
        log_id: str,
        date: str,
    ) -> tuple[RawStockTable, WarehouseLog | None]:
        """
        Manual reconciliation: set a row to ``new_count``.

        Returns the new table and the signed log line recording
        ``delta = new_count - old_count`` (None when nothing changed).
        """
        if new_count < 0:
            raise ValidationError("count", f"cannot be negative (got {new_count})")
        delta = new_count - self.count(key)
        if delta == 0:
            return self.upsert(key), None
        table = self.adjust(key, delta)
        log = WarehouseLog(
            id=log_id,
            date=date,
            material_type=key.material_type,
            size=key.size,
            color=key.color,
            quantity=delta,
        )
        logger.debug(
            "raw_stock_count_set",
            extra={"key": str(key), "old_count": new_count - delta, "new_count": new_count},
        )
        return table, log
