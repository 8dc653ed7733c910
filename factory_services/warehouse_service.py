"""
WarehouseService -- raw stock receipts, reconciliation and the warehouse log.

Every change to raw stock that does not come from machine work goes through
here and leaves a signed WarehouseLog line, which keeps the conservation
equation ``sum(log) - active consumption == stock`` true for every key.
"""

from __future__ import annotations

from typing import Any

from factory_engines.raw_stock import RawStockTable
from factory_kernel.domain.records import RawStockEntry, WarehouseLog
from factory_kernel.domain.state import remove_by_id
from factory_kernel.domain.values import (
    MaterialSize,
    MaterialType,
    StockKey,
    parse_enum,
    parse_quantity,
    require_text,
)
from factory_kernel.exceptions import ValidationError
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService

logger = get_logger("services.warehouse")


class WarehouseService(BaseService):
    @staticmethod
    def _key(material_type: Any, size: Any, color: Any) -> StockKey:
        return StockKey(
            parse_enum(MaterialType, material_type, "material_type"),
            parse_enum(MaterialSize, size, "size"),
            require_text(color, "color"),
        )

    # -- queries ----------------------------------------------------------

    def stock(
        self,
        material_type: Any = None,
        size: Any = None,
    ) -> list[RawStockEntry]:
        """Stock rows, optionally narrowed to one material type and/or size."""
        mt = parse_enum(MaterialType, material_type, "material_type") if material_type else None
        sz = parse_enum(MaterialSize, size, "size") if size else None
        return [
            row
            for row in self.state.raw_stock
            if (mt is None or row.material_type is mt) and (sz is None or row.size is sz)
        ]

    def count(self, material_type: Any, size: Any, color: Any) -> int:
        return self.state.stock_count(self._key(material_type, size, color))

    def available_colors(self, material_type: Any, size: Any) -> list[str]:
        return RawStockTable.from_entries(self.state.raw_stock).available_colors(
            parse_enum(MaterialType, material_type, "material_type"),
            parse_enum(MaterialSize, size, "size"),
        )

    def warehouse_logs(self) -> tuple[WarehouseLog, ...]:
        """Log lines, newest first."""
        return self.state.warehouse_logs

    # -- commands ---------------------------------------------------------

    def add_stock_row(self, material_type: Any, size: Any, color: Any) -> RawStockEntry:
        """Register a (type, size, color) with zero bags; existing rows are kept."""
        key = self._key(material_type, size, color)
        state = self.state
        table = RawStockTable.from_entries(state.raw_stock).upsert(key)
        self._commit(state.evolve(raw_stock=table.to_entries()), "warehouse.add_row")
        return RawStockEntry(key.material_type, key.size, key.color, table.count(key))

    def receive_stock(
        self,
        material_type: Any,
        size: Any,
        color: Any,
        count: Any,
        date: str | None = None,
    ) -> WarehouseLog:
        """Add bags to a row (creating it) and log the receipt."""
        key = self._key(material_type, size, color)
        quantity = parse_quantity(count, "count")
        if quantity == 0:
            raise ValidationError("count", "must be greater than zero")
        log = WarehouseLog(
            id=self._new_id(),
            date=self._date(date),
            material_type=key.material_type,
            size=key.size,
            color=key.color,
            quantity=quantity,
        )
        with self._operation("warehouse.receive", record_id=log.id):
            state = self.state
            table = RawStockTable.from_entries(state.raw_stock).adjust(key, quantity)
            self._commit(
                state.evolve(
                    raw_stock=table.to_entries(),
                    warehouse_logs=(log, *state.warehouse_logs),
                ),
                "warehouse.receive",
            )
            logger.info(
                "stock_received",
                extra={"key": str(key), "quantity": quantity, "new_count": table.count(key)},
            )
        return log

    def set_count(
        self,
        material_type: Any,
        size: Any,
        color: Any,
        new_count: Any,
        date: str | None = None,
    ) -> WarehouseLog | None:
        """
        Manual reconciliation to a counted figure.

        Logs ``new - old`` as a signed line; returns None when the count
        already matched.
        """
        key = self._key(material_type, size, color)
        target = parse_quantity(new_count, "count")
        state = self.state
        table, log = RawStockTable.from_entries(state.raw_stock).set_count(
            key, target, log_id=self._new_id(), date=self._date(date)
        )
        logs = state.warehouse_logs if log is None else (log, *state.warehouse_logs)
        with self._operation("warehouse.reconcile", record_id=log.id if log else None):
            self._commit(
                state.evolve(raw_stock=table.to_entries(), warehouse_logs=logs),
                "warehouse.reconcile",
            )
            if log is not None:
                logger.info(
                    "stock_reconciled",
                    extra={"key": str(key), "delta": log.quantity, "new_count": target},
                )
        return log

    def delete_warehouse_log(self, log_id: str) -> None:
        """
        Remove a log line and undo its quantity.

        Raises InsufficientStockError when a receipt has already been
        consumed and undoing it would drive the row negative.
        """
        state = self.state
        log = state.warehouse_log(log_id)
        table = RawStockTable.from_entries(state.raw_stock).adjust(log.key, -log.quantity)
        with self._operation("warehouse.delete_log", record_id=log_id):
            self._commit(
                state.evolve(
                    raw_stock=table.to_entries(),
                    warehouse_logs=remove_by_id(state.warehouse_logs, log_id),
                ),
                "warehouse.delete_log",
            )
            logger.info(
                "warehouse_log_deleted",
                extra={"key": str(log.key), "reversed_quantity": -log.quantity},
            )
