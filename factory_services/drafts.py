"""
Draft lines -- unvalidated entry input as it arrives from a form or caller.

Drafts never enter DomainState.  The ``to_*`` converters validate a list of
drafts and return frozen records, or raise ValidationError naming the first
offending field (prefixed with the line index).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from factory_kernel.domain.records import (
    InvoiceItem,
    ProcessingEntry,
    ProducedOutput,
    ProductionEntry,
    RawConsumption,
)
from factory_kernel.domain.values import (
    MaterialSize,
    MaterialType,
    parse_enum,
    parse_money,
    parse_quantity,
    require_text,
)
from factory_kernel.exceptions import ValidationError


@dataclass
class ProductionLine:
    """One production row: raw bags consumed and units of a model produced."""

    material_type: Any
    size: Any
    color: Any
    raw_quantity: Any
    model_id: Any
    quantity: Any
    price: Any = 0


@dataclass
class ProcessingLine:
    model_id: Any
    quantity_sent: Any
    quantity_received: Any = 0
    price: Any = 0


@dataclass
class InvoiceLine:
    model_id: Any
    machine_name: Any
    quantity: Any
    price: Any = 0


def _require_lines(lines: Sequence[Any]) -> None:
    if not lines:
        raise ValidationError("entries", "at least one line is required")


def to_production_entries(lines: Sequence[ProductionLine]) -> tuple[ProductionEntry, ...]:
    _require_lines(lines)
    entries = []
    for i, line in enumerate(lines):
        p = f"entries[{i}]."
        entries.append(
            ProductionEntry(
                raw=RawConsumption(
                    material_type=parse_enum(MaterialType, line.material_type, p + "material_type"),
                    size=parse_enum(MaterialSize, line.size, p + "size"),
                    color=require_text(line.color, p + "color"),
                    quantity=parse_quantity(line.raw_quantity, p + "raw_quantity"),
                ),
                produced=ProducedOutput(
                    model_id=require_text(line.model_id, p + "model_id"),
                    quantity=parse_quantity(line.quantity, p + "quantity"),
                    price=parse_money(line.price, p + "price"),
                ),
            )
        )
    return tuple(entries)


def to_processing_entries(lines: Sequence[ProcessingLine]) -> tuple[ProcessingEntry, ...]:
    _require_lines(lines)
    return tuple(
        ProcessingEntry(
            model_id=require_text(line.model_id, f"entries[{i}].model_id"),
            quantity_sent=parse_quantity(line.quantity_sent, f"entries[{i}].quantity_sent"),
            quantity_received=parse_quantity(
                line.quantity_received, f"entries[{i}].quantity_received"
            ),
            price=parse_money(line.price, f"entries[{i}].price"),
        )
        for i, line in enumerate(lines)
    )


def to_invoice_items(lines: Sequence[InvoiceLine]) -> tuple[InvoiceItem, ...]:
    """A sold line must move at least one unit; zero-quantity lines are refused."""
    _require_lines(lines)
    items = []
    for i, line in enumerate(lines):
        p = f"items[{i}]."
        quantity = parse_quantity(line.quantity, p + "quantity")
        if quantity == 0:
            raise ValidationError(p + "quantity", "must be greater than zero")
        items.append(
            InvoiceItem(
                model_id=require_text(line.model_id, p + "model_id"),
                machine_name=require_text(line.machine_name, p + "machine_name"),
                quantity=quantity,
                price=parse_money(line.price, p + "price"),
            )
        )
    return tuple(items)
