"""
Factory Domain Records (``factory_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for every persisted noun: raw stock rows, warehouse
log lines, fabric models, machine work, processing work, customers with
their invoices and payments, and expenses.

Architecture
------------
Layer: **Kernel > Domain** -- pure data.  Records carry no I/O and no
counter arithmetic; the Inventory Ledger in ``factory_engines`` is the only
code that derives new counter values.  Form/draft state never becomes a
record without passing through a service validator.

Invariants
----------
- ``RawStockEntry.count``, ``FabricModel.finished_count`` and
  ``FabricModel.in_production_count`` are never negative.
- Work records hold at least one entry.
- Entry quantities are non-negative ints; prices and amounts are ``Decimal``.

Failure Modes
-------------
- Construction with a negative counter or an empty entry list raises
  ``ValidationError`` immediately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from factory_kernel.domain.values import (
    ExpenseCategory,
    MaterialSize,
    MaterialType,
    StockKey,
)
from factory_kernel.exceptions import ValidationError


def _non_negative(value: int, field_name: str) -> None:
    if value < 0:
        raise ValidationError(field_name, f"cannot be negative (got {value})")


# ---------------------------------------------------------------------------
# Warehouse
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawStockEntry:
    """Bags on hand for one (type, size, color)."""

    material_type: MaterialType
    size: MaterialSize
    color: str
    count: int = 0

    def __post_init__(self) -> None:
        _non_negative(self.count, "count")

    @property
    def key(self) -> StockKey:
        return StockKey(self.material_type, self.size, self.color)


@dataclass(frozen=True)
class WarehouseLog:
    """
    Signed movement of raw stock.

    Positive for receipts and upward reconciliations, negative for downward
    reconciliations and write-offs.
    """

    id: str
    date: str
    material_type: MaterialType
    size: MaterialSize
    color: str
    quantity: int

    @property
    def key(self) -> StockKey:
        return StockKey(self.material_type, self.size, self.color)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FabricModel:
    """
    A knitted garment model and its two stock counters.

    ``in_production_count`` -- produced by machines, not yet through processing.
    ``finished_count`` -- received back from processing, sellable.
    """

    id: str
    name: str
    code: str
    length: Decimal = Decimal("0")
    width: Decimal = Decimal("0")
    sleeve_length: Decimal = Decimal("0")
    sleeve_width: Decimal = Decimal("0")
    neck_type: str = ""
    finished_count: int = 0
    in_production_count: int = 0
    image_url: str | None = None

    def __post_init__(self) -> None:
        _non_negative(self.finished_count, "finished_count")
        _non_negative(self.in_production_count, "in_production_count")


# ---------------------------------------------------------------------------
# Machine work (production)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawConsumption:
    material_type: MaterialType
    size: MaterialSize
    color: str
    quantity: int

    @property
    def key(self) -> StockKey:
        return StockKey(self.material_type, self.size, self.color)


@dataclass(frozen=True)
class ProducedOutput:
    model_id: str
    quantity: int
    price: Decimal = Decimal("0")


@dataclass(frozen=True)
class ProductionEntry:
    """Consumes raw bags of one key and yields units of one model."""

    raw: RawConsumption
    produced: ProducedOutput

    @property
    def value(self) -> Decimal:
        return self.produced.price * self.produced.quantity


@dataclass(frozen=True)
class MachineWork:
    id: str
    customer_id: str
    machine_name: str
    date: str
    entries: tuple[ProductionEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.entries:
            raise ValidationError("entries", "at least one production line is required")

    @property
    def value(self) -> Decimal:
        """Amount owed to the producer for this run."""
        return sum((e.value for e in self.entries), Decimal("0"))


# ---------------------------------------------------------------------------
# Processing (outsourced finishing)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessingEntry:
    """
    Units of one model sent out and received back.

    Sent and received are independent; partial or lossy processing is allowed.
    """

    model_id: str
    quantity_sent: int
    quantity_received: int
    price: Decimal = Decimal("0")

    @property
    def value(self) -> Decimal:
        return self.price * self.quantity_received


@dataclass(frozen=True)
class ProcessingWork:
    id: str
    customer_id: str
    machine_name: str
    date: str
    entries: tuple[ProcessingEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.entries:
            raise ValidationError("entries", "at least one processing line is required")

    @property
    def value(self) -> Decimal:
        """Amount owed to the contractor for this batch."""
        return sum((e.value for e in self.entries), Decimal("0"))


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvoiceItem:
    model_id: str
    machine_name: str
    quantity: int
    price: Decimal = Decimal("0")

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Invoice:
    id: str
    date: str
    items: tuple[InvoiceItem, ...]
    total: Decimal

    @classmethod
    def build(cls, id: str, date: str, items: tuple[InvoiceItem, ...]) -> Invoice:
        return cls(
            id=id,
            date=date,
            items=items,
            total=sum((i.amount for i in items), Decimal("0")),
        )


@dataclass(frozen=True)
class Payment:
    id: str
    date: str
    amount: Decimal


@dataclass(frozen=True)
class Customer:
    """
    A counterparty account: name, phone, invoices and payments.

    The same shape serves producers, processing contractors and sales
    customers; the role is the collection the record lives in.
    """

    id: str
    name: str
    phone: str = ""
    invoices: tuple[Invoice, ...] = ()
    payments: tuple[Payment, ...] = ()


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    id: str
    date: str
    category: ExpenseCategory
    description: str
    amount: Decimal
