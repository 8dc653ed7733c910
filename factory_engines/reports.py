"""
Module: factory_engines.reports
Responsibility:
    Read-only views derived from a DomainState: a model's production history,
    per-machine sellable stock, the expense summary, customer search and the
    raw stock conservation report.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Nothing here changes state.

Invariants enforced:
    - Conservation: for every stock key,
      sum(warehouse log) - sum(active machine-work consumption) == stock.
      ``conservation_report`` computes both sides so callers can assert it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from factory_kernel.domain.records import Customer, Expense
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import ExpenseCategory, MaterialSize, MaterialType, StockKey

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Model history
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelHistoryLine:
    date: str
    work_id: str
    machine_name: str
    quantity: int
    material_type: MaterialType
    size: MaterialSize
    color: str


def model_history(state: DomainState, model_id: str) -> list[ModelHistoryLine]:
    """Production entries that made ``model_id``, newest first."""
    state.model(model_id)
    lines = [
        ModelHistoryLine(
            date=work.date,
            work_id=work.id,
            machine_name=work.machine_name,
            quantity=entry.produced.quantity,
            material_type=entry.raw.material_type,
            size=entry.raw.size,
            color=entry.raw.color,
        )
        for work in state.machine_works
        for entry in work.entries
        if entry.produced.model_id == model_id
    ]
    # sorted() is stable, so same-day lines keep collection order.
    return sorted(lines, key=lambda line: line.date, reverse=True)


# ---------------------------------------------------------------------------
# Machine stock
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MachineStockOption:
    machine_name: str
    model_id: str
    model_name: str
    available: int


def machine_stock_options(state: DomainState) -> list[MachineStockOption]:
    """
    Units per (machine, model) still attributable to that machine.

    ``available = produced on the machine - sold from it``; only positive
    figures are listed.  This is a reporting view: sales are validated
    against the model's finished counter, not against these numbers.
    """
    produced: dict[tuple[str, str], int] = {}
    for work in state.machine_works:
        for entry in work.entries:
            k = (work.machine_name, entry.produced.model_id)
            produced[k] = produced.get(k, 0) + entry.produced.quantity

    sold: dict[tuple[str, str], int] = {}
    for customer in state.sales_customers:
        for invoice in customer.invoices:
            for item in invoice.items:
                k = (item.machine_name, item.model_id)
                sold[k] = sold.get(k, 0) + item.quantity

    machine_names = list(dict.fromkeys(w.machine_name for w in state.machine_works))
    options: list[MachineStockOption] = []
    for machine_name in machine_names:
        for model in state.models:
            k = (machine_name, model.id)
            available = produced.get(k, 0) - sold.get(k, 0)
            if available > 0:
                options.append(
                    MachineStockOption(machine_name, model.id, model.name, available)
                )
    return options


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpenseSummary:
    expenses: tuple[Expense, ...]
    total: Decimal
    filtered_total: Decimal
    by_category: dict[ExpenseCategory, Decimal]


def expense_summary(
    expenses: Iterable[Expense],
    category: ExpenseCategory | None = None,
    search: str | None = None,
) -> ExpenseSummary:
    """Filter by category and description substring (case-insensitive)."""
    everything = tuple(expenses)
    needle = (search or "").strip().lower()
    matching = tuple(
        e
        for e in everything
        if (category is None or e.category is category) and needle in e.description.lower()
    )
    by_category: dict[ExpenseCategory, Decimal] = {}
    for e in everything:
        by_category[e.category] = by_category.get(e.category, ZERO) + e.amount
    return ExpenseSummary(
        expenses=tuple(sorted(matching, key=lambda e: e.date, reverse=True)),
        total=sum((e.amount for e in everything), ZERO),
        filtered_total=sum((e.amount for e in matching), ZERO),
        by_category=by_category,
    )


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


def search_customers(customers: Iterable[Customer], query: str) -> list[Customer]:
    needle = query.strip().lower()
    if not needle:
        return list(customers)
    return [c for c in customers if needle in c.name.lower() or needle in c.phone]


# ---------------------------------------------------------------------------
# Conservation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConservationLine:
    key: StockKey
    logged: int
    consumed: int
    stock: int

    @property
    def balanced(self) -> bool:
        return self.logged - self.consumed == self.stock


def conservation_report(state: DomainState) -> list[ConservationLine]:
    """Both sides of the conservation equation for every key ever seen."""
    logged: dict[StockKey, int] = {}
    for log in state.warehouse_logs:
        logged[log.key] = logged.get(log.key, 0) + log.quantity

    consumed: dict[StockKey, int] = {}
    for work in state.machine_works:
        for entry in work.entries:
            key = entry.raw.key
            consumed[key] = consumed.get(key, 0) + entry.raw.quantity

    stock = {row.key: row.count for row in state.raw_stock}
    keys = sorted({*logged, *consumed, *stock})
    return [
        ConservationLine(k, logged.get(k, 0), consumed.get(k, 0), stock.get(k, 0))
        for k in keys
    ]
