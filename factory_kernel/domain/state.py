"""
DomainState -- the whole factory as one immutable snapshot.

Responsibility:
    Holds every collection (raw stock, warehouse log, models, machine work,
    processing work, the three customer-role collections, expenses) and
    offers id lookups plus copy-on-write replacement helpers.

Architecture position:
    Kernel > Domain -- pure.  Engines read a snapshot and return a new one;
    the DomainStateStore swaps snapshots at a single commit point, so an
    error raised while computing the next snapshot can never leave partially
    updated counters behind.

Invariants enforced:
    - Snapshots are never mutated in place (frozen dataclass of tuples).
    - Lookups of missing ids raise the matching ``NotFoundError`` subclass.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable, TypeVar

from factory_kernel.domain.records import (
    Customer,
    Expense,
    FabricModel,
    MachineWork,
    ProcessingWork,
    RawStockEntry,
    WarehouseLog,
)
from factory_kernel.domain.values import CustomerRole, StockKey
from factory_kernel.exceptions import (
    CustomerNotFoundError,
    ExpenseNotFoundError,
    MachineWorkNotFoundError,
    ModelNotFoundError,
    NotFoundError,
    ProcessingWorkNotFoundError,
    WarehouseLogNotFoundError,
)

T = TypeVar("T")

_ROLE_FIELDS: dict[CustomerRole, str] = {
    CustomerRole.PRODUCER: "producers",
    CustomerRole.PROCESSOR: "processors",
    CustomerRole.SALES: "sales_customers",
}


def _find(items: Iterable[T], item_id: str, error: type[NotFoundError]) -> T:
    for item in items:
        if item.id == item_id:  # type: ignore[attr-defined]
            return item
    raise error(item_id)


def replace_by_id(items: tuple[T, ...], item_id: str, new: T) -> tuple[T, ...]:
    return tuple(new if i.id == item_id else i for i in items)  # type: ignore[attr-defined]


def remove_by_id(items: tuple[T, ...], item_id: str) -> tuple[T, ...]:
    return tuple(i for i in items if i.id != item_id)  # type: ignore[attr-defined]


@dataclass(frozen=True)
class DomainState:
    raw_stock: tuple[RawStockEntry, ...] = ()
    warehouse_logs: tuple[WarehouseLog, ...] = ()
    models: tuple[FabricModel, ...] = ()
    machine_works: tuple[MachineWork, ...] = ()
    processing_works: tuple[ProcessingWork, ...] = ()
    producers: tuple[Customer, ...] = ()
    processors: tuple[Customer, ...] = ()
    sales_customers: tuple[Customer, ...] = ()
    expenses: tuple[Expense, ...] = ()

    # -- lookups ----------------------------------------------------------

    def model(self, model_id: str) -> FabricModel:
        return _find(self.models, model_id, ModelNotFoundError)

    def machine_work(self, work_id: str) -> MachineWork:
        return _find(self.machine_works, work_id, MachineWorkNotFoundError)

    def processing_work(self, work_id: str) -> ProcessingWork:
        return _find(self.processing_works, work_id, ProcessingWorkNotFoundError)

    def warehouse_log(self, log_id: str) -> WarehouseLog:
        return _find(self.warehouse_logs, log_id, WarehouseLogNotFoundError)

    def expense(self, expense_id: str) -> Expense:
        return _find(self.expenses, expense_id, ExpenseNotFoundError)

    def customers(self, role: CustomerRole) -> tuple[Customer, ...]:
        return getattr(self, _ROLE_FIELDS[role])

    def customer(self, role: CustomerRole, customer_id: str) -> Customer:
        return _find(self.customers(role), customer_id, CustomerNotFoundError)

    def stock_count(self, key: StockKey) -> int:
        for row in self.raw_stock:
            if row.key == key:
                return row.count
        return 0

    def works_for(self, role: CustomerRole, customer_id: str) -> tuple:
        """Machine or processing works billed to a producer/contractor."""
        if role is CustomerRole.PRODUCER:
            return tuple(w for w in self.machine_works if w.customer_id == customer_id)
        if role is CustomerRole.PROCESSOR:
            return tuple(w for w in self.processing_works if w.customer_id == customer_id)
        return ()

    # -- copy-on-write ----------------------------------------------------

    def with_customers(
        self, role: CustomerRole, customers: tuple[Customer, ...]
    ) -> DomainState:
        return replace(self, **{_ROLE_FIELDS[role]: customers})

    def update_customer(
        self,
        role: CustomerRole,
        customer_id: str,
        change: Callable[[Customer], Customer],
    ) -> DomainState:
        current = self.customer(role, customer_id)
        return self.with_customers(
            role, replace_by_id(self.customers(role), customer_id, change(current))
        )

    def evolve(self, **changes) -> DomainState:
        return replace(self, **changes)
