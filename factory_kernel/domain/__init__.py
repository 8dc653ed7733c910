"""
Pure domain layer.

Records, value types and the DomainState snapshot.  No dependencies on
SQLAlchemy, the blob store, the clock's real time source, or any I/O.
All domain objects are immutable.
"""

from factory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from factory_kernel.domain.records import (
    Customer,
    Expense,
    FabricModel,
    Invoice,
    InvoiceItem,
    MachineWork,
    Payment,
    ProcessingEntry,
    ProcessingWork,
    ProducedOutput,
    ProductionEntry,
    RawConsumption,
    RawStockEntry,
    WarehouseLog,
)
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import (
    CustomerRole,
    ExpenseCategory,
    MaterialSize,
    MaterialType,
    ReversalPolicy,
    StockKey,
)

__all__ = [
    "Clock",
    "Customer",
    "CustomerRole",
    "DeterministicClock",
    "DomainState",
    "Expense",
    "ExpenseCategory",
    "FabricModel",
    "Invoice",
    "InvoiceItem",
    "MachineWork",
    "MaterialSize",
    "MaterialType",
    "Payment",
    "ProcessingEntry",
    "ProcessingWork",
    "ProducedOutput",
    "ProductionEntry",
    "RawConsumption",
    "RawStockEntry",
    "ReversalPolicy",
    "StockKey",
    "SystemClock",
    "WarehouseLog",
]
