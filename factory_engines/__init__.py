"""
Module: factory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for factory_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import factory_kernel (and sibling engine modules).
    MUST NOT import factory_services or factory_config.

Invariants enforced:
    - Purity: engines never read the clock.  Dates and ids are passed in by
      the services.
    - Decimal-only arithmetic for prices, totals and balances.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Ledger plans are traced via ``@traced_engine`` (see
    ``factory_engines.tracer``), emitting FACTORY_ENGINE_TRACE records.

Usage:
    from factory_engines.inventory_ledger import apply_machine_work
    from factory_engines.raw_stock import RawStockTable
    from factory_engines.reports import conservation_report
"""

from factory_engines.customer_ledger import (
    AccountStatement,
    StatementLine,
    account_statement,
    balance,
    invoiced_total,
    paid_total,
)
from factory_engines.inventory_ledger import (
    ClampedCounter,
    LedgerPlan,
    apply_machine_work,
    apply_plan,
    apply_processing_work,
    apply_sales_invoice,
    plan_machine_work,
    plan_processing_work,
    plan_sales_invoice,
)
from factory_engines.model_counters import ModelCounters, apply_model_deltas, counters_of
from factory_engines.raw_stock import RawStockTable
from factory_engines.reports import (
    ConservationLine,
    ExpenseSummary,
    MachineStockOption,
    ModelHistoryLine,
    conservation_report,
    expense_summary,
    machine_stock_options,
    model_history,
    search_customers,
)
from factory_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AccountStatement",
    "ClampedCounter",
    "ConservationLine",
    "ExpenseSummary",
    "LedgerPlan",
    "MachineStockOption",
    "ModelCounters",
    "ModelHistoryLine",
    "RawStockTable",
    "StatementLine",
    "account_statement",
    "apply_machine_work",
    "apply_model_deltas",
    "apply_plan",
    "apply_processing_work",
    "apply_sales_invoice",
    "balance",
    "compute_input_fingerprint",
    "conservation_report",
    "counters_of",
    "expense_summary",
    "invoiced_total",
    "machine_stock_options",
    "model_history",
    "paid_total",
    "plan_machine_work",
    "plan_processing_work",
    "plan_sales_invoice",
    "search_customers",
    "traced_engine",
]
