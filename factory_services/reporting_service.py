"""
ReportingService -- read-only views over the current snapshot.

Responsibility:
    Per-machine sellable stock, the raw stock conservation check, and a
    balance overview across every account of a role.

Invariants enforced:
    - Never commits.  Every method reads ``self.state`` once.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from factory_engines import customer_ledger
from factory_engines.reports import (
    ConservationLine,
    MachineStockOption,
    conservation_report,
    machine_stock_options,
)
from factory_kernel.domain.values import CustomerRole, parse_enum
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService

logger = get_logger("services.reporting")


class ReportingService(BaseService):
    def machine_stock_options(self) -> list[MachineStockOption]:
        return machine_stock_options(self.state)

    def conservation_report(self) -> list[ConservationLine]:
        lines = conservation_report(self.state)
        unbalanced = [str(line.key) for line in lines if not line.balanced]
        if unbalanced:
            logger.warning("conservation_unbalanced", extra={"keys": unbalanced})
        return lines

    def balances(self, role: Any) -> dict[str, Decimal]:
        """Customer id -> balance for every account of ``role``."""
        role = parse_enum(CustomerRole, role, "role")
        state = self.state
        return {
            c.id: customer_ledger.invoiced_total(state, role, c) - customer_ledger.paid_total(c)
            for c in state.customers(role)
        }
