"""
ProductionService -- machine work records.

A machine work run belongs to a producer account, consumes raw bags and adds
units to the "in production" counter of the models it made.  Create, edit
and delete all go through ``apply_machine_work`` with the record's old and
new entries, so the inventory effect of an edit is exactly the effect of
deleting the old record and creating the new one.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from factory_engines.inventory_ledger import apply_machine_work
from factory_kernel.domain.records import MachineWork
from factory_kernel.domain.state import remove_by_id, replace_by_id
from factory_kernel.domain.values import CustomerRole, require_text
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService
from factory_services.drafts import ProductionLine, to_production_entries

logger = get_logger("services.production")


class ProductionService(BaseService):
    def machine_works(self, customer_id: str | None = None) -> tuple[MachineWork, ...]:
        """Machine work, newest first, optionally for one producer."""
        works = self.state.machine_works
        if customer_id is None:
            return works
        return tuple(w for w in works if w.customer_id == customer_id)

    def record_machine_work(
        self,
        customer_id: str,
        machine_name: str,
        lines: Sequence[ProductionLine],
        date: str | None = None,
    ) -> MachineWork:
        state = self.state
        state.customer(CustomerRole.PRODUCER, customer_id)
        work = MachineWork(
            id=self._new_id(),
            customer_id=customer_id,
            machine_name=require_text(machine_name, "machine_name"),
            date=self._date(date),
            entries=to_production_entries(lines),
        )
        with self._operation("machine_work.create", record_id=work.id, customer_id=customer_id):
            state = apply_machine_work(state, (), work.entries, self._ledger.reversal_policy)
            state = state.evolve(machine_works=(work, *state.machine_works))
            self._commit(state, "machine_work.create")
            logger.info(
                "machine_work_created",
                extra={"machine_name": work.machine_name, "entry_count": len(work.entries)},
            )
        return work

    def edit_machine_work(
        self,
        work_id: str,
        lines: Sequence[ProductionLine],
        machine_name: str | None = None,
        date: str | None = None,
    ) -> MachineWork:
        """Replace a run's entries (and optionally its machine/date)."""
        state = self.state
        old = state.machine_work(work_id)
        new = replace(
            old,
            machine_name=(
                old.machine_name if machine_name is None
                else require_text(machine_name, "machine_name")
            ),
            date=old.date if date is None else self._date(date),
            entries=to_production_entries(lines),
        )
        with self._operation("machine_work.edit", record_id=work_id, customer_id=old.customer_id):
            state = apply_machine_work(
                state, old.entries, new.entries, self._ledger.reversal_policy
            )
            state = state.evolve(
                machine_works=replace_by_id(state.machine_works, work_id, new)
            )
            self._commit(state, "machine_work.edit")
            logger.info("machine_work_edited", extra={"entry_count": len(new.entries)})
        return new

    def delete_machine_work(self, work_id: str) -> None:
        """Delete a run, returning its raw bags and removing its units."""
        state = self.state
        old = state.machine_work(work_id)
        with self._operation("machine_work.delete", record_id=work_id, customer_id=old.customer_id):
            state = apply_machine_work(state, old.entries, (), self._ledger.reversal_policy)
            state = state.evolve(machine_works=remove_by_id(state.machine_works, work_id))
            self._commit(state, "machine_work.delete")
            logger.info("machine_work_deleted")
