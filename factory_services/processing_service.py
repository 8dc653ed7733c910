"""
ProcessingService -- outsourced finishing batches.

A processing batch belongs to a contractor (processor) account.  Units sent
leave "in production"; units received back join "finished".  Sent and
received are recorded independently so partial or lossy batches are fine.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from factory_engines.inventory_ledger import apply_processing_work
from factory_kernel.domain.records import ProcessingWork
from factory_kernel.domain.state import remove_by_id, replace_by_id
from factory_kernel.domain.values import CustomerRole, require_text
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService
from factory_services.drafts import ProcessingLine, to_processing_entries

logger = get_logger("services.processing")


class ProcessingService(BaseService):
    def processing_works(self, customer_id: str | None = None) -> tuple[ProcessingWork, ...]:
        works = self.state.processing_works
        if customer_id is None:
            return works
        return tuple(w for w in works if w.customer_id == customer_id)

    def record_processing_work(
        self,
        customer_id: str,
        machine_name: str,
        lines: Sequence[ProcessingLine],
        date: str | None = None,
    ) -> ProcessingWork:
        state = self.state
        state.customer(CustomerRole.PROCESSOR, customer_id)
        work = ProcessingWork(
            id=self._new_id(),
            customer_id=customer_id,
            machine_name=require_text(machine_name, "machine_name"),
            date=self._date(date),
            entries=to_processing_entries(lines),
        )
        with self._operation("processing.create", record_id=work.id, customer_id=customer_id):
            state = apply_processing_work(state, (), work.entries, self._ledger.reversal_policy)
            state = state.evolve(processing_works=(work, *state.processing_works))
            self._commit(state, "processing.create")
            logger.info(
                "processing_work_created",
                extra={
                    "sent": sum(e.quantity_sent for e in work.entries),
                    "received": sum(e.quantity_received for e in work.entries),
                },
            )
        return work

    def edit_processing_work(
        self,
        work_id: str,
        lines: Sequence[ProcessingLine],
        machine_name: str | None = None,
        date: str | None = None,
    ) -> ProcessingWork:
        state = self.state
        old = state.processing_work(work_id)
        new = replace(
            old,
            machine_name=(
                old.machine_name if machine_name is None
                else require_text(machine_name, "machine_name")
            ),
            date=old.date if date is None else self._date(date),
            entries=to_processing_entries(lines),
        )
        with self._operation("processing.edit", record_id=work_id, customer_id=old.customer_id):
            state = apply_processing_work(
                state, old.entries, new.entries, self._ledger.reversal_policy
            )
            state = state.evolve(
                processing_works=replace_by_id(state.processing_works, work_id, new)
            )
            self._commit(state, "processing.edit")
            logger.info("processing_work_edited", extra={"entry_count": len(new.entries)})
        return new

    def delete_processing_work(self, work_id: str) -> None:
        state = self.state
        old = state.processing_work(work_id)
        with self._operation("processing.delete", record_id=work_id, customer_id=old.customer_id):
            state = apply_processing_work(state, old.entries, (), self._ledger.reversal_policy)
            state = state.evolve(
                processing_works=remove_by_id(state.processing_works, work_id)
            )
            self._commit(state, "processing.delete")
            logger.info("processing_work_deleted")
