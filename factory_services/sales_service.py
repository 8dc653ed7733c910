"""
SalesService -- invoices issued to sales customers.

Issuing an invoice takes units out of "finished"; deleting it puts them
back; editing it reverses the old items and applies the new ones in one
step.  Invoice totals are always recomputed as sum(quantity x price).
"""

from __future__ import annotations

from collections.abc import Sequence

from factory_engines import customer_ledger
from factory_engines.inventory_ledger import apply_sales_invoice
from factory_kernel.domain.records import Invoice
from factory_kernel.domain.values import CustomerRole
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService
from factory_services.drafts import InvoiceLine, to_invoice_items

logger = get_logger("services.sales")

SALES = CustomerRole.SALES


class SalesService(BaseService):
    def invoices(self, customer_id: str) -> tuple[Invoice, ...]:
        return self.state.customer(SALES, customer_id).invoices

    def issue_invoice(
        self,
        customer_id: str,
        lines: Sequence[InvoiceLine],
        date: str | None = None,
    ) -> Invoice:
        state = self.state
        state.customer(SALES, customer_id)
        invoice = Invoice.build(self._new_id(), self._date(date), to_invoice_items(lines))
        with self._operation("invoice.issue", record_id=invoice.id, customer_id=customer_id):
            state = apply_sales_invoice(state, (), invoice.items)
            state = state.update_customer(
                SALES, customer_id, lambda c: customer_ledger.add_invoice(c, invoice)
            )
            self._commit(state, "invoice.issue")
            logger.info("invoice_issued", extra={"total": invoice.total})
        return invoice

    def edit_invoice(
        self,
        customer_id: str,
        invoice_id: str,
        lines: Sequence[InvoiceLine],
        date: str | None = None,
    ) -> Invoice:
        state = self.state
        old = customer_ledger.find_invoice(state.customer(SALES, customer_id), invoice_id)
        new = Invoice.build(
            invoice_id,
            old.date if date is None else self._date(date),
            to_invoice_items(lines),
        )
        with self._operation("invoice.edit", record_id=invoice_id, customer_id=customer_id):
            state = apply_sales_invoice(state, old.items, new.items)
            state = state.update_customer(
                SALES, customer_id, lambda c: customer_ledger.replace_invoice(c, new)
            )
            self._commit(state, "invoice.edit")
            logger.info("invoice_edited", extra={"old_total": old.total, "total": new.total})
        return new

    def delete_invoice(self, customer_id: str, invoice_id: str) -> None:
        state = self.state
        old = customer_ledger.find_invoice(state.customer(SALES, customer_id), invoice_id)
        with self._operation("invoice.delete", record_id=invoice_id, customer_id=customer_id):
            state = apply_sales_invoice(state, old.items, ())
            state = state.update_customer(
                SALES, customer_id, lambda c: customer_ledger.remove_invoice(c, invoice_id)
            )
            self._commit(state, "invoice.delete")
            logger.info("invoice_deleted", extra={"total": old.total})
