"""
CustomerService -- accounts for producers, contractors and sales customers.

Responsibility:
    Customer CRUD per role, payments, balances and statements, and the
    cascading delete.

Invariants enforced:
    - Payments never move inventory.
    - Deleting a customer deletes every record billed to it in the same
      commit.  Whether the inventory effects of those records are undone is
      an explicit choice (``reverse_inventory``), defaulting per role to the
      ledger configuration:
        * reversed -- one combined ledger plan undoes every record, all or
          nothing, under the configured reversal policy;
        * written off -- counters stay as they are, a ``customer_write_off``
          warning is logged and, for producers, a negative warehouse log line
          per consumed raw key keeps the conservation equation balanced.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Sequence

from factory_engines import customer_ledger
from factory_engines.customer_ledger import AccountStatement
from factory_engines.inventory_ledger import (
    apply_machine_work,
    apply_processing_work,
    apply_sales_invoice,
)
from factory_engines.reports import search_customers
from factory_kernel.domain.records import Customer, Payment, WarehouseLog
from factory_kernel.domain.state import DomainState, remove_by_id
from factory_kernel.domain.values import (
    CustomerRole,
    StockKey,
    parse_enum,
    parse_money,
    require_text,
)
from factory_kernel.exceptions import ValidationError
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService

logger = get_logger("services.customers")


def _role(role: Any) -> CustomerRole:
    return parse_enum(CustomerRole, role, "role")


class CustomerService(BaseService):
    # -- queries ----------------------------------------------------------

    def customers(self, role: Any, query: str | None = None) -> list[Customer]:
        customers = self.state.customers(_role(role))
        return search_customers(customers, query or "")

    def customer(self, role: Any, customer_id: str) -> Customer:
        return self.state.customer(_role(role), customer_id)

    def balance(self, role: Any, customer_id: str) -> Decimal:
        return customer_ledger.balance(self.state, _role(role), customer_id)

    def account_statement(self, role: Any, customer_id: str) -> AccountStatement:
        return customer_ledger.account_statement(self.state, _role(role), customer_id)

    # -- CRUD -------------------------------------------------------------

    def create_customer(self, role: Any, name: Any, phone: Any = "") -> Customer:
        role = _role(role)
        customer = Customer(
            id=self._new_id(),
            name=require_text(name, "name"),
            phone=str(phone or "").strip(),
        )
        state = self.state
        with self._operation("customer.create", customer_id=customer.id):
            self._commit(
                state.with_customers(role, (*state.customers(role), customer)),
                "customer.create",
            )
            logger.info("customer_created", extra={"role": role})
        return customer

    def update_customer(
        self,
        role: Any,
        customer_id: str,
        name: Any = None,
        phone: Any = None,
    ) -> Customer:
        role = _role(role)
        fields: dict[str, str] = {}
        if name is not None:
            fields["name"] = require_text(name, "name")
        if phone is not None:
            fields["phone"] = str(phone).strip()
        state = self.state.update_customer(role, customer_id, lambda c: replace(c, **fields))
        with self._operation("customer.update", customer_id=customer_id):
            self._commit(state, "customer.update")
            logger.info("customer_updated", extra={"role": role, "fields": sorted(fields)})
        return state.customer(role, customer_id)

    def delete_customer(
        self,
        role: Any,
        customer_id: str,
        reverse_inventory: bool | None = None,
    ) -> None:
        role = _role(role)
        state = self.state
        state.customer(role, customer_id)
        if reverse_inventory is None:
            reverse_inventory = self._ledger.reverses_on_delete(role)

        with self._operation("customer.delete", customer_id=customer_id):
            if reverse_inventory:
                state = self._reverse_records(state, role, customer_id)
            else:
                state = self._write_off_records(state, role, customer_id)
            state = state.with_customers(role, remove_by_id(state.customers(role), customer_id))
            self._commit(state, "customer.delete")
            logger.info(
                "customer_deleted",
                extra={"role": role, "inventory_reversed": reverse_inventory},
            )

    def delete_customers(
        self,
        role: Any,
        customer_ids: Sequence[str],
        reverse_inventory: bool | None = None,
    ) -> None:
        """
        Delete several customers of one role in a single commit.

        Every id is checked before anything is undone; if any id is unknown,
        or any reversal is refused, no customer is deleted.
        """
        role = _role(role)
        ids = list(dict.fromkeys(customer_ids))
        if not ids:
            raise ValidationError("customer_ids", "at least one customer is required")
        state = self.state
        for customer_id in ids:
            state.customer(role, customer_id)
        if reverse_inventory is None:
            reverse_inventory = self._ledger.reverses_on_delete(role)

        with self._operation("customer.bulk_delete"):
            for customer_id in ids:
                if reverse_inventory:
                    state = self._reverse_records(state, role, customer_id)
                else:
                    state = self._write_off_records(state, role, customer_id)
            removed = set(ids)
            state = state.with_customers(
                role, tuple(c for c in state.customers(role) if c.id not in removed)
            )
            self._commit(state, "customer.bulk_delete")
            logger.info(
                "customers_deleted",
                extra={
                    "role": role,
                    "customer_count": len(ids),
                    "inventory_reversed": reverse_inventory,
                },
            )

    def _reverse_records(
        self, state: DomainState, role: CustomerRole, customer_id: str
    ) -> DomainState:
        policy = self._ledger.reversal_policy
        if role is CustomerRole.PRODUCER:
            works = state.works_for(role, customer_id)
            entries = [e for w in works for e in w.entries]
            state = apply_machine_work(state, entries, (), policy)
            return state.evolve(
                machine_works=tuple(w for w in state.machine_works if w.customer_id != customer_id)
            )
        if role is CustomerRole.PROCESSOR:
            works = state.works_for(role, customer_id)
            entries = [e for w in works for e in w.entries]
            state = apply_processing_work(state, entries, (), policy)
            return state.evolve(
                processing_works=tuple(
                    w for w in state.processing_works if w.customer_id != customer_id
                )
            )
        items = [i for inv in state.customer(role, customer_id).invoices for i in inv.items]
        return apply_sales_invoice(state, items, ())

    def _write_off_records(
        self, state: DomainState, role: CustomerRole, customer_id: str
    ) -> DomainState:
        works = state.works_for(role, customer_id)
        if role is CustomerRole.PRODUCER:
            consumed: dict[StockKey, int] = {}
            for work in works:
                for entry in work.entries:
                    consumed[entry.raw.key] = consumed.get(entry.raw.key, 0) + entry.raw.quantity
            date = self._clock.today()
            write_offs = tuple(
                WarehouseLog(
                    id=self._new_id(),
                    date=date,
                    material_type=key.material_type,
                    size=key.size,
                    color=key.color,
                    quantity=-quantity,
                )
                for key, quantity in consumed.items()
                if quantity
            )
            logger.warning(
                "customer_write_off",
                extra={
                    "role": role,
                    "record_count": len(works),
                    "raw_written_off": {str(k): q for k, q in consumed.items()},
                },
            )
            return state.evolve(
                machine_works=tuple(w for w in state.machine_works if w.customer_id != customer_id),
                warehouse_logs=(*write_offs, *state.warehouse_logs),
            )
        if role is CustomerRole.PROCESSOR:
            logger.warning(
                "customer_write_off",
                extra={
                    "role": role,
                    "record_count": len(works),
                    "sent_written_off": sum(e.quantity_sent for w in works for e in w.entries),
                    "received_kept": sum(e.quantity_received for w in works for e in w.entries),
                },
            )
            return state.evolve(
                processing_works=tuple(
                    w for w in state.processing_works if w.customer_id != customer_id
                )
            )
        invoices = state.customer(role, customer_id).invoices
        if invoices:
            logger.warning(
                "customer_write_off",
                extra={"role": role, "record_count": len(invoices)},
            )
        return state

    # -- payments ---------------------------------------------------------

    def add_payment(
        self,
        role: Any,
        customer_id: str,
        amount: Any,
        date: str | None = None,
    ) -> Payment:
        role = _role(role)
        value = parse_money(amount, "amount")
        if value == 0:
            raise ValidationError("amount", "payment must be positive (got 0)")
        payment = Payment(id=self._new_id(), date=self._date(date), amount=value)
        state = self.state.update_customer(
            role, customer_id, lambda c: customer_ledger.add_payment(c, payment)
        )
        with self._operation("payment.add", record_id=payment.id, customer_id=customer_id):
            self._commit(state, "payment.add")
            logger.info("payment_added", extra={"role": role, "amount": value})
        return payment

    def remove_payment(self, role: Any, customer_id: str, payment_id: str) -> None:
        role = _role(role)
        state = self.state.update_customer(
            role, customer_id, lambda c: customer_ledger.remove_payment(c, payment_id)
        )
        with self._operation("payment.remove", record_id=payment_id, customer_id=customer_id):
            self._commit(state, "payment.remove")
            logger.info("payment_removed", extra={"role": role})
