"""
Module: factory_engines.customer_ledger
Responsibility:
    Account arithmetic for the three customer roles: what a counterparty has
    been invoiced, what it has paid, the running balance, and the pure
    record transformations for payments and sales invoices.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - balance = invoiced - paid; a negative balance (overpayment) is allowed.
    - Producer and processor accounts have no stored invoices: their invoiced
      side is the value of the work records billed to them
      (machine work: produced quantity x price; processing: received x price).
    - Payments never touch inventory.
    - A payment amount must be strictly positive.

Failure modes:
    - ValidationError for a non-positive payment amount.
    - PaymentNotFoundError / InvoiceNotFoundError for unknown ids.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from factory_kernel.domain.records import Customer, Invoice, Payment
from factory_kernel.domain.state import DomainState, remove_by_id, replace_by_id
from factory_kernel.domain.values import CustomerRole
from factory_kernel.exceptions import (
    InvoiceNotFoundError,
    PaymentNotFoundError,
    ValidationError,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class StatementLine:
    """One dated movement on an account: a charge or a payment."""

    date: str
    kind: str  # "charge" | "payment"
    reference: str
    amount: Decimal


@dataclass(frozen=True)
class AccountStatement:
    customer_id: str
    name: str
    role: CustomerRole
    invoiced: Decimal
    paid: Decimal
    lines: tuple[StatementLine, ...]

    @property
    def balance(self) -> Decimal:
        return self.invoiced - self.paid


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def charges(state: DomainState, role: CustomerRole, customer: Customer) -> tuple[StatementLine, ...]:
    """Every charge on the account, in collection order."""
    if role is CustomerRole.SALES:
        return tuple(
            StatementLine(inv.date, "charge", inv.id, inv.total) for inv in customer.invoices
        )
    return tuple(
        StatementLine(work.date, "charge", work.id, work.value)
        for work in state.works_for(role, customer.id)
    )


def invoiced_total(state: DomainState, role: CustomerRole, customer: Customer) -> Decimal:
    return sum((line.amount for line in charges(state, role, customer)), ZERO)


def paid_total(customer: Customer) -> Decimal:
    return sum((p.amount for p in customer.payments), ZERO)


def balance(state: DomainState, role: CustomerRole, customer_id: str) -> Decimal:
    customer = state.customer(role, customer_id)
    return invoiced_total(state, role, customer) - paid_total(customer)


def account_statement(
    state: DomainState, role: CustomerRole, customer_id: str
) -> AccountStatement:
    """Charges and payments merged and sorted by date, oldest first."""
    customer = state.customer(role, customer_id)
    charge_lines = charges(state, role, customer)
    payment_lines = tuple(
        StatementLine(p.date, "payment", p.id, p.amount) for p in customer.payments
    )
    lines = sorted((*charge_lines, *payment_lines), key=lambda line: line.date)
    return AccountStatement(
        customer_id=customer.id,
        name=customer.name,
        role=role,
        invoiced=sum((line.amount for line in charge_lines), ZERO),
        paid=paid_total(customer),
        lines=tuple(lines),
    )


# ---------------------------------------------------------------------------
# Record transformations
# ---------------------------------------------------------------------------


def add_payment(customer: Customer, payment: Payment) -> Customer:
    if payment.amount <= 0:
        raise ValidationError("amount", f"payment must be positive (got {payment.amount})")
    return replace(customer, payments=(*customer.payments, payment))


def remove_payment(customer: Customer, payment_id: str) -> Customer:
    if not any(p.id == payment_id for p in customer.payments):
        raise PaymentNotFoundError(payment_id)
    return replace(customer, payments=remove_by_id(customer.payments, payment_id))


def find_invoice(customer: Customer, invoice_id: str) -> Invoice:
    for invoice in customer.invoices:
        if invoice.id == invoice_id:
            return invoice
    raise InvoiceNotFoundError(invoice_id)


def add_invoice(customer: Customer, invoice: Invoice) -> Customer:
    return replace(customer, invoices=(*customer.invoices, invoice))


def replace_invoice(customer: Customer, invoice: Invoice) -> Customer:
    find_invoice(customer, invoice.id)
    return replace(customer, invoices=replace_by_id(customer.invoices, invoice.id, invoice))


def remove_invoice(customer: Customer, invoice_id: str) -> Customer:
    find_invoice(customer, invoice_id)
    return replace(customer, invoices=remove_by_id(customer.invoices, invoice_id))
