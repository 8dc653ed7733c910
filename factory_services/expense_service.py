"""ExpenseService -- factory running costs by fixed category."""

from __future__ import annotations

from typing import Any

from factory_engines.reports import ExpenseSummary, expense_summary
from factory_kernel.domain.records import Expense
from factory_kernel.domain.state import remove_by_id
from factory_kernel.domain.values import ExpenseCategory, parse_enum, parse_money, require_text
from factory_kernel.exceptions import ValidationError
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService

logger = get_logger("services.expenses")


class ExpenseService(BaseService):
    def expenses(self) -> tuple[Expense, ...]:
        return self.state.expenses

    def add_expense(
        self,
        description: Any,
        amount: Any,
        category: Any = ExpenseCategory.GENERAL,
        date: str | None = None,
    ) -> Expense:
        value = parse_money(amount, "amount")
        if value == 0:
            raise ValidationError("amount", "must be greater than zero")
        expense = Expense(
            id=self._new_id(),
            date=self._date(date),
            category=parse_enum(ExpenseCategory, category or ExpenseCategory.GENERAL, "category"),
            description=require_text(description, "description"),
            amount=value,
        )
        state = self.state
        with self._operation("expense.add", record_id=expense.id):
            self._commit(state.evolve(expenses=(expense, *state.expenses)), "expense.add")
            logger.info(
                "expense_added",
                extra={"category": expense.category, "amount": expense.amount},
            )
        return expense

    def delete_expense(self, expense_id: str) -> None:
        state = self.state
        state.expense(expense_id)
        with self._operation("expense.delete", record_id=expense_id):
            self._commit(
                state.evolve(expenses=remove_by_id(state.expenses, expense_id)),
                "expense.delete",
            )
            logger.info("expense_deleted")

    def summary(self, category: Any = None, search: str | None = None) -> ExpenseSummary:
        cat = parse_enum(ExpenseCategory, category, "category") if category else None
        return expense_summary(self.state.expenses, cat, search)
