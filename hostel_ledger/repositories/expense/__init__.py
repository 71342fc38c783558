from hostel_ledger.repositories.expense.expense_repository import ExpenseRepository

__all__ = ["ExpenseRepository"]
