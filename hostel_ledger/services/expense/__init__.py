from hostel_ledger.services.expense.expense_service import ExpenseService

__all__ = ["ExpenseService"]
