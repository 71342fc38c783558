from hostel_ledger.models.expense.expense import Expense

__all__ = ["Expense"]
