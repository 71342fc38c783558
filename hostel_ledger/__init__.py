"""Hostel ledger service: room allocation and payment accounting for multi-tenant hostels."""

__version__ = "0.1.0"
