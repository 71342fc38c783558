from hostel_ledger.models.room.room import Room

__all__ = ["Room"]
