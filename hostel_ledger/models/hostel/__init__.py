from hostel_ledger.models.hostel.hostel import Hostel, HostelFeatureSetting

__all__ = ["Hostel", "HostelFeatureSetting"]
