from hostel_ledger.repositories.hostel.hostel_repository import HostelFeatureSettingRepository

__all__ = ["HostelFeatureSettingRepository"]
