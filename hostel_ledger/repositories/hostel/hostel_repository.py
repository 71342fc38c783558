"""
Hostel feature-setting repository.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.base.enums import HostelFeature
from hostel_ledger.models.hostel import HostelFeatureSetting
from hostel_ledger.repositories.base.base_repository import BaseRepository


class HostelFeatureSettingRepository(BaseRepository[HostelFeatureSetting]):
    """Repository for per-hostel feature switches."""

    def __init__(self, session: AsyncSession):
        super().__init__(HostelFeatureSetting, session)

    async def get_setting(
        self,
        hostel_id: int,
        feature: HostelFeature,
    ) -> Optional[HostelFeatureSetting]:
        """
        Get the switch row for a feature.

        Args:
            hostel_id: Hostel ID
            feature: Feature to look up

        Returns:
            Setting row, or None when the hostel never configured it
        """
        return await self.find_one(
            HostelFeatureSetting.hostel_id == hostel_id,
            HostelFeatureSetting.feature_name == feature.value,
        )

    async def is_custodian_markup_enabled(self, hostel_id: Optional[int]) -> bool:
        """Price markup is opt-in: no row means disabled."""
        if not hostel_id:
            return False
        setting = await self.get_setting(hostel_id, HostelFeature.CUSTODIAN_PRICE_MARKUP)
        return bool(setting and setting.enabled_for_custodian)
