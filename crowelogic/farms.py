"""
Farms and the strains grown on them.
"""

from __future__ import annotations

import logging
from typing import Optional

from crowelogic.errors import FarmNotFound
from crowelogic.records import (
    Farm,
    FarmDraft,
    FarmPatch,
    Strain,
    StrainDraft,
    new_id,
    now_ms,
)
from crowelogic.repository import HashRepository

logger = logging.getLogger(__name__)


class FarmRepository(HashRepository[Farm]):
    prefix = "farms"
    record_type = Farm

    async def create_farm(self, draft: FarmDraft) -> Farm:
        now = now_ms()
        farm = Farm(
            id=new_id(),
            **draft.model_dump(),
            strains=[],
            created_at=now,
            updated_at=now,
        )
        await self._save(farm.user_id, farm)
        logger.debug("Created farm %s for %s", farm.id, farm.user_id)
        return farm

    async def get_farm(self, user_id: str, farm_id: str) -> Optional[Farm]:
        return await self._load(user_id, farm_id)

    async def update_farm(
        self, user_id: str, farm_id: str, patch: FarmPatch
    ) -> Optional[Farm]:
        return await self._update(user_id, farm_id, patch)

    async def get_user_farms(self, user_id: str) -> list[Farm]:
        farms = await self._load_all(user_id)
        return sorted(farms, key=lambda farm: farm.updated_at, reverse=True)

    async def add_strain_to_farm(
        self, user_id: str, farm_id: str, draft: StrainDraft
    ) -> Strain:
        farm = await self.get_farm(user_id, farm_id)
        if farm is None:
            raise FarmNotFound(farm_id)

        strain = Strain(
            id=new_id(),
            **draft.model_dump(),
            created_at=now_ms(),
            farm_id=farm_id,
        )
        await self.update_farm(
            user_id, farm_id, FarmPatch(strains=[*farm.strains, strain])
        )
        return strain
