"""
Environmental sensor readings and image analysis history.

Both are newest-first lists. Environmental history is capped per farm;
analysis history per user is not.
"""

from __future__ import annotations

import logging

from crowelogic.errors import FarmNotFound
from crowelogic.farms import FarmRepository
from crowelogic.kv import KeyValueStore
from crowelogic.records import (
    Analysis,
    AnalysisDraft,
    EnvironmentalReading,
    EnvironmentalSample,
    FarmPatch,
    new_id,
    now_ms,
)

logger = logging.getLogger(__name__)

DEFAULT_ENV_HISTORY_CAP = 1000
DEFAULT_ENV_HISTORY_LIMIT = 100
DEFAULT_ANALYSES_LIMIT = 10


class ObservationRepository:
    def __init__(
        self,
        kv: KeyValueStore,
        farms: FarmRepository,
        env_history_cap: int = DEFAULT_ENV_HISTORY_CAP,
    ):
        self.kv = kv
        self.farms = farms
        self.env_history_cap = env_history_cap

    @staticmethod
    def env_key(farm_id: str) -> str:
        return f"env:{farm_id}"

    @staticmethod
    def analyses_key(user_id: str) -> str:
        return f"analyses:{user_id}"

    async def save_environmental_data(
        self, user_id: str, farm_id: str, sample: EnvironmentalSample
    ) -> EnvironmentalReading:
        """
        Record a reading as the farm's latest and prepend it to the farm's
        history, keeping only the newest `env_history_cap` entries.

        Raises:
            FarmNotFound: if the farm does not exist.
        """
        farm = await self.farms.get_farm(user_id, farm_id)
        if farm is None:
            raise FarmNotFound(farm_id)

        reading = EnvironmentalReading(**sample.model_dump(), timestamp=now_ms())
        await self.farms.update_farm(
            user_id, farm_id, FarmPatch(environmental_data=reading)
        )

        key = self.env_key(farm_id)
        await self.kv.push_front(key, reading.as_dict())
        await self.kv.trim(key, 0, self.env_history_cap - 1)
        return reading

    async def get_environmental_history(
        self, farm_id: str, limit: int = DEFAULT_ENV_HISTORY_LIMIT
    ) -> list[EnvironmentalReading]:
        if limit <= 0:
            return []
        items = await self.kv.read_range(self.env_key(farm_id), 0, limit - 1)
        return [EnvironmentalReading.model_validate(item) for item in items]

    async def save_analysis(self, draft: AnalysisDraft) -> Analysis:
        analysis = Analysis(id=new_id(), **draft.model_dump(), created_at=now_ms())
        await self.kv.push_front(self.analyses_key(analysis.user_id), analysis.as_dict())
        logger.debug("Saved %s analysis %s for %s", analysis.type, analysis.id, analysis.user_id)
        return analysis

    async def get_user_analyses(
        self, user_id: str, limit: int = DEFAULT_ANALYSES_LIMIT
    ) -> list[Analysis]:
        if limit <= 0:
            return []
        items = await self.kv.read_range(self.analyses_key(user_id), 0, limit - 1)
        return [Analysis.model_validate(item) for item in items]
