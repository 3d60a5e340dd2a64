"""
Shared plumbing for repositories that keep one hash per owner.
"""

from __future__ import annotations

import logging
from typing import Generic, Optional, Type

from crowelogic.kv import KeyValueStore
from crowelogic.records import R, Record, apply_patch, now_ms

logger = logging.getLogger(__name__)


class HashRepository(Generic[R]):
    """
    Stores records of one type under `{prefix}:{owner_id}`, keyed by record id.

    Updates are read-modify-write with no version check: two concurrent
    updates of the same record both succeed and the later write wins.
    """

    prefix: str
    record_type: Type[R]

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def key(self, owner_id: str) -> str:
        return f"{self.prefix}:{owner_id}"

    async def _load(self, owner_id: str, record_id: str) -> Optional[R]:
        data = await self.kv.get_field(self.key(owner_id), record_id)
        if data is None:
            return None
        return self.record_type.model_validate(data)

    async def _load_all(self, owner_id: str) -> list[R]:
        data = await self.kv.get_all(self.key(owner_id))
        return [self.record_type.model_validate(item) for item in data.values()]

    async def _save(self, owner_id: str, record: R) -> None:
        await self.kv.set_field(self.key(owner_id), record.id, record.as_dict())

    async def _update(
        self, owner_id: str, record_id: str, patch: Record
    ) -> Optional[R]:
        existing = await self._load(owner_id, record_id)
        if existing is None:
            logger.info(
                "Skipping update of missing %s %s for %s",
                self.record_type.__name__,
                record_id,
                owner_id,
            )
            return None
        updated = apply_patch(existing, patch).model_copy(
            update={"updated_at": now_ms()}
        )
        await self._save(owner_id, updated)
        return updated
