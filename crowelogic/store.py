"""
Backend selection and the bundle of repositories sharing one backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from crowelogic.chats import ChatRepository
from crowelogic.config import Settings
from crowelogic.farms import FarmRepository
from crowelogic.kv import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from crowelogic.observations import ObservationRepository
from crowelogic.tasks import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class Store:
    """Every repository, wired to the same key-value backend."""

    kv: KeyValueStore
    chats: ChatRepository
    tasks: TaskRepository
    farms: FarmRepository
    observations: ObservationRepository

    @classmethod
    def over(cls, kv: KeyValueStore, settings: Settings | None = None) -> "Store":
        settings = settings or Settings(_env_file=None)
        farms = FarmRepository(kv)
        return cls(
            kv=kv,
            chats=ChatRepository(kv, title_max_length=settings.chat_title_max_length),
            tasks=TaskRepository(kv),
            farms=farms,
            observations=ObservationRepository(
                kv, farms, env_history_cap=settings.env_history_cap
            ),
        )

    @property
    def is_remote(self) -> bool:
        return isinstance(self.kv, RedisKeyValueStore)

    async def aclose(self) -> None:
        await self.kv.aclose()


def build_kv(settings: Settings) -> KeyValueStore:
    """Pick the backend once: the hosted store when both credentials are set."""
    if settings.use_remote_store:
        kv: KeyValueStore = RedisKeyValueStore(
            url=settings.kv_rest_api_url.strip(),
            token=settings.kv_rest_api_token.strip(),
        )
    else:
        kv = InMemoryKeyValueStore()
    logger.info("Key-value backend: %s", kv.__class__.__name__)
    return kv


def build_store(settings: Settings) -> Store:
    return Store.over(build_kv(settings), settings)
