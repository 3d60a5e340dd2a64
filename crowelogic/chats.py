"""
Chat transcripts: append-only message lists with a title taken from the
first user message.
"""

from __future__ import annotations

import logging
from typing import Optional

from crowelogic.errors import ChatNotFound
from crowelogic.kv import KeyValueStore
from crowelogic.records import (
    NEW_CHAT_TITLE,
    Chat,
    ChatPatch,
    Message,
    MessageDraft,
    new_id,
    now_ms,
)
from crowelogic.repository import HashRepository

logger = logging.getLogger(__name__)

DEFAULT_TITLE_MAX_LENGTH = 100


class ChatRepository(HashRepository[Chat]):
    prefix = "chats"
    record_type = Chat

    def __init__(
        self, kv: KeyValueStore, title_max_length: int = DEFAULT_TITLE_MAX_LENGTH
    ):
        super().__init__(kv)
        self.title_max_length = title_max_length

    async def create_chat(self, user_id: str) -> Chat:
        now = now_ms()
        chat = Chat(
            id=new_id(),
            title=NEW_CHAT_TITLE,
            messages=[],
            created_at=now,
            updated_at=now,
            user_id=user_id,
        )
        await self._save(user_id, chat)
        logger.debug("Created chat %s for %s", chat.id, user_id)
        return chat

    async def get_chat(self, user_id: str, chat_id: str) -> Optional[Chat]:
        return await self._load(user_id, chat_id)

    async def update_chat(
        self, user_id: str, chat_id: str, patch: ChatPatch
    ) -> Optional[Chat]:
        """Merge `patch` over the stored chat. Returns None if there is no such chat."""
        return await self._update(user_id, chat_id, patch)

    async def get_user_chats(self, user_id: str) -> list[Chat]:
        chats = await self._load_all(user_id)
        return sorted(chats, key=lambda chat: chat.updated_at, reverse=True)

    async def add_message_to_chat(
        self, user_id: str, chat_id: str, draft: MessageDraft
    ) -> Message:
        """
        Append a message to the end of the chat's transcript.

        While the chat still carries the placeholder title, the first user
        message becomes the title, cut to `title_max_length` characters.

        Raises:
            ChatNotFound: if the chat does not exist. Nothing is written.
        """
        chat = await self.get_chat(user_id, chat_id)
        if chat is None:
            raise ChatNotFound(chat_id)

        message = Message(
            id=new_id(),
            role=draft.role,
            content=draft.content,
            created_at=now_ms(),
        )

        title = chat.title
        if chat.title == NEW_CHAT_TITLE and draft.role == "user":
            title = draft.content[: self.title_max_length]

        await self.update_chat(
            user_id,
            chat_id,
            ChatPatch(messages=[*chat.messages, message], title=title),
        )
        return message
