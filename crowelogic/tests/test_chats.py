import unittest

from crowelogic.chats import ChatRepository
from crowelogic.errors import ChatNotFound
from crowelogic.kv import InMemoryKeyValueStore
from crowelogic.records import ChatPatch, MessageDraft
from crowelogic.tests.helpers import ticking_clock


class ChatRepositoryTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.kv = InMemoryKeyValueStore()
        self.chats = ChatRepository(self.kv)

    async def test_create_then_get(self):
        chat = await self.chats.create_chat("u1")
        loaded = await self.chats.get_chat("u1", chat.id)
        self.assertEqual(loaded, chat)
        self.assertEqual(loaded.title, "New Chat")
        self.assertEqual(loaded.messages, [])
        self.assertEqual(loaded.created_at, loaded.updated_at)
        self.assertEqual(loaded.user_id, "u1")

    async def test_chats_are_partitioned_by_user(self):
        chat = await self.chats.create_chat("u1")
        self.assertIsNone(await self.chats.get_chat("u2", chat.id))
        self.assertEqual(await self.chats.get_user_chats("u2"), [])

    async def test_stored_document_uses_camel_case(self):
        chat = await self.chats.create_chat("u1")
        stored = self.kv.hashes["chats:u1"][chat.id]
        self.assertEqual(
            set(stored), {"id", "title", "messages", "createdAt", "updatedAt", "userId"}
        )

    async def test_messages_keep_call_order_with_unique_ids(self):
        chat = await self.chats.create_chat("u1")
        contents = [f"message {i}" for i in range(6)]
        for i, content in enumerate(contents):
            role = "user" if i % 2 == 0 else "assistant"
            await self.chats.add_message_to_chat(
                "u1", chat.id, MessageDraft(role=role, content=content)
            )
        loaded = await self.chats.get_chat("u1", chat.id)
        self.assertEqual([m.content for m in loaded.messages], contents)
        self.assertEqual(len({m.id for m in loaded.messages}), len(contents))

    async def test_returned_message_matches_stored(self):
        chat = await self.chats.create_chat("u1")
        message = await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="hello")
        )
        loaded = await self.chats.get_chat("u1", chat.id)
        self.assertEqual(loaded.messages, [message])
        self.assertEqual(message.role, "user")

    async def test_assistant_message_does_not_set_title(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="assistant", content="Welcome!")
        )
        self.assertEqual((await self.chats.get_chat("u1", chat.id)).title, "New Chat")

    async def test_system_message_does_not_set_title(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="system", content="context")
        )
        self.assertEqual((await self.chats.get_chat("u1", chat.id)).title, "New Chat")

    async def test_first_user_message_becomes_title_cut_at_100(self):
        chat = await self.chats.create_chat("u1")
        long_text = "x" * 60 + "y" * 60
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="assistant", content="Hi there")
        )
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content=long_text)
        )
        title = (await self.chats.get_chat("u1", chat.id)).title
        self.assertEqual(title, long_text[:100])
        self.assertEqual(len(title), 100)

    async def test_short_user_message_is_used_whole(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="Why is my oyster block yellow?")
        )
        self.assertEqual(
            (await self.chats.get_chat("u1", chat.id)).title,
            "Why is my oyster block yellow?",
        )

    async def test_second_user_message_keeps_title(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="first")
        )
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="second")
        )
        self.assertEqual((await self.chats.get_chat("u1", chat.id)).title, "first")

    async def test_explicit_title_sticks(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.update_chat("u1", chat.id, ChatPatch(title="Lion's mane grow"))
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="first question")
        )
        self.assertEqual(
            (await self.chats.get_chat("u1", chat.id)).title, "Lion's mane grow"
        )

    async def test_custom_title_length(self):
        chats = ChatRepository(self.kv, title_max_length=5)
        chat = await chats.create_chat("u1")
        await chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="abcdefgh")
        )
        self.assertEqual((await chats.get_chat("u1", chat.id)).title, "abcde")

    async def test_add_message_to_missing_chat_fails_without_side_effects(self):
        with self.assertRaises(ChatNotFound) as ctx:
            await self.chats.add_message_to_chat(
                "u1", "missing", MessageDraft(role="user", content="hi")
            )
        self.assertEqual(ctx.exception.entity_id, "missing")
        self.assertEqual(self.kv.hashes, {})
        self.assertEqual(await self.chats.get_user_chats("u1"), [])

    async def test_update_keeps_messages_when_not_given(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="hello")
        )
        with ticking_clock():
            updated = await self.chats.update_chat("u1", chat.id, ChatPatch(title="Renamed"))
        loaded = await self.chats.get_chat("u1", chat.id)
        self.assertEqual(loaded, updated)
        self.assertEqual(loaded.title, "Renamed")
        self.assertEqual([m.content for m in loaded.messages], ["hello"])
        self.assertEqual(loaded.created_at, chat.created_at)

    async def test_update_replaces_messages_wholesale(self):
        chat = await self.chats.create_chat("u1")
        for content in ("a", "b"):
            await self.chats.add_message_to_chat(
                "u1", chat.id, MessageDraft(role="user", content=content)
            )
        loaded = await self.chats.get_chat("u1", chat.id)
        await self.chats.update_chat(
            "u1", chat.id, ChatPatch(messages=loaded.messages[1:])
        )
        self.assertEqual(
            [m.content for m in (await self.chats.get_chat("u1", chat.id)).messages], ["b"]
        )

    async def test_update_with_null_messages_keeps_messages(self):
        chat = await self.chats.create_chat("u1")
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="keep me")
        )
        await self.chats.update_chat("u1", chat.id, ChatPatch(messages=None, title=None))
        loaded = await self.chats.get_chat("u1", chat.id)
        self.assertEqual([m.content for m in loaded.messages], ["keep me"])
        self.assertEqual(loaded.title, "keep me")

    async def test_update_refreshes_updated_at(self):
        with ticking_clock(1000):
            chat = await self.chats.create_chat("u1")
            updated = await self.chats.update_chat("u1", chat.id, ChatPatch())
        self.assertGreater(updated.updated_at, chat.updated_at)

    async def test_update_missing_chat_is_a_silent_noop(self):
        result = await self.chats.update_chat("u1", "missing", ChatPatch(title="x"))
        self.assertIsNone(result)
        self.assertEqual(self.kv.hashes, {})

    async def test_user_chats_sorted_by_most_recent_update(self):
        with ticking_clock():
            first = await self.chats.create_chat("u1")
            second = await self.chats.create_chat("u1")
            third = await self.chats.create_chat("u1")
            await self.chats.add_message_to_chat(
                "u1", first.id, MessageDraft(role="user", content="bump")
            )
        chats = await self.chats.get_user_chats("u1")
        self.assertEqual([c.id for c in chats], [first.id, third.id, second.id])

    async def test_concurrent_updates_last_writer_wins(self):
        chat = await self.chats.create_chat("u1")
        loaded = await self.chats.get_chat("u1", chat.id)
        # Two writers build on the same snapshot; the second overwrites the first.
        await self.chats.add_message_to_chat(
            "u1", chat.id, MessageDraft(role="user", content="from writer A")
        )
        await self.chats.update_chat(
            "u1", chat.id, ChatPatch(messages=loaded.messages, title="writer B")
        )
        final = await self.chats.get_chat("u1", chat.id)
        self.assertEqual(final.messages, [])
        self.assertEqual(final.title, "writer B")


if __name__ == "__main__":
    unittest.main()
