"""Unit tests for the conversation stores."""
import asyncio

import pytest
import pytest_asyncio

from revealchat.conversation import (
    Conversation,
    ConversationStore,
    InMemoryConversationStore,
    Message,
    MessageImage,
    Role,
    create_conversation_store,
)
from revealchat.conversation.sqlite import SQLiteConversationStore


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Return a connected store of each backend."""
    if request.param == "memory":
        backend = InMemoryConversationStore()
    else:
        backend = SQLiteConversationStore(tmp_path / "nested" / "chats.db")
    await backend.connect()
    yield backend
    await backend.disconnect()


def _conversation(**kwargs) -> Conversation:
    return Conversation(
        title=kwargs.pop("title", "Greetings"),
        messages=[
            Message(role=Role.USER, content="Hi"),
            Message(role=Role.ASSISTANT, content="Hello!", has_animated=True, model_used="gpt-4"),
        ],
        **kwargs,
    )


class TestConversationStoreInterface:
    """Tests for the abstract store."""

    def test_store_is_abstract(self):
        """Test that ConversationStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ConversationStore()  # type: ignore


class TestConversationStoreFactory:
    """Tests for create_conversation_store."""

    def test_create_memory_store(self):
        """Test creating the in-memory backend."""
        store = create_conversation_store("memory")
        assert isinstance(store, InMemoryConversationStore)
        assert store.backend_type == "memory"

    def test_create_sqlite_store(self, tmp_path):
        """Test creating the SQLite backend."""
        store = create_conversation_store("sqlite", path=tmp_path / "x.db")
        assert isinstance(store, SQLiteConversationStore)
        assert store.backend_type == "sqlite"

    def test_create_unknown_store_fails(self):
        """Test that an unknown backend is rejected."""
        with pytest.raises(ValueError, match="Unsupported conversation store"):
            create_conversation_store("postgres")


class TestConversationCrud:
    """Tests shared by every backend."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        """Test that a conversation round-trips with its messages in order."""
        conversation = _conversation()
        conversation.messages[0].images.append(MessageImage(url="https://img/1.png", filename="1.png"))
        await store.create_conversation(conversation)

        loaded = await store.get_conversation(conversation.id)
        assert loaded.title == "Greetings"
        assert [m.content for m in loaded.messages] == ["Hi", "Hello!"]
        assert [m.id for m in loaded.messages] == [m.id for m in conversation.messages]
        assert loaded.messages[1].has_animated is True
        assert loaded.messages[1].model_used == "gpt-4"
        assert loaded.messages[0].images[0].url == "https://img/1.png"
        assert loaded.messages[0].images[0].filename == "1.png"

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, store):
        """Test that an unknown id raises KeyError."""
        with pytest.raises(KeyError):
            await store.get_conversation("missing")

    @pytest.mark.asyncio
    async def test_returned_conversation_is_a_copy(self, store):
        """Test that mutating a loaded conversation does not change the store."""
        conversation = _conversation()
        await store.create_conversation(conversation)

        loaded = await store.get_conversation(conversation.id)
        loaded.messages[0].content = "changed"
        loaded.messages.clear()

        again = await store.get_conversation(conversation.id)
        assert [m.content for m in again.messages] == ["Hi", "Hello!"]

    @pytest.mark.asyncio
    async def test_list_summaries_newest_first(self, store):
        """Test that summaries are sorted by last update."""
        first = _conversation(title="First")
        second = _conversation(title="Second")
        await store.create_conversation(first)
        await store.create_conversation(second)
        await asyncio.sleep(0.01)
        await store.append_message(first.id, Message(role=Role.USER, content="Bump"))

        summaries = await store.list_summaries()
        assert [s.title for s in summaries] == ["First", "Second"]
        assert summaries[0].last_message == "Bump"

        limited = await store.list_summaries(limit=1)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_rename_and_set_model(self, store):
        """Test that title and model updates are persisted."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        await store.rename_conversation(conversation.id, "Renamed")
        await store.set_model(conversation.id, "gpt-4o")

        loaded = await store.get_conversation(conversation.id)
        assert loaded.title == "Renamed"
        assert loaded.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_soft_delete(self, store):
        """Test that a deleted conversation is hidden from get and list."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        await store.delete_conversation(conversation.id)

        with pytest.raises(KeyError):
            await store.get_conversation(conversation.id)
        assert await store.list_summaries() == []
        with pytest.raises(KeyError):
            await store.delete_conversation(conversation.id)

    @pytest.mark.asyncio
    async def test_append_and_update_message(self, store):
        """Test that messages can be added and overwritten by id."""
        conversation = _conversation()
        await store.create_conversation(conversation)

        reply = Message(role=Role.ASSISTANT, content="More")
        await store.append_message(conversation.id, reply)
        reply.has_animated = True
        reply.content = "More, edited"
        await store.update_message(conversation.id, reply)

        loaded = await store.get_conversation(conversation.id)
        assert loaded.messages[-1].id == reply.id
        assert loaded.messages[-1].content == "More, edited"
        assert loaded.messages[-1].has_animated is True

    @pytest.mark.asyncio
    async def test_update_unknown_message_raises(self, store):
        """Test that updating a message that is not stored fails."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        with pytest.raises(KeyError):
            await store.update_message(conversation.id, Message(role=Role.USER, content="ghost"))

    @pytest.mark.asyncio
    async def test_truncate_after(self, store):
        """Test that every message after the given one is removed."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        await store.append_message(conversation.id, Message(role=Role.USER, content="Again"))

        await store.truncate_after(conversation.id, conversation.messages[0].id)

        loaded = await store.get_conversation(conversation.id)
        assert [m.content for m in loaded.messages] == ["Hi"]

    @pytest.mark.asyncio
    async def test_remove_message(self, store):
        """Test that one message is removed and order is kept."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        third = Message(role=Role.USER, content="Third")
        await store.append_message(conversation.id, third)

        await store.remove_message(conversation.id, conversation.messages[1].id)

        loaded = await store.get_conversation(conversation.id)
        assert [m.content for m in loaded.messages] == ["Hi", "Third"]

    @pytest.mark.asyncio
    async def test_append_after_remove_keeps_order(self, store):
        """Test that new messages go after the remaining ones."""
        conversation = _conversation()
        await store.create_conversation(conversation)
        await store.remove_message(conversation.id, conversation.messages[1].id)
        await store.append_message(conversation.id, Message(role=Role.ASSISTANT, content="Later"))

        loaded = await store.get_conversation(conversation.id)
        assert [m.content for m in loaded.messages] == ["Hi", "Later"]


class TestSQLiteConversationStore:
    """Tests specific to the SQLite backend."""

    @pytest.mark.asyncio
    async def test_requires_connection(self, tmp_path):
        """Test that using the store before connect fails."""
        store = SQLiteConversationStore(tmp_path / "chats.db")
        with pytest.raises(RuntimeError):
            await store.get_conversation("any")

    @pytest.mark.asyncio
    async def test_data_survives_reconnect(self, tmp_path):
        """Test that conversations persist across connections."""
        path = tmp_path / "chats.db"
        conversation = _conversation()

        async with SQLiteConversationStore(path) as store:
            await store.create_conversation(conversation)

        async with SQLiteConversationStore(path) as store:
            loaded = await store.get_conversation(conversation.id)

        assert loaded.title == conversation.title
        assert len(loaded.messages) == 2

    @pytest.mark.asyncio
    async def test_timestamps_round_trip(self, sqlite_store):
        """Test that timestamps come back timezone-aware and equal."""
        conversation = _conversation()
        await sqlite_store.create_conversation(conversation)
        loaded = await sqlite_store.get_conversation(conversation.id)
        assert loaded.created_at == conversation.created_at
        assert loaded.messages[0].timestamp == conversation.messages[0].timestamp
        assert loaded.created_at.tzinfo is not None
