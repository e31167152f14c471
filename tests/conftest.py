"""Pytest configuration and shared fixtures."""
import pytest
import pytest_asyncio

from revealchat.chat import ChatService
from revealchat.conversation import InMemoryConversationStore
from revealchat.conversation.sqlite import SQLiteConversationStore
from revealchat.llm import EchoProvider
from revealchat.streaming import ManualScheduler


@pytest.fixture
def table_message():
    """Return the markdown table from the rendering examples."""
    return "| Name | Age |\n| --- | --- |\n| Alice | 30 |\n| Bob | 25 |"


@pytest.fixture
def mixed_message():
    """Return a reply mixing prose, a table, code, a note and steps."""
    return (
        "Here is what you asked for.\n"
        "\n"
        "| Tool | Use |\n"
        "| --- | --- |\n"
        "| git | history |\n"
        "\n"
        "```python\n"
        "def main():\n"
        "    return 1\n"
        "```\n"
        "\n"
        "Warning: back up first.\n"
        "\n"
        "1. Install it\n"
        "2. Run it"
    )


@pytest.fixture
def scheduler():
    """Return a scheduler driven by a virtual clock."""
    return ManualScheduler()


@pytest.fixture
def memory_store():
    """Return an in-memory conversation store."""
    return InMemoryConversationStore()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path):
    """Return a connected SQLite store in a temporary directory."""
    store = SQLiteConversationStore(tmp_path / "chats.db")
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def echo_llm():
    """Return the offline echo provider."""
    return EchoProvider()


@pytest.fixture
def chat_service(memory_store, echo_llm):
    """Return a chat service over the in-memory store and echo provider."""
    return ChatService(memory_store, echo_llm)
