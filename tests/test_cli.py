"""Tests for the command line interface."""
import asyncio

import pytest
from typer.testing import CliRunner

from revealchat.cli.app import app
from revealchat.cli.providers import get_llm, get_store
from revealchat.conversation import Conversation, Message, Role
from revealchat.conversation.sqlite import SQLiteConversationStore
from revealchat.llm import EchoProvider, OpenAIProvider

runner = CliRunner()


@pytest.fixture
def message_file(tmp_path, mixed_message):
    """Write the mixed message to a file."""
    path = tmp_path / "reply.md"
    path.write_text(mixed_message, encoding="utf-8")
    return path


@pytest.fixture
def saved_conversation(tmp_path):
    """Store one conversation in a fresh SQLite database."""
    db_path = tmp_path / "chats.db"
    conversation = Conversation(
        title="Saved chat",
        messages=[
            Message(role=Role.USER, content="Hi"),
            Message(role=Role.ASSISTANT, content="Hello from history", has_animated=True),
        ],
    )

    async def _save():
        async with SQLiteConversationStore(db_path) as store:
            await store.create_conversation(conversation)

    asyncio.run(_save())
    return db_path, conversation


def _load(db_path, conversation_id):
    async def _get():
        async with SQLiteConversationStore(db_path) as store:
            return await store.get_conversation(conversation_id)

    return asyncio.run(_get())


class TestMessageCommands:
    """Tests for render, sections and tokens."""

    def test_sections(self, message_file):
        """Test that the section table lists every section type."""
        result = runner.invoke(app, ["sections", str(message_file)])
        assert result.exit_code == 0
        for name in ("plain", "table", "code_block", "note_block", "step_by_step"):
            assert name in result.output

    def test_render(self, message_file):
        """Test that a message file is rendered."""
        result = runner.invoke(app, ["render", str(message_file)])
        assert result.exit_code == 0
        assert "def main():" in result.output

    def test_render_from_stdin(self):
        """Test that '-' reads the message from stdin."""
        result = runner.invoke(app, ["render", "-"], input="Warning: mind the gap")
        assert result.exit_code == 0
        assert "mind the gap" in result.output

    def test_missing_file(self, tmp_path):
        """Test that a missing file is an error."""
        result = runner.invoke(app, ["render", str(tmp_path / "nope.md")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_tokens(self, tmp_path):
        """Test the dry-run token table and total time."""
        path = tmp_path / "hello.txt"
        path.write_text("Hello, world!", encoding="utf-8")

        result = runner.invoke(app, ["tokens", str(path)])
        assert result.exit_code == 0
        assert "4" in result.output
        assert "0.14s" in result.output
        assert "completed" in result.output

    def test_tokens_rejects_bad_speed(self, message_file):
        """Test that an out-of-range speed is rejected."""
        result = runner.invoke(app, ["tokens", str(message_file), "--speed", "100"])
        assert result.exit_code == 1

    def test_models(self):
        """Test that the model catalog is listed."""
        result = runner.invoke(app, ["models"])
        assert result.exit_code == 0
        assert "gpt-3.5-turbo" in result.output
        assert "gpt-4o" in result.output


class TestHistoryCommands:
    """Tests for the history sub-commands."""

    def test_list_empty(self, tmp_path):
        """Test listing an empty database."""
        result = runner.invoke(app, ["history", "list", "--db", str(tmp_path / "empty.db")])
        assert result.exit_code == 0
        assert "No saved conversations" in result.output

    def test_list(self, saved_conversation):
        """Test that saved conversations are listed."""
        db_path, conversation = saved_conversation
        result = runner.invoke(app, ["history", "list", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Saved" in result.output

    def test_show(self, saved_conversation):
        """Test that a conversation is printed with its messages."""
        db_path, conversation = saved_conversation
        result = runner.invoke(app, ["history", "show", conversation.id, "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Hello from history" in result.output

    def test_show_missing(self, tmp_path):
        """Test that an unknown id is an error."""
        result = runner.invoke(app, ["history", "show", "missing", "--db", str(tmp_path / "x.db")])
        assert result.exit_code == 1
        assert "Conversation not found" in result.output

    def test_rename(self, saved_conversation):
        """Test that a conversation can be renamed."""
        db_path, conversation = saved_conversation
        result = runner.invoke(app, ["history", "rename", conversation.id, "New name", "--db", str(db_path)])
        assert result.exit_code == 0
        assert _load(db_path, conversation.id).title == "New name"

    def test_delete(self, saved_conversation):
        """Test that a conversation can be deleted without a prompt."""
        db_path, conversation = saved_conversation
        result = runner.invoke(app, ["history", "delete", conversation.id, "--yes", "--db", str(db_path)])
        assert result.exit_code == 0
        with pytest.raises(KeyError):
            _load(db_path, conversation.id)


class TestProviders:
    """Tests for environment-driven construction."""

    def test_store_from_environment(self, monkeypatch, tmp_path):
        """Test that the store backend follows REVEALCHAT_STORE."""
        monkeypatch.setenv("REVEALCHAT_STORE", "memory")
        assert get_store().backend_type == "memory"

        monkeypatch.setenv("REVEALCHAT_STORE", "sqlite")
        monkeypatch.setenv("REVEALCHAT_DB_PATH", str(tmp_path / "env.db"))
        store = get_store()
        assert store.backend_type == "sqlite"
        assert store.db_path == tmp_path / "env.db"

    def test_unknown_store(self):
        """Test that an unknown backend is rejected."""
        with pytest.raises(ValueError):
            get_store("postgres")

    def test_llm_without_key_falls_back_to_echo(self, monkeypatch):
        """Test that a missing OpenAI key selects the echo provider."""
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert isinstance(get_llm(), EchoProvider)

    def test_llm_with_key(self, monkeypatch):
        """Test that a key selects the OpenAI provider."""
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-4")
        llm = get_llm()
        assert isinstance(llm, OpenAIProvider)
        assert llm.model == "gpt-4"

    def test_unknown_llm_provider(self, monkeypatch):
        """Test that an unknown provider gives None."""
        monkeypatch.setenv("LLM_PROVIDER", "llamacorp")
        assert get_llm() is None
