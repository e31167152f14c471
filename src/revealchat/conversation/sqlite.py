"""SQLite conversation store.

Provides persistent conversation storage using a SQLite database.
Uses aiosqlite for async access.
"""

import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from .base import DEFAULT_LIST_LIMIT, ConversationStore
from .models import (
    PREVIEW_LENGTH,
    Conversation,
    ConversationSummary,
    Message,
    MessageImage,
    Role,
    utc_now,
)

_MESSAGE_COLUMNS = (
    "id, role, content, images, timestamp, has_animated, "
    "model_used, tokens_used, processing_time_ms"
)


class SQLiteConversationStore(ConversationStore):
    """SQLite-backed conversation store.

    Messages keep their order through a position column; images are stored
    as a JSON column and ``has_animated`` as an integer.
    """

    def __init__(self, path: str | Path = "./revealchat.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create database tables."""
        db = self._db()
        await db.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                model TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                conversation_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                images TEXT DEFAULT '[]',
                timestamp TEXT NOT NULL,
                has_animated INTEGER NOT NULL DEFAULT 0,
                model_used TEXT,
                tokens_used INTEGER,
                processing_time_ms INTEGER,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, position)
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_updated
            ON conversations(is_active, updated_at)
        """)

        await db.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._connection

    async def _require_active(self, conversation_id: str) -> None:
        async with self._db().execute(
            "SELECT 1 FROM conversations WHERE id = ? AND is_active = 1",
            (conversation_id,)
        ) as cursor:
            if await cursor.fetchone() is None:
                raise KeyError(f"Conversation not found: {conversation_id}")

    async def _position_of(self, conversation_id: str, message_id: str) -> int:
        async with self._db().execute(
            "SELECT position FROM messages WHERE conversation_id = ? AND id = ?",
            (conversation_id, message_id)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            raise KeyError(f"Message not found: {message_id}")
        return row[0]

    async def _touch(self, conversation_id: str) -> None:
        await self._db().execute(
            "UPDATE conversations SET updated_at = ? WHERE id = ?",
            (utc_now().isoformat(), conversation_id)
        )

    async def _insert_message(self, conversation_id: str, position: int, message: Message) -> None:
        await self._db().execute(f"""
            INSERT INTO messages (conversation_id, position, {_MESSAGE_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            conversation_id,
            position,
            message.id,
            message.role.value,
            message.content,
            json.dumps([image.to_dict() for image in message.images]),
            message.timestamp.isoformat(),
            int(message.has_animated),
            message.model_used,
            message.tokens_used,
            message.processing_time_ms,
        ))

    @staticmethod
    def _row_to_message(row: tuple) -> Message:
        (message_id, role, content, images_json, ts, has_animated,
         model_used, tokens_used, processing_time_ms) = row
        return Message(
            id=message_id,
            role=Role(role),
            content=content,
            images=[MessageImage.model_validate(image) for image in json.loads(images_json or "[]")],
            timestamp=datetime.fromisoformat(ts),
            has_animated=bool(has_animated),
            model_used=model_used,
            tokens_used=tokens_used,
            processing_time_ms=processing_time_ms,
        )

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        db = self._db()
        await db.execute("""
            INSERT INTO conversations (id, title, model, created_at, updated_at, is_active)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            conversation.id,
            conversation.title,
            conversation.model,
            conversation.created_at.isoformat(),
            conversation.updated_at.isoformat(),
            int(conversation.is_active),
        ))
        for position, message in enumerate(conversation.messages):
            await self._insert_message(conversation.id, position, message)
        await db.commit()
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        db = self._db()
        async with db.execute(
            """
            SELECT id, title, model, created_at, updated_at
            FROM conversations
            WHERE id = ? AND is_active = 1
            """,
            (conversation_id,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            raise KeyError(f"Conversation not found: {conversation_id}")

        cid, title, model, created_at, updated_at = row

        async with db.execute(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE conversation_id = ?
            ORDER BY position ASC
            """,
            (cid,)
        ) as cursor:
            rows = await cursor.fetchall()

        return Conversation(
            id=cid,
            title=title,
            model=model,
            messages=[self._row_to_message(r) for r in rows],
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    async def list_summaries(self, limit: int = DEFAULT_LIST_LIMIT) -> list[ConversationSummary]:
        async with self._db().execute(
            """
            SELECT c.id, c.title, c.model, c.created_at, c.updated_at,
                (SELECT m.content FROM messages m
                 WHERE m.conversation_id = c.id
                 ORDER BY m.position DESC LIMIT 1)
            FROM conversations c
            WHERE c.is_active = 1
            ORDER BY c.updated_at DESC
            LIMIT ?
            """,
            (limit,)
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            ConversationSummary(
                id=cid,
                title=title,
                model=model,
                last_message=(last or "")[:PREVIEW_LENGTH],
                created_at=datetime.fromisoformat(created_at),
                updated_at=datetime.fromisoformat(updated_at),
            )
            for cid, title, model, created_at, updated_at, last in rows
        ]

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        await self._require_active(conversation_id)
        db = self._db()
        await db.execute(
            "UPDATE conversations SET title = ?, updated_at = ? WHERE id = ?",
            (title, utc_now().isoformat(), conversation_id)
        )
        await db.commit()

    async def set_model(self, conversation_id: str, model: str) -> None:
        await self._require_active(conversation_id)
        db = self._db()
        await db.execute(
            "UPDATE conversations SET model = ?, updated_at = ? WHERE id = ?",
            (model, utc_now().isoformat(), conversation_id)
        )
        await db.commit()

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._require_active(conversation_id)
        db = self._db()
        await db.execute(
            "UPDATE conversations SET is_active = 0, updated_at = ? WHERE id = ?",
            (utc_now().isoformat(), conversation_id)
        )
        await db.commit()

    async def append_message(self, conversation_id: str, message: Message) -> None:
        await self._require_active(conversation_id)
        db = self._db()
        async with db.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 FROM messages WHERE conversation_id = ?",
            (conversation_id,)
        ) as cursor:
            row = await cursor.fetchone()
            position = row[0]

        await self._insert_message(conversation_id, position, message)
        await self._touch(conversation_id)
        await db.commit()

    async def update_message(self, conversation_id: str, message: Message) -> None:
        await self._require_active(conversation_id)
        await self._position_of(conversation_id, message.id)
        db = self._db()
        await db.execute("""
            UPDATE messages
            SET content = ?, images = ?, has_animated = ?, model_used = ?,
                tokens_used = ?, processing_time_ms = ?
            WHERE conversation_id = ? AND id = ?
        """, (
            message.content,
            json.dumps([image.to_dict() for image in message.images]),
            int(message.has_animated),
            message.model_used,
            message.tokens_used,
            message.processing_time_ms,
            conversation_id,
            message.id,
        ))
        await self._touch(conversation_id)
        await db.commit()

    async def truncate_after(self, conversation_id: str, message_id: str) -> None:
        await self._require_active(conversation_id)
        position = await self._position_of(conversation_id, message_id)
        db = self._db()
        await db.execute(
            "DELETE FROM messages WHERE conversation_id = ? AND position > ?",
            (conversation_id, position)
        )
        await self._touch(conversation_id)
        await db.commit()

    async def remove_message(self, conversation_id: str, message_id: str) -> None:
        await self._require_active(conversation_id)
        await self._position_of(conversation_id, message_id)
        db = self._db()
        await db.execute(
            "DELETE FROM messages WHERE conversation_id = ? AND id = ?",
            (conversation_id, message_id)
        )
        await self._touch(conversation_id)
        await db.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
