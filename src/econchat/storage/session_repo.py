"""SQLite-backed session store: one JSON document of messages per session key."""

from __future__ import annotations

import json

from econchat.core.session import Message, SessionStore
from econchat.log import get_logger
from econchat.storage.database import Database

logger = get_logger(__name__)


class SqliteSessionStore(SessionStore):
    def __init__(self, db: Database):
        self._db = db

    async def get(self, key: str) -> list[Message]:
        cursor = await self._db.conn.execute(
            "SELECT messages_json FROM conversations WHERE session_key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        if row is None:
            return []
        return json.loads(row["messages_json"])

    async def put(self, key: str, messages: list[Message]) -> None:
        await self._db.conn.execute(
            """INSERT INTO conversations (session_key, messages_json)
               VALUES (?, ?)
               ON CONFLICT(session_key)
               DO UPDATE SET messages_json = excluded.messages_json,
                             updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
            (key, json.dumps(messages, ensure_ascii=False, default=str)),
        )
        await self._db.conn.commit()

    async def delete(self, key: str) -> None:
        cursor = await self._db.conn.execute(
            "DELETE FROM conversations WHERE session_key = ?",
            (key,),
        )
        await self._db.conn.commit()
        logger.debug("session_deleted", session_key=key, rows=cursor.rowcount)
