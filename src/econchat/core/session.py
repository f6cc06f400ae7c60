"""Session-keyed conversation storage with a bounded history per key."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any

from econchat.log import get_logger

logger = get_logger(__name__)

Message = dict[str, Any]

DEFAULT_MAX_MESSAGES = 20


class SessionStore(ABC):
    """Backing store for conversations. Implementations must copy on read and write."""

    @abstractmethod
    async def get(self, key: str) -> list[Message]:
        """Return the stored messages for *key*, or an empty list."""
        ...

    @abstractmethod
    async def put(self, key: str, messages: list[Message]) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*. Deleting a missing key is a no-op."""
        ...


class InMemorySessionStore(SessionStore):
    """Process-local dict store. Entries live until deleted or the process exits."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[Message]] = {}

    async def get(self, key: str) -> list[Message]:
        return copy.deepcopy(self._sessions.get(key, []))

    async def put(self, key: str, messages: list[Message]) -> None:
        self._sessions[key] = copy.deepcopy(messages)

    async def delete(self, key: str) -> None:
        self._sessions.pop(key, None)

    def __len__(self) -> int:
        return len(self._sessions)


class ConversationManager:
    """Applies the history cap on top of a :class:`SessionStore`."""

    def __init__(self, store: SessionStore, max_messages: int = DEFAULT_MAX_MESSAGES):
        self._store = store
        self._max_messages = max_messages

    @property
    def store(self) -> SessionStore:
        return self._store

    async def history(self, session_key: str) -> list[Message]:
        return await self._store.get(session_key)

    async def record_exchange(self, session_key: str, user_text: str, assistant_text: str) -> None:
        """Append one user/assistant pair, evicting the oldest entries past the cap."""
        messages = await self._store.get(session_key)
        messages.append({"role": "user", "content": user_text})
        messages.append({"role": "assistant", "content": assistant_text})
        if len(messages) > self._max_messages:
            messages = messages[-self._max_messages:]
            # providers reject a history that opens with an assistant turn
            while messages and messages[0]["role"] != "user":
                messages.pop(0)
        await self._store.put(session_key, messages)

    async def reset(self, session_key: str) -> None:
        await self._store.delete(session_key)
        logger.info("session_reset", session_key=session_key)
