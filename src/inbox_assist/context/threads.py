"""Sources for the prior messages of a conversation."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Iterable, Mapping

from inbox_assist.context.models import ThreadMessage
from inbox_assist.exceptions import ThreadUnavailableError

UNAVAILABLE_DELAY = 0.1


class ThreadSource(ABC):
    """Look up earlier messages of a conversation, newest first."""

    @abstractmethod
    async def fetch(self, conversation_id: str, max_depth: int) -> list[ThreadMessage]:
        ...


class UnavailableThreadSource(ThreadSource):
    """Default source for hosts without conversation history access.

    Waits briefly, as a real lookup would, then raises
    :class:`ThreadUnavailableError` so callers can tell "no history
    available" apart from "the thread is empty".
    """

    def __init__(self, delay: float = UNAVAILABLE_DELAY):
        self.delay = delay

    async def fetch(self, conversation_id: str, max_depth: int) -> list[ThreadMessage]:
        await asyncio.sleep(self.delay)
        raise ThreadUnavailableError(
            f"Thread retrieval is not available for conversation {conversation_id!r}"
        )


class StaticThreadSource(ThreadSource):
    """Serve pre-built threads keyed by conversation id."""

    def __init__(self, threads: Mapping[str, Iterable[ThreadMessage]]):
        self.threads = {key: list(messages) for key, messages in threads.items()}

    async def fetch(self, conversation_id: str, max_depth: int) -> list[ThreadMessage]:
        return self.threads.get(conversation_id, [])[:max_depth]
