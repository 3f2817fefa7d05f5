"""Presentation state — the active page and the outgoing UI event queue.

Implements NavigationPort and HealthPort for a browser (or other) client that
polls ``GET /events``.
"""

import asyncio
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from homevoice.domain.registry import room_key


def _log(msg: str):
    print(msg, file=sys.stderr)


class PresentationState:
    """Tracks the current page and queues navigation / health events."""

    def __init__(self, initial_page: str = "home", max_pending: int = 100):
        self._current_page = room_key(initial_page)
        self._events: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=max_pending)

    @property
    def current_page(self) -> str:
        return self._current_page

    def get_current_page(self) -> str:
        return self._current_page

    async def navigate(self, room: str) -> None:
        self._current_page = room_key(room)
        self._emit({"type": "navigate", "room": self._current_page})

    async def redirect(self, utterance: str) -> None:
        self._current_page = "health"
        self._emit({"type": "health", "utterance": utterance})

    def drain(self) -> List[Dict[str, Any]]:
        """Pop every pending event, oldest first."""
        events = []
        while not self._events.empty():
            events.append(self._events.get_nowait())
        return events

    def _emit(self, event: Dict[str, Any]):
        event["timestamp"] = datetime.now(timezone.utc).isoformat()
        if self._events.full():
            dropped = self._events.get_nowait()
            _log(f"[Presentation] event queue full, dropped {dropped['type']}")
        self._events.put_nowait(event)
