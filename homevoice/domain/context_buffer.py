"""Recent-utterance buffer for commands split across ASR turns."""

import sys
from collections import deque
from typing import Callable, Deque, List

from homevoice.domain.models import NO_INTENT, Intent, NoIntent


def _log(msg: str):
    print(msg, file=sys.stderr)


class ContextBuffer:
    """Bounded FIFO of the last few final user utterances.

    When a single utterance yields nothing, it is appended and the joined
    buffer (oldest → newest) gets one more extraction attempt. A successful
    combined match empties the buffer so the same phrase cannot fire twice.
    """

    def __init__(self, extract: Callable[[str], Intent], max_size: int = 3):
        self._extract = extract
        self._entries: Deque[str] = deque(maxlen=max_size)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def push(self, text: str):
        text = text.strip()
        if text:
            self._entries.append(text)

    def clear(self):
        self._entries.clear()

    def retry_with_context(self, failed_text: str) -> Intent:
        """Retry extraction on the buffered utterances plus ``failed_text``."""
        self.push(failed_text)
        if len(self._entries) < 2:
            return NO_INTENT

        combined = " ".join(self._entries)
        intent = self._extract(combined)
        if isinstance(intent, NoIntent):
            return NO_INTENT

        _log(f"[ContextBuffer] matched combined text {combined!r} -> {intent}")
        self.clear()
        return intent
