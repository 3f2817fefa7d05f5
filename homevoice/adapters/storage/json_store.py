"""JSON file-based temperature store — implements TemperatureStorePort."""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Dict, Optional


def _log(msg: str):
    print(msg, file=sys.stderr)


class JsonTemperatureStore:
    """Last settled temperature per room, kept in one JSON object on disk."""

    FILENAME = "room_temperatures.json"

    def __init__(self, storage_dir: str = "memory"):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._storage_dir / self.FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> Dict[str, int]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except Exception as e:
            _log(f"[JsonStore] unreadable {self._path}: {e}")
            return {}
        if not isinstance(raw, dict):
            return {}
        temps = {}
        for room, temp in raw.items():
            if isinstance(temp, int) and not isinstance(temp, bool):
                temps[str(room)] = temp
        return temps

    def save(self, room: str, temp: int) -> None:
        temps = self.load_all()
        temps[room] = int(temp)
        content = json.dumps(temps, ensure_ascii=False, indent=2, sort_keys=True)
        # Atomic write
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._storage_dir), suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(self._path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


class InMemoryTemperatureStore:
    """Process-local store, used when persistence is disabled and in tests."""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._temps: Dict[str, int] = dict(initial or {})

    def load_all(self) -> Dict[str, int]:
        return dict(self._temps)

    def save(self, room: str, temp: int) -> None:
        self._temps[room] = int(temp)
