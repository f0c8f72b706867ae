"""
Durable key/value storage for the client session.

Values are strings, like browser local storage. ``FileSessionStorage``
survives process restarts; ``MemorySessionStorage`` lives as long as the
object does.
"""
from pathlib import Path
from typing import Dict, Optional, Union
import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


class MemorySessionStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def set_many(self, entries: Dict[str, str]) -> None:
        self._data.update({k: str(v) for k, v in entries.items()})

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileSessionStorage:
    """
    Session entries kept in a single JSON object on disk.

    Every write replaces the file atomically so a crash mid-write leaves the
    previous contents intact. An unreadable file is treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring session file %s: expected a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, entries: Dict[str, str]) -> None:
        """Write several entries with a single file replace."""
        data = self._read()
        data.update({k: str(v) for k, v in entries.items()})
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
