import json
import logging
import os
import threading

logger = logging.getLogger(__name__)


class MemoryStorage:
    """String key/value store with the localStorage calling convention."""

    def __init__(self, initial=None):
        self._items = dict(initial or {})

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value: str):
        self._items[key] = value

    def remove_item(self, key):
        self._items.pop(key, None)


class JsonFileStorage(MemoryStorage):
    """
    MemoryStorage mirrored to a JSON file so state survives restarts of the
    owning shell. The file holds one object mapping keys to string values.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        super().__init__(self._read())

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: expected an object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _flush(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(self._items, fh)
        os.replace(tmp, self.path)

    def set_item(self, key, value: str):
        with self._lock:
            super().set_item(key, value)
            self._flush()

    def remove_item(self, key):
        with self._lock:
            super().remove_item(key)
            self._flush()
