"""Small persistence stores for client-side state (cart, admin session, last order)."""
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class Store(ABC):
    """Holds one JSON-serializable value."""

    @abstractmethod
    def load(self):
        ...

    @abstractmethod
    def save(self, value):
        ...

    @abstractmethod
    def clear(self):
        ...


class MemoryStore(Store):
    def __init__(self, value=None):
        self._value = value

    def load(self):
        return self._value

    def save(self, value):
        self._value = value

    def clear(self):
        self._value = None


class JsonFileStore(Store):
    """A value kept as a JSON file. Unreadable files are discarded."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self):
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable %s: %s", self.path, e)
            self.clear()
            return None

    def save(self, value):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def clear(self):
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
