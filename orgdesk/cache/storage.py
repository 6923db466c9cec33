"""
Local key-value storages for the cache store and the session selection.
"""
import logging
import os
import tempfile
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from .base import KeyValueStorage

logger = logging.getLogger(__name__)


class MemoryStorage(KeyValueStorage):
    """Process-lifetime storage backed by a dict."""

    def __init__(self, initial: Dict[str, str] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class FileStorage(KeyValueStorage):
    """
    Durable storage keeping one file per key inside `directory`.

    Writes go through a temporary file and an atomic rename, so a crash never
    leaves a half-written value behind.
    """

    SUFFIX = '.json'

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe='') + self.SUFFIX)

    def get_item(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), 'r', encoding='UTF-8') as file:
                return file.read()
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='UTF-8') as file:
                file.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove_item(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass

    def keys(self) -> List[str]:
        return [
            unquote(name[:-len(self.SUFFIX)])
            for name in os.listdir(self.directory)
            if name.endswith(self.SUFFIX)
        ]
