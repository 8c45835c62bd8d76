import logging
import os
from typing import Dict, Optional

from config import settings

logger = logging.getLogger("cumall.storage")


class MemoryStorage:
    # key-value store kept in process memory, lost on restart
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStorage:
    # one file per key inside a directory, written synchronously
    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self._path(key)
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        # replace is atomic, readers never see a half written cart
        os.replace(tmp_path, path)
        logger.debug("Saved %s (%d bytes)", path, len(value))


def default_storage() -> FileStorage:
    return FileStorage(settings.cart_storage_dir)
