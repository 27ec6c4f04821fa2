# boutique/database.py
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from .log import get_logger

# Storage slots shared by the storefront and the admin.

PRODUCTS_KEY = "products"
ADMIN_AUTH_KEY = "adminAuth"

logger = get_logger(__name__)


class Storage(ABC):
    """Key/value slots holding serialized blobs, like a browser's local storage."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass


class MemoryStorage(Storage):
    """Process-lifetime storage. Used for the session slot and in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._slots: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._slots


class FileStorage(Storage):
    """One file per slot under ``directory``; survives restarts."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.warning("slot is not valid UTF-8, treating as empty", key=key, path=str(path))
            return None

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug("slot written", key=key, path=str(path), size=len(value))

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
