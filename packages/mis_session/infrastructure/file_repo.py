import os
import re
from typing import Optional

from packages.mis_core.logging import get_logger
from packages.mis_session.repository import KeyedStore

logger = get_logger("mis.persistence.file")

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyedStore(KeyedStore):
    """
    File-based implementation of KeyedStore.
    One JSON document per key inside `base_dir`; writes replace the file atomically.
    """
    def __init__(self, base_dir: str = "data/sessions"):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{_SAFE_KEY.sub('_', key)}.json")

    async def save(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_path, path)

    async def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug(f"Delete of missing key ignored: {key}")
