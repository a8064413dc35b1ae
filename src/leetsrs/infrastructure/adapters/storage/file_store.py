"""
File store: infrastructure adapter persisting each key as one file.

Implements KeyValueStore on top of a data directory. Writes go to a temporary
file in the same directory and are moved into place with `os.replace`, so a
collection is either fully old or fully new on disk.
"""

import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from leetsrs.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)


class FileStore(KeyValueStore):
    """Stores `<data_dir>/<url-quoted key>.json` files."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(value)} bytes to {path.name}")

    def remove(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)
