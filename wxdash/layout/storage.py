"""
Key/value record storage for layouts.

Each key is one JSON file in the storage directory. This is the only
place that touches the filesystem; it raises StorageReadError and
StorageWriteError and leaves the recovery policy to the callers.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import quote, unquote

from wxdash.exceptions import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class JsonFileStorage:
    """Stores JSON values under string keys, one file per key.

    Usage:
        storage = JsonFileStorage(Path("~/.config/wxdash/storage").expanduser())
        storage.set_item("wxdash_city_layout_v1_austin", [...])
        storage.get_item("wxdash_city_layout_v1_austin")
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        # Owner ids are user input; quote so they cannot escape the directory
        return self.directory / f"{quote(key, safe='')}{_SUFFIX}"

    def get_item(self, key: str) -> Optional[Any]:
        """Parsed value for a key, or None if nothing is stored.

        Raises:
            StorageReadError: If the file exists but cannot be read or parsed
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise StorageReadError("Stored record is not valid JSON", key=key) from e
        except OSError as e:
            raise StorageReadError("Stored record could not be read", key=key) from e

    def set_item(self, key: str, value: Any) -> None:
        """Write a value, replacing the file atomically.

        Raises:
            StorageWriteError: If the directory or file cannot be written
        """
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(value) + "\n")
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError("Record could not be written", key=key) from e

    def remove_item(self, key: str) -> bool:
        """Delete a key. Returns True if something was removed.

        Raises:
            StorageWriteError: If the file exists but cannot be deleted
        """
        path = self.path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError("Record could not be removed", key=key) from e

    def keys(self, prefix: str = "") -> List[str]:
        """Stored keys starting with ``prefix``, sorted."""
        if not self.directory.exists():
            return []
        found = []
        for path in self.directory.glob(f"*{_SUFFIX}"):
            key = unquote(path.name[: -len(_SUFFIX)])
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)
