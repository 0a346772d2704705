"""
Infrastructure: Preferences Store
JSON file holding string-set entries, {key: [value, ...]}.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Union
import structlog

from coinwatch.application.ports import IKeyValueStorage
from coinwatch.domain import FavoritesStorageError

logger = structlog.get_logger()

class JsonPreferences(IKeyValueStorage):
    """Key-value storage backed by a single JSON document"""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, List[str]]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("preferences_load_error", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.error("preferences_malformed", path=str(self.path))
            return {}
        return data

    def get_string_set(self, key: str) -> FrozenSet[str]:
        values = self._read_all().get(key)
        if not isinstance(values, list):
            return frozenset()
        return frozenset(v for v in values if isinstance(v, str))

    def put_string_set(self, key: str, values: Iterable[str]) -> None:
        """Writes the whole document, replacing the file atomically"""
        data = self._read_all()
        data[key] = sorted(values)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("preferences_write_failed", path=str(self.path), error=str(e))
            raise FavoritesStorageError(f"cannot write {self.path}: {e}") from e
