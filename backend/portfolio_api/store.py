from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

log = logging.getLogger("portfolio")


class StoreError(Exception):
    pass


class StoreInitError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class RecordStore:
    """
    Whole-collection persistence over a single JSON array file.

    Every save rewrites the full file. There is no locking: two concurrent
    read-modify-write cycles can interleave and the later save wins.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        if self._path.exists():
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._write([])
        except OSError as e:
            raise StoreInitError(f"Cannot create data file {self._path}: {e}") from e
        log.info("Created empty data file %s", self._path)

    def load_all(self) -> List[Dict[str, Any]]:
        # read failures come back as an empty collection
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.error("Error reading portfolios from %s: %s", self._path, e)
            return []
        if not isinstance(data, list):
            log.error("Error reading portfolios from %s: top-level value is %s, not an array",
                      self._path, type(data).__name__)
            return []
        return data

    def save_all(self, records: List[Dict[str, Any]]) -> None:
        try:
            self._write(records)
        except (OSError, TypeError, ValueError) as e:
            log.error("Error writing portfolios to %s: %s", self._path, e)
            raise StoreWriteError(str(e)) from e

    def _write(self, records: List[Dict[str, Any]]) -> None:
        text = json.dumps(records, ensure_ascii=False, indent=2, allow_nan=False)
        with open(self._path, "w", encoding="utf-8") as f:
            f.write(text)
