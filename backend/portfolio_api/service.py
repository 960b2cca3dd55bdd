from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping

from .store import RecordStore

log = logging.getLogger("portfolio")

RESERVED_FIELDS = ("id", "createdAt", "updatedAt")


class PortfolioNotFound(LookupError):
    def __init__(self, record_id: str):
        super().__init__(f"Portfolio {record_id} not found")
        self.record_id = record_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(dt: datetime) -> str:
    """UTC, millisecond precision, 'Z' suffix: 2025-01-01T12:00:00.000Z"""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PortfolioService:
    def __init__(self, store: RecordStore,
                 clock: Callable[[], datetime] = utc_now,
                 new_id: Callable[[], Any] = uuid.uuid4):
        self.store = store
        self._clock = clock
        self._new_id = new_id

    def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        portfolios = self.store.load_all()
        ts = iso_timestamp(self._clock())
        record: Dict[str, Any] = {"id": str(self._new_id())}
        # generated values win over caller-supplied ones
        record.update((k, v) for k, v in fields.items() if k not in RESERVED_FIELDS)
        record["createdAt"] = ts
        record["updatedAt"] = ts
        portfolios.append(record)
        self.store.save_all(portfolios)
        log.info("Created portfolio %s (%d total)", record["id"], len(portfolios))
        return record

    def list_all(self) -> List[Dict[str, Any]]:
        return self.store.load_all()

    def delete_by_id(self, record_id: str) -> Dict[str, Any]:
        portfolios = self.store.load_all()
        idx = next((i for i, p in enumerate(portfolios)
                    if isinstance(p, dict) and p.get("id") == record_id), None)
        if idx is None:
            raise PortfolioNotFound(record_id)
        removed = portfolios.pop(idx)
        self.store.save_all(portfolios)
        log.info("Deleted portfolio %s (%d left)", record_id, len(portfolios))
        return removed
