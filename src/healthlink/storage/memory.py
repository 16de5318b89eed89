from __future__ import annotations

import copy
import threading
from typing import Dict, List, Optional, Type

from .base import R, RecordStorage
from .models import Record


class MemStorage(RecordStorage):
    """Process-local store; dicts keep insertion order for clinic listings."""

    def __init__(self, *, seed_clinics: bool = True):
        # Reentrant: _locked() holds it across nested _get/_put calls.
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Record]] = {}
        if seed_clinics:
            self.seed_sample_clinics()

    def _locked(self, collection: str, record_id: str):
        return self._lock

    def _put(self, collection: str, record: Record) -> None:
        with self._lock:
            # Copy so callers mutating their object do not change stored state.
            self._collections.setdefault(collection, {})[record.id] = copy.deepcopy(record)  # type: ignore[attr-defined]

    def _get(self, collection: str, record_id: str, cls: Type[R]) -> Optional[R]:
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None  # type: ignore[return-value]

    def _values(self, collection: str, cls: Type[R]) -> List[R]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]  # type: ignore[misc]

    def _delete(self, collection: str, record_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(record_id, None) is not None
