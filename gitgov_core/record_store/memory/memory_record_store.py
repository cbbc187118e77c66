"""Dict-backed RecordStore for tests."""

import copy
from typing import Dict, List, Optional, TypeVar

from gitgov_core.record_store.record_store import RecordEntry, RecordStore, validate_id

V = TypeVar("V")


class MemoryRecordStore(RecordStore[V, None, None]):
    """Keeps records in a dict; values are deep-copied in and out by default."""

    def __init__(self, initial: Optional[Dict[str, V]] = None, deep_clone: bool = True):
        self._data: Dict[str, V] = initial if initial is not None else {}
        self._deep_clone = deep_clone

    def _clone(self, value: V) -> V:
        return copy.deepcopy(value) if self._deep_clone else value

    async def get(self, record_id: str) -> Optional[V]:
        validate_id(record_id)
        if record_id not in self._data:
            return None
        return self._clone(self._data[record_id])

    async def put(self, record_id: str, value: V, opts: None = None) -> None:
        validate_id(record_id)
        self._data[record_id] = self._clone(value)

    async def put_many(self, entries: List[RecordEntry[V]], opts: None = None) -> None:
        for entry in entries:
            validate_id(entry.id)
        for entry in entries:
            self._data[entry.id] = self._clone(entry.value)

    async def delete(self, record_id: str, opts: None = None) -> None:
        validate_id(record_id)
        self._data.pop(record_id, None)

    async def list(self) -> List[str]:
        return list(self._data.keys())

    async def exists(self, record_id: str) -> bool:
        validate_id(record_id)
        return record_id in self._data

    # Test helpers

    def clear(self) -> None:
        self._data.clear()

    def size(self) -> int:
        return len(self._data)

    def get_all(self) -> Dict[str, V]:
        return dict(self._data)
