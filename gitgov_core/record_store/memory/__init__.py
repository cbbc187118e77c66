"""In-memory record store for tests."""

from gitgov_core.record_store.memory.memory_record_store import MemoryRecordStore

__all__ = ["MemoryRecordStore"]
