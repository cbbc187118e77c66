"""In-memory config store for tests."""

from gitgov_core.config_store.memory.memory_config_store import MemoryConfigStore

__all__ = ["MemoryConfigStore"]
