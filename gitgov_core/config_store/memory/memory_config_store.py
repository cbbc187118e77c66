"""In-memory ConfigStore for tests."""

import copy
from typing import Optional

from gitgov_core.config_store.config_store import ConfigStore, GitGovConfig


class MemoryConfigStore(ConfigStore[None]):
    def __init__(self, config: Optional[GitGovConfig] = None):
        self._config = config

    async def load_config(self) -> Optional[GitGovConfig]:
        return copy.deepcopy(self._config)

    async def save_config(self, config: GitGovConfig) -> None:
        self._config = copy.deepcopy(config)

    # Test helpers

    def set_config(self, config: Optional[GitGovConfig]) -> None:
        self._config = config

    def get_config(self) -> Optional[GitGovConfig]:
        return self._config

    def clear(self) -> None:
        self._config = None
