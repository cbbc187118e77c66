"""
Config Store Interface

Persistence for the single project configuration document
(``.gitgov/config.json``). Loading is fail-safe: a missing or unreadable
config yields None instead of an exception.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

R = TypeVar("R")  # save result

GitGovConfig = Dict[str, Any]


class ConfigStore(ABC, Generic[R]):
    """Abstract store for the project configuration."""

    @abstractmethod
    async def load_config(self) -> Optional[GitGovConfig]:
        pass

    @abstractmethod
    async def save_config(self, config: GitGovConfig) -> R:
        pass
