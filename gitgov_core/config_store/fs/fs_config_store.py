"""Filesystem ConfigStore plus project-root discovery helpers."""

import asyncio
import json
import logging
import os
from typing import Optional

from common.config.config import CONFIG_FILE_NAME, GITGOV_DIR
from gitgov_core.config_store.config_store import ConfigStore, GitGovConfig

logger = logging.getLogger(__name__)


def _walk_up_for(marker: str, start_path: str) -> Optional[str]:
    """Return the first directory from ``start_path`` upward containing ``marker``."""
    current = os.path.abspath(start_path)
    while True:
        if os.path.exists(os.path.join(current, marker)):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


class FsConfigStore(ConfigStore[None]):
    """Reads and writes ``<project_root>/.gitgov/config.json``."""

    def __init__(self, project_root: str):
        self.config_path = os.path.join(project_root, GITGOV_DIR, CONFIG_FILE_NAME)

    async def load_config(self) -> Optional[GitGovConfig]:
        def _read() -> Optional[GitGovConfig]:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except FileNotFoundError:
                return None
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                return None

        return await asyncio.to_thread(_read)

    async def save_config(self, config: GitGovConfig) -> None:
        def _write() -> None:
            os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(json.dumps(config, indent=2))

        await asyncio.to_thread(_write)

    @staticmethod
    def find_project_root(start_path: Optional[str] = None) -> Optional[str]:
        """Nearest ancestor of ``start_path`` (default: cwd) holding ``.git``."""
        return _walk_up_for(".git", start_path or os.getcwd())

    @staticmethod
    def find_gitgov_root(start_path: Optional[str] = None) -> Optional[str]:
        """Nearest ancestor holding ``.gitgov``, falling back to the nearest ``.git``."""
        start = start_path or os.getcwd()
        return _walk_up_for(GITGOV_DIR, start) or _walk_up_for(".git", start)
