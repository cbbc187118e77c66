"""
Backend Factory

Builds Git modules, record stores and config stores for one of three
backends, selected by name at construction time:

- "local":  git executable + filesystem
- "memory": in-memory doubles (tests)
- "github": GitHub REST API

The backend defaults to GITGOV_BACKEND from the environment. Every call
returns a fresh instance; handles are never shared between callers.
"""

import logging
import os
from typing import Optional

import httpx

from common.config.config import (
    GH_DEFAULT_OWNER,
    GH_DEFAULT_REPO,
    GITGOV_BACKEND,
    GITGOV_DEFAULT_BRANCH,
    GITGOV_DIR,
    GITGOV_STATE_BRANCH,
    GITHUB_API_BASE_URL,
    GITHUB_TOKEN,
)
from gitgov_core.config_store import (
    ConfigStore,
    FsConfigStore,
    GitHubConfigStore,
    GitHubConfigStoreOptions,
    MemoryConfigStore,
)
from gitgov_core.git import (
    GitHubGitModule,
    GitHubGitModuleOptions,
    GitModule,
    LocalGitModule,
    MemoryGitModule,
    exec_command,
)
from gitgov_core.record_store import (
    FsRecordStore,
    GitHubRecordStore,
    GitHubRecordStoreOptions,
    IdEncoder,
    MemoryRecordStore,
    RecordStore,
)

logger = logging.getLogger(__name__)

BACKEND_LOCAL = "local"
BACKEND_MEMORY = "memory"
BACKEND_GITHUB = "github"
SUPPORTED_BACKENDS = (BACKEND_LOCAL, BACKEND_MEMORY, BACKEND_GITHUB)


def _resolve_backend(backend: Optional[str]) -> str:
    name = (backend or GITGOV_BACKEND).strip().lower()
    if name not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unknown backend '{name}'. Expected one of: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return name


def _require_github_coordinates(owner: Optional[str], repo: Optional[str]) -> tuple:
    owner = owner or GH_DEFAULT_OWNER
    repo = repo or GH_DEFAULT_REPO
    if not owner or not repo:
        raise ValueError(
            "GitHub backend requires owner and repo. "
            "Pass them explicitly or set GH_DEFAULT_OWNER and GH_DEFAULT_REPO in .env file."
        )
    return owner, repo


class BackendFactory:
    """Factory for the Git, record and config persistence backends."""

    @staticmethod
    def create_git_module(
        backend: Optional[str] = None,
        repo_root: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        token: Optional[str] = None,
        branch: str = GITGOV_DEFAULT_BRANCH,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> GitModule:
        """
        Create a GitModule.

        Args:
            backend: "local", "memory" or "github" (defaults to GITGOV_BACKEND)
            repo_root: Working copy for the local backend (auto-detected if omitted)
            owner: Repository owner for the github backend
            repo: Repository name for the github backend
            token: GitHub token (defaults to GITHUB_TOKEN)
            branch: Initial active branch for the github backend
            http_client: Shared httpx client for the github backend

        Returns:
            A new GitModule instance

        Raises:
            ValueError: If the backend is unknown or GitHub coordinates are missing
        """
        name = _resolve_backend(backend)
        logger.info(f"Creating {name} Git module")

        if name == BACKEND_LOCAL:
            return LocalGitModule(exec_command, repo_root=repo_root)
        if name == BACKEND_MEMORY:
            return MemoryGitModule()

        owner, repo = _require_github_coordinates(owner, repo)
        options = GitHubGitModuleOptions(
            owner=owner,
            repo=repo,
            token=token or GITHUB_TOKEN,
            default_branch=branch,
            api_base_url=GITHUB_API_BASE_URL,
        )
        return GitHubGitModule(options, http_client=http_client)

    @staticmethod
    def create_record_store(
        base_path: str,
        backend: Optional[str] = None,
        project_root: Optional[str] = None,
        id_encoder: Optional[IdEncoder] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        token: Optional[str] = None,
        ref: str = GITGOV_STATE_BRANCH,
        git_module: Optional[GitModule] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> RecordStore:
        """
        Create a RecordStore.

        Args:
            base_path: Record directory, relative to the project root (local)
                or to the repository root (github)
            backend: "local", "memory" or "github" (defaults to GITGOV_BACKEND)
            project_root: Root that ``base_path`` is joined to for the local backend
            id_encoder: Optional ID <-> file name mapping
            owner: Repository owner for the github backend
            repo: Repository name for the github backend
            token: GitHub token (defaults to GITHUB_TOKEN)
            ref: Branch the github backend reads and writes
            git_module: GitHub Git module for put_many; built for ``ref`` when omitted
            http_client: Shared httpx client for the github backend

        Returns:
            A new RecordStore instance
        """
        name = _resolve_backend(backend)

        if name == BACKEND_LOCAL:
            root = project_root or FsConfigStore.find_project_root() or os.getcwd()
            return FsRecordStore(os.path.join(root, base_path), id_encoder=id_encoder)
        if name == BACKEND_MEMORY:
            return MemoryRecordStore()

        owner, repo = _require_github_coordinates(owner, repo)
        token = token or GITHUB_TOKEN
        if git_module is None:
            git_module = BackendFactory.create_git_module(
                BACKEND_GITHUB, owner=owner, repo=repo, token=token, branch=ref, http_client=http_client
            )
        options = GitHubRecordStoreOptions(
            owner=owner, repo=repo, ref=ref, base_path=base_path, id_encoder=id_encoder
        )
        return GitHubRecordStore(options, git_module=git_module, token=token, http_client=http_client)

    @staticmethod
    def create_config_store(
        backend: Optional[str] = None,
        project_root: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        token: Optional[str] = None,
        ref: str = GITGOV_DEFAULT_BRANCH,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> ConfigStore:
        """
        Create a ConfigStore.

        Args:
            backend: "local", "memory" or "github" (defaults to GITGOV_BACKEND)
            project_root: Project root for the local backend (discovered if omitted)
            owner: Repository owner for the github backend
            repo: Repository name for the github backend
            token: GitHub token (defaults to GITHUB_TOKEN)
            ref: Branch holding the config for the github backend
            http_client: Shared httpx client for the github backend

        Returns:
            A new ConfigStore instance
        """
        name = _resolve_backend(backend)

        if name == BACKEND_LOCAL:
            root = project_root or FsConfigStore.find_gitgov_root() or os.getcwd()
            return FsConfigStore(root)
        if name == BACKEND_MEMORY:
            return MemoryConfigStore()

        owner, repo = _require_github_coordinates(owner, repo)
        options = GitHubConfigStoreOptions(owner=owner, repo=repo, ref=ref, base_path=GITGOV_DIR)
        return GitHubConfigStore(options, token=token or GITHUB_TOKEN, http_client=http_client)


def create_git_module(backend: Optional[str] = None, **kwargs) -> GitModule:
    """Convenience wrapper for BackendFactory.create_git_module."""
    return BackendFactory.create_git_module(backend, **kwargs)


def create_record_store(base_path: str, backend: Optional[str] = None, **kwargs) -> RecordStore:
    """Convenience wrapper for BackendFactory.create_record_store."""
    return BackendFactory.create_record_store(base_path, backend, **kwargs)


def create_config_store(backend: Optional[str] = None, **kwargs) -> ConfigStore:
    """Convenience wrapper for BackendFactory.create_config_store."""
    return BackendFactory.create_config_store(backend, **kwargs)
