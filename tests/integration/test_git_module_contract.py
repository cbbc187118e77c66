"""Scenarios every GitModule backend answers the same way."""

import dataclasses
import shutil
import subprocess
import tempfile

import pytest

from gitgov_core.git import (
    BranchAlreadyExistsError,
    GitFileNotFoundError,
    GitHubGitModule,
    GitHubGitModuleOptions,
    GetCommitHistoryOptions,
    LocalGitModule,
    MemoryGitModule,
    exec_command,
)
from tests.fixtures.fake_github import OWNER, REPO, TOKEN

BACKENDS = [
    "memory",
    pytest.param(
        "local",
        marks=pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available"),
    ),
    "github",
]


def _init_repo(path: str) -> None:
    for args in (
        ["init"],
        ["symbolic-ref", "HEAD", "refs/heads/main"],
        ["config", "user.name", "Test User"],
        ["config", "user.email", "test@example.com"],
        ["config", "commit.gpgsign", "false"],
        ["commit", "--allow-empty", "-m", "Initial commit"],
    ):
        subprocess.run(["git", *args], cwd=path, check=True, capture_output=True)


@pytest.fixture
def make_git(fake_github):
    temp_dirs = []

    def _make(backend: str):
        if backend == "memory":
            return MemoryGitModule()
        if backend == "local":
            path = tempfile.mkdtemp()
            temp_dirs.append(path)
            _init_repo(path)
            return LocalGitModule(exec_command, repo_root=path)
        options = GitHubGitModuleOptions(owner=OWNER, repo=REPO, token=TOKEN, default_branch="main")
        return GitHubGitModule(options, http_client=fake_github.client())

    yield _make
    for path in temp_dirs:
        shutil.rmtree(path, ignore_errors=True)


@pytest.mark.parametrize("backend", BACKENDS)
class TestGitModuleContract:
    @pytest.mark.asyncio
    async def test_staged_content_is_committed(self, make_git, backend):
        git = make_git(backend)

        await git.add(["records/a.json"], content_map={"records/a.json": '{"a": 1}'})
        assert await git.get_staged_files() == ["records/a.json"]
        assert await git.has_uncommitted_changes("records/") is True

        sha = await git.commit("add record")

        assert len(sha) == 40
        assert await git.get_staged_files() == []
        assert await git.get_commit_hash("HEAD") == sha
        assert await git.get_file_content(sha, "records/a.json") == '{"a": 1}'
        assert await git.get_commit_message(sha) == "add record"

    @pytest.mark.asyncio
    async def test_history_is_newest_first(self, make_git, backend):
        git = make_git(backend)

        await git.add(["a.txt"], content_map={"a.txt": "1"})
        first = await git.commit("first")
        await git.add(["a.txt"], content_map={"a.txt": "2"})
        second = await git.commit("second")

        history = await git.get_commit_history("main", GetCommitHistoryOptions(max_count=2))
        assert [c.hash for c in history] == [second, first]
        assert [f.name for f in dataclasses.fields(history[0])] == ["hash", "message", "author", "date"]
        assert all(c.message and c.author and c.date for c in history)

        assert [c.hash for c in await git.get_commit_history_range(first, second)] == [second]

        changes = await git.get_changed_files(first, second, "")
        assert [(c.status, c.file) for c in changes] == [("M", "a.txt")]

    @pytest.mark.asyncio
    async def test_missing_file(self, make_git, backend):
        git = make_git(backend)
        sha = await git.commit_allow_empty("empty")
        with pytest.raises(GitFileNotFoundError):
            await git.get_file_content(sha, "missing.txt")

    @pytest.mark.asyncio
    async def test_create_branch_switches_to_it(self, make_git, backend):
        git = make_git(backend)
        await git.commit_allow_empty("base")

        await git.create_branch("feature")

        assert await git.get_current_branch() == "feature"
        assert await git.branch_exists("feature") is True
        with pytest.raises(BranchAlreadyExistsError):
            await git.create_branch("feature")
