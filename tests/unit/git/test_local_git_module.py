"""Tests for LocalGitModule against real temporary repositories."""

import shutil
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from gitgov_core.git import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    CommitAuthor,
    ExecResult,
    GetCommitHistoryOptions,
    GitCommandError,
    GitFileNotFoundError,
    LocalGitModule,
    RebaseConflictError,
    RebaseNotInProgressError,
    exec_command,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def _git(repo: str, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)
    return result.stdout.strip()


@pytest.fixture
def temp_repo():
    """Create an initialized repository on branch main with one commit."""
    temp_dir = tempfile.mkdtemp()
    _git(temp_dir, "init")
    _git(temp_dir, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(temp_dir, "config", "user.name", "Test User")
    _git(temp_dir, "config", "user.email", "test@example.com")
    _git(temp_dir, "config", "commit.gpgsign", "false")

    (Path(temp_dir) / "README.md").write_text("# Test Repo")
    _git(temp_dir, "add", ".")
    _git(temp_dir, "commit", "-m", "Initial commit")

    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def git(temp_repo):
    return LocalGitModule(exec_command, repo_root=temp_repo)


class TestConstruction:
    def test_requires_executor(self):
        with pytest.raises(ValueError):
            LocalGitModule(None)

    @pytest.mark.asyncio
    async def test_full_hash_short_circuits(self):
        executor = AsyncMock(return_value=ExecResult(exit_code=0))
        git = LocalGitModule(executor, repo_root="/repo")
        full = "0123456789abcdef0123456789abcdef01234567"

        assert await git.get_commit_hash(full) == full
        executor.assert_not_called()

    @pytest.mark.asyncio
    async def test_command_failure_raises_git_command_error(self):
        executor = AsyncMock(return_value=ExecResult(exit_code=128, stderr="fatal: bad revision"))
        git = LocalGitModule(executor, repo_root="/repo")

        with pytest.raises(GitCommandError) as exc_info:
            await git.get_commit_hash("nope")
        assert exc_info.value.stderr == "fatal: bad revision"

    @pytest.mark.asyncio
    async def test_executor_receives_repo_root_as_cwd(self):
        executor = AsyncMock(return_value=ExecResult(exit_code=0, stdout="main\n"))
        git = LocalGitModule(executor, repo_root="/repo")

        assert await git.get_current_branch() == "main"
        command, args, options = executor.call_args.args
        assert command == "git"
        assert args == ["rev-parse", "--abbrev-ref", "HEAD"]
        assert options.cwd == "/repo"


@requires_git
class TestReadOperations:
    @pytest.mark.asyncio
    async def test_repo_root_and_branch(self, git, temp_repo):
        assert await git.get_repo_root() == temp_repo
        assert await git.get_current_branch() == "main"
        assert await git.branch_exists("main") is True
        assert await git.branch_exists("missing") is False

    @pytest.mark.asyncio
    async def test_repo_root_detected_when_omitted(self, temp_repo):
        async def executor(command, args, options=None):
            if args == ["rev-parse", "--show-toplevel"]:
                return ExecResult(exit_code=0, stdout=f"{temp_repo}\n")
            return await exec_command(command, args, options)

        git = LocalGitModule(executor)
        assert await git.get_repo_root() == temp_repo

    @pytest.mark.asyncio
    async def test_commit_history(self, git, temp_repo):
        head = _git(temp_repo, "rev-parse", "HEAD")

        history = await git.get_commit_history("main")

        assert len(history) == 1
        assert history[0].hash == head
        assert history[0].message == "Initial commit"
        assert history[0].author == "Test User <test@example.com>"

    @pytest.mark.asyncio
    async def test_missing_file_raises_not_found(self, git):
        with pytest.raises(GitFileNotFoundError):
            await git.get_file_content("HEAD", "does-not-exist.txt")

    @pytest.mark.asyncio
    async def test_uncommitted_changes(self, git, temp_repo):
        assert await git.has_uncommitted_changes() is False
        (Path(temp_repo) / "README.md").write_text("changed")
        assert await git.has_uncommitted_changes() is True
        assert await git.has_uncommitted_changes("other/") is False

    @pytest.mark.asyncio
    async def test_no_remotes(self, git):
        assert await git.is_remote_configured("origin") is False
        assert await git.list_remote_branches("origin") == []
        assert await git.get_branch_remote("main") is None


@requires_git
class TestWriteOperations:
    @pytest.mark.asyncio
    async def test_add_commit_and_read_back(self, git):
        await git.add(["records/a.json"], content_map={"records/a.json": '{"x": 1}'})
        assert await git.get_staged_files() == ["records/a.json"]

        sha = await git.commit("add a", CommitAuthor(name="Alice", email="alice@example.com"))

        assert len(sha) == 40
        assert await git.get_commit_message(sha) == "add a"
        assert await git.get_file_content(sha, "records/a.json") == '{"x": 1}'
        history = await git.get_commit_history("main", GetCommitHistoryOptions(max_count=1))
        assert history[0].author == "Alice <alice@example.com>"

    @pytest.mark.asyncio
    async def test_changed_files_and_range(self, git):
        base = await git.get_commit_hash("HEAD")
        await git.add(["records/a.json"], content_map={"records/a.json": "{}"})
        first = await git.commit("add a")
        await git.rm(["README.md"])
        second = await git.commit("remove readme")

        changes = await git.get_changed_files(base, second, "")
        assert {(c.status, c.file) for c in changes} == {("A", "records/a.json"), ("D", "README.md")}

        commits = await git.get_commit_history_range(base, second)
        assert [c.hash for c in commits] == [second, first]

        filtered = await git.get_commit_history_range(
            base, second, GetCommitHistoryOptions(path_filter="records/")
        )
        assert [c.hash for c in filtered] == [first]

    @pytest.mark.asyncio
    async def test_commit_allow_empty(self, git):
        before = await git.get_commit_hash("HEAD")
        after = await git.commit_allow_empty("empty")
        assert after != before

    @pytest.mark.asyncio
    async def test_branches(self, git):
        await git.create_branch("feature")
        assert await git.get_current_branch() == "feature"

        with pytest.raises(BranchAlreadyExistsError):
            await git.create_branch("feature")
        with pytest.raises(BranchNotFoundError):
            await git.checkout_branch("missing")

        await git.checkout_branch("main")
        assert await git.get_current_branch() == "main"

    @pytest.mark.asyncio
    async def test_orphan_branch_reports_name(self, git):
        await git.checkout_orphan_branch("gitgov-state")
        assert await git.get_current_branch() == "gitgov-state"

    @pytest.mark.asyncio
    async def test_stash_round_trip(self, git, temp_repo):
        assert await git.stash() is None

        (Path(temp_repo) / "README.md").write_text("draft")
        stash_hash = await git.stash("wip")

        assert stash_hash is not None and len(stash_hash) == 40
        assert (Path(temp_repo) / "README.md").read_text() == "# Test Repo"
        assert await git.stash_pop() is True
        assert (Path(temp_repo) / "README.md").read_text() == "draft"
        assert await git.stash_pop() is False

    @pytest.mark.asyncio
    async def test_reset_hard(self, git, temp_repo):
        base = await git.get_commit_hash("HEAD")
        await git.commit_allow_empty("extra")
        await git.reset_hard(base)
        assert await git.get_commit_hash("HEAD") == base


@requires_git
class TestRebase:
    @pytest.mark.asyncio
    async def test_rebase_not_in_progress(self, git):
        assert await git.is_rebase_in_progress() is False
        with pytest.raises(RebaseNotInProgressError):
            await git.rebase_continue()
        with pytest.raises(RebaseNotInProgressError):
            await git.rebase_abort()

    @pytest.mark.asyncio
    async def test_conflicting_rebase_then_abort(self, git, temp_repo):
        await git.create_branch("feature")
        await git.add(["README.md"], content_map={"README.md": "feature side"})
        feature_head = await git.commit("feature edit")

        await git.checkout_branch("main")
        await git.add(["README.md"], content_map={"README.md": "main side"})
        await git.commit("main edit")

        await git.checkout_branch("feature")
        with pytest.raises(RebaseConflictError) as exc_info:
            await git.rebase("main")

        assert exc_info.value.conflicted_files == ["README.md"]
        assert await git.is_rebase_in_progress() is True
        assert await git.get_conflicted_files() == ["README.md"]

        await git.rebase_abort()

        assert await git.is_rebase_in_progress() is False
        assert await git.get_commit_hash("HEAD") == feature_head

    @pytest.mark.asyncio
    async def test_merge_base(self, git):
        base = await git.get_commit_hash("HEAD")
        await git.create_branch("feature")
        await git.commit_allow_empty("on feature")
        await git.checkout_branch("main")
        await git.commit_allow_empty("on main")

        assert await git.get_merge_base("main", "feature") == base
        with pytest.raises(BranchNotFoundError):
            await git.get_merge_base("main", "missing")
