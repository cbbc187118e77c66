"""Git backend driving the git executable.

Every call goes through the injected executor with the repository root as
working directory; textual output is parsed and known failure patterns are
mapped onto gitgov_core.git.errors.
"""

import asyncio
import logging
import os
from typing import Dict, List, Optional

from common.config.config import GIT_COMMAND_TIMEOUT_MS, GIT_EXECUTABLE
from common.constants import (
    FILE_MISSING_MARKERS,
    MERGE_CONFLICT_MARKERS,
    NO_LOCAL_CHANGES_TO_SAVE,
    REBASE_CONFLICT_MARKERS,
    REBASE_MARKER_DIRS,
)
from gitgov_core.git.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    GitCommandError,
    GitFileNotFoundError,
    MergeConflictError,
    RebaseConflictError,
    RebaseNotInProgressError,
)
from gitgov_core.git.git_module import GitModule
from gitgov_core.git.types import (
    ChangedFile,
    CommitAuthor,
    CommitInfo,
    ConfigScope,
    ExecCommand,
    ExecOptions,
    ExecResult,
    GetCommitHistoryOptions,
    is_full_commit_hash,
)

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"
LOG_FORMAT = "--format=%H%x1f%s%x1f%an <%ae>%x1f%aI"
HEAD_REF_PREFIX = "ref: refs/heads/"
ALREADY_A_REPOSITORY_MSG = "Directory is already a Git repository"


def _split_lines(output: str) -> List[str]:
    return [line for line in output.strip().split("\n") if line]


def _parse_log(output: str) -> List[CommitInfo]:
    commits = []
    for line in _split_lines(output):
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) < 4:
            raise GitCommandError("Invalid git log output format", line)
        commits.append(
            CommitInfo(hash=parts[0], message=parts[1], author=parts[2], date=parts[3])
        )
    return commits


def _contains_any(output: str, markers) -> bool:
    return any(marker in output for marker in markers)


class LocalGitModule(GitModule):
    """GitModule over a local working copy."""

    def __init__(
        self,
        exec_command: ExecCommand,
        repo_root: Optional[str] = None,
        git_executable: str = GIT_EXECUTABLE,
        timeout_ms: Optional[int] = GIT_COMMAND_TIMEOUT_MS,
    ):
        """Initialize the local backend.

        Args:
            exec_command: Process executor (see gitgov_core.git.local.exec_command)
            repo_root: Repository root; detected lazily when omitted
            git_executable: Name or path of the git binary
            timeout_ms: Per-command timeout passed to the executor
        """
        if exec_command is None:
            raise ValueError("exec_command is required for LocalGitModule")

        self._exec_command = exec_command
        self._repo_root = repo_root or ""
        self._git = git_executable
        self._timeout_ms = timeout_ms

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _ensure_repo_root(self) -> str:
        if not self._repo_root:
            result = await self._exec_command(
                self._git, ["rev-parse", "--show-toplevel"], ExecOptions(timeout_ms=self._timeout_ms)
            )
            if result.exit_code != 0:
                raise GitCommandError("Not in a Git repository", result.stderr, "rev-parse --show-toplevel")
            self._repo_root = result.stdout.strip()
        return self._repo_root

    async def _exec_git(
        self, args: List[str], env: Optional[Dict[str, str]] = None
    ) -> ExecResult:
        cwd = await self._ensure_repo_root()
        logger.debug(f"git {' '.join(args)} (cwd={cwd})")
        return await self._exec_command(
            self._git, args, ExecOptions(cwd=cwd, env=env, timeout_ms=self._timeout_ms)
        )

    async def _run_git(self, args: List[str], error_message: str) -> ExecResult:
        """Run git and raise GitCommandError on a non-zero exit."""
        result = await self._exec_git(args)
        if result.exit_code != 0:
            raise GitCommandError(error_message, result.stderr, " ".join(args), result.stdout)
        return result

    async def _head_hash(self) -> str:
        result = await self._run_git(["rev-parse", "HEAD"], "Failed to resolve HEAD")
        return result.stdout.strip()

    async def _require_branch(self, branch_name: str) -> None:
        if not await self.branch_exists(branch_name):
            raise BranchNotFoundError(branch_name)

    # ------------------------------------------------------------------
    # Raw / init
    # ------------------------------------------------------------------

    async def exec(
        self, command: str, args: List[str], options: Optional[ExecOptions] = None
    ) -> ExecResult:
        options = options or ExecOptions()
        cwd = options.cwd or await self._ensure_repo_root()
        return await self._exec_command(
            command, args, ExecOptions(cwd=cwd, env=options.env, timeout_ms=options.timeout_ms)
        )

    async def init(self) -> None:
        cwd = self._repo_root or os.getcwd()

        check = await self._exec_command(self._git, ["rev-parse", "--git-dir"], ExecOptions(cwd=cwd))
        if check.exit_code == 0:
            raise GitCommandError(
                ALREADY_A_REPOSITORY_MSG,
                f"Git directory exists at {check.stdout.strip()}",
                "rev-parse --git-dir",
            )

        result = await self._exec_command(self._git, ["init"], ExecOptions(cwd=cwd))
        if result.exit_code != 0:
            raise GitCommandError("Failed to initialize Git repository", result.stderr, "init")

        if not self._repo_root:
            root = await self._exec_command(self._git, ["rev-parse", "--show-toplevel"], ExecOptions(cwd=cwd))
            if root.exit_code == 0:
                self._repo_root = root.stdout.strip()
        logger.info(f"Initialized Git repository at {self._repo_root or cwd}")

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def get_repo_root(self) -> str:
        return await self._ensure_repo_root()

    async def get_current_branch(self) -> str:
        result = await self._exec_git(["rev-parse", "--abbrev-ref", "HEAD"])

        if result.exit_code != 0:
            # Orphan branches have no commit for rev-parse to resolve
            head = await self._read_head_file()
            if head and head.startswith(HEAD_REF_PREFIX):
                return head[len(HEAD_REF_PREFIX):]
            raise GitCommandError("Failed to get current branch", result.stderr, "rev-parse --abbrev-ref HEAD")

        branch = result.stdout.strip()
        if branch == "HEAD":
            raise GitCommandError("In detached HEAD state", "", "rev-parse --abbrev-ref HEAD")
        return branch

    async def _read_head_file(self) -> Optional[str]:
        head_path = os.path.join(await self._ensure_repo_root(), ".git", "HEAD")

        def _read() -> Optional[str]:
            try:
                with open(head_path, "r", encoding="utf-8") as f:
                    return f.read().strip()
            except OSError:
                return None

        return await asyncio.to_thread(_read)

    async def get_commit_hash(self, ref: str = "HEAD") -> str:
        if is_full_commit_hash(ref):
            return ref

        result = await self._run_git(["rev-parse", ref], f'Failed to get commit hash for ref "{ref}"')
        commit_hash = result.stdout.strip()
        logger.debug(f"Got commit hash for {ref}: {commit_hash[:8]}...")
        return commit_hash

    async def set_config(self, key: str, value: str, scope: str = "local") -> None:
        if scope == ConfigScope.GLOBAL:
            scope_flag = "--global"
        elif scope == ConfigScope.SYSTEM:
            scope_flag = "--system"
        else:
            scope_flag = "--local"

        await self._run_git(["config", scope_flag, key, value], f"Failed to set Git config {key} to {value}")
        logger.debug(f"Git config {key} set ({scope_flag})")

    async def get_merge_base(self, branch_a: str, branch_b: str) -> str:
        await self._require_branch(branch_a)
        await self._require_branch(branch_b)

        result = await self._run_git(
            ["merge-base", branch_a, branch_b],
            f"Failed to find merge base between {branch_a} and {branch_b}",
        )
        return result.stdout.strip()

    async def get_changed_files(
        self, from_commit: str, to_commit: str, path_filter: str
    ) -> List[ChangedFile]:
        args = ["diff", "--name-status", f"{from_commit}..{to_commit}", "--"]
        if path_filter:
            args.append(path_filter)
        result = await self._run_git(args, "Failed to get changed files")

        changed = []
        for line in _split_lines(result.stdout):
            parts = line.split("\t")
            if len(parts) < 2:
                raise GitCommandError("Invalid git diff output format", line)
            changed.append(ChangedFile(status=parts[0], file=parts[1]))
        return changed

    async def get_staged_files(self) -> List[str]:
        result = await self._run_git(["diff", "--cached", "--name-only"], "Failed to get staged files")
        return _split_lines(result.stdout)

    async def get_file_content(self, commit_hash: str, file_path: str) -> str:
        result = await self._exec_git(["show", f"{commit_hash}:{file_path}"])

        if result.exit_code != 0:
            if _contains_any(result.stderr, FILE_MISSING_MARKERS):
                raise GitFileNotFoundError(file_path, commit_hash)
            raise GitCommandError(
                f"Failed to get file content for {file_path}", result.stderr, "show", result.stdout
            )
        return result.stdout

    async def get_commit_history(
        self, branch: str, options: Optional[GetCommitHistoryOptions] = None
    ) -> List[CommitInfo]:
        args = ["log", branch, LOG_FORMAT] + self._history_args(options)
        result = await self._run_git(args, f"Failed to get commit history for {branch}")
        return _parse_log(result.stdout)

    async def get_commit_history_range(
        self,
        from_hash: str,
        to_hash: str,
        options: Optional[GetCommitHistoryOptions] = None,
    ) -> List[CommitInfo]:
        args = ["log", f"{from_hash}..{to_hash}", LOG_FORMAT] + self._history_args(options)
        result = await self._run_git(args, f"Failed to get commit history range {from_hash}..{to_hash}")
        return _parse_log(result.stdout)

    @staticmethod
    def _history_args(options: Optional[GetCommitHistoryOptions]) -> List[str]:
        args = []
        if options and options.max_count:
            args.append(f"--max-count={options.max_count}")
        if options and options.path_filter:
            args.extend(["--", options.path_filter])
        return args

    async def get_commit_message(self, commit_hash: str) -> str:
        result = await self._run_git(
            ["show", commit_hash, "--format=%B", "--no-patch"],
            f"Failed to get commit message for {commit_hash}",
        )
        return result.stdout.strip()

    async def has_uncommitted_changes(self, path_filter: Optional[str] = None) -> bool:
        args = ["status", "--porcelain"]
        if path_filter:
            args.extend(["--", path_filter])
        result = await self._run_git(args, "Failed to check for uncommitted changes")
        return bool(result.stdout.strip())

    async def is_rebase_in_progress(self) -> bool:
        git_dir = os.path.join(await self._ensure_repo_root(), ".git")
        for marker in REBASE_MARKER_DIRS:
            if await asyncio.to_thread(os.path.exists, os.path.join(git_dir, marker)):
                return True
        return False

    async def branch_exists(self, branch_name: str) -> bool:
        result = await self._exec_git(["branch", "--list", branch_name])
        if result.exit_code != 0:
            return False
        return bool(result.stdout.strip())

    async def list_remote_branches(self, remote_name: str) -> List[str]:
        result = await self._exec_git(["branch", "-r", "--list", f"{remote_name}/*"])
        if result.exit_code != 0:
            return []

        prefix = f"{remote_name}/"
        branches = []
        for line in _split_lines(result.stdout):
            name = line.strip()
            if name.startswith(prefix):
                name = name[len(prefix):]
            # Skip symbolic entries such as "origin/HEAD -> origin/main"
            if name and " -> " not in name:
                branches.append(name)
        return branches

    async def is_remote_configured(self, remote_name: str) -> bool:
        result = await self._exec_git(["remote"])
        if result.exit_code != 0:
            return False
        return remote_name in [line.strip() for line in _split_lines(result.stdout)]

    async def get_branch_remote(self, branch_name: str) -> Optional[str]:
        await self._require_branch(branch_name)

        result = await self._exec_git(["config", f"branch.{branch_name}.remote"])
        if result.exit_code != 0:
            return None
        return result.stdout.strip() or None

    async def get_conflicted_files(self) -> List[str]:
        result = await self._run_git(
            ["diff", "--name-only", "--diff-filter=U"], "Failed to get conflicted files"
        )
        return _split_lines(result.stdout)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def checkout_branch(self, branch_name: str) -> None:
        await self._require_branch(branch_name)
        await self._run_git(["checkout", branch_name], f"Failed to checkout branch {branch_name}")

    async def stash(self, message: Optional[str] = None) -> Optional[str]:
        args = ["stash", "push"]
        if message:
            args.extend(["-m", message])
        result = await self._run_git(args, "Failed to stash changes")

        if NO_LOCAL_CHANGES_TO_SAVE in result.stdout + result.stderr:
            return None

        stash_ref = await self._run_git(["rev-parse", "stash@{0}"], "Failed to resolve stash")
        return stash_ref.stdout.strip()

    async def stash_pop(self) -> bool:
        listing = await self._run_git(["stash", "list"], "Failed to list stashes")
        if not listing.stdout.strip():
            return False

        result = await self._exec_git(["stash", "pop"])
        if result.exit_code != 0:
            output = result.stdout + result.stderr
            if _contains_any(output, MERGE_CONFLICT_MARKERS):
                raise MergeConflictError(await self.get_conflicted_files())
            raise GitCommandError("Failed to pop stash", result.stderr, "stash pop", result.stdout)
        return True

    async def stash_drop(self, stash_hash: Optional[str] = None) -> None:
        listing = await self._run_git(["stash", "list", "--format=%H"], "Failed to list stashes")
        hashes = _split_lines(listing.stdout)
        if not hashes:
            return

        index = 0
        if stash_hash:
            matches = [i for i, h in enumerate(hashes) if h.startswith(stash_hash)]
            if not matches:
                raise GitCommandError(f"Stash not found: {stash_hash}", "", "stash drop")
            index = matches[0]
        await self._run_git(["stash", "drop", f"stash@{{{index}}}"], "Failed to drop stash")

    async def checkout_orphan_branch(self, branch_name: str) -> None:
        await self._run_git(["checkout", "--orphan", branch_name], f"Failed to create orphan branch {branch_name}")

    async def fetch(self, remote: str) -> None:
        await self._run_git(["fetch", remote], f"Failed to fetch from {remote}")

    async def pull(self, remote: str, branch_name: str) -> None:
        result = await self._exec_git(["pull", "--no-rebase", remote, branch_name])

        if result.exit_code != 0:
            if _contains_any(result.stdout + result.stderr, MERGE_CONFLICT_MARKERS):
                raise MergeConflictError(await self.get_conflicted_files())
            raise GitCommandError(
                f"Failed to pull from {remote}/{branch_name}", result.stderr, "pull", result.stdout
            )

    async def pull_rebase(self, remote: str, branch_name: str) -> None:
        result = await self._exec_git(["pull", "--rebase", remote, branch_name])

        if result.exit_code != 0:
            if _contains_any(result.stdout + result.stderr, REBASE_CONFLICT_MARKERS):
                raise RebaseConflictError(await self.get_conflicted_files())
            raise GitCommandError(
                f"Failed to pull --rebase from {remote}/{branch_name}", result.stderr, "pull --rebase", result.stdout
            )

    async def reset_hard(self, target: str) -> None:
        await self._run_git(["reset", "--hard", target], f"Failed to reset --hard to {target}")

    async def checkout_files_from_branch(
        self, source_branch: str, file_paths: List[str]
    ) -> None:
        await self._require_branch(source_branch)
        await self._run_git(
            ["checkout", source_branch, "--", *file_paths],
            f"Failed to checkout files from {source_branch}",
        )

    async def add(
        self,
        file_paths: List[str],
        force: bool = False,
        content_map: Optional[Dict[str, str]] = None,
    ) -> None:
        if content_map:
            await self._write_working_tree(content_map)

        paths = list(file_paths)
        for path in content_map or {}:
            if path not in paths:
                paths.append(path)

        args = ["add"]
        if force:
            args.append("--force")
        await self._run_git(args + ["--", *paths], "Failed to add files")

    async def _write_working_tree(self, content_map: Dict[str, str]) -> None:
        root = await self._ensure_repo_root()

        def _write() -> None:
            for rel_path, content in content_map.items():
                full_path = os.path.join(root, rel_path)
                os.makedirs(os.path.dirname(full_path), exist_ok=True)
                with open(full_path, "w", encoding="utf-8") as f:
                    f.write(content)

        await asyncio.to_thread(_write)

    async def rm(self, file_paths: List[str]) -> None:
        await self._run_git(["rm", "--", *file_paths], "Failed to remove files")

    async def commit(self, message: str, author: Optional[CommitAuthor] = None) -> str:
        args = ["commit", "-m", message]
        if author:
            args.extend(["--author", str(author)])

        await self._run_git(args, "Failed to create commit")
        commit_hash = await self._head_hash()
        logger.debug(f"Created commit {commit_hash[:8]}")
        return commit_hash

    async def commit_allow_empty(
        self, message: str, author: Optional[CommitAuthor] = None
    ) -> str:
        args = ["commit", "--allow-empty", "-m", message]
        if author:
            args.extend(["--author", str(author)])

        await self._run_git(args, "Failed to create empty commit")
        return await self._head_hash()

    async def push(self, remote: str, branch_name: str) -> None:
        await self._run_git(["push", remote, branch_name], f"Failed to push {branch_name} to {remote}")

    async def push_with_upstream(self, remote: str, branch_name: str) -> None:
        await self._run_git(
            ["push", "-u", remote, branch_name],
            f"Failed to push {branch_name} to {remote} with upstream",
        )

    async def set_upstream(
        self, branch_name: str, remote: str, remote_branch: str
    ) -> None:
        await self._require_branch(branch_name)
        await self._run_git(
            ["branch", "--set-upstream-to", f"{remote}/{remote_branch}", branch_name],
            f"Failed to set upstream for {branch_name}",
        )

    # ------------------------------------------------------------------
    # Rebase / branch operations
    # ------------------------------------------------------------------

    async def rebase_continue(self) -> str:
        if not await self.is_rebase_in_progress():
            raise RebaseNotInProgressError()

        logger.debug("Continuing rebase...")
        result = await self._exec_git(["rebase", "--continue"], env={"GIT_EDITOR": "true"})
        if result.exit_code != 0:
            logger.error(f"Rebase continue failed: {result.stderr}")
            raise GitCommandError("Failed to continue rebase", result.stderr, "rebase --continue", result.stdout)

        commit_hash = await self._head_hash()
        logger.info(f"Rebase continued successfully, commit: {commit_hash[:8]}...")
        return commit_hash

    async def rebase_abort(self) -> None:
        if not await self.is_rebase_in_progress():
            raise RebaseNotInProgressError()
        await self._run_git(["rebase", "--abort"], "Failed to abort rebase")

    async def create_branch(
        self, branch_name: str, start_point: Optional[str] = None
    ) -> None:
        if await self.branch_exists(branch_name):
            raise BranchAlreadyExistsError(branch_name)

        args = ["checkout", "-b", branch_name]
        if start_point:
            args.append(start_point)
        await self._run_git(args, f"Failed to create branch {branch_name}")
        logger.debug(f"Created and checked out branch: {branch_name}")

    async def rebase(self, target_branch: str) -> None:
        result = await self._exec_git(["rebase", target_branch])

        if result.exit_code != 0:
            output = result.stdout + result.stderr
            if _contains_any(output, REBASE_CONFLICT_MARKERS) or "conflict" in output:
                raise RebaseConflictError(await self.get_conflicted_files())
            raise GitCommandError(
                f"Failed to rebase onto {target_branch}", result.stderr, "rebase", result.stdout
            )

        logger.debug(f"Rebased onto: {target_branch}")
