"""In-memory Git backend for tests."""

from gitgov_core.git.memory.memory_git_module import MemoryGitModule

__all__ = ["MemoryGitModule"]
