"""Local Git backend over the git executable."""

from gitgov_core.git.local.exec_command import exec_command
from gitgov_core.git.local.local_git_module import LocalGitModule

__all__ = ["LocalGitModule", "exec_command"]
