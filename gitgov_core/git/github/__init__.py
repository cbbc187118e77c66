"""Git backend over the GitHub REST API."""

from gitgov_core.git.github.github_git_module import GitHubGitModule
from gitgov_core.github.models.types import GitHubGitModuleOptions

__all__ = ["GitHubGitModule", "GitHubGitModuleOptions"]
