"""Shared constants for git backends and record stores."""

# ============================================================================
# Git object model
# ============================================================================

# Mode and type of every blob entry written through the trees API
TREE_ENTRY_MODE_FILE = "100644"
TREE_ENTRY_TYPE_BLOB = "blob"

# Length of a fully-resolved SHA-1 commit hash
FULL_COMMIT_HASH_LENGTH = 40

# ============================================================================
# Local backend
# ============================================================================

# Markers left by git inside .git while a rebase is paused
REBASE_MARKER_DIRS = ("rebase-merge", "rebase-apply")

# Substrings of git output that signal a merge conflict during pull
MERGE_CONFLICT_MARKERS = ("CONFLICT", "Automatic merge failed", "fix conflicts")

# Substrings of git output that signal a conflict during rebase / pull --rebase
REBASE_CONFLICT_MARKERS = (
    "CONFLICT",
    "could not apply",
    "fix conflicts",
    "Resolve all conflicts",
)

# Substrings git prints when a path is absent from a commit
FILE_MISSING_MARKERS = ("does not exist", "exists on disk, but not in")

NO_LOCAL_CHANGES_TO_SAVE = "No local changes to save"

# Exit code reported by the default executor when a command times out
COMMAND_TIMEOUT_EXIT_CODE = 124

# ============================================================================
# Memory backend
# ============================================================================

MEMORY_REPO_ROOT = "/test/repo"
MEMORY_PLACEHOLDER_HASH = "abc123def456"
MEMORY_DEFAULT_AUTHOR = "Test User <test@example.com>"

# ============================================================================
# Remote (GitHub) backend
# ============================================================================

# Status strings of the compare endpoint mapped to changed-file statuses
COMPARE_STATUS_MAP = {
    "added": "A",
    "copied": "A",
    "modified": "M",
    "changed": "M",
    "removed": "D",
}

GITHUB_ACCEPT_HEADER = "application/vnd.github+json"
