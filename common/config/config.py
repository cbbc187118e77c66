"""
Configuration module for the GitGov record store core.

Values are read from the process environment (optionally seeded from a .env
file) once at import time. Nothing here is mandatory: every setting has a
default suitable for local development and tests.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# GitHub REST API
GITHUB_API_BASE_URL = os.getenv("GITHUB_API_BASE_URL", "https://api.github.com")
GITHUB_API_VERSION = os.getenv("GITHUB_API_VERSION", "2022-11-28")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GH_DEFAULT_OWNER = os.getenv("GH_DEFAULT_OWNER", "")
GH_DEFAULT_REPO = os.getenv("GH_DEFAULT_REPO", "")
GITHUB_REQUEST_TIMEOUT = float(os.getenv("GITHUB_REQUEST_TIMEOUT", "150"))
GITHUB_CONNECT_TIMEOUT = float(os.getenv("GITHUB_CONNECT_TIMEOUT", "60"))
GITHUB_PAGE_SIZE = int(os.getenv("GITHUB_PAGE_SIZE", "100"))

# Branches
GITGOV_STATE_BRANCH = os.getenv("GITGOV_STATE_BRANCH", "gitgov-state")
GITGOV_DEFAULT_BRANCH = os.getenv("GITGOV_DEFAULT_BRANCH", "main")

# Record layout
GITGOV_DIR = os.getenv("GITGOV_DIR", ".gitgov")
RECORD_FILE_EXTENSION = os.getenv("RECORD_FILE_EXTENSION", ".json")
CONFIG_FILE_NAME = os.getenv("CONFIG_FILE_NAME", "config.json")

# Local git executable
GIT_EXECUTABLE = os.getenv("GIT_EXECUTABLE", "git")
GIT_COMMAND_TIMEOUT_MS = int(os.getenv("GIT_COMMAND_TIMEOUT_MS", "0")) or None

# Backend selection used by gitgov_core.factories ("local", "memory", "github")
GITGOV_BACKEND = os.getenv("GITGOV_BACKEND", "local")
