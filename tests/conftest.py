"""Pytest configuration for tests.

Sets up Python path and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to Python path so imports work correctly
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tests.fixtures.fake_github import FakeGitHub  # noqa: E402


@pytest.fixture
def fake_github():
    """Fake GitHub repository with an empty-ish ``main`` branch."""
    fake = FakeGitHub()
    fake.seed("main", {"README.md": "# Records"})
    return fake
