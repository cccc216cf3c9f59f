"""Pytest configuration for the Monkey test suite."""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path for monkey imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from monkey.objects import Environment  # noqa: E402


@pytest.fixture
def env() -> Environment:
    """A fresh top-level environment."""
    return Environment()
