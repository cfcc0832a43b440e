"""
Pytest configuration and shared fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add src to Python path for test imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from coreview.diff import DiffIndex, parse_diff  # noqa: E402
from tests import SAMPLE_DIFF  # noqa: E402


@pytest.fixture
def sample_index() -> DiffIndex:
    return parse_diff(SAMPLE_DIFF)
