import random
import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import abacus_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from abacus_toolkit.rules import BlockSettings, RuleConfig  # noqa: E402


# Common test fixtures
@pytest.fixture
def rng():
    """Seeded pseudo-random source."""
    return random.Random(1234)


@pytest.fixture
def make_rng():
    """Factory for seeded pseudo-random sources."""
    def _make(seed: int = 0) -> random.Random:
        return random.Random(seed)
    return _make


@pytest.fixture
def simple_blocks():
    """Block settings with only the simple block active."""
    return {"simple": BlockSettings(digits=(1, 2, 3, 4))}


@pytest.fixture
def four_bead_config():
    """Simple four-bead configuration with fixed three-step examples."""
    return RuleConfig(selected_digits=(1, 2, 3, 4), min_steps=3, max_steps=3)
