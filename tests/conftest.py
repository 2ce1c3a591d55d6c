from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Ensure repo root is importable when running pytest from any CWD.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from polyhouse.parameters import PolyhouseConfig


@pytest.fixture
def default_config() -> PolyhouseConfig:
    """30 x 10 m gable house, eave 4 m, ridge 6 m."""
    return PolyhouseConfig()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)
