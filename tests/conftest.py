import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from utils.scenario_loader import GameConfig, DEFAULT_CONFIG_DATA, parse_game_config  # noqa: E402


@pytest.fixture
def textbook_config():
    """Five processes, three resources, available = [3, 3, 2]."""
    return parse_game_config(DEFAULT_CONFIG_DATA)


@pytest.fixture
def two_resource_config():
    """Resources A:10, B:5; P0 max [7, 5], P1 max [3, 2]; nothing allocated."""
    return GameConfig.from_vectors(["A", "B"], [10, 5], ["P0", "P1"], [[7, 5], [3, 2]])
