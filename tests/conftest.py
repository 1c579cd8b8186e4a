"""Test bootstrap: ensure package root is on sys.path, plus shared fixtures.

This allows absolute imports like `modules.los.system` and `core.events.topics`
which assume the working directory is the package root.
"""
import sys, os
PACKAGE_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PACKAGE_ROOT not in sys.path:
    sys.path.insert(0, PACKAGE_ROOT)

import pytest

from modules.cover.system import HeightCoverModel, SimpleCoverModel
from modules.maps.components import BattleGrid
from modules.overlay.state import HypotheticalOverlay


@pytest.fixture
def open_grid():
    """A fully explored 10x10 map with nothing on it."""
    return BattleGrid(10, 10)


@pytest.fixture
def simple_model():
    return SimpleCoverModel()


@pytest.fixture
def height_model():
    return HeightCoverModel()


@pytest.fixture
def overlay():
    return HypotheticalOverlay()
