import pytest

from hive import Hive
from meadow import Meadow


@pytest.fixture
def open_meadow():
    """400x400 grass, no border, no trees, no flowers."""
    meadow = Meadow(width=400, height=400, number_of_trees=0,
                    number_of_flowers=0, with_hive=False, seed=0)
    meadow.clear()
    return meadow


@pytest.fixture
def hive():
    return Hive(4)
