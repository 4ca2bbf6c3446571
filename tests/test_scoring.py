import pytest

from bee import Bee, BeeTask
from scoring import score
from vision import MonoVision


@pytest.fixture
def bee(hive):
    return Bee(0, hive, MonoVision(sample_points=3))


def test_bee_that_never_got_going_scores_zero(bee):
    bee.distance_travelled = 35.0     # wiggled about in its cell
    assert score(bee) == 0.0


def test_laziness_overrides_the_hive_bonus(bee):
    bee.has_left_hive = True
    bee.distance_travelled = 300.0
    assert score(bee) == 0.0


def test_explorer_without_nectar(bee):
    bee.x, bee.y = 200.0, 150.0
    bee.has_left_hive = True
    bee.distance_travelled = 250.0
    assert score(bee) == pytest.approx(250 + 1000)


def test_nectar_dominates_distance(bee):
    bee.x, bee.y = 400.0, 200.0
    bee.has_left_hive = True
    bee.distance_travelled = 900.0
    bee.nectar_collected = 2
    assert score(bee) == pytest.approx(900 + 20000 + 1000)


def test_nectar_near_home_still_counts(bee):
    bee.nectar_collected = 1
    bee.distance_travelled = 10.0
    assert score(bee) == pytest.approx(10 + 10000 + 1000)


def test_sleeping_bee_gets_both_bonuses(bee):
    bee.task = BeeTask.SLEEP
    bee.has_left_hive = True
    bee.nectar_collected = 8
    bee.distance_travelled = 1500.0
    assert score(bee) == pytest.approx(1500 + 80000 + 1000 + 1000)


def test_returning_bee_is_not_lazy(bee):
    bee.task = BeeTask.RETURN_TO_HIVE
    bee.distance_travelled = 5.0
    assert score(bee) == pytest.approx(5.0)
