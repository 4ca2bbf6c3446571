import numpy as np

from meadow import (Meadow, CELL_EMPTY, CELL_NECTAR, CELL_TREE_STUMP, CELL_WALL,
                    FLOWER_REACH)


def test_off_the_map_is_a_wall(open_meadow):
    assert open_meadow.classify(-1, 10) == CELL_WALL
    assert open_meadow.classify(10, 400) == CELL_WALL
    assert not open_meadow.is_safe(400, 0)


def test_reset_paints_border_and_hive_walls():
    meadow = Meadow(number_of_trees=0, number_of_flowers=0, seed=0)
    assert meadow.classify(0, 100) == CELL_WALL
    assert meadow.classify(899, 100) == CELL_WALL
    assert meadow.classify(450, 0) == CELL_WALL
    assert meadow.classify(450, 549) == CELL_WALL
    assert meadow.classify(104, 400) == CELL_WALL       # hive side wall
    assert meadow.classify(52, 215) == CELL_WALL        # hive diagonal wall
    assert meadow.classify(450, 275) == CELL_EMPTY


def test_hive_cells_are_clear():
    meadow = Meadow(seed=3)
    for x, y in ((25, 298), (52, 313), (79, 298), (79, 508)):
        assert meadow.classify(x, y) == CELL_EMPTY


def test_same_seed_same_meadow():
    a = Meadow(seed=11)
    b = Meadow(seed=11)
    assert np.array_equal(a.grid, b.grid)
    assert a.flowers == b.flowers
    assert a.flowers


def test_reset_scatters_new_flowers():
    meadow = Meadow(seed=5)
    first = list(meadow.flowers)
    meadow.reset()
    assert meadow.flowers != first


def test_trees_are_not_safe(open_meadow):
    open_meadow.add_tree((200, 200), radius=10)
    assert open_meadow.classify(200, 200) == CELL_TREE_STUMP
    assert not open_meadow.is_safe(205, 200)
    assert open_meadow.is_safe(215, 200)


def test_flowers_are_refused_inside_the_hive():
    meadow = Meadow(number_of_trees=0, number_of_flowers=0, seed=0)
    assert not meadow.add_flower((60, 300))
    assert meadow.add_flower((300, 300))
    assert meadow.classify(300, 300) == CELL_NECTAR


def test_flowers_are_refused_on_walls(open_meadow):
    open_meadow.grid[:, 50] = CELL_WALL
    assert not open_meadow.add_flower((50, 50))


def test_harvesting_removes_the_nearest_flower(open_meadow):
    open_meadow.add_flower((100, 100))
    open_meadow.add_flower((130, 100))
    assert open_meadow.nectar_at((102, 101))
    assert not open_meadow.nectar_at((100, 100 + FLOWER_REACH + 1))

    assert open_meadow.remove_nectar_near((102, 101))
    assert open_meadow.flowers == [(130, 100)]
    assert open_meadow.classify(100, 100) == CELL_EMPTY
    assert open_meadow.has_nectar_remaining()


def test_removing_nothing_is_harmless(open_meadow):
    open_meadow.add_flower((100, 100))
    assert open_meadow.remove_nectar_near((100, 100))
    before = open_meadow.grid.copy()
    assert not open_meadow.remove_nectar_near((100, 100))
    assert np.array_equal(before, open_meadow.grid)
    assert not open_meadow.has_nectar_remaining()
