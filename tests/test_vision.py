import numpy as np
import pytest

from bee import Bee
from meadow import CELL_WALL, CELL_TREE_STUMP, CELL_NECTAR
from vision import MonoVision, StereoVision, bees_in_range, make_vision

CENTRE = (100.0, 100.0)
EAST = 0.0


def test_required_input_counts():
    assert MonoVision(sample_points=60).required_input_count() == 60
    assert StereoVision(sample_points=60).required_input_count() == 240


def test_make_vision_picks_strategy():
    assert isinstance(make_vision(False, sample_points=3), MonoVision)
    assert isinstance(make_vision(True, sample_points=3), StereoVision)


def test_mono_rays_span_the_field_of_view():
    vision = MonoVision(fov_start=-120, fov_stop=120, sample_points=5)
    assert vision.ray_offsets() == pytest.approx([-120, -60, 0, 60, 120])
    assert MonoVision(sample_points=1).ray_offsets() == [0.0]


def test_mono_sees_nothing_on_open_grass(open_meadow):
    vision = MonoVision(sample_points=7)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert np.array_equal(result, np.zeros(7))


def test_mono_wall_encoding(open_meadow):
    open_meadow.grid[:, 130:135] = CELL_WALL
    vision = MonoVision(fov_start=-10, fov_stop=10, sample_points=3, depth=70)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert result[1] == pytest.approx(-(1 - 30 / 70) / 3)
    assert np.all(result < 0)
    assert np.all(result >= -1 / 3)


def test_mono_tree_is_an_obstacle(open_meadow):
    open_meadow.grid[:, 130:135] = CELL_TREE_STUMP
    vision = MonoVision(fov_start=0, fov_stop=0, sample_points=1)
    assert vision.sense(0, EAST, CENTRE, open_meadow, [])[0] < 0


def test_mono_flower_encoding(open_meadow):
    assert open_meadow.add_flower((140, 100))
    vision = MonoVision(fov_start=-30, fov_stop=30, sample_points=3, depth=70)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert result[1] == pytest.approx(38 / 70)
    assert result[0] == 0.0
    assert result[2] == 0.0


def test_mono_keeps_only_the_nearest_flower(open_meadow):
    open_meadow.add_flower((140, 100))     # straight ahead, d = 38
    open_meadow.add_flower((117, 110))     # on the +30° ray, d = 18
    vision = MonoVision(fov_start=-30, fov_stop=30, sample_points=3, depth=70)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert result[1] == 0.0
    assert result[2] == pytest.approx(18 / 70)
    assert np.count_nonzero(result > 0) == 1


def test_mono_sees_other_bees(open_meadow, hive):
    vision = MonoVision(fov_start=0, fov_stop=0, sample_points=1, depth=70)
    other = Bee(1, hive, vision)
    other.x, other.y = 130.0, 100.0
    result = vision.sense(0, EAST, CENTRE, open_meadow, [other])
    assert result[0] == pytest.approx(-(1 - 24 / 70) / 3)

    other.eliminated = True
    result = vision.sense(0, EAST, CENTRE, open_meadow, [other])
    assert result[0] == 0.0


def test_sense_leaves_the_meadow_alone(open_meadow):
    open_meadow.add_flower((140, 100))
    before = open_meadow.grid.copy()
    MonoVision(sample_points=9).sense(0, EAST, CENTRE, open_meadow, [])
    StereoVision(sample_points=3).sense(0, EAST, CENTRE, open_meadow, [])
    assert np.array_equal(before, open_meadow.grid)
    assert open_meadow.flowers == [(140, 100)]


def test_bees_in_range(hive):
    vision = MonoVision(sample_points=1)
    bees = [Bee(i, hive, vision) for i in range(4)]
    for b, x in zip(bees, (0, 10, 50, 500)):
        b.x, b.y = float(x), 0.0

    found = bees_in_range(0, (0.0, 0.0), 60, bees)
    assert [b.index for b in found] == [1, 2]

    bees[2].eliminated = True
    assert [b.index for b in bees_in_range(0, (0.0, 0.0), 60, bees)] == [1]


def test_stereo_eye_positions():
    vision = StereoVision(sample_points=2)
    left, right = vision.eye_positions(EAST, CENTRE)
    assert left == pytest.approx((107, 96))
    assert right == pytest.approx((107, 104))

    left, right = vision.eye_positions(90.0, CENTRE)    # facing south
    assert left == pytest.approx((104, 107))
    assert right == pytest.approx((96, 107))


@pytest.mark.parametrize("cell, value", [
    (CELL_WALL, -0.6),
    (CELL_TREE_STUMP, -0.4),
    (CELL_NECTAR, 0.2),
])
def test_stereo_categories(open_meadow, cell, value):
    open_meadow.grid[:, 120:] = cell
    vision = StereoVision(fov_start=-30, fov_stop=30, sample_points=2)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert len(result) == 8
    assert result == pytest.approx([value] * 8)


def test_stereo_sees_bees(open_meadow, hive):
    vision = StereoVision(fov_start=0, fov_stop=0, sample_points=1)
    other = Bee(1, hive, vision)
    other.x, other.y = 130.0, 100.0
    result = vision.sense(0, EAST, CENTRE, open_meadow, [other])
    assert result == pytest.approx([-1.0] * 4)


def test_stereo_left_eye_is_mirrored(open_meadow):
    open_meadow.grid[:93, :] = CELL_WALL    # wall along the north (left) side
    vision = StereoVision(fov_start=-30, fov_stop=30, sample_points=2)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert result == pytest.approx([0, 0, -0.6, -0.6, -0.6, -0.6, 0, 0])


def test_mono_forward_rays_straddle_the_heading():
    vision = MonoVision(sample_points=5)
    assert vision.forward_ray_indices() == [1, 2, 3]
    assert MonoVision(sample_points=1).forward_ray_indices() == [0]


def test_stereo_forward_rays_point_ahead_from_each_eye():
    vision = StereoVision(sample_points=60)
    ahead = vision.forward_ray_indices()
    offsets = vision.ray_offsets()
    assert len(ahead) == 6
    assert ahead[3:] == [vision.rays_per_eye + i for i in ahead[:3]]
    assert all(abs(offsets[i]) < 4 for i in ahead[:3])


def test_stereo_forward_rays_report_a_wall_dead_ahead(open_meadow):
    open_meadow.grid[:, 120:] = CELL_WALL
    vision = StereoVision(sample_points=60)
    result = vision.sense(0, EAST, CENTRE, open_meadow, [])
    assert np.all(result[vision.forward_ray_indices()] < 0)
