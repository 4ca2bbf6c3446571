"""
Vision systems for HiveSim.

A bee never sees the meadow directly. It casts rays from its head and reports,
per ray, what the ray met first:

  Mono vision (one eye, SAMPLE_POINTS rays)

        ·  ·  ·  ·  ·
     ·                 ·         value per ray:
    ·        ▲          ·          nothing         0
             bee                   flower at d     d / depth          ( 0..1 )
                                   obstacle at d  -(1 - d/depth) / 3  (-1/3..0)

    Only the nearest flower survives: every other positive ray is zeroed.

  Stereo vision (two eyes, 2 × SAMPLE_POINTS rays each)

    Each ray reports a category (empty 0, nectar 1, tree 2, wall 3, bee 5)
    scaled by 1/5 and negated for anything but nectar.

Both systems share one contract so the simulation can use either:

    required_input_count() -> int
    forward_ray_indices() -> list
    sense(bee_index, heading, location, meadow, bees) -> np.ndarray
"""

import math

import numpy as np
from config import (
    FIELD_OF_VISION_START, FIELD_OF_VISION_STOP, SAMPLE_POINTS,
    DEPTH_OF_VISION, VISION_STEP, BEE_SIZE,
    HIDDEN_LAYERS_MONO, HIDDEN_LAYERS_STEREO,
    DRIFT_FACTOR_MONO, DRIFT_FACTOR_STEREO,
    vision_angle_step,
)
from meadow import CELL_NECTAR, CELL_TREE_STUMP, CELL_WALL

# Stereo categories
SEEN_EMPTY  = 0
SEEN_NECTAR = 1
SEEN_TREE   = 2
SEEN_WALL   = 3
SEEN_BEE    = 5

EYE_FORWARD = 7     # eyes sit this far ahead of the bee centre
EYE_SPREAD  = 4     # and this far to either side


def bees_in_range(bee_index: int, location, radius: float, bees: list) -> list:
    """
    Other non-eliminated bees whose centre lies within radius of location.
    A bounding-box test rejects most bees before the exact distance.
    """
    x, y = location
    found = []
    for other in bees:
        if other.index == bee_index or other.eliminated:
            continue
        dx, dy = other.x - x, other.y - y
        if abs(dx) > radius or abs(dy) > radius:
            continue
        if dx * dx + dy * dy <= radius * radius:
            found.append(other)
    return found


def _nearest_to_heading(offsets: list, count: int = 3) -> list:
    """Indices of the `count` offsets closest to straight ahead, in ray order."""
    ranked = sorted(range(len(offsets)), key=lambda i: abs(offsets[i]))
    return sorted(ranked[:count])


def _bee_at(point, nearby: list) -> bool:
    px, py = point
    for other in nearby:
        half = other.size / 2
        if abs(other.x - px) > half or abs(other.y - py) > half:
            continue
        if other.contains_point(point):
            return True
    return False


# ──────────────────────────────────────────────────────────────────────────────

class MonoVision:
    """Single fan of rays centred on the bee's heading."""

    hidden_layers = HIDDEN_LAYERS_MONO
    drift_factor  = DRIFT_FACTOR_MONO

    def __init__(self, fov_start: float = FIELD_OF_VISION_START,
                 fov_stop: float = FIELD_OF_VISION_STOP,
                 sample_points: int = SAMPLE_POINTS,
                 depth: float = DEPTH_OF_VISION,
                 step: float = VISION_STEP,
                 bee_size: float = BEE_SIZE):
        if sample_points < 1:
            raise ValueError(f"sample_points must be at least 1, got {sample_points}")
        self.fov_start     = fov_start
        self.fov_stop      = fov_stop
        self.sample_points = sample_points
        self.depth         = depth
        self.step          = step
        self.bee_size      = bee_size
        self.reach         = depth + int(bee_size / 4)

    def required_input_count(self) -> int:
        return self.sample_points

    def ray_offsets(self) -> list:
        """Ray angles relative to the heading, left to right."""
        if self.sample_points == 1:
            return [0.0]
        angle_step = vision_angle_step(self.fov_start, self.fov_stop, self.sample_points)
        return [self.fov_start + i * angle_step for i in range(self.sample_points)]

    def forward_ray_indices(self) -> list:
        """Positions in the sense() vector of the three rays nearest the heading."""
        return _nearest_to_heading(self.ray_offsets())

    def sense(self, bee_index: int, heading: float, location,
              meadow, bees: list) -> np.ndarray:
        nearby = bees_in_range(bee_index, location, self.reach + self.bee_size, bees)
        result = np.zeros(self.sample_points)
        for i, offset in enumerate(self.ray_offsets()):
            result[i] = self._cast(location, heading + offset, meadow, nearby)

        # winner takes all: keep the nearest flower only
        flowers = np.flatnonzero(result > 0)
        if len(flowers) > 1:
            nearest = flowers[np.argmin(result[flowers])]   # first of equals
            keep = result[nearest]
            result[flowers] = 0.0
            result[nearest] = keep
        return result

    def _cast(self, origin, degrees: float, meadow, nearby: list) -> float:
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        d = self.step
        while d < self.reach:
            px = int(round(origin[0] + cos * d))
            py = int(round(origin[1] + sin * d))
            cell = meadow.classify(px, py)
            if cell in (CELL_WALL, CELL_TREE_STUMP) or _bee_at((px, py), nearby):
                return -(1.0 - min(d / self.depth, 1.0)) / 3.0
            if cell == CELL_NECTAR:
                return min(d / self.depth, 1.0)
            d += self.step
        return 0.0


# ──────────────────────────────────────────────────────────────────────────────

class StereoVision:
    """Two eyes, each sweeping the whole field of view; left eye mirrored."""

    hidden_layers = HIDDEN_LAYERS_STEREO
    drift_factor  = DRIFT_FACTOR_STEREO

    def __init__(self, fov_start: float = FIELD_OF_VISION_START,
                 fov_stop: float = FIELD_OF_VISION_STOP,
                 sample_points: int = SAMPLE_POINTS,
                 depth: float = DEPTH_OF_VISION,
                 step: float = VISION_STEP,
                 bee_size: float = BEE_SIZE):
        if sample_points < 1:
            raise ValueError(f"sample_points must be at least 1, got {sample_points}")
        self.fov_start     = fov_start
        self.fov_stop      = fov_stop
        self.sample_points = sample_points
        self.rays_per_eye  = 2 * sample_points
        self.depth         = depth
        self.step          = step
        self.bee_size      = bee_size
        self.reach         = depth + int(bee_size / 4)

    def required_input_count(self) -> int:
        return 2 * self.rays_per_eye

    def ray_offsets(self) -> list:
        """Right-eye ray angles relative to the heading; the left eye negates them."""
        angle_step = vision_angle_step(self.fov_start, self.fov_stop, self.rays_per_eye)
        return [self.fov_start + i * angle_step for i in range(self.rays_per_eye)]

    def forward_ray_indices(self) -> list:
        """Positions in the sense() vector of each eye's three rays nearest the heading."""
        ahead = _nearest_to_heading(self.ray_offsets())
        return ahead + [self.rays_per_eye + i for i in ahead]

    def eye_positions(self, heading: float, location) -> tuple:
        """(left, right) eye coordinates for a bee at location facing heading."""
        rad = math.radians(heading)
        cos, sin = math.cos(rad), math.sin(rad)
        x, y = location

        def place(forward, side):
            return (x + cos * forward - sin * side, y + sin * forward + cos * side)

        return place(EYE_FORWARD, -EYE_SPREAD), place(EYE_FORWARD, EYE_SPREAD)

    def sense(self, bee_index: int, heading: float, location,
              meadow, bees: list) -> np.ndarray:
        nearby = bees_in_range(bee_index, location, self.reach + self.bee_size, bees)
        left_eye, right_eye = self.eye_positions(heading, location)
        offsets = self.ray_offsets()

        result = np.zeros(self.required_input_count())
        for i, offset in enumerate(offsets):
            result[i] = self._encode(
                self._cast(left_eye, heading - offset, meadow, nearby))
            result[self.rays_per_eye + i] = self._encode(
                self._cast(right_eye, heading + offset, meadow, nearby))
        return result

    @staticmethod
    def _encode(category: int) -> float:
        if category == SEEN_NECTAR:
            return category / 5.0
        return -category / 5.0 if category else 0.0

    def _cast(self, origin, degrees: float, meadow, nearby: list) -> int:
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        d = self.step
        while d < self.reach:
            px = int(round(origin[0] + cos * d))
            py = int(round(origin[1] + sin * d))
            cell = meadow.classify(px, py)
            if cell == CELL_WALL:
                return SEEN_WALL
            if cell == CELL_TREE_STUMP:
                return SEEN_TREE
            if _bee_at((px, py), nearby):
                return SEEN_BEE
            if cell == CELL_NECTAR:
                return SEEN_NECTAR
            d += self.step
        return SEEN_EMPTY


# ──────────────────────────────────────────────────────────────────────────────

def make_vision(use_stereo: bool = False, **kwargs):
    """Build the requested vision system; kwargs go to its constructor."""
    if use_stereo:
        return StereoVision(**kwargs)
    return MonoVision(**kwargs)
