"""
Meadow occupancy grid for HiveSim.

The meadow is a fixed-size 2-D grid of cell codes. Bees never see pixels;
they ask the meadow what occupies a coordinate and tell it when a flower
has been drained.

  CELL_EMPTY       grass, safe to fly over
  CELL_NECTAR      a flower with nectar
  CELL_TREE_STUMP  solid tree trunk
  CELL_WALL        border, hive walls, anything off the map
"""

import logging

import numpy as np
from config import (
    MEADOW_WIDTH, MEADOW_HEIGHT, NUMBER_OF_TREES, NUMBER_OF_FLOWERS,
    TREE_STUMP_RADIUS, TREE_CLEARANCE, FLOWER_DIAMETER, WALL_THICKNESS,
    NECTAR_MIN_X,
)

logger = logging.getLogger(__name__)

CELL_EMPTY      = 0
CELL_NECTAR     = 1
CELL_TREE_STUMP = 2
CELL_WALL       = 3

# Hive walls (pixel coordinates of the default 900x550 layout).
HIVE_DIAGONAL_WALL = ((0, 240), (104, 190))
HIVE_SIDE_WALL_X   = 104
HIVE_SIDE_WALL_TOP = 281

FLOWER_REACH = FLOWER_DIAMETER / 2 + 2     # a bee this close is "on" the flower
MAX_PLACEMENT_ATTEMPTS = 1000


class Meadow:
    """
    Owns the occupancy grid plus the tree and flower lists it was painted from.
    """

    def __init__(self, width: int = MEADOW_WIDTH, height: int = MEADOW_HEIGHT,
                 number_of_trees: int = NUMBER_OF_TREES,
                 number_of_flowers: int = NUMBER_OF_FLOWERS,
                 with_hive: bool = True, seed: int = None, rng=None):
        self.width  = width
        self.height = height
        self.number_of_trees   = number_of_trees
        self.number_of_flowers = number_of_flowers
        self.with_hive = with_hive
        self.rng    = rng if rng is not None else np.random.default_rng(seed)
        # grid[y, x] = cell code
        self.grid    = np.zeros((height, width), dtype=np.uint8)
        self.trees   = []        # (x, y) of every tree
        self.flowers = []        # (x, y) of every flower that still has nectar
        self.reset()

    # ──────────────────────────────────────────────────────────────────────────
    # Layout
    # ──────────────────────────────────────────────────────────────────────────

    def clear(self):
        """Empty grass everywhere, no walls, trees or flowers."""
        self.grid[:] = CELL_EMPTY
        self.trees   = []
        self.flowers = []

    def reset(self):
        """Repaint walls and scatter fresh trees and flowers."""
        self.clear()
        half = WALL_THICKNESS // 2
        W, H = self.width, self.height
        self.grid[:half, :]     = CELL_WALL
        self.grid[H - half:, :] = CELL_WALL
        self.grid[:, :half]     = CELL_WALL
        self.grid[:, W - half:] = CELL_WALL

        if self.with_hive:
            self.add_wall_segment(*HIVE_DIAGONAL_WALL)
            self.add_wall_segment((HIVE_SIDE_WALL_X, HIVE_SIDE_WALL_TOP),
                                  (HIVE_SIDE_WALL_X, H))

        for _ in range(self.number_of_trees):
            x = int(self.rng.integers(min(150, W - 1), max(151, W - 10)))
            y = int(self.rng.integers(0, H))
            self.add_tree((x, y))

        for _ in range(self.number_of_flowers):
            if not self._place_random_flower():
                logger.warning("gave up placing flowers after %d of %d",
                               len(self.flowers), self.number_of_flowers)
                break

    def _place_random_flower(self) -> bool:
        W, H = self.width, self.height
        x_lo, x_hi = min(140, W - 1), max(141, W - 10)
        y_lo, y_hi = min(20, H - 1), max(21, H - 40)
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            p = (int(self.rng.integers(x_lo, x_hi)), int(self.rng.integers(y_lo, y_hi)))
            if self._near_tree_or_flower(p):
                continue
            if self.add_flower(p):
                return True
        return False

    def _near_tree_or_flower(self, p) -> bool:
        for tx, ty in self.trees:
            if np.hypot(p[0] - tx, p[1] - ty) < TREE_CLEARANCE + 2:
                return True
        for fx, fy in self.flowers:
            if np.hypot(p[0] - fx, p[1] - fy) < FLOWER_DIAMETER + 2:
                return True
        return False

    def add_wall_segment(self, start, end, thickness: float = WALL_THICKNESS):
        """Paint a thick straight wall between two points."""
        (x0, y0), (x1, y1) = start, end
        r = thickness / 2
        ys, xs = self._window(min(x0, x1) - r, min(y0, y1) - r,
                              max(x0, x1) + r, max(y0, y1) + r)
        if xs.size == 0:
            return
        dx, dy = x1 - x0, y1 - y0
        length2 = dx * dx + dy * dy
        if length2 == 0:
            t = np.zeros_like(xs, dtype=float)
        else:
            t = np.clip(((xs - x0) * dx + (ys - y0) * dy) / length2, 0.0, 1.0)
        dist = np.hypot(xs - (x0 + t * dx), ys - (y0 + t * dy))
        mask = dist <= r
        self.grid[ys[mask], xs[mask]] = CELL_WALL

    def add_tree(self, center, radius: float = TREE_STUMP_RADIUS):
        """Paint a solid tree stump disc."""
        self.trees.append((int(center[0]), int(center[1])))
        ys, xs, mask = self._disc(center, radius)
        self.grid[ys[mask], xs[mask]] = CELL_TREE_STUMP

    def add_flower(self, center) -> bool:
        """Paint a flower disc over empty grass. Flowers inside the hive are refused."""
        x, y = int(center[0]), int(center[1])
        if x < NECTAR_MIN_X and self.with_hive:
            return False
        if self.classify(x, y) != CELL_EMPTY:
            return False
        ys, xs, mask = self._disc((x, y), FLOWER_DIAMETER / 2)
        mask &= self.grid[ys, xs] == CELL_EMPTY
        self.grid[ys[mask], xs[mask]] = CELL_NECTAR
        self.flowers.append((x, y))
        return True

    # ──────────────────────────────────────────────────────────────────────────
    # Queries used by bees and vision
    # ──────────────────────────────────────────────────────────────────────────

    def classify(self, x: int, y: int) -> int:
        """Cell code at (x, y); anything off the map is a wall."""
        if not self._in_bounds(x, y):
            return CELL_WALL
        return int(self.grid[y, x])

    def is_safe(self, x: int, y: int) -> bool:
        """False for walls and tree stumps."""
        return self.classify(x, y) not in (CELL_WALL, CELL_TREE_STUMP)

    def nectar_at(self, point) -> bool:
        """True if a flower with nectar is within reach of point."""
        return self._nearest_flower(point) is not None

    def remove_nectar_near(self, point) -> bool:
        """
        Drain the nearest flower within reach of point.
        Returns False (and changes nothing) if there is none.
        """
        i = self._nearest_flower(point)
        if i is None:
            return False
        fx, fy = self.flowers.pop(i)
        ys, xs, mask = self._disc((fx, fy), FLOWER_DIAMETER / 2)
        mask &= self.grid[ys, xs] == CELL_NECTAR
        self.grid[ys[mask], xs[mask]] = CELL_EMPTY
        return True

    def has_nectar_remaining(self) -> bool:
        return len(self.flowers) > 0

    # ──────────────────────────────────────────────────────────────────────────

    def _nearest_flower(self, point):
        if not self.flowers:
            return None
        f = np.asarray(self.flowers, dtype=float)
        d = np.hypot(f[:, 0] - point[0], f[:, 1] - point[1])
        i = int(np.argmin(d))
        return i if d[i] < FLOWER_REACH else None

    def _window(self, x_min, y_min, x_max, y_max):
        """Integer coordinate grids for the on-map part of a bounding box."""
        x0 = max(0, int(np.floor(x_min)))
        y0 = max(0, int(np.floor(y_min)))
        x1 = min(self.width - 1,  int(np.ceil(x_max)))
        y1 = min(self.height - 1, int(np.ceil(y_max)))
        if x1 < x0 or y1 < y0:
            return np.empty((0,), dtype=int), np.empty((0,), dtype=int)
        ys, xs = np.mgrid[y0:y1 + 1, x0:x1 + 1]
        return ys.ravel(), xs.ravel()

    def _disc(self, center, radius):
        cx, cy = center
        ys, xs = self._window(cx - radius, cy - radius, cx + radius, cy + radius)
        mask = np.hypot(xs - cx, ys - cy) <= radius
        return ys, xs, mask

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height
