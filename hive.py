"""
Hive layout for HiveSim.

Bees start the day in numbered cells and must be back in a bed when it
ends. Cells are laid out three abreast, the middle column staggered:

  +----------------+
  | < 0>      < 2> |
  |      < 1>      |
  | < 3>      < 5> |
  |      < 4>      |
  |      ...       |
  +----------------+

Beds are handed out furthest-from-the-entrance first.
"""

from config import HIVE_EXIT_X, HIVE_RETURN_X, POPULATION

# Diagonal hive wall: y = DIAGONAL_SLOPE * x + DIAGONAL_OFFSET
DIAGONAL_SLOPE  = -0.4762
DIAGONAL_OFFSET = 240

ENTRANCE_TARGET = (85, 260)     # just inside the entrance
MEADOW_TARGET   = (300, 260)    # out and around the diagonal wall


class Hive:
    """Cell positions, bed bookkeeping and entrance geometry."""

    def __init__(self, population: int = POPULATION):
        self.population = population
        self._occupied  = [False] * population

    # ──────────────────────────────────────────────────────────────────────────

    @staticmethod
    def slot_position(index: int) -> tuple:
        """Centre of hive cell `index` (start position and bed)."""
        x = index % 3 * 27 + 25
        y = 298 + index // 3 * 30 + (15 if (index - 1) % 3 == 0 else 0)
        return (float(x), float(y))

    def reset(self):
        """Every bed empty."""
        self._occupied = [False] * self.population

    def next_free_bed(self) -> tuple:
        """Position of the free bed furthest from the entrance."""
        for i in range(self.population - 1, -1, -1):
            if not self._occupied[i]:
                return self.slot_position(i)
        return self.slot_position(0)

    def claim_next_bed(self) -> tuple:
        """Occupy the bed next_free_bed() returned, so no other bee heads for it."""
        for i in range(self.population - 1, -1, -1):
            if not self._occupied[i]:
                self._occupied[i] = True
                return self.slot_position(i)
        return self.slot_position(0)

    def free_beds(self) -> int:
        return self._occupied.count(False)

    # ──────────────────────────────────────────────────────────────────────────
    # Entrance geometry
    # ──────────────────────────────────────────────────────────────────────────

    @staticmethod
    def has_left(point) -> bool:
        """True once a bee is out in the meadow."""
        return point[0] > HIVE_EXIT_X

    @staticmethod
    def below_diagonal(point) -> bool:
        return point[1] > DIAGONAL_SLOPE * point[0] + DIAGONAL_OFFSET

    def is_home(self, point) -> bool:
        """True once a returning bee has crossed into the hive."""
        return point[0] < HIVE_RETURN_X and self.below_diagonal(point)

    def return_target(self, point) -> tuple:
        """Where a bee heading home should aim from `point`."""
        if point[0] < HIVE_EXIT_X and not self.below_diagonal(point):
            return MEADOW_TARGET
        return ENTRANCE_TARGET
