"""
Bee class for HiveSim.

Each bee has:
  - a pose: (x, y) location in meadow pixels, heading in degrees, speed
  - a task in the day's state machine
  - a pouch of nectar (full at 8)
  - an index that pairs it with one neural network slot

Every tick the bee:
  1. Looks at the meadow through its vision system
  2. Feeds what it sees to its network (while collecting) or steers
     straight for home (while returning)
  3. Moves, then resolves collisions and checks whether it has stalled
  4. Advances its task

Task state machine:

  COLLECT_NECTAR ──pouch full / home time──▶ RETURN_TO_HIVE
  RETURN_TO_HIVE ──crossed into hive──────▶ RETURN_TO_BED
  RETURN_TO_BED  ──reached free bed───────▶ ORIENT_TO_SLEEP
  ORIENT_TO_SLEEP ─facing upwards─────────▶ SLEEP (terminal)
"""

import math
from collections import deque
from enum import Enum

import numpy as np
from config import (
    BEE_SIZE, NECTAR_CAPACITY, SIP_PAUSE, OUTPUT_MODULATION,
    DRIFT_ENABLED, DRIFT_FACTOR_MONO, WING_MIN, WING_MAX,
    STALL_WINDOW_BASE, STALL_WINDOW_PER_INDEX, STALL_DISTANCE,
    LAZY_DISTANCE, MOVES_TO_LEAVE_HIVE,
)

HOME_FACING_ANGLE     = 270     # degrees; y grows downwards so this is "up"
NAVIGATION_TURN_LIMIT = 30      # max degrees per tick while flying home
ORIENT_TURN_LIMIT     = 10      # max degrees per tick while turning in bed
BED_ARRIVAL_DISTANCE  = 10
STEERING_GAIN         = 30 / 4  # heading change per unit of wing difference
MIN_CRUISE_SPEED      = 0.3
CRUISE_SPEED          = 0.7
MAX_RETURN_SPEED      = 3


class BeeTask(Enum):
    COLLECT_NECTAR  = "collect_nectar"
    RETURN_TO_HIVE  = "return_to_hive"
    RETURN_TO_BED   = "return_to_bed"
    ORIENT_TO_SLEEP = "orient_to_sleep"
    SLEEP           = "sleep"


class EliminationReason(Enum):
    NONE     = "none"
    COLLIDED = "collided"
    STALLED  = "stalled"


class Collision(Enum):
    NONE         = 0
    WALL_OR_TREE = 1
    BEE          = 2


class IllegalTaskTransition(RuntimeError):
    """A bee ended up in a task the flight code has no handler for."""


# ──────────────────────────────────────────────────────────────────────────────
# Geometry helpers
# ──────────────────────────────────────────────────────────────────────────────

def distance(a, b) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def clamp(value, low, high):
    return max(low, min(high, value))


def rotate_point(point, origin, degrees: float) -> tuple:
    """Rotate point about origin by degrees (screen coordinates)."""
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    dx, dy = point[0] - origin[0], point[1] - origin[1]
    return (cos * dx - sin * dy + origin[0],
            sin * dx + cos * dy + origin[1])


def shortest_turn(current: float, target: float) -> float:
    """Signed degrees (−180..180) to turn from current to target."""
    return ((target - current + 540.0) % 360.0) - 180.0


def turn_towards(current: float, target: float, limit: float) -> float:
    """New heading after turning at most `limit` degrees the short way round."""
    diff = shortest_turn(current, target)
    step = min(abs(diff), limit)
    return (current + math.copysign(step, diff)) % 360.0


def body_outline(size: float = BEE_SIZE) -> list:
    """
    Hit-test points around an unrotated bee facing east (+x).

              p3  p13   p1
       p5 +---------------+
          |               |
       p7 x        +      x p12
          |               |
       p6 +---------------+
              p4  p24   p2
    """
    width, height = size - 5, size
    p1  = (height / 2 - height / 24 - 2,  width / 2 - 7)
    p3  = (0.0,                           width / 2 - 6)
    p13 = ((p1[0] + p3[0]) / 2,           width / 2 - 6)
    p2  = (height / 2 - height / 24 - 2, -width / 2 + 5)
    p4  = (0.0,                          -width / 2 + 5)
    p24 = ((p2[0] + p4[0]) / 2,          -width / 2 + 4)
    p12 = (p1[0] + 1,                    (p1[1] + p2[1]) / 2)
    p5  = (4 - height / 2 + height / 24, p3[1])
    p6  = (4 - height / 2 + height / 24, p4[1])
    p7  = (-height / 2 + 1,              (p4[1] + p3[1]) / 2)
    return [p1, p12, p2, p24, p4, p6, p7, p5, p3, p13]


# ──────────────────────────────────────────────────────────────────────────────

class Bee:
    """
    A single forager. The bee never holds its network; the population
    controller passes the network for the bee's slot into move().
    """
    __slots__ = (
        "index", "hive", "vision", "size", "output_modulation",
        "drift_enabled", "drift_factor",
        "x", "y", "last_x", "last_y", "start_x", "start_y",
        "heading", "last_heading", "speed",
        "task", "nectar_collected", "has_left_hive", "sip_ticks",
        "eliminated", "elimination_reason",
        "distance_travelled", "recent_locations", "last_vision",
        "_outline",
    )

    def __init__(self, index: int, hive, vision,
                 output_modulation=OUTPUT_MODULATION,
                 drift_enabled: bool = DRIFT_ENABLED,
                 drift_factor: float = DRIFT_FACTOR_MONO,
                 size: float = BEE_SIZE):
        self.index  = index
        self.hive   = hive
        self.vision = vision
        self.size   = size
        self.output_modulation = tuple(output_modulation)
        self.drift_enabled = drift_enabled
        self.drift_factor  = drift_factor

        self.x, self.y = hive.slot_position(index)
        self.last_x, self.last_y   = self.x, self.y
        self.start_x, self.start_y = self.x, self.y
        self.heading      = float(HOME_FACING_ANGLE)
        self.last_heading = self.heading
        self.speed        = 1.0

        self.task               = BeeTask.COLLECT_NECTAR
        self.nectar_collected   = 0
        self.has_left_hive      = False
        self.sip_ticks          = 0
        self.eliminated         = False
        self.elimination_reason = EliminationReason.NONE
        self.distance_travelled = 0.0
        window = STALL_WINDOW_BASE + STALL_WINDOW_PER_INDEX * index
        self.recent_locations = deque(maxlen=window)
        self.last_vision = np.zeros(vision.required_input_count())
        self._outline    = body_outline(size)

    # ──────────────────────────────────────────────────────────────────────────

    @property
    def location(self) -> tuple:
        return (self.x, self.y)

    @property
    def start_location(self) -> tuple:
        return (self.start_x, self.start_y)

    @property
    def is_active(self) -> bool:
        """Still flying: neither eliminated nor asleep."""
        return not self.eliminated and self.task is not BeeTask.SLEEP

    def eliminate(self, reason: EliminationReason):
        """Remove the bee from play for the rest of the generation."""
        if self.eliminated:
            return
        self.eliminated = True
        self.elimination_reason = reason

    def end_of_day(self):
        """Home time: a bee still foraging turns for the hive."""
        if not self.eliminated and self.task is BeeTask.COLLECT_NECTAR:
            self.task = BeeTask.RETURN_TO_HIVE

    def collect_nectar(self):
        """One unit of nectar into the pouch; the bee pauses to sip."""
        self.nectar_collected += 1
        self.sip_ticks = SIP_PAUSE
        if (self.nectar_collected >= NECTAR_CAPACITY
                and self.task is BeeTask.COLLECT_NECTAR):
            self.task = BeeTask.RETURN_TO_HIVE

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def move(self, brain, meadow, bees: list, tick: int):
        """
        Advance one tick.

        Args:
            brain: NeuralNetwork for this bee's slot
            meadow: environment answering classify()/is_safe()
            bees:  every bee in the generation (self included)
            tick:  ticks elapsed this generation
        """
        if self.eliminated or self.task is BeeTask.SLEEP:
            return

        self._fly(brain, meadow, bees)
        if not self.has_left_hive and self.hive.has_left(self.location):
            self.has_left_hive = True

        collision = self._collision(meadow, bees)
        if collision is Collision.BEE:
            self.x, self.y = self.last_x, self.last_y
            self.heading   = self.last_heading
        elif collision is Collision.WALL_OR_TREE:
            self.eliminate(EliminationReason.COLLIDED)

        if self._has_stalled(tick):
            self.eliminate(EliminationReason.STALLED)

        if not self.eliminated:
            self._update_task()

    def look(self, meadow, bees: list) -> np.ndarray:
        """Sense the meadow from the current pose and keep the result."""
        self.last_vision = self.vision.sense(self.index, self.heading,
                                             self.location, meadow, bees)
        return self.last_vision

    # ──────────────────────────────────────────────────────────────────────────

    def _fly(self, brain, meadow, bees):
        self.last_heading = self.heading
        self.last_x, self.last_y = self.x, self.y

        task = self.task
        if task is BeeTask.COLLECT_NECTAR:
            self._fly_with_brain(brain, self.look(meadow, bees))
            return
        if task is BeeTask.RETURN_TO_HIVE:
            target = self.hive.return_target(self.location)
        elif task is BeeTask.RETURN_TO_BED:
            target = self.hive.next_free_bed()
        elif task is BeeTask.ORIENT_TO_SLEEP:
            self._orient_to_sleep()
            return
        else:
            raise IllegalTaskTransition(f"bee {self.index} has no flight handler for {task}")

        wanted = math.degrees(math.atan2(target[1] - self.y, target[0] - self.x))
        self.heading = turn_towards(self.heading, wanted, NAVIGATION_TURN_LIMIT)
        vision = self.look(meadow, bees)

        if task is BeeTask.RETURN_TO_HIVE:
            if not self._path_ahead_clear(vision):
                self._fly_with_brain(brain, vision)
                return
            self.speed = clamp(distance(self.location, target) / 10, 0, MAX_RETURN_SPEED)
        else:
            self.speed = 1.0

        self._advance(self.heading, self.speed)
        self.distance_travelled += distance(self.location, (self.last_x, self.last_y))

    def _path_ahead_clear(self, vision) -> bool:
        """No obstacle reported by the rays pointing closest to the heading."""
        ahead = vision[self.vision.forward_ray_indices()]
        return bool(np.all(ahead >= 0))

    def _fly_with_brain(self, brain, vision):
        outputs = brain.forward(vision)
        wings = []
        k = 0
        for factor in self.output_modulation:
            if factor == 0:
                wings.append(0.0)   # no neuron for this wing
                continue
            wings.append(clamp(float(outputs[k]) * factor, WING_MIN, WING_MAX))
            k += 1
        self.apply_physics(wings[0], wings[1])
        self.distance_travelled += distance(self.location, (self.last_x, self.last_y))

    def apply_physics(self, left: float, right: float):
        """
        Differential steering: the slower wing's side is where the bee turns.
        Optional sideways drift when exactly one wing is beating forwards.
        """
        self.heading = (self.heading + STEERING_GAIN * (right - left)) % 360.0

        self.speed = (left + right) / 2
        if abs(self.speed) < MIN_CRUISE_SPEED:
            self.speed = CRUISE_SPEED

        self._advance(self.heading, self.speed)

        if self.drift_enabled:
            if left > 0 and right <= 0:
                self._advance(self.heading - 90, self.speed * self.drift_factor)
            elif left <= 0 and right > 0:
                self._advance(self.heading + 90, self.speed * self.drift_factor)

    def _advance(self, degrees: float, amount: float):
        rad = math.radians(degrees)
        self.x += math.cos(rad) * amount
        self.y += math.sin(rad) * amount

    def _orient_to_sleep(self):
        self.heading = turn_towards(self.heading, HOME_FACING_ANGLE, ORIENT_TURN_LIMIT)
        if abs(shortest_turn(self.heading, HOME_FACING_ANGLE)) < 0.5:
            self.heading = float(HOME_FACING_ANGLE)
            self.task = BeeTask.SLEEP

    def _update_task(self):
        if self.task is BeeTask.COLLECT_NECTAR:
            if self.nectar_collected >= NECTAR_CAPACITY:
                self.task = BeeTask.RETURN_TO_HIVE
            return

        if self.task is BeeTask.RETURN_TO_HIVE:
            if self.hive.is_home(self.location):
                self.task = BeeTask.RETURN_TO_BED
            return

        if self.task is BeeTask.RETURN_TO_BED:
            if distance(self.hive.next_free_bed(), self.location) < BED_ARRIVAL_DISTANCE:
                self.x, self.y = self.hive.claim_next_bed()
                if self.heading == HOME_FACING_ANGLE:
                    self.task = BeeTask.SLEEP
                else:
                    self.task = BeeTask.ORIENT_TO_SLEEP

    # ──────────────────────────────────────────────────────────────────────────
    # Collisions
    # ──────────────────────────────────────────────────────────────────────────

    def hit_test_points(self) -> list:
        """Body outline rotated to the current heading."""
        origin = (round(self.x), round(self.y))
        return [rotate_point((px + origin[0], py + origin[1]), origin, self.heading)
                for px, py in self._outline]

    def contains_point(self, point) -> bool:
        """Is point inside this bee's elliptical footprint?"""
        rad = math.radians(self.heading)
        cos, sin = math.cos(rad), math.sin(rad)
        dx, dy = point[0] - self.x, point[1] - self.y
        along  = cos * dx + sin * dy
        across = -sin * dx + cos * dy
        a, b = self.size / 2, self.size / 3
        return (along / a) ** 2 + (across / b) ** 2 <= 1.0

    def _collision(self, meadow, bees) -> Collision:
        points = self.hit_test_points()
        for px, py in points:
            if not meadow.is_safe(int(px + 0.5), int(py + 0.5)):
                return Collision.WALL_OR_TREE

        for other in bees:
            if other is self or other.eliminated:
                continue
            for p in points:
                if distance(other.location, p) > self.size:
                    continue
                if other.contains_point(p):
                    return Collision.BEE
        return Collision.NONE

    def _has_stalled(self, tick: int) -> bool:
        if self.task is BeeTask.SLEEP:
            return False

        self.recent_locations.append(self.location)
        if len(self.recent_locations) < self.recent_locations.maxlen:
            return False

        if distance(self.recent_locations[0], self.recent_locations[-1]) < STALL_DISTANCE:
            return True
        if self.has_left_hive:
            return False
        if distance(self.start_location, self.location) < LAZY_DISTANCE:
            return True
        return tick > MOVES_TO_LEAVE_HIVE + STALL_WINDOW_PER_INDEX * self.index

    def __repr__(self):
        return (f"Bee(index={self.index}, task={self.task.value}, "
                f"nectar={self.nectar_collected}, heading={self.heading:.1f}, "
                f"location=({self.x:.1f}, {self.y:.1f}), "
                f"eliminated={self.elimination_reason.value})")
