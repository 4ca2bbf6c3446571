"""
Simulation Engine for HiveSim.

Orchestrates the full evolutionary loop:
  for each generation:
    1. Release one bee per network from its hive cell
    2. Tick until the day budget runs out, every bee is asleep or out,
       or the meadow has no nectar left
    3. Score every bee into its network's fitness
    4. Breed: the worst half of the networks become mutated copies of the
       best half (or a full reseed on extinction)
    5. Log stats, lengthen the day, repaint the meadow
"""

import logging
import time

import numpy as np

from bee import Bee, BeeTask, EliminationReason
from config import (
    POPULATION, MAX_GENERATIONS, USE_STEREO_VISION,
    FIELD_OF_VISION_START, FIELD_OF_VISION_STOP, SAMPLE_POINTS,
    DEPTH_OF_VISION, OUTPUT_MODULATION, DRIFT_ENABLED,
    MUTATION_PERCENT, MUTATION_MAGNITUDE,
    MOVES_BEFORE_FIRST_MUTATION, DAY_GROWTH_PER_GENERATION, LENGTH_OF_DAY,
    MOVES_TO_RETURN_HOME, HOME_TIME_MIN_DAY, MODEL_FILE_PATTERN,
    layer_sizes,
)
from hive import Hive
from meadow import Meadow
from neural_network import NeuralNetwork, copy_parameters
from scoring import score
from vision import make_vision


class Simulation:
    """
    Main simulation controller.

    networks[i] always drives bees[i]; breed() moves networks between slots,
    the bees are rebuilt from their slot index every generation.
    """

    def __init__(
        self,
        population:        int   = POPULATION,
        max_generations:   int   = MAX_GENERATIONS,
        use_stereo:        bool  = USE_STEREO_VISION,
        fov_start:         float = FIELD_OF_VISION_START,
        fov_stop:          float = FIELD_OF_VISION_STOP,
        sample_points:     int   = SAMPLE_POINTS,
        depth_of_vision:   float = DEPTH_OF_VISION,
        hidden_layers            = None,     # None: the vision system's default
        output_modulation        = OUTPUT_MODULATION,
        mutation_percent:  float = MUTATION_PERCENT,
        mutation_magnitude: float = MUTATION_MAGNITUDE,
        first_day:         int   = MOVES_BEFORE_FIRST_MUTATION,
        day_growth:        int   = DAY_GROWTH_PER_GENERATION,
        length_of_day:     int   = LENGTH_OF_DAY,
        moves_to_return_home: int = MOVES_TO_RETURN_HOME,
        drift_enabled:     bool  = DRIFT_ENABLED,
        meadow:            Meadow = None,
        seed:              int   = None,
        logger:            logging.Logger = None,
        on_tick_callback   = None,    # called every tick (for live viz)
        on_gen_callback    = None,    # called at the end of each generation
    ):
        if population < 2:
            raise ValueError(f"population needs at least two bees, got {population}")
        if population % 2:
            population += 1     # breeding pairs the two halves

        self.population         = population
        self.max_generations    = max_generations
        self.output_modulation  = tuple(output_modulation)
        self.mutation_percent   = mutation_percent
        self.mutation_magnitude = mutation_magnitude
        self.day_growth         = day_growth
        self.length_of_day      = length_of_day
        self.moves_to_return_home = moves_to_return_home
        self.drift_enabled      = drift_enabled
        self.logger             = logger or logging.getLogger(__name__)
        self.rng                = np.random.default_rng(seed)
        self.on_tick_callback   = on_tick_callback
        self.on_gen_callback    = on_gen_callback

        self.vision = make_vision(use_stereo, fov_start=fov_start, fov_stop=fov_stop,
                                  sample_points=sample_points, depth=depth_of_vision)
        if hidden_layers is None:
            hidden_layers = self.vision.hidden_layers
        self.layers = layer_sizes(self.vision.required_input_count(),
                                  hidden_layers, self.output_modulation)

        self.meadow   = meadow if meadow is not None else Meadow(rng=self.rng)
        self.hive     = Hive(population)
        self.networks = [NeuralNetwork(self.layers, self.rng) for _ in range(population)]
        self.lifetime_totals = {}    # network identity → nectar over its lineage

        # History
        self.generation = 0
        self.moves_per_generation = min(first_day, length_of_day)
        self.tick  = 0
        self.stats = []          # list of dicts, one per generation
        self.champion = None     # best network of the last finished day
        self.bees  = []
        self.start()

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    def run(self):
        """Run the full simulation for max_generations generations."""
        for gen_idx in range(self.max_generations):
            stats = self.run_generation()
            self._print_stats(gen_idx, stats)
            if stats["extinct"]:
                print("  !! Extinction event – no bee scored. Reseeding.")

        print("\n=== Simulation complete ===")

    def run_generation(self) -> dict:
        """Tick until the day ends, then breed. Returns the generation's stats."""
        while self.step():
            pass
        return self.end_generation()

    def start(self):
        """Put a fresh bee in every hive cell and rewind the clock."""
        self.tick = 0
        self.hive.reset()
        self.bees = [
            Bee(i, self.hive, self.vision,
                output_modulation=self.output_modulation,
                drift_enabled=self.drift_enabled,
                drift_factor=self.vision.drift_factor)
            for i in range(self.population)
        ]
        self._t0 = time.time()

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def step(self) -> bool:
        """
        Advance every active bee by one tick.
        Returns False once the day is over (nothing was moved in that case).
        """
        if self.day_over():
            return False

        if (self.moves_per_generation >= HOME_TIME_MIN_DAY
                and self.moves_per_generation - self.tick == self.moves_to_return_home):
            for bee in self.bees:
                bee.end_of_day()

        for bee in self.bees:
            if not bee.is_active:
                continue
            if bee.sip_ticks > 0:
                bee.sip_ticks -= 1
                continue

            bee.move(self.networks[bee.index], self.meadow, self.bees, self.tick)

            if (bee.is_active and bee.task is BeeTask.COLLECT_NECTAR
                    and self.meadow.remove_nectar_near(bee.location)):
                bee.collect_nectar()

        self.tick += 1
        if self.on_tick_callback:
            self.on_tick_callback(self.tick, self.meadow, self.bees)
        return not self.day_over()

    def day_over(self) -> bool:
        if self.tick >= self.moves_per_generation:
            return True
        if not any(bee.is_active for bee in self.bees):
            return True
        return not self.meadow.has_nectar_remaining()

    # ──────────────────────────────────────────────────────────────────────────
    # End of a generation
    # ──────────────────────────────────────────────────────────────────────────

    def end_generation(self) -> dict:
        """Score, breed, report, then set up the next day."""
        self.score_bees()
        stats = self._compute_stats()
        self.champion = self.best_network()

        extinct = self.breed()
        stats["extinct"] = extinct
        stats["elapsed_s"] = round(time.time() - self._t0, 3)
        self.stats.append(stats)

        if self.on_gen_callback:
            self.on_gen_callback(self.generation, stats, self.meadow, self.bees)

        if not extinct:
            self.moves_per_generation = min(self.moves_per_generation + self.day_growth,
                                            self.length_of_day)
        self.generation += 1
        self.meadow.reset()
        self.start()
        return stats

    def score_bees(self):
        """Copy every bee's score into the network that flew it."""
        for bee in self.bees:
            self.networks[bee.index].fitness = score(bee)

    def breed(self) -> bool:
        """
        Replace the worst half of the networks with mutated copies of the
        best half, then re-slot them. Returns True when the population went
        extinct and was reseeded instead.
        """
        n = len(self.networks)

        if all(net.fitness <= 0 and net.last_fitness <= 0 for net in self.networks):
            self.networks = [NeuralNetwork(self.layers, self.rng) for _ in range(n)]
            self.lifetime_totals.clear()
            self.logger.info("generation %d: no bee scored, reseeding %d networks",
                             self.generation, n)
            return True

        slot_of = {id(net): i for i, net in enumerate(self.networks)}
        ranked  = sorted(self.networks,
                         key=lambda net: (net.fitness + net.last_fitness) / 2)

        half = n // 2
        for worst in range(half):
            source = worst + half
            parent = ranked[source]
            if parent.fitness <= 0:
                # earned nothing: clone the champion instead
                self.lifetime_totals.pop(parent.identity, None)
                source = n - 1
            else:
                nectar = self._nectar_in_slot(slot_of[id(parent)])
                self.lifetime_totals[parent.identity] = (
                    self.lifetime_totals.get(parent.identity, 0) + nectar)

            copy_parameters(ranked[source], ranked[worst])
            self.lifetime_totals.pop(ranked[worst].identity, None)
            ranked[worst].mutate(self.mutation_percent, self.mutation_magnitude)

        # best → slot 0, the front row of the hive
        self.networks = ranked[::-1]
        for net in self.networks:
            net.last_fitness = (net.last_fitness + net.fitness) / 2

        # the third cell of each triplet sits nearest the entrance
        for i in range(0, n, 3):
            if i + 2 < n:
                self.networks[i], self.networks[i + 2] = self.networks[i + 2], self.networks[i]
        return False

    def _nectar_in_slot(self, slot: int) -> int:
        if slot < len(self.bees):
            return self.bees[slot].nectar_collected
        return 0

    def best_network(self) -> NeuralNetwork:
        return max(self.networks, key=lambda net: net.fitness)

    # ──────────────────────────────────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────────────────────────────────

    def save_networks(self, pattern: str = MODEL_FILE_PATTERN) -> list:
        """Write one file per slot; `{id}` in pattern becomes the slot index."""
        paths = []
        for i, net in enumerate(self.networks):
            path = pattern.format(id=i)
            net.save(path)
            paths.append(path)
        return paths

    def load_networks(self, pattern: str = MODEL_FILE_PATTERN) -> list:
        """
        Load one file per slot. A slot whose file is missing or does not
        fit the topology keeps its current parameters.

        Returns the slot indices that failed to load.
        """
        failed = []
        for i, net in enumerate(self.networks):
            path = pattern.format(id=i)
            try:
                net.load(path)
            except (ValueError, OSError) as exc:
                self.logger.warning("slot %d: could not load %s: %s", i, path, exc)
                failed.append(i)
        self.generation = 0
        return failed

    # ──────────────────────────────────────────────────────────────────────────
    # Stats
    # ──────────────────────────────────────────────────────────────────────────

    def _compute_stats(self) -> dict:
        fitness = [net.fitness for net in self.networks]
        bees    = self.bees
        best    = max(bees, key=lambda b: self.networks[b.index].fitness) if bees else None

        return {
            "generation":   self.generation,
            "population":   self.population,
            "moves":        self.moves_per_generation,
            "ticks":        self.tick,
            "best_fitness": float(max(fitness)),
            "mean_fitness": float(np.mean(fitness)),
            "best_index":   best.index if best else -1,
            "nectar":       sum(b.nectar_collected for b in bees),
            "asleep":       sum(1 for b in bees if b.task is BeeTask.SLEEP),
            "collided":     sum(1 for b in bees
                                if b.elimination_reason is EliminationReason.COLLIDED),
            "stalled":      sum(1 for b in bees
                                if b.elimination_reason is EliminationReason.STALLED),
            "flowers_left": len(self.meadow.flowers),
            "best_lineage_nectar": max(self.lifetime_totals.values(), default=0),
        }

    def _print_stats(self, gen_idx: int, stats: dict):
        if gen_idx % 10 == 0 or gen_idx < 5:
            print(
                f"Gen {gen_idx:>5}  |  "
                f"moves {stats['moves']:>5}  |  "
                f"best {stats['best_fitness']:>9.1f}  "
                f"mean {stats['mean_fitness']:>9.1f}  |  "
                f"nectar {stats['nectar']:>4}  |  "
                f"asleep {stats['asleep']:>3}  "
                f"crashed {stats['collided']:>3}  "
                f"stalled {stats['stalled']:>3}  |  "
                f"{stats['elapsed_s']:.2f}s"
            )
