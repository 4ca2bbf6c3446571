"""
HiveSim – Main Entry Point
==========================

Usage examples:
  python main.py                          # default: mono vision, 24 bees
  python main.py --stereo                 # two-eyed bees with a hidden layer
  python main.py --gens 200 --pop 12      # custom parameters
  python main.py --samples 30 --depth 90  # coarser, longer-sighted vision
  python main.py --no_drift               # wings steer only, no sideways slip
  python main.py --load_models            # continue from saved networks
"""

import argparse
import logging
import os

from simulation  import Simulation
from visualizer  import (ensure_dirs, save_meadow_snapshot,
                         save_evolution_chart, save_neural_diagram,
                         save_vision_chart, append_csv)
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, MODEL_FILE_PATTERN,
                    POPULATION, MAX_GENERATIONS, SAMPLE_POINTS,
                    FIELD_OF_VISION_START, FIELD_OF_VISION_STOP, DEPTH_OF_VISION,
                    MUTATION_PERCENT, MUTATION_MAGNITUDE,
                    MOVES_BEFORE_FIRST_MUTATION, LENGTH_OF_DAY)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="HiveSim – neuro-evolution of nectar-collecting bees")
    p.add_argument("--gens",       type=int,   default=MAX_GENERATIONS,
                   help="Number of generations to run")
    p.add_argument("--pop",        type=int,   default=POPULATION,
                   help="Bees per generation (rounded up to even)")
    p.add_argument("--stereo",     action="store_true",
                   help="Use two-eyed stereo vision")
    p.add_argument("--samples",    type=int,   default=SAMPLE_POINTS,
                   help="Vision rays (per half eye for stereo)")
    p.add_argument("--fov_start",  type=float, default=FIELD_OF_VISION_START,
                   help="Leftmost ray, degrees relative to heading")
    p.add_argument("--fov_stop",   type=float, default=FIELD_OF_VISION_STOP,
                   help="Rightmost ray, degrees relative to heading")
    p.add_argument("--depth",      type=float, default=DEPTH_OF_VISION,
                   help="How far bees see, in pixels")
    p.add_argument("--hidden",     type=int,   nargs="*", default=None,
                   help="Hidden layer sizes (default depends on vision)")
    p.add_argument("--mutation",   type=float, default=MUTATION_PERCENT,
                   help="Chance (percent) that a parameter mutates")
    p.add_argument("--magnitude",  type=float, default=MUTATION_MAGNITUDE,
                   help="Largest mutation delta")
    p.add_argument("--first_day",  type=int,   default=MOVES_BEFORE_FIRST_MUTATION,
                   help="Ticks in the first generation's day")
    p.add_argument("--day",        type=int,   default=LENGTH_OF_DAY,
                   help="Longest day the budget grows to")
    p.add_argument("--no_drift",   action="store_true",
                   help="Disable sideways drift")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save meadow/brain images every N generations")
    p.add_argument("--load_models", action="store_true",
                   help="Load networks from <outdir>/models before running")
    p.add_argument("--log_level",  default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                   help="Logging level for library messages")
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Bundles the per-generation callbacks used by the simulation."""

    def __init__(self, outdir: str, snapshot_interval: int, all_stats: list):
        self.outdir            = outdir
        self.snapshot_interval = snapshot_interval
        self.all_stats         = all_stats
        self.sim               = None     # set once the simulation exists

    def on_generation(self, gen_idx, stats, meadow, bees):
        self.all_stats.append(stats)
        append_csv(stats, self.outdir)

        if gen_idx % self.snapshot_interval == 0:
            path = save_meadow_snapshot(meadow, bees, gen_idx, self.outdir)
            print(f"  → Snapshot: {path}")

            if self.sim is not None:
                npath = save_neural_diagram(self.sim.champion, gen_idx,
                                            "best", self.outdir)
                print(f"  → Neural diagram: {npath}")

            if 0 <= stats["best_index"] < len(bees):
                vpath = save_vision_chart(bees[stats["best_index"]], gen_idx, self.outdir)
                print(f"  → Vision chart: {vpath}")

        # Chart update every 100 gens
        if gen_idx % 100 == 0 and gen_idx > 0:
            save_evolution_chart(self.all_stats, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    outdir = os.path.join(args.outdir, "stereo" if args.stereo else "mono")
    ensure_dirs(outdir)
    model_pattern = os.path.join(outdir, "models", MODEL_FILE_PATTERN)

    all_stats = []
    cb = SimCallbacks(
        outdir            = outdir,
        snapshot_interval = args.snapshot_interval,
        all_stats         = all_stats,
    )

    sim = Simulation(
        population         = args.pop,
        max_generations    = args.gens,
        use_stereo         = args.stereo,
        fov_start          = args.fov_start,
        fov_stop           = args.fov_stop,
        sample_points      = args.samples,
        depth_of_vision    = args.depth,
        hidden_layers      = args.hidden,
        mutation_percent   = args.mutation,
        mutation_magnitude = args.magnitude,
        first_day          = args.first_day,
        length_of_day      = args.day,
        drift_enabled      = not args.no_drift,
        seed               = args.seed,
        on_gen_callback    = cb.on_generation,
    )
    cb.sim = sim

    print("=" * 60)
    print("  HiveSim – Neuro-evolution of nectar-collecting bees")
    print("=" * 60)
    print(f"  Vision     : {'stereo' if args.stereo else 'mono'} "
          f"({args.samples} samples, {args.fov_start:g}°..{args.fov_stop:g}°, "
          f"depth {args.depth:g})")
    print(f"  Network    : {sim.layers}")
    print(f"  Population : {sim.population}")
    print(f"  Generations: {args.gens}")
    print(f"  Day        : {args.first_day} → {args.day} moves")
    print(f"  Mutation   : {args.mutation:g}% × {args.magnitude:g}")
    print(f"  Output dir : {outdir}")
    print("=" * 60)

    if args.load_models:
        failed = sim.load_networks(model_pattern)
        print(f"  Loaded {sim.population - len(failed)}/{sim.population} networks")

    sim.run()

    print("\nSaving networks …")
    sim.save_networks(model_pattern)
    print(f"  → {os.path.dirname(model_pattern)}")

    print("Saving final evolution chart …")
    chart_path = save_evolution_chart(all_stats, outdir, "evolution_final.png")
    print(f"  → {chart_path}")

    print("\nDone! All outputs saved to:", outdir)


if __name__ == "__main__":
    main()
