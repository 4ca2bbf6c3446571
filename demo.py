"""
Quick demo – runs a 40-generation mono-vision simulation with a small
swarm and saves snapshots + charts without needing a display.
"""
from simulation import Simulation
from visualizer import (ensure_dirs, save_meadow_snapshot,
                        save_evolution_chart, save_neural_diagram,
                        save_vision_chart, append_csv)

OUT = "output/demo"
ensure_dirs(OUT)

all_stats = []
sim = None


def on_gen(gen_idx, stats, meadow, bees):
    all_stats.append(stats)
    append_csv(stats, OUT)
    if gen_idx % 10 == 0:
        save_meadow_snapshot(meadow, bees, gen_idx, OUT)
        save_neural_diagram(sim.champion, gen_idx, "best", OUT)
        save_vision_chart(bees[stats["best_index"]], gen_idx, OUT)


sim = Simulation(
    population      = 12,
    max_generations = 40,
    sample_points   = 30,
    seed            = 42,
    on_gen_callback = on_gen,
)
sim.run()

save_evolution_chart(all_stats, OUT, "demo_chart.png")
print("\nAll outputs in:", OUT)
