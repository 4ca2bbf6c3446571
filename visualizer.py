"""
Visualizer for HiveSim.

Produces:
  1. Meadow snapshots – walls, trees, flowers and every bee at the end of a day
  2. Evolution chart  – best/mean fitness, nectar and losses over generations
  3. Neural network diagrams – layers and weights of one network
  4. Vision charts    – what one bee saw on its last tick
  5. CSV log          – per-generation stats
"""

import os
import csv
import math

import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap

from bee import BeeTask, EliminationReason
from config import SAVE_DIR, LOG_CSV
from meadow import CELL_EMPTY, CELL_WALL

# cell code → colour: empty, nectar, tree stump, wall
MEADOW_COLOURS = ListedColormap(["#2E5E1E", "#FFD400", "#6B3E1E", "#BBBBBB"])

BEE_COLOURS = {
    BeeTask.COLLECT_NECTAR:  "#FFAA00",
    BeeTask.RETURN_TO_HIVE:  "#FF66CC",
    BeeTask.RETURN_TO_BED:   "#CC44FF",
    BeeTask.ORIENT_TO_SLEEP: "#44CCFF",
    BeeTask.SLEEP:           "#FFFFFF",
}


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts", "neural", "vision", "models"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


def _dark_axes(fig, ax):
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")


# ──────────────────────────────────────────────────────────────────────────────
# Meadow snapshot
# ──────────────────────────────────────────────────────────────────────────────

def save_meadow_snapshot(meadow, bees: list, generation: int,
                         base: str = SAVE_DIR):
    """
    Render the occupancy grid with every bee drawn as a heading arrow.
    Crashed bees are drawn as a red cross, stalled bees as a red dot.
    """
    fig, ax = plt.subplots(figsize=(9, 5.5), dpi=100)
    _dark_axes(fig, ax)
    ax.imshow(meadow.grid, cmap=MEADOW_COLOURS, vmin=CELL_EMPTY, vmax=CELL_WALL,
              interpolation="nearest", origin="upper")

    asleep = sum(1 for b in bees if b.task is BeeTask.SLEEP)
    nectar = sum(b.nectar_collected for b in bees)
    ax.set_title(f"Generation {generation}  "
                 f"(nectar {nectar}, {asleep}/{len(bees)} asleep, "
                 f"{len(meadow.flowers)} flowers left)",
                 color="white", fontsize=10)

    for b in bees:
        if b.eliminated:
            marker = "x" if b.elimination_reason is EliminationReason.COLLIDED else "o"
            ax.plot(b.x, b.y, marker=marker, color="#FF4444", markersize=4)
            continue
        dx = math.cos(math.radians(b.heading)) * b.size / 2
        dy = math.sin(math.radians(b.heading)) * b.size / 2
        ax.annotate("", xy=(b.x + dx, b.y + dy), xytext=(b.x - dx, b.y - dy),
                    arrowprops=dict(arrowstyle="-|>", color=BEE_COLOURS[b.task], lw=1.2))

    path = os.path.join(base, "snapshots", f"gen_{generation:06d}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Evolution statistics chart
# ──────────────────────────────────────────────────────────────────────────────

def save_evolution_chart(stats: list, base: str = SAVE_DIR,
                         filename: str = "evolution.png"):
    """
    Fitness on the left axis; nectar, sleepers and losses on the right.
    """
    if not stats:
        return
    gens     = [s["generation"]   for s in stats]
    best     = [s["best_fitness"] for s in stats]
    mean     = [s["mean_fitness"] for s in stats]
    nectar   = [s["nectar"]       for s in stats]
    asleep   = [s["asleep"]       for s in stats]
    lost     = [s["collided"] + s["stalled"] for s in stats]
    extinct  = [s["generation"] for s in stats if s.get("extinct")]

    fig, ax1 = plt.subplots(figsize=(12, 5), dpi=100)
    _dark_axes(fig, ax1)

    ax1.plot(gens, best, color="#44FF44", linewidth=1.2, label="Best fitness", zorder=3)
    ax1.plot(gens, mean, color="#44AA44", linewidth=1.0, linestyle="--",
             label="Mean fitness", zorder=3)
    ax1.set_ylabel("Fitness", color="white")
    ax1.set_xlabel("Generation", color="white")
    for g in extinct:
        ax1.axvline(g, color="#FF4444", alpha=0.3, linewidth=0.8)

    ax2 = ax1.twinx()
    ax2.plot(gens, nectar, color="#FFD400", linewidth=1.0, label="Nectar", zorder=2)
    ax2.plot(gens, asleep, color="#FFFFFF", linewidth=1.0, alpha=0.8,
             label="Asleep", zorder=2)
    ax2.plot(gens, lost,   color="#FF8800", linewidth=1.0, alpha=0.8,
             label="Crashed + stalled", zorder=2)
    ax2.set_ylabel("Count", color="white")
    ax2.tick_params(colors="white")

    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2,
               facecolor="#222222", labelcolor="white",
               loc="upper left", fontsize=8)

    ax1.set_title("Evolutionary Progress", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Neural network diagram
# ──────────────────────────────────────────────────────────────────────────────

def save_neural_diagram(network, generation: int, label: str = "",
                        base: str = SAVE_DIR, max_edges: int = 400):
    """
    Draw the network as a layered graph, inputs (blue) → hidden (grey) →
    wings (pink). Green edges are positive weights, red negative; only the
    `max_edges` strongest weights are drawn.
    """
    layers = network.layers
    node_pos = {}
    for L, size in enumerate(layers):
        x = L / max(1, len(layers) - 1)
        for n in range(size):
            node_pos[(L, n)] = (x, (n + 1) / (size + 1))

    edges = []
    for L, w in enumerate(network.weights, start=1):
        for n, prev in np.ndindex(w.shape):
            edges.append((abs(w[n, prev]), w[n, prev], (L - 1, prev), (L, n)))
    edges.sort(key=lambda e: e[0], reverse=True)
    edges = edges[:max_edges]

    fig, ax = plt.subplots(figsize=(10, 6), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")
    ax.axis("off")
    ax.set_xlim(-0.15, 1.15)
    ax.set_ylim(-0.05, 1.05)

    for strength, w, src, snk in edges:
        x1, y1 = node_pos[src]
        x2, y2 = node_pos[snk]
        color  = "#44FF44" if w >= 0 else "#FF4444"
        ax.plot([x1, x2], [y1, y2], color=color,
                lw=0.3 + min(2.5, strength * 2), alpha=0.5, zorder=1)

    last = len(layers) - 1
    for (L, n), (x, y) in node_pos.items():
        color = "#4499FF" if L == 0 else ("#FF88AA" if L == last else "#AAAAAA")
        radius = 0.012 if layers[L] > 30 else 0.025
        ax.add_patch(plt.Circle((x, y), radius, color=color, zorder=3))

    wing_names = ["left wing", "right wing"]
    for n in range(layers[-1]):
        x, y = node_pos[(last, n)]
        name = wing_names[n] if layers[-1] == 2 else f"wing {n}"
        ax.text(x + 0.03, y, name, color="white", fontsize=7, ha="left", va="center")

    ax.set_title(
        f"Gen {generation} — {label or 'network'} {layers}  "
        f"fitness {network.fitness:.0f}",
        color="white", fontsize=10, pad=4)

    path = os.path.join(base, "neural", f"gen_{generation:06d}_{label or 'network'}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Vision chart
# ──────────────────────────────────────────────────────────────────────────────

def save_vision_chart(bee, generation: int, base: str = SAVE_DIR):
    """Bar chart of the bee's last vision vector (flowers up, obstacles down)."""
    values = np.asarray(bee.last_vision)
    fig, ax = plt.subplots(figsize=(10, 3), dpi=100)
    _dark_axes(fig, ax)
    colors = ["#FFD400" if v > 0 else "#FF4444" for v in values]
    ax.bar(np.arange(len(values)), values, color=colors, width=0.8)
    ax.axhline(0, color="#444444", linewidth=0.8)
    ax.set_ylim(-1.05, 1.05)
    ax.set_xlabel("Ray", color="white")
    ax.set_title(f"Gen {generation} — what bee {bee.index} saw last",
                 color="white", fontsize=10)

    path = os.path.join(base, "vision", f"gen_{generation:06d}_bee{bee.index}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(stats: dict, base: str = SAVE_DIR):
    """Append one generation's stats to a CSV file."""
    if not LOG_CSV:
        return
    path = os.path.join(base, "evolution_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(stats.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(stats)
