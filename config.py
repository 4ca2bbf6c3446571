"""
HiveSim Configuration
All tunable parameters for the bee neuro-evolution simulation.
"""

# ─── Meadow ───────────────────────────────────────────────────────────────────
MEADOW_WIDTH  = 900   # pixels east-west
MEADOW_HEIGHT = 550   # pixels north-south (y grows downwards)

NUMBER_OF_TREES   = 30
TREE_STUMP_RADIUS = 20      # solid part of a tree, bees crash into it
TREE_CLEARANCE    = 55      # flowers are never placed this close to a tree
NUMBER_OF_FLOWERS = 130
FLOWER_DIAMETER   = 6

WALL_THICKNESS = 10         # border and hive walls

# ─── Hive ─────────────────────────────────────────────────────────────────────
HIVE_EXIT_X          = 110  # a bee east of this has left the hive
HIVE_RETURN_X        = 90   # west of this (and below the diagonal) is "home"
NECTAR_MIN_X         = 113  # flowers are never painted inside the hive

# ─── Population ───────────────────────────────────────────────────────────────
POPULATION                  = 24    # bees per generation (forced even)
MAX_GENERATIONS             = 500
MOVES_BEFORE_FIRST_MUTATION = 500   # tick budget of the first generation
DAY_GROWTH_PER_GENERATION   = 100   # budget grows by this after each generation
LENGTH_OF_DAY               = 4200  # budget never exceeds a full day
MOVES_TO_RETURN_HOME        = 1000  # home-time is announced this many ticks early
HOME_TIME_MIN_DAY           = 3000  # days shorter than this never send bees home

# ─── Brain ────────────────────────────────────────────────────────────────────
# One amplification factor per wing. A zero factor removes that output neuron.
OUTPUT_MODULATION  = (2.0, 2.0)
HIDDEN_LAYERS_MONO   = ()       # mono vision learns fine with input → output
HIDDEN_LAYERS_STEREO = (10,)
MUTATION_PERCENT   = 30         # chance (0..100) per parameter
MUTATION_MAGNITUDE = 0.5        # deltas drawn from [-magnitude, magnitude]
MAX_MUTATION_ATTEMPTS = 1000    # mutation passes before giving up

# ─── Vision ───────────────────────────────────────────────────────────────────
USE_STEREO_VISION       = False
FIELD_OF_VISION_START   = -120  # degrees relative to heading
FIELD_OF_VISION_STOP    = 120
SAMPLE_POINTS           = 60    # rays (per eye pair half for stereo)
DEPTH_OF_VISION         = 70    # pixels
VISION_STEP             = 2     # pixels between ray samples

# ─── Bee ──────────────────────────────────────────────────────────────────────
BEE_SIZE          = 22.5
NECTAR_CAPACITY   = 8
SIP_PAUSE         = 25      # ticks a bee rests on a flower
DRIFT_ENABLED     = True
DRIFT_FACTOR_MONO   = 5
DRIFT_FACTOR_STEREO = 2
WING_MIN          = -0.1
WING_MAX          = 1.5
STALL_WINDOW_BASE     = 30  # recent locations kept, plus STALL_WINDOW_PER_INDEX * index
STALL_WINDOW_PER_INDEX = 10
STALL_DISTANCE        = 15  # px moved across the window before a bee is "stalled"
LAZY_DISTANCE         = 40  # px from the start that still counts as "not moved"
MOVES_TO_LEAVE_HIVE   = 500

# ─── Scoring ──────────────────────────────────────────────────────────────────
NECTAR_REWARD     = 10000
LEFT_HIVE_BONUS   = 1000
SLEEP_BONUS       = 1000

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR           = "output"      # directory for saved images and charts
SNAPSHOT_INTERVAL  = 25            # save meadow/brain images every N generations
LOG_CSV            = True          # write per-generation CSV log
MODEL_FILE_PATTERN = "bee-model{id}.ai"


# ──────────────────────────────────────────────────────────────────────────────
# Derived values
# ──────────────────────────────────────────────────────────────────────────────

def output_neurons_required(modulation=OUTPUT_MODULATION) -> int:
    """Number of wing outputs, one per non-zero amplification factor."""
    return sum(1 for m in modulation if m != 0)


def vision_angle_step(start: float = FIELD_OF_VISION_START,
                      stop: float = FIELD_OF_VISION_STOP,
                      samples: int = SAMPLE_POINTS) -> float:
    """Degrees between adjacent rays spread evenly over [start, stop]."""
    if samples <= 1:
        return 0.0
    return (stop - start) / (samples - 1)


def layer_sizes(input_count: int, hidden=(),
                modulation=OUTPUT_MODULATION) -> list:
    """Full network topology: vision inputs, hidden layers, wing outputs."""
    return [int(input_count), *[int(h) for h in hidden],
            output_neurons_required(modulation)]
