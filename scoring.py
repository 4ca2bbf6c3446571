"""
Fitness function for HiveSim.

    fitness = distance travelled
            + 10000 × nectar collected
            + 1000 if the bee collected anything or left the hive
            + 1000 if the bee is asleep in a bed

A bee that never got going (still collecting, empty pouch, within 40 px of
its start cell) scores exactly 0, however much it wiggled in place.
"""

from bee import BeeTask, distance
from config import NECTAR_REWARD, LEFT_HIVE_BONUS, SLEEP_BONUS, LAZY_DISTANCE


def score(bee) -> float:
    if (bee.task is BeeTask.COLLECT_NECTAR and bee.nectar_collected == 0
            and distance(bee.start_location, bee.location) < LAZY_DISTANCE):
        return 0.0

    fitness = bee.distance_travelled + bee.nectar_collected * NECTAR_REWARD
    if bee.nectar_collected > 0 or bee.has_left_hive:
        fitness += LEFT_HIVE_BONUS
    if bee.task is BeeTask.SLEEP:
        fitness += SLEEP_BONUS
    return float(fitness)
