import math
from typing import List
from signalsim.domain.models import (
    Vehicle, DirectionalDensity, DensityTuning, ThroughputTuning, Statistics
)
from signalsim.domain.graph import IntersectionLayout, DEFAULT_LAYOUT

def distance_weight(distance: float, tuning: DensityTuning) -> float:
    # 1.0 at the center, exponential decay out to max_distance, flat floor beyond
    if distance <= tuning.max_distance:
        return math.exp(-tuning.decay_rate * distance)
    return tuning.min_weight

def weighted_density(vehicles: List[Vehicle], tuning: DensityTuning,
                     layout: IntersectionLayout = DEFAULT_LAYOUT) -> DirectionalDensity:
    """Distance-weighted count of vehicles still approaching the center, per direction."""
    density = DirectionalDensity()
    for v in vehicles:
        if not layout.is_approaching(v.position, v.direction):
            continue
        weight = distance_weight(layout.distance_to_center(v.position), tuning)
        setattr(density, v.direction.value, getattr(density, v.direction.value) + weight)
    return density

def average_wait_time(vehicles: List[Vehicle]) -> float:
    if not vehicles:
        return 0.0
    return sum(v.waitTime for v in vehicles) / len(vehicles)

def estimate_throughput(total_spawned: int, average_wait: float, active: int,
                        tuning: ThroughputTuning) -> float:
    base = math.floor(total_spawned * tuning.spawn_factor)
    penalty = average_wait * tuning.wait_penalty
    bonus = min(tuning.active_bonus_cap, active * tuning.active_bonus)
    return max(0.0, base - penalty + bonus)

def efficiency_score(throughput: float, average_wait: float) -> float:
    if throughput <= 0:
        return 0.0
    return min(100.0, max(0.0, throughput / (average_wait + 1) * 10))

def count_nearby(vehicles: List[Vehicle], radius: float,
                 layout: IntersectionLayout = DEFAULT_LAYOUT) -> int:
    return sum(1 for v in vehicles if layout.distance_to_center(v.position) < radius)

class StatisticsSystem:
    def __init__(self, layout: IntersectionLayout = DEFAULT_LAYOUT):
        self.layout = layout

    def compute(self, vehicles: List[Vehicle], total_spawned: int,
                density_tuning: DensityTuning, throughput_tuning: ThroughputTuning) -> Statistics:
        avg_wait = average_wait_time(vehicles)
        throughput = estimate_throughput(total_spawned, avg_wait, len(vehicles), throughput_tuning)
        density = weighted_density(vehicles, density_tuning, self.layout)

        total_density = density.ns + density.ew
        ns_share = (density.ns / total_density) * 100 if total_density > 0 else 50.0

        return Statistics(
            totalVehicles=total_spawned,
            activeVehicles=len(vehicles),
            averageWaitTime=avg_wait,
            throughput=throughput,
            trafficDensity=density,
            efficiencyScore=efficiency_score(throughput, avg_wait),
            nsShare=ns_share,
        )

    def update(self, state):
        tuning = state.config.tuning
        state.statistics = self.compute(
            state.vehicles, state.statistics.totalVehicles, tuning.density, tuning.throughput
        )
