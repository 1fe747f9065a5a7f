import json
import logging
import time
from typing import Any, Dict, List, Optional
from signalsim.domain.models import ControllerType, SimulationConfig
from signalsim.kernel.simulation_kernel import SimulationKernel

log = logging.getLogger(__name__)

def run_headless_experiment(controller_type: ControllerType, ticks: int = 600, dt: float = 0.1,
                            seed: int = 42, sim_config: Optional[SimulationConfig] = None) -> List[Dict[str, Any]]:
    cfg = sim_config.model_copy(deep=True) if sim_config else SimulationConfig()
    cfg.aiController = ControllerType(controller_type)

    kernel = SimulationKernel(cfg)
    kernel.initialize(seed=seed)

    results = []
    start_time = time.perf_counter()
    for i in range(ticks):
        state = kernel.run_tick(dt)
        results.append({
            "tick": i,
            "time": round(state.time, 6),
            "vehicle_count": len(state.vehicles),
            "total_vehicles": state.statistics.totalVehicles,
            "average_wait": state.statistics.averageWaitTime,
            "throughput": state.statistics.throughput,
            "efficiency": state.statistics.efficiencyScore,
            "ns_light": next(l.state.value for l in state.trafficLights if l.direction.value == "north"),
            "ew_light": next(l.state.value for l in state.trafficLights if l.direction.value == "east"),
        })

    log.info("%s experiment finished: %d ticks in %.4fs", cfg.aiController.value, ticks,
             time.perf_counter() - start_time)
    return results

def summarize(results: List[Dict[str, Any]]) -> Dict[str, float]:
    if not results:
        return {"ticks": 0, "final_throughput": 0.0, "mean_wait": 0.0, "mean_efficiency": 0.0}
    return {
        "ticks": len(results),
        "final_throughput": results[-1]["throughput"],
        "mean_wait": sum(r["average_wait"] for r in results) / len(results),
        "mean_efficiency": sum(r["efficiency"] for r in results) / len(results),
    }

def compare_controllers(ticks: int = 600, dt: float = 0.1, seed: int = 42,
                        sim_config: Optional[SimulationConfig] = None) -> Dict[str, Dict[str, float]]:
    # Same seed for every policy so arrivals line up as far as the policies allow
    return {
        t.value: summarize(run_headless_experiment(t, ticks, dt, seed, sim_config))
        for t in ControllerType
    }

def write_results(results: Any, output_path: str):
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
