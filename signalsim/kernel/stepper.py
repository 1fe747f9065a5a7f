import random
from signalsim.controllers.base import Controller
from signalsim.domain.state import SimulationState
from signalsim.systems.signal_system import SignalGroup
from signalsim.systems.vehicle_system import VehicleSystem
from signalsim.systems.statistics_system import StatisticsSystem, weighted_density

_vehicle_system = VehicleSystem()
_statistics_system = StatisticsSystem()

def step(state: SimulationState, dt: float, controller: Controller, rng: random.Random) -> SimulationState:
    """Advance the world by one tick and return the new state.

    ``state`` is left untouched. The only other things mutated are the
    controller's own policy state and ``rng``.
    """
    new_state = state.model_copy(deep=True)

    # 1. Signals
    controller.run_tick(new_state, dt, rng)
    signals = SignalGroup(new_state.trafficLights)
    demand = weighted_density(new_state.vehicles, new_state.config.tuning.density, signals.layout)
    signals.ensure_green(demand.ns, demand.ew)
    signals.validate()

    # 2. Vehicles
    _vehicle_system.update(new_state, dt)

    # 3. Arrivals
    _vehicle_system.spawn(new_state, dt, rng)

    # 4. Statistics
    _statistics_system.update(new_state)

    # 5. Clock
    new_state.time += dt
    new_state.tick_id += 1
    return new_state
