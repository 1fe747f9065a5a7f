from typing import List, Optional
from pydantic import BaseModel, Field
from signalsim.domain.models import (
    Vehicle, TrafficLight, Statistics, SimulationConfig, SignalState, Direction
)

class SimulationState(BaseModel):
    tick_id: int = 0
    time: float = 0.0
    vehicles: List[Vehicle] = []
    trafficLights: List[TrafficLight] = []
    statistics: Statistics = Field(default_factory=Statistics)
    config: SimulationConfig = Field(default_factory=SimulationConfig)

def create_initial_state(sim_config: Optional[SimulationConfig] = None) -> SimulationState:
    # North-south starts green so the fixed cycle is in phase from t=0
    lights = []
    for direction in Direction:
        start = SignalState.GREEN if direction in (Direction.NORTH, Direction.SOUTH) else SignalState.RED
        lights.append(TrafficLight(id=f"light-{direction.value}", direction=direction, state=start))

    return SimulationState(
        trafficLights=lights,
        config=sim_config.model_copy(deep=True) if sim_config else SimulationConfig(),
    )
