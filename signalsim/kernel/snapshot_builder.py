from typing import Any, Dict, Optional
from signalsim.controllers.base import Controller
from signalsim.domain.state import SimulationState

class SnapshotBuilder:
    def build(self, state: SimulationState, controller: Optional[Controller] = None) -> Dict[str, Any]:
        stats = state.statistics
        return {
            "tick": state.tick_id,
            "time": state.time,
            "controller": controller.describe() if controller else {"type": state.config.aiController.value},
            "lights": [
                {
                    "id": l.id,
                    "direction": l.direction.value,
                    "state": l.state.value,
                    "timer": l.timer
                }
                for l in state.trafficLights
            ],
            "vehicles": [
                {
                    "id": v.id,
                    "type": v.type.value,
                    "x": v.position.x,
                    "y": v.position.y,
                    "direction": v.direction.value,
                    "lane": v.lane.value,
                    "waitTime": v.waitTime,
                    "color": v.color
                }
                for v in state.vehicles
            ],
            "statistics": stats.model_dump(),
        }
