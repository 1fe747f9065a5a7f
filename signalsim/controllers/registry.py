from typing import Callable, Dict, Optional
from signalsim.controllers.base import Controller
from signalsim.controllers.implementations import FixedController, AdaptiveController
from signalsim.controllers.reinforcement import ReinforcementController
from signalsim.domain.models import ControllerType, SimulationConfig

CONTROLLER_FACTORIES: Dict[ControllerType, Callable[[SimulationConfig], Controller]] = {
    ControllerType.FIXED: lambda cfg: FixedController(),
    ControllerType.ADAPTIVE: lambda cfg: AdaptiveController(),
    ControllerType.REINFORCEMENT: lambda cfg: ReinforcementController(cfg.tuning.learning),
}

def create_controller(controller_type: ControllerType, sim_config: Optional[SimulationConfig] = None) -> Controller:
    return CONTROLLER_FACTORIES[ControllerType(controller_type)](sim_config or SimulationConfig())

def describe_controllers() -> Dict[str, dict]:
    return {t.value: create_controller(t).describe() for t in ControllerType}
