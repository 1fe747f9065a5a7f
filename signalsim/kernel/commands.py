from abc import ABC, abstractmethod
from typing import Any, Optional
from signalsim.domain.models import ControllerType, AIParamsUpdate

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class SetControllerCommand(Command):
    def __init__(self, controller_type: ControllerType):
        self.controller_type = ControllerType(controller_type)

    def execute(self, kernel: Any):
        kernel.state.config.aiController = self.controller_type

class UpdateAIParamsCommand(Command):
    def __init__(self, updates: AIParamsUpdate):
        self.updates = updates

    def execute(self, kernel: Any):
        params = kernel.state.config.aiParams
        for field, value in self.updates.model_dump(exclude_none=True).items():
            setattr(params, field, value)
        return params

class SetSpawnRateCommand(Command):
    def __init__(self, spawn_rate: float):
        self.spawn_rate = max(0.0, spawn_rate)

    def execute(self, kernel: Any):
        kernel.state.config.spawnRate = self.spawn_rate

class SetSimulationSpeedCommand(Command):
    def __init__(self, speed: float):
        self.speed = max(0.0, speed)

    def execute(self, kernel: Any):
        kernel.state.config.simulationSpeed = self.speed

class SpawnVehicleCommand(Command):
    def execute(self, kernel: Any):
        # Force a spawn regardless of the arrival draw
        return kernel.spawn_vehicle()

class ResetCommand(Command):
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def execute(self, kernel: Any):
        kernel.reset(seed=self.seed)
