import random
from abc import ABC, abstractmethod
from typing import Any
from signalsim.domain.models import ControllerType

class Controller(ABC):
    controller_type: ControllerType
    name: str = ""
    description: str = ""

    @abstractmethod
    def run_tick(self, state: Any, dt: float, rng: random.Random):
        pass

    def describe(self) -> dict:
        return {"type": self.controller_type.value, "name": self.name, "description": self.description}
