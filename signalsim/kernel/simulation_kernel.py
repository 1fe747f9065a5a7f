import logging
import random
from collections import deque
from typing import Deque, Optional
from signalsim.controllers.base import Controller
from signalsim.controllers.reinforcement import ReinforcementController
from signalsim.controllers.registry import create_controller
from signalsim.domain.models import SimulationConfig, Vehicle, QTableMapping
from signalsim.domain.state import SimulationState, create_initial_state
from signalsim.kernel.commands import Command
from signalsim.kernel.stepper import step
from signalsim.systems.vehicle_system import VehicleSystem
from signalsim.learning.q_table import QTable

log = logging.getLogger(__name__)

class SimulationKernel:
    def __init__(self, sim_config: Optional[SimulationConfig] = None):
        self.state = create_initial_state(sim_config)
        self.dt = 1.0 / 60 # Default frame step
        self.command_queue: Deque[Command] = deque()
        self.rng = random.Random()
        self.seed: Optional[int] = None
        self.controller: Optional[Controller] = None
        self.initialized = False
        self._pending_q_table: Optional[QTableMapping] = None
        self.vehicle_system = VehicleSystem()

    def initialize(self, seed: int = 42):
        self.command_queue.clear()
        self._start(seed)
        self.initialized = True

    def reset(self, seed: Optional[int] = None):
        # Commands queued behind a reset still apply to the fresh run
        self._start(self.seed if seed is None else seed)
        self.initialized = True

    def _start(self, seed: int):
        self.seed = seed
        self.rng = random.Random(seed)
        self.state = create_initial_state(self.state.config)
        self.controller = None
        self._build_controller()
        log.info("Kernel started (seed=%s, controller=%s)", seed, self.state.config.aiController.value)

    def queue_command(self, command: Command):
        self.command_queue.append(command)

    def run_tick(self, dt: Optional[float] = None) -> SimulationState:
        if not self.initialized:
            self.initialize()

        # 1. Consume Commands
        while self.command_queue:
            cmd = self.command_queue.popleft()
            cmd.execute(self)

        # 2. Controller follows the configured type; a change starts it fresh
        if self.controller is None or self.controller.controller_type != self.state.config.aiController:
            self._build_controller()

        # 3. Tick
        self.state = step(self.state, self.dt if dt is None else dt, self.controller, self.rng)
        return self.state

    def run(self, ticks: int, dt: Optional[float] = None) -> SimulationState:
        for _ in range(ticks):
            self.run_tick(dt)
        return self.state

    def spawn_vehicle(self) -> Vehicle:
        return self.vehicle_system.spawn(self.state, self.dt, self.rng, force=True)

    def _build_controller(self):
        previous = self.controller.controller_type.value if self.controller else None
        self.controller = create_controller(self.state.config.aiController, self.state.config)
        if isinstance(self.controller, ReinforcementController) and self._pending_q_table is not None:
            self.controller.load_q_table(self._pending_q_table)
            self._pending_q_table = None
        if previous is not None:
            log.info("Switched controller %s -> %s", previous, self.controller.controller_type.value)

    # Learned-policy hooks for the storage owner

    def export_q_table(self) -> Optional[QTableMapping]:
        if isinstance(self.controller, ReinforcementController):
            return self.controller.export_q_table()
        return None

    def import_q_table(self, mapping: QTableMapping):
        # Validate now so a bad mapping fails at the call site
        validated = QTable([], mapping).to_mapping()
        if isinstance(self.controller, ReinforcementController):
            self.controller.load_q_table(validated)
        else:
            self._pending_q_table = validated
            log.info("Holding %d learned states until the reinforcement controller starts", len(validated))
