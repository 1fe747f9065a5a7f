import logging
import random
from typing import List, Optional, Tuple
from signalsim.domain.models import (
    Vehicle, TrafficLight, SignalState, Direction, Lane, VehicleType
)
from signalsim.domain.graph import IntersectionLayout, DEFAULT_LAYOUT
from signalsim.domain import config

log = logging.getLogger(__name__)

class VehicleSystem:
    def __init__(self, layout: IntersectionLayout = DEFAULT_LAYOUT):
        self.layout = layout

    def update(self, state, dt: float):
        adjusted_dt = dt * state.config.simulationSpeed

        # Gate against where everyone stood when the tick began
        blocked = [self._is_gated(v, state.trafficLights, state.vehicles) for v in state.vehicles]

        for v, gated in zip(state.vehicles, blocked):
            if gated:
                v.waitTime += adjusted_dt
            else:
                self.move_vehicle(v, adjusted_dt)

        state.vehicles = [v for v in state.vehicles if self.layout.in_bounds(v.position)]

    def move_vehicle(self, vehicle: Vehicle, dt: float):
        hx, hy = self.layout.heading(vehicle.direction)
        distance = vehicle.speed * dt
        vehicle.position.x += hx * distance
        vehicle.position.y += hy * distance

    def _is_gated(self, vehicle: Vehicle, lights: List[TrafficLight], vehicles: List[Vehicle]) -> bool:
        at_light, light_state = self.light_ahead(vehicle, lights)
        if at_light and light_state == SignalState.RED:
            return True
        return self.has_vehicle_ahead(vehicle, vehicles)

    def light_ahead(self, vehicle: Vehicle, lights: List[TrafficLight]) -> Tuple[bool, SignalState]:
        light = next((l for l in lights if l.direction == vehicle.direction), None)
        if light is None:
            return False, SignalState.GREEN

        if self.layout.in_stop_band(vehicle.position, vehicle.direction):
            return True, light.state

        # Catches vehicles that stepped over the stop band on a long tick
        if self.layout.in_box(vehicle.position) and self.layout.is_approaching(vehicle.position, vehicle.direction):
            return True, light.state

        return False, SignalState.GREEN

    def safe_distance(self, vehicle: Vehicle) -> float:
        return config.VEHICLE_SIZE[vehicle.type.value] + config.FOLLOWING_BUFFER

    def has_vehicle_ahead(self, vehicle: Vehicle, vehicles: List[Vehicle]) -> bool:
        safe = self.safe_distance(vehicle)
        hx, hy = self.layout.heading(vehicle.direction)
        for other in vehicles:
            if other.id == vehicle.id:
                continue
            if other.direction != vehicle.direction or other.lane != vehicle.lane:
                continue
            gap = (other.position.x - vehicle.position.x) * hx + (other.position.y - vehicle.position.y) * hy
            if 0 < gap < safe:
                return True
        return False

    def spawn(self, state, dt: float, rng: random.Random, force: bool = False) -> Optional[Vehicle]:
        spawn_chance = state.config.spawnRate * dt * state.config.simulationSpeed
        if not force and rng.random() >= spawn_chance:
            return None

        direction = rng.choice(list(Direction))
        vehicle_type = VehicleType.TRUCK if rng.random() < config.TRUCK_PROBABILITY else VehicleType.CAR
        lane = Lane.LEFT if rng.random() < config.LEFT_LANE_PROBABILITY else Lane.RIGHT
        color = rng.choice(config.VEHICLE_COLORS)

        spawned = state.statistics.totalVehicles + 1
        vehicle = Vehicle(
            id=f"vehicle-{spawned}",
            type=vehicle_type,
            position=self.layout.spawn_position(direction, lane),
            direction=direction,
            lane=lane,
            speed=config.VEHICLE_SPEED[vehicle_type.value],
            color=color,
        )
        state.vehicles.append(vehicle)
        state.statistics.totalVehicles = spawned
        log.debug("Spawned %s (%s, %s lane) heading %s", vehicle.id, vehicle_type.value,
                  lane.value, direction.value)
        return vehicle
