import logging
from typing import List, Optional
from signalsim.domain.models import TrafficLight, SignalState, Axis
from signalsim.domain.graph import IntersectionLayout, DEFAULT_LAYOUT
from signalsim.domain.errors import SignalConflictError

log = logging.getLogger(__name__)

class SignalGroup:
    """The four approach lights of the intersection, grouped by axis.

    Operates in place on the ``TrafficLight`` models it is given. Controllers
    drive every transition; the group only refuses a green that would share
    right of way with a conflicting light that is not red.
    """

    def __init__(self, lights: List[TrafficLight], layout: IntersectionLayout = DEFAULT_LAYOUT):
        self.lights = lights
        self.layout = layout

    def get(self, light_id: str) -> Optional[TrafficLight]:
        for light in self.lights:
            if light.id == light_id:
                return light
        return None

    def lights_for(self, axis: Axis) -> List[TrafficLight]:
        return [l for l in self.lights if self.layout.axis_of(l.direction) == axis]

    def axis_state(self, axis: Axis) -> SignalState:
        states = [l.state for l in self.lights_for(axis)]
        if SignalState.GREEN in states:
            return SignalState.GREEN
        if SignalState.YELLOW in states:
            return SignalState.YELLOW
        return SignalState.RED

    def green_axis(self) -> Optional[Axis]:
        for axis in Axis:
            if self.axis_state(axis) == SignalState.GREEN:
                return axis
        return None

    def yellow_axis(self) -> Optional[Axis]:
        for axis in Axis:
            if any(l.state == SignalState.YELLOW for l in self.lights_for(axis)):
                return axis
        return None

    def phase_time(self) -> float:
        # Time the showing phase has been held; falls back to the oldest timer
        axis = self.green_axis()
        lights = self.lights_for(axis) if axis else self.lights
        return max((l.timer for l in lights), default=0.0)

    def advance_timers(self, dt: float):
        for light in self.lights:
            light.timer += dt

    def can_apply(self, light: TrafficLight, new_state: SignalState) -> bool:
        if new_state != SignalState.GREEN:
            return True
        for other in self.lights:
            if other.id == light.id:
                continue
            if self.layout.in_conflict(light.direction, other.direction) and other.state != SignalState.RED:
                return False
        return True

    def apply_transition(self, light_id: str, new_state: SignalState, reset_timer: bool = True) -> bool:
        light = self.get(light_id)
        if light is None:
            return False
        if light.state == new_state:
            return True
        if not self.can_apply(light, new_state):
            log.warning("Rejected %s -> %s: conflicting approach still holds right of way",
                        light.id, new_state.value)
            return False
        light.state = new_state
        if reset_timer:
            light.timer = 0.0
        return True

    def set_axis(self, axis: Axis, new_state: SignalState, reset_timer: bool = True) -> bool:
        applied = True
        for light in self.lights_for(axis):
            applied = self.apply_transition(light.id, new_state, reset_timer) and applied
        return applied

    def begin_clearance(self, axis: Axis) -> bool:
        """Start releasing ``axis``: its green lights turn yellow."""
        started = False
        for light in self.lights_for(axis):
            if light.state == SignalState.GREEN:
                self.apply_transition(light.id, SignalState.YELLOW)
                started = True
        return started

    def complete_clearance(self, yellow_duration: float) -> Optional[Axis]:
        """Finish any clearance that has run its course.

        Yellow lights that have shown for ``yellow_duration`` go red; once the
        releasing axis is fully red the opposing axis receives green. Returns
        the axis that was given green, if any.
        """
        for axis in Axis:
            yellows = [l for l in self.lights_for(axis) if l.state == SignalState.YELLOW]
            if not yellows or any(l.timer < yellow_duration for l in yellows):
                continue
            for light in yellows:
                self.apply_transition(light.id, SignalState.RED)
            receiving = axis.opposite
            if self.axis_state(axis) == SignalState.RED and self.axis_state(receiving) == SignalState.RED:
                if self.set_axis(receiving, SignalState.GREEN):
                    return receiving
        return None

    def ensure_green(self, ns_demand: float, ew_demand: float) -> Optional[Axis]:
        # Repair an all-red group; a running clearance is left alone
        if self.green_axis() is not None or self.yellow_axis() is not None:
            return None
        axis = Axis.NS if ns_demand >= ew_demand else Axis.EW
        self.set_axis(axis, SignalState.GREEN)
        log.info("No axis held green; forced %s green (demand ns=%.2f ew=%.2f)",
                 axis.value, ns_demand, ew_demand)
        return axis

    def is_safe(self) -> bool:
        for light in self.lights:
            if light.state != SignalState.GREEN:
                continue
            for other in self.lights:
                if other.state == SignalState.GREEN and self.layout.in_conflict(light.direction, other.direction):
                    return False
        return True

    def validate(self):
        if not self.is_safe():
            showing = ", ".join(f"{l.id}={l.state.value}" for l in self.lights)
            raise SignalConflictError(f"Conflicting approaches green together: {showing}")
