import logging
import random
from typing import Any, Dict, List, Tuple
from signalsim.controllers.base import Controller
from signalsim.domain.models import (
    ControllerType, SignalState, Axis, AdaptivePolicyState, AdaptivePhase, AdaptiveTuning, DensitySample
)
from signalsim.systems.signal_system import SignalGroup
from signalsim.systems.statistics_system import weighted_density

log = logging.getLogger(__name__)

def fixed_cycle_states(timer: float, green: float, yellow: float) -> Tuple[SignalState, SignalState]:
    """(north-south, east-west) states at ``timer`` seconds into the cycle."""
    cycle = 2 * (green + yellow)
    t = timer % cycle
    if t < green:
        return SignalState.GREEN, SignalState.RED
    if t < green + yellow:
        return SignalState.YELLOW, SignalState.RED
    if t < 2 * green + yellow:
        return SignalState.RED, SignalState.GREEN
    return SignalState.RED, SignalState.YELLOW

class FixedController(Controller):
    controller_type = ControllerType.FIXED
    name = "Fixed Timing"
    description = "Traditional traffic lights with fixed timing regardless of traffic conditions."

    def __init__(self):
        self.synchronized = False

    def run_tick(self, state: Any, dt: float, rng: random.Random):
        params = state.config.aiParams
        signals = SignalGroup(state.trafficLights)

        if not self.synchronized:
            self._synchronize(signals, params.greenDuration, params.yellowDuration)
            self.synchronized = True

        desired: Dict[str, SignalState] = {}
        for light in signals.lights:
            ns_state, ew_state = fixed_cycle_states(light.timer, params.greenDuration, params.yellowDuration)
            desired[light.id] = ns_state if signals.layout.axis_of(light.direction) == Axis.NS else ew_state

        # Release before granting so the guard sees the releasing axis red
        for light_id, new_state in desired.items():
            if new_state != SignalState.GREEN:
                signals.apply_transition(light_id, new_state, reset_timer=False)
        for light_id, new_state in desired.items():
            if new_state == SignalState.GREEN:
                signals.apply_transition(light_id, new_state, reset_timer=False)

        signals.advance_timers(dt)

    def _synchronize(self, signals: SignalGroup, green: float, yellow: float):
        # Resume the cycle at the phase the intersection is already showing
        if signals.axis_state(Axis.EW) == SignalState.GREEN:
            offset = green + yellow
        elif signals.axis_state(Axis.EW) == SignalState.YELLOW:
            offset = 2 * green + yellow
        elif signals.axis_state(Axis.NS) == SignalState.YELLOW:
            offset = green
        else:
            offset = 0.0
        for light in signals.lights:
            light.timer = offset

class AdaptiveController(Controller):
    controller_type = ControllerType.ADAPTIVE
    name = "Adaptive Timing"
    description = "Intelligently adjusts light timing based on real-time traffic conditions and vehicle counts."

    def __init__(self):
        self.policy_state = AdaptivePolicyState()

    def run_tick(self, state: Any, dt: float, rng: random.Random):
        ps = self.policy_state
        params = state.config.aiParams
        tuning = state.config.tuning
        now = state.time

        signals = SignalGroup(state.trafficLights)
        signals.advance_timers(dt)

        green = signals.green_axis()
        if green is not None and green != ps.current_axis:
            # First tick under this controller, or green was granted by the fallback
            ps.current_axis = green
            ps.last_switch_time = now
            ps.phase = AdaptivePhase.GREEN
        elif ps.last_switch_time is None:
            ps.current_axis = Axis.NS
            ps.last_switch_time = now
        if green is None and signals.yellow_axis() is not None:
            ps.phase = AdaptivePhase.CLEARANCE
        ps.switch_timer = now - ps.last_switch_time

        density = weighted_density(state.vehicles, tuning.density, signals.layout)
        self.record(now, density.ns, density.ew, tuning.adaptive)
        averages = self.average_demand(tuning.adaptive)

        if ps.phase == AdaptivePhase.GREEN and green is not None:
            if self.should_switch(green, averages, params, tuning.adaptive):
                signals.begin_clearance(green)
                ps.phase = AdaptivePhase.CLEARANCE
                ps.target_axis = green.opposite
                log.debug("t=%.2f releasing %s (demand ns=%.2f ew=%.2f, held %.2fs)",
                          now, green.value, averages[Axis.NS], averages[Axis.EW], ps.switch_timer)

        if ps.phase == AdaptivePhase.CLEARANCE:
            granted = signals.complete_clearance(params.yellowDuration)
            if granted is None and signals.yellow_axis() is None:
                granted = signals.green_axis()
            if granted is not None:
                ps.phase = AdaptivePhase.GREEN
                ps.current_axis = granted
                ps.target_axis = None
                ps.last_switch_time = now
                ps.switch_timer = 0.0

    def should_switch(self, green: Axis, averages: Dict[Axis, float], params: Any,
                      tuning: AdaptiveTuning) -> bool:
        held = self.policy_state.switch_timer
        current = averages[green]
        opposing = averages[green.opposite]

        if held >= params.adaptiveMinGreenTime:
            if opposing > current * params.adaptiveThreshold:
                return True
            if tuning.trend_threshold is not None and self.trend(green.opposite) > tuning.trend_threshold:
                return True

        # Starvation override
        return held > params.adaptiveMaxWaitTime and opposing > 0

    def record(self, now: float, ns: float, ew: float, tuning: AdaptiveTuning):
        ps = self.policy_state
        ps.history.append(DensitySample(timestamp=now, ns=ns, ew=ew))
        ps.history = [s for s in ps.history if now - s.timestamp < tuning.history_window][-tuning.history_length:]

    def average_demand(self, tuning: AdaptiveTuning) -> Dict[Axis, float]:
        history = self.policy_state.history
        weighted_ns = 0.0
        weighted_ew = 0.0
        total_weight = 0.0
        for i, sample in enumerate(history):
            weight = tuning.recent_weight if i == len(history) - 1 else 1.0
            weighted_ns += sample.ns * weight
            weighted_ew += sample.ew * weight
            total_weight += weight
        total_weight = total_weight or 1
        return {Axis.NS: weighted_ns / total_weight, Axis.EW: weighted_ew / total_weight}

    def trend(self, axis: Axis) -> float:
        history = self.policy_state.history
        if len(history) < 3:
            return 0.0
        counts: List[float] = [s.ns if axis == Axis.NS else s.ew for s in history[-3:]]
        old_avg = (counts[0] + counts[1]) / 2
        return (counts[2] - old_avg) / (old_avg or 1)
