import logging
import random
from enum import Enum
from typing import Any, Optional
from signalsim.controllers.base import Controller
from signalsim.domain.models import (
    ControllerType, SignalState, Axis, Experience, LearningPolicyState, LearningTuning,
    DirectionalDensity, QTableMapping
)
from signalsim.learning.q_table import QTable
from signalsim.learning.replay import ReplayBuffer
from signalsim.systems.signal_system import SignalGroup
from signalsim.systems.statistics_system import weighted_density, count_nearby

log = logging.getLogger(__name__)

class Action(str, Enum):
    MAINTAIN = "maintain"
    EXTEND = "extend"
    SWITCH = "switch"

ACTIONS = [a.value for a in Action]

class ReinforcementController(Controller):
    """Q-learning signal policy.

    Each tick the controller observes a discretized state, picks an action
    epsilon-greedily, credits the previous action with the reward of the
    observed state and periodically replays stored transitions. Whatever it
    picks, the shared clearance rules finish any yellow before granting green.
    """

    controller_type = ControllerType.REINFORCEMENT
    name = "Reinforcement Learning"
    description = "Uses Q-learning to optimize traffic flow based on historical patterns and continuous adaptation."

    def __init__(self, tuning: Optional[LearningTuning] = None, q_values: Optional[QTableMapping] = None):
        tuning = tuning or LearningTuning()
        self.q_table = QTable(ACTIONS, q_values)
        self.replay = ReplayBuffer(tuning.replay_capacity)
        self.policy_state = LearningPolicyState(exploration_rate=tuning.exploration_rate)

    # State discretization

    def discretize_traffic(self, level: float, tuning: LearningTuning) -> str:
        if level < tuning.traffic_low_threshold:
            return "low"
        if level < tuning.traffic_high_threshold:
            return "medium"
        return "high"

    def discretize_time(self, seconds: float, tuning: LearningTuning) -> str:
        if seconds < tuning.phase_short_threshold:
            return "short"
        if seconds < tuning.phase_long_threshold:
            return "medium"
        return "long"

    def state_key(self, density: DirectionalDensity, signals: SignalGroup, tuning: LearningTuning) -> str:
        axis = signals.green_axis() or signals.yellow_axis() or Axis.NS
        return "_".join([
            self.discretize_traffic(density.ns, tuning),
            self.discretize_traffic(density.ew, tuning),
            axis.value,
            self.discretize_time(signals.phase_time(), tuning),
        ])

    # Policy

    def exploration_rate(self, sim_time: float, tuning: LearningTuning) -> float:
        decayed = tuning.exploration_rate * (1 - sim_time / tuning.exploration_decay_time)
        return max(tuning.min_exploration_rate, decayed)

    def select_action(self, state_key: str, sim_time: float, rng: random.Random, tuning: LearningTuning) -> str:
        self.q_table.ensure(state_key)
        epsilon = self.exploration_rate(sim_time, tuning)
        self.policy_state.exploration_rate = epsilon
        if rng.random() < epsilon:
            return ACTIONS[rng.randrange(len(ACTIONS))]
        return self.q_table.best_action(state_key)

    def calculate_reward(self, state: Any, tuning: LearningTuning) -> float:
        stats = state.statistics
        nearby = count_nearby(state.vehicles, tuning.nearby_radius)
        wait = max(0.0, stats.averageWaitTime)
        return (stats.throughput * tuning.reward_throughput_weight
                - wait * tuning.reward_wait_weight
                - nearby * tuning.reward_nearby_weight
                - (wait ** tuning.reward_long_wait_exponent) * tuning.reward_long_wait_weight)

    def apply_action(self, signals: SignalGroup, action: str, tuning: LearningTuning):
        if action == Action.EXTEND.value:
            # Pull the green timer back instead of restarting the phase
            for light in signals.lights:
                if light.state == SignalState.GREEN:
                    light.timer = min(light.timer, tuning.extend_timer_cap)
        elif action == Action.SWITCH.value:
            green = signals.green_axis()
            if green is not None:
                signals.begin_clearance(green)

    # Learning

    def learn(self, reward: float, current_key: str, rng: random.Random, tuning: LearningTuning):
        ps = self.policy_state
        if ps.last_state_key is not None and ps.last_action is not None:
            self.q_table.update(ps.last_state_key, ps.last_action, reward, current_key,
                                tuning.learning_rate, tuning.discount_factor)
            self.replay.add(Experience(state=ps.last_state_key, action=ps.last_action,
                                       reward=reward, next_state=current_key))

        ps.update_counter += 1
        if ps.update_counter >= tuning.replay_interval and len(self.replay) > tuning.replay_min_size:
            for experience in self.replay.sample(rng, tuning.replay_batch_size):
                self.q_table.update(experience.state, experience.action, experience.reward,
                                    experience.next_state, tuning.learning_rate, tuning.discount_factor)
            ps.update_counter = 0
            ps.replay_rounds += 1
            log.debug("Replayed %d transitions (buffer=%d, states=%d)",
                      tuning.replay_batch_size, len(self.replay), len(self.q_table))

    def run_tick(self, state: Any, dt: float, rng: random.Random):
        tuning = state.config.tuning.learning
        ps = self.policy_state

        signals = SignalGroup(state.trafficLights)
        signals.advance_timers(dt)

        density = weighted_density(state.vehicles, state.config.tuning.density, signals.layout)
        current_key = self.state_key(density, signals, tuning)
        action = self.select_action(current_key, state.time, rng, tuning)

        reward = self.calculate_reward(state, tuning)
        ps.reward_history.append(reward)
        ps.reward_history = ps.reward_history[-tuning.reward_history_length:]

        self.learn(reward, current_key, rng, tuning)
        ps.last_state_key = current_key
        ps.last_action = action

        self.apply_action(signals, action, tuning)
        signals.complete_clearance(state.config.aiParams.yellowDuration)

    # Persistence hooks

    def export_q_table(self) -> QTableMapping:
        return self.q_table.to_mapping()

    def load_q_table(self, mapping: QTableMapping):
        self.q_table.merge(mapping)
        log.info("Loaded %d learned states into the Q-table", len(mapping))
