import json
import random
import unittest
from pydantic import ValidationError
from signalsim.controllers.reinforcement import ReinforcementController, ACTIONS
from signalsim.domain.models import (
    Axis, SignalState, LearningTuning, DirectionalDensity, ControllerType, SimulationConfig,
    Vehicle, VehicleType, Direction, Lane, Position
)
from signalsim.domain.state import create_initial_state
from signalsim.kernel.stepper import step
from signalsim.learning.q_table import QTable, dump_q_table, load_q_table
from signalsim.learning.replay import ReplayBuffer
from signalsim.systems.signal_system import SignalGroup

class ScriptedRandom(random.Random):
    """Serves queued values from random() before falling back to the seeded stream."""

    def __init__(self, values, seed=0):
        super().__init__(seed)
        self.values = list(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return super().random()

class TestQTable(unittest.TestCase):
    def test_repeated_update_converges_to_target(self):
        table = QTable(ACTIONS)
        table.ensure("next")["maintain"] = 2.0
        reward, alpha, gamma = 1.0, 0.1, 0.9
        target = reward + gamma * table.max_value("next")

        errors = []
        for _ in range(60):
            table.update("s", "switch", reward, "next", alpha, gamma)
            errors.append(abs(table.value("s", "switch") - target))

        for earlier, later in zip(errors, errors[1:]):
            self.assertLess(later, earlier)
        self.assertLess(errors[-1], 0.01 * target)

    def test_single_update_matches_rule(self):
        table = QTable(ACTIONS)
        value = table.update("s", "extend", -2.0, "unseen", 0.1, 0.9)
        self.assertAlmostEqual(value, 0.0 + 0.1 * (-2.0 + 0.9 * 0.0 - 0.0))

    def test_ties_resolve_to_first_action(self):
        table = QTable(ACTIONS)
        self.assertEqual(table.best_action("fresh"), "maintain")
        table.ensure("s")["extend"] = 1.0
        table.ensure("s")["switch"] = 1.0
        self.assertEqual(table.best_action("s"), "extend")

    def test_mapping_round_trip(self):
        table = QTable(ACTIONS)
        table.update("low_high_ns_long", "switch", 3.0, "x", 0.1, 0.9)
        restored = QTable.from_mapping(ACTIONS, table.to_mapping())
        self.assertEqual(restored.to_mapping(), table.to_mapping())

        from_json = load_q_table(ACTIONS, dump_q_table(table))
        self.assertAlmostEqual(from_json.value("low_high_ns_long", "switch"), 0.3)
        self.assertEqual(json.loads(dump_q_table(table))["low_high_ns_long"]["maintain"], 0.0)

    def test_malformed_mapping_rejected(self):
        with self.assertRaises(ValidationError):
            QTable(ACTIONS, {"s": {"maintain": "lots"}})

    def test_merge_keeps_known_actions_only(self):
        table = QTable(ACTIONS, {"s": {"stay": 50.0, "switch": 1.0}})
        self.assertEqual(set(table.to_mapping()["s"]), set(ACTIONS))
        self.assertEqual(table.max_value("s"), 1.0)
        self.assertEqual(table.best_action("s"), "switch")

class TestReplayBuffer(unittest.TestCase):
    def test_bounded_and_sampling(self):
        from signalsim.domain.models import Experience
        buffer = ReplayBuffer(3)
        for i in range(5):
            buffer.add(Experience(state=f"s{i}", action="maintain", reward=i, next_state=f"s{i+1}"))
        self.assertEqual(len(buffer), 3)
        self.assertEqual([e.state for e in buffer.buffer], ["s2", "s3", "s4"])
        batch = buffer.sample(random.Random(3), 5)
        self.assertEqual(len(batch), 5)
        self.assertTrue(all(e.state in {"s2", "s3", "s4"} for e in batch))
        self.assertEqual(ReplayBuffer(2).sample(random.Random(3), 5), [])

class TestReinforcementController(unittest.TestCase):
    def setUp(self):
        self.tuning = LearningTuning()
        self.controller = ReinforcementController(self.tuning)
        self.state = create_initial_state()

    def test_traffic_and_time_buckets(self):
        c, t = self.controller, self.tuning
        self.assertEqual(c.discretize_traffic(1.49, t), "low")
        self.assertEqual(c.discretize_traffic(1.5, t), "medium")
        self.assertEqual(c.discretize_traffic(4.0, t), "high")
        self.assertEqual(c.discretize_time(4.9, t), "short")
        self.assertEqual(c.discretize_time(5.0, t), "medium")
        self.assertEqual(c.discretize_time(15.0, t), "long")

    def test_state_key(self):
        signals = SignalGroup(self.state.trafficLights)
        signals.advance_timers(6.0)
        key = self.controller.state_key(DirectionalDensity(north=1.0, south=1.0, east=5.0), signals, self.tuning)
        self.assertEqual(key, "medium_high_ns_medium")

    def test_exploration_decays_to_floor(self):
        c, t = self.controller, self.tuning
        self.assertAlmostEqual(c.exploration_rate(0.0, t), 0.2)
        self.assertAlmostEqual(c.exploration_rate(250.0, t), 0.1)
        self.assertAlmostEqual(c.exploration_rate(1000.0, t), 0.05)

    def test_greedy_selection(self):
        self.controller.q_table.ensure("s")["switch"] = 5.0
        action = self.controller.select_action("s", 0.0, ScriptedRandom([0.99]), self.tuning)
        self.assertEqual(action, "switch")

    def test_exploration_uses_injected_random(self):
        rng = ScriptedRandom([0.0], seed=11)
        expected = ACTIONS[random.Random(11).randrange(len(ACTIONS))]
        self.assertEqual(self.controller.select_action("s", 0.0, rng, self.tuning), expected)

    def test_reward_penalizes_long_waits_superlinearly(self):
        self.state.statistics.throughput = 10.0
        self.state.statistics.averageWaitTime = 4.0
        self.state.vehicles.append(Vehicle(id="v", type=VehicleType.CAR, position=Position(x=310, y=250),
                                           direction=Direction.NORTH, lane=Lane.LEFT, speed=40))
        reward = self.controller.calculate_reward(self.state, self.tuning)
        self.assertAlmostEqual(reward, 20.0 - 3.2 - 0.5 - 8.0 * 0.02)

    def test_switch_action_starts_clearance(self):
        signals = SignalGroup(self.state.trafficLights)
        self.controller.apply_action(signals, "switch", self.tuning)
        self.assertEqual(signals.axis_state(Axis.NS), SignalState.YELLOW)
        self.assertEqual(signals.axis_state(Axis.EW), SignalState.RED)

    def test_extend_action_pulls_back_green_timer(self):
        signals = SignalGroup(self.state.trafficLights)
        signals.advance_timers(10.0)
        self.controller.apply_action(signals, "extend", self.tuning)
        for light in signals.lights_for(Axis.NS):
            self.assertEqual(light.timer, 2.0)
        for light in signals.lights_for(Axis.EW):
            self.assertEqual(light.timer, 10.0)

    def test_replay_runs_periodically(self):
        rng = random.Random(5)
        for t in range(25):
            self.state.time = t * 0.5
            self.controller.run_tick(self.state, 0.5, rng)
        self.assertGreaterEqual(self.controller.policy_state.replay_rounds, 1)
        self.assertEqual(len(self.controller.replay), 24)
        self.assertEqual(len(self.controller.policy_state.reward_history), 25)

    def test_replay_buffer_capacity(self):
        controller = ReinforcementController(LearningTuning(replay_capacity=5))
        rng = random.Random(5)
        for t in range(30):
            self.state.time = float(t)
            controller.run_tick(self.state, 1.0, rng)
        self.assertEqual(len(controller.replay), 5)

    def test_export_and_load(self):
        self.controller.q_table.update("low_low_ns_short", "maintain", 1.0, "x", 0.1, 0.9)
        exported = self.controller.export_q_table()
        fresh = ReinforcementController()
        fresh.load_q_table(exported)
        self.assertEqual(fresh.export_q_table(), exported)

    def test_learned_policy_never_breaks_mutual_exclusion(self):
        cfg = SimulationConfig(spawnRate=1.5, aiController=ControllerType.REINFORCEMENT)
        state = create_initial_state(cfg)
        controller = ReinforcementController(cfg.tuning.learning)
        rng = random.Random(99)
        saw_ew_green = False
        for _ in range(800):
            state = step(state, 0.25, controller, rng)
            signals = SignalGroup(state.trafficLights)
            self.assertTrue(signals.is_safe())
            saw_ew_green = saw_ew_green or signals.green_axis() == Axis.EW
        self.assertTrue(saw_ew_green)
        self.assertGreater(len(controller.q_table), 0)

if __name__ == '__main__':
    unittest.main()
