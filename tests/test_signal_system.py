import unittest
from signalsim.domain.errors import SignalConflictError
from signalsim.domain.models import Axis, SignalState, Direction
from signalsim.domain.state import create_initial_state
from signalsim.domain.graph import DEFAULT_LAYOUT
from signalsim.systems.signal_system import SignalGroup

class TestSignalGroup(unittest.TestCase):
    def setUp(self):
        self.state = create_initial_state()
        self.signals = SignalGroup(self.state.trafficLights)

    def set_all(self, ns: SignalState, ew: SignalState):
        for light in self.signals.lights:
            light.state = ns if DEFAULT_LAYOUT.axis_of(light.direction) == Axis.NS else ew
            light.timer = 0.0

    def test_initial_north_south_green(self):
        self.assertEqual(self.signals.green_axis(), Axis.NS)
        self.assertEqual(self.signals.axis_state(Axis.EW), SignalState.RED)
        self.assertTrue(self.signals.is_safe())

    def test_conflict_graph_pairs_perpendicular_approaches(self):
        self.assertTrue(DEFAULT_LAYOUT.in_conflict(Direction.NORTH, Direction.EAST))
        self.assertFalse(DEFAULT_LAYOUT.in_conflict(Direction.NORTH, Direction.SOUTH))
        self.assertEqual(sorted(d.value for d in DEFAULT_LAYOUT.conflicts(Direction.WEST)), ["north", "south"])

    def test_guard_rejects_green_while_opposing_green(self):
        applied = self.signals.apply_transition("light-east", SignalState.GREEN)
        self.assertFalse(applied)
        self.assertEqual(self.signals.get("light-east").state, SignalState.RED)

    def test_guard_rejects_green_during_clearance(self):
        self.signals.begin_clearance(Axis.NS)
        self.assertEqual(self.signals.axis_state(Axis.NS), SignalState.YELLOW)
        self.assertFalse(self.signals.apply_transition("light-east", SignalState.GREEN))

    def test_green_allowed_once_opposing_red(self):
        self.signals.set_axis(Axis.NS, SignalState.RED)
        self.assertTrue(self.signals.apply_transition("light-east", SignalState.GREEN))
        self.assertEqual(self.signals.get("light-east").timer, 0.0)

    def test_unknown_light_is_ignored(self):
        self.assertFalse(self.signals.apply_transition("light-up", SignalState.GREEN))

    def test_clearance_waits_for_yellow_duration(self):
        self.signals.begin_clearance(Axis.NS)
        self.signals.advance_timers(4.0)
        self.assertIsNone(self.signals.complete_clearance(5.0))
        self.assertEqual(self.signals.axis_state(Axis.NS), SignalState.YELLOW)

        self.signals.advance_timers(1.0)
        granted = self.signals.complete_clearance(5.0)
        self.assertEqual(granted, Axis.EW)
        self.assertEqual(self.signals.axis_state(Axis.NS), SignalState.RED)
        self.assertEqual(self.signals.axis_state(Axis.EW), SignalState.GREEN)

    def test_advance_timers(self):
        self.signals.advance_timers(0.25)
        self.signals.advance_timers(0.25)
        for light in self.signals.lights:
            self.assertAlmostEqual(light.timer, 0.5)
        self.assertAlmostEqual(self.signals.phase_time(), 0.5)

    def test_fallback_picks_busier_axis(self):
        self.set_all(SignalState.RED, SignalState.RED)
        self.assertEqual(self.signals.ensure_green(1.0, 2.0), Axis.EW)
        self.assertEqual(self.signals.green_axis(), Axis.EW)

    def test_fallback_tie_goes_north_south(self):
        self.set_all(SignalState.RED, SignalState.RED)
        self.assertEqual(self.signals.ensure_green(0.0, 0.0), Axis.NS)

    def test_fallback_leaves_running_clearance_alone(self):
        self.set_all(SignalState.YELLOW, SignalState.RED)
        self.assertIsNone(self.signals.ensure_green(0.0, 5.0))
        self.assertEqual(self.signals.axis_state(Axis.NS), SignalState.YELLOW)

    def test_fallback_noop_when_green_present(self):
        self.assertIsNone(self.signals.ensure_green(0.0, 10.0))
        self.assertEqual(self.signals.green_axis(), Axis.NS)

    def test_validate_raises_on_double_green(self):
        self.set_all(SignalState.GREEN, SignalState.GREEN)
        self.assertFalse(self.signals.is_safe())
        with self.assertRaises(SignalConflictError):
            self.signals.validate()

if __name__ == '__main__':
    unittest.main()
