"""
Flight Simulator Validation Tests
=================================

Validates the time-marching flight range simulation and the aerodynamic
and metabolic models it is built from.

Test Methodology:
- Verify power components against Pennycuick's relations at Vmp
  (induced power = 3 × parasite power, their sum = Pam)
- Verify fat bookkeeping: no overdraw, fat exactly used up
- Verify range grows with fat load and is deterministic
- Verify abnormal runs end with a tagged termination reason
"""

import math
import sys
from dataclasses import replace
from pathlib import Path
import unittest
from unittest import mock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from birdrange.flight_simulator import (
    Bird,
    Order,
    InvalidInputError,
    FlightConstants,
    SimulatorConfig,
    SpeedControl,
    FlightSimulator,
    SimulationState,
    TerminationReason,
    advance,
    make_speed_controller,
    ConstantRatioController,
    ConstantSpeedController,
)
from birdrange.flight_simulator.aerodynamics import (
    body_frontal_area,
    disc_area,
    aspect_ratio,
    profile_power_ratio,
    minimum_power_speed,
    absolute_minimum_power,
    parasite_power,
    induced_power,
    profile_power,
    mechanical_power,
)
from birdrange.flight_simulator.metabolism import basal_metabolic_rate, chemical_power


def make_passerine(**overrides) -> Bird:
    """Small passerine used throughout the tests."""
    params = dict(
        body_mass=0.020,
        wing_span=0.18,
        wing_area=0.0065,
        fat_mass=0.004,
        muscle_mass=0.003,
        order=Order.PASSERINE,
        name="Test passerine",
    )
    params.update(overrides)
    return Bird(**params)


class TestAerodynamics(unittest.TestCase):
    """Test the mechanical power model."""

    def setUp(self):
        self.constants = FlightConstants()
        self.mass = 0.020
        self.span = 0.18
        self.area = 0.0065

    def test_geometry(self):
        """Frontal area, disc area and aspect ratio formulas."""
        self.assertAlmostEqual(body_frontal_area(1.0), 0.00813)
        self.assertAlmostEqual(disc_area(2.0), math.pi)
        self.assertAlmostEqual(aspect_ratio(0.18, 0.0065), 0.0324 / 0.0065)

    def test_profile_power_ratio(self):
        """X1 = Cpro / AR."""
        x1 = profile_power_ratio(self.span, self.area, self.constants)
        self.assertAlmostEqual(x1, 8.4 / aspect_ratio(self.span, self.area))

    def test_minimum_power_speed_plausible(self):
        """A 20 g passerine has Vmp of roughly 10 m/s."""
        vmp = minimum_power_speed(self.mass, self.span, self.constants)
        self.assertGreater(vmp, 8.0)
        self.assertLess(vmp, 12.0)

    def test_induced_is_three_times_parasite_at_vmp(self):
        """At minimum power speed, induced power = 3 × parasite power."""
        vmp = minimum_power_speed(self.mass, self.span, self.constants)
        p_ind = induced_power(self.mass, vmp, self.span, self.constants)
        p_par = parasite_power(self.mass, vmp, self.constants)
        self.assertAlmostEqual(p_ind / p_par, 3.0, delta=0.01)

    def test_power_at_vmp_matches_absolute_minimum_power(self):
        """Induced + parasite power at Vmp equals Pam."""
        vmp = minimum_power_speed(self.mass, self.span, self.constants)
        p_ind = induced_power(self.mass, vmp, self.span, self.constants)
        p_par = parasite_power(self.mass, vmp, self.constants)
        pam = absolute_minimum_power(self.mass, self.span, self.constants)
        self.assertAlmostEqual((p_ind + p_par) / pam, 1.0, delta=0.01)

    def test_mechanical_power_total(self):
        """Total is the sum of the three components."""
        powers = mechanical_power(self.mass, 12.0, self.span, self.area, self.constants)
        self.assertAlmostEqual(
            powers.total, powers.induced + powers.parasite + powers.profile
        )
        self.assertAlmostEqual(
            powers.profile,
            profile_power(self.mass, self.span, self.area, self.constants)
        )

    def test_heavier_bird_needs_more_power(self):
        """Power and Vmp increase with mass."""
        light = mechanical_power(0.016, 12.0, self.span, self.area, self.constants)
        heavy = mechanical_power(0.020, 12.0, self.span, self.area, self.constants)
        self.assertGreater(heavy.total, light.total)
        self.assertGreater(
            minimum_power_speed(0.020, self.span, self.constants),
            minimum_power_speed(0.016, self.span, self.constants),
        )

    def test_zero_airspeed_raises(self):
        """Induced power is undefined at zero airspeed."""
        with self.assertRaises(ZeroDivisionError):
            induced_power(self.mass, 0.0, self.span, self.constants)


class TestMetabolism(unittest.TestCase):
    """Test basal metabolism and chemical power conversion."""

    def setUp(self):
        self.constants = FlightConstants()

    def test_basal_rate_by_order(self):
        """BMR = alpha at 1 kg for each order."""
        self.assertAlmostEqual(
            basal_metabolic_rate(1.0, Order.PASSERINE, self.constants), 6.25
        )
        self.assertAlmostEqual(
            basal_metabolic_rate(1.0, Order.NON_PASSERINE, self.constants), 3.79
        )

    def test_passerines_have_higher_basal_rate(self):
        """Passerine BMR exceeds non-passerine BMR at the same mass."""
        self.assertGreater(
            basal_metabolic_rate(0.02, Order.PASSERINE, self.constants),
            basal_metabolic_rate(0.02, Order.NON_PASSERINE, self.constants),
        )

    def test_chemical_power(self):
        """Pchem = (Pmech/η + BMR) × 1.10."""
        self.assertAlmostEqual(chemical_power(0.23, 0.0, self.constants), 1.1)
        self.assertAlmostEqual(chemical_power(0.23, 1.0, self.constants), 2.2)

    def test_overridden_coefficients(self):
        """Metabolism coefficients can be overridden."""
        constants = self.constants.with_overrides(passerine_alpha=5.0)
        self.assertAlmostEqual(
            basal_metabolic_rate(1.0, Order.PASSERINE, constants), 5.0
        )


class TestSpeedControl(unittest.TestCase):
    """Test the two airspeed strategies."""

    def setUp(self):
        self.constants = FlightConstants()
        self.bird = make_passerine()

    def test_constant_ratio_tracks_mass(self):
        """Vt = 1.2 × Vmp and falls as the bird gets lighter."""
        controller = make_speed_controller(
            SpeedControl.CONSTANT_RATIO, self.bird, self.constants
        )
        self.assertIsInstance(controller, ConstantRatioController)
        vmp = minimum_power_speed(0.020, 0.18, self.constants)
        self.assertAlmostEqual(controller.airspeed(0.020), 1.2 * vmp)
        self.assertLess(controller.airspeed(0.016), controller.airspeed(0.020))

    def test_constant_speed_fixed_at_start(self):
        """Vt is computed from the initial mass and never changes."""
        controller = make_speed_controller(
            SpeedControl.CONSTANT_SPEED, self.bird, self.constants
        )
        self.assertIsInstance(controller, ConstantSpeedController)
        start = 1.2 * minimum_power_speed(0.020, 0.18, self.constants)
        self.assertAlmostEqual(controller.airspeed(0.020), start)
        self.assertEqual(controller.airspeed(0.016), controller.airspeed(0.020))

    def test_unknown_mode(self):
        """Only the two SpeedControl members are accepted."""
        with self.assertRaises(ValueError):
            make_speed_controller("fast", self.bird, self.constants)


class TestBirdValidation(unittest.TestCase):
    """Test record validation before simulation."""

    def test_valid_record(self):
        make_passerine().validate()

    def test_zero_muscle_mass_is_valid(self):
        make_passerine(muscle_mass=0.0).validate()

    def test_invalid_records(self):
        """Each out-of-range measurement raises InvalidInputError."""
        bad = [
            dict(body_mass=0.0),
            dict(wing_span=-0.1),
            dict(wing_area=0.0),
            dict(fat_mass=0.0),
            dict(fat_mass=0.020),
            dict(fat_mass=0.030),
            dict(muscle_mass=-0.001),
            dict(fat_mass=float("nan")),
            dict(order=None),
        ]
        for overrides in bad:
            with self.subTest(**{k: str(v) for k, v in overrides.items()}):
                with self.assertRaises(InvalidInputError):
                    make_passerine(**overrides).validate()

    def test_non_numeric_measurements_rejected(self):
        """Strings and booleans are invalid input, not a TypeError."""
        for overrides in (dict(body_mass="0.02"), dict(wing_area=None), dict(fat_mass=True)):
            with self.subTest(**{k: repr(v) for k, v in overrides.items()}):
                with self.assertRaises(InvalidInputError):
                    make_passerine(**overrides).validate()

    def test_order_parsing(self):
        """Codes and names map to orders; others are rejected."""
        self.assertIs(Order.parse(1), Order.PASSERINE)
        self.assertIs(Order.parse(2.0), Order.NON_PASSERINE)
        self.assertIs(Order.parse("Non-passerine"), Order.NON_PASSERINE)
        self.assertIs(Order.parse("1"), Order.PASSERINE)
        with self.assertRaises(InvalidInputError):
            Order.parse(3)
        with self.assertRaises(InvalidInputError):
            Order.parse("songbird")

    def test_derived_values(self):
        bird = make_passerine()
        self.assertAlmostEqual(bird.fat_fraction, 0.2)
        self.assertAlmostEqual(bird.fat_free_mass, 0.016)


class TestConstants(unittest.TestCase):
    """Test constants and simulator configuration."""

    def test_defaults(self):
        c = FlightConstants()
        self.assertEqual(c.air_density, 1.00)
        self.assertEqual(c.gravity, 9.81)
        self.assertEqual(c.mechanical_efficiency, 0.23)
        self.assertEqual(c.induced_power_factor, 1.20)
        self.assertEqual(c.profile_power_constant, 8.4)
        self.assertEqual(c.body_drag_coefficient, 0.10)
        self.assertEqual(c.fat_energy_content, 3.9e7)
        self.assertEqual(c.time_step_seconds, 360)

    def test_overrides_return_new_value(self):
        base = FlightConstants()
        changed = base.with_overrides(air_density=0.9)
        self.assertEqual(changed.air_density, 0.9)
        self.assertEqual(base.air_density, 1.00)

    def test_unknown_override(self):
        with self.assertRaises(ValueError):
            FlightConstants().with_overrides(air_pressure=1.0)

    def test_invalid_constants_rejected(self):
        """Negative or non-finite constants fail before any flight."""
        for overrides in (
            dict(air_density=-1.0),
            dict(time_step_seconds=0.0),
            dict(gravity=float("inf")),
            dict(min_protein_fraction=0.1),
        ):
            with self.subTest(**overrides):
                config = SimulatorConfig(
                    constants=FlightConstants().with_overrides(**overrides)
                )
                with self.assertRaises(ValueError):
                    FlightSimulator(config)

    def test_invalid_max_steps(self):
        with self.assertRaises(ValueError):
            FlightSimulator(SimulatorConfig(max_steps=0))


class TestStepTransition(unittest.TestCase):
    """Test single step transitions in isolation."""

    def setUp(self):
        self.bird = make_passerine()
        self.config = SimulatorConfig(record_trace=True)
        self.controller = make_speed_controller(
            self.config.speed_control, self.bird, self.config.constants
        )

    def test_first_step(self):
        """One full step burns fat and covers Vt × Δt."""
        state = SimulationState.initial(self.bird)
        new_state, trace = advance(state, self.bird, self.config, self.controller)

        airspeed = self.controller.airspeed(0.020)
        self.assertTrue(new_state.is_running)
        self.assertEqual(new_state.step_count, 1)
        self.assertAlmostEqual(new_state.distance, airspeed * 360.0)
        self.assertLess(new_state.remaining_fat_mass, 0.004)
        self.assertAlmostEqual(
            new_state.body_mass,
            0.020 - (0.004 - new_state.remaining_fat_mass)
        )

        # Fat burned matches chemical power
        burned = 0.004 - new_state.remaining_fat_mass
        self.assertAlmostEqual(burned, trace.chem_power * 360.0 / 3.9e7)
        self.assertEqual(trace.body_mass, 0.020)

    def test_original_state_unchanged(self):
        state = SimulationState.initial(self.bird)
        advance(state, self.bird, self.config, self.controller)
        self.assertEqual(state.step_count, 0)
        self.assertEqual(state.remaining_fat_mass, 0.004)

    def test_final_step_is_scaled(self):
        """A step needing more fat than is left is scaled down."""
        state = SimulationState(remaining_fat_mass=1e-6, body_mass=0.016001)
        new_state, _ = advance(state, self.bird, self.config, self.controller)

        self.assertEqual(new_state.termination_reason, TerminationReason.EXHAUSTED)
        self.assertEqual(new_state.remaining_fat_mass, 0.0)
        self.assertLess(new_state.distance, self.controller.airspeed(0.016001) * 360.0)
        self.assertGreater(new_state.distance, 0.0)
        self.assertLess(new_state.elapsed_time, 360.0)

    def test_cannot_advance_terminated_state(self):
        state = SimulationState.initial(self.bird).terminate(
            TerminationReason.EXHAUSTED
        )
        with self.assertRaises(ValueError):
            advance(state, self.bird, self.config, self.controller)


class TestFlightSimulator(unittest.TestCase):
    """Test complete simulated flights."""

    def setUp(self):
        self.bird = make_passerine()
        self.simulator = FlightSimulator(SimulatorConfig(record_trace=True))

    def test_basic_passerine(self):
        """20 g passerine with 4 g fat flies until the fat is used up."""
        result = self.simulator.run(self.bird)

        self.assertTrue(result.valid)
        self.assertEqual(result.termination_reason, TerminationReason.EXHAUSTED)
        self.assertTrue(math.isfinite(result.range_km))
        self.assertEqual(result.range_km, round(result.distance / 1000.0, 1))

        # Regression baseline, default constants and constant ratio control
        self.assertEqual(result.range_km, 1067.6)
        self.assertEqual(result.step_count, 257)

    def test_basic_passerine_constant_speed(self):
        """Holding the start speed flies closer to Vmr, so slightly further."""
        result = FlightSimulator(SimulatorConfig(
            speed_control=SpeedControl.CONSTANT_SPEED
        )).run(self.bird)

        self.assertTrue(result.valid)
        self.assertEqual(result.termination_reason, TerminationReason.EXHAUSTED)
        # Regression bracket around the constant ratio baseline of 1067.6 km
        self.assertGreater(result.range_km, 1067.6)
        self.assertLess(result.range_km, 1130.0)
        self.assertLessEqual(result.step_count, 257)

    def test_fat_fully_used(self):
        """No overdraw: remaining fat is exactly zero at the end."""
        result = self.simulator.run(self.bird)
        self.assertEqual(result.remaining_fat_mass, 0.0)
        self.assertAlmostEqual(result.final_body_mass, 0.016)

    def test_trace(self):
        """Trace covers every step; mass falls, distance grows, muscle is constant."""
        result = self.simulator.run(self.bird)
        trace = result.trace

        self.assertEqual(len(trace), result.step_count)
        self.assertEqual([s.step for s in trace], list(range(1, result.step_count + 1)))
        self.assertEqual(trace[-1].distance, result.distance)

        for previous, current in zip(trace, trace[1:]):
            self.assertLess(current.body_mass, previous.body_mass)
            self.assertGreater(current.distance, previous.distance)
            self.assertLessEqual(current.remaining_fat_mass, previous.remaining_fat_mass)

        for step in trace:
            self.assertEqual(step.muscle_mass, 0.003)
            self.assertGreaterEqual(step.body_mass, self.bird.fat_free_mass)
            self.assertGreaterEqual(step.remaining_fat_mass, 0.0)

    def test_trace_arrays(self):
        result = self.simulator.run(self.bird)
        arrays = result.trace_arrays()
        self.assertEqual(len(arrays["speed"]), result.step_count)
        self.assertTrue((arrays["muscle_mass"] == 0.003).all())

    def test_no_trace_by_default(self):
        result = FlightSimulator().run(self.bird)
        self.assertIsNone(result.trace)
        with self.assertRaises(ValueError):
            result.trace_arrays()

    def test_range_increases_with_fat(self):
        """More fuel, more distance."""
        distances = [
            self.simulator.run(replace(self.bird, fat_mass=fat)).distance
            for fat in (0.001, 0.002, 0.003, 0.004, 0.005, 0.006)
        ]
        for shorter, longer in zip(distances, distances[1:]):
            self.assertGreater(longer, shorter)

    def test_range_continuous_in_fat(self):
        """A tiny change in fat gives a tiny change in distance."""
        base = self.simulator.run(self.bird).distance
        nudged = self.simulator.run(replace(self.bird, fat_mass=0.004 + 1e-9)).distance
        self.assertGreater(nudged, base)
        self.assertLess(nudged - base, 1.0)

    def test_sweep_fat_mass(self):
        results = self.simulator.sweep_fat_mass(self.bird, (0.001, 0.006), num_points=6)
        self.assertEqual(len(results), 6)
        distances = [r.distance for r in results]
        self.assertEqual(distances, sorted(distances))
        self.assertTrue(all(r.valid for r in results))

    def test_deterministic(self):
        first = self.simulator.run(self.bird)
        second = self.simulator.run(self.bird)
        self.assertEqual(first.distance, second.distance)
        self.assertEqual(first.step_count, second.step_count)

    def test_tiny_fat_single_step(self):
        """Fat just above zero gives one scaled step."""
        result = self.simulator.run(replace(self.bird, fat_mass=1e-7))
        self.assertTrue(result.valid)
        self.assertEqual(result.step_count, 1)
        self.assertGreater(result.distance, 0.0)
        self.assertLess(result.distance, result.trace[0].speed * 360.0)

    def test_fat_equal_to_body_mass_invalid(self):
        with self.assertRaises(InvalidInputError):
            self.simulator.run(replace(self.bird, fat_mass=0.020))

    def test_zero_fat_runs_no_steps(self):
        """Invalid input is rejected before any step."""
        with mock.patch("birdrange.flight_simulator.simulator.advance") as patched:
            with self.assertRaises(InvalidInputError):
                self.simulator.run(replace(self.bird, fat_mass=0.0))
            patched.assert_not_called()

    def test_zero_muscle_mass(self):
        result = self.simulator.run(replace(self.bird, muscle_mass=0.0))
        self.assertTrue(result.valid)

    def test_non_passerine_flies_further(self):
        """Lower basal metabolism leaves more fuel for flight."""
        passerine = self.simulator.run(self.bird)
        non_passerine = self.simulator.run(replace(self.bird, order=Order.NON_PASSERINE))
        self.assertGreater(non_passerine.distance, passerine.distance)

    def test_smaller_time_step_converges(self):
        """Range is insensitive to the step length."""
        fine = FlightSimulator(SimulatorConfig(
            constants=FlightConstants().with_overrides(time_step_seconds=36.0)
        )).run(self.bird)
        coarse = FlightSimulator().run(self.bird)
        self.assertAlmostEqual(fine.distance / coarse.distance, 1.0, delta=0.02)

    def test_summary(self):
        result = self.simulator.run(self.bird)
        self.assertIn("Range:", result.summary())
        self.assertEqual(result.to_dict()["termination"], "exhausted")


class TestSpeedControlDivergence(unittest.TestCase):
    """Test the effect of the speed strategy on range."""

    def setUp(self):
        self.bird = make_passerine()
        self.ratio = FlightSimulator(SimulatorConfig(
            speed_control=SpeedControl.CONSTANT_RATIO
        ))
        self.speed = FlightSimulator(SimulatorConfig(
            speed_control=SpeedControl.CONSTANT_SPEED
        ))

    def test_strategies_differ_over_many_steps(self):
        ratio = self.ratio.run(self.bird)
        speed = self.speed.run(self.bird)
        self.assertGreater(ratio.step_count, 1)
        self.assertGreater(abs(ratio.distance - speed.distance), 1.0)
        self.assertEqual(speed.speed_control, SpeedControl.CONSTANT_SPEED)

    def test_strategies_agree_for_single_step(self):
        bird = replace(self.bird, fat_mass=1e-7)
        ratio = self.ratio.run(bird)
        speed = self.speed.run(bird)
        self.assertEqual(ratio.step_count, 1)
        self.assertEqual(speed.step_count, 1)
        self.assertAlmostEqual(ratio.distance, speed.distance)


class TestAbnormalTermination(unittest.TestCase):
    """Test infeasible and runaway runs."""

    def setUp(self):
        self.bird = make_passerine()

    def test_zero_induced_power_factor_infeasible(self):
        """k = 0 gives zero airspeed: infeasible at step 1, no crash."""
        constants = FlightConstants().with_overrides(induced_power_factor=0.0)
        for mode in SpeedControl:
            with self.subTest(mode=mode):
                result = FlightSimulator(SimulatorConfig(
                    constants=constants, speed_control=mode
                )).run(self.bird)
                self.assertFalse(result.valid)
                self.assertEqual(result.termination_reason, TerminationReason.INFEASIBLE)
                self.assertEqual(result.failed_step, 1)
                self.assertEqual(result.step_count, 0)
                self.assertIsNone(result.range_km)
                self.assertTrue(result.error_message)

    def test_zero_efficiency_infeasible(self):
        constants = FlightConstants().with_overrides(mechanical_efficiency=0.0)
        result = FlightSimulator(SimulatorConfig(constants=constants)).run(self.bird)
        self.assertEqual(result.termination_reason, TerminationReason.INFEASIBLE)
        self.assertEqual(result.failed_step, 1)

    def test_zero_air_density_infeasible(self):
        constants = FlightConstants().with_overrides(air_density=0.0)
        for mode in SpeedControl:
            with self.subTest(mode=mode):
                result = FlightSimulator(SimulatorConfig(
                    constants=constants, speed_control=mode
                )).run(self.bird)
                self.assertEqual(result.termination_reason, TerminationReason.INFEASIBLE)

    def test_max_steps_reached(self):
        """The step ceiling ends a run distinctly from exhaustion."""
        result = FlightSimulator(SimulatorConfig(max_steps=5)).run(self.bird)
        self.assertFalse(result.valid)
        self.assertEqual(result.termination_reason, TerminationReason.MAX_STEPS_REACHED)
        self.assertEqual(result.step_count, 5)
        self.assertGreater(result.remaining_fat_mass, 0.0)
        self.assertGreater(result.distance, 0.0)
        self.assertIsNone(result.range_km)

    def test_exhaustion_on_last_allowed_step_wins(self):
        """A run that burns its last fat on the final allowed step is exhausted."""
        result = FlightSimulator(SimulatorConfig(max_steps=1)).run(
            replace(self.bird, fat_mass=1e-7)
        )
        self.assertEqual(result.termination_reason, TerminationReason.EXHAUSTED)


def run_validation():
    """Run validation tests and print summary."""
    print("=" * 60)
    print("Flight Simulator Validation")
    print("=" * 60)
    print()

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestAerodynamics))
    suite.addTests(loader.loadTestsFromTestCase(TestMetabolism))
    suite.addTests(loader.loadTestsFromTestCase(TestSpeedControl))
    suite.addTests(loader.loadTestsFromTestCase(TestBirdValidation))
    suite.addTests(loader.loadTestsFromTestCase(TestConstants))
    suite.addTests(loader.loadTestsFromTestCase(TestStepTransition))
    suite.addTests(loader.loadTestsFromTestCase(TestFlightSimulator))
    suite.addTests(loader.loadTestsFromTestCase(TestSpeedControlDivergence))
    suite.addTests(loader.loadTestsFromTestCase(TestAbnormalTermination))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    print()
    print("=" * 60)
    if result.wasSuccessful():
        print("All validation tests PASSED")
    else:
        print(f"FAILED: {len(result.failures)} failures, {len(result.errors)} errors")
    print("=" * 60)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_validation()
    sys.exit(0 if success else 1)
