"""
Flight Range Simulator Module
=============================

Time-marching simulation of a migratory flight under the constant
muscle mass criterion: fat is the only fuel and muscle mass never changes.

At each fixed time step the simulator:
1. Takes the true airspeed from the speed controller for the current mass
2. Computes mechanical power (induced + parasite + profile)
3. Converts it to chemical power (efficiency, basal metabolism, surcharge)
4. Burns fat: Δfat = Pchem × Δt / e
5. Advances distance: Δd = Vt × Δt

The run ends when the fat is used up (the last step is scaled down so no
more fat is burned than remains), when a speed or power value is not
positive and finite, or when the configured step ceiling is reached.

The loop is a state machine over immutable SimulationState values:

    RUNNING --advance()--> RUNNING
    RUNNING --advance()--> TERMINATED(EXHAUSTED | INFEASIBLE | MAX_STEPS_REACHED)

Classes:
--------
- SimulationState: Immutable state between steps
- TraceStep: One recorded step
- FlightResult: Outcome of a run
- FlightSimulator: Drives the step loop

Usage:
------
    from birdrange.flight_simulator import Bird, Order, FlightSimulator

    bird = Bird(body_mass=0.020, wing_span=0.18, wing_area=0.0065,
                fat_mass=0.004, muscle_mass=0.003, order=Order.PASSERINE)

    result = FlightSimulator().run(bird)
    print(result.summary())
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple, Sequence

import numpy as np

from .aerodynamics import mechanical_power
from .bird import Bird
from .config import SimulatorConfig, SpeedControl, DEFAULT_CONFIG
from .metabolism import basal_metabolic_rate, chemical_power
from .speed_control import SpeedController, make_speed_controller


logger = logging.getLogger(__name__)


class SimulationStatus(Enum):
    """Whether a simulation is still stepping."""
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(Enum):
    """Why a simulation stopped."""
    EXHAUSTED = "exhausted"                    # all fat burned
    INFEASIBLE = "infeasible"                  # speed or power not usable
    MAX_STEPS_REACHED = "max_steps_reached"    # step ceiling hit


@dataclass(frozen=True)
class SimulationState:
    """
    State of one bird's flight between steps.

    Attributes:
    ----------
    remaining_fat_mass : float
        Fat still available (kg), never negative

    body_mass : float
        Current all-up mass (kg) = initial mass - fat burned

    distance : float
        Distance flown so far (m)

    step_count : int
        Number of committed steps

    elapsed_time : float
        Flight time so far (s)

    status : SimulationStatus
        RUNNING until a terminal condition fires

    termination_reason : TerminationReason, optional
        Set once TERMINATED

    failed_step : int, optional
        Step index at which an infeasible value appeared

    error_message : str
        Description of an abnormal termination
    """

    remaining_fat_mass: float
    body_mass: float
    distance: float = 0.0
    step_count: int = 0
    elapsed_time: float = 0.0
    status: SimulationStatus = SimulationStatus.RUNNING
    termination_reason: Optional[TerminationReason] = None
    failed_step: Optional[int] = None
    error_message: str = ""

    @classmethod
    def initial(cls, bird: Bird) -> 'SimulationState':
        """State at the start of flight."""
        return cls(remaining_fat_mass=bird.fat_mass, body_mass=bird.body_mass)

    @property
    def is_running(self) -> bool:
        return self.status is SimulationStatus.RUNNING

    def terminate(
        self,
        reason: TerminationReason,
        failed_step: Optional[int] = None,
        error_message: str = ""
    ) -> 'SimulationState':
        """Return a terminated copy of this state."""
        return replace(
            self,
            status=SimulationStatus.TERMINATED,
            termination_reason=reason,
            failed_step=failed_step,
            error_message=error_message,
        )


@dataclass(frozen=True)
class TraceStep:
    """
    Values recorded for one simulation step.

    body_mass, speed and the powers are the values used for the step;
    remaining_fat_mass and distance are the values after it.
    """
    step: int
    body_mass: float
    remaining_fat_mass: float
    muscle_mass: float
    speed: float
    mech_power: float
    chem_power: float
    distance: float


def _usable(value: float) -> bool:
    return math.isfinite(value) and value > 0


def advance(
    state: SimulationState,
    bird: Bird,
    config: SimulatorConfig,
    controller: SpeedController
) -> Tuple[SimulationState, Optional[TraceStep]]:
    """
    Advance a running simulation by one time step.

    Parameters:
    ----------
    state : SimulationState
        Current state (must be RUNNING)

    bird : Bird
        The validated bird record

    config : SimulatorConfig
        Run settings

    controller : SpeedController
        Airspeed strategy for this run

    Returns:
    -------
    Tuple[SimulationState, Optional[TraceStep]]
        The new state, and the recorded step if one was committed and
        config.record_trace is set

    Raises:
    ------
    ValueError
        If the state has already terminated.
    """
    if not state.is_running:
        raise ValueError("Cannot advance a terminated simulation")

    c = config.constants
    step = state.step_count + 1
    mass = state.body_mass

    try:
        airspeed = controller.airspeed(mass)
        if not _usable(airspeed):
            return state.terminate(
                TerminationReason.INFEASIBLE, step,
                f"Airspeed {airspeed:.6g} m/s is not positive and finite"
            ), None

        powers = mechanical_power(mass, airspeed, bird.wing_span, bird.wing_area, c)
        p_mech = powers.total
        if not _usable(p_mech):
            return state.terminate(
                TerminationReason.INFEASIBLE, step,
                f"Mechanical power {p_mech:.6g} W is not positive and finite"
            ), None

        bmr = basal_metabolic_rate(mass, bird.order, c)
        p_chem = chemical_power(p_mech, bmr, c)
    except ArithmeticError as e:
        return state.terminate(
            TerminationReason.INFEASIBLE, step,
            f"Power calculation failed: {e}"
        ), None

    if not _usable(p_chem):
        return state.terminate(
            TerminationReason.INFEASIBLE, step,
            f"Chemical power {p_chem:.6g} W is not positive and finite"
        ), None

    dt = c.time_step_seconds
    fat_burned = p_chem * dt / c.fat_energy_content
    step_distance = airspeed * dt

    if fat_burned >= state.remaining_fat_mass:
        # Final partial step, scaled to the fat that is left
        fraction = state.remaining_fat_mass / fat_burned
        new_state = replace(
            state,
            remaining_fat_mass=0.0,
            body_mass=bird.fat_free_mass,
            distance=state.distance + step_distance * fraction,
            step_count=step,
            elapsed_time=state.elapsed_time + dt * fraction,
        ).terminate(TerminationReason.EXHAUSTED)
    else:
        remaining = state.remaining_fat_mass - fat_burned
        new_state = replace(
            state,
            remaining_fat_mass=remaining,
            body_mass=bird.body_mass - (bird.fat_mass - remaining),
            distance=state.distance + step_distance,
            step_count=step,
            elapsed_time=state.elapsed_time + dt,
        )
        if step >= config.max_steps:
            new_state = new_state.terminate(
                TerminationReason.MAX_STEPS_REACHED, None,
                f"Reached {config.max_steps} steps with "
                f"{remaining:.6g} kg of fat left"
            )

    trace_step = None
    if config.record_trace:
        trace_step = TraceStep(
            step=step,
            body_mass=mass,
            remaining_fat_mass=new_state.remaining_fat_mass,
            muscle_mass=bird.muscle_mass,
            speed=airspeed,
            mech_power=p_mech,
            chem_power=p_chem,
            distance=new_state.distance,
        )

    return new_state, trace_step


@dataclass
class FlightResult:
    """
    Outcome of one bird's simulated flight.

    Attributes:
    ----------
    valid : bool
        True when the flight ended by burning all fat

    termination_reason : TerminationReason
        Why the simulation stopped

    range_km : float, optional
        Range in km rounded to 1 decimal place; None unless valid

    distance : float
        Distance flown before stopping (m), unrounded

    step_count : int
        Number of committed steps (the final partial step included)

    failed_step : int, optional
        Step at which an infeasible value appeared

    error_message : str
        Description of an abnormal termination

    remaining_fat_mass : float
        Fat left at the end (kg), 0 when valid

    final_body_mass : float
        Body mass at the end (kg)

    muscle_mass : float
        Muscle mass, unchanged from the input (kg)

    flight_time : float
        Flight duration (s)

    speed_control : SpeedControl
        Airspeed strategy used

    trace : list of TraceStep, optional
        Per-step record when requested
    """

    bird_name: Optional[str] = None
    valid: bool = False
    termination_reason: Optional[TerminationReason] = None
    range_km: Optional[float] = None
    distance: float = 0.0
    step_count: int = 0
    failed_step: Optional[int] = None
    error_message: str = ""
    remaining_fat_mass: float = 0.0
    final_body_mass: float = 0.0
    muscle_mass: float = 0.0
    flight_time: float = 0.0
    speed_control: SpeedControl = SpeedControl.CONSTANT_RATIO
    trace: Optional[List[TraceStep]] = None

    @classmethod
    def from_state(
        cls,
        bird: Bird,
        state: SimulationState,
        config: SimulatorConfig,
        trace: Optional[List[TraceStep]] = None
    ) -> 'FlightResult':
        """Build the result for a terminated simulation state."""
        exhausted = state.termination_reason is TerminationReason.EXHAUSTED
        return cls(
            bird_name=bird.name,
            valid=exhausted,
            termination_reason=state.termination_reason,
            range_km=round(state.distance / 1000.0, 1) if exhausted else None,
            distance=state.distance,
            step_count=state.step_count,
            failed_step=state.failed_step,
            error_message=state.error_message,
            remaining_fat_mass=state.remaining_fat_mass,
            final_body_mass=state.body_mass,
            muscle_mass=bird.muscle_mass,
            flight_time=state.elapsed_time,
            speed_control=config.speed_control,
            trace=trace,
        )

    def summary(self) -> str:
        """Generate a formatted summary string."""
        label = self.bird_name or "Bird"
        if not self.valid:
            reason = self.termination_reason.value if self.termination_reason else "unknown"
            return f"{label}: no range ({reason}) - {self.error_message}"

        return (
            f"{label}\n"
            f"{'='*50}\n"
            f"Range: {self.range_km:.1f} km\n"
            f"Flight time: {self.flight_time / 3600.0:.1f} h "
            f"({self.step_count} steps)\n"
            f"Final body mass: {self.final_body_mass * 1000:.1f} g\n"
            f"Speed control: {self.speed_control.value}\n"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for export (trace excluded)."""
        return {
            "name": self.bird_name,
            "range_km": self.range_km,
            "distance_m": self.distance,
            "step_count": self.step_count,
            "termination": self.termination_reason.value if self.termination_reason else None,
            "failed_step": self.failed_step,
            "flight_time_h": self.flight_time / 3600.0,
            "final_body_mass_kg": self.final_body_mass,
            "remaining_fat_kg": self.remaining_fat_mass,
            "muscle_mass_kg": self.muscle_mass,
            "speed_control": self.speed_control.value,
            "error": self.error_message,
        }

    def trace_arrays(self) -> Dict[str, np.ndarray]:
        """
        Return the trace as one numpy array per column.

        Raises:
        ------
        ValueError
            If the run did not record a trace.
        """
        if self.trace is None:
            raise ValueError("No trace recorded; run with record_trace=True")

        columns = (
            "step", "body_mass", "remaining_fat_mass", "muscle_mass",
            "speed", "mech_power", "chem_power", "distance",
        )
        return {
            name: np.array([getattr(s, name) for s in self.trace])
            for name in columns
        }


class FlightSimulator:
    """
    Time-marching flight range simulator.

    One simulator may run any number of birds, one after another or from
    several threads; it keeps no per-bird state.

    Attributes:
    ----------
    config : SimulatorConfig
        Constants and run settings

    Example:
    -------
        simulator = FlightSimulator(SimulatorConfig(
            speed_control=SpeedControl.CONSTANT_SPEED,
            record_trace=True,
        ))
        result = simulator.run(bird)
        arrays = result.trace_arrays()
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        """
        Initialize the FlightSimulator.

        Parameters:
        ----------
        config : SimulatorConfig, optional
            Run settings. Defaults to DEFAULT_CONFIG.

        Raises:
        ------
        ValueError
            If the configuration is invalid.
        """
        self.config = config if config is not None else DEFAULT_CONFIG
        self.config.validate()

    def run(self, bird: Bird) -> FlightResult:
        """
        Simulate one flight until a terminal condition fires.

        Parameters:
        ----------
        bird : Bird
            Bird record

        Returns:
        -------
        FlightResult
            Outcome with range, step count and termination reason

        Raises:
        ------
        InvalidInputError
            If the bird record is invalid. No step is run.
        """
        bird.validate()
        config = self.config

        state = SimulationState.initial(bird)
        trace: Optional[List[TraceStep]] = [] if config.record_trace else None

        try:
            controller = make_speed_controller(
                config.speed_control, bird, config.constants
            )
        except ArithmeticError as e:
            controller = None
            state = state.terminate(
                TerminationReason.INFEASIBLE, 1,
                f"Airspeed calculation failed: {e}"
            )

        while state.is_running:
            state, trace_step = advance(state, bird, config, controller)
            if trace_step is not None:
                trace.append(trace_step)

        result = FlightResult.from_state(bird, state, config, trace)

        if result.valid:
            logger.debug(
                "%s: %.1f km in %d steps",
                bird.name or "bird", result.range_km, result.step_count
            )
        else:
            logger.debug(
                "%s: terminated %s at step %s: %s",
                bird.name or "bird", state.termination_reason.value,
                state.failed_step or state.step_count, state.error_message
            )

        return result

    def sweep_fat_mass(
        self,
        bird: Bird,
        fat_range: Optional[Tuple[float, float]] = None,
        num_points: int = 20
    ) -> List[FlightResult]:
        """
        Run the same bird over a range of fat loads.

        All-up mass is held fixed; only the fat mass changes.

        Parameters:
        ----------
        bird : Bird
            Base bird record

        fat_range : tuple, optional
            (min_fat, max_fat) in kg. Defaults to 10% - 100% of the
            bird's own fat mass.

        num_points : int
            Number of fat loads

        Returns:
        -------
        list
            FlightResult for each fat load, in increasing fat order

        Raises:
        ------
        InvalidInputError
            If any fat load is outside (0, body_mass).
        """
        if fat_range is None:
            fat_range = (bird.fat_mass * 0.1, bird.fat_mass)

        fat_masses = np.linspace(fat_range[0], fat_range[1], num_points)
        return [
            self.run(replace(bird, fat_mass=float(fat)))
            for fat in fat_masses
        ]

    def run_sequence(self, birds: Sequence[Bird]) -> List[FlightResult]:
        """Run several birds one after another (raises on an invalid record)."""
        return [self.run(bird) for bird in birds]
