"""
Flight Simulator Module
=======================

Time-marching flight range simulation for migrating birds under the
constant muscle mass criterion.

Key Classes:
------------
- Bird: Morphological record of one bird
- FlightConstants: Physical constants (immutable, overridable)
- SimulatorConfig: Constants plus run settings
- FlightSimulator: Runs the step loop
- FlightResult: Range, step count and termination reason

Example Usage:
-------------
    from birdrange.flight_simulator import (
        Bird, Order, FlightSimulator, SimulatorConfig, SpeedControl
    )

    bird = Bird(
        body_mass=0.020,    # kg
        wing_span=0.18,     # m
        wing_area=0.0065,   # m²
        fat_mass=0.004,     # kg
        muscle_mass=0.003,  # kg
        order=Order.PASSERINE,
    )

    simulator = FlightSimulator(SimulatorConfig(
        speed_control=SpeedControl.CONSTANT_SPEED
    ))
    result = simulator.run(bird)
    print(f"Range: {result.range_km} km")

Units Convention:
----------------
- Mass: kg
- Length: m (range reported in km)
- Area: m²
- Velocity: m/s
- Power: W
- Time: s
"""

from .config import (
    FlightConstants,
    SimulatorConfig,
    SpeedControl,
    DEFAULT_CONSTANTS,
    DEFAULT_CONFIG,
    DEFAULT_MUSCLE_FRACTION,
)
from .bird import Bird, Order, InvalidInputError
from .aerodynamics import PowerBreakdown, minimum_power_speed, mechanical_power
from .metabolism import basal_metabolic_rate, chemical_power
from .speed_control import (
    ConstantRatioController,
    ConstantSpeedController,
    make_speed_controller,
)
from .simulator import (
    FlightSimulator,
    FlightResult,
    SimulationState,
    SimulationStatus,
    TerminationReason,
    TraceStep,
    advance,
)

__all__ = [
    "Bird",
    "Order",
    "InvalidInputError",
    "FlightConstants",
    "SimulatorConfig",
    "SpeedControl",
    "DEFAULT_CONSTANTS",
    "DEFAULT_CONFIG",
    "DEFAULT_MUSCLE_FRACTION",
    "PowerBreakdown",
    "minimum_power_speed",
    "mechanical_power",
    "basal_metabolic_rate",
    "chemical_power",
    "ConstantRatioController",
    "ConstantSpeedController",
    "make_speed_controller",
    "FlightSimulator",
    "FlightResult",
    "SimulationState",
    "SimulationStatus",
    "TerminationReason",
    "TraceStep",
    "advance",
]
