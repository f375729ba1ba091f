"""
Flight Simulator Configuration Module
=====================================

This module contains the physical and physiological constants used by
the flight range simulation, and the run settings for the simulator.

Physical Constants:
------------------
- AIR_DENSITY_DEFAULT: Air density at typical migration altitude (1.00 kg/m³)
- GRAVITY: Gravitational acceleration (9.81 m/s²)
- FAT_ENERGY_CONTENT: Energy density of fat (3.9e7 J/kg)

All constants are held in an immutable FlightConstants value that is
passed explicitly to every calculation. Overrides produce a new value.

Usage:
------
    from birdrange.flight_simulator.config import FlightConstants, SimulatorConfig

    constants = FlightConstants().with_overrides(air_density=0.9)
    config = SimulatorConfig(constants=constants)
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Tuple


# =============================================================================
# Physical Constants
# =============================================================================

# Air density (kg/m³) at the height birds usually migrate
AIR_DENSITY_DEFAULT = 1.00

# Gravitational acceleration (m/s²)
GRAVITY = 9.81

# Energy content of fat (J/kg)
FAT_ENERGY_CONTENT = 3.9e7

# Fraction of mechanical power delivered from chemical power
MECHANICAL_EFFICIENCY = 0.23

# Induced power factor (k)
INDUCED_POWER_FACTOR = 1.20

# Profile power constant (Cpro)
PROFILE_POWER_CONSTANT = 8.4

# Body drag coefficient (CDb)
BODY_DRAG_COEFFICIENT = 0.10

# Heart and lung surcharge on chemical power
CIRCULATION_FACTOR = 1.10

# Ratio of true airspeed to minimum power speed
SPEED_RATIO = 1.2

# Simulation time step (s)
TIME_STEP_SECONDS = 360.0

# Flight muscle fraction of all-up mass, used when no muscle mass is given
DEFAULT_MUSCLE_FRACTION = 0.17

# Basal metabolism coefficients, BMR = alpha × m^delta (W, kg)
PASSERINE_ALPHA = 6.25
PASSERINE_DELTA = 0.724
NON_PASSERINE_ALPHA = 3.79
NON_PASSERINE_DELTA = 0.723

# Upper bound on steps per bird
DEFAULT_MAX_STEPS = 1_000_000


class SpeedControl(Enum):
    """True airspeed control strategies."""
    CONSTANT_SPEED = "constant_speed"   # Vt fixed at the start of flight
    CONSTANT_RATIO = "constant_ratio"   # Vt/Vmp held constant


@dataclass(frozen=True)
class FlightConstants:
    """
    Physical and physiological constants for range calculations.

    Attributes:
    ----------
    air_density : float
        Air density ρ (kg/m³)

    gravity : float
        Gravitational acceleration g (m/s²)

    mechanical_efficiency : float
        Conversion efficiency η from chemical to mechanical power (0-1)

    induced_power_factor : float
        Induced power factor k

    profile_power_constant : float
        Profile power constant Cpro

    body_drag_coefficient : float
        Body drag coefficient CDb

    fat_energy_content : float
        Energy released per kg of fat burned (J/kg)

    time_step_seconds : float
        Length of one simulation step (s)

    speed_ratio : float
        True airspeed as a multiple of minimum power speed

    circulation_factor : float
        Ventilation and circulation surcharge on chemical power

    min_protein_fraction : float
        Protein withdrawal fraction. Only 0 is supported since
        muscle mass is held constant.
    """

    air_density: float = AIR_DENSITY_DEFAULT
    gravity: float = GRAVITY
    mechanical_efficiency: float = MECHANICAL_EFFICIENCY
    induced_power_factor: float = INDUCED_POWER_FACTOR
    profile_power_constant: float = PROFILE_POWER_CONSTANT
    body_drag_coefficient: float = BODY_DRAG_COEFFICIENT
    fat_energy_content: float = FAT_ENERGY_CONTENT
    time_step_seconds: float = TIME_STEP_SECONDS
    speed_ratio: float = SPEED_RATIO
    circulation_factor: float = CIRCULATION_FACTOR

    # -------------------------------------------------------------------------
    # Basal Metabolism (per taxonomic order)
    # -------------------------------------------------------------------------
    passerine_alpha: float = PASSERINE_ALPHA
    passerine_delta: float = PASSERINE_DELTA
    non_passerine_alpha: float = NON_PASSERINE_ALPHA
    non_passerine_delta: float = NON_PASSERINE_DELTA

    min_protein_fraction: float = 0.0

    def with_overrides(self, **kwargs) -> 'FlightConstants':
        """
        Create a copy of these constants with modified values.

        Raises:
        ------
        ValueError
            If a name is not a known constant.
        """
        known = {f.name for f in fields(self)}
        unknown = set(kwargs) - known
        if unknown:
            raise ValueError(
                f"Unknown constant(s): {', '.join(sorted(unknown))}"
            )
        return replace(self, **kwargs)

    def metabolism_coefficients(self, passerine: bool) -> Tuple[float, float]:
        """Return (alpha, delta) for the basal metabolic rate."""
        if passerine:
            return self.passerine_alpha, self.passerine_delta
        return self.non_passerine_alpha, self.non_passerine_delta

    def validate(self):
        """
        Check the constants can drive a simulation.

        Zero efficiency or induced power factor is allowed here; the
        simulator reports those as infeasible flights.

        Raises:
        ------
        ValueError
            If any constant is non-finite or negative, the time step or
            fat energy is zero, or protein withdrawal is requested.
        """
        errors = []

        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                errors.append(f"{f.name} must be finite")
            elif value < 0:
                # fractional powers of negative constants are complex
                errors.append(f"{f.name} cannot be negative")

        if self.time_step_seconds <= 0:
            errors.append("Time step must be positive")
        if self.fat_energy_content <= 0:
            errors.append("Fat energy content must be positive")
        if self.min_protein_fraction != 0:
            errors.append(
                "Protein withdrawal is not supported under the constant "
                "muscle mass criterion"
            )

        if errors:
            raise ValueError("Invalid constants: " + "; ".join(errors))


@dataclass(frozen=True)
class SimulatorConfig:
    """
    Settings for one simulation run.

    Attributes:
    ----------
    constants : FlightConstants
        Constants threaded through every calculation

    speed_control : SpeedControl
        Airspeed strategy, fixed for the whole run

    max_steps : int
        Step ceiling; reaching it ends the run as MAX_STEPS_REACHED

    record_trace : bool
        Keep the per-step trace on the result
    """

    constants: FlightConstants = field(default_factory=FlightConstants)
    speed_control: SpeedControl = SpeedControl.CONSTANT_RATIO
    max_steps: int = DEFAULT_MAX_STEPS
    record_trace: bool = False

    def validate(self):
        """Raise ValueError if the settings cannot drive a simulation."""
        self.constants.validate()
        if not isinstance(self.speed_control, SpeedControl):
            raise ValueError(f"Unknown speed control: {self.speed_control}")
        if self.max_steps < 1:
            raise ValueError("max_steps must be at least 1")


# =============================================================================
# Default Configuration Instance
# =============================================================================

DEFAULT_CONSTANTS = FlightConstants()
DEFAULT_CONFIG = SimulatorConfig()
