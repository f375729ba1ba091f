"""
Aerodynamic Power Model
=======================

Pure functions for the mechanical power a bird needs in flapping flight,
after Pennycuick's flight mechanics.

Theory Background:
-----------------

**Minimum Power Speed:**
    Vmp = 0.807 × k^¼ × m^½ × g^½ / (ρ^½ × B^½ × Sb^¼ × CDb^¼)

    Where:
    - k = induced power factor
    - m = body mass (kg)
    - B = wing span (m)
    - Sb = body frontal area = 0.00813 × m^0.666 (m²)
    - CDb = body drag coefficient

**Power Components at true airspeed Vt:**
    Ppar = ρ × Vt³ × Sb × CDb / 2
    Pind = k × (m × g)² / (2 × Vt × Sd × ρ),  Sd = π × B² / 4
    Ppro = X1 × Pam,  X1 = Cpro / AR

    Where Pam is the absolute minimum power:
    Pam = 1.05 × k^¾ × m^1.5 × g^1.5 × Sb^¼ × CDb^¼ / (ρ^½ × B^1.5)

**Total:**
    Pmech = Pind + Ppar + Ppro

Every function takes the instantaneous body mass, so values must be
recomputed whenever mass changes. No bounds checking is done here.

Usage:
------
    from birdrange.flight_simulator.aerodynamics import (
        minimum_power_speed, mechanical_power
    )

    vmp = minimum_power_speed(0.02, 0.18, constants)
    powers = mechanical_power(0.02, 1.2 * vmp, 0.18, 0.0065, constants)
    print(powers.total)
"""

import math
from dataclasses import dataclass

from .config import FlightConstants


@dataclass(frozen=True)
class PowerBreakdown:
    """Mechanical power components (W)."""
    induced: float
    parasite: float
    profile: float

    @property
    def total(self) -> float:
        return self.induced + self.parasite + self.profile


# =============================================================================
# Geometry
# =============================================================================

def body_frontal_area(body_mass: float) -> float:
    """
    Body frontal area from mass (m²).

    Sb = 0.00813 × m^0.666

    Multiplied by CDb this gives the equivalent flat-plate area.
    """
    return 0.00813 * body_mass ** 0.666


def disc_area(wing_span: float) -> float:
    """Area of a circle with the wing span as diameter (m²)."""
    return math.pi * wing_span ** 2 / 4.0


def aspect_ratio(wing_span: float, wing_area: float) -> float:
    """Wing aspect ratio (B²/S)."""
    return wing_span ** 2 / wing_area


def profile_power_ratio(
    wing_span: float,
    wing_area: float,
    constants: FlightConstants
) -> float:
    """
    Profile power ratio X1 = Cpro / AR.

    Depends only on wing geometry, so it is constant over a flight.
    """
    return constants.profile_power_constant / aspect_ratio(wing_span, wing_area)


# =============================================================================
# Characteristic Speed and Power
# =============================================================================

def minimum_power_speed(
    body_mass: float,
    wing_span: float,
    constants: FlightConstants
) -> float:
    """
    Calculate minimum power speed Vmp (m/s).

    Parameters:
    ----------
    body_mass : float
        Current body mass (kg)

    wing_span : float
        Wing span (m)

    constants : FlightConstants
        Physical constants

    Returns:
    -------
    float
        Minimum power speed (m/s)
    """
    c = constants
    sb = body_frontal_area(body_mass)

    numerator = (
        0.807
        * c.induced_power_factor ** 0.25
        * body_mass ** 0.5
        * c.gravity ** 0.5
    )
    denominator = (
        c.air_density ** 0.5
        * wing_span ** 0.5
        * sb ** 0.25
        * c.body_drag_coefficient ** 0.25
    )
    return numerator / denominator


def absolute_minimum_power(
    body_mass: float,
    wing_span: float,
    constants: FlightConstants
) -> float:
    """
    Calculate absolute minimum power Pam (W).

    Pam = 1.05 × k^¾ × m^1.5 × g^1.5 × Sb^¼ × CDb^¼ / (ρ^½ × B^1.5)
    """
    c = constants
    sb = body_frontal_area(body_mass)

    numerator = (
        1.05
        * c.induced_power_factor ** 0.75
        * body_mass ** 1.5
        * c.gravity ** 1.5
        * sb ** 0.25
        * c.body_drag_coefficient ** 0.25
    )
    denominator = c.air_density ** 0.5 * wing_span ** 1.5
    return numerator / denominator


# =============================================================================
# Power Components
# =============================================================================

def parasite_power(
    body_mass: float,
    airspeed: float,
    constants: FlightConstants
) -> float:
    """Power to overcome body drag, ρ × Vt³ × Sb × CDb / 2 (W)."""
    c = constants
    sb = body_frontal_area(body_mass)
    return c.air_density * airspeed ** 3 * sb * c.body_drag_coefficient / 2.0


def induced_power(
    body_mass: float,
    airspeed: float,
    wing_span: float,
    constants: FlightConstants
) -> float:
    """
    Power to support the weight, k × (m × g)² / (2 × Vt × Sd × ρ) (W).

    Raises ZeroDivisionError when airspeed is zero.
    """
    c = constants
    weight = body_mass * c.gravity
    return (
        c.induced_power_factor * weight ** 2
        / (2.0 * airspeed * disc_area(wing_span) * c.air_density)
    )


def profile_power(
    body_mass: float,
    wing_span: float,
    wing_area: float,
    constants: FlightConstants
) -> float:
    """Profile power X1 × Pam (W)."""
    x1 = profile_power_ratio(wing_span, wing_area, constants)
    return x1 * absolute_minimum_power(body_mass, wing_span, constants)


def mechanical_power(
    body_mass: float,
    airspeed: float,
    wing_span: float,
    wing_area: float,
    constants: FlightConstants
) -> PowerBreakdown:
    """
    Calculate all mechanical power components at the given airspeed.

    Parameters:
    ----------
    body_mass : float
        Current body mass (kg)

    airspeed : float
        True airspeed Vt (m/s)

    wing_span : float
        Wing span (m)

    wing_area : float
        Wing area (m²)

    constants : FlightConstants
        Physical constants

    Returns:
    -------
    PowerBreakdown
        Induced, parasite and profile power; `total` is Pmech
    """
    return PowerBreakdown(
        induced=induced_power(body_mass, airspeed, wing_span, constants),
        parasite=parasite_power(body_mass, airspeed, constants),
        profile=profile_power(body_mass, wing_span, wing_area, constants),
    )
