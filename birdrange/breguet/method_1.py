"""
Breguet Range - Method 1
========================

Closed-form range from the Breguet equation, using the effective
lift:drag ratio at the start of flight.

Theory Background:
-----------------

Mechanical power, made dimensionless with the absolute minimum power Pam
and the speed ratio ν = V / Vmp, is

    P / Pam = 3 / (4ν) + ν³ / 4 + X1 + X2

Where:
- X1 = profile power ratio (Cpro / AR)
- X2 = metabolic power ratio (η × BMR / Pam)

Maximum range speed minimizes P / V, which gives

    ν⁴ - 2(X1 + X2)ν - 3 = 0

The drag factor D is the effective lift:drag ratio at that speed relative
to the case X1 + X2 = 0, so D(0) = 1.

**Lift:drag ratio at start of flight:**
    L/D = D / (k^½ × R) × (Sd / A)^½,  A = Sb × CDb

increased by 10F% to allow for the lift:drag ratio rising as fat is used.

**Range:**
    Y = (e × η / g) × L/D × ln(1 / (1 - F))

Where F is the fat fraction and R the heart and lung surcharge.

Usage:
------
    from birdrange.breguet import breguet_range

    km = breguet_range(bird)
"""

import math
import threading
from typing import Optional

import numpy as np
import pandas as pd
from scipy import optimize

from ..flight_simulator.aerodynamics import (
    absolute_minimum_power,
    body_frontal_area,
    disc_area,
    profile_power_ratio,
)
from ..flight_simulator.bird import Bird, InvalidInputError
from ..flight_simulator.config import FlightConstants, DEFAULT_CONSTANTS
from ..flight_simulator.metabolism import basal_metabolic_rate


# Drag factor table range (X1 + X2)
TABLE_UPPER = 5.0
TABLE_STEP = 0.25

# Lift:drag ratio rises by this fraction per unit fat fraction
FAT_LIFT_DRAG_GAIN = 0.10


# =============================================================================
# Drag Factor
# =============================================================================

def max_range_speed_ratio(x: float) -> float:
    """
    Ratio of maximum range speed to minimum power speed.

    Solves ν⁴ - 2xν - 3 = 0 for ν > 1.

    Parameters:
    ----------
    x : float
        Sum of profile and metabolic power ratios (X1 + X2), >= 0

    Returns:
    -------
    float
        Vmr / Vmp
    """
    if x < 0:
        raise ValueError("X1 + X2 cannot be negative")

    def residual(nu):
        return nu ** 4 - 2.0 * x * nu - 3.0

    return optimize.brentq(residual, 1.0, 2.0 * x + 4.0)


def _power_per_speed(nu: float, x: float) -> float:
    return 3.0 / (4.0 * nu ** 2) + nu ** 2 / 4.0 + x / nu


def drag_factor(x: float) -> float:
    """
    Drag factor D for a given X1 + X2.

    D = min(P/V) at X1 + X2 = 0 divided by min(P/V) at x.
    """
    nu_0 = 3.0 ** 0.25
    nu = max_range_speed_ratio(x)
    return _power_per_speed(nu_0, 0.0) / _power_per_speed(nu, x)


def generate_drag_table(
    upper: float = TABLE_UPPER,
    step: float = TABLE_STEP
) -> pd.DataFrame:
    """
    Build the drag factor lookup table.

    Returns:
    -------
    pd.DataFrame
        Columns x1_plus_x2, speed_ratio (Vmr/Vmp) and drag_factor
    """
    xs = np.round(np.arange(0.0, upper + step / 2.0, step), 6)
    return pd.DataFrame({
        "x1_plus_x2": xs,
        "speed_ratio": [max_range_speed_ratio(x) for x in xs],
        "drag_factor": [drag_factor(x) for x in xs],
    })


_DRAG_TABLE: Optional[pd.DataFrame] = None
_DRAG_TABLE_LOCK = threading.Lock()


def _default_table() -> pd.DataFrame:
    global _DRAG_TABLE
    with _DRAG_TABLE_LOCK:
        if _DRAG_TABLE is None:
            _DRAG_TABLE = generate_drag_table()
    return _DRAG_TABLE


def interpolate_drag_factor(
    x: float,
    table: Optional[pd.DataFrame] = None
) -> float:
    """
    Look up the drag factor by linear interpolation in the table.

    x is rounded to 2 decimal places first.

    Raises:
    ------
    InvalidInputError
        If x is outside the table.
    """
    if table is None:
        table = _default_table()

    x = round(x, 2)
    xs = table["x1_plus_x2"].to_numpy()
    if not xs[0] <= x <= xs[-1]:
        raise InvalidInputError(
            f"X1 + X2 = {x} is outside the drag factor table "
            f"({xs[0]} - {xs[-1]})"
        )
    return float(np.interp(x, xs, table["drag_factor"].to_numpy()))


# =============================================================================
# Power Ratios
# =============================================================================

def metabolic_power_ratio(bird: Bird, constants: FlightConstants) -> float:
    """Metabolic power ratio X2 = η × BMR / Pam at start of flight."""
    bmr = basal_metabolic_rate(bird.body_mass, bird.order, constants)
    pam = absolute_minimum_power(bird.body_mass, bird.wing_span, constants)
    return constants.mechanical_efficiency * bmr / pam


# =============================================================================
# Range
# =============================================================================

def lift_drag_ratio(
    bird: Bird,
    constants: FlightConstants = DEFAULT_CONSTANTS,
    table: Optional[pd.DataFrame] = None
) -> float:
    """Effective lift:drag ratio at start of flight, before the fat gain."""
    c = constants
    x = (
        profile_power_ratio(bird.wing_span, bird.wing_area, c)
        + metabolic_power_ratio(bird, c)
    )
    d = interpolate_drag_factor(x, table)

    flat_plate_area = body_frontal_area(bird.body_mass) * c.body_drag_coefficient
    return (
        d / (c.induced_power_factor ** 0.5 * c.circulation_factor)
        * (disc_area(bird.wing_span) / flat_plate_area) ** 0.5
    )


def breguet_range(
    bird: Bird,
    constants: FlightConstants = DEFAULT_CONSTANTS,
    table: Optional[pd.DataFrame] = None
) -> float:
    """
    Range from the Breguet equation (Method 1).

    Parameters:
    ----------
    bird : Bird
        Bird record

    constants : FlightConstants
        Physical constants

    table : pd.DataFrame, optional
        Drag factor table; the default table is built on first use

    Returns:
    -------
    float
        Range in km, rounded to 1 decimal place

    Raises:
    ------
    InvalidInputError
        If the record is invalid or outside the drag factor table.
    """
    bird.validate()
    c = constants

    fat_fraction = bird.fat_fraction
    ld = lift_drag_ratio(bird, c, table)
    ld *= 1.0 + FAT_LIFT_DRAG_GAIN * fat_fraction

    range_m = (
        (c.fat_energy_content * c.mechanical_efficiency / c.gravity)
        * ld
        * math.log(1.0 / (1.0 - fat_fraction))
    )
    return round(range_m / 1000.0, 1)
