"""
Metabolic Power Conversion
==========================

Converts mechanical flight power into the chemical power drawn from
fuel stores.

    Pchem = (Pmech / η + BMR) × R

Where:
- η = mechanical conversion efficiency
- BMR = basal metabolic rate = α × m^δ (α, δ depend on order)
- R = heart and lung surcharge (1.10 by default)
"""

from .bird import Order
from .config import FlightConstants


def basal_metabolic_rate(
    body_mass: float,
    order: Order,
    constants: FlightConstants
) -> float:
    """
    Basal metabolic rate α × m^δ (W).

    Parameters:
    ----------
    body_mass : float
        Body mass (kg)

    order : Order
        Selects the passerine or non-passerine coefficients

    constants : FlightConstants
        Physical constants

    Returns:
    -------
    float
        Basal metabolic rate (W)
    """
    alpha, delta = constants.metabolism_coefficients(order.is_passerine)
    return alpha * body_mass ** delta


def chemical_power(
    mech_power: float,
    basal_rate: float,
    constants: FlightConstants
) -> float:
    """
    Chemical power demand (W).

    Raises ZeroDivisionError when the mechanical efficiency is zero.
    """
    return (
        (mech_power / constants.mechanical_efficiency + basal_rate)
        * constants.circulation_factor
    )
