"""
Speed Control Strategies
========================

Supplies the true airspeed for each simulation step. Two strategies:

1. Constant ratio: Vt = speed_ratio × Vmp(current mass), recomputed every
   step, so the bird slows down as it gets lighter.
2. Constant speed: Vt = speed_ratio × Vmp(initial mass), computed once and
   held for the whole flight.

The strategy is chosen once per run with make_speed_controller().
"""

from dataclasses import dataclass
from typing import Union

from .aerodynamics import minimum_power_speed
from .bird import Bird
from .config import FlightConstants, SpeedControl


@dataclass(frozen=True)
class ConstantRatioController:
    """Hold Vt/Vmp constant."""
    wing_span: float
    constants: FlightConstants

    mode = SpeedControl.CONSTANT_RATIO

    def airspeed(self, body_mass: float) -> float:
        vmp = minimum_power_speed(body_mass, self.wing_span, self.constants)
        return self.constants.speed_ratio * vmp


@dataclass(frozen=True)
class ConstantSpeedController:
    """Hold Vt at its value for the start of flight."""
    fixed_airspeed: float

    mode = SpeedControl.CONSTANT_SPEED

    def airspeed(self, body_mass: float) -> float:
        return self.fixed_airspeed


SpeedController = Union[ConstantRatioController, ConstantSpeedController]


def make_speed_controller(
    mode: SpeedControl,
    bird: Bird,
    constants: FlightConstants
) -> SpeedController:
    """
    Build the controller for a run.

    Parameters:
    ----------
    mode : SpeedControl
        Strategy to use

    bird : Bird
        Bird at the start of flight

    constants : FlightConstants
        Physical constants

    Returns:
    -------
    SpeedController
        Object with an airspeed(body_mass) method

    Raises:
    ------
    ValueError
        If the mode is not a SpeedControl member.
    """
    if mode is SpeedControl.CONSTANT_RATIO:
        return ConstantRatioController(bird.wing_span, constants)

    if mode is SpeedControl.CONSTANT_SPEED:
        ratio = ConstantRatioController(bird.wing_span, constants)
        return ConstantSpeedController(ratio.airspeed(bird.body_mass))

    raise ValueError(
        f"Unknown speed control: {mode}. "
        f"Use SpeedControl.CONSTANT_SPEED or SpeedControl.CONSTANT_RATIO"
    )
