"""
Bird Record Model
=================

Defines the Bird dataclass holding the morphological measurements of a
single bird, and the validation applied before any range calculation.
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class InvalidInputError(ValueError):
    """A bird record or input table cannot be used for range estimation."""


class Order(Enum):
    """Taxonomic order groups with distinct basal metabolism."""
    PASSERINE = 1
    NON_PASSERINE = 2

    @classmethod
    def parse(cls, value: Union['Order', int, float, str]) -> 'Order':
        """
        Convert a table value into an Order.

        Accepts an Order, the codes 1 (passerine) and 2 (non-passerine),
        or their names.

        Raises:
        ------
        InvalidInputError
            If the value is not a recognized order.
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            if key in ("1", "passerine", "passerines"):
                return cls.PASSERINE
            if key in ("2", "non_passerine", "nonpasserine", "non_passerines"):
                return cls.NON_PASSERINE
        elif isinstance(value, numbers.Real) and not isinstance(value, bool):
            if value == 1:
                return cls.PASSERINE
            if value == 2:
                return cls.NON_PASSERINE

        raise InvalidInputError(
            f"Unrecognized order: {value!r}. Use 1 (passerine) or 2 (non-passerine)"
        )

    @property
    def is_passerine(self) -> bool:
        return self is Order.PASSERINE


@dataclass(frozen=True)
class Bird:
    """
    Morphological measurements of one bird.

    Attributes:
    ----------
    body_mass : float
        All-up mass at the start of flight (kg)

    wing_span : float
        Wing span (m)

    wing_area : float
        Wing area (m²)

    fat_mass : float
        Fat mass (kg), the fuel for the flight

    order : Order
        Passerine or non-passerine

    muscle_mass : float
        Flight muscle mass (kg), held constant during flight

    name : str, optional
        Identifier such as the scientific name
    """

    body_mass: float
    wing_span: float
    wing_area: float
    fat_mass: float
    order: Order = Order.PASSERINE
    muscle_mass: float = 0.0
    name: Optional[str] = None

    @property
    def fat_fraction(self) -> float:
        """Fat mass as a fraction of all-up mass."""
        return self.fat_mass / self.body_mass

    @property
    def fat_free_mass(self) -> float:
        """Mass left once all fat is burned (kg)."""
        return self.body_mass - self.fat_mass

    @property
    def aspect_ratio(self) -> float:
        """Wing aspect ratio (B²/S)."""
        return self.wing_span ** 2 / self.wing_area

    def validate(self):
        """
        Check the record before simulation.

        Raises:
        ------
        InvalidInputError
            If a measurement is missing, non-finite or out of range,
            or the order is not recognized.
        """
        errors = []

        for label, value in (
            ("Body mass", self.body_mass),
            ("Wing span", self.wing_span),
            ("Wing area", self.wing_area),
            ("Fat mass", self.fat_mass),
            ("Muscle mass", self.muscle_mass),
        ):
            if (
                not isinstance(value, numbers.Real)
                or isinstance(value, bool)
                or not math.isfinite(value)
            ):
                errors.append(f"{label} must be a finite number")

        if errors:
            raise InvalidInputError(self._describe("; ".join(errors)))

        if self.body_mass <= 0:
            errors.append("Body mass must be positive")
        if self.wing_span <= 0:
            errors.append("Wing span must be positive")
        if self.wing_area <= 0:
            errors.append("Wing area must be positive")
        if self.fat_mass <= 0:
            errors.append("Fat mass must be positive")
        elif self.fat_mass >= self.body_mass:
            errors.append("Fat mass must be less than body mass")
        if self.muscle_mass < 0:
            errors.append("Muscle mass cannot be negative")
        if not isinstance(self.order, Order):
            errors.append(f"Unrecognized order: {self.order!r}")

        if errors:
            raise InvalidInputError(self._describe("; ".join(errors)))

    def _describe(self, message: str) -> str:
        if self.name:
            return f"{self.name}: {message}"
        return message
