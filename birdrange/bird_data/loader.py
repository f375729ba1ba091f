"""
Bird Table Loading
==================

Builds Bird records from a pandas DataFrame or a CSV file.

Table-level problems (ambiguous or missing columns, unknown order codes)
raise immediately. Row-level problems such as a zero fat mass are left
in the records and reported per bird when they are simulated, so one bad
row does not stop a batch.
"""

import math
from pathlib import Path
from typing import List, Union

import pandas as pd

from ..flight_simulator.bird import Bird, Order
from ..flight_simulator.config import DEFAULT_MUSCLE_FRACTION
from .columns import match_columns


def _as_float(value) -> float:
    if value is None:
        return math.nan
    # unparseable cells become NaN and fail validation for that bird only
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return math.nan
    return float(number)


def birds_from_frame(
    data: pd.DataFrame,
    muscle_fraction: float = DEFAULT_MUSCLE_FRACTION
) -> List[Bird]:
    """
    Convert a bird table into Bird records, one per row, in row order.

    Parameters:
    ----------
    data : pd.DataFrame
        Bird table. Masses in kg, span in m, area in m².

    muscle_fraction : float
        Muscle mass as a fraction of body mass, used when the table has
        no muscle mass column

    Returns:
    -------
    List[Bird]
        Unvalidated records

    Raises:
    ------
    TypeError, InvalidInputError
        From match_columns()
    """
    columns = match_columns(data)
    birds = []

    for _, row in data.iterrows():
        body_mass = _as_float(row[columns["body_mass"]])

        if "muscle_mass" in columns:
            muscle_mass = _as_float(row[columns["muscle_mass"]])
        else:
            muscle_mass = body_mass * muscle_fraction

        name = None
        if "name" in columns and not pd.isna(row[columns["name"]]):
            name = str(row[columns["name"]])

        order_value = row[columns["order"]]
        order = None if pd.isna(order_value) else Order.parse(order_value)

        birds.append(Bird(
            body_mass=body_mass,
            wing_span=_as_float(row[columns["wing_span"]]),
            wing_area=_as_float(row[columns["wing_area"]]),
            fat_mass=_as_float(row[columns["fat_mass"]]),
            order=order,
            muscle_mass=muscle_mass,
            name=name,
        ))

    return birds


def read_birds_csv(
    filepath: Union[str, Path],
    muscle_fraction: float = DEFAULT_MUSCLE_FRACTION,
    **read_csv_kwargs
) -> List[Bird]:
    """
    Read Bird records from a CSV file.

    Extra keyword arguments (sep, decimal, comment, ...) are passed to
    pandas.read_csv.
    """
    data = pd.read_csv(filepath, **read_csv_kwargs)
    return birds_from_frame(data, muscle_fraction=muscle_fraction)
