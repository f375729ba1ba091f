"""
Column Matching
===============

Locates the measurement columns of a bird table by name, so tables from
different sources ("Empty.mass", "body_mass", "allMass", ...) can be read
without renaming.

Column names are compared after lower-casing and removing every
non-alphanumeric character.
"""

import re
import warnings
from typing import Dict, List

import pandas as pd

from ..flight_simulator.bird import InvalidInputError, Order


# =============================================================================
# Column Patterns
# =============================================================================

# Field name -> pattern on the normalized column name
COLUMN_PATTERNS = {
    "name": r"name$",
    "body_mass": r"^(allup|all|body|empty|total)?mass$",
    "wing_span": r"^(wing)?span$",
    "fat_mass": r"^fat(mass)?$",
    "muscle_mass": r"^(flight)?muscle(mass)?$",
    "order": r"^(order|ordo|taxon|taxa)$",
    "wing_area": r"^(wing)?area$",
}

REQUIRED_COLUMNS = ("body_mass", "wing_span", "fat_mass", "order", "wing_area")


def normalize_column_name(column) -> str:
    """Lower-case a column name and strip separators."""
    return re.sub(r"[^a-z0-9]", "", str(column).lower())


def match_columns(data: pd.DataFrame) -> Dict[str, str]:
    """
    Map each known field to its column in a bird table.

    Parameters:
    ----------
    data : pd.DataFrame
        Bird table, one bird per row

    Returns:
    -------
    dict
        Field name -> column label. "name" and "muscle_mass" are only
        present when the table has them.

    Raises:
    ------
    TypeError
        If data is not a DataFrame.

    InvalidInputError
        If a field matches more than one column, a required column is
        missing, or the order column holds codes other than 1 and 2.

    Warns:
    -----
    UserWarning
        If the table has no muscle mass column.
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError(
            f"Bird data must be a pandas DataFrame, got {type(data).__name__}"
        )

    normalized = {column: normalize_column_name(column) for column in data.columns}
    matches: Dict[str, str] = {}
    ambiguous = set()
    errors: List[str] = []

    for field_name, pattern in COLUMN_PATTERNS.items():
        found = [c for c, norm in normalized.items() if re.search(pattern, norm)]
        if len(found) > 1:
            ambiguous.add(field_name)
            errors.append(
                f"Multiple columns match {field_name}: "
                f"{', '.join(str(c) for c in found)}"
            )
        elif found:
            matches[field_name] = found[0]

    missing = [
        f for f in REQUIRED_COLUMNS if f not in matches and f not in ambiguous
    ]
    if missing:
        errors.append(f"Missing column(s): {', '.join(missing)}")

    if errors:
        raise InvalidInputError("; ".join(errors))

    bad_orders = set()
    for value in data[matches["order"]].dropna().unique():
        try:
            Order.parse(value)
        except InvalidInputError:
            bad_orders.add(str(value))
    if bad_orders:
        raise InvalidInputError(
            f"Order column must hold 1 (passerine) or 2 (non-passerine), "
            f"found: {', '.join(sorted(bad_orders))}"
        )

    if "muscle_mass" not in matches:
        warnings.warn(
            "No muscle mass column; muscle mass is taken as a fixed "
            "fraction of body mass",
            UserWarning,
            stacklevel=2,
        )

    return matches
