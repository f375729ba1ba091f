"""
Bird Data Module
================

Reads bird tables (one bird per row) and turns them into Bird records.

Recognized columns (case and separators ignored):
- name: "Scientific.name", "name", ...
- body_mass: "Empty.mass", "Body mass", "allMass", "mass"
- wing_span: "Wing.span", "wingSpan", "span"
- wing_area: "Wing.area", "area"
- fat_mass: "Fat.mass", "fat"
- muscle_mass: "muscleMass", "Muscle mass" (optional, warns if absent)
- order: "Order", "ordo", "taxon" (1 = passerine, 2 = non-passerine)

Usage:
------
    from birdrange.bird_data import read_birds_csv

    birds = read_birds_csv("birds.csv")
"""

from .columns import match_columns, normalize_column_name, COLUMN_PATTERNS, REQUIRED_COLUMNS
from .loader import birds_from_frame, read_birds_csv

__all__ = [
    "match_columns",
    "normalize_column_name",
    "COLUMN_PATTERNS",
    "REQUIRED_COLUMNS",
    "birds_from_frame",
    "read_birds_csv",
]
