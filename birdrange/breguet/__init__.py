"""
Breguet Range Module
====================

Closed-form range estimate (Method 1) for comparison with the
time-marching simulation. The simulator never calls this module.
"""

from .method_1 import (
    breguet_range,
    lift_drag_ratio,
    drag_factor,
    max_range_speed_ratio,
    generate_drag_table,
    interpolate_drag_factor,
    metabolic_power_ratio,
)

__all__ = [
    "breguet_range",
    "lift_drag_ratio",
    "drag_factor",
    "max_range_speed_ratio",
    "generate_drag_table",
    "interpolate_drag_factor",
    "metabolic_power_ratio",
]
