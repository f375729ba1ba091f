"""
birdrange - Main Package
========================

Flight range estimation for migrating birds from morphological
measurements.

This package provides modules for:
- Flight Simulation (flight_simulator): time-marching range simulation
  under the constant muscle mass criterion
- Batch Analysis (batch_analyzer): many birds at once, ordered results
- Bird Data (bird_data): tabular input and column matching
- Breguet Range (breguet): closed-form range for comparison

Author: birdrange Team
"""

import logging

__version__ = "0.1.0"
__author__ = "birdrange Team"

logging.getLogger(__name__).addHandler(logging.NullHandler())
