"""
Batch Analyzer Module
=====================

This module runs the flight range simulation over many birds, such as
every row of a field data table.

Classes:
--------
- BatchConfig: Configuration for batch analysis
- BatchResult: Result for one bird
- BatchSolver: Main batch processing engine

Usage:
------
    from birdrange.batch_analyzer import BatchSolver, BatchConfig

    solver = BatchSolver(BatchConfig(include_breguet=True))
    results = solver.run_batch(birds, progress_callback=my_callback)
    print(solver.get_summary(results))
"""

from .config import BatchConfig, BatchResult, BatchLimits, DEFAULT_LIMITS
from .batch_solver import BatchSolver, BatchProgress

__all__ = [
    "BatchConfig",
    "BatchResult",
    "BatchLimits",
    "BatchSolver",
    "BatchProgress",
    "DEFAULT_LIMITS",
]
