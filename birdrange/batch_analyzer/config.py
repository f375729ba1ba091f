"""
Batch Analyzer Configuration Module
====================================

Configuration dataclasses for simulating many birds in one run, and the
per-bird result record.

Classes:
--------
- BatchLimits: Safety limits for batch processing
- BatchConfig: Configuration for a batch run
- BatchResult: Result for one bird of the batch

Constants:
----------
- DEFAULT_LIMITS: Default safety limits for batch processing
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
import os

from ..flight_simulator.config import SimulatorConfig
from ..flight_simulator.simulator import FlightResult


# =============================================================================
# Safety Limits
# =============================================================================

@dataclass
class BatchLimits:
    """
    Safety limits for batch processing.

    Attributes:
    ----------
    max_birds : int
        Maximum number of records in one batch

    max_workers : int
        Maximum number of concurrent workers

    update_interval : float
        Minimum seconds between progress updates
    """
    max_birds: int = 100_000
    max_workers: int = field(default_factory=lambda: min(os.cpu_count() or 4, 8))
    update_interval: float = 0.1


# Default limits instance
DEFAULT_LIMITS = BatchLimits()


# =============================================================================
# Result Dataclass
# =============================================================================

@dataclass
class BatchResult:
    """
    Result for one bird of a batch.

    Attributes:
    ----------
    index : int
        Position of the record in the input

    name : str, optional
        Bird identifier

    flight : FlightResult, optional
        Simulation outcome; None when the record was rejected

    breguet_range_km : float, optional
        Method 1 range, when requested and computable

    error_message : str
        Why the record was rejected or could not be simulated
    """
    index: int = 0
    name: Optional[str] = None
    flight: Optional[FlightResult] = None
    breguet_range_km: Optional[float] = None
    error_message: str = ""

    @property
    def valid(self) -> bool:
        """True when the bird flew until its fat was used up."""
        return self.flight is not None and self.flight.valid

    @property
    def range_km(self) -> Optional[float]:
        return self.flight.range_km if self.flight is not None else None

    def to_dict(self) -> dict:
        """Convert result to dictionary for export."""
        row = {"index": self.index, "name": self.name}
        if self.flight is not None:
            row.update(self.flight.to_dict())
            row["name"] = self.name
        else:
            row.update({
                "range_km": None,
                "distance_m": None,
                "step_count": 0,
                "termination": "invalid_input",
            })
        row["breguet_range_km"] = self.breguet_range_km
        row["error"] = self.error_message or row.get("error", "")
        return row


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class BatchConfig:
    """
    Configuration for a batch run.

    Attributes:
    ----------
    simulator : SimulatorConfig
        Constants and run settings shared by every bird

    include_breguet : bool
        Also compute the Method 1 range for comparison

    use_threads : bool
        Run birds in a thread pool; False runs them in order on the
        calling thread

    limits : BatchLimits
        Safety limits for processing
    """

    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)
    include_breguet: bool = False
    use_threads: bool = True
    limits: BatchLimits = field(default_factory=BatchLimits)

    def validate(self) -> Tuple[bool, str]:
        """
        Validate configuration parameters.

        Returns:
        -------
        Tuple[bool, str]
            (is_valid, error_message)
        """
        errors = []

        try:
            self.simulator.validate()
        except ValueError as e:
            errors.append(str(e))

        if self.limits.max_workers < 1:
            errors.append("At least one worker is required")
        if self.limits.max_birds < 1:
            errors.append("max_birds must be positive")
        if self.limits.update_interval < 0:
            errors.append("Update interval cannot be negative")

        if errors:
            return False, "; ".join(errors)
        return True, ""
