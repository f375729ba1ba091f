"""
Batch Solver Module
===================

Runs the flight range simulation for every bird of a table.

The BatchSolver class handles:
- Running independent birds with a thread pool
- Returning results in input order, whatever order workers finish in
- Reporting invalid records per bird without stopping the batch
- Progress callbacks and cancellation
- Ranking, summarizing and exporting results

Usage:
------
    from birdrange.batch_analyzer import BatchSolver, BatchConfig
    from birdrange.bird_data import read_birds_csv

    birds = read_birds_csv("birds.csv")
    solver = BatchSolver(BatchConfig(include_breguet=True))

    def on_progress(progress):
        print(f"{progress.percent_complete:.0f}%")

    results = solver.run_batch(birds, progress_callback=on_progress)
    frame = solver.results_to_frame(results)
"""

import logging
import time
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, List, Callable, Dict, Any, Sequence

import pandas as pd

from .config import BatchConfig, BatchResult
from ..breguet import breguet_range
from ..flight_simulator.bird import Bird, InvalidInputError
from ..flight_simulator.simulator import FlightSimulator, TerminationReason


logger = logging.getLogger(__name__)


# =============================================================================
# Progress Tracking
# =============================================================================

@dataclass
class BatchProgress:
    """Progress information for batch processing."""
    current: int = 0
    total: int = 0
    current_bird: str = ""
    elapsed_seconds: float = 0.0
    estimated_remaining_seconds: float = 0.0
    results_valid: int = 0
    results_invalid: int = 0
    is_running: bool = False
    is_cancelled: bool = False

    @property
    def percent_complete(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100.0

    @property
    def rate_per_second(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.current / self.elapsed_seconds


# =============================================================================
# Batch Solver Class
# =============================================================================

class BatchSolver:
    """
    Batch processing engine for flight range simulation.

    Each bird owns its own simulation state, so birds run concurrently
    with no shared mutable data; the simulator itself is stateless.

    Attributes:
    ----------
    config : BatchConfig
        Configuration for this batch run

    progress : BatchProgress
        Current progress information

    Example:
    -------
        solver = BatchSolver(BatchConfig())
        results = solver.run_batch(birds)

        for r in solver.rank_by_range(results, top_n=5):
            print(r.name, r.range_km)
    """

    def __init__(self, config: Optional[BatchConfig] = None):
        """
        Initialize the BatchSolver.

        Parameters:
        ----------
        config : BatchConfig, optional
            Configuration for batch analysis

        Raises:
        ------
        ValueError
            If the configuration is invalid
        """
        self.config = config if config is not None else BatchConfig()

        is_valid, error = self.config.validate()
        if not is_valid:
            raise ValueError(f"Invalid configuration: {error}")

        self.progress = BatchProgress()
        self._simulator = FlightSimulator(self.config.simulator)

        # Threading control
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Single Calculation
    # -------------------------------------------------------------------------

    def _calculate_single(self, index: int, bird: Bird) -> BatchResult:
        """
        Simulate one bird.

        Invalid records are reported on the result rather than raised.
        """
        result = BatchResult(index=index, name=bird.name)

        try:
            result.flight = self._simulator.run(bird)
        except InvalidInputError as e:
            result.error_message = str(e)
            return result

        if not result.flight.valid:
            result.error_message = result.flight.error_message

        if self.config.include_breguet:
            try:
                result.breguet_range_km = breguet_range(
                    bird, self.config.simulator.constants
                )
            except (InvalidInputError, ArithmeticError) as e:
                logger.debug("Breguet range unavailable for record %d: %s", index, e)
                note = f"Breguet: {e}"
                result.error_message = (
                    f"{result.error_message}; {note}" if result.error_message else note
                )

        return result

    # -------------------------------------------------------------------------
    # Batch Execution
    # -------------------------------------------------------------------------

    def run_batch(
        self,
        birds: Sequence[Bird],
        progress_callback: Optional[Callable[[BatchProgress], None]] = None
    ) -> List[BatchResult]:
        """
        Run the simulation for every bird.

        Parameters:
        ----------
        birds : sequence of Bird
            Records to simulate

        progress_callback : Callable, optional
            Function called with BatchProgress updates

        Returns:
        -------
        List[BatchResult]
            One result per bird, in input order. Birds skipped by a
            cancellation carry the error message "Cancelled".

        Raises:
        ------
        ValueError
            If the batch exceeds the configured limit
        """
        total = len(birds)
        if total > self.config.limits.max_birds:
            raise ValueError(
                f"Batch size ({total:,}) exceeds limit "
                f"({self.config.limits.max_birds:,})."
            )

        # Reset state
        self._cancel_event.clear()
        self.progress = BatchProgress(total=total, is_running=True)

        results: List[Optional[BatchResult]] = [None] * total
        start_time = time.time()
        last_update_time = 0.0

        logger.info("Starting batch of %d birds", total)

        def record(result: BatchResult):
            nonlocal last_update_time
            results[result.index] = result

            with self._lock:
                self.progress.current += 1
                self.progress.elapsed_seconds = time.time() - start_time
                if result.valid:
                    self.progress.results_valid += 1
                else:
                    self.progress.results_invalid += 1
                self.progress.current_bird = result.name or f"#{result.index}"

                if self.progress.current > 0 and self.progress.elapsed_seconds > 0:
                    rate = self.progress.current / self.progress.elapsed_seconds
                    remaining = self.progress.total - self.progress.current
                    self.progress.estimated_remaining_seconds = remaining / rate

            # Rate-limit progress callbacks
            current_time = time.time()
            if current_time - last_update_time >= self.config.limits.update_interval:
                last_update_time = current_time
                if progress_callback:
                    progress_callback(self.progress)

        try:
            if self.config.use_threads and total > 1:
                self._run_threaded(birds, record)
            else:
                for index, bird in enumerate(birds):
                    if self._cancel_event.is_set():
                        self.progress.is_cancelled = True
                        break
                    try:
                        result = self._calculate_single(index, bird)
                    except Exception as e:
                        logger.warning("Record %d failed: %s", index, e)
                        result = BatchResult(
                            index=index,
                            name=bird.name,
                            error_message=str(e),
                        )
                    record(result)
        finally:
            self.progress.is_running = False
            self.progress.elapsed_seconds = time.time() - start_time

            # Final callback
            if progress_callback:
                progress_callback(self.progress)

        for index, result in enumerate(results):
            if result is None:
                results[index] = BatchResult(
                    index=index,
                    name=birds[index].name,
                    error_message="Cancelled",
                )

        logger.info(
            "Batch finished: %d valid, %d without range, %.2f s",
            self.progress.results_valid, self.progress.results_invalid,
            self.progress.elapsed_seconds
        )
        return results

    def _run_threaded(
        self,
        birds: Sequence[Bird],
        record: Callable[[BatchResult], None]
    ):
        """Run birds on a thread pool, passing each result to record()."""
        num_workers = min(self.config.limits.max_workers, len(birds))

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            future_to_index = {
                executor.submit(self._calculate_single, index, bird): index
                for index, bird in enumerate(birds)
            }

            for future in as_completed(future_to_index):
                if self._cancel_event.is_set():
                    self.progress.is_cancelled = True
                    for pending in future_to_index:
                        pending.cancel()
                    break

                index = future_to_index[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.warning("Record %d failed: %s", index, e)
                    result = BatchResult(
                        index=index,
                        name=birds[index].name,
                        error_message=str(e),
                    )
                record(result)

    def cancel(self):
        """Request cancellation of running batch."""
        self._cancel_event.set()

    # -------------------------------------------------------------------------
    # Result Analysis
    # -------------------------------------------------------------------------

    def rank_by_range(
        self,
        results: List[BatchResult],
        top_n: int = 10
    ) -> List[BatchResult]:
        """
        Return the valid results with the longest range.

        Parameters:
        ----------
        results : List[BatchResult]
            Results from run_batch()

        top_n : int
            Number of results to return

        Returns:
        -------
        List[BatchResult]
            Top N results, longest range first
        """
        valid = [r for r in results if r.valid]
        valid.sort(key=lambda r: r.flight.distance, reverse=True)
        return valid[:top_n]

    def get_summary(self, results: List[BatchResult]) -> Dict[str, Any]:
        """
        Count outcomes and describe the ranges of a batch.

        Returns:
        -------
        dict
            Counts per outcome and range statistics (km) of valid birds
        """
        ranges = [r.range_km for r in results if r.valid]
        reasons = [r.flight.termination_reason for r in results if r.flight is not None]

        return {
            "total": len(results),
            "exhausted": len(ranges),
            "infeasible": reasons.count(TerminationReason.INFEASIBLE),
            "max_steps_reached": reasons.count(TerminationReason.MAX_STEPS_REACHED),
            "invalid_input": sum(1 for r in results if r.flight is None),
            "min_range_km": min(ranges) if ranges else None,
            "max_range_km": max(ranges) if ranges else None,
            "mean_range_km": round(sum(ranges) / len(ranges), 1) if ranges else None,
        }

    def results_to_frame(self, results: List[BatchResult]) -> pd.DataFrame:
        """Convert results to a DataFrame, one row per bird in input order."""
        return pd.DataFrame([r.to_dict() for r in results])

    def export_results_csv(
        self,
        results: List[BatchResult],
        filepath: str,
        valid_only: bool = False
    ):
        """
        Export results to CSV file.

        Parameters:
        ----------
        results : List[BatchResult]
            Results to export

        filepath : str
            Output file path

        valid_only : bool
            Only export birds with a range
        """
        filtered = results if not valid_only else [r for r in results if r.valid]
        self.results_to_frame(filtered).to_csv(filepath, index=False)
