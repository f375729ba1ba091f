"""
Flight Trace Plotting Module
============================

Diagnostic plots for simulated flights recorded with record_trace=True.

Plot Types Available:
--------------------
- Flight profile: body mass, airspeed and chemical power against distance
- Speed control comparison: two traces of the same bird overlaid
- Fat sweep: range against fat load

Usage:
-----
    from birdrange.flight_simulator import FlightSimulator, SimulatorConfig
    from birdrange.flight_simulator.plotting import FlightPlotter

    result = FlightSimulator(SimulatorConfig(record_trace=True)).run(bird)
    fig = FlightPlotter().plot_flight_profile(result)
    fig.savefig("profile.png")
"""

from typing import Optional, Tuple, List

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from .simulator import FlightResult


class FlightPlotter:
    """
    Flight trace visualization class.

    Example:
    -------
        plotter = FlightPlotter()
        plotter.plot_flight_profile(result)
        plt.show()
    """

    DEFAULT_FIGURE_SIZE = (10, 8)

    def plot_flight_profile(
        self,
        result: FlightResult,
        figsize: Optional[Tuple[int, int]] = None
    ) -> Figure:
        """
        Plot body mass, airspeed and chemical power against distance.

        Parameters:
        ----------
        result : FlightResult
            Result with a recorded trace

        figsize : tuple, optional
            Figure size

        Returns:
        -------
        Figure
            Matplotlib figure with three stacked axes
        """
        data = result.trace_arrays()
        distance_km = data["distance"] / 1000.0

        fig, (ax_mass, ax_speed, ax_power) = plt.subplots(
            3, 1, sharex=True, figsize=figsize or self.DEFAULT_FIGURE_SIZE
        )

        ax_mass.plot(distance_km, data["body_mass"] * 1000.0, linewidth=2)
        ax_mass.set_ylabel('Body mass (g)')
        ax_mass.grid(True, alpha=0.3)

        ax_speed.plot(distance_km, data["speed"], linewidth=2, color='tab:orange')
        ax_speed.set_ylabel('Airspeed (m/s)')
        ax_speed.grid(True, alpha=0.3)

        ax_power.plot(distance_km, data["chem_power"], label='Chemical', linewidth=2)
        ax_power.plot(distance_km, data["mech_power"], label='Mechanical', linewidth=2)
        ax_power.set_ylabel('Power (W)')
        ax_power.set_xlabel('Distance (km)')
        ax_power.legend(loc='upper right')
        ax_power.grid(True, alpha=0.3)

        title = result.bird_name or "Simulated flight"
        ax_mass.set_title(f'{title} - {result.speed_control.value}')

        fig.tight_layout()
        return fig

    def compare_speed_control(
        self,
        results: List[FlightResult],
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """Overlay airspeed against distance for several runs of one bird."""
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.DEFAULT_FIGURE_SIZE)
        else:
            fig = ax.get_figure()

        for result in results:
            data = result.trace_arrays()
            ax.plot(
                data["distance"] / 1000.0, data["speed"],
                label=f'{result.speed_control.value} ({result.range_km} km)',
                linewidth=2
            )

        ax.set_xlabel('Distance (km)')
        ax.set_ylabel('Airspeed (m/s)')
        ax.set_title('Speed Control Comparison')
        ax.legend(loc='upper right')
        ax.grid(True, alpha=0.3)

        return fig

    def plot_fat_sweep(
        self,
        results: List[FlightResult],
        fat_masses: List[float],
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """Plot range against fat load from FlightSimulator.sweep_fat_mass."""
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.DEFAULT_FIGURE_SIZE)
        else:
            fig = ax.get_figure()

        valid = [
            (fat * 1000.0, r.distance / 1000.0)
            for fat, r in zip(fat_masses, results) if r.valid
        ]
        if valid:
            x, y = zip(*valid)
            ax.plot(x, y, marker='o', linewidth=2)

        ax.set_xlabel('Fat mass (g)')
        ax.set_ylabel('Range (km)')
        ax.set_title('Range vs Fat Load')
        ax.grid(True, alpha=0.3)
        ax.set_ylim(0, None)

        return fig
