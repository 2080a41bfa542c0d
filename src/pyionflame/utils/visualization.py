"""
Visualization tools for PyIonFlame solutions
"""
import numpy as np
import matplotlib.pyplot as plt
from typing import List, Optional

from .export import FlameProfile


class FlameVisualizer:
    """
    Plots of extracted flame profiles
    """
    def __init__(self):
        self.fig = None
        self.history: List[dict] = []

    def save_state(self, profile: FlameProfile, e_field: float, gap_voltage: float):
        """Keep a profile for comparison plots"""
        self.history.append({
            'eField': e_field,
            'gapVoltage': gap_voltage,
            'profile': profile,
        })

    def plot_profile(self, profile: FlameProfile, path: Optional[str] = None,
                     title: str = 'Flame Structure'):
        """
        Plot temperature, velocity and electric field

        Args:
            profile: Extracted flame profile
            path: Save the figure here instead of keeping it open
            title: Figure title
        """
        x = profile.grid * 1000  # Convert to mm

        self.fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 12), sharex=True)
        self.fig.suptitle(title)

        ax1.plot(x, profile.T, 'r-', label='Temperature')
        ax1.set_ylabel('Temperature [K]')
        ax1.legend()
        ax1.grid(True)

        ax2.plot(x, profile.velocity, 'b-', label='Velocity')
        ax2.set_ylabel('Velocity [m/s]')
        ax2.legend()
        ax2.grid(True)

        ax3.plot(x, profile.eField, 'g-', label='Electric field')
        ax3.set_xlabel('Position [mm]')
        ax3.set_ylabel('Electric field [V/m]')
        ax3.legend()
        ax3.grid(True)

        plt.tight_layout()
        if path is not None:
            self.fig.savefig(path)
            plt.close(self.fig)
        return self.fig

    def plot_gap_voltage(self, path: Optional[str] = None):
        """Gap voltage against applied field over the saved states"""
        E = np.array([h['eField'] for h in self.history])
        V = np.array([h['gapVoltage'] for h in self.history])
        order = np.argsort(E)
        ok = np.isfinite(V[order])

        fig, ax = plt.subplots(figsize=(8, 6))
        ax.plot(E[order][ok], V[order][ok], 'ko-')
        ax.set_xlabel('Electric field [V/m]')
        ax.set_ylabel('Gap voltage [V]')
        ax.grid(True)
        plt.tight_layout()
        if path is not None:
            fig.savefig(path)
            plt.close(fig)
        return fig
