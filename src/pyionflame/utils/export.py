"""
Profile extraction and CSV export of flame solutions.
"""
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

import numpy as np
from scipy.integrate import trapezoid

logger = logging.getLogger(__name__)

PROFILE_HEADER = "  Grid,   Temperature,   Uvec,   E,    eField"
GAP_VOLTAGE_HEADER = "eField, gapVoltage"
SWEEP_HEADER = "phi, eField, gapVoltage"
SWEEP_TABLE = "gapvoltage_sweep.csv"
NUMBER_FORMAT = "%16.12e"


@dataclass
class FlameProfile:
    """Flow-domain profiles, one entry per grid point"""
    grid: np.ndarray  # [m]
    T: np.ndarray  # [K]
    velocity: np.ndarray  # [m/s]
    E: np.ndarray  # Electron mass fraction
    eField: np.ndarray  # [V/m]

    def __post_init__(self):
        n = len(self.grid)
        for name in ("T", "velocity", "E", "eField"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"Profile '{name}' has {len(getattr(self, name))} "
                                 f"points, grid has {n}")

    @property
    def n_points(self) -> int:
        return len(self.grid)

    @property
    def flame_speed(self) -> float:
        """Velocity of the unburned gas at the inlet [m/s]"""
        return float(self.velocity[0])

    @property
    def peak_temperature(self) -> float:
        return float(np.max(self.T))

    def as_columns(self) -> np.ndarray:
        return np.column_stack([self.grid, self.T, self.velocity, self.E, self.eField])


def extract_profile(solver, flow_index: int = 1) -> FlameProfile:
    """Read temperature, electrons, field and velocity at every grid point"""
    n_points = solver.n_points()
    columns = {"T": [], "E": [], "eField": [], "velocity": []}
    for n in range(n_points):
        for component, values in columns.items():
            values.append(solver.work_value(flow_index, component, n))
    return FlameProfile(
        grid=np.array(solver.grid(), dtype=float),
        T=np.array(columns["T"]),
        velocity=np.array(columns["velocity"]),
        E=np.array(columns["E"]),
        eField=np.array(columns["eField"]),
    )


def gap_voltage_from_field(grid, e_field) -> float:
    """Potential difference across the domain, the integral of the field"""
    return float(trapezoid(e_field, grid))


def output_names(phi: float, e_field: float) -> Dict[str, str]:
    """Deterministic file names for one (phi, field) run"""
    tag = f"phi{phi:.6f}_eField{e_field:.6f}"
    return {
        "gap_voltage": f"gapvoltage_{tag}.csv",
        "profile": f"flamespeed_{tag}.csv",
        "solution": f"flamespeed_{tag}.yaml",
    }


def write_gap_voltage_csv(path: str, rows: Iterable[Tuple[float, float]]):
    """One row per field value tried; NaN marks a failed field-coupled solve"""
    data = np.array(list(rows), dtype=float).reshape(-1, 2)
    np.savetxt(path, data, fmt=NUMBER_FORMAT, delimiter=", ",
               header=GAP_VOLTAGE_HEADER, comments="")
    logger.info(f"Wrote {len(data)} gap voltage rows to {path}")


def write_sweep_csv(path: str, rows: Iterable[Tuple[float, float, float]]):
    """All (phi, field, gap voltage) rows of a sweep in one table"""
    data = np.array(list(rows), dtype=float).reshape(-1, 3)
    np.savetxt(path, data, fmt=NUMBER_FORMAT, delimiter=", ",
               header=SWEEP_HEADER, comments="")
    logger.info(f"Wrote {len(data)} sweep rows to {path}")


def write_profile_csv(path: str, profile: FlameProfile):
    np.savetxt(path, profile.as_columns(), fmt=NUMBER_FORMAT, delimiter=", ",
               header=PROFILE_HEADER, comments="")
    logger.info(f"Wrote {profile.n_points} grid points to {path}")


def read_profile_csv(path: str) -> FlameProfile:
    """Load a profile table written by ``write_profile_csv``"""
    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return FlameProfile(grid=data[:, 0], T=data[:, 1], velocity=data[:, 2],
                        E=data[:, 3], eField=data[:, 4])


def export_run(output_dir: str, phi: float, e_field: float, gap_voltage: float,
               profile: FlameProfile, solver=None, loglevel: int = 1) -> Dict[str, str]:
    """Write both tables and, when a solver is given, the solution snapshot"""
    os.makedirs(output_dir, exist_ok=True)
    paths = {key: os.path.join(output_dir, name)
             for key, name in output_names(phi, e_field).items()}
    write_gap_voltage_csv(paths["gap_voltage"], [(e_field, gap_voltage)])
    write_profile_csv(paths["profile"], profile)
    if solver is not None:
        solver.save(paths["solution"], "sol", "Solutions", loglevel)
    else:
        del paths["solution"]
    return paths
