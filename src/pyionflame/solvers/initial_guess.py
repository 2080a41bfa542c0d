"""
Initial grid and piecewise-linear initial guess for the free flame.

Every component ramps from its unburned inflow value to its equilibrium
burned value between fractional positions 0.3 and 0.7 of the domain.
"""
import numpy as np
from typing import Dict, Iterator, Sequence, Tuple

from ..core.exceptions import ContractViolation
from ..core.grid import OneDimGrid
from ..core.state import MixtureState

GUESS_LOCATIONS = (0.0, 0.3, 0.7, 1.0)


def build_grid(n_points: int = 6, width: float = 0.1) -> OneDimGrid:
    """Uniform grid of ``n_points`` on [0, width]"""
    if n_points < 2:
        raise ContractViolation(f"Initial grid needs at least 2 points, got {n_points}")
    if not width > 0:
        raise ContractViolation(f"Domain width must be positive, got {width}")
    dz = width / (n_points - 1)
    return OneDimGrid(np.arange(n_points) * dz)


class InitialGuess:
    """
    Component profiles given at fractional locations along the domain.
    """
    def __init__(self, locations: Sequence[float] = GUESS_LOCATIONS):
        locations = np.asarray(locations, dtype=float)
        if len(locations) < 2 or not np.all(np.diff(locations) > 0):
            raise ContractViolation("Guess locations must be strictly increasing")
        if locations[0] != 0.0 or locations[-1] != 1.0:
            raise ContractViolation("Guess locations must span [0, 1]")
        self.locations = locations
        self.values: Dict[str, np.ndarray] = {}

    def set_profile(self, component: str, values: Sequence[float]):
        values = np.asarray(values, dtype=float)
        if values.shape != self.locations.shape:
            raise ContractViolation(
                f"Profile for '{component}' has {len(values)} values for "
                f"{len(self.locations)} locations"
            )
        self.values[component] = values

    def evaluate(self, component: str, grid: OneDimGrid) -> np.ndarray:
        """Piecewise-linear profile of ``component`` on the grid points"""
        return np.interp(grid.normalized(), self.locations, self.values[component])

    def items(self) -> Iterator[Tuple[str, np.ndarray]]:
        return iter(self.values.items())

    def __contains__(self, component: str) -> bool:
        return component in self.values

    def __len__(self):
        return len(self.values)


def build_initial_guess(mixture: MixtureState,
                        locations: Sequence[float] = GUESS_LOCATIONS) -> InitialGuess:
    """Step-like guess from the unburned to the equilibrium state"""
    guess = InitialGuess(locations)

    def ramp(start, end):
        # Inflow value on the upstream half, burned value downstream
        return np.where(guess.locations < 0.5, start, end)

    guess.set_profile("velocity", ramp(mixture.u_in, mixture.u_out))
    guess.set_profile("T", ramp(mixture.T_in, mixture.T_ad))
    for k, name in enumerate(mixture.species_names):
        guess.set_profile(name, ramp(mixture.Y_in[k], mixture.Y_out[k]))
    return guess


def apply_initial_guess(solver, guess: InitialGuess):
    """Hand every component profile to the BVP solver"""
    for component, values in guess.items():
        solver.set_initial_guess(component, guess.locations, values)


def anchor_location(guess: InitialGuess, grid: OneDimGrid, T_fixed: float) -> float:
    """
    First position where the guessed temperature reaches ``T_fixed``.

    Interpolates linearly between the bracketing grid points of the guess.
    """
    T = guess.evaluate("T", grid)
    above = np.nonzero(T >= T_fixed)[0]
    if len(above) == 0 or above[0] == 0:
        raise ContractViolation(
            f"Fixed temperature {T_fixed} is not inside the guessed profile",
            {"T_min": float(T.min()), "T_max": float(T.max())}
        )
    j = above[0]
    frac = (T_fixed - T[j - 1]) / (T[j] - T[j - 1])
    return float(grid.x[j - 1] + frac * (grid.x[j] - grid.x[j - 1]))
