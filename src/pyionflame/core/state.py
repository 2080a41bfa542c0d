"""
Unburned inflow and adiabatic equilibrium states of the premixed gas.
"""
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .base import EquationOfState
from .exceptions import ChemistryError, ContractViolation

logger = logging.getLogger(__name__)

FRACTION_TOL = 1e-9


@dataclass(frozen=True)
class MixtureState:
    """Inflow and burned-gas state for one equivalence ratio"""
    phi: float
    T_in: float  # [K]
    pressure: float  # [Pa]
    u_in: float  # [m/s]
    species_names: Tuple[str, ...]
    X_in: np.ndarray  # Unburned mole fractions
    Y_in: np.ndarray  # Unburned mass fractions
    rho_in: float  # [kg/m^3]
    Y_out: np.ndarray  # Equilibrium mass fractions
    T_ad: float  # Adiabatic flame temperature [K]
    rho_out: float  # [kg/m^3]

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    @property
    def mdot(self) -> float:
        """Inlet mass flux [kg/m^2/s]"""
        return self.u_in * self.rho_in

    @property
    def u_out(self) -> float:
        """Burned-gas velocity from mass conservation [m/s]"""
        return self.mdot / self.rho_out

    @property
    def T_mid(self) -> float:
        return 0.5 * (self.T_in + self.T_ad)

    def validate(self):
        """Check fractions are non-negative and sum to one"""
        for label, frac in (("X_in", self.X_in), ("Y_in", self.Y_in),
                            ("Y_out", self.Y_out)):
            if len(frac) != self.n_species:
                raise ChemistryError(
                    "validation", f"{label} has {len(frac)} entries for "
                    f"{self.n_species} species"
                )
            if np.any(frac < -FRACTION_TOL):
                raise ChemistryError("validation", f"{label} has negative entries")
            total = float(np.sum(frac))
            if abs(total - 1.0) > FRACTION_TOL:
                raise ChemistryError(
                    "validation", f"{label} sums to {total:.12f}", total=total
                )


def initialize_mixture(gas: EquationOfState, phi: float, fuel: str, oxidizer: str,
                       T_in: float, pressure: float, u_in: float) -> MixtureState:
    """
    Compute the inflow state and its constant-(H, P) equilibrium.

    Errors raised by ``gas`` propagate unchanged; the run is aborted by the
    caller.

    Args:
        gas: Chemistry engine, left at the equilibrium state on return
        phi: Equivalence ratio
        fuel: Fuel composition
        oxidizer: Oxidizer composition
        T_in: Inflow temperature [K]
        pressure: Pressure [Pa]
        u_in: Inflow velocity [m/s]
    """
    if not phi > 0:
        raise ContractViolation(f"Equivalence ratio must be positive, got {phi}")

    gas.set_equivalence_ratio(phi, fuel, oxidizer)
    gas.set_state_tp(T_in, pressure)
    X_in = np.array(gas.mole_fractions(), dtype=float)
    Y_in = np.array(gas.mass_fractions(), dtype=float)
    rho_in = gas.density()

    gas.equilibrate("HP")
    Y_out = np.array(gas.mass_fractions(), dtype=float)
    rho_out = gas.density()
    T_ad = gas.temperature()
    logger.info(f"phi = {phi}, Tad = {T_ad}")

    state = MixtureState(
        phi=phi,
        T_in=T_in,
        pressure=pressure,
        u_in=u_in,
        species_names=tuple(gas.species_name(k) for k in range(gas.n_species())),
        X_in=X_in,
        Y_in=Y_in,
        rho_in=rho_in,
        Y_out=Y_out,
        T_ad=T_ad,
        rho_out=rho_out,
    )
    state.validate()
    return state
