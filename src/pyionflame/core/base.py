"""
Base classes and engine interfaces for PyIonFlame components.

The continuation logic only talks to the chemistry, transport and
boundary-value engines through these narrow interfaces, so any of them can be
replaced by a stub.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import numpy as np


class FlameComponent(ABC):
    """
    Base class for all PyIonFlame components providing common functionality
    and enforcing interface requirements.
    """
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config or {}
        self._initialized = False

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the component with current configuration."""
        self._initialized = True

    def is_initialized(self) -> bool:
        """Check if component has been initialized."""
        return self._initialized


class EquationOfState(FlameComponent):
    """Chemistry engine: composition, thermodynamic state and equilibrium."""

    @abstractmethod
    def set_equivalence_ratio(self, phi: float, fuel: str, oxidizer: str) -> None:
        pass

    @abstractmethod
    def set_state_tp(self, T: float, P: float) -> None:
        pass

    @abstractmethod
    def mole_fractions(self) -> np.ndarray:
        pass

    @abstractmethod
    def mass_fractions(self) -> np.ndarray:
        pass

    @abstractmethod
    def equilibrate(self, constraint: str = "HP") -> None:
        """Equilibrate holding the two properties named by ``constraint``."""
        pass

    @abstractmethod
    def density(self) -> float:
        pass

    @abstractmethod
    def temperature(self) -> float:
        pass

    @abstractmethod
    def species_name(self, k: int) -> str:
        pass

    @abstractmethod
    def n_species(self) -> int:
        pass


class TransportModel(FlameComponent):
    """Transport engine bound to a mixture; only the BVP solver queries it."""

    model: str = "ionized-gas"

    @abstractmethod
    def bind(self, gas: EquationOfState) -> None:
        """Attach the model to ``gas``."""
        pass


class NonlinearBVPSolver(FlameComponent):
    """
    Damped-Newton boundary value solver over an ordered set of domains.

    Domain indices follow the assembled domain set: 0 inlet, 1 flow, 2 outlet.
    Implementations raise ``SolverError`` when a solve does not converge.
    """

    @abstractmethod
    def setup(self, domains) -> None:
        """Build the engine-side domains from a validated ``DomainSet``."""
        pass

    @abstractmethod
    def set_initial_guess(self, component: str, locations: Sequence[float],
                          values: Sequence[float]) -> None:
        pass

    @abstractmethod
    def set_fixed_temperature(self, T: float) -> None:
        pass

    @property
    @abstractmethod
    def fixed_temperature(self) -> Optional[float]:
        pass

    @abstractmethod
    def set_refine_criteria(self, domain: int, ratio: float, slope: float,
                            curve: float, prune: float = 0.0) -> None:
        pass

    @abstractmethod
    def enable_energy(self) -> None:
        pass

    @abstractmethod
    def enable_electric_field(self) -> None:
        pass

    @abstractmethod
    def set_solving_stage(self, stage: int) -> None:
        pass

    @abstractmethod
    def set_inlet_field(self, e_field: float) -> None:
        pass

    @abstractmethod
    def solve(self, loglevel: int = 1, refine_grid: bool = True) -> None:
        pass

    @abstractmethod
    def work_value(self, domain: int, component: str, point: int) -> float:
        pass

    @abstractmethod
    def grid(self) -> np.ndarray:
        """Current coordinates of the flow domain."""
        pass

    @abstractmethod
    def n_points(self) -> int:
        pass

    @abstractmethod
    def gap_voltage(self) -> float:
        """Potential difference between the two flow-domain boundaries."""
        pass

    def show(self) -> None:
        """Print the current solution; engines without a display skip it."""
        pass

    @abstractmethod
    def save(self, path: str, name: str, description: str, loglevel: int = 1) -> None:
        pass
