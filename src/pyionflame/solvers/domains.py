"""
Inlet, reacting-flow and outlet domains over one shared grid.
"""
import numpy as np
from dataclasses import dataclass
from typing import Tuple

from ..core.base import EquationOfState, TransportModel
from ..core.exceptions import ContractViolation
from ..core.grid import OneDimGrid
from ..core.state import MixtureState


@dataclass
class Inlet:
    """Left boundary: fixed composition, mass flux and temperature"""
    X: np.ndarray
    mdot: float  # [kg/m^2/s]
    T: float  # [K]
    e_field: float = 0.0  # Applied field [V/m]
    name: str = "inlet"


@dataclass
class FlowInterior:
    """Reacting flow between the boundaries; holds engine references only"""
    gas: EquationOfState
    transport: TransportModel
    pressure: float  # [Pa]
    grid: OneDimGrid
    name: str = "flame"


@dataclass
class Outlet:
    """Right boundary: zero-gradient outflow"""
    name: str = "outlet"


class DomainSet:
    """
    Ordered inlet, flow and outlet domains sharing one grid.
    """
    inlet_index = 0
    flow_index = 1
    outlet_index = 2

    def __init__(self, domains: Tuple, grid: OneDimGrid):
        self.domains = tuple(domains)
        self.grid = grid
        self.validate()

    def validate(self):
        expected = (Inlet, FlowInterior, Outlet)
        if len(self.domains) != len(expected):
            raise ContractViolation(
                f"Expected {len(expected)} domains, got {len(self.domains)}"
            )
        for index, (domain, kind) in enumerate(zip(self.domains, expected)):
            if not isinstance(domain, kind):
                raise ContractViolation(
                    f"Domain {index} must be {kind.__name__}, "
                    f"got {type(domain).__name__}"
                )
        if self.flow.grid is not self.grid:
            raise ContractViolation("Flow domain is not on the shared grid")

    @property
    def inlet(self) -> Inlet:
        return self.domains[self.inlet_index]

    @property
    def flow(self) -> FlowInterior:
        return self.domains[self.flow_index]

    @property
    def outlet(self) -> Outlet:
        return self.domains[self.outlet_index]

    def __iter__(self):
        return iter(self.domains)

    def __len__(self):
        return len(self.domains)


def assemble_domains(mixture: MixtureState, grid: OneDimGrid, gas: EquationOfState,
                     transport: TransportModel, e_field: float = 0.0) -> DomainSet:
    """Build the three domains; the transport model is bound to ``gas``."""
    transport.bind(gas)
    inlet = Inlet(X=mixture.X_in, mdot=mixture.mdot, T=mixture.T_in, e_field=e_field)
    flow = FlowInterior(gas=gas, transport=transport, pressure=mixture.pressure, grid=grid)
    return DomainSet((inlet, flow, Outlet()), grid)
