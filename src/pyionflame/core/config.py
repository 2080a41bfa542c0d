"""
Run configuration and the per-run context that wires the engines together.
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass
class FlameConfig:
    """Configuration for a field-coupled free flame run"""
    mechanism: str = "gri30_ion.yaml"
    phase: str = "gas"
    transport_model: str = "ionized-gas"
    fuel: str = "CH4"
    oxidizer: str = "O2:0.21,N2:0.79"
    T_in: float = 300.0  # [K]
    pressure: float = 101325.0  # [Pa]
    u_in: float = 0.3  # [m/s]

    # Initial grid and guess
    grid_points: int = 6
    width: float = 0.1  # [m]
    guess_locations: Tuple[float, ...] = (0.0, 0.3, 0.7, 1.0)

    # Refinement criteria on the flow domain
    ratio: float = 10.0
    slope: float = 0.08
    curve: float = 0.1
    prune: float = 0.0

    refine_grid: bool = True
    loglevel: int = 1
    output_dir: str = "."

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "FlameConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {unknown}")
        values = {k: v for k, v in options.items() if k in known}
        if "guess_locations" in values:
            values["guess_locations"] = tuple(values["guess_locations"])
        return cls(**values)


@dataclass
class RunContext:
    """
    Everything one run needs, constructed explicitly and passed by reference.

    Factories are called once per run so that no gas object, grid or solver
    is shared between independent (phi, field) runs.
    """
    config: FlameConfig
    gas_factory: Callable[[FlameConfig], Any]
    transport_factory: Callable[[FlameConfig], Any]
    solver_factory: Callable[[FlameConfig], Any]
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def cantera(cls, config: FlameConfig) -> "RunContext":
        """Context backed by the Cantera chemistry, transport and Sim1D engines."""
        from ..solvers.cantera_backend import (
            CanteraFlameSolver, CanteraGas, CanteraTransport
        )
        return cls(
            config=config,
            gas_factory=CanteraGas.from_config,
            transport_factory=CanteraTransport.from_config,
            solver_factory=CanteraFlameSolver.from_config,
        )

    def new_gas(self):
        gas = self.gas_factory(self.config)
        gas.initialize()
        return gas

    def new_transport(self):
        transport = self.transport_factory(self.config)
        transport.initialize()
        return transport

    def new_solver(self):
        return self.solver_factory(self.config)
