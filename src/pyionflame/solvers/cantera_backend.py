"""
Cantera implementations of the chemistry, transport and BVP interfaces.

Cantera errors are translated here: thermochemistry failures become
``ChemistryError`` and Sim1D failures become ``SolverError``.
"""
import logging
from typing import Optional, Sequence

import cantera as ct
import numpy as np

from ..core.base import EquationOfState, NonlinearBVPSolver, TransportModel
from ..core.config import FlameConfig
from ..core.exceptions import ChemistryError, ContractViolation, SolverError
from ..utils.export import gap_voltage_from_field

logger = logging.getLogger(__name__)


class CanteraGas(EquationOfState):
    """Ideal gas mixture from a Cantera mechanism"""
    def __init__(self, config=None):
        super().__init__(config)
        self.solution: Optional[ct.Solution] = None

    @classmethod
    def from_config(cls, config: FlameConfig) -> "CanteraGas":
        return cls({"mechanism": config.mechanism, "phase": config.phase})

    def initialize(self) -> None:
        try:
            self.solution = ct.Solution(self._config["mechanism"],
                                        self._config.get("phase", "gas"))
        except ct.CanteraError as err:
            raise ChemistryError("loading mechanism", str(err),
                                 mechanism=self._config["mechanism"]) from err
        super().initialize()

    def _call(self, operation, func, *args):
        try:
            return func(*args)
        except ct.CanteraError as err:
            raise ChemistryError(operation, str(err)) from err

    def set_equivalence_ratio(self, phi, fuel, oxidizer):
        self._call("set_equivalence_ratio", self.solution.set_equivalence_ratio,
                   phi, fuel, oxidizer)

    def set_state_tp(self, T, P):
        def set_tp():
            self.solution.TP = T, P
        self._call("set_state_tp", set_tp)

    def mole_fractions(self):
        return self.solution.X.copy()

    def mass_fractions(self):
        return self.solution.Y.copy()

    def equilibrate(self, constraint="HP"):
        self._call(f"equilibrate({constraint})", self.solution.equilibrate, constraint)

    def density(self):
        return self.solution.density

    def temperature(self):
        return self.solution.T

    def species_name(self, k):
        return self.solution.species_name(k)

    def n_species(self):
        return self.solution.n_species


class CanteraTransport(TransportModel):
    """Selects the Cantera transport model used by the flow domain"""
    def __init__(self, config=None):
        super().__init__(config)
        self.model = self._config.get("model", "ionized-gas")

    @classmethod
    def from_config(cls, config: FlameConfig) -> "CanteraTransport":
        return cls({"model": config.transport_model})

    def initialize(self) -> None:
        super().initialize()

    def bind(self, gas: CanteraGas) -> None:
        try:
            gas.solution.transport_model = self.model
        except ct.CanteraError as err:
            raise ChemistryError("transport setup", str(err), model=self.model) from err


# (steady, transient) (rtol, atol) for the charged species, as used for
# stock ion flames
ION_TOLERANCES = {
    "HCO+": ((1e-5, 1e-16), (1e-5, 1e-18)),
    "H3O+": ((1e-5, 1e-13), (1e-5, 1e-15)),
    "E": ((1e-5, 1e-16), (1e-5, 1e-18)),
}


class CanteraFlameSolver(NonlinearBVPSolver):
    """
    Free flame on a Cantera ``FreeFlame`` container.

    The container's inlet, flow and outlet domains are configured from the
    ``DomainSet``; the container only supplies the flame-specific setup
    (default guess, grid bookkeeping) that a hand-built ``Sim1D`` lacks.
    """
    def __init__(self, config=None):
        super().__init__(config)
        self.sim: Optional[ct.FreeFlame] = None
        self.inlet = None
        self.flow = None
        self.outlet = None
        self._anchored = False
        self._field_capable = False
        self._stage = 0

    @classmethod
    def from_config(cls, config: FlameConfig) -> "CanteraFlameSolver":
        return cls({"loglevel": config.loglevel})

    def initialize(self) -> None:
        if self.sim is None:
            raise ContractViolation("Solver domains must be set up before use")
        super().initialize()

    def setup(self, domains) -> None:
        gas = domains.flow.gas.solution
        gas.TPX = domains.inlet.T, domains.flow.pressure, domains.inlet.X
        try:
            self.sim = ct.FreeFlame(gas, grid=domains.grid.x)
        except ct.CanteraError as err:
            raise SolverError("setup", str(err)) from err
        self.inlet = self.sim.inlet
        self.flow = self.sim.flame
        self.outlet = self.sim.outlet

        self.flow.P = domains.flow.pressure
        self.inlet.T = domains.inlet.T
        self.inlet.X = domains.inlet.X
        self.inlet.mdot = domains.inlet.mdot

        # Container default first; apply_initial_guess overwrites it afterwards
        self.sim.set_initial_guess()
        self._anchored = False
        self._set_ion_tolerances()
        self.initialize()

    def _set_ion_tolerances(self) -> None:
        names = self.flow.component_names
        steady = {k: v[0] for k, v in ION_TOLERANCES.items() if k in names}
        transient = {k: v[1] for k, v in ION_TOLERANCES.items() if k in names}
        if steady:
            self.flow.set_steady_tolerances(**steady)
            self.flow.set_transient_tolerances(**transient)

    def set_initial_guess(self, component: str, locations: Sequence[float],
                          values: Sequence[float]) -> None:
        self.flow.set_profile(component, list(locations), list(values))

    def set_fixed_temperature(self, T: float) -> None:
        self.sim.fixed_temperature = T
        self._anchored = True

    @property
    def fixed_temperature(self) -> Optional[float]:
        # The container picks its own anchor while guessing; only ours counts
        if not self._anchored:
            return None
        return self.sim.fixed_temperature

    def set_refine_criteria(self, domain, ratio, slope, curve, prune=0.0):
        if domain != self.sim.domain_index(self.flow):
            raise ContractViolation(
                f"Refinement applies to the flow domain, got domain {domain}"
            )
        self.sim.set_refine_criteria(ratio=ratio, slope=slope,
                                     curve=curve, prune=prune)

    def enable_energy(self):
        self.flow.energy_enabled = True

    def enable_electric_field(self):
        self._field_capable = "eField" in self.flow.component_names
        if not self._field_capable:
            logger.warning("Flow domain has no eField component; "
                           "the field-coupled stage solves without Poisson coupling")

    def set_solving_stage(self, stage: int):
        # Stage 1 keeps the Poisson equation off, stage 2 couples it
        self._stage = stage
        self.flow.electric_field_enabled = self._field_capable and stage >= 2

    def set_inlet_field(self, e_field: float):
        # Field-capable Cantera builds expose the inlet field directly
        if hasattr(self.inlet, "electric_field"):
            self.inlet.electric_field = e_field
        elif e_field != 0.0:
            logger.warning(
                f"Capability limit: this Cantera build has no inlet electric field "
                f"setter, eField = {e_field} is not imposed and the gap voltage "
                f"is recorded as NaN"
            )
            raise SolverError(
                "field-coupled stage",
                "this Cantera build cannot impose an inlet electric field",
                e_field=e_field
            )

    def solve(self, loglevel: int = 1, refine_grid: bool = True) -> None:
        try:
            self.sim.solve(loglevel=loglevel, refine_grid=refine_grid)
        except ct.CanteraError as err:
            try:
                self.sim.restore_steady_solution()
            except ct.CanteraError:
                logger.warning("No steady solution to restore after failed solve")
            raise SolverError(f"solving stage {self._stage}", str(err)) from err

    def work_value(self, domain: int, component: str, point: int) -> float:
        return self.sim.value(domain, component, point)

    def grid(self) -> np.ndarray:
        return np.array(self.flow.grid)

    def n_points(self) -> int:
        return self.flow.n_points

    def gap_voltage(self) -> float:
        index = self.sim.domain_index(self.flow)
        field = [self.sim.value(index, "eField", j) for j in range(self.flow.n_points)]
        return gap_voltage_from_field(self.flow.grid, field)

    def show(self) -> None:
        self.sim.show()

    def save(self, path, name, description, loglevel=1):
        self.sim.save(path, name=name, description=description, overwrite=True)
        if loglevel > 0:
            logger.info(f"Solution saved to {path}")
