"""
PyTest configuration and fixtures
"""
import pytest
import numpy as np

from pyionflame.core.base import EquationOfState, NonlinearBVPSolver, TransportModel
from pyionflame.core.config import FlameConfig, RunContext
from pyionflame.core.exceptions import ChemistryError, SolverError
from pyionflame.utils.export import gap_voltage_from_field

GAS_CONSTANT = 8314.46261815324  # [J/kmol/K]


class StubGas(EquationOfState):
    """
    Methane-air with one-step complete combustion standing in for a mechanism.
    """
    names = ("CH4", "O2", "N2", "CO2", "H2O", "E")
    weights = np.array([16.043, 31.998, 28.014, 44.009, 18.015, 5.4858e-4])

    def __init__(self, config=None):
        super().__init__(config)
        self.fail_equilibrate = self._config.get("fail_equilibrate", False)
        self.moles = np.zeros(len(self.names))
        self.T = 300.0
        self.P = 101325.0
        self.phi = None

    def initialize(self):
        super().initialize()

    def set_equivalence_ratio(self, phi, fuel, oxidizer):
        self.phi = phi
        self.moles = np.array([phi, 2.0, 7.52, 0.0, 0.0, 0.0])

    def set_state_tp(self, T, P):
        self.T, self.P = T, P

    def mole_fractions(self):
        return self.moles / self.moles.sum()

    def mass_fractions(self):
        m = self.moles * self.weights
        return m / m.sum()

    def equilibrate(self, constraint="HP"):
        if self.fail_equilibrate:
            raise ChemistryError(f"equilibrate({constraint})", "did not converge")
        burned = min(self.moles[0], 0.5 * self.moles[1])
        self.moles = self.moles + burned * np.array([-1.0, -2.0, 0.0, 1.0, 2.0, 0.0])
        self.T = self.T + 1900.0 * burned / max(self.phi, 1.0)

    def density(self):
        W = np.dot(self.mole_fractions(), self.weights)
        return self.P * W / (GAS_CONSTANT * self.T)

    def temperature(self):
        return self.T

    def species_name(self, k):
        return self.names[k]

    def n_species(self):
        return len(self.names)


class StubTransport(TransportModel):
    def initialize(self):
        super().initialize()

    def bind(self, gas):
        self.gas = gas


class StubSolver(NonlinearBVPSolver):
    """
    Records every call and returns canned profiles built from the initial
    guess. ``fail_stage`` makes the solve at that solving stage raise.
    """
    def __init__(self, config=None):
        super().__init__(config)
        self.fail_stage = self._config.get("fail_stage")
        self.calls = []
        self.guess = {}
        self.x = None
        self.domains = None
        self.stage = 0
        self.e_field = 0.0
        self._T_fixed = None
        self.profiles = {}

    def initialize(self):
        super().initialize()

    def setup(self, domains):
        self.calls.append(("setup",))
        self.domains = domains
        self.x = domains.grid.x.copy()
        self.initialize()

    def set_initial_guess(self, component, locations, values):
        self.guess[component] = (np.asarray(locations), np.asarray(values))

    def set_fixed_temperature(self, T):
        self.calls.append(("set_fixed_temperature", T))
        self._T_fixed = T

    @property
    def fixed_temperature(self):
        return self._T_fixed

    def set_refine_criteria(self, domain, ratio, slope, curve, prune=0.0):
        self.calls.append(("set_refine_criteria", domain, ratio, slope, curve, prune))

    def enable_energy(self):
        self.calls.append(("enable_energy",))

    def enable_electric_field(self):
        self.calls.append(("enable_electric_field",))

    def set_solving_stage(self, stage):
        self.calls.append(("set_solving_stage", stage))
        self.stage = stage

    def set_inlet_field(self, e_field):
        self.calls.append(("set_inlet_field", e_field))
        self.e_field = e_field

    def _profile(self, component):
        locations, values = self.guess[component]
        z = (self.x - self.x[0]) / (self.x[-1] - self.x[0])
        return np.interp(z, locations, values)

    def solve(self, loglevel=1, refine_grid=True):
        self.calls.append(("solve", self.stage, loglevel, refine_grid))
        if self.fail_stage == self.stage:
            raise SolverError(f"solving stage {self.stage}", "Newton iteration failed")
        if refine_grid:
            mid = 0.5 * (self.x[1:] + self.x[:-1])
            self.x = np.sort(np.concatenate([self.x, mid]))
        n = len(self.x)
        z = (self.x - self.x[0]) / (self.x[-1] - self.x[0])
        self.profiles = {
            "T": self._profile("T"),
            "velocity": self._profile("velocity"),
            "E": 1e-9 * np.sin(np.pi * z),
            "eField": self.e_field * np.ones(n) if self.stage == 2 else np.zeros(n),
        }

    def work_value(self, domain, component, point):
        return float(self.profiles[component][point])

    def grid(self):
        return self.x.copy()

    def n_points(self):
        return len(self.x)

    def gap_voltage(self):
        return gap_voltage_from_field(self.x, self.profiles["eField"])

    def save(self, path, name, description, loglevel=1):
        self.calls.append(("save", path, name, description))
        with open(path, "w") as f:
            f.write(f"{name}: {description}\n")


@pytest.fixture
def stub_gas():
    gas = StubGas()
    gas.initialize()
    return gas


@pytest.fixture
def stub_transport():
    return StubTransport()


@pytest.fixture
def config(tmp_path):
    return FlameConfig(output_dir=str(tmp_path), loglevel=0)


def make_context(config, fail_stage=None, fail_equilibrate=False):
    """Context wired to the stub engines; solvers are kept in ``extras``"""
    context = RunContext(
        config=config,
        gas_factory=lambda c: StubGas({"fail_equilibrate": fail_equilibrate}),
        transport_factory=lambda c: StubTransport(),
        solver_factory=None,
    )
    context.extras["solvers"] = []

    def solver_factory(c):
        solver = StubSolver({"fail_stage": fail_stage})
        context.extras["solvers"].append(solver)
        return solver

    context.solver_factory = solver_factory
    return context


@pytest.fixture
def stub_context(config):
    return make_context(config)
