"""
PyIonFlame: freely propagating premixed ion flames under an applied electric field
"""
from importlib.metadata import version

__version__ = version("pyionflame")

from .core.base import (
    FlameComponent,
    EquationOfState,
    TransportModel,
    NonlinearBVPSolver
)
from .core.config import FlameConfig, RunContext
from .core.exceptions import FlameError, ChemistryError, SolverError, ContractViolation
from .core.stage import SolveStage, ControllerState
from .core.state import MixtureState, initialize_mixture
from .solvers.continuation import ContinuationController, ContinuationResult
from .flamespeed import run_flame, sweep
