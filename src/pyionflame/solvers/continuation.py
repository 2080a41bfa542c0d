"""
Staged continuation of a freely propagating ion flame.

A free flame is an eigenvalue problem in the mass flux, so one interior
temperature is pinned first. The flame is then converged with the energy
equation and no applied field, and that solution is the starting point for
the field-coupled solve.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..core.base import NonlinearBVPSolver
from ..core.exceptions import ContractViolation, SolverError
from ..core.grid import RefineCriteria
from ..core.stage import (
    STAGE_TRANSITIONS, STATE_TRANSITIONS, ControllerState, SolveStage, advance
)
from ..core.state import MixtureState
from ..utils.export import FlameProfile, extract_profile
from .domains import DomainSet
from .initial_guess import InitialGuess, anchor_location

logger = logging.getLogger(__name__)


@dataclass
class ContinuationResult:
    """Outcome of one (phi, field) run"""
    profile: FlameProfile
    e_field: float
    gap_voltage: float
    T_fixed: float
    state: ControllerState
    failure: Optional[str] = None
    z_fixed: Optional[float] = None

    @property
    def converged(self) -> bool:
        return self.failure is None and not math.isnan(self.gap_voltage)


class ContinuationController:
    """
    Drives the BVP solver through the anchor, energy-only and field-coupled
    stages, then reads back the profiles.
    """
    def __init__(self, solver: NonlinearBVPSolver, domains: DomainSet,
                 mixture: MixtureState, criteria: Optional[RefineCriteria] = None,
                 loglevel: int = 1, refine_grid: bool = True,
                 guess: Optional[InitialGuess] = None):
        self.solver = solver
        self.domains = domains
        self.mixture = mixture
        self.criteria = criteria or RefineCriteria()
        self.criteria.validate()
        self.loglevel = loglevel
        self.refine_grid = refine_grid
        self.guess = guess

        self.state = ControllerState.CREATED
        self.stage = SolveStage.CREATED
        self.T_fixed: Optional[float] = None
        self.z_fixed: Optional[float] = None
        self.gap_voltage: Optional[float] = None
        self.e_field = 0.0
        self.failure: Optional[str] = None

    def _advance(self, target: ControllerState):
        self.state = advance(self.state, target, STATE_TRANSITIONS)

    def _enter_stage(self, stage: SolveStage):
        self.stage = advance(self.stage, stage, STAGE_TRANSITIONS)
        self.solver.set_solving_stage(stage.value)

    def _solve(self):
        self.solver.solve(self.loglevel, self.refine_grid)
        self.domains.grid.update(self.solver.grid())

    def anchor(self) -> float:
        """
        Pin the midpoint temperature to fix the flame position.

        With an initial guess, the position where the guess first reaches
        the pinned temperature is recorded; it must lie inside the domain.
        """
        if self.solver.fixed_temperature is not None:
            raise ContractViolation(
                "A fixed temperature is already set",
                {"T_fixed": self.solver.fixed_temperature}
            )
        T_fixed = self.mixture.T_mid
        if self.guess is not None:
            self.z_fixed = anchor_location(self.guess, self.domains.grid, T_fixed)
        self.solver.set_fixed_temperature(T_fixed)
        self.T_fixed = T_fixed
        self._advance(ControllerState.ANCHORED)
        if self.z_fixed is None:
            logger.info(f"Fixed temperature {T_fixed:.2f} K")
        else:
            logger.info(f"Fixed temperature {T_fixed:.2f} K at z = {self.z_fixed:.6f} m")
        return T_fixed

    def solve_energy_only(self):
        """Stage 1: energy equation on, zero applied field. Failures propagate."""
        if self.state is not ControllerState.ANCHORED:
            raise ContractViolation(
                f"Energy-only solve requires an anchored flame, state is {self.state.name}"
            )
        c = self.criteria
        self.solver.set_refine_criteria(self.domains.flow_index, c.ratio, c.slope,
                                        c.curve, c.prune)
        self.solver.enable_energy()
        self.solver.enable_electric_field()
        self._enter_stage(SolveStage.ENERGY_ONLY)
        if self.loglevel > 0:
            self.solver.show()

        self._solve()
        self._advance(ControllerState.STAGE1_CONVERGED)
        logger.info(f"Stage 1 converged on {self.solver.n_points()} points, "
                    f"flame speed {self.solver.work_value(self.domains.flow_index, 'velocity', 0):.6f} m/s")

    def solve_field_coupled(self, e_field: float) -> float:
        """
        Stage 2: continue from the stage 1 solution with the field applied.

        A ``SolverError`` here is recorded as a NaN gap voltage.
        """
        if self.state is not ControllerState.STAGE1_CONVERGED:
            raise ContractViolation(
                f"Field-coupled solve requires a converged stage 1, state is {self.state.name}"
            )
        self.e_field = e_field
        self.domains.inlet.e_field = e_field
        try:
            self.solver.set_inlet_field(e_field)
            self._enter_stage(SolveStage.FIELD_COUPLED)
            self._solve()
            self.gap_voltage = self.solver.gap_voltage()
        except SolverError as err:
            logger.error(str(err))
            logger.error(f"Field-coupled solve failed at E = {e_field}; "
                         f"gap voltage recorded as NaN")
            self.failure = str(err)
            self.gap_voltage = math.nan
            self.domains.grid.update(self.solver.grid())
            self._advance(ControllerState.STAGE2_FAILED)
        else:
            self._advance(ControllerState.STAGE2_CONVERGED)
        logger.info(f"Electric Field: {e_field} Gap voltage: {self.gap_voltage}")
        return self.gap_voltage

    def extract(self) -> FlameProfile:
        """Read back the profiles the flow domain currently holds"""
        profile = extract_profile(self.solver, self.domains.flow_index)
        self._advance(ControllerState.EXTRACTED)
        return profile

    def run(self, e_field: float) -> ContinuationResult:
        self.anchor()
        self.solve_energy_only()
        self.solve_field_coupled(e_field)
        profile = self.extract()
        return ContinuationResult(
            profile=profile,
            e_field=e_field,
            gap_voltage=self.gap_voltage,
            T_fixed=self.T_fixed,
            state=self.state,
            failure=self.failure,
            z_fixed=self.z_fixed,
        )
