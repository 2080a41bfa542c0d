"""
One field-coupled free flame per (equivalence ratio, field) pair.
"""
import logging
import math
import os
from typing import Iterable, List, Optional, Tuple

from .core.config import RunContext
from .core.grid import RefineCriteria
from .core.state import initialize_mixture
from .solvers.continuation import ContinuationController, ContinuationResult
from .solvers.domains import assemble_domains
from .solvers.initial_guess import apply_initial_guess, build_grid, build_initial_guess
from .utils.export import SWEEP_TABLE, export_run, write_sweep_csv

logger = logging.getLogger(__name__)


def run_flame(context: RunContext, phi: float, e_field: float,
              output_dir: Optional[str] = None, export: bool = True) -> ContinuationResult:
    """
    Initialize, assemble, guess, solve both stages and export.

    ``ChemistryError`` and a stage 1 ``SolverError`` propagate to the caller.
    A stage 2 failure returns a result with a NaN gap voltage.
    """
    config = context.config
    gas = context.new_gas()
    transport = context.new_transport()
    mixture = initialize_mixture(gas, phi, config.fuel, config.oxidizer,
                                 config.T_in, config.pressure, config.u_in)

    grid = build_grid(config.grid_points, config.width)
    domains = assemble_domains(mixture, grid, gas, transport)
    solver = context.new_solver()
    solver.setup(domains)

    guess = build_initial_guess(mixture, config.guess_locations)
    apply_initial_guess(solver, guess)

    criteria = RefineCriteria(config.ratio, config.slope, config.curve, config.prune)
    controller = ContinuationController(solver, domains, mixture, criteria,
                                        loglevel=config.loglevel,
                                        refine_grid=config.refine_grid,
                                        guess=guess)
    result = controller.run(e_field)
    logger.info(f"Flame speed for phi={phi} is {result.profile.flame_speed} m/s")

    if export:
        export_run(output_dir or config.output_dir, phi, e_field, result.gap_voltage,
                   result.profile, solver, config.loglevel)
    return result


def sweep(context: RunContext, phis: Iterable[float], fields: Iterable[float],
          output_dir: Optional[str] = None,
          export: bool = True) -> List[Tuple[float, float, float]]:
    """
    Independent runs over every (phi, field) pair, each on fresh domains.

    Returns ``(phi, field, gap_voltage)`` rows; with ``export`` each run's
    tables are written, plus one gap voltage table covering the whole sweep.
    """
    fields = list(fields)
    output_dir = output_dir or context.config.output_dir
    rows = []
    for phi in phis:
        phi_rows = []
        for e_field in fields:
            result = run_flame(context, phi, e_field, output_dir, export)
            phi_rows.append((e_field, result.gap_voltage))
            rows.append((phi, e_field, result.gap_voltage))
        failed = sum(math.isnan(v) for _, v in phi_rows)
        if failed:
            logger.warning(f"phi={phi}: {failed} of {len(phi_rows)} field values failed")
    if export:
        os.makedirs(output_dir, exist_ok=True)
        write_sweep_csv(os.path.join(output_dir, SWEEP_TABLE), rows)
    return rows
