"""
End-to-end runs on the stub engines
"""
import math
import os
import pytest
import numpy as np
from pyionflame.core.exceptions import ChemistryError, SolverError
from pyionflame.flamespeed import run_flame, sweep
from pyionflame.utils.export import output_names, read_profile_csv

from conftest import make_context


def read_gap_voltage(path):
    return np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)


def test_stoichiometric_zero_field(stub_context, config):
    result = run_flame(stub_context, 1.0, 0.0)
    assert result.converged
    assert result.z_fixed == pytest.approx(0.05)
    assert result.gap_voltage == pytest.approx(0.0, abs=1e-12)

    names = output_names(1.0, 0.0)
    for name in names.values():
        assert os.path.exists(os.path.join(config.output_dir, name))

    profile = read_profile_csv(os.path.join(config.output_dir, names["profile"]))
    T = profile.T
    peak = int(np.argmax(T))
    assert np.all(np.diff(T[:peak + 1]) >= 0)
    assert T[-1] == pytest.approx(result.profile.peak_temperature)


def test_lean_field_failure_still_exports(config):
    """A failed field-coupled solve is exported with NaN and the stage 1 profile"""
    context = make_context(config, fail_stage=2)
    result = run_flame(context, 0.6, 1000.0)
    assert math.isnan(result.gap_voltage)

    names = output_names(0.6, 1000.0)
    gap = read_gap_voltage(os.path.join(config.output_dir, names["gap_voltage"]))
    assert gap.shape == (1, 2)
    assert gap[0, 0] == 1000.0
    assert np.isnan(gap[0, 1])

    profile = read_profile_csv(os.path.join(config.output_dir, names["profile"]))
    assert profile.n_points == 11
    assert profile.T[-1] > profile.T[0]


def test_lean_field_converged(stub_context, config):
    result = run_flame(stub_context, 0.6, 1000.0)
    assert np.isfinite(result.gap_voltage)


def test_stage_one_failure_is_fatal(config):
    context = make_context(config, fail_stage=1)
    with pytest.raises(SolverError):
        run_flame(context, 1.0, 0.0)
    assert not os.listdir(config.output_dir)


def test_chemistry_failure_is_fatal(config):
    context = make_context(config, fail_equilibrate=True)
    with pytest.raises(ChemistryError):
        run_flame(context, 1.0, 0.0)


def test_rerun_is_identical(config, tmp_path):
    """Same inputs give byte-identical tables"""
    outputs = []
    for run in ("a", "b"):
        out = str(tmp_path / run)
        run_flame(make_context(config), 1.0, 500.0, output_dir=out)
        names = output_names(1.0, 500.0)
        outputs.append([open(os.path.join(out, names[key])).read()
                        for key in ("gap_voltage", "profile")])
    assert outputs[0] == outputs[1]


def test_runs_use_fresh_engines(stub_context):
    run_flame(stub_context, 1.0, 0.0, export=False)
    run_flame(stub_context, 0.8, 0.0, export=False)
    first, second = stub_context.extras["solvers"]
    assert first is not second
    assert first.domains.grid is not second.domains.grid


def test_sweep(config):
    context = make_context(config)
    rows = sweep(context, [0.8, 1.0], [0.0, 500.0])
    assert [(phi, e) for phi, e, _ in rows] == [(0.8, 0.0), (0.8, 500.0),
                                                (1.0, 0.0), (1.0, 500.0)]
    assert len(context.extras["solvers"]) == 4
    assert rows[1][2] == pytest.approx(50.0)

    assert not os.path.exists(os.path.join(config.output_dir, "gapvoltage_phi0.800000_sweep.csv"))
    table = read_gap_voltage(os.path.join(config.output_dir, "gapvoltage_sweep.csv"))
    assert table.shape == (4, 3)
    np.testing.assert_allclose(table[:, 0], [0.8, 0.8, 1.0, 1.0])
    np.testing.assert_allclose(table[:, 1], [0.0, 500.0, 0.0, 500.0])
    np.testing.assert_allclose(table[:, 2], [row[2] for row in rows])
