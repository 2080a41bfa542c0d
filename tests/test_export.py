"""
Tests for profile extraction and CSV export
"""
import math
import pytest
import numpy as np
from pyionflame.utils.export import (
    FlameProfile, GAP_VOLTAGE_HEADER, PROFILE_HEADER, SWEEP_HEADER, export_run,
    gap_voltage_from_field, output_names, read_profile_csv, write_gap_voltage_csv,
    write_profile_csv, write_sweep_csv
)


@pytest.fixture
def profile():
    x = np.linspace(0, 0.1, 5)
    return FlameProfile(
        grid=x,
        T=np.array([300.0, 300.0, 1250.0, 2200.0, 2200.0]),
        velocity=np.array([0.3, 0.3, 1.5, 2.2, 2.2]),
        E=np.zeros(5),
        eField=np.full(5, 50.0),
    )


def test_profile_lengths_checked():
    with pytest.raises(ValueError):
        FlameProfile(grid=np.zeros(3), T=np.zeros(3), velocity=np.zeros(2),
                     E=np.zeros(3), eField=np.zeros(3))


def test_profile_properties(profile):
    assert profile.n_points == 5
    assert profile.flame_speed == 0.3
    assert profile.peak_temperature == 2200.0
    assert profile.as_columns().shape == (5, 5)


def test_gap_voltage_from_field():
    x = np.linspace(0, 0.1, 11)
    assert gap_voltage_from_field(x, np.zeros(11)) == 0.0
    assert gap_voltage_from_field(x, np.full(11, 1000.0)) == pytest.approx(100.0)
    assert gap_voltage_from_field(x, 1000.0 * x / 0.1) == pytest.approx(50.0)


def test_output_names_deterministic():
    names = output_names(1.0, 0.0)
    assert names == output_names(1.0, 0.0)
    assert names["gap_voltage"] == "gapvoltage_phi1.000000_eField0.000000.csv"
    assert names["profile"] == "flamespeed_phi1.000000_eField0.000000.csv"
    assert names["solution"] == "flamespeed_phi1.000000_eField0.000000.yaml"


def test_write_profile_csv(tmp_path, profile):
    path = tmp_path / "profile.csv"
    write_profile_csv(str(path), profile)
    lines = path.read_text().splitlines()
    assert lines[0] == PROFILE_HEADER
    assert len(lines) == 6
    assert lines[1].split(", ")[1] == "3.000000000000e+02"

    loaded = read_profile_csv(str(path))
    np.testing.assert_allclose(loaded.T, profile.T)
    np.testing.assert_allclose(loaded.grid, profile.grid)


def test_write_gap_voltage_nan(tmp_path):
    """NaN marks a failed field-coupled solve"""
    path = tmp_path / "gap.csv"
    write_gap_voltage_csv(str(path), [(1000.0, math.nan)])
    lines = path.read_text().splitlines()
    assert lines[0] == GAP_VOLTAGE_HEADER
    data = np.loadtxt(str(path), delimiter=",", skiprows=1, ndmin=2)
    assert data[0, 0] == 1000.0
    assert np.isnan(data[0, 1])


def test_write_sweep_table(tmp_path):
    path = tmp_path / "gapvoltage_sweep.csv"
    write_sweep_csv(str(path), [(0.6, 0.0, 0.0), (0.6, 1000.0, math.nan), (1.0, 0.0, 1e-3)])
    assert path.read_text().splitlines()[0] == SWEEP_HEADER
    data = np.loadtxt(str(path), delimiter=",", skiprows=1, ndmin=2)
    assert data.shape == (3, 3)
    np.testing.assert_allclose(data[:, 0], [0.6, 0.6, 1.0])
    assert np.isnan(data[1, 2])


def test_export_run(tmp_path, profile):
    paths = export_run(str(tmp_path / "out"), 1.0, 0.0, 0.0, profile)
    assert set(paths) == {"gap_voltage", "profile"}
    for path in paths.values():
        assert (tmp_path / "out" / path.split("/")[-1]).exists()
