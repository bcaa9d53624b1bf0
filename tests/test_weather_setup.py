import numpy as np
import pytest

from hpcminiapps.weather_physics import (
    HS,
    ID_DENS,
    ID_RHOT,
    ID_UMOM,
    ID_WMOM,
    NUM_VARS,
    P0,
    XLEN,
    ZLEN,
    DataSpec,
    hydro_const_theta,
)
from hpcminiapps.weather_setup import (
    Background,
    Config,
    hydrostatic_background,
    initial_state,
    partition,
)


def test_config_spacing_covers_domain():
    cfg = Config(nx_glob=80, nz_glob=40)
    assert cfg.dx() * cfg.nx_glob == pytest.approx(XLEN)
    assert cfg.dz() * cfg.nz_glob == pytest.approx(ZLEN)


def test_config_time_step_value():
    cfg = Config(nx_glob=100, nz_glob=50)
    assert cfg.time_step() == pytest.approx(2.0 / 3.0)


def test_config_time_step_limited_by_smaller_spacing():
    fine_x = Config(nx_glob=400, nz_glob=50)
    fine_z = Config(nx_glob=100, nz_glob=200)
    assert fine_x.time_step() == pytest.approx(fine_z.time_step())
    assert fine_x.time_step() < Config(nx_glob=100, nz_glob=50).time_step()


def test_config_accepts_spec_number():
    cfg = Config(data_spec=3)
    assert cfg.data_spec is DataSpec.GRAVITY_WAVES


@pytest.mark.parametrize(
    "kwargs",
    [
        {"nx_glob": 0},
        {"nz_glob": -1},
        {"sim_time": -1.0},
        {"output_freq": 0.0},
        {"data_spec": 4},
    ],
)
def test_config_rejects_invalid(kwargs):
    with pytest.raises(ValueError):
        Config(**kwargs)


def test_partition_single_rank():
    assert partition(100, 1, 0) == (0, 100)


@pytest.mark.parametrize("nx_glob,nranks", [(100, 3), (7, 4), (10, 10), (13, 5)])
def test_partition_is_contiguous_cover(nx_glob, nranks):
    parts = [partition(nx_glob, nranks, r) for r in range(nranks)]
    assert parts[0][0] == 0
    for (b0, n0), (b1, _) in zip(parts, parts[1:]):
        assert b0 + n0 == b1
    assert sum(n for _, n in parts) == nx_glob


@pytest.mark.parametrize("args", [(0, 1, 0), (10, 0, 0), (10, 2, 2), (10, 2, -1)])
def test_partition_rejects_invalid(args):
    with pytest.raises(ValueError):
        partition(*args)


def test_background_shapes():
    cfg = Config(nx_glob=20, nz_glob=10)
    bg = hydrostatic_background(cfg)
    assert isinstance(bg, Background)
    assert bg.dens_cell.shape == (10 + 2 * HS,)
    assert bg.dens_theta_cell.shape == (10 + 2 * HS,)
    assert bg.dens_int.shape == (11,)
    assert bg.pressure_int.shape == (11,)


def test_background_surface_pressure_neutral():
    bg = hydrostatic_background(Config(nx_glob=20, nz_glob=10, data_spec=DataSpec.THERMAL))
    assert bg.pressure_int[0] == pytest.approx(P0, rel=1e-9)


def test_background_cell_matches_profile():
    cfg = Config(nx_glob=20, nz_glob=10, data_spec=DataSpec.COLLISION)
    bg = hydrostatic_background(cfg)
    z = (np.arange(10 + 2 * HS) - HS + 0.5) * cfg.dz()
    r, t = hydro_const_theta(z)
    np.testing.assert_allclose(bg.dens_cell, r, rtol=1e-12)
    np.testing.assert_allclose(bg.dens_theta_cell, r * t, rtol=1e-12)


def test_background_density_decreases_with_height():
    bg = hydrostatic_background(Config(nx_glob=20, nz_glob=10, data_spec=DataSpec.GRAVITY_WAVES))
    dens = [float(v) for v in bg.dens_int]
    pressure = [float(v) for v in bg.pressure_int]
    assert dens == sorted(dens, reverse=True)
    assert pressure == sorted(pressure, reverse=True)
    assert len(set(dens)) == len(dens)
    assert len(set(pressure)) == len(pressure)
    assert dens[0] > dens[-1]
    assert pressure[0] > pressure[-1]


def test_initial_state_injection_is_balanced():
    cfg = Config(nx_glob=20, nz_glob=10, data_spec=DataSpec.INJECTION)
    state = initial_state(cfg, 0, 20)
    assert state.shape == (NUM_VARS, 10 + 2 * HS, 20 + 2 * HS)
    assert np.all(np.abs(state) < 1e-9)


def test_initial_state_gravity_waves_momentum():
    cfg = Config(nx_glob=20, nz_glob=10, data_spec=DataSpec.GRAVITY_WAVES)
    state = initial_state(cfg, 0, 20)
    bg = hydrostatic_background(cfg)
    assert np.all(state[ID_DENS] == 0.0)
    assert np.all(state[ID_WMOM] == 0.0)
    u = state[ID_UMOM] / bg.dens_cell[:, np.newaxis]
    np.testing.assert_allclose(u, 15.0, rtol=1e-3)


def test_initial_state_thermal_symmetric():
    cfg = Config(nx_glob=40, nz_glob=20, data_spec=DataSpec.THERMAL)
    state = initial_state(cfg, 0, 40)
    np.testing.assert_allclose(state, state[:, :, ::-1], atol=1e-9)
    assert state[ID_RHOT].max() > 0.0
    assert state[ID_RHOT].min() >= -1e-12


def test_initial_state_partitions_agree():
    cfg = Config(nx_glob=30, nz_glob=15, data_spec=DataSpec.COLLISION)
    full = initial_state(cfg, 0, 30)
    pieces = []
    for rank in range(3):
        i_beg, nx = partition(30, 3, rank)
        pieces.append(initial_state(cfg, i_beg, nx)[:, :, HS:HS + nx])
    np.testing.assert_allclose(np.concatenate(pieces, axis=2), full[:, :, HS:HS + 30], atol=1e-9)


def test_initial_state_rejects_empty():
    with pytest.raises(ValueError):
        initial_state(Config(), 0, 0)