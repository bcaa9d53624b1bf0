"""Run configuration, domain decomposition and initial model fields."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .weather_physics import (
    C0,
    CFL,
    GAMMA,
    HS,
    ID_DENS,
    ID_RHOT,
    ID_UMOM,
    ID_WMOM,
    MAX_SPEED,
    NUM_VARS,
    QPOINTS,
    QWEIGHTS,
    XLEN,
    ZLEN,
    DataSpec,
    sample,
)


@dataclass(frozen=True)
class Config:
    """Global grid size, run length, output interval and initial condition."""

    nx_glob: int = 100
    nz_glob: int = 50
    sim_time: float = 1000.0
    output_freq: float = 10.0
    data_spec: DataSpec = DataSpec.THERMAL

    def __post_init__(self) -> None:
        if self.nx_glob < 1 or self.nz_glob < 1:
            raise ValueError("grid must have at least one cell in each direction")
        if self.sim_time < 0:
            raise ValueError("simulation time must not be negative")
        if self.output_freq <= 0:
            raise ValueError("output frequency must be positive")
        try:
            spec = DataSpec(self.data_spec)
        except ValueError:
            raise ValueError(f"unknown data specification: {self.data_spec!r}") from None
        object.__setattr__(self, "data_spec", spec)

    def dx(self) -> float:
        """Grid spacing in x (m)."""
        return XLEN / self.nx_glob

    def dz(self) -> float:
        """Grid spacing in z (m)."""
        return ZLEN / self.nz_glob

    def time_step(self) -> float:
        """Largest stable time step for the assumed maximum wave speed."""
        return min(self.dx(), self.dz()) / MAX_SPEED * CFL


@dataclass(frozen=True)
class Background:
    """Hydrostatic background: cell averages (with halos) and cell interfaces."""

    dens_cell: np.ndarray
    dens_theta_cell: np.ndarray
    dens_int: np.ndarray
    dens_theta_int: np.ndarray
    pressure_int: np.ndarray


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def partition(nx_glob: int, nranks: int, rank: int) -> tuple[int, int]:
    """Return ``(i_beg, nx)``: the first global column and column count of ``rank``."""
    if nx_glob < 1:
        raise ValueError("global grid must have at least one column")
    if nranks < 1:
        raise ValueError("number of ranks must be at least 1")
    if not 0 <= rank < nranks:
        raise ValueError(f"rank {rank} outside 0..{nranks - 1}")
    nper = nx_glob / nranks
    i_beg = _round_half_away(nper * rank)
    i_end = _round_half_away(nper * (rank + 1)) - 1
    return i_beg, i_end - i_beg + 1


def hydrostatic_background(config: Config) -> Background:
    """Hydrostatic density and density*theta at cell centres and interfaces."""
    nz = config.nz_glob
    dz = config.dz()

    z_cell = (np.arange(nz + 2 * HS) - HS + 0.5) * dz
    dens_cell = np.zeros(nz + 2 * HS)
    dens_theta_cell = np.zeros(nz + 2 * HS)
    for weight in QWEIGHTS:
        s = sample(config.data_spec, 0.0, z_cell)
        dens_cell = dens_cell + s.hr * weight
        dens_theta_cell = dens_theta_cell + s.hr * s.ht * weight

    z_int = np.arange(nz + 1) * dz
    s = sample(config.data_spec, 0.0, z_int)
    dens_int = np.asarray(s.hr, dtype=float)
    dens_theta_int = dens_int * np.asarray(s.ht, dtype=float)
    pressure_int = C0 * np.power(dens_theta_int, GAMMA)

    return Background(
        dens_cell=dens_cell,
        dens_theta_cell=dens_theta_cell,
        dens_int=dens_int,
        dens_theta_int=dens_theta_int,
        pressure_int=pressure_int,
    )


def initial_state(config: Config, i_beg: int, nx: int) -> np.ndarray:
    """Cell-averaged perturbation state, shape ``(NUM_VARS, nz + 2*HS, nx + 2*HS)``.

    Averages are taken with 3x3 Gauss-Legendre quadrature over every cell,
    halo cells included.
    """
    if nx < 1:
        raise ValueError("local grid must have at least one column")
    nz = config.nz_glob
    dx = config.dx()
    dz = config.dz()

    xc = (i_beg + np.arange(nx + 2 * HS) - HS + 0.5) * dx
    zc = (np.arange(nz + 2 * HS) - HS + 0.5) * dz
    state = np.zeros((NUM_VARS, nz + 2 * HS, nx + 2 * HS))

    for qz, wz in zip(QPOINTS, QWEIGHTS):
        for qx, wx in zip(QPOINTS, QWEIGHTS):
            x = (xc + (qx - 0.5) * dx)[np.newaxis, :]
            z = (zc + (qz - 0.5) * dz)[:, np.newaxis]
            s = sample(config.data_spec, x, z)
            weight = wx * wz
            state[ID_DENS] += s.r * weight
            state[ID_UMOM] += (s.r + s.hr) * s.u * weight
            state[ID_WMOM] += (s.r + s.hr) * s.w * weight
            state[ID_RHOT] += ((s.r + s.hr) * (s.t + s.ht) - s.hr * s.ht) * weight
    return state