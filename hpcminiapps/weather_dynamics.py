"""Finite-volume dynamics: halos, fluxes, tendencies and Runge-Kutta stepping."""

from __future__ import annotations

import enum

import numpy as np

from .weather_physics import (
    C0,
    CP,
    CV,
    GAMMA,
    GRAV,
    HS,
    HV_BETA,
    ID_DENS,
    ID_RHOT,
    ID_UMOM,
    ID_WMOM,
    P0,
    PI,
    RD,
    STEN_SIZE,
    XLEN,
    ZLEN,
    DataSpec,
)
from .weather_setup import Config, hydrostatic_background, initial_state, partition


class Direction(enum.IntEnum):
    """Sweep direction of a dimensionally split step."""

    X = 1
    Z = 2


def _interpolate(stencil: list[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
    s0, s1, s2, s3 = stencil
    vals = -s0 / 12 + 7 * s1 / 12 + 7 * s2 / 12 - s3 / 12
    d3_vals = -s0 + 3 * s1 - 3 * s2 + s3
    return vals, d3_vals


class Model:
    """Fluid state of a periodic-in-x domain and the operators that advance it.

    The state arrays have shape ``(NUM_VARS, nz + 2*HS, nx + 2*HS)`` and hold
    perturbations from the hydrostatic background.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.rank = 0
        self.i_beg, self.nx = partition(config.nx_glob, 1, self.rank)
        self.k_beg = 0
        self.nz = config.nz_glob
        self.dx = config.dx()
        self.dz = config.dz()
        self.background = hydrostatic_background(config)
        self.state = initial_state(config, self.i_beg, self.nx)
        self.state_tmp = self.state.copy()
        self.dt = config.time_step()
        self.etime = 0.0
        self.output_counter = 0.0
        self.direction_switch = True

    # ------------------------------------------------------------------ halos

    def set_halo_values_x(self, state: np.ndarray) -> None:
        """Fill the x halos in place from the periodic neighbours."""
        nx, nz = self.nx, self.nz
        rows = slice(HS, HS + nz)
        left = state[:, rows, HS:2 * HS].copy()
        right = state[:, rows, nx:nx + HS].copy()
        state[:, rows, 0:HS] = right
        state[:, rows, nx + HS:nx + 2 * HS] = left

        if self.config.data_spec == DataSpec.INJECTION and self.rank == 0:
            bg = self.background
            z = (self.k_beg + np.arange(nz) + 0.5) * self.dz
            for k in np.flatnonzero(np.abs(z - 3 * ZLEN / 4) <= ZLEN / 16):
                row = k + HS
                dens = state[ID_DENS, row, 0:HS] + bg.dens_cell[row]
                state[ID_UMOM, row, 0:HS] = dens * 50.0
                state[ID_RHOT, row, 0:HS] = dens * 298.0 - bg.dens_theta_cell[row]

    def set_halo_values_z(self, state: np.ndarray) -> None:
        """Fill the z halos in place: solid walls at the bottom and top."""
        nz = self.nz
        hyc = self.background.dens_cell
        bottom, top = HS, nz + HS - 1

        state[ID_WMOM, [0, 1, nz + HS, nz + HS + 1], :] = 0.0

        umom = state[ID_UMOM]
        low = umom[bottom] / hyc[bottom]
        high = umom[top] / hyc[top]
        umom[0] = low * hyc[0]
        umom[1] = low * hyc[1]
        umom[nz + HS] = high * hyc[nz + HS]
        umom[nz + HS + 1] = high * hyc[nz + HS + 1]

        for var in (ID_DENS, ID_RHOT):
            field = state[var]
            field[0] = field[bottom]
            field[1] = field[bottom]
            field[nz + HS] = field[top]
            field[nz + HS + 1] = field[top]

    # ------------------------------------------------------------ tendencies

    def compute_tendencies_x(self, state: np.ndarray, dt: float) -> np.ndarray:
        """Tendencies ``(NUM_VARS, nz, nx)`` from x-direction fluxes."""
        nx, nz = self.nx, self.nz
        bg = self.background
        hv_coef = -HV_BETA * self.dx / (16 * dt)

        rows = state[:, HS:HS + nz, :]
        vals, d3 = _interpolate([rows[:, :, s:s + nx + 1] for s in range(STEN_SIZE)])

        hyd = bg.dens_cell[HS:HS + nz, np.newaxis]
        hyt = bg.dens_theta_cell[HS:HS + nz, np.newaxis]
        r = vals[ID_DENS] + hyd
        u = vals[ID_UMOM] / r
        w = vals[ID_WMOM] / r
        t = (vals[ID_RHOT] + hyt) / r
        p = C0 * np.power(r * t, GAMMA)

        flux = np.stack([
            r * u - hv_coef * d3[ID_DENS],
            r * u * u + p - hv_coef * d3[ID_UMOM],
            r * u * w - hv_coef * d3[ID_WMOM],
            r * u * t - hv_coef * d3[ID_RHOT],
        ])
        return -(flux[:, :, 1:] - flux[:, :, :-1]) / self.dx

    def compute_tendencies_z(self, state: np.ndarray, dt: float) -> np.ndarray:
        """Tendencies ``(NUM_VARS, nz, nx)`` from z-direction fluxes and gravity."""
        nx, nz = self.nx, self.nz
        bg = self.background
        hv_coef = -HV_BETA * self.dz / (16 * dt)

        cols = state[:, :, HS:HS + nx]
        vals, d3 = _interpolate([cols[:, s:s + nz + 1, :] for s in range(STEN_SIZE)])

        hyd = bg.dens_int[:, np.newaxis]
        hyt = bg.dens_theta_int[:, np.newaxis]
        hyp = bg.pressure_int[:, np.newaxis]
        r = vals[ID_DENS] + hyd
        u = vals[ID_UMOM] / r
        w = vals[ID_WMOM] / r
        t = (vals[ID_RHOT] + hyt) / r
        p = C0 * np.power(r * t, GAMMA) - hyp

        # Solid walls: no normal wind and exact mass conservation.
        w[[0, nz], :] = 0.0
        d3[ID_DENS][[0, nz], :] = 0.0

        flux = np.stack([
            r * w - hv_coef * d3[ID_DENS],
            r * w * u - hv_coef * d3[ID_UMOM],
            r * w * w + p - hv_coef * d3[ID_WMOM],
            r * w * t - hv_coef * d3[ID_RHOT],
        ])
        tend = -(flux[:, 1:, :] - flux[:, :-1, :]) / self.dz
        tend[ID_WMOM] -= state[ID_DENS, HS:HS + nz, HS:HS + nx] * GRAV
        return tend

    def _gravity_wave_forcing(self) -> np.ndarray:
        x = ((self.i_beg + np.arange(self.nx) + 0.5) * self.dx)[np.newaxis, :]
        z = ((self.k_beg + np.arange(self.nz) + 0.5) * self.dz)[:, np.newaxis]
        x0, z0, xrad, zrad, amp = XLEN / 8, 1000.0, 500.0, 500.0, 0.01
        dist = np.sqrt(((x - x0) / xrad) ** 2 + ((z - z0) / zrad) ** 2) * PI / 2.0
        wpert = np.where(dist <= PI / 2.0, amp * np.cos(dist) ** 2, 0.0)
        return wpert * self.background.dens_cell[HS:HS + self.nz, np.newaxis]

    # -------------------------------------------------------------- stepping

    def semi_discrete_step(
        self,
        state_init: np.ndarray,
        state_forcing: np.ndarray,
        dt: float,
        direction,
    ) -> np.ndarray:
        """Return ``state_init + dt * rhs(state_forcing)`` for one direction.

        The halos of ``state_forcing`` are refreshed in place.
        """
        try:
            direction = Direction(direction)
        except ValueError:
            raise ValueError(f"unknown direction: {direction!r}") from None

        if direction is Direction.X:
            self.set_halo_values_x(state_forcing)
            tend = self.compute_tendencies_x(state_forcing, dt)
        else:
            self.set_halo_values_z(state_forcing)
            tend = self.compute_tendencies_z(state_forcing, dt)

        if self.config.data_spec == DataSpec.GRAVITY_WAVES:
            # The forcing is accumulated once per variable sweep before the
            # w-momentum update reads it, so it counts ID_WMOM + 1 times.
            tend[ID_WMOM] += (ID_WMOM + 1) * self._gravity_wave_forcing()

        out = state_init.copy()
        interior = (slice(None), slice(HS, HS + self.nz), slice(HS, HS + self.nx))
        out[interior] = state_init[interior] + dt * tend
        return out

    def _rk_direction(self, dt: float, direction: Direction) -> None:
        tmp = self.semi_discrete_step(self.state, self.state, dt / 3, direction)
        tmp = self.semi_discrete_step(self.state, tmp, dt / 2, direction)
        self.state = self.semi_discrete_step(self.state, tmp, dt / 1, direction)
        self.state_tmp = tmp

    def perform_timestep(self, dt: float) -> None:
        """Advance the state by ``dt`` with Strang-split three-stage Runge-Kutta."""
        order = (Direction.X, Direction.Z) if self.direction_switch else (Direction.Z, Direction.X)
        for direction in order:
            self._rk_direction(dt, direction)
        self.direction_switch = not self.direction_switch

    # ----------------------------------------------------------- diagnostics

    def _interior(self, var: int) -> np.ndarray:
        return self.state[var, HS:HS + self.nz, HS:HS + self.nx]

    def reductions(self) -> tuple[float, float]:
        """Domain totals of mass and total (kinetic + internal) energy."""
        hyd = self.background.dens_cell[HS:HS + self.nz, np.newaxis]
        hyt = self.background.dens_theta_cell[HS:HS + self.nz, np.newaxis]
        r = self._interior(ID_DENS) + hyd
        u = self._interior(ID_UMOM) / r
        w = self._interior(ID_WMOM) / r
        th = (self._interior(ID_RHOT) + hyt) / r
        p = C0 * np.power(r * th, GAMMA)
        t = th / np.power(P0 / p, RD / CP)
        ke = r * (u * u + w * w)
        ie = r * CV * t
        cell = self.dx * self.dz
        return float(np.sum(r * cell)), float(np.sum((ke + ie) * cell))

    def diagnostics(self) -> dict[str, np.ndarray]:
        """Perturbation density, winds and potential temperature, each ``(nz, nx)``."""
        hyd = self.background.dens_cell[HS:HS + self.nz, np.newaxis]
        hyt = self.background.dens_theta_cell[HS:HS + self.nz, np.newaxis]
        dens = self._interior(ID_DENS)
        total = hyd + dens
        return {
            "dens": dens.copy(),
            "uwnd": self._interior(ID_UMOM) / total,
            "wwnd": self._interior(ID_WMOM) / total,
            "theta": (self._interior(ID_RHOT) + hyt) / total - hyt / hyd,
        }