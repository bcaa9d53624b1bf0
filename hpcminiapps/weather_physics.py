"""Physical constants, hydrostatic backgrounds and initial-condition samplers.

Every sampling function accepts scalars or NumPy arrays. Scalar inputs give
Python floats back, and array inputs give arrays shaped like the broadcast
of the inputs.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

PI = 3.14159265358979323846264338327
GRAV = 9.8                      # gravitational acceleration (m / s^2)
CP = 1004.0                     # specific heat of dry air at constant pressure
CV = 717.0                      # specific heat of dry air at constant volume
RD = 287.0                      # dry air constant (P = rho * rd * T)
P0 = 1.0e5                      # surface pressure (Pa)
C0 = 27.5629410929725921310572974482   # P = C0 * (rho * theta) ** GAMMA
GAMMA = 1.40027894002789400278940027894  # cp / cv

XLEN = 2.0e4                    # domain length in x (m)
ZLEN = 1.0e4                    # domain length in z (m)
HV_BETA = 0.05                  # hyperviscosity strength in [0, 1]
CFL = 1.50                      # Courant number
MAX_SPEED = 450.0               # assumed maximum wave speed (m / s)
HS = 2                          # halo width
STEN_SIZE = 4                   # interpolation stencil width

NUM_VARS = 4
ID_DENS = 0
ID_UMOM = 1
ID_WMOM = 2
ID_RHOT = 3

QPOINTS = (
    0.112701665379258311482073460022,
    0.500000000000000000000000000000,
    0.887298334620741688517926539980,
)
QWEIGHTS = (
    0.277777777777777777777777777779,
    0.444444444444444444444444444444,
    0.277777777777777777777777777779,
)

_THETA0 = 300.0   # background potential temperature
_EXNER0 = 1.0     # surface Exner pressure


class DataSpec(enum.IntEnum):
    """Built-in initial conditions."""

    COLLISION = 1
    THERMAL = 2
    GRAVITY_WAVES = 3
    DENSITY_CURRENT = 5
    INJECTION = 6


@dataclass(frozen=True)
class Sample:
    """Perturbation (r, u, w, t) and hydrostatic background (hr, ht) at a point."""

    r: ArrayLike
    u: ArrayLike
    w: ArrayLike
    t: ArrayLike
    hr: ArrayLike
    ht: ArrayLike


def _finish(value) -> ArrayLike:
    arr = np.asarray(value, dtype=float)
    return float(arr) if arr.ndim == 0 else arr


def _density_from_theta(exner, t):
    p = P0 * np.power(exner, CP / RD)
    rt = np.power(p / C0, 1.0 / GAMMA)
    return rt / t


def hydro_const_theta(z: ArrayLike) -> tuple[ArrayLike, ArrayLike]:
    """Hydrostatic density and potential temperature for a neutral atmosphere."""
    z = np.asarray(z, dtype=float)
    t = np.full(z.shape, _THETA0)
    exner = _EXNER0 - GRAV * z / (CP * _THETA0)
    r = _density_from_theta(exner, t)
    return _finish(r), _finish(t)


def hydro_const_bvfreq(z: ArrayLike, bv_freq0: float) -> tuple[ArrayLike, ArrayLike]:
    """Hydrostatic density and potential temperature for a constant Brunt-Vaisala frequency."""
    z = np.asarray(z, dtype=float)
    t = _THETA0 * np.exp(bv_freq0 * bv_freq0 / GRAV * z)
    exner = _EXNER0 - GRAV * GRAV / (CP * bv_freq0 * bv_freq0) * (t - _THETA0) / (t * _THETA0)
    r = _density_from_theta(exner, t)
    return _finish(r), _finish(t)


def sample_ellipse_cosine(x, z, amp, x0, z0, xrad, zrad) -> ArrayLike:
    """Cosine-squared bump of amplitude ``amp`` inside the ellipse, zero outside."""
    x = np.asarray(x, dtype=float)
    z = np.asarray(z, dtype=float)
    dist = np.sqrt(((x - x0) / xrad) ** 2 + ((z - z0) / zrad) ** 2) * PI / 2.0
    value = np.where(dist <= PI / 2.0, amp * np.cos(dist) ** 2, 0.0)
    return _finish(value)


def _make(x, z, background, *, u=0.0, t=0.0) -> Sample:
    shape = np.broadcast(np.asarray(x), np.asarray(z)).shape
    hr, ht = background

    def full(value):
        return _finish(np.broadcast_to(np.asarray(value, dtype=float), shape))

    return Sample(
        r=full(0.0), u=full(u), w=full(0.0), t=full(t), hr=full(hr), ht=full(ht)
    )


def injection(x, z) -> Sample:
    """Balanced atmosphere into which cold, fast air is injected at the left edge."""
    return _make(x, z, hydro_const_theta(z))


def density_current(x, z) -> Sample:
    """Cold bubble that falls and spreads along the ground."""
    t = sample_ellipse_cosine(x, z, -20.0, XLEN / 2, 5000.0, 4000.0, 2000.0)
    return _make(x, z, hydro_const_theta(z), t=t)


def gravity_waves(x, z) -> Sample:
    """Stable stratification with a uniform 15 m/s wind."""
    return _make(x, z, hydro_const_bvfreq(z, 0.02), u=15.0)


def thermal(x, z) -> Sample:
    """Rising warm bubble."""
    t = sample_ellipse_cosine(x, z, 3.0, XLEN / 2, 2000.0, 2000.0, 2000.0)
    return _make(x, z, hydro_const_theta(z), t=t)


def collision(x, z) -> Sample:
    """A warm and a cold bubble moving toward each other."""
    t = np.asarray(sample_ellipse_cosine(x, z, 20.0, XLEN / 2, 2000.0, 2000.0, 2000.0))
    t = t + np.asarray(sample_ellipse_cosine(x, z, -20.0, XLEN / 2, 8000.0, 2000.0, 2000.0))
    return _make(x, z, hydro_const_theta(z), t=t)


_SAMPLERS = {
    DataSpec.COLLISION: collision,
    DataSpec.THERMAL: thermal,
    DataSpec.GRAVITY_WAVES: gravity_waves,
    DataSpec.DENSITY_CURRENT: density_current,
    DataSpec.INJECTION: injection,
}


def sample(spec, x, z) -> Sample:
    """Sample the initial condition selected by ``spec`` (a DataSpec or its number)."""
    try:
        key = DataSpec(spec)
    except ValueError:
        raise ValueError(f"unknown data specification: {spec!r}") from None
    return _SAMPLERS[key](x, z)