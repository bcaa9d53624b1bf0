# hpcminiapps

A small atmospheric flow model: dry, stratified, compressible,
non-hydrostatic flow on a two-dimensional x–z domain (20 km by 10 km),
periodic in x with solid walls at the bottom and top. It uses a fourth-order
finite-volume reconstruction with hyperviscosity, a three-stage Runge–Kutta
integrator and alternating Strang splitting between the two directions.

Initial conditions are chosen through `DataSpec`: `COLLISION` (colliding
thermals), `THERMAL` (a rising thermal), `GRAVITY_WAVES`, `DENSITY_CURRENT`
and `INJECTION` (cold, fast air injected at the left boundary).

## Command line

```
miniweather
```

Options:

- `--nx`, `--nz` – cells in x and z (defaults 100 and 50)
- `--sim-time` – seconds to simulate (default 1000)
- `--out-freq` – seconds between outputs (default 10)
- `--data-spec` – initial condition, by number or name (default `thermal`)
- `--output` – NetCDF file to write (default `output.nc`)
- `--no-inform` – do not report every time step

The command prints the grid and time-step information, the elapsed model time
at each step, the wall-clock time of the loop and the relative change in total
mass and total energy over the run. Snapshots of density, u-wind, w-wind and
potential-temperature perturbations are written to the NetCDF file, with an
unlimited time dimension `t` and variables laid out as `(t, z, x)`.

## From Python

```python
from hpcminiapps.weather_setup import Config
from hpcminiapps.weather_dynamics import Model
from hpcminiapps.weather_cli import run

model = Model(Config(nx_glob=100, nz_glob=50, sim_time=100.0))
result = run(model, None, None)
print(result["d_mass"], result["d_te"])
```

`run(model, on_output, on_step)` advances the model to the configured
simulation time, calling `on_output(model)` for the initial state and at each
output interval and `on_step(model)` after every step, and returns the initial
and final mass and total energy, their relative changes and the loop's
wall-clock time.

The modules:

- `hpcminiapps.weather_physics` – physical constants, hydrostatic backgrounds
  (`hydro_const_theta`, `hydro_const_bvfreq`), the cosine-squared bump
  `sample_ellipse_cosine`, and the initial-condition samplers (`sample` and
  one function per `DataSpec`, each returning a `Sample`).
- `hpcminiapps.weather_setup` – `Config` (with `dx()`, `dz()` and
  `time_step()`), the column `partition`, the `hydrostatic_background` and
  the quadrature-averaged `initial_state`.
- `hpcminiapps.weather_dynamics` – `Model`, with halo handling, flux and
  tendency computation, `perform_timestep`, mass/energy `reductions` and
  output `diagnostics`.
- `hpcminiapps.weather_output` – `NetCDFWriter`, a context manager that
  appends time records to a NetCDF file.
- `hpcminiapps.weather_cli` – `run` and the `main` entry point of
  `miniweather`.

## What it does not do

The model runs the whole domain in a single process. `partition` computes how
columns would be shared among ranks, but there is no distributed or
multi-process execution, and the NetCDF file is written by one writer only.

## Tests

```
pip install -e .[test]
pytest
```