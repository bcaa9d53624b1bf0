"""Time-stepping driver and command line for the weather model."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Optional, Sequence

from .weather_dynamics import Model
from .weather_output import NetCDFWriter
from .weather_physics import DataSpec
from .weather_setup import Config

Callback = Optional[Callable[[Model], None]]


def run(model: Model, on_output: Callback = None, on_step: Callback = None) -> dict:
    """Advance ``model`` to the configured simulation time.

    ``on_output(model)`` is called for the initial state and whenever the
    output interval has elapsed. ``on_step(model)`` is called after each time
    step, before ``model.etime`` is advanced, so it still holds the time the
    step started from. Returns the initial and final domain mass and total
    energy, their relative changes and the wall-clock time of the loop.
    """
    config = model.config
    sim_time = config.sim_time
    output_freq = config.output_freq

    mass0, te0 = model.reductions()
    if on_output is not None:
        on_output(model)

    start = time.perf_counter()
    while model.etime < sim_time:
        if model.etime + model.dt > sim_time:
            model.dt = sim_time - model.etime
        model.perform_timestep(model.dt)
        if on_step is not None:
            on_step(model)
        model.etime += model.dt
        model.output_counter += model.dt
        if model.output_counter >= output_freq:
            model.output_counter -= output_freq
            if on_output is not None:
                on_output(model)
    cpu_time = time.perf_counter() - start

    mass, te = model.reductions()
    return {
        "mass0": mass0,
        "te0": te0,
        "mass": mass,
        "te": te,
        "d_mass": (mass - mass0) / mass0,
        "d_te": (te - te0) / te0,
        "cpu_time": cpu_time,
    }


def _data_spec(text: str) -> DataSpec:
    try:
        return DataSpec(int(text))
    except ValueError:
        pass
    try:
        return DataSpec[text.strip().upper().replace("-", "_")]
    except KeyError:
        names = ", ".join(spec.name.lower() for spec in DataSpec)
        raise argparse.ArgumentTypeError(
            f"unknown data specification {text!r} (choose from {names})"
        ) from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="miniweather",
        description="Simulate a dry, stratified, compressible, non-hydrostatic flow.",
    )
    parser.add_argument("--nx", type=int, default=100, help="cells in x")
    parser.add_argument("--nz", type=int, default=50, help="cells in z")
    parser.add_argument("--sim-time", type=float, default=1000.0, help="seconds to simulate")
    parser.add_argument("--out-freq", type=float, default=10.0, help="seconds between outputs")
    parser.add_argument(
        "--data-spec", type=_data_spec, default=DataSpec.THERMAL,
        help="initial condition, by number or name",
    )
    parser.add_argument("--output", default="output.nc", help="NetCDF file to write")
    parser.add_argument(
        "--no-inform", action="store_true", help="do not report every time step"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the exit status."""
    parser = _build_parser()
    ns = parser.parse_args(argv)
    try:
        config = Config(
            nx_glob=ns.nx,
            nz_glob=ns.nz,
            sim_time=ns.sim_time,
            output_freq=ns.out_freq,
            data_spec=ns.data_spec,
        )
    except ValueError as exc:
        parser.error(str(exc))

    model = Model(config)
    print(f"nx_glob, nz_glob: {config.nx_glob} {config.nz_glob}")
    print(f"dx,dz: {config.dx():f} {config.dz():f}")
    print(f"dt: {model.dt:f}")

    with NetCDFWriter(ns.output, config.nx_glob, config.nz_glob) as writer:

        def on_output(m: Model) -> None:
            print("*** OUTPUT ***")
            writer.write(m.etime, m.diagnostics())

        def on_step(m: Model) -> None:
            print(f"Elapsed Time: {m.etime:f} / {config.sim_time:f}")

        result = run(model, on_output, None if ns.no_inform else on_step)

    print(f"CPU Time: {result['cpu_time']} sec")
    print(f"d_mass: {result['d_mass']:e}")
    print(f"d_te:   {result['d_te']:e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())