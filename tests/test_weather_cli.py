import numpy as np
import pytest
from scipy.io import netcdf_file

from hpcminiapps.weather_cli import main, run
from hpcminiapps.weather_dynamics import Model
from hpcminiapps.weather_physics import DataSpec
from hpcminiapps.weather_setup import Config


def _model(sim_time=10.0, output_freq=5.0, spec=DataSpec.THERMAL):
    return Model(Config(nx_glob=20, nz_glob=10, sim_time=sim_time,
                        output_freq=output_freq, data_spec=spec))


def test_run_reaches_sim_time():
    model = _model()
    run(model)
    assert model.etime == pytest.approx(10.0)


def test_run_conserves_mass():
    model = _model()
    result = run(model)
    assert abs(result["d_mass"]) < 1e-9
    assert result["d_mass"] == pytest.approx(
        (result["mass"] - result["mass0"]) / result["mass0"]
    )


def test_run_energy_change_is_consistent():
    result = run(_model())
    assert result["d_te"] == pytest.approx((result["te"] - result["te0"]) / result["te0"])
    assert result["cpu_time"] >= 0.0


def test_on_step_sees_start_times_in_order():
    model = _model()
    starts = []
    run(model, on_step=lambda m: starts.append(m.etime))
    assert starts[0] == 0.0
    assert all(a < b for a, b in zip(starts, starts[1:]))
    assert starts[-1] < 10.0


def test_on_output_first_call_is_initial_state():
    model = _model()
    times = []
    run(model, on_output=lambda m: times.append(m.etime))
    assert times[0] == 0.0
    assert len(times) >= 2
    assert all(a < b for a, b in zip(times, times[1:]))


def test_zero_sim_time_takes_no_steps():
    model = _model(sim_time=0.0)
    steps, outputs = [], []
    result = run(model, on_output=outputs.append, on_step=steps.append)
    assert steps == []
    assert len(outputs) == 1
    assert result["d_mass"] == 0.0
    assert result["d_te"] == 0.0


def test_last_step_is_shortened():
    model = _model(sim_time=4.0)
    run(model)
    assert model.etime == pytest.approx(4.0)
    assert model.dt <= Config(nx_glob=20, nz_glob=10).time_step()


def test_main_writes_netcdf(tmp_path, capsys):
    path = tmp_path / "out.nc"
    status = main(["--nx", "20", "--nz", "10", "--sim-time", "10",
                   "--out-freq", "5", "--output", str(path), "--no-inform"])
    assert status == 0
    out = capsys.readouterr().out
    assert "nx_glob, nz_glob: 20 10" in out
    assert "*** OUTPUT ***" in out
    assert "d_mass:" in out
    assert "Elapsed Time" not in out
    with netcdf_file(str(path), "r", mmap=False) as f:
        t = np.array(f.variables["t"][:])
        dens = np.array(f.variables["dens"][:])
    assert t[0] == 0.0
    assert dens.shape == (len(t), 10, 20)


def test_main_informs_each_step(tmp_path, capsys):
    path = tmp_path / "out.nc"
    assert main(["--nx", "20", "--nz", "10", "--sim-time", "4",
                 "--data-spec", "collision", "--output", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Elapsed Time: 0.000000 / 4.000000" in out


def test_main_rejects_unknown_data_spec(tmp_path):
    with pytest.raises(SystemExit):
        main(["--data-spec", "4", "--output", str(tmp_path / "x.nc")])


def test_main_rejects_bad_grid(tmp_path):
    with pytest.raises(SystemExit):
        main(["--nx", "0", "--output", str(tmp_path / "x.nc")])