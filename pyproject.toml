[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hpcminiapps"
version = "0.1.0"
description = "A dry, stratified, compressible, non-hydrostatic atmospheric flow model with NetCDF output"
requires-python = ">=3.10"
keywords = ["atmosphere", "fluid dynamics", "finite volume", "runge-kutta", "mini-app", "netcdf"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
miniweather = "hpcminiapps.weather_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hpcminiapps"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
