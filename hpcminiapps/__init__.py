"""A compressible, non-hydrostatic atmospheric flow model with NetCDF output."""

__version__ = "0.1.0"
__all__ = [
    "weather_physics",
    "weather_setup",
    "weather_dynamics",
    "weather_output",
    "weather_cli",
]