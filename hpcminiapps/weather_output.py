"""NetCDF output of the model's diagnostic fields."""

from __future__ import annotations

import os
from typing import Mapping, Optional, Union

import numpy as np
from scipy.io import netcdf_file

FIELD_NAMES = ("dens", "uwnd", "wwnd", "theta")


class NetCDFWriter:
    """Append snapshots of density, winds and potential temperature to a NetCDF file.

    The file has an unlimited time dimension ``t`` and fixed dimensions ``x``
    and ``z``. Each snapshot variable is laid out as ``(t, z, x)``, and the
    elapsed model time of every snapshot is stored in the variable ``t``.
    An existing file at ``path`` is overwritten.
    """

    def __init__(self, path: Union[str, os.PathLike], nx: int, nz: int) -> None:
        if nx < 1 or nz < 1:
            raise ValueError("output grid must have at least one cell in each direction")
        self.path = os.fspath(path)
        self.nx = nx
        self.nz = nz
        self.count = 0
        self._file: Optional[netcdf_file] = netcdf_file(self.path, "w")
        self._file.createDimension("t", None)
        self._file.createDimension("x", nx)
        self._file.createDimension("z", nz)
        self._file.createVariable("t", "d", ("t",))
        for name in FIELD_NAMES:
            self._file.createVariable(name, "d", ("t", "z", "x"))
        self._file.flush()

    @property
    def closed(self) -> bool:
        """Whether the file has been closed."""
        return self._file is None

    def write(self, etime: float, fields: Mapping[str, np.ndarray]) -> int:
        """Append one snapshot taken at model time ``etime``; return its record index."""
        if self._file is None:
            raise ValueError("write to a closed NetCDF file")
        arrays = {}
        for name in FIELD_NAMES:
            if name not in fields:
                raise ValueError(f"missing output field: {name}")
            arr = np.asarray(fields[name], dtype=float)
            if arr.shape != (self.nz, self.nx):
                raise ValueError(
                    f"field {name} has shape {arr.shape}, expected {(self.nz, self.nx)}"
                )
            arrays[name] = arr

        record = self.count
        for name, arr in arrays.items():
            self._file.variables[name][record] = arr
        self._file.variables["t"][record] = float(etime)
        self._file.flush()
        self.count += 1
        return record

    def close(self) -> None:
        """Flush and close the file; closing twice does nothing."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "NetCDFWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()