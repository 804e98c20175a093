#!/usr/bin/env python3
# EuroTune - One Euro filter calibration toolkit
# Copyright (C) 2024 EuroTune Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Precision lookup module.

Trilinear interpolation over a precomputed table of achievable positional
error, indexed by (jitter level, min cutoff, beta). The index mapping follows
the layout of the published table:

- jitter levels go up in steps of 1/3 starting at 1/3,
- min cutoff goes up in steps of 0.05 Hz starting at 0.05 Hz,
- beta rows use a decade-shift encoding: 9 rows per decade below 1.0,
  with beta = 1.0 on row 46.
"""
import math

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .errors import PrecisionTableError


def get_beta_index(beta):
    """
    Fractional table row for a beta value.

    Returns:
        tuple: (index, index_lo, index_hi); (0.0, 0.0, 0.0) when beta is below
        the range the table can represent
    """
    b_idx = getattr(config, 'GRID_BETA_START_INDEX', 46.0)
    decade_rows = getattr(config, 'GRID_BETA_DECADE_ROWS', 9.0)
    decade_factor = getattr(config, 'GRID_BETA_DECADE_FACTOR', 10.00000001)

    while beta < 1.0 and b_idx > 0.0:
        beta *= decade_factor
        b_idx -= decade_rows

    if b_idx < 0.0:
        return 0.0, 0.0, 0.0

    b_idx = max(b_idx - 1.0, 0.0)
    beta += b_idx
    return beta, float(math.floor(beta)), float(math.ceil(beta))


def _weight(idx, lo, hi):
    if abs(hi - lo) > np.finfo(float).eps:
        return (idx - lo) / (hi - lo)
    return 0.0


class Grid:
    """Static precision table with trilinear lookup."""

    def __init__(self, table):
        table = np.asarray(table, dtype=float)
        if table.ndim != 3:
            raise PrecisionTableError(f"Precision table must be 3-D, got shape {table.shape}")
        self.table = table
        self.shape = table.shape

    @classmethod
    def from_file(cls, path, strict=True):
        """Load a table through parsers.table_handler and optionally check its shape."""
        try:
            from ..parsers.table_handler import load_precision_table
        except ImportError:
            from parsers.table_handler import load_precision_table

        table = load_precision_table(path)
        if strict:
            expected = (
                getattr(config, 'GRID_J_DIM', 30),
                getattr(config, 'GRID_FC_DIM', 81),
                getattr(config, 'GRID_B_DIM', 55),
            )
            if table.shape != expected:
                raise PrecisionTableError(
                    f"Precision table {path} has shape {table.shape}, expected {expected}"
                )
        return cls(table)

    def _lattice(self, lo, hi, axis):
        # Negative indices saturate to the first row
        lo = max(int(lo), 0)
        hi = max(int(hi), 0)
        if hi >= self.shape[axis]:
            raise PrecisionTableError(
                f"Index {hi} outside precision table axis {axis} of size {self.shape[axis]}"
            )
        return lo, hi

    def precision(self, jitter, cutoff_hz, beta):
        """Interpolated achievable precision for (jitter, cutoff_hz, beta)."""
        jitter_levels = getattr(config, 'GRID_JITTER_LEVELS', 3.0)
        cutoff_step = getattr(config, 'GRID_CUTOFF_STEP', 0.05)
        cutoff_offset = getattr(config, 'GRID_CUTOFF_OFFSET', 0.05)

        j_idx = jitter_levels * jitter - 1.0
        j_idx = min(j_idx, float(self.shape[0] - 1))
        j_lo = math.floor(j_idx)
        j_hi = math.ceil(j_idx)

        fc_idx = cutoff_hz / cutoff_step - cutoff_offset
        fc_lo = math.floor(fc_idx)
        fc_hi = math.ceil(fc_idx)

        b_idx, b_lo, b_hi = get_beta_index(beta)

        xd = _weight(j_idx, j_lo, j_hi)
        yd = _weight(fc_idx, fc_lo, fc_hi)
        zd = _weight(b_idx, b_lo, b_hi)

        j_lo, j_hi = self._lattice(j_lo, j_hi, 0)
        fc_lo, fc_hi = self._lattice(fc_lo, fc_hi, 1)
        b_lo, b_hi = self._lattice(b_lo, b_hi, 2)

        t = self.table
        c000 = t[j_lo, fc_lo, b_lo]
        c100 = t[j_hi, fc_lo, b_lo]
        c010 = t[j_lo, fc_hi, b_lo]
        c110 = t[j_hi, fc_hi, b_lo]
        c001 = t[j_lo, fc_lo, b_hi]
        c101 = t[j_hi, fc_lo, b_hi]
        c011 = t[j_lo, fc_hi, b_hi]
        c111 = t[j_hi, fc_hi, b_hi]

        # Along jitter
        c00 = c000 * (1.0 - xd) + c100 * xd
        c01 = c001 * (1.0 - xd) + c101 * xd
        c10 = c010 * (1.0 - xd) + c110 * xd
        c11 = c011 * (1.0 - xd) + c111 * xd

        # Along cutoff
        c0 = c00 * (1.0 - yd) + c10 * yd
        c1 = c01 * (1.0 - yd) + c11 * yd

        # Along beta
        return float(c0 * (1.0 - zd) + c1 * zd)
