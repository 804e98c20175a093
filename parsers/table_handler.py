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

"""Precision table loader (.npy / .npz)."""
import logging
import os

import numpy as np

try:
    from ..core.errors import PrecisionTableError
except ImportError:
    from core.errors import PrecisionTableError

logger = logging.getLogger(__name__)

NPZ_TABLE_KEY = 'table'


def load_precision_table(file_path):
    """
    Load a 3-D precision table.

    ``.npz`` archives must hold a ``table`` array or exactly one array.

    Raises:
        FileNotFoundError: file does not exist
        PrecisionTableError: not a 3-D numeric array
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Precision table not found: {file_path}")

    try:
        loaded = np.load(file_path, allow_pickle=False)
    except ValueError as e:
        raise PrecisionTableError(f"Cannot read precision table {file_path}: {e}") from e

    if isinstance(loaded, np.lib.npyio.NpzFile):
        with loaded:
            keys = list(loaded.keys())
            if NPZ_TABLE_KEY in keys:
                table = loaded[NPZ_TABLE_KEY]
            elif len(keys) == 1:
                table = loaded[keys[0]]
            else:
                raise PrecisionTableError(
                    f"Archive {file_path} has arrays {keys}, expected '{NPZ_TABLE_KEY}'"
                )
    else:
        table = loaded

    if table.ndim != 3:
        raise PrecisionTableError(f"Precision table {file_path} must be 3-D, got shape {table.shape}")
    if not np.issubdtype(table.dtype, np.number):
        raise PrecisionTableError(f"Precision table {file_path} is not numeric ({table.dtype})")

    logger.info(f"Loaded precision table {file_path} with shape {table.shape}")
    return table.astype(float)
