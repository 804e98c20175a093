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
Shared fixtures: synthetic precision tables and recordings.

The synthetic tables keep the feasible region small so a full tuner sweep
simulates only a few thousand candidates.
"""
import os
import sys

import numpy as np
import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

import config
from core.grid import Grid

TABLE_SHAPE = (config.GRID_J_DIM, config.GRID_FC_DIM, config.GRID_B_DIM)
INFEASIBLE_PRECISION = 100.0
FEASIBLE_PRECISION = 0.5
# First cutoff row whose whole interpolation cell is feasible (cutoff >= 3.46 Hz)
FEASIBLE_CUTOFF_ROW = 69


def make_feasible_table():
    table = np.full(TABLE_SHAPE, INFEASIBLE_PRECISION)
    table[:, FEASIBLE_CUTOFF_ROW:, :] = FEASIBLE_PRECISION
    return table


@pytest.fixture
def feasible_grid():
    """Grid where only min cutoffs of 3.46 Hz and above reach precision 0.5."""
    return Grid(make_feasible_table())


@pytest.fixture
def infeasible_grid():
    """Grid where no configuration reaches a useful precision."""
    return Grid(np.full(TABLE_SHAPE, INFEASIBLE_PRECISION))


@pytest.fixture
def noise_samples():
    """Ten seconds of white noise (std-dev 0.01) on three axes at 60 Hz."""
    rng = np.random.default_rng(42)
    return rng.normal(0.0, 0.01, size=(600, 3))


@pytest.fixture
def motion_samples():
    """Two seconds of a square wave between 0 and 1 on every axis."""
    wave = np.tile([0.0, 1.0], 60)
    return np.column_stack([wave, wave, wave])
