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
Tests for the precision grid.

A table that is linear in its indices is reproduced exactly by trilinear
interpolation, which makes the index mapping easy to check.
"""
import os
import sys

import numpy as np
import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.errors import PrecisionTableError
from core.grid import Grid, get_beta_index

TABLE_SHAPE = (30, 81, 55)


def linear_table(a=1.0, b=2.0, c=3.0):
    j, fc, beta = np.indices(TABLE_SHAPE, dtype=float)
    return a * j + b * fc + c * beta


def expected_linear(jitter, cutoff_hz, beta, a=1.0, b=2.0, c=3.0):
    j_idx = min(3.0 * jitter - 1.0, TABLE_SHAPE[0] - 1)
    fc_idx = cutoff_hz / 0.05 - 0.05
    b_idx = get_beta_index(beta)[0]
    return a * j_idx + b * fc_idx + c * b_idx


def test_beta_index_at_one():
    assert get_beta_index(1.0) == (46.0, 46.0, 46.0)


def test_beta_index_above_one():
    value, lo, hi = get_beta_index(1.5)
    assert value == pytest.approx(46.5)
    assert (lo, hi) == (46.0, 47.0)


@pytest.mark.parametrize("beta,expected_lo", [
    (0.9, 45.0),
    (0.5, 41.0),
    (0.1, 37.0),
    (0.05, 32.0),
    (0.01, 28.0),
    (0.001, 19.0),
])
def test_beta_index_decades(beta, expected_lo):
    value, lo, hi = get_beta_index(beta)
    assert lo == expected_lo
    assert hi == expected_lo + 1.0
    assert lo < value < hi


def test_beta_index_smallest_representable():
    value, lo, hi = get_beta_index(1e-5)
    assert value == pytest.approx(1.0, abs=1e-6)
    assert (lo, hi) == (1.0, 2.0)


@pytest.mark.parametrize("beta", [9e-6, 1e-7, 0.0])
def test_beta_index_below_range(beta):
    assert get_beta_index(beta) == (0.0, 0.0, 0.0)


def test_constant_table():
    grid = Grid(np.full(TABLE_SHAPE, 0.25))
    assert grid.precision(1.0, 1.0, 0.1) == pytest.approx(0.25)


@pytest.mark.parametrize("jitter,cutoff_hz,beta", [
    (1.0, 1.0, 0.1),
    (2.5, 0.37, 0.0123),
    (0.7, 3.99, 0.9),
    (4.0, 0.1, 1.0),
])
def test_linear_table_is_reproduced(jitter, cutoff_hz, beta):
    grid = Grid(linear_table())
    expected = expected_linear(jitter, cutoff_hz, beta)
    assert grid.precision(jitter, cutoff_hz, beta) == pytest.approx(expected, rel=1e-9)


def test_on_lattice_jitter_and_beta():
    table = np.zeros(TABLE_SHAPE)
    table[2, :, 46] = 7.0
    grid = Grid(table)
    # jitter 1.0 -> row 2, beta 1.0 -> row 46, table constant along cutoff there
    assert grid.precision(1.0, 2.0, 1.0) == pytest.approx(7.0)


def test_jitter_clamped_to_last_row():
    grid = Grid(linear_table(a=1.0, b=0.0, c=0.0))
    assert grid.precision(50.0, 1.0, 0.5) == pytest.approx(29.0)


def test_small_jitter_saturates_to_first_row():
    grid = Grid(linear_table(a=1.0, b=0.0, c=0.0))
    assert grid.precision(0.1, 1.0, 0.5) == pytest.approx(0.0)


def test_beta_below_range_uses_first_row():
    table = np.ones(TABLE_SHAPE)
    table[:, :, 0] = 0.125
    grid = Grid(table)
    assert grid.precision(1.0, 1.0, 1e-7) == pytest.approx(0.125)


def test_cutoff_outside_table():
    grid = Grid(np.zeros(TABLE_SHAPE))
    with pytest.raises(PrecisionTableError):
        grid.precision(1.0, 4.1, 0.5)


def test_table_must_be_3d():
    with pytest.raises(PrecisionTableError):
        Grid(np.zeros((30, 81)))


def test_from_file(tmp_path):
    path = tmp_path / "table.npy"
    np.save(path, np.full(TABLE_SHAPE, 0.3))
    grid = Grid.from_file(str(path))
    assert grid.shape == TABLE_SHAPE
    assert grid.precision(1.0, 1.0, 0.1) == pytest.approx(0.3)


def test_from_file_checks_shape(tmp_path):
    path = tmp_path / "small.npy"
    np.save(path, np.zeros((4, 4, 4)))
    with pytest.raises(PrecisionTableError):
        Grid.from_file(str(path))

    grid = Grid.from_file(str(path), strict=False)
    assert grid.shape == (4, 4, 4)


@pytest.mark.parametrize("low,high", [
    (1e-5, 5.0),
    (1e-5, 1e-4),
    (0.05, 0.2),
    (0.5, 1.5),
])
def test_beta_index_monotonic(low, high):
    indices = [get_beta_index(beta)[0] for beta in np.geomspace(low, high, 500)]
    assert all(a <= b for a, b in zip(indices, indices[1:]))


@pytest.mark.parametrize("jitter,cutoff_hz,beta", [
    (1.0, 1.0, 0.1),
    (2.5, 0.37, 0.0123),
    (0.1, 3.99, 1e-7),
])
def test_precision_is_repeatable(jitter, cutoff_hz, beta):
    grid = Grid(np.random.default_rng(0).random(TABLE_SHAPE))
    first = grid.precision(jitter, cutoff_hz, beta)
    assert grid.precision(jitter, cutoff_hz, beta) == first
    assert grid.precision(jitter, cutoff_hz, beta) == first
