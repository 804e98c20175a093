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

"""Tests for the peak amplitude estimators."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.amplitude import MaxDistanceEstimator, ThreeAxisMaxDistanceEstimator


def feed(estimator, values, stddev):
    for value in values:
        estimator.update(value, stddev)
    return estimator


def test_initial_state():
    estimator = MaxDistanceEstimator()
    assert estimator.previous is None
    assert estimator.speeds == [0.0] * 5
    assert estimator.max_within_reason() == 0.0


def test_first_sample_only_primes():
    estimator = feed(MaxDistanceEstimator(), [100.0], 0.001)
    assert estimator.previous == 100.0
    assert estimator.speeds == [0.0] * 5


def test_repeated_jumps_fill_all_slots():
    values = [0.0, 0.01, 10.0, 0.01, 10.0, 0.01, 10.0, 0.01]
    estimator = feed(MaxDistanceEstimator(), values, 0.001)
    assert estimator.max_within_reason() == pytest.approx(9.99)


def test_single_outlier_is_rejected():
    values = [0.0, 50.0] + [0.0, 1.0] * 3
    estimator = feed(MaxDistanceEstimator(), values, 0.01)
    # 50 -> 0 counts too: five slots hold 50, 50, 1, 1, 1
    assert max(estimator.speeds) == pytest.approx(50.0)
    assert estimator.max_within_reason() == pytest.approx(1.0)


def test_fewer_than_five_jumps_report_zero():
    values = [0.0, 1.0, 0.0, 1.0]
    estimator = feed(MaxDistanceEstimator(), values, 0.01)
    assert estimator.max_within_reason() == 0.0


def test_jumps_within_noise_are_ignored():
    # 3 sigma = 0.3; every jump here is 0.3 or less
    values = [0.0, 0.3, 0.0, 0.2, 0.0, 0.3, 0.0, 0.1]
    estimator = feed(MaxDistanceEstimator(), values, 0.1)
    assert estimator.speeds == [0.0] * 5


def test_smaller_jump_does_not_replace_larger():
    values = [0.0] + [5.0, 0.0] * 3
    estimator = feed(MaxDistanceEstimator(), values, 0.01)
    estimator.update(1.0, 0.01)
    estimator.update(0.0, 0.01)
    assert sorted(estimator.speeds) == pytest.approx([5.0] * 5)


def test_three_axis_takes_largest_axis():
    estimator = ThreeAxisMaxDistanceEstimator(0.001)
    for i in range(12):
        step = i % 2
        estimator.update(step * 1.0, step * 3.0, step * 2.0)

    assert estimator.samples_seen == 12
    assert estimator.max_within_reason() == pytest.approx(3.0)


def test_three_axis_uses_shared_noise_floor():
    # 3 sigma = 3.0 rejects every jump
    estimator = ThreeAxisMaxDistanceEstimator(1.0)
    for i in range(12):
        step = i % 2
        estimator.update(step * 1.0, step * 2.0, step * 3.0)
    assert estimator.max_within_reason() == 0.0
