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

"""Tests for calibration charts."""
import math
import os
import sys

import matplotlib
matplotlib.use('Agg')

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.visualization import plot_noise_convergence, plot_tuning_search

TUNING_SETTINGS = {
    'max_target_precision': 0.6,
    'max_lag_secs': 1.0,
    'noise_variance': 1e-4,
    'max_amplitude': 1.0,
    'sample_rate': 60.0,
}

REPORT = {
    'settings': {'min_cutoff_hz': 3.5, 'beta': 0.5},
    'precision': 0.5,
    'lag_s': 1 / 60.0,
    'target_precision': 0.6,
    'relaxation_rounds': 0,
    'candidates_evaluated': 3,
}


def test_noise_convergence_chart(tmp_path):
    trace = [(61 + i, 1e-4 * (1 + 1.0 / (i + 1)), 5e-5 / (i + 1)) for i in range(50)]
    output = str(tmp_path / "calibration.png")

    path = plot_noise_convergence(trace, output)

    assert path == str(tmp_path / "calibration_noise.png")
    assert os.path.exists(path)
    assert os.path.getsize(path) > 0


def test_noise_convergence_chart_without_data(tmp_path):
    assert plot_noise_convergence([], str(tmp_path / "calibration.png")) is None


def test_tuning_search_chart(tmp_path):
    candidates = [
        (3.46, 0.975, 0.5, 1 / 60.0, True),
        (3.47, 0.5, 0.5, math.inf, False),
        (3.5, 0.5, 0.5, 1 / 60.0, True),
    ]
    output = str(tmp_path / "calibration.png")

    path = plot_tuning_search(candidates, REPORT, TUNING_SETTINGS, output)

    assert path == str(tmp_path / "calibration_search.png")
    assert os.path.exists(path)


def test_tuning_search_chart_without_candidates(tmp_path):
    assert plot_tuning_search(None, REPORT, TUNING_SETTINGS, str(tmp_path / "c.png")) is None
    assert plot_tuning_search([], REPORT, TUNING_SETTINGS, str(tmp_path / "c.png")) is None
