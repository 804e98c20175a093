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

"""Tests for run_calibration and compute_warnings."""
import os
import sys

import numpy as np
import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.errors import NoFeasibleConfigurationError
from core.session import run_calibration
from core.warnings import compute_warnings
import config

CALIBRATION_KEYS = {
    'noise_variance', 'noise_std_dev', 'noise_samples_used', 'noise_samples_total',
    'noise_converged', 'motion_samples', 'max_amplitude', 'tuning_settings',
    'result', 'report', 'convergence_trace', 'candidates',
}


def make_calibration(**overrides):
    """Calibration dict as returned by run_calibration, with benign values."""
    calibration = {
        'noise_variance': 1e-4,
        'noise_std_dev': 0.01,
        'noise_samples_used': 70,
        'noise_samples_total': 600,
        'noise_converged': True,
        'motion_samples': 120,
        'max_amplitude': 1.0,
        'tuning_settings': {
            'max_target_precision': 0.6,
            'max_lag_secs': 1.0,
            'noise_variance': 1e-4,
            'max_amplitude': 1.0,
            'sample_rate': 60.0,
        },
        'result': {'min_cutoff_hz': 3.5, 'beta': 0.5},
        'report': {
            'settings': {'min_cutoff_hz': 3.5, 'beta': 0.5},
            'precision': 0.5,
            'lag_s': 0.05,
            'target_precision': 0.6,
            'relaxation_rounds': 0,
            'candidates_evaluated': 100,
        },
        'convergence_trace': [],
        'candidates': None,
    }
    calibration.update(overrides)
    return calibration


def test_run_calibration(feasible_grid, noise_samples, motion_samples):
    calibration = run_calibration(noise_samples, motion_samples, 1.8, 1.0, feasible_grid)

    assert calibration is not None
    assert set(calibration) == CALIBRATION_KEYS
    assert calibration['noise_converged']
    assert config.SAMPLE_RATE_HZ < calibration['noise_samples_used'] <= 600
    assert calibration['noise_samples_total'] == 600
    assert calibration['motion_samples'] == 120
    assert calibration['noise_std_dev'] == pytest.approx(0.01, rel=0.5)
    assert calibration['max_amplitude'] == pytest.approx(1.0)
    assert calibration['tuning_settings']['max_target_precision'] == pytest.approx(0.6)
    assert calibration['result']['min_cutoff_hz'] >= 3.46
    assert calibration['report']['settings'] == calibration['result']
    assert calibration['convergence_trace']
    assert calibration['candidates'] is None


def test_run_calibration_records_candidates(feasible_grid, noise_samples, motion_samples):
    calibration = run_calibration(noise_samples, motion_samples, 1.8, 1.0, feasible_grid,
                                  record_candidates=True)
    assert len(calibration['candidates']) == calibration['report']['candidates_evaluated']


def test_run_calibration_short_noise(feasible_grid, noise_samples, motion_samples):
    assert run_calibration(noise_samples[:50], motion_samples, 1.8, 1.0, feasible_grid) is None


def test_run_calibration_short_motion(feasible_grid, noise_samples, motion_samples):
    assert run_calibration(noise_samples, motion_samples[:10], 1.8, 1.0, feasible_grid) is None


def test_run_calibration_noise_never_converges(feasible_grid, motion_samples):
    # Zero variance leaves the relative CI undefined
    silent = np.zeros((200, 3))
    assert run_calibration(silent, motion_samples, 1.8, 1.0, feasible_grid) is None


def test_run_calibration_rejects_bad_shape(feasible_grid, motion_samples):
    with pytest.raises(ValueError):
        run_calibration(np.zeros((200, 2)), motion_samples, 1.8, 1.0, feasible_grid)


def test_run_calibration_infeasible(infeasible_grid, noise_samples, motion_samples):
    with pytest.raises(NoFeasibleConfigurationError):
        run_calibration(noise_samples, motion_samples, 1.8, 1.0, infeasible_grid,
                        max_relaxation_rounds=1)


def test_no_warnings_for_clean_run():
    warnings, cautions = compute_warnings(make_calibration(), sample_rates=[60.0, 59.9])
    assert warnings == {}
    assert cautions == {}


def test_warning_no_motion():
    warnings, _ = compute_warnings(make_calibration(max_amplitude=0.0))
    assert 'no_motion' in warnings


def test_warning_lag_exceeded():
    calibration = make_calibration()
    calibration['report']['lag_s'] = 2.0
    warnings, _ = compute_warnings(calibration)
    assert 'lag_exceeded' in warnings


@pytest.mark.parametrize("rounds,is_warning", [(1, False), (2, True), (5, True)])
def test_precision_relaxed(rounds, is_warning):
    calibration = make_calibration()
    calibration['report']['relaxation_rounds'] = rounds
    calibration['report']['target_precision'] = 0.6 + rounds / 3.0
    warnings, cautions = compute_warnings(calibration)
    assert ('precision_relaxed' in warnings) == is_warning
    assert ('precision_relaxed' in cautions) == (not is_warning)


def test_caution_slow_noise_convergence():
    _, cautions = compute_warnings(make_calibration(noise_samples_used=900))
    assert 'noise_slow_convergence' in cautions


def test_caution_high_noise():
    _, cautions = compute_warnings(make_calibration(noise_std_dev=20.0))
    assert 'high_noise' in cautions


def test_warning_sample_rate_mismatch():
    warnings, _ = compute_warnings(make_calibration(), sample_rates=[None, 100.0])
    assert 'sample_rate_mismatch' in warnings


def test_caution_skipped_lines():
    _, cautions = compute_warnings(make_calibration(), skipped_lines=3)
    assert '3' in cautions['skipped_lines']


def test_no_calibration():
    warnings, cautions = compute_warnings(None)
    assert warnings == {}
    assert cautions == {}
