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
Main EuroTune calibration engine.
Contains run_calibration for deriving One Euro parameters from recordings.
"""
import logging
import math

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .calibrator import StartCalibration
from .structures import SAMPLE_X, SAMPLE_Y, SAMPLE_Z

logger = logging.getLogger(__name__)


def _as_samples(samples):
    samples = np.asarray(samples, dtype=float)
    if samples.ndim != 2 or samples.shape[1] != 3:
        raise ValueError(f"Samples must have shape (n, 3), got {samples.shape}")
    return samples


def run_calibration(noise_samples, motion_samples, least_precision, worst_lag_secs,
                    grid, max_relaxation_rounds=None, record_candidates=False):
    """
    Calibrate One Euro parameters from a resting and a moving recording.

    Noise samples are consumed until the noise estimate converges; the rest
    of the resting recording is ignored. Every motion sample feeds the
    amplitude estimate.

    Args:
        noise_samples: array (n, 3) recorded with the device at rest
        motion_samples: array (m, 3) recorded with the device moving
        least_precision: largest tolerable steady-state error
        worst_lag_secs: largest tolerable settling time
        grid: precision Grid
        max_relaxation_rounds: tuner sweep limit (default: config.TUNER_MAX_RELAXATION_ROUNDS)
        record_candidates: keep simulated candidates for charts

    Returns:
        dict: {
            'noise_variance': float,
            'noise_std_dev': float,
            'noise_samples_used': int,
            'noise_samples_total': int,
            'noise_converged': bool,
            'motion_samples': int,
            'max_amplitude': float,
            'tuning_settings': dict,
            'result': dict (min_cutoff_hz, beta),
            'report': dict,
            'convergence_trace': list of (samples_seen, mean, ci95),
            'candidates': list of candidate tuples or None
        }
        or None if the noise recording is too short or never converges

    Raises:
        NoFeasibleConfigurationError: the tuner gave up
    """
    noise_samples = _as_samples(noise_samples)
    motion_samples = _as_samples(motion_samples)

    min_noise = getattr(config, 'MIN_NOISE_SAMPLES', 120)
    min_motion = getattr(config, 'MIN_MOTION_SAMPLES', 60)

    if len(noise_samples) < min_noise:
        logger.warning(f"Insufficient noise data for calibration: {len(noise_samples)} < {min_noise}")
        return None
    if len(motion_samples) < min_motion:
        logger.warning(f"Insufficient motion data for calibration: {len(motion_samples)} < {min_motion}")
        return None

    noise_stage = StartCalibration().first_stage()
    used = 0
    for sample in noise_samples:
        used += 1
        if noise_stage.process_noise(sample[SAMPLE_X], sample[SAMPLE_Y], sample[SAMPLE_Z]):
            break

    if not noise_stage.converged:
        logger.warning(f"Noise estimate did not converge over {used} samples")
        return None

    convergence_trace = list(noise_stage.estimator.convergence_trace)
    amplitude_stage = noise_stage.next()

    for sample in motion_samples:
        amplitude_stage.process_amplitude(sample[SAMPLE_X], sample[SAMPLE_Y], sample[SAMPLE_Z])

    settings = amplitude_stage.tuning_settings(least_precision, worst_lag_secs)
    tuner = amplitude_stage.tuner(
        least_precision,
        worst_lag_secs,
        grid=grid,
        max_relaxation_rounds=max_relaxation_rounds,
        record_candidates=record_candidates,
    )
    result = tuner.tune()

    return {
        'noise_variance': settings.noise_variance,
        'noise_std_dev': math.sqrt(settings.noise_variance),
        'noise_samples_used': used,
        'noise_samples_total': len(noise_samples),
        'noise_converged': True,
        'motion_samples': len(motion_samples),
        'max_amplitude': settings.max_amplitude,
        'tuning_settings': settings.to_dict(),
        'result': result.to_dict(),
        'report': tuner.report.to_dict(),
        'convergence_trace': convergence_trace,
        'candidates': tuner.candidates,
    }
