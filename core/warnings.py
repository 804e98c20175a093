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
Warning and notification generation module.
Single point for all calibration warning logic.
"""

import logging

# Import config for threshold values
try:
    from .. import config
    from ..locales.strings import WARNINGS, CAUTIONS
except ImportError:
    import config
    from locales.strings import WARNINGS, CAUTIONS

logger = logging.getLogger(__name__)


def compute_warnings(calibration, sample_rates=None, skipped_lines=0):
    """
    Unified function for computing all calibration warnings.

    Args:
        calibration: dict returned by core.session.run_calibration
        sample_rates: list of sample rates measured from the recordings (None entries allowed)
        skipped_lines: int, malformed lines skipped while parsing recordings

    Returns:
        tuple: (warnings: dict, cautions: dict)
    """
    warnings = {}
    cautions = {}

    # 1. Amplitude
    _check_motion(calibration, warnings, cautions)

    # 2. Lag bound
    _check_lag(calibration, warnings, cautions)

    # 3. Target precision relaxation
    _check_relaxation(calibration, warnings, cautions)

    # 4. Noise estimate
    _check_noise(calibration, warnings, cautions)

    # 5. Recording quality
    _check_recordings(sample_rates, skipped_lines, warnings, cautions)

    return warnings, cautions


def _check_motion(calibration, warnings, cautions):
    """Check that the motion recording contained significant movement."""
    if not calibration:
        return

    if calibration.get('max_amplitude', 0.0) <= 0.0:
        warnings['no_motion'] = WARNINGS['no_motion']


def _check_lag(calibration, warnings, cautions):
    """Check the simulated lag of the chosen parameters against the bound."""
    if not calibration:
        return

    report = calibration.get('report') or {}
    settings = calibration.get('tuning_settings') or {}
    lag = report.get('lag_s')
    max_lag = settings.get('max_lag_secs')
    if lag is None or max_lag is None:
        return

    if lag > max_lag:
        warnings['lag_exceeded'] = WARNINGS['lag_exceeded'].format(lag=lag, max_lag=max_lag)


def _check_relaxation(calibration, warnings, cautions):
    """Check how far the target precision had to be relaxed."""
    if not calibration:
        return

    report = calibration.get('report') or {}
    settings = calibration.get('tuning_settings') or {}
    rounds = report.get('relaxation_rounds', 0)
    if not rounds:
        return

    target = report.get('target_precision')
    initial = settings.get('max_target_precision')
    warning_rounds = getattr(config, 'RELAXATION_WARNING_ROUNDS', 2)

    if rounds >= warning_rounds:
        warnings['precision_relaxed'] = WARNINGS['precision_relaxed'].format(
            rounds=rounds, target=target, initial=initial
        )
    else:
        cautions['precision_relaxed'] = CAUTIONS['precision_relaxed'].format(
            target=target, initial=initial
        )


def _check_noise(calibration, warnings, cautions):
    """Check noise convergence speed and whether the noise level fits the table."""
    if not calibration:
        return

    used = calibration.get('noise_samples_used', 0)
    slow = getattr(config, 'NOISE_SLOW_CONVERGENCE_SAMPLES', 600)
    if used > slow:
        cautions['noise_slow_convergence'] = CAUTIONS['noise_slow_convergence'].format(samples=used)

    std_dev = calibration.get('noise_std_dev')
    if std_dev is None:
        return
    levels = getattr(config, 'GRID_JITTER_LEVELS', 3.0)
    j_dim = getattr(config, 'GRID_J_DIM', 30)
    # Precision lookups clip the jitter index to the last table row
    if levels * std_dev - 1.0 > j_dim - 1:
        cautions['high_noise'] = CAUTIONS['high_noise'].format(std_dev=std_dev)


def _check_recordings(sample_rates, skipped_lines, warnings, cautions):
    """Check recording sample rates and parse losses."""
    try:
        from ..parsers.samples_handler import sample_rate_matches
    except ImportError:
        from parsers.samples_handler import sample_rate_matches

    expected = getattr(config, 'SAMPLE_RATE_HZ', 60.0)
    for rate in sample_rates or []:
        if not sample_rate_matches(rate, expected):
            warnings['sample_rate_mismatch'] = WARNINGS['sample_rate_mismatch'].format(
                rate=rate, expected=expected
            )
            break

    if skipped_lines:
        cautions['skipped_lines'] = CAUTIONS['skipped_lines'].format(count=skipped_lines)
