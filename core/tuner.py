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
Filter parameter search module.

Sweeps (min cutoff, beta) pairs, keeps those whose table precision meets the
target, simulates the step-response lag of each and keeps the best one. When
a full sweep accepts nothing the target precision is relaxed and the sweep
restarts.
"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP

try:
    from .. import config
except ImportError:
    import config

from .errors import NoFeasibleConfigurationError
from .grid import Grid
from .one_euro import OneEuroFilter
from .structures import (
    FinalTuningSettings,
    TuningReport,
    UNSET,
    INITIAL_BEST_BETA,
)

logger = logging.getLogger(__name__)


def cutoff_schedule():
    """Min cutoff values swept by the tuner, in Hz (0.10 to 3.99)."""
    start = getattr(config, 'TUNER_CUTOFF_MIN_CENTI_HZ', 10)
    stop = getattr(config, 'TUNER_CUTOFF_MAX_CENTI_HZ', 400)
    return [centi / 100.0 for centi in range(start, stop)]


def beta_schedule():
    """
    Beta values swept for every cutoff, walking down from 1.0.

    Each scale walks one decade: 36 steps of 10^-scale / 4, rounded to
    6 decimals (halves away from zero) so the decrements do not drift.
    """
    beta = getattr(config, 'TUNER_BETA_START', 1.0)
    scales = getattr(config, 'TUNER_BETA_SCALES', 5)
    steps = getattr(config, 'TUNER_BETA_STEPS_PER_SCALE', 36)
    divisor = getattr(config, 'TUNER_BETA_STEP_DIVISOR', 4.0)
    decimals = getattr(config, 'TUNER_BETA_DECIMALS', 6)
    scale_factor = 10.0 ** decimals

    betas = []
    for scale in range(1, scales + 1):
        step = 10.0 ** -scale / divisor
        for _ in range(steps):
            beta -= step
            scaled = Decimal(beta * scale_factor).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            beta = float(scaled) / scale_factor
            betas.append(beta)
    return betas


class Tuner:
    """
    Searches One Euro parameters for a set of TuningSettings.

    Args:
        settings: TuningSettings from the amplitude calibration stage
        grid: precision Grid (default: loaded from config.GRID_TABLE_PATH; the
            table is an external asset not shipped with the package, so a
            missing file raises FileNotFoundError)
        max_relaxation_rounds: sweeps before giving up
            (default: config.TUNER_MAX_RELAXATION_ROUNDS)
        record_candidates: keep every simulated candidate in ``candidates``
    """

    def __init__(self, settings, grid=None, max_relaxation_rounds=None, record_candidates=False):
        if grid is None:
            grid = Grid.from_file(config.GRID_TABLE_PATH)
        if max_relaxation_rounds is None:
            max_relaxation_rounds = getattr(config, 'TUNER_MAX_RELAXATION_ROUNDS', 30)
        if max_relaxation_rounds < 1:
            raise ValueError(f"max_relaxation_rounds must be at least 1, got {max_relaxation_rounds}")

        self.settings = settings
        self.grid = grid
        self.max_relaxation_rounds = max_relaxation_rounds
        self.filter = OneEuroFilter(
            settings.sample_rate,
            getattr(config, 'ONE_EURO_MIN_CUTOFF', 1.0),
            getattr(config, 'ONE_EURO_BETA', 1.0),
            getattr(config, 'ONE_EURO_D_CUTOFF', 1.0),
        )
        self.current_filtered_val = 0.0
        self.candidates = [] if record_candidates else None
        self.report = None

    def lag_s(self, target_precision):
        """
        Simulated settling time of the current filter configuration.

        Warms the filter with zeros, then feeds a constant max_amplitude until
        the output is within target_precision of it. The filter keeps its state
        between calls. Returns math.inf if it has not settled after
        config.LAG_MAX_SAMPLES samples.
        """
        warmup = getattr(config, 'TUNER_WARMUP_SAMPLES', 2)
        max_samples = getattr(config, 'LAG_MAX_SAMPLES', 3600)
        amplitude = self.settings.max_amplitude

        for _ in range(warmup):
            self.current_filtered_val = self.filter.filter(0.0)

        for count in range(1, max_samples + 1):
            self.current_filtered_val = self.filter.filter(amplitude)
            if abs(self.current_filtered_val - amplitude) < target_precision:
                return count / self.settings.sample_rate

        return math.inf

    def tune(self):
        """
        Search for the best (min_cutoff_hz, beta).

        Returns:
            FinalTuningSettings; ``self.report`` holds the supporting figures

        Raises:
            NoFeasibleConfigurationError: no candidate was accepted within
                max_relaxation_rounds sweeps
        """
        noise_stddev = math.sqrt(self.settings.noise_variance)
        max_lag_secs = self.settings.max_lag_secs
        relaxation_step = getattr(config, 'TUNER_RELAXATION_STEP', 1.0 / 3.0)

        best_precision = UNSET
        best_lag_s = UNSET
        best_min_cutoff_hz = None
        best_beta = INITIAL_BEST_BETA

        target_precision = self.settings.max_target_precision
        accepted_target = target_precision
        rounds = 0
        evaluated = 0

        cutoffs = cutoff_schedule()
        betas = beta_schedule()

        while best_precision == UNSET:
            if rounds >= self.max_relaxation_rounds:
                raise NoFeasibleConfigurationError(rounds, target_precision)

            accepted_target = target_precision
            for min_hz in cutoffs:
                self.filter.cutoff_min = min_hz

                for beta in betas:
                    precision = self.grid.precision(noise_stddev, min_hz, beta)
                    if precision > target_precision:
                        continue

                    self.filter.beta = beta
                    lag_s = self.lag_s(target_precision)
                    evaluated += 1

                    # Once a lag-feasible candidate exists, only lag-feasible
                    # candidates with no worse precision replace it
                    if best_lag_s <= max_lag_secs:
                        accept = not (lag_s >= max_lag_secs or precision > best_precision)
                    else:
                        accept = lag_s <= best_lag_s

                    if self.candidates is not None:
                        self.candidates.append((min_hz, beta, precision, lag_s, accept))

                    if not accept:
                        continue

                    best_precision = precision
                    best_lag_s = lag_s
                    best_beta = beta
                    best_min_cutoff_hz = min_hz

            logger.debug(
                f"Sweep {rounds + 1}: target precision {target_precision:.4f}, "
                f"{evaluated} candidates simulated so far"
            )
            target_precision += relaxation_step
            rounds += 1

        result = FinalTuningSettings(min_cutoff_hz=best_min_cutoff_hz, beta=best_beta)
        self.report = TuningReport(
            settings=result,
            precision=best_precision,
            lag_s=best_lag_s,
            target_precision=accepted_target,
            relaxation_rounds=rounds - 1,
            candidates_evaluated=evaluated,
        )
        logger.info(
            f"Tuned min_cutoff={result.min_cutoff_hz:.2f} Hz, beta={result.beta:g} "
            f"(precision {best_precision:.4f}, lag {best_lag_s:.3f} s, "
            f"{rounds - 1} relaxation rounds)"
        )
        return result
