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
Calibration stages.

Calibration runs in a fixed order: noise, then amplitude, then tuning. Each
stage object hands over to the next one and cannot be used afterwards:

    StartCalibration -> NoiseCalibrator -> AmplitudeCalibrator -> TuningSettings / Tuner

Calibrator wraps the same stages in a single object driven by a
CalibrationState, for callers that feed samples from one loop.
"""
import logging
import math
from enum import Enum

try:
    from .. import config
except ImportError:
    import config

from .amplitude import ThreeAxisMaxDistanceEstimator
from .errors import NotReadyError, StageConsumedError
from .noise import FixedRateThreeAxisNoiseEstimator
from .structures import TuningSettings
from .tuner import Tuner

logger = logging.getLogger(__name__)


class _Stage:
    """Marks a stage as used up once it has handed over to the next one."""

    def __init__(self):
        self._consumed = False

    def _check_active(self):
        if self._consumed:
            raise StageConsumedError(f"{type(self).__name__} has already handed over to the next stage")

    def _consume(self):
        self._check_active()
        self._consumed = True


class StartCalibration(_Stage):

    def first_stage(self):
        """Begin noise calibration with a fresh fixed-rate estimator."""
        self._consume()
        return NoiseCalibrator(FixedRateThreeAxisNoiseEstimator())


class NoiseCalibrator(_Stage):
    """Collects samples of the device at rest until the noise estimate converges."""

    def __init__(self, estimator):
        super().__init__()
        self.estimator = estimator
        self.converged = False

    def process_noise(self, x, y, z):
        """Feed one sample; True once the noise variance has converged."""
        self._check_active()
        if self.estimator.update(x, y, z):
            self.converged = True
        return self.converged

    def next(self):
        """
        Hand over to amplitude calibration.

        Raises:
            NotReadyError: process_noise has not returned True yet
        """
        self._check_active()
        if not self.converged:
            raise NotReadyError(
                f"Noise calibration has not converged after {self.estimator.samples_seen} samples"
            )
        self._consume()

        noise_variance = self.estimator.mean_variance()
        noise_std_dev = math.sqrt(noise_variance)
        logger.info(
            f"Noise calibrated: variance {noise_variance:.6g} "
            f"(std-dev {noise_std_dev:.6g}) after {self.estimator.samples_seen} samples"
        )
        return AmplitudeCalibrator(noise_std_dev)


class AmplitudeCalibrator(_Stage):
    """Collects samples of the device in motion to find its peak excursion."""

    def __init__(self, noise_std_dev):
        super().__init__()
        self.noise_std_dev = noise_std_dev
        self.estimator = ThreeAxisMaxDistanceEstimator(noise_std_dev)

    def process_amplitude(self, x, y, z):
        self._check_active()
        self.estimator.update(x, y, z)

    def tuning_settings(self, least_precision, worst_lag_secs):
        """Tuning targets for the worst acceptable precision and lag."""
        self._check_active()
        divisor = getattr(config, 'PRECISION_DIVISOR', 3.0)
        return TuningSettings(
            max_target_precision=least_precision / divisor,
            max_lag_secs=worst_lag_secs,
            noise_variance=self.noise_std_dev ** 2,
            max_amplitude=self.estimator.max_within_reason(),
            sample_rate=getattr(config, 'SAMPLE_RATE_HZ', 60.0),
        )

    def reopen(self):
        """Fresh stage sharing this one's amplitude estimate, for a retry after a failed tune."""
        stage = AmplitudeCalibrator(self.noise_std_dev)
        stage.estimator = self.estimator
        return stage

    def tuner(self, least_precision, worst_lag_secs, grid=None,
              max_relaxation_rounds=None, record_candidates=False):
        """Build the tuning settings and a Tuner for them; ends amplitude calibration."""
        settings = self.tuning_settings(least_precision, worst_lag_secs)
        self._consume()
        return Tuner(
            settings,
            grid=grid,
            max_relaxation_rounds=max_relaxation_rounds,
            record_candidates=record_candidates,
        )


class CalibrationState(Enum):
    WAIT_TO_START = 'wait_to_start'
    ESTIMATE_NOISE = 'estimate_noise'
    ESTIMATE_AMPLITUDE = 'estimate_amplitude'
    ESTIMATE_PARAMETERS = 'estimate_parameters'
    TUNED = 'tuned'


class Calibrator:
    """
    Single-object calibration driver.

    Allowed transitions:
        WAIT_TO_START -> ESTIMATE_NOISE            start()
        ESTIMATE_NOISE -> ESTIMATE_AMPLITUDE       process() once noise converges
        ESTIMATE_AMPLITUDE -> ESTIMATE_PARAMETERS  tune()
        ESTIMATE_PARAMETERS -> TUNED               tune() returns
        ESTIMATE_PARAMETERS -> ESTIMATE_AMPLITUDE  tune() raises

    Anything else raises NotReadyError.
    """

    def __init__(self, least_precision, worst_lag_secs, grid=None, max_relaxation_rounds=None):
        self.least_precision = least_precision
        self.worst_lag_secs = worst_lag_secs
        self.grid = grid
        self.max_relaxation_rounds = max_relaxation_rounds
        self.state = CalibrationState.WAIT_TO_START
        self.result = None
        self.tuner = None
        self._noise = None
        self._amplitude = None

    def _require(self, *states):
        if self.state not in states:
            expected = ', '.join(s.name for s in states)
            raise NotReadyError(f"Calibrator is in state {self.state.name}, expected {expected}")

    def start(self):
        self._require(CalibrationState.WAIT_TO_START)
        self._noise = StartCalibration().first_stage()
        self.state = CalibrationState.ESTIMATE_NOISE
        return self.state

    def process(self, x, y, z):
        """Route one sample to the active stage and return the resulting state."""
        self._require(CalibrationState.ESTIMATE_NOISE, CalibrationState.ESTIMATE_AMPLITUDE)

        if self.state is CalibrationState.ESTIMATE_NOISE:
            if self._noise.process_noise(x, y, z):
                self._amplitude = self._noise.next()
                self._noise = None
                self.state = CalibrationState.ESTIMATE_AMPLITUDE
        else:
            self._amplitude.process_amplitude(x, y, z)

        return self.state

    def tuning_settings(self):
        self._require(CalibrationState.ESTIMATE_AMPLITUDE)
        return self._amplitude.tuning_settings(self.least_precision, self.worst_lag_secs)

    def tune(self):
        """
        Finish amplitude calibration and search the filter parameters.

        If the search fails (for example NoFeasibleConfigurationError), the
        calibrator returns to ESTIMATE_AMPLITUDE with the samples collected so
        far, so more motion can be fed or the targets changed before retrying.
        """
        self._require(CalibrationState.ESTIMATE_AMPLITUDE)
        amplitude = self._amplitude
        self._amplitude = None
        self.state = CalibrationState.ESTIMATE_PARAMETERS

        try:
            self.tuner = amplitude.tuner(
                self.least_precision,
                self.worst_lag_secs,
                grid=self.grid,
                max_relaxation_rounds=self.max_relaxation_rounds,
            )
            self.result = self.tuner.tune()
        except Exception:
            logger.warning("Tuning failed, returning to amplitude estimation")
            self._amplitude = amplitude.reopen()
            self.tuner = None
            self.state = CalibrationState.ESTIMATE_AMPLITUDE
            raise

        self.state = CalibrationState.TUNED
        return self.result
