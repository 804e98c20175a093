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
Peak amplitude estimation module.

Tracks the largest sample-to-sample jumps of a moving sensor. Only jumps
clearly above the noise floor count, and the smallest of the top few is
reported so a single tracking glitch cannot inflate the estimate.
"""

try:
    from .. import config
except ImportError:
    import config


class MaxDistanceEstimator:
    """
    Outlier-robust peak excursion of one axis.

    ``speeds`` keeps the largest jumps seen so far (they are distances between
    consecutive samples, the name is historical).
    """

    def __init__(self, slots=None, sigma=None):
        if slots is None:
            slots = getattr(config, 'AMPLITUDE_TRACKED_PEAKS', 5)
        if sigma is None:
            sigma = getattr(config, 'AMPLITUDE_NOISE_SIGMA', 3.0)
        self.previous = None
        self.speeds = [0.0] * slots
        self.sigma = sigma

    def update(self, sample, stddev):
        if self.previous is not None:
            delta = abs(self.previous - sample)
            if delta > self.sigma * stddev:
                slot = min(range(len(self.speeds)), key=self.speeds.__getitem__)
                if delta > self.speeds[slot]:
                    self.speeds[slot] = delta

        self.previous = sample

    def max_within_reason(self):
        """Smallest of the tracked maxima, not the true maximum."""
        return min(self.speeds)


class ThreeAxisMaxDistanceEstimator:
    """Runs one MaxDistanceEstimator per axis with a shared noise std-dev."""

    def __init__(self, noise_std_dev):
        self.noise_std_dev = noise_std_dev
        self.samples_seen = 0
        self._x = MaxDistanceEstimator()
        self._y = MaxDistanceEstimator()
        self._z = MaxDistanceEstimator()

    def update(self, x, y, z):
        self.samples_seen += 1
        self._x.update(x, self.noise_std_dev)
        self._y.update(y, self.noise_std_dev)
        self._z.update(z, self.noise_std_dev)

    def max_within_reason(self):
        return max(
            self._x.max_within_reason(),
            self._y.max_within_reason(),
            self._z.max_within_reason(),
        )
