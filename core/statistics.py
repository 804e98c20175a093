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
Running statistics over a scalar stream.

Welford's online algorithm for mean and variance, plus the half-width of the
95% confidence interval of the mean, which the noise calibration uses as its
convergence criterion.
"""
import math

try:
    from .. import config
except ImportError:
    import config


class RunningStatistics:
    """
    Online mean/variance/CI95 tracker (Welford).

    ``sample_variance`` and ``ci95`` stay ``None`` until two values have been
    observed: with a single value the unbiased variance divides by zero.
    """

    def __init__(self):
        self.count = 0
        self.mean = 0.0
        self.m2 = 0.0
        self.sample_variance = None
        self.max = -math.inf
        self.ci95 = None

    def update(self, value):
        """Fold one value into the running estimates."""
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        delta2 = value - self.mean
        self.m2 += delta * delta2

        self.max = max(self.max, value)

        if self.count < 2:
            return

        z_score = getattr(config, 'CI95_Z_SCORE', 1.96)
        self.sample_variance = self.m2 / (self.count - 1)
        self.ci95 = z_score * math.sqrt(self.sample_variance / self.count)

    def relative_ci95(self):
        """Full CI95 width relative to the mean, or None if undefined."""
        if self.ci95 is None or self.mean <= 0.0:
            return None
        return 2.0 * self.ci95 / self.mean
