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
One Euro filter module.

Fixed-rate One Euro filter (Casiez et al., CHI 2012) used by the tuner to
simulate settling time, and a 3-axis wrapper for applying tuned settings.
"""
import math

try:
    from .. import config
except ImportError:
    import config


def smoothing_factor(rate, cutoff):
    """Exponential smoothing factor for a cutoff frequency at a sample rate."""
    tau = 1.0 / (2.0 * math.pi * cutoff)
    te = 1.0 / rate
    return 1.0 / (1.0 + tau / te)


class LowPassFilter:
    """First-order exponential smoother; the first sample passes through."""

    def __init__(self):
        self.last = None

    def filter(self, value, alpha):
        if self.last is None:
            self.last = value
        else:
            self.last = alpha * value + (1.0 - alpha) * self.last
        return self.last


class OneEuroFilter:
    """
    One Euro filter at a fixed sample rate.

    ``cutoff_min`` and ``beta`` may be changed between calls; the filter state
    is kept.

    Args:
        sample_rate: sample rate in Hz
        mincutoff: minimum cutoff frequency in Hz (default: config.ONE_EURO_MIN_CUTOFF)
        beta: speed coefficient (default: config.ONE_EURO_BETA)
        dcutoff: derivative cutoff in Hz (default: config.ONE_EURO_D_CUTOFF)
    """

    def __init__(self, sample_rate, mincutoff=None, beta=None, dcutoff=None):
        if mincutoff is None:
            mincutoff = getattr(config, 'ONE_EURO_MIN_CUTOFF', 1.0)
        if beta is None:
            beta = getattr(config, 'ONE_EURO_BETA', 1.0)
        if dcutoff is None:
            dcutoff = getattr(config, 'ONE_EURO_D_CUTOFF', 1.0)
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        self.rate = float(sample_rate)
        self.cutoff_min = mincutoff
        self.beta = beta
        self.cutoff_d = dcutoff
        self._x = LowPassFilter()
        self._dx = LowPassFilter()

    def filter(self, value):
        """Filter one sample and return the smoothed value."""
        previous = self._x.last
        dx = 0.0 if previous is None else (value - previous) * self.rate
        edx = self._dx.filter(dx, smoothing_factor(self.rate, self.cutoff_d))
        cutoff = self.cutoff_min + self.beta * abs(edx)
        return self._x.filter(value, smoothing_factor(self.rate, cutoff))

    def reset(self):
        self._x = LowPassFilter()
        self._dx = LowPassFilter()


class ThreeAxisFilter:
    """Three independent One Euro filters sharing one configuration."""

    def __init__(self, sample_rate=None):
        if sample_rate is None:
            sample_rate = getattr(config, 'SAMPLE_RATE_HZ', 60.0)
        self.sample_rate = sample_rate
        self._filters = [OneEuroFilter(sample_rate) for _ in range(3)]

    def set_dcutoff(self, dcutoff):
        for f in self._filters:
            f.cutoff_d = dcutoff

    def set_mincutoff(self, mincutoff):
        for f in self._filters:
            f.cutoff_min = mincutoff

    def set_beta(self, beta):
        for f in self._filters:
            f.beta = beta

    def apply(self, settings):
        """Configure from a FinalTuningSettings record."""
        self.set_mincutoff(settings.min_cutoff_hz)
        self.set_beta(settings.beta)

    def filter(self, sample):
        x, y, z = sample
        fx, fy, fz = self._filters
        return fx.filter(x), fy.filter(y), fz.filter(z)
