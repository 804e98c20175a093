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
Sensor noise estimation module.

Estimates white-noise variance of a resting 3-axis sensor from the power at a
set of high-frequency DFT bins. Each bin is tracked with a sliding DFT over a
one-second window; the Hanning window is applied in the frequency domain by
combining the bin with its two neighbours, so no FFT is computed per sample.
"""
import logging

import numpy as np
from scipy.signal import windows

try:
    from .. import config
except ImportError:
    import config

from .errors import NotReadyError
from .statistics import RunningStatistics
from .structures import AXES

logger = logging.getLogger(__name__)


class RingBuffer:
    """Fixed-capacity circular buffer, zero-filled, evicting on push."""

    def __init__(self, capacity):
        if capacity < 1:
            raise ValueError(f"Ring buffer capacity must be positive, got {capacity}")
        self._data = np.zeros(capacity, dtype=float)
        self._head = 0  # Index of the oldest element

    def __len__(self):
        return len(self._data)

    @property
    def oldest(self):
        return float(self._data[self._head])

    def push(self, value):
        """Store value over the oldest element and return the evicted one."""
        evicted = float(self._data[self._head])
        self._data[self._head] = value
        self._head = (self._head + 1) % len(self._data)
        return evicted


def hann_window_power(n):
    """Sum of squared symmetric Hann window coefficients of length n."""
    window = windows.hann(n, sym=True)
    return float(np.sum(window * window))


class NoiseEstimator:
    """
    Narrowband power estimate at one DFT bin.

    Args:
        sample_hz: sample rate, also the window length N (one second)
        monitor_hz: bin offset counted back from Nyquist (k = N/2 - monitor_hz)
    """

    def __init__(self, sample_hz, monitor_hz):
        sample_hz = int(sample_hz)
        if sample_hz < 2:
            raise ValueError(f"Sample rate must be at least 2 Hz, got {sample_hz}")

        k = sample_hz // 2 - int(monitor_hz)
        if k - 1 < 0:
            raise ValueError(
                f"Monitored offset {monitor_hz} Hz is outside the spectrum at {sample_hz} Hz"
            )

        self.sample_hz = sample_hz
        self.bin = k
        self._buffer = RingBuffer(sample_hz)

        # Rotators for bins k-1, k, k+1
        bins = np.array([k - 1, k, k + 1], dtype=float)
        w0, w1, w2 = np.exp(2j * np.pi * bins / sample_hz)
        self._w0 = complex(w0)
        self._w1 = complex(w1)
        self._w2 = complex(w2)

        self._x0 = 0j
        self._x1 = 0j
        self._x2 = 0j

        self.power = 0.0
        self.count = 0
        self.window_power = hann_window_power(sample_hz)

        self._center = getattr(config, 'NOISE_HANN_CENTER_WEIGHT', 0.5)
        self._side = getattr(config, 'NOISE_HANN_SIDE_WEIGHT', 0.25)

    def update(self, sample):
        """Slide the window by one sample."""
        change = sample - self._buffer.oldest
        self._x0 = self._w0 * (self._x0 + change)
        self._x1 = self._w1 * (self._x1 + change)
        self._x2 = self._w2 * (self._x2 + change)

        self._buffer.push(sample)
        self.count += 1

        if self.count >= self.sample_hz:
            windowed = self._center * self._x1 - self._side * self._x0 - self._side * self._x2
            self.power += windowed.real * windowed.real + windowed.imag * windowed.imag

    def variance(self):
        """Noise variance estimate, or None until a full window has been observed."""
        if self.count <= self.sample_hz:
            return None
        return self.power / ((self.count - self.sample_hz) * self.window_power)


class ThreeAxisNoiseEstimator:
    """
    Aggregate noise variance over several bins and all three axes.

    Noise is assumed white and identical on every axis, so every defined
    per-bin variance is folded into one RunningStatistics. The estimate has
    converged once the full CI95 width relative to the mean falls below
    ``threshold``.
    """

    def __init__(self, sample_hz, monitored_frequencies, threshold=None):
        if threshold is None:
            threshold = getattr(config, 'NOISE_CONVERGENCE_THRESHOLD', 0.1)
        monitored_frequencies = list(monitored_frequencies)
        if not monitored_frequencies:
            raise ValueError("At least one monitored frequency is required")

        self.sample_hz = int(sample_hz)
        self.threshold = threshold
        self.monitored_frequencies = monitored_frequencies
        self.statistics = RunningStatistics()
        self.samples_seen = 0
        self.convergence_trace = []

        # estimators[axis][frequency index]
        self._estimators = [
            [NoiseEstimator(self.sample_hz, hz) for hz in monitored_frequencies]
            for _ in range(AXES)
        ]

    def update(self, x, y, z):
        """Consume one 3-axis sample; True once the estimate has converged."""
        self.samples_seen += 1
        x_estimators, y_estimators, z_estimators = self._estimators

        for ex, ey, ez in zip(x_estimators, y_estimators, z_estimators):
            ex.update(x)
            ey.update(y)
            ez.update(z)

            vx = ex.variance()
            vy = ey.variance()
            vz = ez.variance()
            if vx is None or vy is None or vz is None:
                continue

            self.statistics.update(vx)
            self.statistics.update(vy)
            self.statistics.update(vz)

        if self.statistics.ci95 is not None:
            self.convergence_trace.append(
                (self.samples_seen, self.statistics.mean, self.statistics.ci95)
            )

        return self.is_converged()

    def is_converged(self):
        relative = self.statistics.relative_ci95()
        return relative is not None and relative < self.threshold

    def mean_variance(self):
        """White-noise variance estimate (mean of all folded variances)."""
        if self.statistics.count == 0:
            raise NotReadyError(
                f"No noise variance yet: {self.samples_seen} samples seen, "
                f"need more than {self.sample_hz}"
            )
        return self.statistics.mean


class FixedRateThreeAxisNoiseEstimator(ThreeAxisNoiseEstimator):
    """Noise estimator for the fixed 60 Hz path, monitoring 20 bins below Nyquist."""

    def __init__(self, threshold=None):
        sample_hz = int(getattr(config, 'SAMPLE_RATE_HZ', 60.0))
        n_frequencies = getattr(config, 'NOISE_MONITORED_FREQUENCIES', 20)
        super().__init__(sample_hz, range(n_frequencies), threshold=threshold)
