#!/usr/bin/env python3
# EuroTune - One Euro filter calibration toolkit
# Copyright (C) 2024 EuroTune Contributors
#
# Shared data-structure definitions and index constants used across the
# calibration pipeline. Centralising these avoids "magic" tuple indexes
# sprinkled through the code and makes the data flow easier to understand.

"""
Core records and tuple layouts used in the EuroTune pipeline.

Sample tuple (``samples``)
--------------------------
Produced by ``parsers.samples_handler.parse_samples_file`` as rows of an
``(n, 3)`` array and consumed by every estimator::

    (
        x,      # 0 – first axis reading
        y,      # 1 – second axis reading
        z,      # 2 – third axis reading
    )

Convergence trace tuple (``convergence_trace``)
-----------------------------------------------
Recorded by ``core.noise.ThreeAxisNoiseEstimator`` once the running
statistics define a confidence interval::

    (
        samples_seen,   # 0 – samples consumed so far
        mean,           # 1 – running mean of the variance samples
        ci95,           # 2 – 95% confidence half-width of that mean
    )

Candidate tuple (``candidates``)
--------------------------------
Recorded by ``core.tuner.Tuner`` when candidate recording is enabled::

    (
        min_cutoff_hz,  # 0 – cutoff of the simulated filter
        beta,           # 1 – beta of the simulated filter
        precision,      # 2 – interpolated precision from the grid
        lag_s,          # 3 – simulated settling time in seconds
        accepted,       # 4 – bool flag: True if it became the best so far
    )
"""
import sys
from dataclasses import dataclass, asdict

# Indices for elements of sample tuples
SAMPLE_X = 0
SAMPLE_Y = 1
SAMPLE_Z = 2
AXES = 3

# Indices for elements of convergence trace tuples
TRACE_SAMPLES = 0
TRACE_MEAN = 1
TRACE_CI95 = 2

# Indices for elements of candidate tuples
CANDIDATE_CUTOFF = 0
CANDIDATE_BETA = 1
CANDIDATE_PRECISION = 2
CANDIDATE_LAG_S = 3
CANDIDATE_ACCEPTED = 4

# Sentinel used by the tuner before any candidate is accepted
UNSET = sys.float_info.max
INITIAL_BEST_BETA = 1.1


@dataclass(frozen=True)
class TuningSettings:
    """Targets derived from noise and amplitude calibration."""
    max_target_precision: float
    max_lag_secs: float
    noise_variance: float
    max_amplitude: float
    sample_rate: float

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class FinalTuningSettings:
    """Filter coefficients chosen by the tuner."""
    min_cutoff_hz: float
    beta: float

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class TuningReport:
    """Outcome of a tuning run with the figures behind the chosen settings."""
    settings: FinalTuningSettings
    precision: float            # Grid precision of the chosen pair
    lag_s: float                # Simulated lag of the chosen pair
    target_precision: float     # Target of the sweep that accepted it
    relaxation_rounds: int      # Sweeps that found nothing before it
    candidates_evaluated: int   # Lag simulations run over all sweeps

    def to_dict(self):
        return asdict(self)
