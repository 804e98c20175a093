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
Configuration file for EuroTune.
Contains all constants and settings for filter calibration.

Device I/O settings do not belong here.
This module contains only calibration parameters and constants.
"""
import os

# ============================================================
# Sampling
# ============================================================
SAMPLE_RATE_HZ = 60.0          # Fixed-rate calibration path (Hz)
SAMPLE_RATE_TOLERANCE = 0.1    # Relative deviation before a recording is flagged

# ============================================================
# Running Statistics
# ============================================================
CI95_Z_SCORE = 1.96            # z-score of the 95% confidence interval

# ============================================================
# Noise Estimation (sliding 3-bin DFT)
# ============================================================
NOISE_MONITORED_FREQUENCIES = 20    # Bins monitored, counted back from Nyquist
NOISE_CONVERGENCE_THRESHOLD = 0.1   # Converged when 2*ci95/mean drops below this
NOISE_HANN_CENTER_WEIGHT = 0.5      # Hanning combination: 0.5*X[k]
NOISE_HANN_SIDE_WEIGHT = 0.25       # Hanning combination: -0.25*(X[k-1] + X[k+1])

# ============================================================
# Amplitude Estimation (robust peak excursion)
# ============================================================
AMPLITUDE_TRACKED_PEAKS = 5         # Top-N jumps kept; the minimum is reported
AMPLITUDE_NOISE_SIGMA = 3.0         # Jumps must exceed this many noise std-devs

# ============================================================
# Tuning Targets
# ============================================================
PRECISION_DIVISOR = 3.0             # max_target_precision = least_precision / 3

# ============================================================
# One Euro Filter defaults
# ============================================================
ONE_EURO_MIN_CUTOFF = 1.0
ONE_EURO_BETA = 1.0
ONE_EURO_D_CUTOFF = 1.0

# ============================================================
# Precision Table (Grid)
# ============================================================
GRID_J_DIM = 30                 # Jitter levels: 1/3, 2/3, ... 10
GRID_FC_DIM = 81                # Min cutoff: 0.05 Hz steps
GRID_B_DIM = 55                 # Beta rows, decade-shift encoded
GRID_JITTER_LEVELS = 3.0        # Jitter levels per unit (step 1/3, first level 1/3)
GRID_CUTOFF_STEP = 0.05         # Min cutoff step (Hz)
GRID_CUTOFF_OFFSET = 0.05       # Subtracted from cutoff / step
GRID_BETA_START_INDEX = 46.0    # Row of beta = 1.0 before the final shift
GRID_BETA_DECADE_ROWS = 9.0     # Rows per beta decade
GRID_BETA_DECADE_FACTOR = 10.00000001  # Slightly above 10 to avoid float drift
# External asset, not shipped; set EUROTUNE_TABLE_PATH or pass a Grid explicitly
GRID_TABLE_PATH = os.environ.get(
    'EUROTUNE_TABLE_PATH',
    os.path.join(os.path.dirname(__file__), 'data', 'sixty_hz.npy'),
)

# ============================================================
# Tuner Search
# ============================================================
TUNER_CUTOFF_MIN_CENTI_HZ = 10      # Cutoff sweep start, hundredths of Hz (0.10)
TUNER_CUTOFF_MAX_CENTI_HZ = 400     # Cutoff sweep end, exclusive (3.99 last)
TUNER_BETA_START = 1.0              # Beta sweep starts here and walks down
TUNER_BETA_SCALES = 5               # Decades walked by the beta sweep
TUNER_BETA_STEPS_PER_SCALE = 36     # Steps per decade, step = 10^-scale / 4
TUNER_BETA_STEP_DIVISOR = 4.0
TUNER_BETA_DECIMALS = 6             # Rounding applied to beta each step
TUNER_RELAXATION_STEP = 1.0 / 3.0   # Added to target precision after every sweep
TUNER_MAX_RELAXATION_ROUNDS = 30    # Sweeps before giving up
TUNER_WARMUP_SAMPLES = 2            # Zero samples fed before each lag simulation
LAG_MAX_SAMPLES = 3600              # Lag simulation cap (60 s at 60 Hz)

# ============================================================
# Warning Thresholds
# ============================================================
RELAXATION_WARNING_ROUNDS = 2       # Relaxed this many rounds or more -> warning
MIN_NOISE_SAMPLES = 120             # Two full buffer cycles at 60 Hz
MIN_MOTION_SAMPLES = 60
NOISE_SLOW_CONVERGENCE_SAMPLES = 600  # Ten seconds of rest at 60 Hz

# ============================================================
# Visualization Parameters
# ============================================================
CHART_DPI = 150
CHART_FIGSIZE = (12, 8)
CHART_COLORMAP = 'viridis'
MARKER_SIZE = 8
ALPHA_CANDIDATES = 0.5
LEGEND_FONTSIZE = 11
ANNOTATION_FONTSIZE = 9
