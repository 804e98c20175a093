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
Sample recording handler - parsing 3-axis sensor recordings.

A recording is a text file with one sample per line, either ``x y z`` or
``t x y z`` (t in seconds). Values may be separated by commas, semicolons or
whitespace. Lines starting with ``#`` are comments; a non-numeric first line
is treated as a header.
"""
import logging
import re

import numpy as np

try:
    from .. import config
except ImportError:
    import config

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r'[,;\s]+')


def _split_line(line):
    return [field for field in _SEPARATORS.split(line.strip()) if field]


def parse_samples_file(file_path, return_dict=False):
    """
    Parses a recording and extracts 3-axis samples.

    Args:
        file_path: path to the recording
        return_dict: if True, also return timestamps and the sample rate

    Returns:
        If return_dict=False (default):
            np.ndarray of shape (n, 3)
        If return_dict=True:
            dict: {
                'samples': np.ndarray (n, 3),
                'timestamps': np.ndarray (n,) or None,
                'sample_rate': float or None,
                'skipped_lines': int
            }

    Raises:
        ValueError: file is empty, has no samples or inconsistent columns
    """
    with open(file_path, 'r') as f:
        lines = f.readlines()

    if not lines:
        raise ValueError(f"File {file_path} is empty")

    rows = []
    n_columns = None
    skipped = 0
    header_checked = False

    for line_no, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue

        fields = _split_line(stripped)
        try:
            values = [float(field) for field in fields]
        except ValueError:
            if not header_checked:
                header_checked = True
                continue
            logger.warning(f"Skipping malformed line {line_no} in {file_path}: '{stripped}'")
            skipped += 1
            continue
        header_checked = True

        if len(values) not in (3, 4):
            raise ValueError(
                f"Line {line_no} in {file_path} has {len(values)} columns, expected 3 or 4"
            )
        if n_columns is None:
            n_columns = len(values)
        elif len(values) != n_columns:
            raise ValueError(
                f"Line {line_no} in {file_path} has {len(values)} columns, "
                f"previous lines have {n_columns}"
            )
        rows.append(values)

    if not rows:
        raise ValueError(f"No samples found in file {file_path}")

    data = np.array(rows, dtype=float)
    if n_columns == 4:
        timestamps = data[:, 0]
        samples = data[:, 1:]
    else:
        timestamps = None
        samples = data

    if not return_dict:
        return samples

    return {
        'samples': samples,
        'timestamps': timestamps,
        'sample_rate': estimate_sample_rate(timestamps) if timestamps is not None else None,
        'skipped_lines': skipped,
    }


def estimate_sample_rate(timestamps):
    """
    Sample rate from timestamps in seconds (median interval).

    Returns:
        float or None if fewer than two distinct timestamps
    """
    if timestamps is None or len(timestamps) < 2:
        return None
    intervals = np.diff(np.asarray(timestamps, dtype=float))
    intervals = intervals[intervals > 0]
    if len(intervals) == 0:
        return None
    return float(1.0 / np.median(intervals))


def sample_rate_matches(sample_rate, expected=None):
    """True if a measured sample rate is within tolerance of the expected one."""
    if sample_rate is None:
        return True
    if expected is None:
        expected = getattr(config, 'SAMPLE_RATE_HZ', 60.0)
    tolerance = getattr(config, 'SAMPLE_RATE_TOLERANCE', 0.1)
    return abs(sample_rate - expected) <= tolerance * expected
