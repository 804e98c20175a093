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

"""Input format parsers: sample recordings and precision tables."""

from .samples_handler import (
    parse_samples_file,
    estimate_sample_rate,
    sample_rate_matches,
)
from .table_handler import load_precision_table

__all__ = [
    # Recordings
    'parse_samples_file',
    'estimate_sample_rate',
    'sample_rate_matches',
    # Precision tables
    'load_precision_table',
]
