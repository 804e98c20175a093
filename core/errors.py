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

"""Exceptions raised by the calibration pipeline."""


class CalibrationError(Exception):
    """Base class for calibration failures."""


class NotReadyError(CalibrationError):
    """A stage was used before the stage it depends on completed."""


class StageConsumedError(CalibrationError):
    """A calibration stage was used after it transitioned to the next one."""


class NoFeasibleConfigurationError(CalibrationError):
    """The tuner exhausted its relaxation rounds without accepting a candidate."""

    def __init__(self, rounds, target_precision):
        self.rounds = rounds
        self.target_precision = target_precision
        super().__init__(
            f"No feasible filter configuration after {rounds} relaxation rounds "
            f"(last target precision {target_precision:.4f})"
        )


class PrecisionTableError(CalibrationError):
    """The precision table is malformed or was indexed outside its bounds."""
