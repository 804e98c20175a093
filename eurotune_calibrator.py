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
EuroTune CLI entry point.

Derives One Euro filter parameters (min cutoff, beta) from a resting and a
moving 3-axis recording.
"""
import json
import os
import sys
import argparse
import logging

# Add script directory to path for imports
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from core.errors import NoFeasibleConfigurationError
from core.grid import Grid
from core.session import run_calibration
from core.visualization import plot_noise_convergence, plot_tuning_search
from core.warnings import compute_warnings
from parsers.samples_handler import parse_samples_file
import config
from locales.strings import ERRORS

logging.basicConfig(
    level=logging.ERROR,
    format='%(levelname)s: %(message)s',
    stream=sys.stderr
)
logger = logging.getLogger('eurotune_calibrator')


def fail(message):
    """Print an error response and exit."""
    error_response = {
        "success": False,
        "error": message
    }
    print(json.dumps(error_response, ensure_ascii=False, indent=2))
    sys.exit(1)


def load_recording(file_path):
    """
    Parse a recording for the CLI.

    Returns:
        dict from parse_samples_file(return_dict=True) plus 'file'
    """
    recording = parse_samples_file(file_path, return_dict=True)
    recording['file'] = os.path.basename(file_path)
    if recording['sample_rate'] is not None:
        recording['sample_rate'] = round(recording['sample_rate'], 2)
    return recording


def format_json_response(calibration, noise_recording, motion_recording, chart_paths=None,
                         warnings_dict=None, cautions_dict=None):
    """
    Format JSON response for CLI output.

    Args:
        calibration: dict from run_calibration
        noise_recording: parsed resting recording
        motion_recording: parsed moving recording
        chart_paths: dict of saved chart paths
        warnings_dict: warnings
        cautions_dict: cautions

    Returns:
        dict with JSON response
    """
    report = calibration['report']
    response = {
        "success": True,
        "result": calibration['result'],
        "calibration": {
            "noise_variance": calibration['noise_variance'],
            "noise_std_dev": calibration['noise_std_dev'],
            "noise_samples_used": calibration['noise_samples_used'],
            "max_amplitude": calibration['max_amplitude'],
            "precision": report['precision'],
            "lag_s": report['lag_s'],
            "target_precision": report['target_precision'],
            "relaxation_rounds": report['relaxation_rounds'],
            "candidates_evaluated": report['candidates_evaluated'],
        },
        "recordings": {
            "noise": {
                "file": noise_recording['file'],
                "samples": len(noise_recording['samples']),
                "sample_rate": noise_recording['sample_rate'],
            },
            "motion": {
                "file": motion_recording['file'],
                "samples": len(motion_recording['samples']),
                "sample_rate": motion_recording['sample_rate'],
            },
        },
        "graphs": chart_paths or {},
    }

    if warnings_dict:
        response["warning"] = warnings_dict

    if cautions_dict:
        response["caution"] = cautions_dict

    return response


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='One Euro filter calibration from 3-axis recordings')
    parser.add_argument('noise_file', help='Path to recording made with the device at rest')
    parser.add_argument('motion_file', help='Path to recording made with the device moving')
    parser.add_argument('--table', help='Path to precision table (.npy or .npz)',
                        default=getattr(config, 'GRID_TABLE_PATH', None))
    parser.add_argument('--least-precision', dest='least_precision', type=float,
                        help='Largest tolerable steady-state error', required=True)
    parser.add_argument('--worst-lag', dest='worst_lag', type=float,
                        help='Largest tolerable settling time in seconds', required=True)
    parser.add_argument('--max-rounds', dest='max_rounds', type=int,
                        help='Maximum number of precision relaxation rounds', default=None)
    parser.add_argument('--output', help='Output path for charts', default=None)
    parser.add_argument('--verbose', action='store_true', help='Log calibration progress to stderr')
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        for path in (args.noise_file, args.motion_file):
            if not os.path.exists(path):
                fail(ERRORS['file_not_found'].format(file_path=path))

        if not args.table or not os.path.exists(args.table):
            fail(ERRORS['table_not_found'].format(file_path=args.table))

        noise_recording = load_recording(args.noise_file)
        motion_recording = load_recording(args.motion_file)

        min_noise = getattr(config, 'MIN_NOISE_SAMPLES', 120)
        if len(noise_recording['samples']) < min_noise:
            fail(ERRORS['insufficient_noise_data'].format(min_points=min_noise))

        min_motion = getattr(config, 'MIN_MOTION_SAMPLES', 60)
        if len(motion_recording['samples']) < min_motion:
            fail(ERRORS['insufficient_motion_data'].format(min_points=min_motion))

        grid = Grid.from_file(args.table)

        try:
            calibration = run_calibration(
                noise_recording['samples'],
                motion_recording['samples'],
                args.least_precision,
                args.worst_lag,
                grid,
                max_relaxation_rounds=args.max_rounds,
                record_candidates=bool(args.output)
            )
        except NoFeasibleConfigurationError as e:
            fail(ERRORS['no_feasible_configuration'].format(rounds=e.rounds))

        if not calibration:
            fail(ERRORS['noise_not_converged'].format(samples=len(noise_recording['samples'])))

        warnings_dict, cautions_dict = compute_warnings(
            calibration,
            sample_rates=[noise_recording['sample_rate'], motion_recording['sample_rate']],
            skipped_lines=noise_recording['skipped_lines'] + motion_recording['skipped_lines']
        )

        chart_paths = {}
        if args.output:
            noise_path = plot_noise_convergence(calibration['convergence_trace'], args.output)
            search_path = plot_tuning_search(
                calibration['candidates'],
                calibration['report'],
                calibration['tuning_settings'],
                args.output
            )
            if not noise_path or not search_path:
                fail(ERRORS['chart_failed'])
            chart_paths = {'noise': noise_path, 'search': search_path}

        response = format_json_response(
            calibration,
            noise_recording,
            motion_recording,
            chart_paths,
            warnings_dict,
            cautions_dict
        )

        print(json.dumps(response, ensure_ascii=False, indent=2))

    except Exception as e:
        error_response = {
            "success": False,
            "error": f"Error: {str(e)}"
        }
        print(json.dumps(error_response, ensure_ascii=False, indent=2))
        sys.exit(1)


if __name__ == "__main__":
    main()
