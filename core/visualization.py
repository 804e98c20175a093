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
EuroTune visualization module.

Contains functions for noise convergence and tuning search charts using matplotlib.
"""
import logging
import math
import os

import matplotlib.pyplot as plt
import numpy as np

try:
    from .. import config
except ImportError:
    import config

try:
    from locales.strings import LABELS
except ImportError:
    from ..locales.strings import LABELS

from .structures import (
    TRACE_SAMPLES,
    TRACE_MEAN,
    TRACE_CI95,
    CANDIDATE_CUTOFF,
    CANDIDATE_BETA,
    CANDIDATE_PRECISION,
    CANDIDATE_LAG_S,
    CANDIDATE_ACCEPTED,
)

logger = logging.getLogger(__name__)


def _chart_filenames(output_file, suffixes):
    """Derive per-chart filenames from a base output path."""
    if not output_file:
        return {suffix: None for suffix in suffixes}
    base_filename = os.path.splitext(output_file)[0]
    extension = os.path.splitext(output_file)[1] or '.png'
    return {suffix: f"{base_filename}_{suffix}{extension}" for suffix in suffixes}


def _finish_figure(filename, output_file):
    plt.tight_layout()
    if filename:
        plt.savefig(filename, dpi=getattr(config, 'CHART_DPI', 150), bbox_inches='tight', facecolor='white')
    elif not output_file:
        plt.show()
    plt.close()


def plot_noise_convergence(convergence_trace, output_file=None):
    """Plot the running noise variance with its 95% confidence band.

    Args:
        convergence_trace: list of (samples_seen, mean, ci95)
        output_file: base path (creates <base>_noise.png), or None to show

    Returns:
        str path of the saved chart, None if shown or no data
    """
    if not convergence_trace:
        logger.warning("No convergence data for chart building")
        return None

    filename = _chart_filenames(output_file, ['noise'])['noise']
    trace = np.array(convergence_trace, dtype=float)
    samples = trace[:, TRACE_SAMPLES]
    means = trace[:, TRACE_MEAN]
    ci95 = trace[:, TRACE_CI95]

    plt.figure(figsize=getattr(config, 'CHART_FIGSIZE', (12, 8)))
    plt.plot(samples, means, color='#2980b9', linewidth=2, label=LABELS['mean_variance'])
    plt.fill_between(samples, means - ci95, means + ci95, color='#2980b9', alpha=0.2,
                     label=LABELS['ci95_band'])
    plt.grid(True, linestyle='--', alpha=0.7)
    plt.title(LABELS['noise_convergence_title'])
    plt.xlabel(LABELS['samples_axis'])
    plt.ylabel(LABELS['variance_axis'])
    plt.legend(loc='upper right', fontsize=getattr(config, 'LEGEND_FONTSIZE', 11))

    _finish_figure(filename, output_file)
    return filename


def plot_tuning_search(candidates, report, tuning_settings, output_file=None):
    """Plot simulated candidates: cutoff vs beta colored by lag, and lag vs precision.

    Args:
        candidates: list of candidate tuples recorded by the tuner
        report: dict from TuningReport.to_dict()
        tuning_settings: dict from TuningSettings.to_dict()
        output_file: base path (creates <base>_search.png), or None to show

    Returns:
        str path of the saved chart, None if shown or no data
    """
    if not candidates:
        logger.warning("No tuning candidates for chart building")
        return None

    filename = _chart_filenames(output_file, ['search'])['search']

    cutoffs = np.array([c[CANDIDATE_CUTOFF] for c in candidates], dtype=float)
    betas = np.array([c[CANDIDATE_BETA] for c in candidates], dtype=float)
    precisions = np.array([c[CANDIDATE_PRECISION] for c in candidates], dtype=float)
    lags = np.array([c[CANDIDATE_LAG_S] for c in candidates], dtype=float)
    accepted = np.array([bool(c[CANDIDATE_ACCEPTED]) for c in candidates])

    # Unsettled simulations are plotted at the lag cap
    finite = np.isfinite(lags)
    if not finite.all():
        cap = getattr(config, 'LAG_MAX_SAMPLES', 3600) / tuning_settings.get('sample_rate', 60.0)
        lags = np.where(finite, lags, cap)

    fig, (ax_params, ax_tradeoff) = plt.subplots(1, 2, figsize=getattr(config, 'CHART_FIGSIZE', (12, 8)))
    marker_size = getattr(config, 'MARKER_SIZE', 8)
    alpha = getattr(config, 'ALPHA_CANDIDATES', 0.5)

    scatter = ax_params.scatter(cutoffs, betas, c=lags, s=marker_size, alpha=alpha,
                                cmap=getattr(config, 'CHART_COLORMAP', 'viridis'),
                                label=LABELS['candidates'])
    fig.colorbar(scatter, ax=ax_params, label=LABELS['lag_axis'])
    ax_params.set_yscale('log')
    ax_params.set_xlabel(LABELS['cutoff_axis'])
    ax_params.set_ylabel(LABELS['beta_axis'])
    ax_params.grid(True, linestyle='--', alpha=0.7)

    ax_tradeoff.scatter(precisions[~accepted], lags[~accepted], s=marker_size, alpha=alpha,
                        color='#95a5a6', label=LABELS['candidates'])
    ax_tradeoff.scatter(precisions[accepted], lags[accepted], s=marker_size * 2,
                        color='#2980b9', label=LABELS['accepted'])
    max_lag = tuning_settings.get('max_lag_secs')
    if max_lag is not None and math.isfinite(max_lag):
        ax_tradeoff.axhline(max_lag, color='red', linestyle='--', label=LABELS['max_lag'])
    ax_tradeoff.set_xlabel(LABELS['precision_axis'])
    ax_tradeoff.set_ylabel(LABELS['lag_axis'])
    ax_tradeoff.grid(True, linestyle='--', alpha=0.7)

    if report:
        chosen = report['settings']
        label = LABELS['selected'].format(cutoff=chosen['min_cutoff_hz'], beta=chosen['beta'])
        ax_params.scatter([chosen['min_cutoff_hz']], [chosen['beta']], marker='*', s=200,
                          color='#c0392b', label=label)
        ax_tradeoff.scatter([report['precision']], [report['lag_s']], marker='*', s=200,
                            color='#c0392b', label=label)

    ax_params.legend(loc='lower right', fontsize=getattr(config, 'ANNOTATION_FONTSIZE', 9))
    ax_tradeoff.legend(loc='upper right', fontsize=getattr(config, 'ANNOTATION_FONTSIZE', 9))
    fig.suptitle(LABELS['tuning_search_title'])

    _finish_figure(filename, output_file)
    return filename
