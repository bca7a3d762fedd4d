from __future__ import annotations
from typing import Any
import csv
import os


def safe_float(s: Any) -> float:
    try:
        if s is None:
            return float('nan')
        if isinstance(s, str) and s.strip() == '':
            return float('nan')
        return float(s)
    except (TypeError, ValueError):
        return float('nan')


def plot_csv(csv_path: str) -> str:
    """Plot a telemetry CSV (set-point/measurement, output, P/I/D terms) to a PNG.

    Returns the PNG path, or '' if nothing could be plotted.
    """
    try:
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
    except ImportError:
        print('[WARN] matplotlib not available; skipping plot', flush=True)
        return ''

    try:
        with open(csv_path, 'r', encoding='utf-8') as f:
            rows = list(csv.DictReader(f))
    except OSError as e:
        print(f'[WARN] failed to read CSV for plotting: {e}', flush=True)
        return ''
    if not rows:
        print('[WARN] CSV empty; nothing to plot', flush=True)
        return ''

    sec = [safe_float(r.get('ms')) / 1000.0 for r in rows]

    def series(key: str) -> list[float]:
        return [safe_float(r.get(key, '')) for r in rows]

    fig, axes = plt.subplots(3, 1, figsize=(8, 6), sharex=True, constrained_layout=True)
    ax = axes[0]
    ax.plot(sec, series('set_point'), label='set point', linestyle='--')
    ax.plot(sec, series('measurement'), label='measurement')
    ax.set_ylabel('value')
    ax.legend(loc='best')
    ax = axes[1]
    ax.plot(sec, series('output'), label='u', color='black')
    ax.set_ylabel('output')
    ax = axes[2]
    for key in ('p', 'i', 'd'):
        ax.plot(sec, series(key), label=key)
    ax.set_ylabel('terms')
    ax.set_xlabel('time [s]')
    ax.legend(loc='best')
    for ax in axes:
        ax.grid(True, alpha=0.3)

    png_path = os.path.splitext(csv_path)[0] + '.png'
    fig.savefig(png_path, dpi=150)
    plt.close(fig)
    return png_path

__all__ = ['plot_csv', 'safe_float']
