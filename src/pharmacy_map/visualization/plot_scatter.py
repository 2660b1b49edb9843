import logging
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from pharmacy_map.analysis.correlate_density import fit_trend_line
from pharmacy_map.config import PHARMACY_COLOR


def plot_density_scatter(
    df,
    x,
    y,
    output_path=None,
    title=None,
    x_label=None,
    y_label=None,
    trend_line=True,
    color=PHARMACY_COLOR,
    figsize=(10, 8),
    dpi=300,
    show_plot=False,
    close_after=True,
):
    """
    Scatter plot of two section-level columns with an optional linear trend line.

    Rows with a null or infinite value in either column are left out.

    Returns:
    --------
    fig, ax : tuple
        The matplotlib figure and axes objects.
    """
    missing_cols = [col for col in (x, y) if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Columns not found for scatter plot: {missing_cols}")

    plot_df = df[[x, y]].replace([np.inf, -np.inf], np.nan).dropna()

    plt.style.use('seaborn-v0_8-whitegrid')
    fig, ax = plt.subplots(figsize=figsize)

    if plot_df.empty:
        logging.warning(f"No valid values left for '{x}' vs '{y}'.")
    else:
        sns.scatterplot(data=plot_df, x=x, y=y, color=color, s=25, alpha=0.5, edgecolor='none', ax=ax)

        if trend_line and len(plot_df) > 1:
            slope, intercept = fit_trend_line(plot_df[x], plot_df[y])
            xs = np.linspace(plot_df[x].min(), plot_df[x].max(), 100)
            ax.plot(xs, slope * xs + intercept, color='black', linewidth=1.5, label=f"y = {slope:.3g}x + {intercept:.3g}")
            ax.legend(frameon=True, facecolor='white', edgecolor='lightgrey')
            logging.info(f"Trend line for {y} ~ {x}: slope={slope:.4g}, intercept={intercept:.4g}")

    ax.set_xlabel(x_label or x, fontsize=12)
    ax.set_ylabel(y_label or y, fontsize=12)
    ax.set_title(title or f"{y} vs {x}", fontsize=14)
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fig.savefig(output_path, facecolor='white', dpi=dpi, bbox_inches='tight')
            logging.info(f"Plot saved to {output_path}")
        except Exception as e:
            logging.error(f"Failed to save plot: {e}")

    if show_plot:
        plt.show()
    if close_after and not show_plot:
        plt.close(fig)
    plt.style.use('default')

    return fig, ax
