import logging

import numpy as np
import pandas as pd


def correlate_density(df, target, indicators, method='pearson'):
    """
    Correlate a density column against demographic indicators.

    Args:
        df: DataFrame holding the target and indicator columns
        target: Column to correlate, e.g. pharmacy density
        indicators: Columns to correlate against
        method: 'pearson', 'spearman' or 'kendall'

    Returns:
        DataFrame with indicator, correlation and number of paired observations,
        sorted by absolute correlation
    """
    missing_cols = [col for col in [target] + list(indicators) if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing columns for correlation: {missing_cols}")

    rows = []
    for indicator in indicators:
        pairs = df[[target, indicator]].replace([np.inf, -np.inf], np.nan).dropna()
        correlation = pairs[target].corr(pairs[indicator], method=method) if len(pairs) > 1 else np.nan
        rows.append({'indicator': indicator, 'correlation': correlation, 'n': len(pairs)})

    result = pd.DataFrame(rows, columns=['indicator', 'correlation', 'n'])
    result = result.reindex(result['correlation'].abs().sort_values(ascending=False).index).reset_index(drop=True)
    logging.info(f"{method.title()} correlation with {target}:\n{result}")
    return result


def fit_trend_line(x, y):
    """Least-squares line through (x, y) pairs; returns (slope, intercept)."""
    pairs = pd.DataFrame({'x': np.asarray(x, dtype=float), 'y': np.asarray(y, dtype=float)}).replace([np.inf, -np.inf], np.nan).dropna()
    if len(pairs) < 2:
        raise ValueError(f"Need at least two non-null points to fit a trend line, got {len(pairs)}")

    slope, intercept = np.polyfit(pairs['x'], pairs['y'], deg=1)
    return float(slope), float(intercept)
