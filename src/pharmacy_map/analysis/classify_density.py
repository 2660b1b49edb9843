"""
Density classes by equal-width binning

Breaks are computed from each dataset's own range, so classes from different
datasets are not comparable unless the same breaks are passed explicitly.
"""

import logging

import pandas as pd

from pharmacy_map.config import BIVARIATE_PALETTE, DENSITY_LABELS, MISSING_COLOR


def equal_width_breaks(values, n_classes=3):
    """
    Inner boundaries splitting the observed range into equal-width bins.

    Args:
        values: Continuous values; nulls are ignored
        n_classes: Number of bins

    Returns:
        List of n_classes - 1 boundaries, min + k * (max - min) / n_classes
    """
    values = pd.Series(values, dtype=float).dropna()
    if values.empty:
        raise ValueError("Cannot compute breaks from an empty or all-null series")

    vmin, vmax = values.min(), values.max()
    width = (vmax - vmin) / n_classes
    return [vmin + k * width for k in range(1, n_classes)]


def classify_density(values, breaks=None, labels=DENSITY_LABELS):
    """
    Assign Low/Medium/High classes.

    A value strictly below the first break is Low, strictly above the last
    break is High, anything else is Medium. Nulls stay null.

    Args:
        values: Series of continuous values
        breaks: Two boundaries; computed with equal_width_breaks when None
        labels: Three class names in ascending order

    Returns:
        Ordered categorical Series aligned with values
    """
    if len(labels) != 3:
        raise ValueError(f"Expected three class labels (low, medium, high), got {len(labels)}")

    values = pd.Series(values, dtype=float)
    if breaks is None:
        breaks = equal_width_breaks(values, n_classes=3)
    if len(breaks) != 2:
        raise ValueError(f"Expected two breaks, got {len(breaks)}")
    low_break, high_break = breaks

    classes = pd.Series(labels[1], index=values.index, dtype=object)
    classes[values < low_break] = labels[0]
    classes[values > high_break] = labels[2]
    classes[values.isna()] = None

    dtype = pd.CategoricalDtype(categories=list(labels), ordered=True)
    return classes.astype(dtype)


def bivariate_category(first, second):
    """Combine two class series into '<first>.<second>' labels, null if either is null."""
    first = pd.Series(first).astype(object)
    second = pd.Series(second).astype(object)
    second.index = first.index
    combined = first.astype(str) + '.' + second.astype(str)
    return combined.where(first.notna() & second.notna())


def assign_bivariate_colors(gdf, first_col, second_col, palette=None, missing_color=MISSING_COLOR):
    """
    Classify two density columns and map their combination to a palette color.

    Adds '<col>_class' for both inputs, 'bivariate_class' and 'bivariate_color'.
    """
    palette = palette if palette is not None else BIVARIATE_PALETTE

    gdf = gdf.copy()
    gdf[f'{first_col}_class'] = classify_density(gdf[first_col])
    gdf[f'{second_col}_class'] = classify_density(gdf[second_col])
    gdf['bivariate_class'] = bivariate_category(gdf[f'{first_col}_class'], gdf[f'{second_col}_class'])
    gdf['bivariate_color'] = gdf['bivariate_class'].map(palette).fillna(missing_color)

    logging.info(f"Bivariate classes of {first_col} x {second_col}:\n{gdf['bivariate_class'].value_counts()}")
    return gdf
