import logging
from pathlib import Path

import geopandas as gpd
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap
import contextily as ctx

from pharmacy_map.config import (
    BIVARIATE_PALETTE,
    DENSITY_LABELS,
    PHARMACY_COLOR,
    SECTION_EDGE_COLOR,
)

WEB_MERCATOR_CRS = "EPSG:3857"

PHARMACY_CMAP = LinearSegmentedColormap.from_list('white_to_pharmacy', ['white', PHARMACY_COLOR])


def _to_web_mercator(*gdfs):
    """Reproject frames for basemap tiles; returns None if any cannot be reprojected."""
    try:
        logging.info(f"Reprojecting data to {WEB_MERCATOR_CRS} for basemap compatibility")
        return [gdf.to_crs(WEB_MERCATOR_CRS) if gdf is not None and not gdf.empty else gdf for gdf in gdfs]
    except Exception as e:
        logging.warning(f"Could not reproject data: {e}")
        logging.warning("Continuing without basemap.")
        return None


def _add_basemap(ax, source):
    try:
        ctx.add_basemap(ax, source=source, attribution_size=8)
    except Exception as e:
        logging.warning(f"Could not add basemap: {e}")
        logging.warning("Continuing without basemap. Check internet connection or basemap provider.")


def _finish_figure(fig, ax, title, output_path, dpi, show_plot, close_after):
    ax.set_title(title, fontsize=14)
    ax.set_axis_off()

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
            logging.info(f"Plot saved to {output_path}")
        except Exception as e:
            logging.error(f"Failed to save plot: {e}")

    if show_plot:
        plt.show()

    if close_after and not show_plot:
        plt.close(fig)


def _check_gdf(gdf, name, column=None):
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise TypeError(f"{name} must be a GeoDataFrame")
    if column is not None and column not in gdf.columns:
        raise ValueError(f"Column '{column}' not found in {name}")


def plot_pharmacy_points(
    sections_gdf,
    pharmacies_gdf,
    output_path=None,
    title="Pharmacies by Electoral Section",
    point_color=PHARMACY_COLOR,
    point_alpha=0.2,
    point_size=2,
    figsize=(15, 15),
    add_basemap=False,
    basemap_source=ctx.providers.CartoDB.Positron,
    dpi=300,
    show_plot=False,
    close_after=True,
):
    """
    Plot section boundaries with a dot at each pharmacy.

    Points are reprojected to the sections' CRS when they differ.

    Returns:
    --------
    fig, ax : tuple
        The matplotlib figure and axes objects.
    """
    _check_gdf(sections_gdf, "sections_gdf")
    _check_gdf(pharmacies_gdf, "pharmacies_gdf")

    if pharmacies_gdf.crs != sections_gdf.crs:
        logging.info(f"Aligning CRS for plotting: {pharmacies_gdf.crs} -> {sections_gdf.crs}")
        pharmacies_gdf = pharmacies_gdf.to_crs(sections_gdf.crs)

    if add_basemap:
        reprojected = _to_web_mercator(sections_gdf, pharmacies_gdf)
        if reprojected is None:
            add_basemap = False
        else:
            sections_gdf, pharmacies_gdf = reprojected

    fig, ax = plt.subplots(figsize=figsize)

    sections_gdf.plot(ax=ax, color='white', edgecolor=SECTION_EDGE_COLOR, linewidth=0.2)
    if not pharmacies_gdf.empty:
        pharmacies_gdf.plot(
            ax=ax,
            color=point_color,
            markersize=point_size,
            alpha=point_alpha,
            zorder=5,
        )
    else:
        logging.warning("No pharmacies to plot.")

    if add_basemap:
        _add_basemap(ax, basemap_source)

    _finish_figure(fig, ax, title, output_path, dpi, show_plot, close_after)
    return fig, ax


def plot_choropleth(
    sections_gdf,
    column,
    output_path=None,
    title=None,
    cmap=PHARMACY_CMAP,
    legend_label=None,
    missing_color='white',
    figsize=(15, 15),
    add_basemap=False,
    basemap_source=ctx.providers.CartoDB.Positron,
    dpi=300,
    show_plot=False,
    close_after=True,
):
    """
    Fill each section by the value of one column.

    Parameters:
    -----------
    sections_gdf : GeoDataFrame
        Section polygons with the value column.
    column : str
        Column to encode, e.g. 'pharmacy_count' or 'pharmacy_count_density'.
    output_path : str or Path, optional
        Where to save the figure. If None, the plot won't be saved.
    title : str, optional
        Plot title, defaults to the column name.
    cmap : str or Colormap
        Colormap for the fill, white to pharmacy red by default.
    legend_label : str, optional
        Colorbar label, defaults to the column name.
    missing_color : str, default='white'
        Fill for sections with a null value.

    Returns:
    --------
    fig, ax : tuple
        The matplotlib figure and axes objects.
    """
    _check_gdf(sections_gdf, "sections_gdf", column)

    if add_basemap:
        reprojected = _to_web_mercator(sections_gdf)
        if reprojected is None:
            add_basemap = False
        else:
            sections_gdf = reprojected[0]

    fig, ax = plt.subplots(figsize=figsize)

    if sections_gdf.empty:
        logging.warning("No data to plot.")
    else:
        sections_gdf.plot(
            column=column,
            cmap=cmap,
            linewidth=0.1,
            ax=ax,
            edgecolor='white',
            legend=True,
            legend_kwds={'label': legend_label or column, 'orientation': "horizontal"},
            missing_kwds={'color': missing_color},
        )
        if add_basemap:
            _add_basemap(ax, basemap_source)

    _finish_figure(fig, ax, title or column, output_path, dpi, show_plot, close_after)
    return fig, ax


def _draw_bivariate_legend(fig, palette, first_label, second_label):
    ax_leg = fig.add_axes([0.15, 0.15, 0.15, 0.15])

    for i, first in enumerate(DENSITY_LABELS):
        for j, second in enumerate(DENSITY_LABELS):
            color = palette.get(f"{first}.{second}", 'white')
            ax_leg.add_patch(plt.Rectangle((i, j), 1, 1, facecolor=color, edgecolor='white', lw=0.5))

    ax_leg.set_xlim(0, 3)
    ax_leg.set_ylim(0, 3)
    ax_leg.set_xlabel(f'{first_label} →', fontsize=10, fontweight='bold')
    ax_leg.set_ylabel(f'{second_label} →', fontsize=10, fontweight='bold')
    ax_leg.set_xticks([0.5, 1.5, 2.5])
    ax_leg.set_xticklabels(DENSITY_LABELS, fontsize=8)
    ax_leg.set_yticks([0.5, 1.5, 2.5])
    ax_leg.set_yticklabels(DENSITY_LABELS, fontsize=8, rotation=90, va='center')
    for spine in ax_leg.spines.values():
        spine.set_visible(False)
    ax_leg.tick_params(length=0)
    return ax_leg


def plot_bivariate_map(
    sections_gdf,
    color_col='bivariate_color',
    output_path=None,
    title="Pharmacy Density vs Population Density",
    first_label="Pharmacy density",
    second_label="Population density",
    palette=None,
    figsize=(15, 15),
    dpi=300,
    show_plot=False,
    close_after=True,
):
    """Fill sections by their precomputed bivariate color, with a 3x3 legend."""
    _check_gdf(sections_gdf, "sections_gdf", color_col)
    palette = palette if palette is not None else BIVARIATE_PALETTE

    fig, ax = plt.subplots(figsize=figsize)

    if sections_gdf.empty:
        logging.warning("No data to plot.")
    else:
        sections_gdf.plot(ax=ax, color=sections_gdf[color_col].tolist(), edgecolor='white', linewidth=0.1)

    _draw_bivariate_legend(fig, palette, first_label, second_label)
    _finish_figure(fig, ax, title, output_path, dpi, show_plot, close_after)
    return fig, ax
