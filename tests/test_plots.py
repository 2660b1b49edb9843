import matplotlib.pyplot as plt
import pytest

from pharmacy_map.analysis.classify_density import assign_bivariate_colors
from pharmacy_map.data.process_sections import build_enriched_sections
from pharmacy_map.data.project_points import points_from_records
from pharmacy_map.visualization.plot_maps import (
    plot_bivariate_map,
    plot_choropleth,
    plot_pharmacy_points,
)
from pharmacy_map.visualization.plot_scatter import plot_density_scatter


@pytest.fixture
def enriched(sections, census, pharmacy_records):
    points = points_from_records(pharmacy_records)
    enriched = build_enriched_sections(sections, census, points)
    return assign_bivariate_colors(enriched, 'pharmacy_count_density', 'POBTOT_density')


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_plot_pharmacy_points_saves(tmp_path, sections, pharmacy_records):
    output = tmp_path / "figures" / "points.png"
    fig, ax = plot_pharmacy_points(sections, points_from_records(pharmacy_records), output_path=output, dpi=50)
    assert output.exists()
    assert ax.get_title() == "Pharmacies by Electoral Section"


def test_plot_choropleth_with_null_values(tmp_path, enriched):
    output = tmp_path / "density.png"
    fig, ax = plot_choropleth(enriched, 'P_60YMAS_density', output_path=output, dpi=50)
    assert output.exists()
    assert ax.get_title() == 'P_60YMAS_density'


def test_plot_choropleth_unknown_column_raises(enriched):
    with pytest.raises(ValueError, match="not_a_column"):
        plot_choropleth(enriched, 'not_a_column')


def test_plot_choropleth_requires_geodataframe(enriched):
    with pytest.raises(TypeError):
        plot_choropleth(enriched.drop(columns='geometry'), 'pharmacy_count')


def test_plot_bivariate_map_adds_legend_axes(enriched):
    fig, ax = plot_bivariate_map(enriched, close_after=False)
    assert len(fig.axes) == 2


def test_plot_density_scatter_with_trend_line(tmp_path, enriched):
    output = tmp_path / "scatter.png"
    fig, ax = plot_density_scatter(
        enriched, 'POBTOT_density', 'pharmacy_count_density', output_path=output, dpi=50, close_after=False
    )
    assert output.exists()
    assert len(ax.lines) == 1


def test_plot_density_scatter_without_trend_line(enriched):
    fig, ax = plot_density_scatter(
        enriched, 'POBTOT_density', 'pharmacy_count_density', trend_line=False, close_after=False
    )
    assert len(ax.lines) == 0
