import logging

from pharmacy_map.config import (
    CENSUS_FIELDS,
    CENSUS_PATH,
    DENUE_PATH,
    FIGURES_DIR,
    PHARMACY_COUNT_COL,
    SECTIONS_PATH,
)
from pharmacy_map.data.load_sources import load_census, load_denue, load_sections
from pharmacy_map.data.filter_pharmacies import filter_pharmacies, summarize_by_municipality
from pharmacy_map.data.project_points import points_from_records, reproject_points
from pharmacy_map.data.process_sections import build_enriched_sections
from pharmacy_map.analysis.classify_density import assign_bivariate_colors
from pharmacy_map.analysis.correlate_density import correlate_density
from pharmacy_map.visualization.plot_maps import (
    plot_bivariate_map,
    plot_choropleth,
    plot_pharmacy_points,
)
from pharmacy_map.visualization.plot_scatter import plot_density_scatter

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    force=True,
)


def main():
    """
    Map pharmacies by electoral section and compare their density with census indicators.
    """
    logging.info("Starting pharmacy mapping by electoral section...")

    # Load business registry and keep pharmacies
    denue = load_denue(DENUE_PATH)
    pharmacies = filter_pharmacies(denue)
    top_municipalities = summarize_by_municipality(pharmacies).head(15)
    logging.info(f"Municipalities with the most pharmacies:\n{top_municipalities}")

    # Load sections and census attributes
    sections = load_sections(SECTIONS_PATH)
    census = load_census(CENSUS_PATH)

    # Express pharmacy locations in the sections' CRS
    pharmacies = points_from_records(pharmacies, drop_invalid=True)
    pharmacies = reproject_points(pharmacies, sections.crs)

    # Join census, count pharmacies and derive densities
    enriched = build_enriched_sections(sections, census, pharmacies, how='left')

    density_col = f'{PHARMACY_COUNT_COL}_density'
    indicator_cols = [f'{field}_density' for field in CENSUS_FIELDS]
    enriched = assign_bivariate_colors(enriched, density_col, 'P_60YMAS_density')
    correlate_density(enriched, density_col, indicator_cols)

    # Figures
    FIGURES_DIR.mkdir(parents=True, exist_ok=True)
    plot_pharmacy_points(sections, pharmacies, output_path=FIGURES_DIR / "pharmacies_by_section_points.png")
    plot_choropleth(
        enriched,
        PHARMACY_COUNT_COL,
        output_path=FIGURES_DIR / "pharmacies_by_section_count.png",
        title="Pharmacies per Electoral Section",
        legend_label="Pharmacies",
    )
    plot_choropleth(
        enriched,
        density_col,
        output_path=FIGURES_DIR / "pharmacies_by_section_density.png",
        title="Pharmacy Density per Electoral Section",
        legend_label="Pharmacies per km²",
    )
    plot_bivariate_map(
        enriched,
        output_path=FIGURES_DIR / "pharmacy_vs_population_60_bivariate.png",
        title="Pharmacy Density vs Population 60+ Density",
        second_label="Population 60+ density",
    )
    for field, description in CENSUS_FIELDS.items():
        plot_density_scatter(
            enriched,
            f'{field}_density',
            density_col,
            output_path=FIGURES_DIR / f"pharmacy_density_vs_{field.lower()}_density.png",
            title=f"Pharmacy Density vs {description} Density",
            x_label=f"{description} per km²",
            y_label="Pharmacies per km²",
        )

    logging.info("Pharmacy mapping completed!")


if __name__ == "__main__":
    main()
