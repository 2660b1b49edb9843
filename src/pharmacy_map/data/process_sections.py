import logging

import numpy as np
import geopandas as gpd

from pharmacy_map.config import CENSUS_FIELDS, PHARMACY_COUNT_COL, SECTION_KEYS
from pharmacy_map.data.load_sources import normalize_keys
from pharmacy_map.data.project_points import reproject_points
from pharmacy_map.errors import EmptyJoinError

METRE_UNITS = ('metre', 'meter', 'm')


def join_census(sections, census, keys=SECTION_KEYS):
    """
    Attach census attributes to sections by composite key.

    The join is left-outer: sections absent from the census keep null
    attributes. Census keys must be unique, otherwise pandas raises a
    MergeError instead of duplicating sections.

    Args:
        sections: GeoDataFrame of section polygons
        census: DataFrame of census attributes
        keys: Composite key shared by both tables

    Returns:
        GeoDataFrame with one row per section
    """
    sections = normalize_keys(sections, keys)
    census = normalize_keys(census, keys)

    overlap = [col for col in census.columns if col in sections.columns and col not in keys]
    if overlap:
        logging.info(f"Replacing section columns with census values: {overlap}")
        sections = sections.drop(columns=overlap)

    enriched = sections.merge(census, on=keys, how='left', validate='many_to_one', indicator=True)
    matched = int((enriched['_merge'] == 'both').sum())
    enriched = enriched.drop(columns='_merge')

    if matched == 0:
        raise EmptyJoinError(f"No section matched a census row on {keys}")
    if matched < len(enriched):
        logging.warning(f"{len(enriched) - matched} of {len(enriched)} sections have no census attributes")

    logging.info(f"Joined census attributes to {matched} sections")
    return enriched


def count_points_in_sections(sections, points, count_col=PHARMACY_COUNT_COL, keys=SECTION_KEYS, how='left'):
    """
    Count points that fall within each section.

    A point on a shared edge intersects several sections; it is counted once,
    in the section with the lowest composite key.

    Args:
        sections: GeoDataFrame with polygons
        points: GeoDataFrame with points
        count_col: Name for the count column to be created
        keys: Composite key identifying a section
        how: 'left' keeps sections without points (count 0), 'inner' drops them

    Returns:
        Updated sections with counts
    """
    if how not in ('left', 'inner'):
        raise ValueError(f"how must be 'left' or 'inner', got '{how}'")

    logging.info(f"Counting {count_col} in each section...")

    # Containment is only meaningful in a shared CRS
    if points.crs != sections.crs:
        points = reproject_points(points, sections.crs)

    polygons = sections[keys + [sections.geometry.name]]
    points = points[[points.geometry.name]].reset_index(drop=True)
    joined = gpd.sjoin(points, polygons, how='inner', predicate='intersects')
    joined = joined.sort_values(keys, kind='stable')
    joined = joined[~joined.index.duplicated(keep='first')]

    if joined.empty:
        raise EmptyJoinError(f"None of the {len(points)} points fall within a section")

    outside = len(points) - joined.index.nunique()
    if outside:
        logging.warning(f"{outside} points fall outside every section")

    counts = joined.groupby(keys).size().rename(count_col).reset_index()

    sections = sections.drop(columns=[count_col], errors='ignore')
    counted = sections.merge(counts, on=keys, how=how)
    counted[count_col] = counted[count_col].fillna(0).astype(int)

    logging.info(f"Assigned {len(joined)} points to {len(counts)} sections")
    logging.info(f"Total points counted: {counted[count_col].sum()}")
    return counted


def add_area(sections, col='area'):
    """
    Add polygon area in CRS units squared, and in km2 when the CRS is in metres.
    """
    if sections.crs is None:
        raise ValueError("Sections have no CRS; cannot compute area")

    sections = sections.copy()
    if sections.crs.is_geographic:
        logging.warning(f"Computing area in geographic CRS {sections.crs}; values are in squared degrees")

    sections[col] = sections.geometry.area

    unit = sections.crs.axis_info[0].unit_name if sections.crs.axis_info else None
    if unit in METRE_UNITS:
        sections['area_km2'] = sections[col] / 1e6

    return sections


def add_density_ratios(sections, columns, area_col='area_km2', suffix='_density'):
    """
    Divide each column by polygon area.

    Args:
        sections: DataFrame with the value columns and an area column
        columns: Columns to turn into densities
        area_col: Area column used as denominator
        suffix: Suffix for the new density columns

    Returns:
        Copy of sections with one density column per input column
    """
    missing_cols = [col for col in list(columns) + [area_col] if col not in sections.columns]
    if missing_cols:
        raise ValueError(f"Missing columns for density ratios: {missing_cols}")

    sections = sections.copy()
    # Zero or missing area gives a null density rather than inf
    area = sections[area_col].where(sections[area_col] > 0, np.nan)
    for col in columns:
        sections[f"{col}{suffix}"] = sections[col] / area

    return sections


def build_enriched_sections(sections, census, pharmacies, how='left', keys=SECTION_KEYS, census_fields=None):
    """
    Join census attributes, count pharmacies and derive densities per section.

    Args:
        sections: GeoDataFrame of section polygons
        census: DataFrame of census attributes
        pharmacies: GeoDataFrame of pharmacy points in any CRS
        how: Spatial join policy, see count_points_in_sections
        keys: Composite key identifying a section
        census_fields: Census columns to turn into densities

    Returns:
        GeoDataFrame of sections with counts, area and densities
    """
    census_fields = list(census_fields if census_fields is not None else CENSUS_FIELDS)

    enriched = join_census(sections, census, keys=keys)
    enriched = count_points_in_sections(enriched, pharmacies, keys=keys, how=how)
    enriched = add_area(enriched)

    area_col = 'area_km2' if 'area_km2' in enriched.columns else 'area'
    enriched = add_density_ratios(enriched, [PHARMACY_COUNT_COL] + census_fields, area_col=area_col)

    logging.info(f"Built {len(enriched)} enriched sections")
    return enriched
