import os
import logging
from pathlib import Path

import pandas as pd
import geopandas as gpd

from pharmacy_map.config import (
    ACCEPT_UNCLOSED_RINGS,
    CENSUS_FIELDS,
    DENUE_COLUMNS,
    SECTION_KEYS,
    UNCLOSED_RING_OPTION,
)
from pharmacy_map.errors import InvalidGeometryError


def _check_exists(path):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found at: {path}")
    logging.info(f"Found input file at: {path}")
    return path


def _check_columns(df, required, name):
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(
            f"Missing required columns in {name}: {missing_cols}. "
            f"Available columns: {df.columns.tolist()}"
        )


def normalize_keys(df, keys=SECTION_KEYS):
    """
    Cast administrative key columns to integers so that shapefile and CSV keys compare equal.

    Args:
        df: DataFrame or GeoDataFrame holding the key columns
        keys: Names of the key columns

    Returns:
        Copy of df with integer key columns
    """
    df = df.copy()
    for col in keys:
        values = pd.to_numeric(df[col], errors='coerce')
        if values.isna().any():
            bad = df.loc[values.isna(), col].unique()[:5].tolist()
            raise ValueError(f"Column '{col}' has {values.isna().sum()} non-numeric keys, e.g. {bad}")
        fractional = values % 1 != 0
        if fractional.any():
            bad = df.loc[fractional, col].unique()[:5].tolist()
            raise ValueError(f"Column '{col}' has {fractional.sum()} non-integer keys, e.g. {bad}")
        df[col] = values.astype('int64')
    return df


def load_denue(path, usecols=None):
    """
    Load business registry (DENUE) records.

    INEGI publishes the registry as latin-1 encoded CSV files, so decoding
    falls back to latin-1 when the file is not valid UTF-8.

    Args:
        path: Path to the delimited DENUE file
        usecols: Optional subset of columns to read

    Returns:
        DataFrame with one row per establishment
    """
    path = _check_exists(path)
    try:
        denue = pd.read_csv(path, usecols=usecols, low_memory=False)
    except UnicodeDecodeError:
        logging.info(f"{path.name} is not UTF-8, reading as latin-1")
        denue = pd.read_csv(path, usecols=usecols, encoding='latin-1', low_memory=False)

    _check_columns(denue, DENUE_COLUMNS[:3], "business registry")
    logging.info(f"Loaded {len(denue)} business records from {path.name}")
    return denue


def validate_geometries(gdf, strict=True):
    """
    Check that every polygon is present, non-empty and valid.

    Args:
        gdf: GeoDataFrame with polygons
        strict: Raise on invalid polygons instead of repairing them

    Returns:
        GeoDataFrame, with invalid polygons repaired when strict is False
    """
    geometry = gdf.geometry
    invalid = geometry.isna() | geometry.is_empty | ~geometry.is_valid
    n_invalid = int(invalid.sum())
    if n_invalid == 0:
        return gdf

    if strict:
        raise InvalidGeometryError(
            f"{n_invalid} of {len(gdf)} polygons are missing, empty or invalid "
            f"(unclosed or self-intersecting rings)"
        )

    logging.warning(f"Repairing {n_invalid} invalid polygons with make_valid")
    gdf = gdf.copy()
    gdf.loc[invalid, gdf.geometry.name] = geometry[invalid].make_valid()
    return gdf


def load_sections(path, accept_unclosed_rings=ACCEPT_UNCLOSED_RINGS, strict=True, keys=SECTION_KEYS):
    """
    Load electoral section polygons.

    Args:
        path: Path to the section shapefile (or any format GDAL reads)
        accept_unclosed_rings: Value for the GDAL unclosed ring option
        strict: Raise on invalid polygons instead of repairing them
        keys: Composite key identifying a section

    Returns:
        GeoDataFrame of sections with integer keys
    """
    path = _check_exists(path)
    os.environ[UNCLOSED_RING_OPTION] = 'YES' if accept_unclosed_rings else 'NO'
    logging.info(f"Reading sections with {UNCLOSED_RING_OPTION}={os.environ[UNCLOSED_RING_OPTION]}")

    sections = gpd.read_file(path)
    logging.info(f"Loaded {len(sections)} sections with CRS: {sections.crs}")

    _check_columns(sections, keys, "section polygons")
    if sections.crs is None:
        raise ValueError(f"No CRS found for {path.name}; a .prj file is required")

    sections = normalize_keys(sections, keys)
    sections = validate_geometries(sections, strict=strict)

    duplicated = sections.duplicated(subset=keys)
    if duplicated.any():
        raise ValueError(f"Found {duplicated.sum()} duplicated section keys {keys}")

    return sections


def load_census(path, fields=None, keys=SECTION_KEYS):
    """
    Load census attributes by electoral section.

    Suppressed values (e.g. '*' for confidentiality) become nulls.

    Args:
        path: Path to the census CSV
        fields: Census columns to keep, defaults to CENSUS_FIELDS
        keys: Composite key identifying a section

    Returns:
        DataFrame with keys and numeric census fields
    """
    path = _check_exists(path)
    fields = list(fields if fields is not None else CENSUS_FIELDS)

    try:
        census = pd.read_csv(path, low_memory=False)
    except UnicodeDecodeError:
        logging.info(f"{path.name} is not UTF-8, reading as latin-1")
        census = pd.read_csv(path, encoding='latin-1', low_memory=False)

    _check_columns(census, keys + fields, "census table")
    census = normalize_keys(census[keys + fields], keys)
    for field in fields:
        census[field] = pd.to_numeric(census[field], errors='coerce')

    logging.info(f"Loaded census attributes for {len(census)} sections")
    return census
