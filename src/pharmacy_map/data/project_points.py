import logging

import numpy as np
import pandas as pd
import geopandas as gpd
from pyproj import CRS, Transformer

from pharmacy_map.config import LATITUDE_COL, LONGITUDE_COL, SOURCE_CRS
from pharmacy_map.errors import InvalidCoordinateError


def points_from_records(df, lon_col=LONGITUDE_COL, lat_col=LATITUDE_COL, crs=SOURCE_CRS, drop_invalid=False):
    """
    Build a point GeoDataFrame from longitude/latitude columns.

    Args:
        df: Records with coordinate columns
        lon_col: Longitude column name
        lat_col: Latitude column name
        crs: CRS the coordinates are expressed in
        drop_invalid: Drop rows with bad coordinates instead of raising

    Returns:
        GeoDataFrame of points in crs
    """
    missing_cols = [col for col in (lon_col, lat_col) if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing coordinate columns: {missing_cols}")

    lon = pd.to_numeric(df[lon_col], errors='coerce')
    lat = pd.to_numeric(df[lat_col], errors='coerce')
    invalid = lon.isna() | lat.isna()
    if CRS.from_user_input(crs).is_geographic:
        invalid |= ~lon.between(-180, 180) | ~lat.between(-90, 90)

    n_invalid = int(invalid.sum())
    if n_invalid:
        if not drop_invalid:
            raise InvalidCoordinateError(
                f"{n_invalid} of {len(df)} records have unparseable or out-of-range coordinates"
            )
        logging.warning(f"Dropping {n_invalid} records with invalid coordinates")

    valid = ~invalid
    points = gpd.GeoDataFrame(
        df[valid].copy(),
        geometry=gpd.points_from_xy(lon[valid], lat[valid]),
        crs=crs,
    )
    logging.info(f"Created {len(points)} points with CRS: {points.crs}")
    return points


def reproject_points(points, target_crs):
    """
    Reproject points into the CRS of the polygon dataset.

    Args:
        points: GeoDataFrame of points
        target_crs: CRS to transform into (e.g. sections.crs)

    Returns:
        GeoDataFrame in target_crs
    """
    if points.crs is None:
        raise ValueError("Points have no CRS; cannot reproject")

    if points.crs == target_crs:
        logging.info(f"Points already in {target_crs}")
        return points

    logging.info(f"Reprojecting {len(points)} points from {points.crs} to {target_crs}")
    return points.to_crs(target_crs)


def transform_coordinates(xs, ys, source_crs, target_crs):
    """Transform coordinate arrays between two CRSs, x/y in longitude/latitude order."""
    transformer = Transformer.from_crs(source_crs, target_crs, always_xy=True)
    x_out, y_out = transformer.transform(np.asarray(xs, dtype=float), np.asarray(ys, dtype=float))
    return np.asarray(x_out), np.asarray(y_out)
