import matplotlib

matplotlib.use('Agg')

import pandas as pd
import geopandas as gpd
import pytest
from shapely.geometry import box

from pharmacy_map.data.project_points import transform_coordinates

# Mexico ITRF2008 / LCC, metres
SECTIONS_CRS = "EPSG:6372"
ORIGIN_X, ORIGIN_Y = 2_800_000, 830_000


def square(col, size=1000):
    x0 = ORIGIN_X + col * size * 2
    return box(x0, ORIGIN_Y, x0 + size, ORIGIN_Y + size)


@pytest.fixture
def sections():
    """Three non-overlapping 1 km squares in the same municipality."""
    return gpd.GeoDataFrame(
        {
            'ENTIDAD': [1, 1, 1],
            'MUNICIPIO': [1, 1, 1],
            'SECCION': [1, 2, 3],
        },
        geometry=[square(0), square(1), square(2)],
        crs=SECTIONS_CRS,
    )


@pytest.fixture
def census():
    return pd.DataFrame(
        {
            'ENTIDAD': [1, 1],
            'MUNICIPIO': [1, 1],
            'SECCION': [1, 2],
            'POBTOT': [1000, 2000],
            'P_60YMAS': [100, 300],
            'PEA': [500, 900],
            'TOTHOG': [250, 600],
        }
    )


@pytest.fixture
def pharmacy_records():
    """One pharmacy in section 1, one in section 2, one outside every section."""
    xs = [ORIGIN_X + 500, ORIGIN_X + 2500, ORIGIN_X + 500]
    ys = [ORIGIN_Y + 500, ORIGIN_Y + 500, ORIGIN_Y + 5000]
    lon, lat = transform_coordinates(xs, ys, SECTIONS_CRS, "EPSG:4326")
    return pd.DataFrame(
        {
            'nombre_act': ['Farmacias sin minisúper', 'FARMACIAS CON MINISÚPER', 'Farmacia veterinaria'],
            'longitud': lon,
            'latitud': lat,
            'cve_ent': [1, 1, 1],
            'cve_mun': [1, 1, 1],
        }
    )
