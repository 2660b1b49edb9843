import os

import pandas as pd
import geopandas as gpd
import pytest
from shapely.geometry import Polygon

from pharmacy_map.config import UNCLOSED_RING_OPTION
from pharmacy_map.data.load_sources import (
    load_census,
    load_denue,
    load_sections,
    normalize_keys,
    validate_geometries,
)
from pharmacy_map.errors import InvalidGeometryError

BOWTIE = Polygon([(0, 0), (1, 1), (1, 0), (0, 1), (0, 0)])


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="not_there.csv"):
        load_denue(tmp_path / "not_there.csv")


def test_load_denue_falls_back_to_latin1(tmp_path, pharmacy_records):
    path = tmp_path / "denue.csv"
    pharmacy_records.to_csv(path, index=False, encoding='latin-1')
    denue = load_denue(path)
    assert denue['nombre_act'].iloc[0] == 'Farmacias sin minisúper'


def test_load_denue_requires_coordinate_columns(tmp_path):
    path = tmp_path / "denue.csv"
    pd.DataFrame({'nombre_act': ['farmacia'], 'longitud': [-99.1]}).to_csv(path, index=False)
    with pytest.raises(ValueError, match="latitud"):
        load_denue(path)


def test_load_census_coerces_suppressed_values(tmp_path):
    path = tmp_path / "census.csv"
    path.write_text(
        "ENTIDAD,MUNICIPIO,SECCION,POBTOT,P_60YMAS,PEA,TOTHOG,OTRA\n"
        "01,001,0001,1000,*,500,250,x\n"
        "01,001,0002,2000,300,900,600,y\n"
    )
    census = load_census(path)
    assert census.columns.tolist() == ['ENTIDAD', 'MUNICIPIO', 'SECCION', 'POBTOT', 'P_60YMAS', 'PEA', 'TOTHOG']
    assert census['SECCION'].tolist() == [1, 2]
    assert pd.isna(census.loc[0, 'P_60YMAS'])
    assert census.loc[1, 'P_60YMAS'] == 300


def test_normalize_keys_rejects_non_numeric():
    df = pd.DataFrame({'ENTIDAD': [1], 'MUNICIPIO': ['abc'], 'SECCION': [3]})
    with pytest.raises(ValueError, match="MUNICIPIO"):
        normalize_keys(df)


def test_normalize_keys_rejects_fractional_keys():
    df = pd.DataFrame({'ENTIDAD': [1, 1], 'MUNICIPIO': [1, 1], 'SECCION': ['1.2', '1.7']})
    with pytest.raises(ValueError, match="non-integer"):
        normalize_keys(df)


def test_normalize_keys_accepts_integral_floats():
    df = pd.DataFrame({'ENTIDAD': ['01'], 'MUNICIPIO': [1.0], 'SECCION': ['3.0']})
    normalized = normalize_keys(df)
    assert normalized.iloc[0].tolist() == [1, 1, 3]
    assert normalized['SECCION'].dtype == 'int64'


def test_load_sections_reads_file_and_sets_ring_option(tmp_path, sections, monkeypatch):
    monkeypatch.setenv(UNCLOSED_RING_OPTION, "unset")
    path = tmp_path / "secciones.gpkg"
    sections.astype({'SECCION': str}).to_file(path, driver='GPKG')

    loaded = load_sections(path)
    assert len(loaded) == 3
    assert loaded['SECCION'].tolist() == [1, 2, 3]
    assert loaded.crs.to_epsg() == 6372
    assert os.environ[UNCLOSED_RING_OPTION] == 'NO'

    load_sections(path, accept_unclosed_rings=True)
    assert os.environ[UNCLOSED_RING_OPTION] == 'YES'


def test_load_sections_rejects_duplicate_keys(tmp_path, sections):
    path = tmp_path / "secciones.gpkg"
    sections.assign(SECCION=1).to_file(path, driver='GPKG')
    with pytest.raises(ValueError, match="duplicated"):
        load_sections(path)


def test_validate_geometries_strict_raises(sections):
    broken = sections.copy()
    broken.loc[0, 'geometry'] = BOWTIE
    with pytest.raises(InvalidGeometryError):
        validate_geometries(broken, strict=True)


def test_validate_geometries_lenient_repairs(sections):
    broken = sections.copy()
    broken.loc[0, 'geometry'] = BOWTIE
    repaired = validate_geometries(broken, strict=False)
    assert repaired.geometry.is_valid.all()
    assert not broken.geometry.is_valid.all()


def test_validate_geometries_passes_valid(sections):
    assert validate_geometries(sections) is sections
