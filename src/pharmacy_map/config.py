"""
Project configuration

Paths, column names and constants shared by the pharmacy mapping pipeline.
"""

from pathlib import Path


def get_project_root(start=None) -> Path:
    """Find the project root based on a marker file or directory, defaulting to CWD."""
    current_file_path = Path(start or __file__).resolve()
    for parent in current_file_path.parents:
        if (parent / 'setup.py').exists() or (parent / '.git').exists():
            return parent
    return Path.cwd()


PROJECT_ROOT = get_project_root()

# Data locations
DATA_RAW_DIR = PROJECT_ROOT / "data" / "raw" / "mexico"
DENUE_PATH = DATA_RAW_DIR / "DENUE" / "conjunto_de_datos" / "denue_inegi_46321-46531_.csv"
SECTIONS_PATH = DATA_RAW_DIR / "MGS_SHAPEFILE_19OCT21" / "SECCION.shp"
CENSUS_PATH = DATA_RAW_DIR / "INE_INEGI_2020" / "eceg_2020_secciones.csv"
FIGURES_DIR = PROJECT_ROOT / "reports" / "figures"

# DENUE (business registry) columns
ACTIVITY_COL = 'nombre_act'
LONGITUDE_COL = 'longitud'
LATITUDE_COL = 'latitud'
DENUE_STATE_COL = 'cve_ent'
DENUE_MUNICIPALITY_COL = 'cve_mun'
DENUE_COLUMNS = [ACTIVITY_COL, LONGITUDE_COL, LATITUDE_COL, DENUE_STATE_COL, DENUE_MUNICIPALITY_COL]

# Electoral section composite key (shared by the shapefile and the census table)
SECTION_KEYS = ['ENTIDAD', 'MUNICIPIO', 'SECCION']

# Census fields by section
CENSUS_FIELDS = {
    'POBTOT': 'Total population',
    'P_60YMAS': 'Population 60 and over',
    'PEA': 'Economically active population',
    'TOTHOG': 'Total households',
}

PHARMACY_KEYWORD = 'farm'
PHARMACY_COUNT_COL = 'pharmacy_count'

# Coordinates in the registry are geodetic WGS84
SOURCE_CRS = "EPSG:4326"

# GDAL option read when opening the section shapefile
UNCLOSED_RING_OPTION = 'OGR_GEOMETRY_ACCEPT_UNCLOSED_RING'
ACCEPT_UNCLOSED_RINGS = False

# Density classes, ascending
DENSITY_LABELS = ('Low', 'Medium', 'High')

# Bivariate palette keyed by "<first>.<second>" (pink-blue scheme)
BIVARIATE_PALETTE = {
    'Low.Low': '#e8e8e8',
    'Low.Medium': '#b0d5df',
    'Low.High': '#64acbe',
    'Medium.Low': '#e4acac',
    'Medium.Medium': '#ad9ea5',
    'Medium.High': '#627f8c',
    'High.Low': '#c85a5a',
    'High.Medium': '#985356',
    'High.High': '#574249',
}
MISSING_COLOR = '#ffffff'

# Plot colors
PHARMACY_COLOR = '#750014'
SECTION_EDGE_COLOR = 'grey'
