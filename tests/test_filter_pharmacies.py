import pandas as pd
import pytest

from pharmacy_map.data.filter_pharmacies import filter_pharmacies, summarize_by_municipality


@pytest.fixture
def registry():
    return pd.DataFrame(
        {
            'nombre_act': [
                'Comercio al por menor en FARMACIAS sin minisúper',
                'Comercio al por menor de ropa',
                None,
                'Farmacia veterinaria',
                'Comercio al por menor en tiendas de abarrotes',
            ],
            'cve_ent': [9, 9, 9, 15, 15],
            'cve_mun': [15, 15, 15, 33, 33],
        }
    )


def test_keeps_case_insensitive_matches(registry):
    pharmacies = filter_pharmacies(registry)
    assert list(pharmacies.index) == [0, 3]


def test_null_activity_never_matches(registry):
    pharmacies = filter_pharmacies(registry)
    assert pharmacies['nombre_act'].notna().all()


def test_filter_is_idempotent(registry):
    once = filter_pharmacies(registry)
    twice = filter_pharmacies(once)
    pd.testing.assert_frame_equal(once, twice)


def test_keyword_is_literal_not_regex():
    df = pd.DataFrame({'nombre_act': ['farm.acia', 'farmXacia']})
    assert len(filter_pharmacies(df, keyword='farm.')) == 1


def test_missing_column_raises(registry):
    with pytest.raises(ValueError, match="not found"):
        filter_pharmacies(registry, column='actividad')


def test_summarize_by_municipality_sorted(registry):
    counts = summarize_by_municipality(registry)
    assert counts.iloc[0].tolist() == [9, 15, 3]
    assert counts.iloc[1].tolist() == [15, 33, 2]
    assert counts['count'].sum() == len(registry)
