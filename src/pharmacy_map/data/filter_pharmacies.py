import logging

from pharmacy_map.config import (
    ACTIVITY_COL,
    DENUE_MUNICIPALITY_COL,
    DENUE_STATE_COL,
    PHARMACY_KEYWORD,
)


def filter_pharmacies(df, keyword=PHARMACY_KEYWORD, column=ACTIVITY_COL):
    """
    Keep business records whose activity name contains the keyword.

    Matching is a case-insensitive literal substring test, so businesses such
    as "farmacia veterinaria" or anything else containing "farm" are kept too.

    Args:
        df: Business registry records
        keyword: Substring to look for
        column: Free-text activity column

    Returns:
        Subset of df with the matching rows
    """
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found in business records")

    activity = df[column].astype('string').str.lower()
    matches = activity.str.contains(keyword.lower(), regex=False).fillna(False).astype(bool)
    pharmacies = df[matches].copy()

    logging.info(f"Kept {len(pharmacies)} of {len(df)} records matching '{keyword}' in {column}")
    return pharmacies


def summarize_by_municipality(df, state_col=DENUE_STATE_COL, municipality_col=DENUE_MUNICIPALITY_COL):
    """Frequency table of records per (state, municipality), largest first."""
    counts = (
        df.groupby([state_col, municipality_col])
        .size()
        .rename('count')
        .reset_index()
        .sort_values('count', ascending=False, kind='stable')
        .reset_index(drop=True)
    )
    logging.info(f"Records spread over {len(counts)} municipalities")
    return counts
