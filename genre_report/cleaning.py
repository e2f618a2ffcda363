"""Cleaning and normalizing the raw song table."""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from .config import (
    ARTIST_COLUMN,
    DECADE_BINS,
    DECADE_COLUMN,
    DURATION_COLUMN,
    DURATION_MS_COLUMN,
    FEATURE_RANGES,
    ID_COLUMN,
    NAME_COLUMN,
    POPULARITY_COLUMN,
    POPULARITY_RANGE,
    RELEASE_DATE_COLUMN,
    TARGET_COLUMN,
    YEAR_COLUMN,
    ReportConfig,
)

logger = logging.getLogger(__name__)

DECADE_LABELS: list[str] = [label for _, label in DECADE_BINS]


def _log_step(step: str, before: int, after: pd.DataFrame) -> pd.DataFrame:
    logger.info("%s: dropped %d of %d rows", step, before - len(after), before)
    return after


def drop_missing_identity(df: pd.DataFrame) -> pd.DataFrame:
    return df.dropna(subset=[ARTIST_COLUMN, NAME_COLUMN])


def filter_genres(df: pd.DataFrame, genres: Sequence[str]) -> pd.DataFrame:
    labels = df[TARGET_COLUMN].astype(str).str.strip().str.lower()
    out = df.loc[labels.isin(genres)].copy()
    out[TARGET_COLUMN] = pd.Categorical(labels[labels.isin(genres)], categories=list(genres))
    return out


def drop_out_of_range(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows with a missing or out-of-range acoustic attribute or popularity."""
    keep = pd.Series(True, index=df.index)
    for column, (low, high) in FEATURE_RANGES.items():
        keep &= df[column].between(low, high)
    low, high = POPULARITY_RANGE
    keep &= df[POPULARITY_COLUMN].between(low, high)
    return df.loc[keep]


def parse_year(release_date: pd.Series) -> pd.Series:
    """Leading four characters as a year; anything unparseable becomes NaN."""
    return pd.to_numeric(release_date.astype(str).str.slice(0, 4), errors="coerce")


def decade_of(year: pd.Series) -> pd.Series:
    edges = [-np.inf] + [upper for upper, _ in DECADE_BINS]
    decades = pd.cut(year, bins=edges, labels=DECADE_LABELS, right=True)
    return decades.cat.as_ordered()


def add_release_decade(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    year = parse_year(out[RELEASE_DATE_COLUMN])
    out[DECADE_COLUMN] = decade_of(year)
    out[YEAR_COLUMN] = year
    out = out.dropna(subset=[DECADE_COLUMN])
    out[YEAR_COLUMN] = out[YEAR_COLUMN].astype(int)
    return out


def convert_duration(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out[DURATION_COLUMN] = out[DURATION_MS_COLUMN] / 1000.0
    return out.drop(columns=[DURATION_MS_COLUMN])


def duration_bounds(df: pd.DataFrame, quantiles: tuple[float, float] = (0.1, 0.9)) -> tuple[float, float]:
    low, high = df[DURATION_COLUMN].quantile(list(quantiles))
    return float(low), float(high)


def trim_duration(df: pd.DataFrame, quantiles: tuple[float, float] = (0.1, 0.9)) -> pd.DataFrame:
    low, high = duration_bounds(df, quantiles)
    logger.debug("Duration bounds: [%.1f, %.1f] seconds", low, high)
    return df.loc[df[DURATION_COLUMN].between(low, high)]


def deduplicate_tracks(df: pd.DataFrame) -> pd.DataFrame:
    """Keep the most popular row per (artist, name); ties go to the smallest id."""
    ordered = df.sort_values(
        [POPULARITY_COLUMN, ID_COLUMN],
        ascending=[False, True],
        kind="mergesort",
    )
    deduped = ordered.drop_duplicates(subset=[ARTIST_COLUMN, NAME_COLUMN], keep="first")
    return deduped.sort_index()


def drop_unpopular(df: pd.DataFrame, min_popularity: int = 1) -> pd.DataFrame:
    return df.loc[df[POPULARITY_COLUMN] > min_popularity]


def clean_tracks(df: pd.DataFrame, config: ReportConfig) -> pd.DataFrame:
    steps = [
        ("missing artist/name", drop_missing_identity),
        ("genre filter", lambda frame: filter_genres(frame, config.genres)),
        ("attribute ranges", drop_out_of_range),
        ("release decade", add_release_decade),
        ("duration to seconds", convert_duration),
        ("duration percentile trim", lambda frame: trim_duration(frame, config.duration_quantiles)),
        ("deduplicate artist/name", deduplicate_tracks),
        ("popularity threshold", lambda frame: drop_unpopular(frame, config.min_popularity)),
    ]
    for step, func in steps:
        before = len(df)
        df = _log_step(step, before, func(df))
    logger.info("Cleaned table has %d tracks", len(df))
    return df.reset_index(drop=True)
