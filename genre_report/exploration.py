"""Summary tables behind the report's charts."""
from __future__ import annotations

from typing import Sequence

import pandas as pd

from .config import DECADE_COLUMN, NUMERIC_FEATURES, POPULARITY_COLUMN, TARGET_COLUMN
from .errors import require_seed


def genre_counts(df: pd.DataFrame) -> pd.Series:
    return df[TARGET_COLUMN].value_counts(sort=False)


def popularity_summary(df: pd.DataFrame, by: str = TARGET_COLUMN) -> pd.DataFrame:
    """Box-plot statistics of popularity per group."""
    grouped = df.groupby(by, observed=True)[POPULARITY_COLUMN]
    return grouped.describe()[["count", "mean", "std", "min", "25%", "50%", "75%", "max"]]


def popularity_by_decade(df: pd.DataFrame) -> pd.DataFrame:
    return popularity_summary(df, by=DECADE_COLUMN)


def genre_decade_table(df: pd.DataFrame, *, normalize: bool = False) -> pd.DataFrame:
    # decade x genre counts, the mosaic plot's input
    return pd.crosstab(df[DECADE_COLUMN], df[TARGET_COLUMN], normalize="index" if normalize else False)


def correlation_matrix(df: pd.DataFrame, columns: Sequence[str] | None = None) -> pd.DataFrame:
    if columns is None:
        columns = [col for col in NUMERIC_FEATURES if col in df.columns]
    return df[list(columns)].corr(method="pearson")


def sample_rows(df: pd.DataFrame, n: int = 10, *, seed: int) -> pd.DataFrame:
    return df.sample(n=min(n, len(df)), random_state=require_seed(seed))
