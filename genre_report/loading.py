"""Loading the raw song table."""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import COLUMN_ALIASES, REQUIRED_COLUMNS
from .errors import SchemaError

logger = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renames = {old: new for old, new in COLUMN_ALIASES.items() if old in df.columns and new not in df.columns}
    return df.rename(columns=renames)


def check_columns(df: pd.DataFrame, required=REQUIRED_COLUMNS) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaError(f"Dataset is missing required columns: {', '.join(missing)}")


def load_dataset(path: Path | str) -> pd.DataFrame:
    """Read a song table from a CSV path or URL into canonical column names."""
    df = normalize_columns(pd.read_csv(path))
    check_columns(df)
    logger.info("Loaded %d tracks from %s", len(df), path)
    return df
