"""Stratified train/test splits and bootstrap resamples."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split
from sklearn.utils import resample

from .config import TARGET_COLUMN
from .errors import InsufficientDataError, require_seed

logger = logging.getLogger(__name__)

MIN_ROWS_PER_LABEL = 2


@dataclass(frozen=True)
class Split:
    train: pd.DataFrame
    test: pd.DataFrame


@dataclass(frozen=True)
class Resample:
    """Positional row indices into the frame the resample was drawn from."""

    id: str
    analysis: np.ndarray
    assessment: np.ndarray


def check_stratifiable(labels: pd.Series, min_rows: int = MIN_ROWS_PER_LABEL) -> pd.Series:
    counts = labels.value_counts()
    counts = counts[counts > 0]
    small = counts[counts < min_rows]
    if not small.empty:
        detail = ", ".join(f"{label!r}: {count}" for label, count in small.items())
        raise InsufficientDataError(f"Too few rows to stratify ({detail}); need at least {min_rows} per label")
    return counts


def stratified_split(
    data: pd.DataFrame,
    *,
    label: str = TARGET_COLUMN,
    train_fraction: float | int = 0.75,
    seed: int,
) -> Split:
    seed = require_seed(seed)
    labels = data[label].astype(object)
    check_stratifiable(labels)
    try:
        train, test = train_test_split(
            data,
            train_size=train_fraction,
            random_state=seed,
            stratify=labels,
        )
    except ValueError as exc:
        raise InsufficientDataError(str(exc)) from exc
    logger.info("Split %d rows into %d train / %d test", len(data), len(train), len(test))
    return Split(train=train, test=test)


def bootstraps(
    data: pd.DataFrame,
    *,
    label: str = TARGET_COLUMN,
    times: int = 25,
    seed: int,
) -> list[Resample]:
    seed = require_seed(seed)
    if times < 1:
        raise ValueError(f"times must be positive, got {times}")
    labels = data[label].astype(object).to_numpy()
    check_stratifiable(pd.Series(labels))

    positions = np.arange(len(data))
    # one seed per resample, so each draw stands alone
    seeds = np.random.RandomState(seed).randint(0, 2**31 - 1, size=times)
    resamples = []
    for idx, resample_seed in enumerate(seeds, start=1):
        analysis = resample(
            positions,
            replace=True,
            n_samples=len(positions),
            stratify=labels,
            random_state=int(resample_seed),
        )
        assessment = np.setdiff1d(positions, analysis)
        resamples.append(Resample(id=f"Bootstrap{idx:02d}", analysis=np.asarray(analysis), assessment=assessment))
    return resamples
