"""Feature recipe: drop, decorrelate and standardize predictors.

A recipe is fit once on training rows and frozen. ``apply_recipe`` only ever
uses the constants captured by ``fit_recipe``, so test rows and single-row
predictions are transformed exactly like the training rows were.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from .config import NUMERIC_FEATURES, RECIPE_EXCLUDE, TARGET_COLUMN
from .errors import SchemaError


@dataclass(frozen=True)
class FeatureRecipe:
    outcome: str
    inputs: tuple[str, ...]
    dropped: tuple[str, ...]
    threshold: float
    predictors: tuple[str, ...]
    means: tuple[float, ...]
    stds: tuple[float, ...]

    def constants(self) -> pd.DataFrame:
        return pd.DataFrame({"mean": self.means, "std": self.stds}, index=list(self.predictors))


def _ordered(columns: Sequence[str], column_order: Sequence[str]) -> list[str]:
    rank = {name: idx for idx, name in enumerate(column_order)}
    # columns outside the canonical order keep their frame order, after it
    return sorted(columns, key=lambda col: (rank.get(col, len(rank)), list(columns).index(col)))


def correlated_columns(
    df: pd.DataFrame,
    columns: Sequence[str],
    *,
    threshold: float,
    column_order: Sequence[str] = NUMERIC_FEATURES,
) -> list[str]:
    """Columns to drop so no kept pair has |r| above ``threshold``.

    Pairs are visited in canonical order and the later column of an offending
    pair is dropped.
    """
    ordered = _ordered(columns, column_order)
    corr = df[ordered].corr(method="pearson").abs().fillna(0.0)
    dropped: list[str] = []
    for i, first in enumerate(ordered):
        if first in dropped:
            continue
        for second in ordered[i + 1:]:
            if second in dropped:
                continue
            if corr.loc[first, second] > threshold:
                dropped.append(second)
    return dropped


def fit_recipe(
    train: pd.DataFrame,
    *,
    outcome: str = TARGET_COLUMN,
    threshold: float = 0.6,
    exclude: Sequence[str] = RECIPE_EXCLUDE,
    column_order: Sequence[str] | None = None,
    columns: Sequence[str] | None = None,
) -> FeatureRecipe:
    """Learn the dropped columns and centre/scale constants from ``train``.

    Predictors are ``columns`` when given, else every numeric column outside
    ``exclude`` and the outcome. Scaling uses the sample deviation (ddof=1),
    which is why ``StandardScaler`` (ddof=0) is not used here.
    """
    if outcome not in train.columns:
        raise SchemaError(f"Training data is missing outcome column '{outcome}'")
    if columns is not None:
        missing = [col for col in columns if col not in train.columns]
        if missing:
            raise SchemaError(f"Training data is missing predictor columns: {', '.join(missing)}")
        inputs = [col for col in columns if col != outcome]
    else:
        numeric = train.select_dtypes(include="number").columns
        inputs = [col for col in numeric if col != outcome and col not in exclude]
    if not inputs:
        raise SchemaError("Training data has no numeric predictor columns")

    dropped = correlated_columns(
        train,
        inputs,
        threshold=threshold,
        column_order=NUMERIC_FEATURES if column_order is None else column_order,
    )
    kept = [col for col in inputs if col not in dropped]
    means = train[kept].mean()
    stds = train[kept].std(ddof=1)
    # constant (or single-row) columns centre to zero instead of dividing by zero
    stds = stds.where(np.isfinite(stds) & (stds > 0), 1.0)

    return FeatureRecipe(
        outcome=outcome,
        inputs=tuple(inputs),
        dropped=tuple(dropped),
        threshold=float(threshold),
        predictors=tuple(kept),
        means=tuple(float(means[col]) for col in kept),
        stds=tuple(float(stds[col]) for col in kept),
    )


def apply_recipe(recipe: FeatureRecipe, data: pd.DataFrame) -> pd.DataFrame:
    missing = [col for col in recipe.inputs if col not in data.columns]
    if missing:
        raise SchemaError(f"Data is missing recipe input columns: {', '.join(missing)}")
    predictors = list(recipe.predictors)
    means = pd.Series(recipe.means, index=predictors)
    stds = pd.Series(recipe.stds, index=predictors)
    baked = (data[predictors].astype(float) - means) / stds
    if recipe.outcome in data.columns:
        baked[recipe.outcome] = data[recipe.outcome]
    return baked
