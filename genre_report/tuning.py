"""Grid search over bootstrap resamples with out-of-bag scoring."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import pandas as pd
from joblib import Parallel, delayed

from .config import DEFAULT_GRIDS, N_TREES, TARGET_COLUMN
from .errors import InsufficientDataError, require_seed
from .evaluation import accuracy, roc_auc
from .models import check_family, fit_model
from .sampling import Resample, check_stratifiable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TuningResult:
    family: str
    scores: pd.DataFrame
    summary: pd.DataFrame
    best_params: dict[str, Any]


def expand_grid(grid: Mapping[str, Sequence[Any]]) -> list[dict[str, Any]]:
    names = list(grid)
    return [dict(zip(names, values)) for values in itertools.product(*(grid[name] for name in names))]


def _score_resample(
    family: str,
    data: pd.DataFrame,
    resample: Resample,
    params: Mapping[str, Any],
    *,
    seed: int,
    label: str,
    corr_threshold: float,
    n_trees: int,
    columns: Sequence[str] | None,
) -> dict[str, Any] | None:
    assessment = data.iloc[resample.assessment]
    if assessment.empty:
        return None
    model = fit_model(
        family,
        data.iloc[resample.analysis],
        params=params,
        seed=seed,
        label=label,
        corr_threshold=corr_threshold,
        n_trees=n_trees,
        columns=columns,
    )
    truth = assessment[label].astype(str)
    return {
        "resample": resample.id,
        **params,
        "accuracy": accuracy(truth, model.predict(assessment)),
        "roc_auc": roc_auc(truth, model.predict_proba(assessment)),
    }


def tune_model(
    family: str,
    training_data: pd.DataFrame,
    resamples: Sequence[Resample],
    *,
    grid: Mapping[str, Sequence[Any]] | None = None,
    seed: int,
    label: str = TARGET_COLUMN,
    corr_threshold: float = 0.6,
    n_trees: int = N_TREES,
    n_jobs: int = 1,
    columns: Sequence[str] | None = None,
) -> TuningResult:
    """Score every grid point on every resample and pick the most accurate.

    Each fit gets the same seed, so the outcome does not depend on ``n_jobs``
    or on the order in which tasks finish. Ties go to the earlier grid point.
    """
    check_family(family)
    seed = require_seed(seed)
    check_stratifiable(training_data[label].astype(object))
    grid = DEFAULT_GRIDS[family] if grid is None else grid
    points = expand_grid(grid)
    if not points:
        raise ValueError(f"Empty tuning grid for {family}")

    tasks = [(params, resample) for params in points for resample in resamples]
    results = Parallel(n_jobs=n_jobs)(
        delayed(_score_resample)(
            family,
            training_data,
            resample,
            params,
            seed=seed,
            label=label,
            corr_threshold=corr_threshold,
            n_trees=n_trees,
            columns=columns,
        )
        for params, resample in tasks
    )
    rows = [row for row in results if row is not None]
    if not rows:
        raise InsufficientDataError("No resample left out-of-bag rows to score")
    skipped = len(results) - len(rows)
    if skipped:
        logger.warning("Skipped %d resample fits with no out-of-bag rows", skipped)

    scores = pd.DataFrame(rows)
    names = list(grid)
    summary = (
        scores.groupby(names, sort=False)
        .agg(accuracy=("accuracy", "mean"), roc_auc=("roc_auc", "mean"), n=("accuracy", "size"))
        .reset_index()
    )
    best = summary["accuracy"].idxmax()
    best_params = summary.loc[[best], names].to_dict(orient="records")[0]
    logger.info("%s best params %s (oob accuracy %.3f)", family, best_params, summary.at[best, "accuracy"])
    return TuningResult(family=family, scores=scores, summary=summary, best_params=best_params)
