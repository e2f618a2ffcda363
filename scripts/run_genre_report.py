"""CLI entrypoint for building the song genre report."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Add project root to PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from genre_report.config import DEFAULT_DATASET_URL, ReportConfig
from genre_report.report import build_report, save_artifacts


_DEFAULT_ARTIFACT_DIR = Path("genre_report/artifacts")


def _optional_path(value: str) -> Path | None:
    if value.lower() == "none":
        return None
    return Path(value)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clean the song table, tune genre classifiers and report their metrics.")
    parser.add_argument("--dataset", type=str, default=DEFAULT_DATASET_URL, help="Path or URL of the songs CSV")
    parser.add_argument("--artifacts", type=_optional_path, default=_DEFAULT_ARTIFACT_DIR, help="Directory to store artifacts (None = skip)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for splits, resamples and models")
    parser.add_argument("--train-fraction", type=float, default=0.75, help="Training share of the stratified split")
    parser.add_argument("--bootstraps", type=int, default=25, help="Bootstrap resamples used for tuning")
    parser.add_argument("--corr-threshold", type=float, default=0.6, help="Absolute correlation above which a predictor is dropped")
    parser.add_argument("--n-trees", type=int, default=300, help="Random forest tree count")
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallelism for tuning")
    parser.add_argument("--verbose", action="store_true", help="Log every pipeline step")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    config = ReportConfig(
        dataset_path=args.dataset,
        seed=args.seed,
        artifact_dir=args.artifacts or _DEFAULT_ARTIFACT_DIR,
        train_fraction=args.train_fraction,
        bootstrap_times=args.bootstraps,
        corr_threshold=args.corr_threshold,
        n_trees=args.n_trees,
        n_jobs=args.n_jobs,
    )
    report = build_report(config)
    print(f"Cleaned tracks: {len(report.tracks)}")
    print(report.comparison().to_string(float_format="{:.3f}".format))
    if args.artifacts is not None:
        save_artifacts(report, config.artifact_dir)
        print(f"Artifacts saved to {config.artifact_dir}")


if __name__ == "__main__":
    main()
