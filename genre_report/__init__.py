"""Song genre report: cleaning, feature recipe and genre classifiers."""
from .config import METRICS_FILENAME, ReportConfig
from .errors import InsufficientDataError, SchemaError
from .cleaning import clean_tracks
from .inference import load_model
from .loading import load_dataset
from .models import GenreModel, fit_model, predict, predict_proba
from .recipe import FeatureRecipe, apply_recipe, fit_recipe
from .report import GenreReport, build_report, save_artifacts
from .sampling import bootstraps, stratified_split
from .tuning import tune_model
from .evaluation import evaluate_model

__all__ = [
    "METRICS_FILENAME",
    "ReportConfig",
    "InsufficientDataError",
    "SchemaError",
    "clean_tracks",
    "load_model",
    "load_dataset",
    "GenreModel",
    "fit_model",
    "predict",
    "predict_proba",
    "FeatureRecipe",
    "apply_recipe",
    "fit_recipe",
    "GenreReport",
    "build_report",
    "save_artifacts",
    "bootstraps",
    "stratified_split",
    "tune_model",
    "evaluate_model",
]
