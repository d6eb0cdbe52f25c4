"""Fisher Classify -- feature-frequency document classifier using Fisher's method."""

__version__ = "0.1.0"

from .classifier import NO_CATEGORY, FisherClassifier, SynchronizedClassifier
from .config import ClassifierSettings, parse_cutoffs
from .evaluation import (
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
    evaluate,
    stratified_k_fold,
)
from .features import FeatureList, Featurizable
from .spam import Comment, CommentLoadError, load_comments, load_many

__all__ = [
    # Core
    "FisherClassifier",
    "SynchronizedClassifier",
    "NO_CATEGORY",
    # Features
    "Featurizable",
    "FeatureList",
    # Configuration
    "ClassifierSettings",
    "parse_cutoffs",
    # Evaluation
    "ClassificationMetrics",
    "compute_metrics",
    "cross_validate",
    "evaluate",
    "stratified_k_fold",
    # Spam comments
    "Comment",
    "CommentLoadError",
    "load_comments",
    "load_many",
]
