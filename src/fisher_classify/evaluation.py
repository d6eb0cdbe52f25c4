"""Accuracy metrics and cross-validation for the Fisher classifier.

- Precision, recall, F1 and confusion matrix over predicted labels
- Stratified k-fold index splits
- Hold-out evaluation and k-fold cross-validation of fresh classifiers

An empty prediction (the classifier declined to pick a category) is
reported under the ``"none"`` label.
"""

from __future__ import annotations

import logging
import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .classifier import NO_CATEGORY, FisherClassifier, SynchronizedClassifier
from .features import Featurizable

logger = logging.getLogger(__name__)

NONE_LABEL = "none"


@dataclass
class ClassificationMetrics:
    """Evaluation metrics for a set of predictions.

    Attributes:
        accuracy: Overall accuracy.
        per_class: Per-class precision, recall, F1 scores.
        macro_precision: Unweighted mean precision across classes.
        macro_recall: Unweighted mean recall across classes.
        macro_f1: Unweighted mean F1 across classes.
        weighted_f1: Support-weighted mean F1 across classes.
        confusion_matrix: Nested dict of ``{true: {predicted: count}}``.
        support: Per-class sample counts in the true labels.
    """

    accuracy: float = 0.0
    per_class: dict[str, dict[str, float]] = field(default_factory=dict)
    macro_precision: float = 0.0
    macro_recall: float = 0.0
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[str, dict[str, int]] = field(default_factory=dict)
    support: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.support.values())

    @property
    def correct(self) -> int:
        return sum(self.confusion_matrix.get(c, {}).get(c, 0) for c in self.confusion_matrix)

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_precision": round(self.macro_precision, 4),
            "macro_recall": round(self.macro_recall, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                cls: {k: round(v, 4) for k, v in metrics.items()}
                for cls, metrics in self.per_class.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "support": self.support,
        }

    def summary(self) -> str:
        """Human-readable summary of metrics."""
        lines = [
            f"Classified {self.correct}/{self.total} correctly",
            f"Accuracy: {self.accuracy:.2%}",
            f"Macro F1: {self.macro_f1:.4f}",
            f"Weighted F1: {self.weighted_f1:.4f}",
            "",
            f"{'Class':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Support':>10}",
            "-" * 62,
        ]
        for cls in sorted(self.per_class.keys()):
            m = self.per_class[cls]
            s = self.support.get(cls, 0)
            lines.append(
                f"{cls:<20} {m['precision']:>10.4f} {m['recall']:>10.4f} "
                f"{m['f1']:>10.4f} {s:>10}"
            )
        return "\n".join(lines)


def _label(value: str) -> str:
    return value if value != NO_CATEGORY else NONE_LABEL


def compute_metrics(
    y_true: Sequence[str],
    y_pred: Sequence[str],
) -> ClassificationMetrics:
    """Compute classification metrics from true and predicted labels.

    Args:
        y_true: Ground truth labels.
        y_pred: Predicted labels; ``""`` counts as ``"none"``.

    Returns:
        ClassificationMetrics with accuracy, per-class, and aggregate scores.

    Raises:
        ValueError: If the two sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    y_true = [_label(t) for t in y_true]
    y_pred = [_label(p) for p in y_pred]
    classes = sorted(set(y_true) | set(y_pred))
    n = len(y_true)

    cm: dict[str, dict[str, int]] = {c: {c2: 0 for c2 in classes} for c in classes}
    for true, pred in zip(y_true, y_pred):
        cm[true][pred] += 1

    correct = sum(1 for t, p in zip(y_true, y_pred) if t == p)
    accuracy = correct / n if n > 0 else 0.0

    per_class: dict[str, dict[str, float]] = {}
    support: Counter[str] = Counter(y_true)

    for cls in classes:
        tp = cm[cls][cls]
        fp = sum(cm[other][cls] for other in classes if other != cls)
        fn = sum(cm[cls][other] for other in classes if other != cls)

        precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
        recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
        f1 = (
            2 * precision * recall / (precision + recall)
            if (precision + recall) > 0
            else 0.0
        )
        per_class[cls] = {"precision": precision, "recall": recall, "f1": f1}

    n_classes = len(classes)
    macro_p = sum(m["precision"] for m in per_class.values()) / n_classes if classes else 0.0
    macro_r = sum(m["recall"] for m in per_class.values()) / n_classes if classes else 0.0
    macro_f1 = sum(m["f1"] for m in per_class.values()) / n_classes if classes else 0.0

    total_support = sum(support.values())
    weighted_f1 = (
        sum(per_class[cls]["f1"] * support.get(cls, 0) for cls in classes) / total_support
        if total_support > 0
        else 0.0
    )

    return ClassificationMetrics(
        accuracy=accuracy,
        per_class=per_class,
        macro_precision=macro_p,
        macro_recall=macro_r,
        macro_f1=macro_f1,
        weighted_f1=weighted_f1,
        confusion_matrix=cm,
        support=dict(support),
    )


def evaluate(
    classifier: FisherClassifier | SynchronizedClassifier,
    items: Sequence[Featurizable],
    labels: Sequence[str],
) -> ClassificationMetrics:
    """Classify held-out ``items`` and score them against ``labels``."""
    if len(items) != len(labels):
        raise ValueError(
            f"items ({len(items)}) and labels ({len(labels)}) must have same length"
        )
    predictions = classifier.classify_batch(items)
    return compute_metrics(labels, predictions)


def stratified_k_fold(
    labels: Sequence[str],
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Generate stratified k-fold train/test index splits.

    Each fold keeps approximately the class distribution of the full set.

    Raises:
        ValueError: If ``k`` is less than 2.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    rng = random.Random(seed)

    class_indices: dict[str, list[int]] = defaultdict(list)
    for idx, label in enumerate(labels):
        class_indices[label].append(idx)

    # Sorted so the shuffle sequence does not depend on label arrival order
    for label in sorted(class_indices):
        rng.shuffle(class_indices[label])

    # Each class continues round-robin where the previous one stopped
    fold_assignments: list[int] = [0] * len(labels)
    offset = 0
    for label in sorted(class_indices):
        for i, idx in enumerate(class_indices[label]):
            fold_assignments[idx] = (offset + i) % k
        offset += len(class_indices[label])

    folds: list[tuple[list[int], list[int]]] = []
    for fold_idx in range(k):
        test_indices = [i for i, f in enumerate(fold_assignments) if f == fold_idx]
        train_indices = [i for i, f in enumerate(fold_assignments) if f != fold_idx]
        folds.append((train_indices, test_indices))

    return folds


def cross_validate(
    items: Sequence[Featurizable],
    labels: Sequence[str],
    k: int = 5,
    assumed_prob: float = 0.5,
    assumed_weight: float = 1.0,
    cutoffs: Optional[Mapping[str, float]] = None,
    seed: int = 42,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation.

    Trains a fresh :class:`FisherClassifier` on each fold's training split
    and scores it on the held-out split.

    Returns:
        One ClassificationMetrics per fold.
    """
    if len(items) != len(labels):
        raise ValueError(
            f"items ({len(items)}) and labels ({len(labels)}) must have same length"
        )

    results: list[ClassificationMetrics] = []
    for fold_no, (train_idx, test_idx) in enumerate(
        stratified_k_fold(labels, k=k, seed=seed), 1
    ):
        classifier = FisherClassifier(assumed_prob, assumed_weight)
        for category, threshold in (cutoffs or {}).items():
            classifier.set_cutoff(category, threshold)
        for i in train_idx:
            classifier.train(items[i], labels[i])

        metrics = evaluate(
            classifier,
            [items[i] for i in test_idx],
            [labels[i] for i in test_idx],
        )
        logger.info("Fold %d/%d accuracy: %.4f", fold_no, k, metrics.accuracy)
        results.append(metrics)

    return results
