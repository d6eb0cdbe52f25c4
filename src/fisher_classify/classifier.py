"""Fisher-method document classifier.

Accumulates feature/category frequency counts from labeled documents and
scores new documents per category:

- Per-feature conditional probabilities, normalized across categories
- Additive smoothing toward an assumed prior, weighted by how often the
  feature has been seen
- Fisher's method to combine the per-feature estimates into one score
  (chi-squared CDF with ``2 * n`` degrees of freedom)
- Per-category cutoffs gating the final arg-max decision

Categories are always enumerated in ascending label order, so ties go to
the alphabetically first category and results are reproducible.

The classifier holds no locks. Wrap it in :class:`SynchronizedClassifier`
when one instance is shared between threads.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from collections import Counter
from typing import Sequence

from scipy.stats import chi2

from .features import Featurizable

logger = logging.getLogger(__name__)

#: Returned by :meth:`FisherClassifier.classify` when no category qualifies.
NO_CATEGORY = ""


class FisherClassifier:
    """Naive feature-frequency classifier scored with Fisher's method.

    Example::

        classifier = FisherClassifier(assumed_prob=0.5, assumed_weight=1.0)
        classifier.train(FeatureList.of("cheap", "pills"), "bad")
        classifier.train(FeatureList.of("great", "song"), "good")

        classifier.set_cutoff("bad", 0.6)
        classifier.classify(FeatureList.of("cheap"))  # "bad"

    Args:
        assumed_prob: Prior probability assumed for any feature/category
            pair before evidence accumulates. Must lie in [0, 1].
        assumed_weight: Virtual number of feature occurrences the prior is
            worth. Larger values need more evidence to move away from
            ``assumed_prob``. Should be non-negative.

    Raises:
        ValueError: If either parameter is not finite, or ``assumed_prob``
            is outside [0, 1].
    """

    def __init__(self, assumed_prob: float, assumed_weight: float) -> None:
        if not math.isfinite(assumed_prob) or not math.isfinite(assumed_weight):
            raise ValueError(
                f"assumed_prob ({assumed_prob}) and assumed_weight "
                f"({assumed_weight}) must be finite"
            )
        if not 0.0 <= assumed_prob <= 1.0:
            raise ValueError(f"assumed_prob must be in [0, 1], got {assumed_prob}")
        if assumed_weight < 0:
            logger.warning(
                "Negative assumed_weight %s: weighted probabilities may leave [0, 1]",
                assumed_weight,
            )

        self.assumed_prob = float(assumed_prob)
        self.assumed_weight = float(assumed_weight)
        self._feature_counts: dict[str, Counter[str]] = {}
        self._category_counts: Counter[str] = Counter()
        self._cutoffs: dict[str, float] = {}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(assumed_prob={self.assumed_prob}, "
            f"assumed_weight={self.assumed_weight}, "
            f"categories={self.categories}, features={len(self._feature_counts)})"
        )

    def __str__(self) -> str:
        return self.dump()

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    @property
    def categories(self) -> list[str]:
        """Known categories (at least one trained document), sorted."""
        return sorted(cat for cat, n in self._category_counts.items() if n > 0)

    def count_feature(self, feature: str, category: str) -> int:
        """Occurrences of ``feature`` in documents trained as ``category``."""
        counts = self._feature_counts.get(feature)
        if counts is None:
            return 0
        return counts.get(category, 0)

    def count_category(self, category: str) -> int:
        """Number of documents trained as ``category``."""
        return self._category_counts.get(category, 0)

    def total_count(self) -> int:
        """Number of documents trained across all categories."""
        return sum(self._category_counts.values())

    def train(self, item: Featurizable, category: str) -> None:
        """Record one labeled document.

        Every feature occurrence is counted, so a feature listed twice by
        the same document adds two to its count. The category count grows
        by exactly one per call.

        Args:
            item: Document exposing ``features()``.
            category: Non-empty category label.

        Raises:
            ValueError: If ``category`` is empty.
        """
        if not category:
            raise ValueError("category must be a non-empty string")

        features = item.features()
        for feature in features:
            counts = self._feature_counts.get(feature)
            if counts is None:
                counts = self._feature_counts[feature] = Counter()
            counts[category] += 1
        self._category_counts[category] += 1

        logger.debug("Trained %d features as %r", len(features), category)

    def reset(self) -> None:
        """Forget all training counts. Cutoffs and smoothing are kept."""
        self._feature_counts.clear()
        self._category_counts.clear()

    # ------------------------------------------------------------------
    # Probability primitives
    # ------------------------------------------------------------------

    def raw_prob(self, feature: str, category: str) -> float:
        """Fraction of ``category`` documents' feature count for ``feature``.

        Returns 0.0 for a category with no trained documents.
        """
        n_docs = self.count_category(category)
        if n_docs == 0:
            return 0.0
        return self.count_feature(feature, category) / n_docs

    def conditional_prob(self, feature: str, category: str) -> float:
        """P(category | feature), normalizing raw frequencies over categories."""
        prob = self.raw_prob(feature, category)
        if prob == 0.0:
            return 0.0
        freq_sum = sum(self.raw_prob(feature, cat) for cat in self.categories)
        return prob / freq_sum

    def weighted_prob(self, feature: str, category: str) -> float:
        """Conditional probability smoothed toward ``assumed_prob``.

        ``(w * ap + n * cp) / (w + n)`` where ``n`` is the total number of
        occurrences of ``feature`` across all categories. An unseen feature
        returns ``assumed_prob`` exactly.
        """
        occurrences = sum(
            self.count_feature(feature, cat) for cat in self.categories
        )
        denominator = self.assumed_weight + occurrences
        if denominator == 0:
            return self.assumed_prob

        basic = self.conditional_prob(feature, category)
        return (
            self.assumed_weight * self.assumed_prob + occurrences * basic
        ) / denominator

    def fisher_prob(self, item: Featurizable, category: str) -> float:
        """Combined confidence that ``item`` belongs to ``category``.

        Fisher's method: ``-2 * sum(ln(1 - p_i))`` over the item's weighted
        feature probabilities, evaluated against a chi-squared CDF with
        ``2 * n`` degrees of freedom. Items with no features score 0.0; a
        feature with weighted probability 1 drives the score to 1.0.
        """
        features = item.features()
        if not features:
            return 0.0

        log_product = 0.0
        for feature in features:
            prob = self.weighted_prob(feature, category)
            if prob >= 1.0:
                return 1.0
            log_product += math.log1p(-prob)

        fscore = -2.0 * log_product
        score = float(chi2.cdf(fscore, 2 * len(features)))
        if math.isnan(score):
            return 0.0
        return min(1.0, max(0.0, score))

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def set_cutoff(self, category: str, threshold: float) -> None:
        """Require a Fisher score above ``threshold`` to pick ``category``."""
        self._cutoffs[category] = float(threshold)

    def cutoff(self, category: str) -> float:
        """Configured cutoff for ``category`` (0.0 when unset)."""
        return self._cutoffs.get(category, 0.0)

    def scores(self, item: Featurizable) -> dict[str, float]:
        """Fisher score of ``item`` for every known category."""
        return {cat: self.fisher_prob(item, cat) for cat in self.categories}

    def classify(self, item: Featurizable) -> str:
        """Pick the best-scoring category that clears its cutoff.

        Features never seen in training score ``assumed_prob`` for every
        category. With ``assumed_prob > 0`` such an item therefore ties
        across categories and resolves to the first label in sorted order
        (subject to cutoffs), not to :data:`NO_CATEGORY`. Only an item with
        no features at all, or ``assumed_prob == 0``, yields
        :data:`NO_CATEGORY` under default cutoffs.

        Returns:
            The winning category label, or :data:`NO_CATEGORY` when no
            category scores above both zero and its cutoff.
        """
        best = NO_CATEGORY
        best_score = 0.0
        for cat, score in self.scores(item).items():
            logger.debug("Score for %r: %.6f (cutoff %.3f)", cat, score, self.cutoff(cat))
            if score > self.cutoff(cat) and score > best_score:
                best = cat
                best_score = score
        return best

    def classify_batch(self, items: Sequence[Featurizable]) -> list[str]:
        """Classify several documents."""
        return [self.classify(item) for item in items]

    # ------------------------------------------------------------------
    # Debugging
    # ------------------------------------------------------------------

    def dump(self) -> str:
        """Pretty-printed feature -> category -> count table.

        For inspection only; the format is not stable and is never read back.
        """
        return json.dumps(self._feature_counts, indent=3, sort_keys=True)


class SynchronizedClassifier:
    """Thread-safe facade over a :class:`FisherClassifier`.

    All calls are serialized through a single re-entrant lock. Use it only
    when an instance is shared between threads; the plain classifier is
    cheaper otherwise.
    """

    def __init__(self, classifier: FisherClassifier) -> None:
        self._classifier = classifier
        self._lock = threading.RLock()

    @property
    def categories(self) -> list[str]:
        with self._lock:
            return self._classifier.categories

    def train(self, item: Featurizable, category: str) -> None:
        with self._lock:
            self._classifier.train(item, category)

    def reset(self) -> None:
        with self._lock:
            self._classifier.reset()

    def set_cutoff(self, category: str, threshold: float) -> None:
        with self._lock:
            self._classifier.set_cutoff(category, threshold)

    def cutoff(self, category: str) -> float:
        with self._lock:
            return self._classifier.cutoff(category)

    def raw_prob(self, feature: str, category: str) -> float:
        with self._lock:
            return self._classifier.raw_prob(feature, category)

    def conditional_prob(self, feature: str, category: str) -> float:
        with self._lock:
            return self._classifier.conditional_prob(feature, category)

    def weighted_prob(self, feature: str, category: str) -> float:
        with self._lock:
            return self._classifier.weighted_prob(feature, category)

    def fisher_prob(self, item: Featurizable, category: str) -> float:
        with self._lock:
            return self._classifier.fisher_prob(item, category)

    def scores(self, item: Featurizable) -> dict[str, float]:
        with self._lock:
            return self._classifier.scores(item)

    def classify(self, item: Featurizable) -> str:
        with self._lock:
            return self._classifier.classify(item)

    def classify_batch(self, items: Sequence[Featurizable]) -> list[str]:
        """Classify several documents under one lock acquisition."""
        with self._lock:
            return self._classifier.classify_batch(items)

    def dump(self) -> str:
        with self._lock:
            return self._classifier.dump()
