"""Classifier settings loaded from the environment.

Values may come from the process environment or a ``.env`` file:

- ``FISHER_ASSUMED_PROB``: prior probability (default 0.5)
- ``FISHER_ASSUMED_WEIGHT``: prior weight in feature occurrences (default 1.0)
- ``FISHER_NGRAM_SIZE``: comment word window size (default 2)
- ``FISHER_CUTOFFS``: per-category cutoffs, e.g. ``bad=0.6,good=0.2``
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from .classifier import FisherClassifier


def parse_cutoffs(text: str | None) -> dict[str, float]:
    """Parse ``"cat=value,cat=value"`` into a cutoff mapping.

    Raises:
        ValueError: If an entry is not ``name=number``.
    """
    cutoffs: dict[str, float] = {}
    if not text:
        return cutoffs
    for entry in text.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, value = entry.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid cutoff '{entry}': expected category=value")
        try:
            cutoffs[name] = float(value)
        except ValueError:
            raise ValueError(f"Invalid cutoff value for '{name}': {value!r}") from None
    return cutoffs


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name}: expected {cast.__name__}, got {raw!r}") from None


@dataclass
class ClassifierSettings:
    """Smoothing, cutoff, and featurizer configuration.

    Args:
        assumed_prob: Prior probability for unseen feature/category pairs.
        assumed_weight: Number of feature occurrences the prior is worth.
        cutoffs: Minimum Fisher score per category.
        ngram_size: Word window size for comment content features.
    """

    assumed_prob: float = 0.5
    assumed_weight: float = 1.0
    cutoffs: dict[str, float] = field(default_factory=dict)
    ngram_size: int = 2

    def __post_init__(self) -> None:
        if self.ngram_size < 1:
            raise ValueError(f"ngram_size must be at least 1, got {self.ngram_size}")

    @classmethod
    def from_env(cls) -> "ClassifierSettings":
        """Build settings from ``FISHER_*`` variables (``.env`` is loaded first).

        Raises:
            ValueError: If a variable holds a malformed value.
        """
        load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()
        try:
            cutoffs = parse_cutoffs(os.getenv("FISHER_CUTOFFS"))
        except ValueError as e:
            raise ValueError(f"FISHER_CUTOFFS: {e}") from None
        ngram_size = _env_number("FISHER_NGRAM_SIZE", defaults.ngram_size, int)
        if ngram_size < 1:
            raise ValueError(f"FISHER_NGRAM_SIZE: expected a positive int, got {ngram_size}")
        return cls(
            assumed_prob=_env_number("FISHER_ASSUMED_PROB", defaults.assumed_prob, float),
            assumed_weight=_env_number("FISHER_ASSUMED_WEIGHT", defaults.assumed_weight, float),
            cutoffs=cutoffs,
            ngram_size=ngram_size,
        )

    def build_classifier(self) -> FisherClassifier:
        """Create an untrained classifier with these settings applied."""
        classifier = FisherClassifier(self.assumed_prob, self.assumed_weight)
        for category, threshold in self.cutoffs.items():
            classifier.set_cutoff(category, threshold)
        return classifier
