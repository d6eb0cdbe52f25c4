"""Feature contract consumed by the classifier.

A document only has to produce an ordered sequence of feature strings for
itself. Equal strings denote the same feature; nothing else about their
content matters to the classifier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class Featurizable(Protocol):
    """Anything that can list its own features.

    ``features()`` must be pure (the same document always yields the same
    sequence) and total (it never fails for a well-formed document).
    """

    def features(self) -> Sequence[str]:
        ...


@dataclass(frozen=True)
class FeatureList:
    """A document given directly as its list of feature strings."""

    items: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, *features: str) -> "FeatureList":
        return cls(tuple(features))

    def features(self) -> Sequence[str]:
        return self.items
