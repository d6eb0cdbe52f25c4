"""Shared test fixtures for fisher-classify tests."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from fisher_classify.classifier import FisherClassifier
from fisher_classify.features import FeatureList

HEADER = ["COMMENT_ID", "AUTHOR", "DATE", "CONTENT", "CLASS"]

SPAM_ROWS = [
    ["s1", "SpamBot", "2014-01-01", "check out my channel now please", "1"],
    ["s2", "SpamBot", "2014-01-02", "check out my channel for free stuff", "1"],
    ["s3", "PromoKing", "2014-01-03", "subscribe to my channel now please", "1"],
    ["s4", "PromoKing", "2014-01-04", "Check out my NEW channel!!! http://x.y", "1"],
    ["s5", "SpamBot", "2014-01-05", "free gift cards check out my page", "1"],
]

HAM_ROWS = [
    ["h1", "Fan One", "2014-02-01", "love this song so much", "0"],
    ["h2", "Fan Two", "2014-02-02", "this song is so good, love it", "0"],
    ["h3", "Fan One", "2014-02-03", "love this song forever and ever", "0"],
    ["h4", "Listener", "2014-02-04", "best video ever made love it", "0"],
    ["h5", "Fan Two", "2014-02-05", "so good this song never gets old", "0"],
]


def write_comments(path: Path, rows: list[list[str]], header: bool = True) -> Path:
    """Write comment rows to ``path`` in the YouTube spam CSV layout."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        if header:
            writer.writerow(HEADER)
        writer.writerows(rows)
    return path


@pytest.fixture
def corpus_rows() -> tuple[list[list[str]], list[list[str]]]:
    """The spam and ham rows behind ``comments_csv``."""
    return SPAM_ROWS, HAM_ROWS


@pytest.fixture
def write_csv(tmp_path: Path):
    """Factory writing ``rows`` to ``tmp_path / name``."""
    def _write(name: str, rows: list[list[str]], header: bool = True) -> Path:
        return write_comments(tmp_path / name, rows, header=header)
    return _write


@pytest.fixture
def comments_csv(tmp_path: Path) -> Path:
    """CSV file with interleaved spam and ham comments."""
    rows = [row for pair in zip(SPAM_ROWS, HAM_ROWS) for row in pair]
    return write_comments(tmp_path / "comments.csv", rows)


@pytest.fixture
def classifier() -> FisherClassifier:
    """Untrained classifier with the usual 0.5 / 1.0 smoothing."""
    return FisherClassifier(assumed_prob=0.5, assumed_weight=1.0)


@pytest.fixture
def trained(classifier: FisherClassifier) -> FisherClassifier:
    """Classifier trained on disjoint features: "x" is good, "y" is bad."""
    for _ in range(3):
        classifier.train(FeatureList.of("x"), "good")
        classifier.train(FeatureList.of("y"), "bad")
    return classifier


ENV_VARS = (
    "FISHER_ASSUMED_PROB",
    "FISHER_ASSUMED_WEIGHT",
    "FISHER_NGRAM_SIZE",
    "FISHER_CUTOFFS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    """Unset FISHER_* variables and run from an empty directory.

    Each variable is set before being deleted so that monkeypatch also
    removes values a ``.env`` file loads during the test.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
