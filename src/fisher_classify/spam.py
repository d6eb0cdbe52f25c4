"""YouTube comment loader and featurizer for spam filtering.

Reads the YouTube Spam Collection CSV layout
(``COMMENT_ID,AUTHOR,DATE,CONTENT,CLASS``) into :class:`Comment` objects.
Each comment turns itself into features: one author-identity feature plus
overlapping word windows over the normalized content.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

SPAM = "bad"
HAM = "good"

AUTHOR_PREFIX = "[author]"
CONTENT_PREFIX = "[content]"

_MIN_FIELDS = 5
_NON_ALPHA_RE = re.compile(r"[^a-z ]")


class CommentLoadError(ValueError):
    """A comment file is malformed (missing header, truncated row)."""


def normalize_text(text: str) -> str:
    """Lowercase ``text`` and keep only ASCII letters and spaces."""
    return _NON_ALPHA_RE.sub("", text.lower())


@dataclass(frozen=True)
class Comment:
    """A single labeled YouTube comment."""

    comment_id: str
    author: str
    content: str
    is_spam: bool = False
    ngram_size: int = 2

    def __post_init__(self) -> None:
        if self.ngram_size < 1:
            raise ValueError(f"ngram_size must be at least 1, got {self.ngram_size}")

    @property
    def category(self) -> str:
        return SPAM if self.is_spam else HAM

    def features(self) -> list[str]:
        """Author feature followed by content word windows.

        Words come from splitting the normalized content on single spaces.
        Windows start at positions ``0 .. len(words) - n - 1``, so the last
        full window is not emitted.
        """
        out = [AUTHOR_PREFIX + self.author]
        n = self.ngram_size
        words = normalize_text(self.content).split(" ")
        for i in range(len(words) - n):
            window = " ".join(words[i : i + n])
            out.append((CONTENT_PREFIX + window).strip())
        return out


def load_comments(path: str | Path, ngram_size: int = 2) -> list[Comment]:
    """Load labeled comments from a CSV file.

    Args:
        path: CSV file with a header row and at least five columns.
        ngram_size: Word window size used by each comment's features.

    Returns:
        Comments in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        CommentLoadError: If the header is missing or a row is truncated.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    comments: list[Comment] = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            raise CommentLoadError(f"{path}: missing header row")

        for row in reader:
            if not any(field.strip() for field in row):
                logger.warning("%s:%d: skipping blank row", path, reader.line_num)
                continue
            if len(row) < _MIN_FIELDS:
                raise CommentLoadError(
                    f"{path}:{reader.line_num}: expected {_MIN_FIELDS} fields, "
                    f"got {len(row)}"
                )
            comments.append(Comment(
                comment_id=row[0],
                author=row[1],
                content=row[3],
                is_spam=row[4].strip() == "1",
                ngram_size=ngram_size,
            ))

    logger.info(
        "Loaded %d comments (%d spam) from %s",
        len(comments),
        sum(1 for c in comments if c.is_spam),
        path,
    )
    return comments


def load_many(paths: Iterable[str | Path], ngram_size: int = 2) -> list[Comment]:
    """Load and concatenate comments from several CSV files."""
    comments: list[Comment] = []
    for path in paths:
        comments.extend(load_comments(path, ngram_size=ngram_size))
    return comments
