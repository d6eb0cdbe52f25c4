"""Tests for the YouTube comment loader and featurizer."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fisher_classify.classifier import FisherClassifier
from fisher_classify.evaluation import evaluate
from fisher_classify.features import Featurizable
from fisher_classify.spam import (
    Comment,
    CommentLoadError,
    load_comments,
    load_many,
    normalize_text,
)


# ---------------------------------------------------------------------------
# Featurizer
# ---------------------------------------------------------------------------

class TestCommentFeatures:

    def test_normalize_text(self):
        assert normalize_text("Hello, World! 123 ÉTÉ") == "hello world  t"

    def test_author_feature_first(self):
        c = Comment("1", "Alice", "great song")
        assert c.features()[0] == "[author]Alice"

    def test_bigram_windows_skip_last_window(self):
        c = Comment("1", "Alice", "Hello, World! Check this out")
        assert c.features() == [
            "[author]Alice",
            "[content]hello world",
            "[content]world check",
            "[content]check this",
        ]

    def test_short_content_has_only_author(self):
        assert Comment("1", "Bob", "hi").features() == ["[author]Bob"]
        assert Comment("1", "Bob", "two words").features() == ["[author]Bob"]
        assert Comment("1", "Bob", "").features() == ["[author]Bob"]

    def test_special_characters_removed(self):
        c = Comment("1", "Eve", "Check out my NEW channel!!! http://x.y")
        assert c.features()[1:] == [
            "[content]check out",
            "[content]out my",
            "[content]my new",
            "[content]new channel",
        ]

    def test_repeated_spaces_give_empty_words(self):
        c = Comment("1", "Eve", "a  b c")
        assert c.features()[1:] == ["[content]a", "[content] b"]

    def test_custom_ngram_size(self):
        c = Comment("1", "Eve", "one two three four five", ngram_size=3)
        assert c.features()[1:] == ["[content]one two three", "[content]two three four"]

    @pytest.mark.parametrize("size", [0, -1])
    def test_non_positive_ngram_size_rejected(self, size):
        with pytest.raises(ValueError, match="ngram_size must be at least 1"):
            Comment("1", "a", "hello big world", ngram_size=size)

    def test_features_are_pure(self):
        c = Comment("1", "Eve", "same text every single time")
        assert c.features() == c.features()

    def test_category(self):
        assert Comment("1", "a", "b", is_spam=True).category == "bad"
        assert Comment("1", "a", "b", is_spam=False).category == "good"

    def test_comment_is_featurizable(self):
        assert isinstance(Comment("1", "a", "b"), Featurizable)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class TestLoadComments:

    def test_loads_all_rows(self, comments_csv: Path, corpus_rows):
        spam_rows, ham_rows = corpus_rows
        comments = load_comments(comments_csv)
        assert len(comments) == len(spam_rows) + len(ham_rows)
        assert sum(c.is_spam for c in comments) == len(spam_rows)

    def test_field_mapping(self, write_csv):
        path = write_csv("one.csv", [["id-9", "Zed", "2015-05-05", "a, quoted, body", "1"]])
        (comment,) = load_comments(path)
        assert comment.comment_id == "id-9"
        assert comment.author == "Zed"
        assert comment.content == "a, quoted, body"
        assert comment.is_spam is True

    def test_non_one_class_is_ham(self, write_csv):
        path = write_csv("ham.csv", [["1", "a", "d", "text", "0"], ["2", "b", "d", "text", "yes"]])
        assert [c.is_spam for c in load_comments(path)] == [False, False]

    def test_ngram_size_passed_through(self, write_csv):
        path = write_csv("n.csv", [["1", "a", "d", "one two three four", "0"]])
        (comment,) = load_comments(path, ngram_size=3)
        assert comment.ngram_size == 3

    def test_non_positive_ngram_size_rejected(self, write_csv):
        path = write_csv("z.csv", [["1", "a", "d", "hello big world", "0"]])
        with pytest.raises(ValueError, match="ngram_size must be at least 1"):
            load_comments(path, ngram_size=0)

    def test_truncated_row_raises(self, write_csv):
        path = write_csv("bad.csv", [["1", "a", "d", "text", "0"], ["2", "b", "d"]])
        with pytest.raises(CommentLoadError, match="expected 5 fields, got 3"):
            load_comments(path)

    def test_load_error_is_value_error(self):
        assert issubclass(CommentLoadError, ValueError)

    def test_missing_header_raises(self, tmp_path: Path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(CommentLoadError, match="missing header"):
            load_comments(path)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_comments(tmp_path / "nope.csv")

    def test_blank_rows_skipped(self, tmp_path: Path, caplog):
        path = tmp_path / "blank.csv"
        path.write_text(
            "COMMENT_ID,AUTHOR,DATE,CONTENT,CLASS\n1,a,d,text,0\n\n2,b,d,more,1\n",
            encoding="utf-8",
        )
        with caplog.at_level(logging.WARNING, logger="fisher_classify.spam"):
            comments = load_comments(path)
        assert [c.comment_id for c in comments] == ["1", "2"]
        assert "skipping blank row" in caplog.text

    def test_load_many_concatenates(self, write_csv, corpus_rows):
        spam_rows, ham_rows = corpus_rows
        first = write_csv("a.csv", spam_rows)
        second = write_csv("b.csv", ham_rows)
        comments = load_many([first, second])
        assert [c.comment_id for c in comments] == [r[0] for r in spam_rows + ham_rows]


# ---------------------------------------------------------------------------
# End-to-end spam filtering
# ---------------------------------------------------------------------------

class TestSpamFiltering:

    @pytest.fixture
    def spam_classifier(self, comments_csv: Path) -> FisherClassifier:
        classifier = FisherClassifier(0.5, 1.0)
        for comment in load_comments(comments_csv):
            classifier.train(comment, comment.category)
        return classifier

    def test_spam_comment_classified_bad(self, spam_classifier):
        query = Comment("q1", "SpamBot", "check out my video now")
        assert spam_classifier.classify(query) == "bad"

    def test_ham_comment_classified_good(self, spam_classifier):
        query = Comment("q2", "Fan One", "love this song so much")
        assert spam_classifier.classify(query) == "good"

    def test_training_set_accuracy(self, spam_classifier, comments_csv: Path):
        comments = load_comments(comments_csv)
        metrics = evaluate(spam_classifier, comments, [c.category for c in comments])
        assert metrics.accuracy > 0.5, f"Training accuracy should be > 50%, got {metrics.accuracy:.2%}"
