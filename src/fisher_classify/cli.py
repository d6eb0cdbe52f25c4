"""Command-line interface for the Fisher spam classifier.

Provides ``evaluate``, ``crossval``, ``classify``, and ``dump`` commands
over YouTube comment CSV files, with rich terminal output using the
``click`` and ``rich`` libraries.

Usage::

    fisher-classify evaluate Youtube01-Psy.csv Youtube03-LMFAO.csv --test Youtube02-KatyPerry.csv
    fisher-classify crossval Youtube0*.csv -k 5
    fisher-classify classify Youtube01-Psy.csv --author Bob --text "check out my channel"
    fisher-classify dump Youtube01-Psy.csv
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .classifier import NO_CATEGORY, FisherClassifier
from .config import ClassifierSettings, parse_cutoffs
from .evaluation import ClassificationMetrics, cross_validate, evaluate as evaluate_items
from .spam import Comment, load_many

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _settings(
    ctx: click.Context,
    cutoffs: tuple[str, ...] = (),
) -> ClassifierSettings:
    """Environment settings with command-line overrides applied."""
    try:
        settings = ClassifierSettings.from_env()
        for entry in cutoffs:
            settings.cutoffs.update(parse_cutoffs(entry))
    except ValueError as e:
        raise click.BadParameter(str(e)) from None

    opts = ctx.find_root().params
    if opts.get("assumed_prob") is not None:
        settings.assumed_prob = opts["assumed_prob"]
    if opts.get("assumed_weight") is not None:
        settings.assumed_weight = opts["assumed_weight"]
    return settings


def _load(paths: tuple[Path, ...], ngram_size: int) -> list[Comment]:
    try:
        return load_many(paths, ngram_size=ngram_size)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


def _train(settings: ClassifierSettings, paths: tuple[Path, ...]) -> FisherClassifier:
    try:
        classifier = settings.build_classifier()
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)
    comments = _load(paths, settings.ngram_size)
    with console.status("[bold blue]Training classifier...", spinner="dots"):
        for comment in comments:
            classifier.train(comment, comment.category)
    logger.info("Trained on %d comments", len(comments))
    return classifier


@click.group()
@click.version_option(package_name="fisher-classify")
@click.option("--assumed-prob", type=float, default=None,
              help="Prior probability for unseen features (overrides FISHER_ASSUMED_PROB).")
@click.option("--assumed-weight", type=float, default=None,
              help="Weight of the prior in feature occurrences (overrides FISHER_ASSUMED_WEIGHT).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(assumed_prob: float | None, assumed_weight: float | None, verbose: bool) -> None:
    """Fisher-method spam classifier for YouTube comments.

    Train on labeled comment CSV files and evaluate, inspect, or classify.
    """
    _configure_logging(verbose)


@main.command()
@click.argument("train_files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--test", "test_file", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Labeled CSV file to classify after training.")
@click.option("--cutoff", "-c", "cutoffs", multiple=True,
              help="Category cutoff as category=value (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Print metrics as JSON.")
@click.pass_context
def evaluate(
    ctx: click.Context,
    train_files: tuple[Path, ...],
    test_file: Path,
    cutoffs: tuple[str, ...],
    as_json: bool,
) -> None:
    """Train on TRAIN_FILES and report accuracy on the test file.

    Example: fisher-classify evaluate Youtube01-Psy.csv --test Youtube02-KatyPerry.csv
    """
    settings = _settings(ctx, cutoffs)
    classifier = _train(settings, train_files)
    test_set = _load((test_file,), settings.ngram_size)

    metrics = evaluate_items(classifier, test_set, [c.category for c in test_set])

    if as_json:
        click.echo(json.dumps(metrics.to_dict(), indent=2))
    else:
        _render_metrics(metrics, f"Evaluation: {test_file.name}")


@main.command()
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--folds", "-k", type=click.IntRange(min=2), default=5, show_default=True,
              help="Number of folds.")
@click.option("--seed", type=int, default=42, show_default=True, help="Fold shuffle seed.")
@click.option("--cutoff", "-c", "cutoffs", multiple=True,
              help="Category cutoff as category=value (repeatable).")
@click.pass_context
def crossval(
    ctx: click.Context,
    files: tuple[Path, ...],
    folds: int,
    seed: int,
    cutoffs: tuple[str, ...],
) -> None:
    """Stratified k-fold cross-validation over FILES.

    Example: fisher-classify crossval Youtube01-Psy.csv Youtube04-Eminem.csv -k 5
    """
    settings = _settings(ctx, cutoffs)
    comments = _load(files, settings.ngram_size)

    with console.status("[bold blue]Cross-validating...", spinner="dots"):
        try:
            results = cross_validate(
                comments,
                [c.category for c in comments],
                k=folds,
                assumed_prob=settings.assumed_prob,
                assumed_weight=settings.assumed_weight,
                cutoffs=settings.cutoffs,
                seed=seed,
            )
        except ValueError as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    table = Table(title=f"{folds}-fold cross-validation")
    table.add_column("Fold", justify="right", width=6)
    table.add_column("Accuracy", justify="right")
    table.add_column("Macro F1", justify="right")
    table.add_column("Correct", justify="right")
    for i, m in enumerate(results, 1):
        table.add_row(str(i), f"{m.accuracy:.2%}", f"{m.macro_f1:.4f}", f"{m.correct}/{m.total}")

    mean = sum(m.accuracy for m in results) / len(results)
    console.print(table)
    console.print(f"Mean accuracy: [bold]{mean:.2%}[/]")


@main.command()
@click.argument("train_files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--text", "-t", required=True, help="Comment content to classify.")
@click.option("--author", "-a", default="", help="Comment author.")
@click.option("--cutoff", "-c", "cutoffs", multiple=True,
              help="Category cutoff as category=value (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Print the decision as JSON.")
@click.pass_context
def classify(
    ctx: click.Context,
    train_files: tuple[Path, ...],
    text: str,
    author: str,
    cutoffs: tuple[str, ...],
    as_json: bool,
) -> None:
    """Classify a single comment after training on TRAIN_FILES.

    Example: fisher-classify classify Youtube01-Psy.csv -a Bob -t "subscribe to my channel"
    """
    settings = _settings(ctx, cutoffs)
    classifier = _train(settings, train_files)

    comment = Comment(comment_id="", author=author, content=text,
                      ngram_size=settings.ngram_size)
    scores = classifier.scores(comment)
    category = classifier.classify(comment)

    if as_json:
        click.echo(json.dumps({
            "category": category or None,
            "scores": {cat: round(s, 6) for cat, s in scores.items()},
            "cutoffs": {cat: classifier.cutoff(cat) for cat in scores},
        }, indent=2))
        return

    table = Table(title="Category scores")
    table.add_column("Category", style="cyan")
    table.add_column("Fisher score", justify="right")
    table.add_column("Cutoff", justify="right")
    for cat, score in scores.items():
        style = "bold green" if cat == category else ""
        table.add_row(cat, f"[{style}]{score:.4f}[/]" if style else f"{score:.4f}",
                      f"{classifier.cutoff(cat):.2f}")
    console.print(table)

    if category == NO_CATEGORY:
        console.print("Prediction: [dim]none[/]")
    else:
        console.print(f"Prediction: [bold]{category}[/]")


@main.command()
@click.argument("train_files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def dump(ctx: click.Context, train_files: tuple[Path, ...]) -> None:
    """Print the trained feature/category count table."""
    settings = _settings(ctx)
    classifier = _train(settings, train_files)
    click.echo(classifier.dump())


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_metrics(metrics: ClassificationMetrics, title: str) -> None:
    """Render ClassificationMetrics as a panel and per-class table."""
    console.print()
    console.print(Panel(
        f"Classified [bold]{metrics.correct}/{metrics.total}[/] correctly\n"
        f"Accuracy: {metrics.accuracy:.2%} | "
        f"Macro F1: {metrics.macro_f1:.4f} | "
        f"Weighted F1: {metrics.weighted_f1:.4f}",
        title=title,
        border_style="blue",
    ))

    table = Table(show_lines=False)
    table.add_column("Class", style="cyan", width=12)
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F1", justify="right")
    table.add_column("Support", justify="right")
    for cls in sorted(metrics.per_class):
        m = metrics.per_class[cls]
        table.add_row(
            cls,
            f"{m['precision']:.4f}",
            f"{m['recall']:.4f}",
            f"{m['f1']:.4f}",
            str(metrics.support.get(cls, 0)),
        )
    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
