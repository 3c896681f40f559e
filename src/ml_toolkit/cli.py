"""Command-line interface for ml-toolkit.

Provides ``train`` and ``classify`` commands with rich terminal output
using the ``click`` and ``rich`` libraries.

Usage::

    ml-toolkit train train.vectors.txt test.vectors.txt --class-delta 0.1 --cond-delta 0.1
    ml-toolkit train train.vectors.txt --binarized --model-file nb.model.txt
    ml-toolkit classify nb.model.txt test.vectors.txt --sys-output nb.out
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import NaiveBayesConfig
from .errors import MLToolkitError
from .evaluation import ConfusionMatrix, split_name
from .naive_bayes import NaiveBayesModel, read_model_mode

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _accuracy_style(accuracy: float) -> str:
    """Return a rich style string for an accuracy value."""
    if accuracy >= 0.9:
        return "bold green"
    if accuracy >= 0.6:
        return "bold yellow"
    return "bold red"


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="ml-toolkit")
def main() -> None:
    """Naive Bayes training and classification toolkit.

    Train smoothed Bernoulli or multinomial Naive Bayes models from
    training-vector files and evaluate them with confusion matrices.
    """
    pass


@main.command()
@click.argument("train_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("test_file", required=False,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--class-delta", type=float, default=None,
              help="Smoothing on class priors P(C). [default: 1.0]")
@click.option("--cond-delta", type=float, default=None,
              help="Smoothing on conditionals P(f|C). [default: 1.0]")
@click.option("--binarized/--multinomial", default=None,
              help="Bernoulli presence/absence model or multinomial count model.")
@click.option("--model-file", "-m", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Where to write the model.")
@click.option("--sys-output", "-s", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Where to write per-document system output.")
@click.option("--raw-scores", is_flag=True,
              help="Write log10 scores instead of converting them to probabilities.")
@click.option("--format", "fmt", type=click.Choice(["rich", "text", "json"]), default="rich",
              help="Report format.")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Load ML_TOOLKIT_* settings from a .env file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def train(
    train_file: Path,
    test_file: Path | None,
    class_delta: float | None,
    cond_delta: float | None,
    binarized: bool | None,
    model_file: Path | None,
    sys_output: Path | None,
    raw_scores: bool,
    fmt: str,
    env_file: Path | None,
    verbose: bool,
) -> None:
    """Train a model, then report on the training (and test) data.

    Example: ml-toolkit train train.vectors.txt test.vectors.txt --cond-delta 0.1
    """
    _configure_logging(verbose)
    try:
        config = NaiveBayesConfig.from_env(
            env_file,
            class_delta=class_delta,
            cond_delta=cond_delta,
            binarized=binarized,
            model_file=model_file,
            sys_output_file=sys_output,
        )
        model = NaiveBayesModel(config)

        with console.status("[bold blue]Training...", spinner="dots"):
            training = model.load_corpus(train_file)
            model.train(training)
            model.classify(training)
            matrices = [model.output_results(training, "train", not raw_scores)]

            if test_file is not None:
                testing = model.load_corpus(test_file)
                model.classify(testing)
                matrices.append(
                    model.output_results(testing, "test", not raw_scores, append=True)
                )
    except (MLToolkitError, ValueError) as e:
        _fail(e)

    _report(matrices, fmt)
    if fmt == "rich":
        console.print(f"[dim]Model written to {config.model_file}[/]")
        console.print(f"[dim]System output written to {config.sys_output_file}[/]")


@main.command()
@click.argument("model_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--binarized/--multinomial", default=None,
              help="Feature mode the model was trained with. "
                   "[default: read from the model file]")
@click.option("--sys-output", "-s", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Where to write per-document system output.")
@click.option("--raw-scores", is_flag=True,
              help="Write log10 scores instead of converting them to probabilities.")
@click.option("--format", "fmt", type=click.Choice(["rich", "text", "json"]), default="rich",
              help="Report format.")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Load ML_TOOLKIT_* settings from a .env file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def classify(
    model_file: Path,
    data_file: Path,
    binarized: bool | None,
    sys_output: Path | None,
    raw_scores: bool,
    fmt: str,
    env_file: Path | None,
    verbose: bool,
) -> None:
    """Classify a data file with a previously written model.

    Example: ml-toolkit classify nb.model.txt test.vectors.txt
    """
    _configure_logging(verbose)
    try:
        if binarized is None:
            # The model file knows which event model wrote it.
            mode = read_model_mode(model_file)
            if mode is not None:
                binarized = mode == "binarized"
        config = NaiveBayesConfig.from_env(
            env_file,
            binarized=binarized,
            model_file=model_file,
            sys_output_file=sys_output,
        )
        model = NaiveBayesModel(config).load_model()

        with console.status("[bold blue]Classifying...", spinner="dots"):
            testing = model.load_corpus(data_file)
            model.classify(testing)
            matrix = model.output_results(testing, "test", not raw_scores)
    except (MLToolkitError, ValueError) as e:
        _fail(e)

    if fmt == "json":
        click.echo(json.dumps({
            "confusion_matrix": matrix.to_dict(),
            "documents": [
                {
                    "id": doc.doc_id,
                    "true_label": doc.true_label,
                    "system_label": doc.system_label,
                    "scores": doc.label_scores,
                }
                for doc in testing
            ],
        }, indent=2))
        return

    _report([matrix], fmt)


# ------------------------------------------------------------------
# Rendering helpers
# ------------------------------------------------------------------

def _report(matrices: list[ConfusionMatrix], fmt: str) -> None:
    if fmt == "json":
        click.echo(json.dumps([m.to_dict() for m in matrices], indent=2))
    elif fmt == "text":
        for matrix in matrices:
            click.echo(str(matrix))
    else:
        for matrix in matrices:
            _render_matrix(matrix)


def _render_matrix(matrix: ConfusionMatrix) -> None:
    """Render a confusion matrix and per-label metrics as rich tables."""
    name = split_name(matrix.split)
    labels = matrix.labels

    console.print()
    table = Table(title=f"Confusion matrix ({name} data)", show_lines=False)
    table.add_column("truth \\ system", style="cyan")
    for label in labels:
        table.add_column(label, justify="right")

    for true_label in labels:
        cells = []
        for system_label in labels:
            count = matrix.get(true_label, system_label)
            style = "bold green" if true_label == system_label and count else ""
            cells.append(f"[{style}]{count}[/]" if style else str(count))
        table.add_row(true_label, *cells)
    console.print(table)

    metrics = Table(show_lines=False)
    metrics.add_column("Label", style="cyan")
    metrics.add_column("Precision", justify="right")
    metrics.add_column("Recall", justify="right")
    metrics.add_column("F1", justify="right")
    metrics.add_column("Support", justify="right")
    for label, m in matrix.per_class_metrics().items():
        metrics.add_row(
            label,
            f"{m['precision']:.4f}",
            f"{m['recall']:.4f}",
            f"{m['f1']:.4f}",
            str(int(m["support"])),
        )
    console.print(metrics)

    style = _accuracy_style(matrix.accuracy)
    console.print(f"{name.capitalize()} accuracy: [{style}]{matrix.accuracy:.2%}[/]")
    console.print()


if __name__ == "__main__":
    main()
