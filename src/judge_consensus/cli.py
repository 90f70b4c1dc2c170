"""Command-line interface for judge-consensus."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from judge_consensus.benchmark import (
    format_decision_matrix,
    generate_decision_matrix,
    run_benchmark,
)
from judge_consensus.calibration import (
    OVERALL,
    calibrate,
    calibrate_by_category,
    detect_drift,
    format_calibration_report,
    format_drift_report,
)
from judge_consensus.comparison.rubrics import RUBRICS
from judge_consensus.config import EngineConfig
from judge_consensus.data import (
    CalibrationResult,
    ScorePair,
    example_score_pairs,
    load_comparison_samples,
    load_scores_file,
)
from judge_consensus.errors import DataFileError, InsufficientDataError
from judge_consensus.observability import CountingObserver, setup_logging
from judge_consensus.storage import FileResultStore

app = typer.Typer(
    name="judge-consensus",
    help="Judge calibration, debiased pairwise comparison and consensus quality gating",
)
console = Console()


def _load_config(config_path: Optional[Path]) -> EngineConfig:
    if config_path is None:
        return EngineConfig()
    return EngineConfig.from_yaml(config_path)


def _load_pairs(data_file: Path) -> list[ScorePair]:
    try:
        scores = load_scores_file(data_file)
    except DataFileError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)
    if scores.metadata:
        console.print(
            f"Loaded {len(scores.score_pairs)} score pairs "
            f"(evaluator: {scores.metadata.evaluator}, collected {scores.metadata.date_collected})"
        )
    else:
        console.print(f"Loaded {len(scores.score_pairs)} score pairs")
    return scores.score_pairs


def _category_table(results: dict[str, CalibrationResult]) -> Table:
    table = Table(title="Calibration by Category")
    table.add_column("Category", style="cyan")
    table.add_column("Samples", justify="right")
    table.add_column("Pearson r", justify="right")
    table.add_column("Bias")
    table.add_column("Status")

    for category, result in results.items():
        status = "[green]PASS[/green]" if result.is_calibrated else "[red]FAIL[/red]"
        table.add_row(
            category,
            str(result.sample_count),
            f"{result.pearson_r:.3f}",
            f"{result.bias_direction.value} ({result.bias_magnitude:.2f})",
            status,
        )
    return table


def _report_calibration(pairs: list[ScorePair], config: EngineConfig) -> CalibrationResult:
    result = calibrate(
        pairs,
        threshold=config.calibration_threshold,
        min_samples=config.min_calibration_samples,
        bias_tolerance=config.bias_tolerance,
    )
    console.print(format_calibration_report(result), markup=False)

    by_category = calibrate_by_category(
        pairs,
        threshold=config.calibration_threshold,
        min_samples=config.min_calibration_samples,
        bias_tolerance=config.bias_tolerance,
    )
    if len(by_category) > 1 or OVERALL not in by_category:
        console.print(_category_table(by_category))
    return result


@app.command("calibrate")
def calibrate_scores(
    data_file: Path = typer.Argument(..., help="Path to a calibration scores JSON file"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="Minimum acceptable Pearson r"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML engine config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Measure how well judge scores track human scores."""
    setup_logging(verbose)
    config = _load_config(config_path)
    if threshold is not None:
        config.calibration_threshold = threshold

    pairs = _load_pairs(data_file)
    result = _report_calibration(pairs, config)
    if not result.is_calibrated:
        raise typer.Exit(1)


@app.command()
def drift(
    data_file: Path = typer.Argument(..., help="Path to a calibration scores JSON file"),
    baseline_r: float = typer.Option(..., "--baseline-r", help="Correlation from a previous run"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="Maximum acceptable |current r - baseline r|"
    ),
    fail_on_drift: bool = typer.Option(
        False, "--fail-on-drift", help="Exit with code 1 when drift is detected"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML engine config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Check whether a judge's correlation has drifted from a baseline."""
    setup_logging(verbose)
    config = _load_config(config_path)
    pairs = _load_pairs(data_file)

    try:
        report = detect_drift(
            pairs,
            baseline_r,
            threshold=threshold if threshold is not None else config.drift_threshold,
        )
    except InsufficientDataError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)

    console.print(format_drift_report(report), markup=False)
    if report.has_drifted and fail_on_drift:
        raise typer.Exit(1)


@app.command()
def rubrics() -> None:
    """List the task-category rubrics."""
    table = Table(title="Category Rubrics")
    table.add_column("Category", style="cyan")
    table.add_column("Primary criterion")
    table.add_column("Secondary criterion")
    table.add_column("Scoring method")

    for category, rubric in RUBRICS.items():
        table.add_row(
            category.value,
            rubric.primary_criterion,
            rubric.secondary_criterion,
            rubric.scoring_method,
        )
    console.print(table)


@app.command()
def example(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run calibration on the built-in example score pairs."""
    setup_logging(verbose)
    pairs = example_score_pairs()
    console.print(f"Running calibration on {len(pairs)} example score pairs")
    _report_calibration(pairs, EngineConfig())


@app.command()
def benchmark(
    dataset: Path = typer.Argument(..., help="JSON dataset with pre-computed responses"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum samples to compare"),
    store_dir: Optional[Path] = typer.Option(
        None, "--store", help="Directory to persist comparison results"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Bootstrap random seed"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with judge API keys"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML engine config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run debiased pairwise comparisons and print the decision matrix."""
    setup_logging(verbose)
    base = _load_config(config_path)
    config = EngineConfig.from_env(
        env_file=env_file,
        **base.model_dump(exclude={"comparison_judge", "challenge_judge", "voting_judges"}),
    )
    if config.challenge_judge is None:
        console.print("[red]No judge API keys found (set GEMINI_API_KEY, OPENAI_API_KEY or ANTHROPIC_API_KEY)[/red]")
        raise typer.Exit(1)

    try:
        samples = load_comparison_samples(dataset)
    except DataFileError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)
    console.print(f"Loaded {len(samples)} samples")

    observer = CountingObserver()
    comparator = config.build_comparator(config.build_invoker(), observer=observer)
    store = FileResultStore(store_dir) if store_dir else None

    outcomes = run_benchmark(samples, comparator, store=store, limit=limit)
    if not outcomes:
        console.print("[red]No samples with both responses to compare[/red]")
        raise typer.Exit(1)

    matrix = generate_decision_matrix(outcomes, random_state=seed)
    console.print(format_decision_matrix(matrix), markup=False)

    summary = observer.summary()
    if summary["total_fallbacks"]:
        console.print(f"[yellow]Fallbacks taken: {summary['fallbacks']}[/yellow]")
    if store is not None:
        console.print(f"Results stored in {store.root}")
