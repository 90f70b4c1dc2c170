"""Loading and saving calibration data files and comparison datasets."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from judge_consensus.data.schemas import ComparisonSample, ScorePair, ScoresFile, ScoresMetadata
from judge_consensus.errors import DataFileError

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> object:
    if not path.exists():
        raise DataFileError(f"Data file not found: {path}")
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataFileError(f"Invalid JSON in {path}: {e}") from e


def load_scores_file(path: Path | str) -> ScoresFile:
    """Load a calibration data file.

    Args:
        path: Path to a JSON file of the form
            ``{"version": ..., "scorePairs": [...], "metadata": {...}}``

    Returns:
        Validated ScoresFile

    Raises:
        DataFileError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    data = _read_json(path)
    try:
        scores = ScoresFile.model_validate(data)
    except ValidationError as e:
        raise DataFileError(f"Invalid calibration data in {path}: {e}") from e

    logger.info("Loaded %d score pairs from %s", len(scores.score_pairs), path)
    return scores


def save_scores_file(scores: ScoresFile, path: Path | str) -> None:
    """Save a calibration data file using the camelCase wire format.

    Args:
        scores: Scores to save
        path: Output JSON path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(scores.model_dump(mode="json", by_alias=True, exclude_none=True), f, indent=2)


def load_comparison_samples(path: Path | str) -> list[ComparisonSample]:
    """Load a pairwise benchmark dataset.

    Accepts either a JSON list of samples or an object with a ``samples`` list.

    Args:
        path: Path to the dataset JSON file

    Returns:
        List of ComparisonSample
    """
    path = Path(path)
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("samples", [])
    if not isinstance(data, list):
        raise DataFileError(f"Expected a list of samples in {path}")

    try:
        samples = [ComparisonSample.model_validate(item) for item in data]
    except ValidationError as e:
        raise DataFileError(f"Invalid comparison sample in {path}: {e}") from e

    logger.info("Loaded %d comparison samples from %s", len(samples), path)
    return samples


def example_score_pairs() -> list[ScorePair]:
    """Ten hand-labeled pairs used for self-tests and demos."""
    rows = [
        ("hp-01", 5, 5, "ccr"),
        ("hp-02", 4, 4, "ccr"),
        ("hp-03", 5, 4, "citation_fidelity"),
        ("ec-01", 2, 2, "ccr"),
        ("ec-02", 3, 3, "specificity"),
        ("ec-03", 2, 3, "citation_fidelity"),
        ("fm-01", 1, 1, "ccr"),
        ("fm-02", 1, 2, "specificity"),
        ("fm-03", 2, 2, "citation_fidelity"),
        ("fm-04", 1, 1, "specificity"),
    ]
    return [
        ScorePair(sample_id=sid, human_score=human, llm_score=llm, category=category)
        for sid, human, llm, category in rows
    ]


def example_scores_file() -> ScoresFile:
    """The example pairs wrapped as a calibration data file."""
    return ScoresFile(
        version="1.0",
        score_pairs=example_score_pairs(),
        metadata=ScoresMetadata(evaluator="example", date_collected="2025-01-01"),
    )
