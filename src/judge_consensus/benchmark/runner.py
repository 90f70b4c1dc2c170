"""Run pairwise comparisons over a benchmark dataset."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from judge_consensus.comparison.pairwise import PairwiseComparator
from judge_consensus.data.schemas import ComparisonOutcome, ComparisonSample
from judge_consensus.storage import ResultStore

logger = logging.getLogger(__name__)

STORE_PREFIX = "comparison/"


def run_benchmark(
    samples: Sequence[ComparisonSample],
    comparator: PairwiseComparator,
    store: ResultStore | None = None,
    limit: int | None = None,
    progress_callback: Callable[[int, int, ComparisonOutcome], None] | None = None,
) -> list[ComparisonOutcome]:
    """
    Compare pre-computed system and baseline responses for each sample.

    Samples missing either response are skipped. When a store is given each
    outcome is written under ``comparison/<sample id>``.

    Args:
        samples: Benchmark samples
        comparator: Pairwise comparator
        store: Optional result store
        limit: Maximum number of samples to compare
        progress_callback: Called with (done, total, outcome) after each comparison

    Returns:
        Outcomes in sample order
    """
    runnable = []
    for sample in samples:
        if sample.responses.system and sample.responses.baseline:
            runnable.append(sample)
        else:
            logger.warning(f"Skipping {sample.id}: missing system or baseline response")

    if limit is not None:
        runnable = runnable[:limit]

    logger.info(f"Comparing {len(runnable)} samples")
    outcomes: list[ComparisonOutcome] = []
    for i, sample in enumerate(runnable, 1):
        result = comparator.compare_sample(sample)
        outcome = ComparisonOutcome(sample=sample, result=result)
        outcomes.append(outcome)

        if store is not None:
            store.put(f"{STORE_PREFIX}{sample.id}", outcome.model_dump(mode="json"))
        if progress_callback:
            progress_callback(i, len(runnable), outcome)

        logger.debug(
            f"[{i}/{len(runnable)}] {sample.id} ({sample.category.value}): {result.winner.value}"
        )

    return outcomes


def load_stored_outcomes(store: ResultStore) -> list[ComparisonOutcome]:
    """Reload every comparison outcome previously written to a store."""
    outcomes = []
    for key in store.list(STORE_PREFIX):
        record = store.get(key)
        if record is not None:
            outcomes.append(ComparisonOutcome.model_validate(record))
    return outcomes
