"""Checkpoint evaluation pipeline: prompt, call the evaluator, normalise the reply."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from .llm_client import EvaluationClient, MalformedResponse
from .models import Checkpoint, CriterionResult, EvaluationResult
from .prompts import (
    CRITERION_PASS_SCORE,
    REPLY_CRITERIA,
    REPLY_CRITERION_ID,
    REPLY_FEEDBACK,
    REPLY_OVERALL_FEEDBACK,
    REPLY_OVERALL_SCORE,
    REPLY_PASSED,
    REPLY_SCORE,
    REPLY_SUGGESTIONS,
    build_evaluation_system_prompt,
    build_evaluation_user_prompt,
)
from .telemetry import emit_event

logger = logging.getLogger(__name__)

MISSING_FEEDBACK = "No feedback provided"
PASSED_FEEDBACK = "Good work!"
FAILED_FEEDBACK = "Needs improvement."

ScoreBand = Literal["passed", "near", "low"]


def _number(value: Any, *, allow_text: bool = False) -> Optional[float]:
    """Finite float from a reply field; numeric strings only when ``allow_text``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif allow_text and isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _clamp(value: float) -> float:
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def meets_threshold(score: float, threshold: float) -> bool:
    """The one pass predicate used for stored results and for the proceed gate."""
    return score >= threshold


def _criterion_result(entry: Mapping[str, Any]) -> CriterionResult:
    raw_score = _number(entry.get(REPLY_SCORE), allow_text=True)
    score = _clamp(raw_score) if raw_score is not None else 0.0
    passed = entry.get(REPLY_PASSED)
    if not isinstance(passed, bool):
        passed = score >= CRITERION_PASS_SCORE
    feedback = entry.get(REPLY_FEEDBACK)
    if not isinstance(feedback, str) or not feedback.strip():
        feedback = MISSING_FEEDBACK
    suggestions = entry.get(REPLY_SUGGESTIONS)
    criterion_id = entry.get(REPLY_CRITERION_ID)
    return CriterionResult(
        criterion_id=str(criterion_id) if criterion_id is not None else "",
        passed=passed,
        score=score,
        feedback=feedback,
        suggestions=[str(item) for item in suggestions] if isinstance(suggestions, list) else None,
    )


def weighted_overall_score(criteria: Sequence[CriterionResult], checkpoint: Checkpoint) -> float:
    """Weighted mean of criterion scores using the checkpoint rubric weights.

    The denominator is the weight of the whole rubric, so a reply that scores
    only some criteria is pulled down. Criteria the rubric does not know weigh 1.
    """
    total_weight = checkpoint.total_weight
    if total_weight <= 0:
        return 0.0
    weighted = 0.0
    for result in criteria:
        criterion = checkpoint.criterion(result.criterion_id)
        weight = criterion.weight if criterion is not None else 1.0
        weighted += result.score * weight
    return _clamp(weighted / total_weight)


def normalize_evaluation(
    raw: Mapping[str, Any],
    checkpoint: Checkpoint,
    *,
    now: Optional[datetime] = None,
) -> EvaluationResult:
    entries = raw.get(REPLY_CRITERIA)
    if not isinstance(entries, list):
        raise MalformedResponse(f"Evaluation reply has no {REPLY_CRITERIA} list.")

    criteria: List[CriterionResult] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.warning("Skipping non-object criterion entry for %s: %r", checkpoint.id, entry)
            continue
        criteria.append(_criterion_result(entry))

    overall = _number(raw.get(REPLY_OVERALL_SCORE))
    if overall is None or not 0.0 <= overall <= 1.0:
        overall = weighted_overall_score(criteria, checkpoint)

    passed = meets_threshold(overall, checkpoint.passing_threshold)
    feedback = raw.get(REPLY_OVERALL_FEEDBACK)
    if not isinstance(feedback, str) or not feedback.strip():
        feedback = PASSED_FEEDBACK if passed else FAILED_FEEDBACK

    return EvaluationResult(
        checkpoint_id=checkpoint.id,
        passed=passed,
        overall_score=overall,
        criteria_results=criteria,
        overall_feedback=feedback,
        timestamp=now or datetime.now(timezone.utc),
    )


async def evaluate_checkpoint(
    checkpoint: Checkpoint,
    answers: Mapping[str, Any],
    client: EvaluationClient,
) -> EvaluationResult:
    """Score one section's answers against its checkpoint rubric.

    Any service or parsing failure propagates to the caller; no partial result
    is produced and nothing is retried.
    """
    started = perf_counter()
    system_prompt = build_evaluation_system_prompt()
    user_prompt = build_evaluation_user_prompt(checkpoint, answers)
    try:
        reply = await client.evaluate(system_prompt, user_prompt)
        result = normalize_evaluation(reply, checkpoint)
    except Exception as exc:
        emit_event(
            "checkpoint_evaluation_failed",
            checkpoint_id=checkpoint.id,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise

    latency_ms = int((perf_counter() - started) * 1000)
    emit_event(
        "checkpoint_evaluated",
        checkpoint_id=checkpoint.id,
        passed=result.passed,
        overall_score=round(result.overall_score, 4),
        criteria=len(result.criteria_results),
        latency_ms=latency_ms,
    )
    return result


def can_continue(result: Optional[EvaluationResult], checkpoint: Checkpoint) -> bool:
    """Whether the wizard may move past ``checkpoint`` given its stored result."""
    if result is None or result.checkpoint_id != checkpoint.id:
        return False
    return result.passed or meets_threshold(result.overall_score, checkpoint.passing_threshold)


def score_band(result: EvaluationResult, checkpoint: Checkpoint) -> ScoreBand:
    if result.passed:
        return "passed"
    if result.overall_score >= checkpoint.passing_threshold * 0.5:
        return "near"
    return "low"


def criteria_summary(result: EvaluationResult) -> Dict[str, int]:
    passed = sum(1 for item in result.criteria_results if item.passed)
    return {"passed": passed, "total": len(result.criteria_results)}


__all__ = [
    "FAILED_FEEDBACK",
    "MISSING_FEEDBACK",
    "PASSED_FEEDBACK",
    "can_continue",
    "criteria_summary",
    "evaluate_checkpoint",
    "meets_threshold",
    "normalize_evaluation",
    "score_band",
    "weighted_overall_score",
]
