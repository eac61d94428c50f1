"""Test doubles and payload builders shared across the test modules."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Union

from course_wizard.config import Settings
from course_wizard.llm_client import EvaluationClient
from course_wizard.models import Checkpoint, RubricCriterion


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions`` and replays canned replies."""

    def __init__(self, replies: List[Union[str, Exception]]) -> None:
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeOpenAI:
    def __init__(self, *replies: Union[str, Exception]) -> None:
        self.completions = FakeCompletions(list(replies))
        self.chat = SimpleNamespace(completions=self.completions)


def make_client(*replies: Union[str, Dict[str, Any], Exception]) -> EvaluationClient:
    encoded = [json.dumps(reply) if isinstance(reply, dict) else reply for reply in replies]
    return EvaluationClient(settings=Settings(), client=FakeOpenAI(*encoded))


def calls_of(client: EvaluationClient) -> List[Dict[str, Any]]:
    return client._client.completions.calls  # type: ignore[union-attr]


def evaluation_reply(
    scores: Dict[str, float],
    *,
    overall: Optional[float] = None,
    feedback: str = "Solid foundation with room to sharpen objectives.",
) -> Dict[str, Any]:
    reply: Dict[str, Any] = {
        "overallFeedback": feedback,
        "criteriaResults": [
            {
                "criterionId": criterion_id,
                "passed": score >= 0.7,
                "score": score,
                "feedback": f"Feedback for {criterion_id}.",
            }
            for criterion_id, score in scores.items()
        ],
    }
    if overall is not None:
        reply["overallScore"] = overall
    return reply


def two_criterion_checkpoint(threshold: float = 0.75) -> Checkpoint:
    return Checkpoint(
        id="checkpoint-test",
        name="Foundation Check",
        description="Two weighted criteria.",
        after_section_id="course-overview",
        passing_threshold=threshold,
        rubric=[
            RubricCriterion(
                id="clarity",
                name="Clarity of Purpose",
                description="States what the course is for.",
                evaluation_prompt="Is the purpose obvious?",
                weight=1.5,
            ),
            RubricCriterion(
                id="scope",
                name="Realistic Scope",
                description="Fits the available time.",
                evaluation_prompt="Can it be done in the stated duration?",
                weight=1.0,
            ),
        ],
    )


COURSE_OVERVIEW_ANSWERS: Dict[str, Any] = {
    "course-title": "Introduction to Data Analysis",
    "course-code": "DATA 101",
    "course-description": (
        "A hands-on introduction to cleaning, exploring, and visualising real datasets with Python "
        "so students can answer practical questions with evidence."
    ),
    "target-audience": "First-year undergraduates with basic spreadsheet experience; no programming required.",
    "delivery-format": "online-async",
    "course-duration": "8-weeks",
    "credit-hours": "3",
    "learning-objectives": (
        "Import and clean tabular data with pandas.\n"
        "Summarise datasets using descriptive statistics.\n"
        "Build clear charts that communicate a finding.\n"
        "Evaluate whether a conclusion is supported by the data."
    ),
}

MODULE_STRUCTURE_ANSWERS: Dict[str, Any] = {
    "module-details": (
        "Module 1: Python and notebooks. Module 2: Loading and cleaning data. Module 3: Descriptive "
        "statistics. Module 4: Visualisation. Module 5: Drawing conclusions."
    ),
    "module-pacing": "One module every 1-2 weeks, about 6 hours of work per week.",
    "key-resources": "Open textbook chapters, short screencasts, and sample datasets for every module.",
}

COMMUNICATION_ANSWERS: Dict[str, Any] = {
    "welcome-message": "Welcome! This course shows you how to turn messy data into clear, honest answers.",
    "communication-policy": "Use the course inbox; replies within one business day.",
    "late-policy": "10% per day, up to three days.",
}
