"""Session-scoped wizard endpoints; each request loads, mutates, and saves one state."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from . import wizard
from .course_generator import generate_course
from .evaluate_routes import error_response, get_evaluation_client
from .evaluation import evaluate_checkpoint
from .llm_client import EvaluationClient
from .models import answers_to_wire
from .questionnaire import find_question
from .state_store import state_store
from .telemetry import emit_event

router = APIRouter(prefix="/api/wizard", tags=["wizard"])
logger = logging.getLogger(__name__)


class AnswerUpdate(BaseModel):
    value: Union[str, List[str], int, float]


def state_payload(state: wizard.WizardState) -> Dict[str, Any]:
    return {
        "currentSectionIndex": state.current_section_index,
        "phase": state.phase,
        "answers": answers_to_wire(state.answers),
        "checkpointResults": {
            checkpoint_id: result.to_wire() for checkpoint_id, result in state.checkpoint_results.items()
        },
        "completedSectionIds": list(state.completed_section_ids),
        "validationErrors": dict(state.validation_errors),
        "generatedCourse": state.generated_course.to_wire() if state.generated_course else None,
    }


def _respond(
    state: wizard.WizardState,
    outcome: Optional[wizard.AdvanceOutcome] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "state": state_payload(state),
        "progress": [entry.model_dump(mode="json") for entry in wizard.progress(state)],
    }
    if outcome is not None:
        payload["outcome"] = outcome.model_dump(mode="json", exclude_none=True)
    return payload


@router.get("/{session_id}")
def get_wizard_state(session_id: str) -> Dict[str, Any]:
    return _respond(state_store.load(session_id))


@router.put("/{session_id}/answers/{question_id}")
def put_answer(session_id: str, question_id: str, update: AnswerUpdate) -> Any:
    if find_question(question_id) is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"Question not found: {question_id}")
    state, _ = state_store.update(
        session_id,
        lambda current: wizard.set_answer(current, question_id, update.value),
    )
    return _respond(state)


@router.post("/{session_id}/advance")
def advance(session_id: str) -> Any:
    try:
        state, outcome = state_store.update(session_id, wizard.request_advance)
    except wizard.WizardError as exc:
        return error_response(status.HTTP_409_CONFLICT, str(exc))
    return _respond(state, outcome)


@router.post("/{session_id}/evaluate")
async def evaluate_current_section(
    session_id: str,
    client: EvaluationClient = Depends(get_evaluation_client),
) -> Any:
    state = state_store.load(session_id)
    section = wizard.current_section(state)
    checkpoint = wizard.checkpoint_for(section)
    if checkpoint is None:
        return error_response(status.HTTP_409_CONFLICT, f"Section {section.id} has no checkpoint to evaluate.")

    answers = wizard.answers_for_section(state, section.id)
    try:
        result = await evaluate_checkpoint(checkpoint, answers, client)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Wizard evaluation failed for session %s checkpoint %s", session_id, checkpoint.id)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Evaluation failed")

    state, _ = state_store.update(session_id, lambda latest: wizard.record_evaluation(latest, result))
    return _respond(state)


@router.post("/{session_id}/proceed")
def proceed(session_id: str) -> Any:
    try:
        state, outcome = state_store.update(session_id, wizard.proceed_after_checkpoint)
    except wizard.WizardError as exc:
        return error_response(status.HTTP_409_CONFLICT, str(exc))
    return _respond(state, outcome)


@router.post("/{session_id}/revise")
def revise(session_id: str) -> Dict[str, Any]:
    state, _ = state_store.update(session_id, wizard.revise)
    return _respond(state)


@router.post("/{session_id}/back")
def back(session_id: str) -> Dict[str, Any]:
    state, _ = state_store.update(session_id, wizard.go_back)
    return _respond(state)


@router.post("/{session_id}/navigate/{index}")
def navigate(session_id: str, index: int) -> Any:
    try:
        state, _ = state_store.update(session_id, lambda current: wizard.go_to_section(current, index))
    except wizard.WizardError as exc:
        return error_response(status.HTTP_409_CONFLICT, str(exc))
    return _respond(state)


@router.post("/{session_id}/generate")
async def generate(
    session_id: str,
    chunked: bool = False,
    client: EvaluationClient = Depends(get_evaluation_client),
) -> Any:
    state = state_store.load(session_id)
    if not state.answers:
        return error_response(status.HTTP_409_CONFLICT, "No answers have been collected yet.")
    try:
        course = await generate_course(state.answers, client, chunked=chunked)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Course generation failed for session %s", session_id)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Course generation failed")

    state, _ = state_store.update(session_id, lambda latest: wizard.set_generated_course(latest, course))
    return _respond(state)


@router.delete("/{session_id}")
def reset(session_id: str) -> Dict[str, Any]:
    state = wizard.reset(state_store.load(session_id))
    state_store.clear(session_id)
    emit_event("wizard_reset", session_id=session_id)
    return _respond(state)


__all__ = ["router", "state_payload"]
