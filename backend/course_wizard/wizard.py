"""Explicit wizard state and the action functions that move it between sections.

The state object is owned by whoever handles the session (see ``wizard_routes``)
and is only changed through the functions in this module. Every action mutates
the state in place and returns it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .checkpoints import get_checkpoint_for_section
from .evaluation import ScoreBand, can_continue, criteria_summary, score_band
from .models import (
    Answer,
    Checkpoint,
    EvaluationResult,
    GeneratedCourse,
    MultipleAnswer,
    Question,
    Section,
    measured_text,
    to_answer,
)
from .questionnaire import SECTIONS, get_section
from .telemetry import emit_event

logger = logging.getLogger(__name__)

WizardPhase = Literal["answering", "checkpoint_pending", "evaluated", "complete"]
AdvancePhase = Literal["answering", "checkpoint_pending", "evaluated_failed", "advanced", "complete"]
CheckpointStatus = Literal["pending", "passed", "failed"]

REQUIRED_MESSAGE = "This field is required"
SELECTION_MESSAGE = "Please select at least one option"


class WizardError(ValueError):
    """Raised for navigation the wizard does not allow."""


class CheckpointGateError(WizardError):
    """Raised when a section's checkpoint has not been cleared."""


class WizardState(BaseModel):
    current_section_index: int = Field(default=0, ge=0)
    answers: Dict[str, Answer] = Field(default_factory=dict)
    checkpoint_results: Dict[str, EvaluationResult] = Field(default_factory=dict)
    completed_section_ids: List[str] = Field(default_factory=list)
    generated_course: Optional[GeneratedCourse] = None
    phase: WizardPhase = "answering"
    validation_errors: Dict[str, str] = Field(default_factory=dict)


class AdvanceOutcome(BaseModel):
    phase: AdvancePhase
    section_id: str
    next_section_index: Optional[int] = None
    checkpoint_id: Optional[str] = None
    errors: Dict[str, str] = Field(default_factory=dict)


class SectionProgress(BaseModel):
    index: int
    id: str
    title: str
    completed: bool
    current: bool
    clickable: bool
    checkpoint_id: Optional[str] = None
    checkpoint_status: Optional[CheckpointStatus] = None
    overall_score: Optional[float] = None
    score_band: Optional[ScoreBand] = None
    criteria_passed: Optional[int] = None
    criteria_total: Optional[int] = None


def new_state() -> WizardState:
    return WizardState()


def reset(state: WizardState) -> WizardState:
    fresh = WizardState()
    for name in WizardState.model_fields:
        setattr(state, name, getattr(fresh, name))
    return state


def current_section(state: WizardState) -> Section:
    if not 0 <= state.current_section_index < len(SECTIONS):
        raise WizardError(f"Section index {state.current_section_index} is out of range.")
    return SECTIONS[state.current_section_index]


def checkpoint_for(section: Section) -> Optional[Checkpoint]:
    return get_checkpoint_for_section(section.id)


def current_checkpoint(state: WizardState) -> Optional[Checkpoint]:
    return checkpoint_for(current_section(state))


def set_answer(state: WizardState, question_id: str, value: Any) -> WizardState:
    state.answers[question_id] = to_answer(value)
    state.validation_errors.pop(question_id, None)
    return state


def answers_for_section(state: WizardState, section_id: str) -> Dict[str, Answer]:
    section = get_section(section_id)
    if section is None:
        return {}
    return {
        question.id: state.answers[question.id]
        for question in section.questions
        if question.id in state.answers
    }


def validate_question(question: Question, answer: Optional[Answer]) -> Optional[str]:
    text = measured_text(answer) if answer is not None else ""
    if question.required and not text.strip():
        return REQUIRED_MESSAGE
    rules = question.validation
    if rules is not None:
        if rules.min_length and len(text) < rules.min_length:
            return f"Minimum {rules.min_length} characters required"
        if rules.max_length and len(text) > rules.max_length:
            return f"Maximum {rules.max_length} characters allowed"
    if question.type == "multiselect" and question.required:
        if not isinstance(answer, MultipleAnswer) or not answer.values:
            return SELECTION_MESSAGE
    return None


def validate_section(state: WizardState, section: Optional[Section] = None) -> Dict[str, str]:
    target = section or current_section(state)
    errors: Dict[str, str] = {}
    for question in target.questions:
        message = validate_question(question, state.answers.get(question.id))
        if message:
            errors[question.id] = message
    state.validation_errors = dict(errors)
    return errors


def _mark_complete(state: WizardState, section_id: str) -> None:
    if section_id not in state.completed_section_ids:
        state.completed_section_ids.append(section_id)


def _advance(state: WizardState) -> AdvanceOutcome:
    section = current_section(state)
    _mark_complete(state, section.id)
    state.validation_errors = {}
    if state.current_section_index < len(SECTIONS) - 1:
        state.current_section_index += 1
        state.phase = "answering"
        emit_event("section_advanced", section_id=section.id, next_section_index=state.current_section_index)
        return AdvanceOutcome(
            phase="advanced",
            section_id=section.id,
            next_section_index=state.current_section_index,
            checkpoint_id=section.checkpoint_id,
        )
    state.phase = "complete"
    emit_event("section_advanced", section_id=section.id, next_section_index=None)
    return AdvanceOutcome(phase="complete", section_id=section.id, checkpoint_id=section.checkpoint_id)


def request_advance(state: WizardState) -> AdvanceOutcome:
    """Validate the current section and move on unless a checkpoint blocks it."""
    section = current_section(state)
    errors = validate_section(state, section)
    if errors:
        state.phase = "answering"
        return AdvanceOutcome(phase="answering", section_id=section.id, errors=errors)

    checkpoint = checkpoint_for(section)
    if checkpoint is not None:
        stored = state.checkpoint_results.get(checkpoint.id)
        if not can_continue(stored, checkpoint):
            emit_event(
                "section_blocked",
                section_id=section.id,
                checkpoint_id=checkpoint.id,
                evaluated=stored is not None,
            )
            if stored is None:
                state.phase = "checkpoint_pending"
                return AdvanceOutcome(phase="checkpoint_pending", section_id=section.id, checkpoint_id=checkpoint.id)
            state.phase = "evaluated"
            return AdvanceOutcome(phase="evaluated_failed", section_id=section.id, checkpoint_id=checkpoint.id)

    return _advance(state)


def record_evaluation(state: WizardState, result: EvaluationResult) -> WizardState:
    """Store ``result`` as the checkpoint's only result, discarding any earlier one."""
    state.checkpoint_results[result.checkpoint_id] = result
    checkpoint = current_checkpoint(state)
    if checkpoint is not None and checkpoint.id == result.checkpoint_id:
        state.phase = "evaluated"
    return state


def proceed_after_checkpoint(state: WizardState) -> AdvanceOutcome:
    section = current_section(state)
    checkpoint = checkpoint_for(section)
    if checkpoint is not None and not can_continue(state.checkpoint_results.get(checkpoint.id), checkpoint):
        raise CheckpointGateError(f"{checkpoint.name} has not been passed for section {section.id}.")
    return _advance(state)


def revise(state: WizardState) -> WizardState:
    state.phase = "answering"
    return state


def go_back(state: WizardState) -> WizardState:
    if state.phase in ("checkpoint_pending", "evaluated"):
        state.phase = "answering"
        return state
    if state.current_section_index > 0:
        state.current_section_index -= 1
    state.phase = "answering"
    state.validation_errors = {}
    return state


def go_to_section(state: WizardState, index: int) -> WizardState:
    if not 0 <= index < len(SECTIONS):
        raise WizardError(f"Section index {index} is out of range.")
    if index > state.current_section_index and SECTIONS[index].id not in state.completed_section_ids:
        raise WizardError(f"Section {SECTIONS[index].id} has not been reached yet.")
    state.current_section_index = index
    state.phase = "answering"
    state.validation_errors = {}
    return state


def set_generated_course(state: WizardState, course: GeneratedCourse) -> WizardState:
    state.generated_course = course
    return state


def progress(state: WizardState) -> List[SectionProgress]:
    entries: List[SectionProgress] = []
    for index, section in enumerate(SECTIONS):
        completed = section.id in state.completed_section_ids
        entry = SectionProgress(
            index=index,
            id=section.id,
            title=section.title,
            completed=completed,
            current=index == state.current_section_index,
            clickable=completed or index <= state.current_section_index,
        )
        checkpoint = checkpoint_for(section)
        if checkpoint is not None:
            entry.checkpoint_id = checkpoint.id
            result = state.checkpoint_results.get(checkpoint.id)
            if result is None:
                entry.checkpoint_status = "pending"
            else:
                summary = criteria_summary(result)
                entry.checkpoint_status = "passed" if result.passed else "failed"
                entry.overall_score = result.overall_score
                entry.score_band = score_band(result, checkpoint)
                entry.criteria_passed = summary["passed"]
                entry.criteria_total = summary["total"]
        entries.append(entry)
    return entries


__all__ = [
    "AdvanceOutcome",
    "CheckpointGateError",
    "SectionProgress",
    "WizardError",
    "WizardState",
    "answers_for_section",
    "checkpoint_for",
    "current_checkpoint",
    "current_section",
    "go_back",
    "go_to_section",
    "new_state",
    "proceed_after_checkpoint",
    "progress",
    "record_evaluation",
    "request_advance",
    "reset",
    "revise",
    "set_answer",
    "set_generated_course",
    "validate_question",
    "validate_section",
]
