"""Assemble the collected wizard answers into a generated Canvas course."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from .llm_client import EvaluationClient, MalformedResponse
from .models import (
    CourseModule,
    CourseModuleItem,
    CourseRubric,
    CourseRubricCriterion,
    CourseRubricRating,
    GeneratedCourse,
    QuizAnswer,
    QuizQuestion,
    display_value,
    to_answer,
)
from .prompts import course_generation_messages, course_structure_messages, module_content_messages
from .telemetry import emit_event

logger = logging.getLogger(__name__)

_ITEM_TYPES = {"page", "assignment", "discussion", "quiz", "file", "header"}
_QUESTION_TYPES = {"multiple_choice", "short_answer", "essay"}


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _points(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value >= 0 else None


def _position(value: Any, fallback: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    return fallback


def _rubric(payload: Any) -> Optional[CourseRubric]:
    if not isinstance(payload, Mapping):
        return None
    criteria: List[CourseRubricCriterion] = []
    for entry in payload.get("criteria") or []:
        if not isinstance(entry, Mapping) or not _text(entry.get("description")):
            continue
        ratings = [
            CourseRubricRating(description=_text(rating.get("description")), points=_points(rating.get("points")) or 0.0)
            for rating in entry.get("ratings") or []
            if isinstance(rating, Mapping) and _text(rating.get("description"))
        ]
        criteria.append(
            CourseRubricCriterion(
                description=_text(entry.get("description")),
                points=_points(entry.get("points")) or 0.0,
                ratings=ratings,
            )
        )
    return CourseRubric(title=_text(payload.get("title"), "Rubric"), criteria=criteria)


def _questions(payload: Any) -> Optional[List[QuizQuestion]]:
    if not isinstance(payload, list):
        return None
    questions: List[QuizQuestion] = []
    for entry in payload:
        if not isinstance(entry, Mapping) or not _text(entry.get("text")):
            continue
        kind = entry.get("type")
        answers = entry.get("answers")
        questions.append(
            QuizQuestion(
                type=kind if kind in _QUESTION_TYPES else "short_answer",
                text=_text(entry.get("text")),
                points=_points(entry.get("points")) or 1.0,
                answers=[
                    QuizAnswer(text=_text(answer.get("text")), correct=answer.get("correct") is True)
                    for answer in answers
                    if isinstance(answer, Mapping) and _text(answer.get("text"))
                ]
                if isinstance(answers, list)
                else None,
            )
        )
    return questions


def _item(payload: Mapping[str, Any], module_id: str, index: int) -> CourseModuleItem:
    kind = payload.get("type")
    return CourseModuleItem(
        id=_text(payload.get("id"), f"{module_id}-item-{index}"),
        type=kind if kind in _ITEM_TYPES else "page",
        title=_text(payload.get("title"), f"Item {index}"),
        position=_position(payload.get("position"), index),
        content=_text(payload.get("content")) or None,
        points=_points(payload.get("points")),
        due_date=_text(payload.get("dueDate")) or None,
        rubric=_rubric(payload.get("rubric")),
        questions=_questions(payload.get("questions")),
        prompt=_text(payload.get("prompt")) or None,
    )


def _module(payload: Mapping[str, Any], index: int) -> CourseModule:
    module_id = _text(payload.get("id"), f"module-{index}")
    items = [
        _item(entry, module_id, item_index)
        for item_index, entry in enumerate(
            (entry for entry in payload.get("items") or [] if isinstance(entry, Mapping)),
            start=1,
        )
    ]
    return CourseModule(
        id=module_id,
        name=_text(payload.get("name"), f"Module {index}"),
        position=_position(payload.get("position"), index),
        items=items,
    )


def normalize_course(raw: Mapping[str, Any], answers: Mapping[str, Any]) -> GeneratedCourse:
    modules_payload = raw.get("modules")
    if not isinstance(modules_payload, list):
        raise MalformedResponse("Course generation reply has no modules list.")
    fallback_title = ""
    if "course-title" in answers:
        fallback_title = display_value(to_answer(answers["course-title"]))
    modules = [
        _module(entry, index)
        for index, entry in enumerate(
            (entry for entry in modules_payload if isinstance(entry, Mapping)),
            start=1,
        )
    ]
    return GeneratedCourse(
        title=_text(raw.get("title"), fallback_title or "Untitled course"),
        description=_text(raw.get("description")),
        welcome_message=_text(raw.get("welcomeMessage")),
        modules=modules,
    )


def merge_module_content(module: CourseModule, raw: Mapping[str, Any]) -> CourseModule:
    """Fill the skeleton items of ``module`` with the detailed items of a content reply.

    Items are matched by id. The skeleton keeps its ids, titles, types and
    positions; items the reply leaves out stay as bare skeleton entries and
    reply items the skeleton does not list are dropped.
    """
    entries = raw.get("items")
    if not isinstance(entries, list):
        raise MalformedResponse(f"Module content reply for {module.id} has no items list.")
    reply_module = raw.get("moduleId")
    if reply_module is not None and reply_module != module.id:
        logger.warning("Content reply for %s is labelled %r", module.id, reply_module)

    detailed: Dict[str, CourseModuleItem] = {}
    for index, entry in enumerate((entry for entry in entries if isinstance(entry, Mapping)), start=1):
        item = _item(entry, module.id, index)
        detailed.setdefault(item.id, item)

    items: List[CourseModuleItem] = []
    for skeleton in module.items:
        match = detailed.pop(skeleton.id, None)
        if match is None:
            logger.warning("No content generated for item %s in %s", skeleton.id, module.id)
            items.append(skeleton)
            continue
        items.append(
            match.model_copy(
                update={
                    "id": skeleton.id,
                    "title": skeleton.title,
                    "type": skeleton.type,
                    "position": skeleton.position,
                }
            )
        )
    if detailed:
        logger.warning("Ignoring unlisted items for %s: %s", module.id, ", ".join(sorted(detailed)))
    return module.model_copy(update={"items": items})


async def _generate_single_pass(answers: Mapping[str, Any], client: EvaluationClient) -> GeneratedCourse:
    settings = client.settings
    reply: Dict[str, Any] = await client.generate_json(
        course_generation_messages(answers),
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
        required_keys=("modules",),
    )
    return normalize_course(reply, answers)


async def _generate_in_chunks(answers: Mapping[str, Any], client: EvaluationClient) -> GeneratedCourse:
    settings = client.settings
    reply: Dict[str, Any] = await client.generate_json(
        course_structure_messages(answers),
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
        required_keys=("modules",),
    )
    skeleton = normalize_course(reply, answers)
    modules: List[CourseModule] = []
    for module in skeleton.modules:
        content: Dict[str, Any] = await client.generate_json(
            module_content_messages(answers, module, skeleton.title),
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
            required_keys=("items",),
        )
        modules.append(merge_module_content(module, content))
    return skeleton.model_copy(update={"modules": modules})


async def generate_course(
    answers: Mapping[str, Any],
    client: EvaluationClient,
    *,
    chunked: bool = False,
) -> GeneratedCourse:
    """Generate a course in one reply, or as a structure pass followed by one reply per module."""
    if chunked:
        course = await _generate_in_chunks(answers, client)
    else:
        course = await _generate_single_pass(answers, client)
    emit_event(
        "course_generated",
        title=course.title,
        modules=len(course.modules),
        items=sum(len(module.items) for module in course.modules),
        chunked=chunked,
    )
    return course


__all__ = ["generate_course", "merge_module_content", "normalize_course"]
