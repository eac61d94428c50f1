from __future__ import annotations

import asyncio

import pytest

from course_wizard.course_generator import generate_course, merge_module_content, normalize_course
from course_wizard.llm_client import MalformedResponse
from course_wizard.models import CourseModule

from factories import COURSE_OVERVIEW_ANSWERS, calls_of, make_client


def test_missing_fields_fall_back_to_defaults() -> None:
    raw = {
        "modules": [
            {
                "items": [
                    {"type": "slideshow", "title": "Orientation"},
                    {"type": "assignment", "title": "Data diary", "points": 20, "position": 5},
                    "not an item",
                ]
            },
            "not a module",
        ]
    }

    course = normalize_course(raw, {"course-title": "Data 101"})

    assert course.title == "Data 101"
    assert course.description == ""
    module = course.modules[0]
    assert (module.id, module.name, module.position) == ("module-1", "Module 1", 1)
    assert [item.type for item in module.items] == ["page", "assignment"]
    assert [item.position for item in module.items] == [1, 5]
    assert module.items[0].id == "module-1-item-1"
    assert module.items[1].points == 20.0


def test_untitled_course_without_answers() -> None:
    assert normalize_course({"modules": []}, {}).title == "Untitled course"


def test_quiz_and_rubric_content_is_kept() -> None:
    raw = {
        "title": "Data 101",
        "modules": [
            {
                "id": "week-1",
                "name": "Week 1",
                "items": [
                    {
                        "type": "quiz",
                        "title": "Check-in",
                        "questions": [
                            {
                                "type": "multiple_choice",
                                "text": "Which library loads CSV files?",
                                "answers": [{"text": "pandas", "correct": True}, {"text": "turtle"}],
                            },
                            {"type": "true_false", "text": "Explain a histogram.", "points": 2},
                        ],
                    },
                    {
                        "type": "assignment",
                        "title": "Cleaning lab",
                        "rubric": {
                            "criteria": [
                                {
                                    "description": "Missing values handled",
                                    "points": 10,
                                    "ratings": [{"description": "Complete", "points": 10}, {"points": 0}],
                                }
                            ]
                        },
                    },
                ],
            }
        ],
    }

    items = normalize_course(raw, {}).modules[0].items

    first, second = items[0].questions
    assert first.answers[0].correct is True and first.answers[1].correct is False
    assert second.type == "short_answer" and second.points == 2.0
    rubric = items[1].rubric
    assert rubric.title == "Rubric"
    assert [rating.description for rating in rubric.criteria[0].ratings] == ["Complete"]


def test_reply_without_modules_is_malformed() -> None:
    with pytest.raises(MalformedResponse):
        normalize_course({"title": "Data 101", "modules": "none"}, {})


def test_generate_course_uses_generation_settings(telemetry_events) -> None:
    client = make_client({"title": "Data 101", "modules": [{"name": "Week 1", "items": [{"title": "Intro"}]}]})

    course = asyncio.run(generate_course(COURSE_OVERVIEW_ANSWERS, client))

    call = calls_of(client)[0]
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 8000
    assert "Introduction to Data Analysis" in call["messages"][1]["content"]
    assert course.modules[0].items[0].type == "page"
    assert telemetry_events[-1].name == "course_generated"
    assert telemetry_events[-1].payload == {"title": "Data 101", "modules": 1, "items": 1, "chunked": False}


def _skeleton() -> CourseModule:
    return normalize_course(
        {
            "modules": [
                {
                    "id": "module-1",
                    "name": "Week 1",
                    "items": [
                        {"id": "item-1-1", "type": "page", "title": "Welcome", "position": 1},
                        {"id": "item-1-2", "type": "quiz", "title": "Check-in", "position": 2},
                    ],
                }
            ]
        },
        {},
    ).modules[0]


def test_module_content_is_merged_by_item_id() -> None:
    content = {
        "moduleId": "module-1",
        "items": [
            {
                "id": "item-1-2",
                "type": "page",
                "title": "Renamed",
                "position": 9,
                "points": 10,
                "questions": [{"type": "essay", "text": "What surprised you?"}],
            },
            {"id": "item-9-9", "title": "Stray", "content": "<p>Not in the outline</p>"},
        ],
    }

    module = merge_module_content(_skeleton(), content)

    welcome, check_in = module.items
    assert welcome.content is None
    assert (check_in.id, check_in.title, check_in.type, check_in.position) == ("item-1-2", "Check-in", "quiz", 2)
    assert check_in.points == 10.0
    assert check_in.questions[0].text == "What surprised you?"
    assert [item.id for item in module.items] == ["item-1-1", "item-1-2"]


def test_module_content_without_items_is_malformed() -> None:
    with pytest.raises(MalformedResponse):
        merge_module_content(_skeleton(), {"moduleId": "module-1"})


def test_chunked_generation_asks_for_structure_then_each_module(telemetry_events) -> None:
    structure = {
        "title": "Data 101",
        "welcomeMessage": "<div>Welcome</div>",
        "modules": [
            {"id": "module-1", "name": "Week 1", "items": [{"id": "item-1-1", "type": "page", "title": "Intro"}]},
            {"id": "module-2", "name": "Week 2", "items": [{"id": "item-2-1", "type": "discussion", "title": "Talk"}]},
        ],
    }
    client = make_client(
        structure,
        {"moduleId": "module-1", "items": [{"id": "item-1-1", "content": "<p>Lesson one</p>"}]},
        {"moduleId": "module-2", "items": [{"id": "item-2-1", "prompt": "Share a chart you made."}]},
    )

    course = asyncio.run(generate_course(COURSE_OVERVIEW_ANSWERS, client, chunked=True))

    calls = calls_of(client)
    assert len(calls) == 3
    assert "ONLY the course structure" in calls[0]["messages"][1]["content"]
    assert '"Week 1" in the course "Data 101"' in calls[1]["messages"][1]["content"]
    assert "Talk (discussion, id: item-2-1)" in calls[2]["messages"][1]["content"]
    assert all(call["max_tokens"] == 8000 for call in calls)
    assert course.welcome_message == "<div>Welcome</div>"
    assert course.modules[0].items[0].content == "<p>Lesson one</p>"
    assert course.modules[1].items[0].prompt == "Share a chart you made."
    assert course.modules[1].items[0].type == "discussion"
    assert telemetry_events[-1].payload["chunked"] is True


def test_chunked_generation_stops_on_a_failed_module() -> None:
    structure = {"modules": [{"id": "module-1", "name": "Week 1", "items": [{"id": "a", "title": "Intro"}]}]}
    client = make_client(structure, "not json")

    with pytest.raises(MalformedResponse):
        asyncio.run(generate_course(COURSE_OVERVIEW_ANSWERS, client, chunked=True))
