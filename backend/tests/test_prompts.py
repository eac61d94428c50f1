from __future__ import annotations

from course_wizard.checkpoints import CHECKPOINTS, get_checkpoint_by_id
from course_wizard.models import CourseModule, CourseModuleItem, MultipleAnswer
from course_wizard.prompts import (
    build_course_generation_user_prompt,
    build_course_structure_user_prompt,
    build_module_content_user_prompt,
    course_structure_messages,
    build_evaluation_system_prompt,
    build_evaluation_user_prompt,
    evaluation_messages,
)
from course_wizard.questionnaire import get_section

from factories import COURSE_OVERVIEW_ANSWERS


def test_system_prompt_demands_raw_json() -> None:
    prompt = build_evaluation_system_prompt()

    assert "expert instructional designer" in prompt
    assert "raw JSON only" in prompt
    assert "Do NOT wrap your response in markdown code blocks" in prompt


def test_user_prompt_lists_every_criterion_and_answer_once() -> None:
    for checkpoint in CHECKPOINTS:
        owning = get_section(checkpoint.after_section_id)
        assert owning is not None
        answers = {question.id: f"answer for {question.id}" for question in owning.questions[::2]}
        prompt = build_evaluation_user_prompt(checkpoint, answers)

        for criterion in checkpoint.rubric:
            assert prompt.count(criterion.name) == 1
        for question in owning.questions:
            expected = 1 if question.id in answers else 0
            assert prompt.count(f"**{question.label}:**") == expected


def test_user_prompt_keeps_rubric_order_and_threshold() -> None:
    checkpoint = get_checkpoint_by_id("checkpoint-1")
    assert checkpoint is not None

    prompt = build_evaluation_user_prompt(checkpoint, COURSE_OVERVIEW_ANSWERS)

    positions = [prompt.index(criterion.name) for criterion in checkpoint.rubric]
    assert positions == sorted(positions)
    assert prompt.index("### Rubric Criteria:") < prompt.index("### Submitted Responses:")
    assert prompt.index("### Submitted Responses:") < prompt.index("### Required Output Format:")
    assert "(id: objectives-measurable, weight: 1.5)" in prompt
    assert "The passing threshold for the checkpoint is 75% (0.75)." in prompt
    for key in ("overallScore", "overallFeedback", "criteriaResults", "criterionId", "suggestions"):
        assert f'"{key}"' in prompt


def test_unanswered_questions_are_omitted() -> None:
    checkpoint = get_checkpoint_by_id("checkpoint-1")
    assert checkpoint is not None

    prompt = build_evaluation_user_prompt(checkpoint, {"course-title": "Data 101"})

    assert "**What is the course title?:**\nData 101" in prompt
    assert "What is the course code?" not in prompt
    assert "Describe the course" not in prompt


def test_multi_select_values_are_joined_for_display() -> None:
    checkpoint = get_checkpoint_by_id("checkpoint-3")
    assert checkpoint is not None

    prompt = build_evaluation_user_prompt(
        checkpoint,
        {"assignment-types": MultipleAnswer(values=["quizzes", "projects", "peer-review"])},
    )

    assert "**Which assessment types will you use?:**\nquizzes, projects, peer-review" in prompt


def test_unknown_answer_ids_fall_back_to_their_id() -> None:
    checkpoint = get_checkpoint_by_id("checkpoint-2")
    assert checkpoint is not None

    prompt = build_evaluation_user_prompt(checkpoint, {"module-pacing": "Weekly", "extra-notes": "See syllabus"})

    assert prompt.index("**How is the course paced?:**") < prompt.index("**extra-notes:**\nSee syllabus")


def test_evaluation_prompt_is_deterministic() -> None:
    checkpoint = get_checkpoint_by_id("checkpoint-1")
    assert checkpoint is not None

    first = evaluation_messages(checkpoint, COURSE_OVERVIEW_ANSWERS)
    second = evaluation_messages(checkpoint, dict(COURSE_OVERVIEW_ANSWERS))

    assert first == second
    assert [message["role"] for message in first] == ["system", "user"]


def test_course_generation_prompt_uses_answers_and_theme() -> None:
    answers = dict(COURSE_OVERVIEW_ANSWERS)
    answers["design-theme"] = "dp-circle-left"
    answers["assignment-types"] = ["quizzes", "essays"]

    prompt = build_course_generation_user_prompt(answers)

    assert "- **Title:** Introduction to Data Analysis" in prompt
    assert "### Assessment Types:\nquizzes, essays" in prompt
    assert 'class="dp-wrapper dp-circle-left"' in prompt
    assert '"welcomeMessage"' in prompt


def test_course_generation_prompt_defaults_theme() -> None:
    prompt = build_course_generation_user_prompt({"course-title": "Biology"})

    assert 'class="dp-wrapper dp-flat-sections variation-2"' in prompt
    assert "### Late Policy:\n" in prompt


def test_structure_prompt_asks_for_skeleton_only() -> None:
    answers = dict(COURSE_OVERVIEW_ANSWERS)
    answers["module-details"] = "Module 1: Notebooks. Module 2: Cleaning."

    system, user = course_structure_messages(answers)

    assert system["role"] == "system" and "raw JSON only" in system["content"]
    assert user["role"] == "user"
    assert "### Module Structure:\nModule 1: Notebooks. Module 2: Cleaning." in user["content"]
    assert '"id": "item-1-1"' in user["content"]
    assert "Do NOT include page content" in build_course_structure_user_prompt({})


def test_module_content_prompt_lists_items_with_ids() -> None:
    module = CourseModule(
        id="module-2",
        name="Cleaning data",
        position=2,
        items=[
            CourseModuleItem(id="item-2-1", type="page", title="Missing values", position=1),
            CourseModuleItem(id="item-2-2", type="quiz", title="Cleaning check", position=2),
        ],
    )

    prompt = build_module_content_user_prompt({"rubric-criteria": "Accuracy, clarity"}, module, "Data 101")

    assert 'Module 2: "Cleaning data" in the course "Data 101"' in prompt
    assert "- Missing values (page, id: item-2-1)\n- Cleaning check (quiz, id: item-2-2)" in prompt
    assert "- **Rubric Criteria:** Accuracy, clarity" in prompt
    assert '"moduleId": "module-2"' in prompt
