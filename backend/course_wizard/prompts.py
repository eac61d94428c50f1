"""Prompt builders for checkpoint evaluation and course generation."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .models import Checkpoint, CourseModule, Section, display_value, to_answer
from .questionnaire import get_section

PromptMessage = Dict[str, str]

# Reply keys shared with the evaluation normalizer.
REPLY_OVERALL_SCORE = "overallScore"
REPLY_OVERALL_FEEDBACK = "overallFeedback"
REPLY_CRITERIA = "criteriaResults"
REPLY_CRITERION_ID = "criterionId"
REPLY_PASSED = "passed"
REPLY_SCORE = "score"
REPLY_FEEDBACK = "feedback"
REPLY_SUGGESTIONS = "suggestions"

CRITERION_PASS_SCORE = 0.7

RAW_JSON_CONTRACT = (
    "CRITICAL: You must respond with raw JSON only. Do NOT wrap your response in markdown code blocks. "
    "Do NOT include any text before or after the JSON. Start your response with { and end with }."
)

THEME_CLASSES = {
    "dp-flat-sections-2": "dp-flat-sections variation-2",
    "dp-rounded-headings": "dp-rounded-headings",
    "dp-circle-left": "dp-circle-left",
}
DEFAULT_THEME = "dp-flat-sections-2"


def build_evaluation_system_prompt() -> str:
    return (
        "You are an expert instructional designer and course evaluator. Your role is to evaluate course "
        "design elements against established rubric criteria.\n\n"
        "When evaluating, consider:\n"
        "- Best practices in instructional design\n"
        "- Bloom's taxonomy for learning objectives\n"
        "- Alignment between objectives, content, and assessments\n"
        "- Clarity and specificity of descriptions\n"
        "- Feasibility and appropriateness for the stated context\n\n"
        "Be constructive in your feedback. When something doesn't meet criteria, explain why and provide "
        "specific suggestions for improvement.\n\n"
        f"{RAW_JSON_CONTRACT}"
    )


def _format_threshold(threshold: float) -> str:
    return f"{threshold * 100:g}%"


def format_answers(answers: Mapping[str, Any], section: Optional[Section]) -> str:
    """Render answered questions as labelled blocks, in section order.

    Questions without a stored answer are left out entirely. Answers whose id is
    not part of the section are appended afterwards, labelled by their id.
    """
    blocks: List[str] = []
    seen: set[str] = set()
    if section is not None:
        for question in section.questions:
            if question.id not in answers:
                continue
            seen.add(question.id)
            blocks.append(f"**{question.label}:**\n{display_value(to_answer(answers[question.id]))}")
    for question_id, value in answers.items():
        if question_id in seen:
            continue
        blocks.append(f"**{question_id}:**\n{display_value(to_answer(value))}")
    return "\n\n".join(blocks)


def format_rubric(checkpoint: Checkpoint) -> str:
    entries = []
    for index, criterion in enumerate(checkpoint.rubric, start=1):
        focus = "\n".join(f"   {line}" for line in criterion.evaluation_prompt.splitlines() if line.strip())
        entries.append(
            f"{index}. **{criterion.name}** (id: {criterion.id}, weight: {criterion.weight:g})\n"
            f"   {criterion.description}\n"
            f"   Evaluation focus:\n{focus}"
        )
    return "\n\n".join(entries)


def evaluation_output_schema(checkpoint: Checkpoint) -> str:
    return (
        "Provide your evaluation as a JSON object with this exact structure:\n\n"
        "{\n"
        f'  "{REPLY_OVERALL_SCORE}": <number between 0 and 1>,\n'
        f'  "{REPLY_OVERALL_FEEDBACK}": "<2-3 sentence summary of the evaluation>",\n'
        f'  "{REPLY_CRITERIA}": [\n'
        "    {\n"
        f'      "{REPLY_CRITERION_ID}": "<criterion id from the rubric>",\n'
        f'      "{REPLY_PASSED}": <true or false>,\n'
        f'      "{REPLY_SCORE}": <number between 0 and 1>,\n'
        f'      "{REPLY_FEEDBACK}": "<specific feedback for this criterion>",\n'
        f'      "{REPLY_SUGGESTIONS}": ["<suggestion>", "<suggestion>"]\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        f"Return one {REPLY_CRITERIA} entry per rubric criterion, in rubric order. "
        f'Include "{REPLY_SUGGESTIONS}" when a criterion does not pass.\n'
        f"The {REPLY_OVERALL_SCORE} should be the weighted average of the individual criterion scores.\n"
        f"A criterion passes if its score is >= {CRITERION_PASS_SCORE:g}.\n"
        f"The passing threshold for the checkpoint is {_format_threshold(checkpoint.passing_threshold)} "
        f"({checkpoint.passing_threshold:g})."
    )


def build_evaluation_user_prompt(
    checkpoint: Checkpoint,
    answers: Mapping[str, Any],
    section: Optional[Section] = None,
) -> str:
    owning_section = section or get_section(checkpoint.after_section_id)
    return (
        "## Evaluation Task\n\n"
        f"Evaluate the course design responses below for the {checkpoint.name} against the rubric criteria.\n\n"
        "### Rubric Criteria:\n\n"
        f"{format_rubric(checkpoint)}\n\n"
        "### Submitted Responses:\n\n"
        f"{format_answers(answers, owning_section)}\n\n"
        "### Required Output Format:\n\n"
        f"{evaluation_output_schema(checkpoint)}"
    )


def evaluation_messages(checkpoint: Checkpoint, answers: Mapping[str, Any]) -> List[PromptMessage]:
    return [
        {"role": "system", "content": build_evaluation_system_prompt()},
        {"role": "user", "content": build_evaluation_user_prompt(checkpoint, answers)},
    ]


def _answer_text(answers: Mapping[str, Any], question_id: str) -> str:
    if question_id not in answers:
        return ""
    return display_value(to_answer(answers[question_id]))


def build_course_generation_system_prompt() -> str:
    return (
        "You are an expert instructional designer specializing in Canvas LMS course development. Your role "
        "is to generate complete, ready-to-use course content based on the instructor's design specifications.\n\n"
        "When generating content:\n"
        "- Create professional, engaging content appropriate for the course level\n"
        "- Ensure all content aligns with stated learning objectives\n"
        "- Use clear, accessible language\n"
        "- Create detailed rubrics with clear criteria\n"
        "- Design assessment items that measure learning objectives\n"
        "- Wrap page HTML in the theme wrapper given in the user prompt\n\n"
        f"{RAW_JSON_CONTRACT}"
    )


_COURSE_BRIEF = (
    ("Learning Objectives", "learning-objectives"),
    ("Module Structure", "module-details"),
    ("Pacing", "module-pacing"),
    ("Resources", "key-resources"),
    ("Assessment Types", "assignment-types"),
    ("Major Assignments", "assignment-details"),
    ("Quiz Structure", "quiz-structure"),
    ("Discussion Strategy", "discussion-prompts"),
    ("Grading", "grading-weights"),
    ("Rubric Criteria", "rubric-criteria"),
    ("Welcome Message Draft", "welcome-message"),
    ("Instructor Introduction", "instructor-intro"),
    ("Communication Policy", "communication-policy"),
    ("Support Resources", "support-resources"),
    ("Late Policy", "late-policy"),
    ("Accessibility Statement", "accessibility-statement"),
)


def theme_class(answers: Mapping[str, Any]) -> str:
    theme = _answer_text(answers, "design-theme") or DEFAULT_THEME
    return THEME_CLASSES.get(theme, THEME_CLASSES[DEFAULT_THEME])


def build_course_generation_user_prompt(answers: Mapping[str, Any]) -> str:
    overview = "\n".join(
        f"- **{label}:** {_answer_text(answers, question_id)}"
        for label, question_id in (
            ("Title", "course-title"),
            ("Code", "course-code"),
            ("Description", "course-description"),
            ("Target Audience", "target-audience"),
            ("Delivery Format", "delivery-format"),
            ("Duration", "course-duration"),
            ("Credit Hours", "credit-hours"),
        )
    )
    brief = "\n\n".join(
        f"### {label}:\n{_answer_text(answers, question_id)}" for label, question_id in _COURSE_BRIEF
    )
    wrapper = theme_class(answers)
    return (
        "## Course Generation Task\n\n"
        "Based on the following course design specifications, generate a complete Canvas course "
        "structure with full content.\n\n"
        f"### Course Overview:\n{overview}\n\n"
        f"{brief}\n\n"
        "### Page Formatting:\n"
        f'Wrap every HTML page in <div id="dp-wrapper" class="dp-wrapper {wrapper}"> ... </div> '
        f'with a <header class="dp-header {wrapper}"> heading and dp-content-block sections.\n\n'
        "---\n\n"
        "## Required Output Format:\n\n"
        "{\n"
        '  "title": "<course title>",\n'
        '  "description": "<course description for Canvas>",\n'
        '  "welcomeMessage": "<complete welcome page HTML>",\n'
        '  "modules": [\n'
        "    {\n"
        '      "id": "<unique id>",\n'
        '      "name": "<module name>",\n'
        '      "position": <number>,\n'
        '      "items": [\n'
        "        {\n"
        '          "id": "<unique id>",\n'
        '          "type": "page" | "assignment" | "discussion" | "quiz",\n'
        '          "title": "<item title>",\n'
        '          "content": "<HTML content for pages, instructions for assignments>",\n'
        '          "position": <number>,\n'
        '          "points": <number for assignments and quizzes>,\n'
        '          "rubric": {"title": "<rubric title>", "criteria": [{"description": "<criterion>", '
        '"points": <max points>, "ratings": [{"description": "<level>", "points": <points>}]}]},\n'
        '          "questions": [{"type": "multiple_choice" | "short_answer" | "essay", "text": "<question>", '
        '"points": <points>, "answers": [{"text": "<answer>", "correct": true | false}]}],\n'
        '          "prompt": "<discussion prompt for discussion items>"\n'
        "        }\n"
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}\n\n"
        "Pages need 200-300 words of lesson content, discussions need 2-3 guiding questions, and quizzes "
        "need 3-5 questions. Keep the JSON concise to avoid truncation."
    )


def course_generation_messages(answers: Mapping[str, Any]) -> List[PromptMessage]:
    return [
        {"role": "system", "content": build_course_generation_system_prompt()},
        {"role": "user", "content": build_course_generation_user_prompt(answers)},
    ]


def build_course_structure_system_prompt() -> str:
    return (
        "You are an expert instructional designer. Your role is to design the structure of a Canvas LMS "
        "course based on the instructor's design specifications.\n\n"
        f"{RAW_JSON_CONTRACT}"
    )


def build_course_structure_user_prompt(answers: Mapping[str, Any]) -> str:
    overview = "\n".join(
        f"- **{label}:** {_answer_text(answers, question_id)}"
        for label, question_id in (
            ("Title", "course-title"),
            ("Code", "course-code"),
            ("Description", "course-description"),
            ("Target Audience", "target-audience"),
            ("Duration", "course-duration"),
        )
    )
    wrapper = theme_class(answers)
    return (
        "## Course Structure Generation\n\n"
        "Based on the following course design specifications, generate ONLY the course structure "
        "(no detailed content yet).\n\n"
        f"### Course Overview:\n{overview}\n\n"
        f"### Learning Objectives:\n{_answer_text(answers, 'learning-objectives')}\n\n"
        f"### Module Structure:\n{_answer_text(answers, 'module-details')}\n\n"
        f"### Assessment Types:\n{_answer_text(answers, 'assignment-types')}\n\n"
        f"### Welcome Message Draft:\n{_answer_text(answers, 'welcome-message')}\n\n"
        "---\n\n"
        "## Required Output Format:\n\n"
        "{\n"
        '  "title": "<course title>",\n'
        '  "description": "<course description>",\n'
        '  "welcomeMessage": "<complete welcome page HTML>",\n'
        '  "modules": [\n'
        "    {\n"
        '      "id": "module-1",\n'
        '      "name": "<module name>",\n'
        '      "position": 1,\n'
        '      "items": [\n'
        '        {"id": "item-1-1", "type": "page" | "assignment" | "discussion" | "quiz", '
        '"title": "<item title>", "position": 1}\n'
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}\n\n"
        f'Wrap the welcome message in <div id="dp-wrapper" class="dp-wrapper {wrapper}"> ... </div> with a '
        "welcome heading and a list of the course objectives.\n\n"
        "Create a logical structure with appropriate item types for each module. Do NOT include page "
        "content, rubrics, or questions yet; give every module and item a unique id."
    )


def course_structure_messages(answers: Mapping[str, Any]) -> List[PromptMessage]:
    return [
        {"role": "system", "content": build_course_structure_system_prompt()},
        {"role": "user", "content": build_course_structure_user_prompt(answers)},
    ]


def build_module_content_system_prompt() -> str:
    return (
        "You are an expert instructional designer. Your role is to generate detailed content for a "
        "specific module in a Canvas LMS course.\n\n"
        "When generating content:\n"
        "- Create professional, engaging content appropriate for the course level\n"
        "- Ensure content aligns with learning objectives\n"
        "- Use clear, accessible language\n"
        "- Include relevant examples\n"
        "- Wrap page HTML in the theme wrapper given in the user prompt\n\n"
        f"{RAW_JSON_CONTRACT}"
    )


def build_module_content_user_prompt(answers: Mapping[str, Any], module: CourseModule, course_title: str) -> str:
    items = "\n".join(f"- {item.title} ({item.type}, id: {item.id})" for item in module.items)
    wrapper = theme_class(answers)
    return (
        "## Module Content Generation\n\n"
        f'Generate detailed content for Module {module.position}: "{module.name}" in the course '
        f'"{course_title}".\n\n'
        "### Course Context:\n"
        f"- **Learning Objectives:** {_answer_text(answers, 'learning-objectives')}\n"
        f"- **Target Audience:** {_answer_text(answers, 'target-audience')}\n"
        f"- **Assessment Approach:** {_answer_text(answers, 'assignment-types')}\n"
        f"- **Rubric Criteria:** {_answer_text(answers, 'rubric-criteria')}\n"
        f"- **Module Number:** {module.position}\n\n"
        f"### Module Items to Generate Content For:\n{items}\n\n"
        "### Page Formatting:\n"
        f'Wrap every HTML page in <div id="dp-wrapper" class="dp-wrapper {wrapper}"> ... </div> '
        f'with a <header class="dp-header {wrapper}"> heading and dp-content-block sections.\n\n'
        "---\n\n"
        "## Required Output Format:\n\n"
        "{\n"
        f'  "moduleId": "{module.id}",\n'
        '  "items": [\n'
        "    {\n"
        '      "id": "<item id from the list above>",\n'
        '      "type": "page" | "assignment" | "discussion" | "quiz",\n'
        '      "title": "<item title>",\n'
        '      "content": "<HTML content for pages, instructions for assignments>",\n'
        '      "position": <number>,\n'
        '      "points": <number for assignments and quizzes>,\n'
        '      "rubric": {"title": "<rubric title>", "criteria": [{"description": "<criterion>", '
        '"points": <max points>, "ratings": [{"description": "<level>", "points": <points>}]}]},\n'
        '      "questions": [{"type": "multiple_choice" | "short_answer" | "essay", "text": "<question>", '
        '"points": <points>, "answers": [{"text": "<answer>", "correct": true | false}]}],\n'
        '      "prompt": "<discussion prompt for discussion items>"\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        "Return one entry per listed item, keeping its id."
    )


def module_content_messages(
    answers: Mapping[str, Any],
    module: CourseModule,
    course_title: str,
) -> List[PromptMessage]:
    return [
        {"role": "system", "content": build_module_content_system_prompt()},
        {"role": "user", "content": build_module_content_user_prompt(answers, module, course_title)},
    ]


__all__ = [
    "CRITERION_PASS_SCORE",
    "PromptMessage",
    "build_course_generation_system_prompt",
    "build_course_generation_user_prompt",
    "build_course_structure_system_prompt",
    "build_course_structure_user_prompt",
    "build_evaluation_system_prompt",
    "build_evaluation_user_prompt",
    "build_module_content_system_prompt",
    "build_module_content_user_prompt",
    "course_generation_messages",
    "course_structure_messages",
    "evaluation_messages",
    "evaluation_output_schema",
    "format_answers",
    "format_rubric",
    "module_content_messages",
]
