"""Rubric checkpoints that gate progress past their owning questionnaire section."""

from __future__ import annotations

from typing import List, Optional

from .models import Checkpoint, RubricCriterion

DEFAULT_PASSING_THRESHOLD = 0.75


def _criterion(criterion_id: str, name: str, description: str, weight: float, *focus: str) -> RubricCriterion:
    prompt = "\n".join(f"- {line}" for line in focus)
    return RubricCriterion(
        id=criterion_id,
        name=name,
        description=description,
        evaluation_prompt=prompt,
        weight=weight,
    )


CHECKPOINTS: List[Checkpoint] = [
    Checkpoint(
        id="checkpoint-1",
        name="Course Foundation Review",
        description="Evaluating your course overview, objectives, and target audience.",
        after_section_id="course-overview",
        passing_threshold=DEFAULT_PASSING_THRESHOLD,
        rubric=[
            _criterion(
                "objectives-measurable",
                "Measurable Learning Objectives",
                "Learning objectives are specific, measurable, and use action verbs.",
                1.5,
                "Do they start with measurable action verbs from Bloom's taxonomy?",
                "Are they specific enough to assess?",
                "Are there 4-6 objectives appropriate for the course scope?",
                "Do they avoid vague terms like \"understand\" or \"know\"?",
            ),
            _criterion(
                "objectives-achievable",
                "Achievable Objectives",
                "Objectives are realistic given the course duration and student level.",
                1.0,
                "Are they appropriate for the target audience level?",
                "Can they reasonably be achieved in the stated course duration?",
                "Is the scope appropriate for the credit hours?",
            ),
            _criterion(
                "audience-clarity",
                "Clear Target Audience",
                "Target audience is clearly defined with prerequisites stated.",
                1.0,
                "Is the intended student clearly described?",
                "Are prerequisites clearly stated?",
                "Is the expected background knowledge specified?",
            ),
            _criterion(
                "description-compelling",
                "Compelling Course Description",
                "Course description clearly explains value and content.",
                0.75,
                "Does it clearly explain what the course covers?",
                "Does it communicate why this matters to students?",
                "Is it engaging and professional?",
            ),
            _criterion(
                "format-appropriate",
                "Appropriate Delivery Format",
                "The delivery format matches the content and objectives.",
                0.75,
                "Does the format support the stated learning objectives?",
                "Is it appropriate for the course content?",
            ),
        ],
    ),
    Checkpoint(
        id="checkpoint-2",
        name="Module Structure Review",
        description="Evaluating your module organization, content, and pacing.",
        after_section_id="module-structure",
        passing_threshold=DEFAULT_PASSING_THRESHOLD,
        rubric=[
            _criterion(
                "logical-sequence",
                "Logical Sequencing",
                "Modules follow a logical progression that builds knowledge incrementally.",
                1.5,
                "Do modules build on each other logically?",
                "Is there a clear progression from foundational to advanced?",
                "Are prerequisites between modules clear?",
            ),
            _criterion(
                "objective-alignment",
                "Alignment with Objectives",
                "Module content maps to and supports the learning objectives.",
                1.5,
                "Does each module contribute to one or more learning objectives?",
                "Are all objectives covered by the end of the course?",
                "Is there appropriate depth for each objective?",
            ),
            _criterion(
                "appropriate-depth",
                "Appropriate Depth",
                "Each module has sufficient depth without being overwhelming.",
                1.0,
                "Does each module have enough topics to be substantive?",
                "Are any modules too overloaded?",
                "Is the workload balanced across modules?",
            ),
            _criterion(
                "pacing-realistic",
                "Realistic Pacing",
                "The pacing is realistic for the course duration.",
                1.0,
                "Can the content be covered in the stated timeframe?",
                "Is there time for practice and assessment?",
                "Is the weekly workload reasonable?",
            ),
            _criterion(
                "resources-adequate",
                "Adequate Resources",
                "Resources are specified and appropriate for each module.",
                0.75,
                "Are resources specified for each module?",
                "Are they appropriate for the content?",
                "Is there variety in resource types?",
            ),
        ],
    ),
    Checkpoint(
        id="checkpoint-3",
        name="Assessment Strategy Review",
        description="Evaluating your assessment approach, grading, and alignment with objectives.",
        after_section_id="assessment-strategy",
        passing_threshold=DEFAULT_PASSING_THRESHOLD,
        rubric=[
            _criterion(
                "assessment-objective-alignment",
                "Assessment-Objective Alignment",
                "Assessments directly measure the stated learning objectives.",
                1.5,
                "Do assessments measure the learning objectives?",
                "Is each objective assessed at least once?",
                "Are assessment types appropriate for the objectives?",
            ),
            _criterion(
                "assessment-variety",
                "Assessment Variety",
                "Multiple assessment types accommodate different learning styles.",
                1.0,
                "Are there multiple types of assessments?",
                "Do they address different levels of Bloom's taxonomy?",
                "Is there a mix of formative and summative assessments?",
            ),
            _criterion(
                "grading-clarity",
                "Grading Clarity",
                "Grading weights and criteria are clear and fair.",
                1.0,
                "Do grading weights add up to 100%?",
                "Is the weight distribution appropriate?",
                "Are rubric criteria clear and measurable?",
            ),
            _criterion(
                "appropriate-rigor",
                "Appropriate Rigor",
                "Assessments are rigorous but achievable.",
                1.0,
                "Are assessments challenging enough for the course level?",
                "Are expectations realistic?",
                "Is there scaffolding for complex assignments?",
            ),
            _criterion(
                "feedback-opportunities",
                "Feedback Opportunities",
                "Students have opportunities for feedback before high-stakes assessments.",
                0.75,
                "Are there low-stakes assessments early in the course?",
                "Do students receive feedback before major assignments?",
                "Are discussions or peer review included?",
            ),
        ],
    ),
]


def get_checkpoint_by_id(checkpoint_id: str) -> Optional[Checkpoint]:
    for checkpoint in CHECKPOINTS:
        if checkpoint.id == checkpoint_id:
            return checkpoint
    return None


def get_checkpoint_for_section(section_id: str) -> Optional[Checkpoint]:
    for checkpoint in CHECKPOINTS:
        if checkpoint.after_section_id == section_id:
            return checkpoint
    return None


__all__ = ["CHECKPOINTS", "DEFAULT_PASSING_THRESHOLD", "get_checkpoint_by_id", "get_checkpoint_for_section"]
