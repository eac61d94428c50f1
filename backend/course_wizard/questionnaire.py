"""Ordered questionnaire sections walked by the course design wizard."""

from __future__ import annotations

from typing import List, Optional

from .models import Question, QuestionOption, QuestionValidation, Section


def _options(*pairs: tuple[str, str]) -> List[QuestionOption]:
    return [QuestionOption(value=value, label=label) for value, label in pairs]


SECTIONS: List[Section] = [
    Section(
        id="course-overview",
        title="Course Overview",
        description="Describe the course, who it is for, and what students will be able to do.",
        checkpoint_id="checkpoint-1",
        questions=[
            Question(
                id="course-title",
                type="text",
                label="What is the course title?",
                placeholder="Introduction to Data Analysis",
                required=True,
                validation=QuestionValidation(min_length=3, max_length=120),
            ),
            Question(
                id="course-code",
                type="text",
                label="What is the course code?",
                placeholder="DATA 101",
                validation=QuestionValidation(max_length=20),
            ),
            Question(
                id="course-description",
                type="textarea",
                label="Describe the course",
                description="What the course covers and why it matters to students.",
                required=True,
                validation=QuestionValidation(min_length=50, max_length=2000),
            ),
            Question(
                id="target-audience",
                type="textarea",
                label="Who is the course for?",
                description="Who the intended students are and what they should already know.",
                required=True,
                validation=QuestionValidation(min_length=20),
            ),
            Question(
                id="delivery-format",
                type="select",
                label="How will the course be delivered?",
                required=True,
                options=_options(
                    ("online-async", "Online (asynchronous)"),
                    ("online-sync", "Online (synchronous)"),
                    ("hybrid", "Hybrid"),
                    ("in-person", "In person with Canvas support"),
                ),
            ),
            Question(
                id="course-duration",
                type="select",
                label="How long does the course run?",
                required=True,
                options=_options(
                    ("4-weeks", "4 weeks"),
                    ("8-weeks", "8 weeks"),
                    ("12-weeks", "12 weeks"),
                    ("16-weeks", "16 weeks"),
                ),
            ),
            Question(
                id="credit-hours",
                type="number",
                label="How many credit hours is it worth?",
                validation=QuestionValidation(min=0, max=12),
            ),
            Question(
                id="learning-objectives",
                type="textarea",
                label="What will students be able to do?",
                description="List 4-6 measurable objectives, one per line, starting with an action verb.",
                placeholder="Students will be able to...",
                required=True,
                validation=QuestionValidation(min_length=100),
            ),
        ],
    ),
    Section(
        id="module-structure",
        title="Module Structure",
        description="Organise the course into modules and plan how students move through them.",
        checkpoint_id="checkpoint-2",
        questions=[
            Question(
                id="module-details",
                type="textarea",
                label="What modules does the course have?",
                description="Name each module and list its key topics, in teaching order.",
                required=True,
                validation=QuestionValidation(min_length=100),
            ),
            Question(
                id="module-pacing",
                type="textarea",
                label="How is the course paced?",
                description="How many weeks each module takes and the expected weekly workload.",
                required=True,
                validation=QuestionValidation(min_length=30),
            ),
            Question(
                id="key-resources",
                type="textarea",
                label="Which resources support each module?",
                description="Readings, videos, tools, and other materials used in each module.",
                required=True,
                validation=QuestionValidation(min_length=30),
            ),
        ],
    ),
    Section(
        id="assessment-strategy",
        title="Assessment Strategy",
        description="Plan how students demonstrate that they met the learning objectives.",
        checkpoint_id="checkpoint-3",
        questions=[
            Question(
                id="assignment-types",
                type="multiselect",
                label="Which assessment types will you use?",
                required=True,
                options=_options(
                    ("quizzes", "Quizzes"),
                    ("essays", "Essays"),
                    ("projects", "Projects"),
                    ("discussions", "Discussions"),
                    ("presentations", "Presentations"),
                    ("exams", "Exams"),
                    ("peer-review", "Peer review"),
                ),
            ),
            Question(
                id="assignment-details",
                type="textarea",
                label="Describe the major assignments",
                description="Describe each major assignment and the objectives it measures.",
                required=True,
                validation=QuestionValidation(min_length=80),
            ),
            Question(
                id="quiz-structure",
                type="textarea",
                label="How are quizzes structured?",
                description="How often quizzes run, their format, and how many attempts students get.",
            ),
            Question(
                id="discussion-prompts",
                type="textarea",
                label="How will you use discussions?",
                description="How discussions are used and what a sample prompt looks like.",
            ),
            Question(
                id="grading-weights",
                type="textarea",
                label="How is the final grade weighted?",
                description="Percentage of the final grade for each assessment category.",
                required=True,
                validation=QuestionValidation(min_length=20),
            ),
            Question(
                id="rubric-criteria",
                type="textarea",
                label="How will major assignments be graded?",
                description="The criteria used to grade major assignments.",
                required=True,
                validation=QuestionValidation(min_length=40),
            ),
        ],
    ),
    Section(
        id="course-communication",
        title="Communication & Policies",
        description="Welcome students and set expectations for communication and support.",
        questions=[
            Question(
                id="welcome-message",
                type="textarea",
                label="Draft your welcome message",
                required=True,
                validation=QuestionValidation(min_length=50),
            ),
            Question(
                id="instructor-intro",
                type="textarea",
                label="Introduce yourself to students",
            ),
            Question(
                id="communication-policy",
                type="textarea",
                label="How should students contact you?",
                description="Preferred contact channels and expected response times.",
                required=True,
                validation=QuestionValidation(min_length=20),
            ),
            Question(
                id="support-resources",
                type="textarea",
                label="Which support services can students use?",
            ),
            Question(
                id="late-policy",
                type="textarea",
                label="What is your late work policy?",
                required=True,
            ),
            Question(
                id="accessibility-statement",
                type="textarea",
                label="Add an accessibility statement",
            ),
        ],
    ),
    Section(
        id="course-design",
        title="Course Design",
        description="Choose how the generated Canvas pages look.",
        questions=[
            Question(
                id="design-theme",
                type="select",
                label="Which page theme should the course use?",
                required=True,
                options=_options(
                    ("dp-flat-sections-2", "Flat sections"),
                    ("dp-rounded-headings", "Rounded headings"),
                    ("dp-circle-left", "Circle left"),
                ),
            ),
        ],
    ),
]


def get_section(section_id: str) -> Optional[Section]:
    for section in SECTIONS:
        if section.id == section_id:
            return section
    return None


def find_question(question_id: str) -> Optional[Question]:
    for section in SECTIONS:
        question = section.question(question_id)
        if question is not None:
            return question
    return None


__all__ = ["SECTIONS", "find_question", "get_section"]
