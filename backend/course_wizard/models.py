"""Data models shared by the questionnaire config, the evaluator, and the wizard state."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the browser client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConfigModel(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


QuestionType = Literal["text", "textarea", "select", "multiselect", "number"]


class QuestionOption(ConfigModel):
    value: str
    label: str


class QuestionValidation(ConfigModel):
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    min: Optional[float] = None
    max: Optional[float] = None


class Question(ConfigModel):
    id: str
    type: QuestionType
    label: str
    description: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    options: List[QuestionOption] = Field(default_factory=list)
    validation: Optional[QuestionValidation] = None


class Section(ConfigModel):
    id: str
    title: str
    description: str
    questions: List[Question] = Field(default_factory=list)
    checkpoint_id: Optional[str] = None

    def question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class RubricCriterion(ConfigModel):
    id: str
    name: str
    description: str
    evaluation_prompt: str
    weight: float = Field(gt=0.0)


class Checkpoint(ConfigModel):
    id: str
    name: str
    description: str
    after_section_id: str
    rubric: List[RubricCriterion] = Field(default_factory=list)
    passing_threshold: float = Field(ge=0.0, le=1.0)

    def criterion(self, criterion_id: str) -> Optional[RubricCriterion]:
        for criterion in self.rubric:
            if criterion.id == criterion_id:
                return criterion
        return None

    @property
    def total_weight(self) -> float:
        return sum(criterion.weight for criterion in self.rubric)


class SingleAnswer(BaseModel):
    kind: Literal["single"] = "single"
    value: str


class MultipleAnswer(BaseModel):
    kind: Literal["multiple"] = "multiple"
    values: List[str] = Field(default_factory=list)

    @field_validator("values")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        seen: Dict[str, None] = {}
        for value in values:
            seen.setdefault(value, None)
        return list(seen)


Answer = Annotated[Union[SingleAnswer, MultipleAnswer], Field(discriminator="kind")]
WireAnswer = Union[str, List[str]]


def to_answer(raw: Any) -> Union[SingleAnswer, MultipleAnswer]:
    """Convert a wire value (string, number, or list of strings) into an answer."""
    if isinstance(raw, (SingleAnswer, MultipleAnswer)):
        return raw
    if isinstance(raw, bool):
        raise TypeError("Boolean answers are not supported.")
    if isinstance(raw, str):
        return SingleAnswer(value=raw)
    if isinstance(raw, (int, float)):
        return SingleAnswer(value=str(raw))
    if isinstance(raw, (list, tuple)):
        if not all(isinstance(item, str) for item in raw):
            raise TypeError("Multi-select answers must be a list of strings.")
        return MultipleAnswer(values=list(raw))
    raise TypeError(f"Unsupported answer value type: {type(raw).__name__}")


def answers_from_wire(raw: Mapping[str, Any]) -> Dict[str, Union[SingleAnswer, MultipleAnswer]]:
    return {str(question_id): to_answer(value) for question_id, value in raw.items()}


def answer_to_wire(answer: Union[SingleAnswer, MultipleAnswer]) -> WireAnswer:
    if isinstance(answer, MultipleAnswer):
        return list(answer.values)
    return answer.value


def answers_to_wire(answers: Mapping[str, Union[SingleAnswer, MultipleAnswer]]) -> Dict[str, WireAnswer]:
    return {question_id: answer_to_wire(answer) for question_id, answer in answers.items()}


def display_value(answer: Union[SingleAnswer, MultipleAnswer]) -> str:
    if isinstance(answer, MultipleAnswer):
        return ", ".join(answer.values)
    return answer.value


def measured_text(answer: Union[SingleAnswer, MultipleAnswer]) -> str:
    """Text whose length the validation rules measure; selections are concatenated."""
    if isinstance(answer, MultipleAnswer):
        return "".join(answer.values)
    return answer.value


class CriterionResult(WireModel):
    criterion_id: str
    passed: bool
    score: float = Field(ge=0.0, le=1.0)
    feedback: str
    suggestions: Optional[List[str]] = None


class EvaluationResult(WireModel):
    checkpoint_id: str
    passed: bool
    overall_score: float = Field(ge=0.0, le=1.0)
    criteria_results: List[CriterionResult] = Field(default_factory=list)
    overall_feedback: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


CourseItemType = Literal["page", "assignment", "discussion", "quiz", "file", "header"]


class CourseRubricRating(WireModel):
    description: str
    points: float = 0.0


class CourseRubricCriterion(WireModel):
    description: str
    points: float = 0.0
    ratings: List[CourseRubricRating] = Field(default_factory=list)


class CourseRubric(WireModel):
    title: str
    criteria: List[CourseRubricCriterion] = Field(default_factory=list)


class QuizAnswer(WireModel):
    text: str
    correct: bool = False


class QuizQuestion(WireModel):
    type: Literal["multiple_choice", "short_answer", "essay"] = "short_answer"
    text: str
    points: float = 1.0
    answers: Optional[List[QuizAnswer]] = None


class CourseModuleItem(WireModel):
    id: str
    type: CourseItemType = "page"
    title: str
    position: int = Field(ge=1)
    content: Optional[str] = None
    points: Optional[float] = None
    due_date: Optional[str] = None
    rubric: Optional[CourseRubric] = None
    questions: Optional[List[QuizQuestion]] = None
    prompt: Optional[str] = None


class CourseModule(WireModel):
    id: str
    name: str
    position: int = Field(ge=1)
    items: List[CourseModuleItem] = Field(default_factory=list)


class GeneratedCourse(WireModel):
    title: str
    description: str = ""
    welcome_message: str = ""
    modules: List[CourseModule] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    "Answer",
    "Checkpoint",
    "CourseModule",
    "CourseModuleItem",
    "CourseRubric",
    "CourseRubricCriterion",
    "CourseRubricRating",
    "CriterionResult",
    "EvaluationResult",
    "GeneratedCourse",
    "MultipleAnswer",
    "Question",
    "QuestionOption",
    "QuestionType",
    "QuestionValidation",
    "QuizAnswer",
    "QuizQuestion",
    "RubricCriterion",
    "Section",
    "SingleAnswer",
    "WireAnswer",
    "answer_to_wire",
    "answers_from_wire",
    "answers_to_wire",
    "display_value",
    "measured_text",
    "to_answer",
]
