from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Literal, Optional

MIN_QUESTIONS = 1
MAX_QUESTIONS = 20
DEFAULT_QUESTIONS = 5

QuizType = Literal["multiple-choice", "true-false", "fill-in-blank", "long-form"]


def clamp_question_count(value: int) -> int:
    return min(max(MIN_QUESTIONS, value), MAX_QUESTIONS)


def _as_text(value: Any) -> Any:
    # Models sometimes answer with bare numbers or booleans ("4", true/false quizzes)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class QuizQuestion(BaseModel):
    """
    Represents a single question in a quiz.
    """
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_answer: str = Field(..., alias="correctAnswer", min_length=1)
    explanation: Optional[str] = None

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_text(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_as_text(v) for v in value]
        return value

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _answer_as_text(cls, value: Any) -> Any:
        return _as_text(value)


class Quiz(BaseModel):
    """
    Represents a quiz generated from a document or built as a fallback.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    questions: List[QuizQuestion] = Field(..., min_length=1)

    def to_dict(self) -> dict:
        """Convert model to the camelCase JSON shape the front end reads."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class QuizParseResult:
    """
    Outcome of validating AI output: either a quiz or an error message.
    """
    quiz: Optional[Quiz] = None
    error: Optional[str] = None
    repaired: int = 0

    @property
    def ok(self) -> bool:
        return self.quiz is not None
