from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from nexus.domain.models.quiz import DEFAULT_QUESTIONS, QuizType, clamp_question_count

Role = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    """One turn of a chat conversation. Lives only in client memory."""
    model_config = ConfigDict(populate_by_name=True)

    role: Role
    content: StrictStr
    timestamp: Optional[datetime] = None
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Inline image as a data: URL.")

    def to_wire(self) -> dict:
        """The shape the relay endpoint expects; timestamps stay client-side."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"timestamp"})


class ChatRequest(BaseModel):
    """Request model for the chat relay endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage] = Field(..., min_length=1)
    with_search: bool = Field(False, alias="withSearch", description="Ground the answer with web search.")


class QuestionCountMixin(BaseModel):
    num_questions: Optional[int] = Field(DEFAULT_QUESTIONS, alias="numQuestions")

    @field_validator("num_questions", mode="after")
    @classmethod
    def _clamp(cls, value: Optional[int]) -> int:
        if value is None:
            return DEFAULT_QUESTIONS
        return clamp_question_count(value)


class GenerateQuizRequest(QuestionCountMixin):
    """Request model for the quiz generation endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    text: StrictStr
    language: str = Field("English", description="Language the questions are written in.")
    quiz_type: QuizType = Field("multiple-choice", alias="quizType")
    title: Optional[str] = Field(None, description="Overrides the generated quiz title.")


class FallbackQuizRequest(QuestionCountMixin):
    """Request model for the fallback quiz endpoint."""
    model_config = ConfigDict(populate_by_name=True)
