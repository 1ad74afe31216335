import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from .ai_client import ai_client
from nexus.infrastructure.config import settings
from nexus.domain.errors import ParsingError
from nexus.domain.models.quiz import Quiz, QuizParseResult, QuizQuestion, QuizType, clamp_question_count
from nx_utils.ai_safety import create_safety_guard_prompt
from nx_utils.logger_utils import logger
from nx_utils.validation import ERRORS, format_validation_error

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

QUIZ_TYPE_INSTRUCTIONS = {
    "multiple-choice": "Each question must have exactly 4 options and one correct answer.",
    "true-false": 'Each question is a statement with exactly 2 options: "True" and "False".',
    "fill-in-blank": (
        "Each question is a sentence with a blank written as '____' and 4 candidate words "
        "or phrases as options, one of which fills the blank correctly."
    ),
    "long-form": (
        "Each question asks for a written explanation. Provide 4 options: one complete "
        "model answer and three plausible but incomplete or incorrect answers."
    ),
}

FALLBACK_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]


def build_quiz_prompt(num_questions: int, quiz_type: QuizType = "multiple-choice", language: str = "English") -> str:
    return f"""
    Create a quiz of exactly {num_questions} questions that test understanding of the text.
    {QUIZ_TYPE_INSTRUCTIONS[quiz_type]}
    Write the title, questions, options and explanations in {language}.
    The "correctAnswer" must be copied exactly from one of the "options".
    Return the output as a single valid JSON object, like this:
    {{
      "title": "A short title describing the document",
      "questions": [
        {{
          "question": "What is the capital of France?",
          "options": ["Berlin", "Paris", "London", "Madrid"],
          "correctAnswer": "Paris",
          "explanation": "Paris has been the capital of France since 987."
        }}
      ]
    }}
    Do not include any other text or explanation in your response.
    """


def parse_quiz_json(raw: str) -> Any:
    """
    Decode the model's JSON, tolerating a surrounding markdown code fence.
    """
    cleaned = (raw or "").strip()
    match = _CODE_FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Failed to parse AI response for quiz: {e}", exc_info=True)
        raise ParsingError("The AI returned an invalid JSON format. Please try again.") from e

    # Some models nest the object one level down
    if isinstance(data, dict) and set(data) == {"quiz"} and isinstance(data["quiz"], dict):
        data = data["quiz"]
    return data


def repair_correct_answers(quiz: Quiz) -> int:
    """
    Point every correctAnswer that is not one of its options at the first option.
    Returns how many questions were changed; a second call returns 0.
    """
    repaired = 0
    for index, question in enumerate(quiz.questions):
        if question.correct_answer not in question.options:
            logger.warning(f"Correct answer not found in options for question {index + 1}; using first option")
            question.correct_answer = question.options[0]
            repaired += 1
    return repaired


def validate_quiz(data: Any) -> QuizParseResult:
    """
    Check the AI output against the Quiz schema and repair answers.

    Never raises: a bad shape comes back as ``QuizParseResult(error=...)``.
    """
    title = data.get("title") if isinstance(data, dict) else None
    questions = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(title, str) or not title or not isinstance(questions, list) or not questions:
        logger.error("Invalid quiz format returned from AI")
        return QuizParseResult(error=ERRORS["bad_quiz"])

    try:
        quiz = Quiz.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid question format in quiz: {format_validation_error(e)}")
        return QuizParseResult(error=ERRORS["bad_question"])

    repaired = repair_correct_answers(quiz)
    return QuizParseResult(quiz=quiz, repaired=repaired)


def generate_quiz_from_text(
    text: str,
    num_questions: int,
    quiz_type: QuizType = "multiple-choice",
    language: str = "English",
    title: Optional[str] = None,
) -> QuizParseResult:
    """
    Generates a quiz from document text.

    Provider failures raise AIClientError, unparseable output raises
    ParsingError; a parsed but malformed quiz is returned as an error result.
    """
    logger.info(f"Generating {num_questions} '{quiz_type}' questions from text of length: {len(text)}")

    context = text
    if len(context) > settings.NX_QUIZ_TEXT_LIMIT:
        logger.info(f"Truncating quiz source text to {settings.NX_QUIZ_TEXT_LIMIT} characters")
        context = context[:settings.NX_QUIZ_TEXT_LIMIT]

    prompt = create_safety_guard_prompt(
        prompt=build_quiz_prompt(num_questions, quiz_type, language),
        context=context,
    )
    raw = ai_client.generate_json(prompt)

    result = validate_quiz(parse_quiz_json(raw))
    if result.ok and title:
        result.quiz.title = title
    if result.ok:
        logger.info(f"Quiz generation successful ({len(result.quiz.questions)} questions, {result.repaired} repaired)")
    return result


def create_fallback_quiz(num_questions: int) -> Quiz:
    """
    Builds a placeholder quiz without calling any external service.
    The same count always produces the same quiz.
    """
    num_questions = clamp_question_count(num_questions)
    questions = [
        QuizQuestion(
            question=f"Sample question {i}: which of these options is the correct one?",
            options=list(FALLBACK_OPTIONS),
            correct_answer=FALLBACK_OPTIONS[(i - 1) % len(FALLBACK_OPTIONS)],
            explanation=(
                "This is a placeholder question because the AI quiz generator is unavailable. "
                "Try uploading your document again later."
            ),
        )
        for i in range(1, num_questions + 1)
    ]
    return Quiz(title="Sample Quiz", questions=questions)
