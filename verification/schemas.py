"""Verification data model and request/response schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Stage(str, Enum):
    START = "start"
    AWAITING_PROVIDER_A = "awaiting_provider_a"
    AWAITING_PROVIDER_B = "awaiting_provider_b"
    QUIZ = "quiz"
    PASSED = "passed"
    FAILED = "failed"


class VerificationToken(BaseModel):
    """Anti-forgery token threading both OAuth hops for one subject."""
    model_config = ConfigDict(frozen=True)

    token: str
    subject_id: str
    issued_at: float
    stage: Stage = Stage.AWAITING_PROVIDER_A


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    options: tuple[str, str, str, str]
    correct_index: int = Field(ge=0, le=3)


class QuizSubmission(BaseModel):
    """Quiz result posted by the browser once every question is answered.

    A missing or unreadable score is kept as ``None`` and scored as zero, so a
    garbled submission fails the quiz instead of failing validation.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    subject_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("subjectId", "discordId", "subject_id"),
    )
    correct_count: int | None = Field(
        default=None,
        validation_alias=AliasChoices("correctCount", "correctAnswers", "correct_count"),
    )
    answers: list[int] | None = None

    @field_validator("subject_id", mode="before")
    @classmethod
    def coerce_subject_id(cls, value: Any) -> Any:
        # Discord snowflakes may arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("correct_count", mode="before")
    @classmethod
    def coerce_count(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator("answers", mode="before")
    @classmethod
    def coerce_answers(cls, value: Any) -> list[int] | None:
        if not isinstance(value, list):
            return None
        if not all(isinstance(answer, int) and not isinstance(answer, bool) for answer in value):
            return None
        return value


class OAuthProfile(BaseModel):
    """Identity returned by a provider's profile endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str | None = None


class VerificationRedirect(BaseModel):
    url: str
    state: str


class QuizView(BaseModel):
    subject_id: str
    questions: list[QuizQuestion]
    passing_score: int

    def client_questions(self) -> list[dict[str, Any]]:
        return [
            {"question": q.prompt, "options": list(q.options), "correctAnswer": q.correct_index}
            for q in self.questions
        ]


class VerificationOutcome(BaseModel):
    subject_id: str
    stage: Stage
    correct_count: int


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
