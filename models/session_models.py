"""Pydantic models for fill-in-the-blank practice sessions."""

from typing import Any, Literal

import logfire
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

PracticeMode = Literal["strict", "practice"]
BlankKind = Literal["regular", "active_blank", "waiting_blank", "completed"]
SubmissionReason = Literal[
    "correct", "practice-pass", "strict-rejected", "session-complete"
]


class TranslationContext(BaseModel):
    """Language variants of the verse that are accepted as answers."""

    model_config = ConfigDict(frozen=True)

    is_translated: bool = False
    original_verse: str = ""
    translated_verse: str | None = None
    multi_language_translations: dict[str, str] | None = None
    source_language: str = "en"


class WrongAttempt(BaseModel):
    """A submission that did not match the expected word."""

    model_config = ConfigDict(frozen=True)

    word: str
    user_attempt: str
    expected_word: str
    round: int = 1


class PracticeSession(BaseModel):
    """
    Immutable state of one fill-in-the-blank practice session.

    The active blank is never stored here; it is always derived from
    target_words and completed_words (see services.blank_session.active_blank).
    """

    model_config = ConfigDict(frozen=True)

    verse_text: str = ""
    target_words: list[str] = Field(default_factory=list)
    completed_words: list[str] = Field(default_factory=list)
    current_round: int = Field(default=1, ge=1)
    max_rounds: int = Field(default=3, ge=1)
    mode: PracticeMode = "practice"
    wrong_attempts: list[WrongAttempt] = Field(default_factory=list)
    translation_context: TranslationContext | None = None

    @field_validator("translation_context", mode="wrap")
    @classmethod
    def _drop_malformed_context(cls, value: Any, handler):
        # A broken context degrades to original-language matching
        try:
            return handler(value)
        except ValidationError as e:
            logfire.warn("Ignoring malformed translation context", error=str(e))
            return None


class ActiveBlank(BaseModel):
    """The target word currently awaiting an answer."""

    model_config = ConfigDict(frozen=True)

    word: str
    normalized: str
    position: int | None = None


class BlankWord(BaseModel):
    """One rendered word of the verse, tagged for display."""

    word: str
    kind: BlankKind
    position: int
    display: str


class SubmissionResult(BaseModel):
    """Outcome of applying one submission to a session."""

    is_correct: bool = False
    advanced: bool = False
    expected_word: str | None = None
    matched_language: str | None = None
    reason: SubmissionReason
    round_completed: bool = False
    session_completed: bool = False


class ProgressCount(BaseModel):
    completed: int
    total: int
    percentage: int


class ProgressSnapshot(BaseModel):
    """Round and overall progress of a session."""

    current_round: int
    max_rounds: int
    round: ProgressCount
    overall: ProgressCount


class SessionCompletion(BaseModel):
    """Terminal session data handed to the feedback collaborator."""

    verse_text: str
    correct_first_attempt: list[str] = Field(default_factory=list)
    wrong_attempts: list[WrongAttempt] = Field(default_factory=list)
    first_attempt_accuracy: int = 0
    rounds: int = 1


class SessionSummary(BaseModel):
    """Natural-language end-of-session summary (opaque display text)."""

    feedback: str = Field(description="One or two sentences of overall feedback")
    analysis: str = Field(description="What the learner struggled with and why")
    strategies: list[str] = Field(default_factory=list)
    next_steps: str = ""
    encouragement: str = ""


class PracticeRun(BaseModel):
    """
    A practice session plus the orchestrator's record of every miss.

    Strict mode leaves the session untouched on a wrong answer, so rejected
    attempts are recorded here to know which words were right first time.
    """

    model_config = ConfigDict(frozen=True)

    session: PracticeSession
    missed_attempts: list[WrongAttempt] = Field(default_factory=list)
