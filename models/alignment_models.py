"""Pydantic models for recitation alignment and scoring results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from utils import normalize_text

AlignmentStatus = Literal["correct", "incorrect", "missing", "extra"]
FeedbackTier = Literal["excellent", "good", "fair", "retry"]
ScoringStrategy = Literal["server_alignment", "local_positional"]


class WordToken(BaseModel):
    """A single whitespace-delimited word and its normalized form."""

    model_config = ConfigDict(frozen=True)

    text: str
    normalized_text: str
    position: int


class AlignmentPair(BaseModel):
    """One aligned position between the user's attempt and the original verse."""

    model_config = ConfigDict(frozen=True)

    user_word: str | None = None
    original_word: str | None = None
    status: AlignmentStatus
    position: int
    suggestion: str | None = None


class ScoreFeedback(BaseModel):
    """Tiered feedback derived from an accuracy score."""

    tier: FeedbackTier
    feedback: str
    suggestions: list[str] = Field(default_factory=list)
    explanation: str | None = None


class ComparisonResult(BaseModel):
    """Outcome of comparing a recitation attempt against the original verse."""

    accuracy: int = 0
    total_words: int = 0
    correct_words: int = 0
    incorrect_words: int = 0
    missing_words: int = 0
    extra_words: int = 0
    user_alignment: list[AlignmentPair] = Field(default_factory=list)
    original_alignment: list[AlignmentPair] = Field(default_factory=list)
    feedback: str = ""
    suggestions: list[str] = Field(default_factory=list)
    tier: FeedbackTier = "retry"
    strategy: ScoringStrategy = "server_alignment"
    detailed_feedback: str = ""
    explanation: str | None = None

    def failed_words(self) -> list[str]:
        """Incorrect or missing original words, first occurrence only, in verse order."""
        seen: set[str] = set()
        failed: list[str] = []
        for pair in self.original_alignment:
            if pair.status not in ("incorrect", "missing") or not pair.original_word:
                continue
            key = normalize_text(pair.original_word)
            if key and key not in seen:
                seen.add(key)
                failed.append(pair.original_word)
        return failed
