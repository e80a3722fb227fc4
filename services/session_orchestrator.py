"""
Session Orchestrator - multi-round practice from a recitation result.

Flow:
    [1] Seed a PracticeSession from the missed words of a ComparisonResult
    [2] Route each submission through the blank session engine
    [3] On session completion, build the first-attempt record
    [4] Hand it to the feedback collaborator for a display summary
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

import logfire

from config import AppConfig
from constants import SessionSummaryDefaults
from exceptions import PracticeEngineError
from models.alignment_models import ComparisonResult
from models.session_models import (
    BlankWord,
    PracticeMode,
    PracticeRun,
    ProgressSnapshot,
    SessionCompletion,
    SessionSummary,
    SubmissionResult,
    TranslationContext,
    WrongAttempt,
)
from services import blank_session
from utils import normalize_text, percentage


class FeedbackCollaborator(Protocol):
    async def generate_practice_summary_async(
        self, completion: SessionCompletion
    ) -> SessionSummary: ...


@dataclass
class SessionOrchestrator:
    """Wraps the blank session engine with configuration and feedback routing."""

    config: AppConfig
    feedback_service: FeedbackCollaborator | None = None

    def start(
        self,
        verse_text: str,
        comparison: ComparisonResult,
        translation_context: TranslationContext | dict | None = None,
        mode: PracticeMode | None = None,
    ) -> PracticeRun:
        """Start practicing the words missed in a recitation."""
        return self.start_with_words(
            verse_text,
            comparison.failed_words(),
            translation_context=translation_context,
            mode=mode,
        )

    def start_with_words(
        self,
        verse_text: str,
        target_words: Iterable[str],
        translation_context: TranslationContext | dict | None = None,
        mode: PracticeMode | None = None,
    ) -> PracticeRun:
        """Start practicing an explicit list of words."""
        session = blank_session.create_session(
            verse_text,
            target_words,
            mode=mode or self.config.practice_mode,
            max_rounds=self.config.max_rounds,
            translation_context=translation_context,
        )
        logfire.info(
            "Practice session started",
            targets=len(session.target_words),
            mode=session.mode,
            max_rounds=session.max_rounds,
        )
        return PracticeRun(session=session)

    def submit(self, run: PracticeRun, raw_input: object) -> tuple[PracticeRun, SubmissionResult]:
        """
        Apply one submission.

        Args:
            run: Current practice run
            raw_input: The learner's answer for the active blank

        Returns:
            tuple[PracticeRun, SubmissionResult]: New run and the engine's result
        """
        session, result = blank_session.process_submission(
            run.session,
            raw_input,
            unsegmented_min_length=self.config.unsegmented_min_length,
            prefix_length=self.config.unsegmented_prefix_length,
        )

        missed = run.missed_attempts
        if result.reason in ("strict-rejected", "practice-pass"):
            missed = [
                *missed,
                WrongAttempt(
                    word=result.expected_word,
                    user_attempt=raw_input if isinstance(raw_input, str) else "",
                    expected_word=result.expected_word,
                    round=run.session.current_round,
                ),
            ]

        if result.session_completed:
            logfire.info(
                "Practice session complete",
                rounds=session.current_round,
                wrong_attempts=len(session.wrong_attempts),
                missed=len(missed),
            )
        elif result.round_completed:
            logfire.info("Practice round complete", next_round=session.current_round)

        return PracticeRun(session=session, missed_attempts=missed), result

    def view(
        self, run: PracticeRun, keystrokes: str = "", letter_echo: bool = False
    ) -> list[BlankWord]:
        return blank_session.render_blank_view(run.session, keystrokes, letter_echo)

    def display_text(
        self, run: PracticeRun, keystrokes: str = "", letter_echo: bool = False
    ) -> str:
        return blank_session.format_blank_text(
            self.view(run, keystrokes, letter_echo),
            chars_per_line=self.config.blank_chars_per_line,
        )

    def progress(self, run: PracticeRun) -> ProgressSnapshot:
        return blank_session.progress(run.session)

    def completion(self, run: PracticeRun) -> SessionCompletion | None:
        """Terminal session data, or None while the session is still active."""
        session = run.session
        if blank_session.session_state(session) != "session_complete":
            return None

        missed_words = {normalize_text(attempt.word) for attempt in run.missed_attempts}
        correct_first_attempt = [
            word
            for word in session.target_words
            if normalize_text(word) not in missed_words
        ]
        return SessionCompletion(
            verse_text=session.verse_text,
            correct_first_attempt=correct_first_attempt,
            wrong_attempts=list(run.missed_attempts),
            first_attempt_accuracy=percentage(
                len(correct_first_attempt), len(session.target_words)
            ),
            rounds=session.current_round,
        )

    async def summarize(self, completion: SessionCompletion) -> SessionSummary:
        """
        Obtain the end-of-session summary from the feedback collaborator.

        Falls back to a fixed summary when no collaborator is configured or it
        fails; the summary is display text and never affects scoring.
        """
        if not completion.wrong_attempts:
            fallback = SessionSummary(**SessionSummaryDefaults.PERFECT)
        else:
            fallback = SessionSummary(**SessionSummaryDefaults.FALLBACK)

        if self.feedback_service is None:
            return fallback

        try:
            return await self.feedback_service.generate_practice_summary_async(completion)
        except PracticeEngineError as e:
            logfire.warn(
                "Feedback collaborator failed, using fallback summary",
                error=e.message,
                error_type=e.error_type,
            )
            return fallback
        except Exception as e:
            logfire.warn(
                "Unexpected feedback collaborator error, using fallback summary",
                error=str(e),
                error_type=type(e).__name__,
            )
            return fallback
