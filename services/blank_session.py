"""
Blank Session Engine - fill-in-the-blank practice state machine.

States:
    SETUP -> ACTIVE -> ROUND_COMPLETE -> (ACTIVE next round | SESSION_COMPLETE)

Every operation takes a PracticeSession and returns a new one; nothing is
mutated in place. The active blank is recomputed from target_words and
completed_words on every call and is never kept as a separate index.
"""

from collections.abc import Iterable, Sequence
from typing import Literal

import logfire

from constants import BlankDisplay
from models.alignment_models import ComparisonResult
from models.session_models import (
    ActiveBlank,
    BlankWord,
    PracticeMode,
    PracticeSession,
    ProgressCount,
    ProgressSnapshot,
    SubmissionResult,
    TranslationContext,
    WrongAttempt,
)
from services.translation_matcher import (
    DEFAULT_PREFIX_LENGTH,
    DEFAULT_UNSEGMENTED_MIN_LENGTH,
    acceptable_answers,
)
from utils import normalize_text, percentage, split_words, strip_punctuation

__all__ = [
    "create_session",
    "session_from_comparison",
    "active_blank",
    "session_state",
    "process_submission",
    "render_blank_view",
    "placeholder_for",
    "format_blank_text",
    "progress",
]

SessionState = Literal["active", "session_complete"]


def _first_positions(verse_text: str) -> dict[str, int]:
    positions: dict[str, int] = {}
    for index, word in enumerate(split_words(verse_text)):
        positions.setdefault(normalize_text(word), index)
    return positions


def create_session(
    verse_text: str,
    target_words: Iterable[str],
    mode: PracticeMode = "practice",
    max_rounds: int = 3,
    translation_context: TranslationContext | dict | None = None,
) -> PracticeSession:
    """
    Create a session drilling the given missed words.

    Target words are deduplicated by normalized form and ordered by their first
    occurrence in the verse. Each is stored as it is spelled at that occurrence,
    without punctuation; words that do not occur keep their own spelling
    (punctuation stripped) and their relative order after the ones that do.
    """
    positions = _first_positions(verse_text)
    verse_words = split_words(verse_text)
    seen: set[str] = set()
    unique: list[str] = []
    for word in target_words:
        normalized = normalize_text(word)
        if normalized and normalized not in seen:
            seen.add(normalized)
            if normalized in positions:
                unique.append(strip_punctuation(verse_words[positions[normalized]]))
            else:
                unique.append(strip_punctuation(word))

    ordered = sorted(
        unique,
        key=lambda w: positions.get(normalize_text(w), len(positions)),
    )
    session = PracticeSession(
        verse_text=verse_text if isinstance(verse_text, str) else "",
        target_words=ordered,
        mode=mode,
        max_rounds=max_rounds,
        translation_context=translation_context,
    )
    logfire.debug(
        "Practice session created",
        targets=len(ordered),
        mode=mode,
        max_rounds=max_rounds,
    )
    return session


def session_from_comparison(
    verse_text: str,
    comparison: ComparisonResult,
    mode: PracticeMode = "practice",
    max_rounds: int = 3,
    translation_context: TranslationContext | dict | None = None,
) -> PracticeSession:
    """Seed a session from the incorrect and missing words of a comparison."""
    return create_session(
        verse_text,
        comparison.failed_words(),
        mode=mode,
        max_rounds=max_rounds,
        translation_context=translation_context,
    )


def active_blank(session: PracticeSession) -> ActiveBlank | None:
    """First target word (in verse order) not yet completed this round."""
    completed = set(session.completed_words)
    for word in session.target_words:
        normalized = normalize_text(word)
        if normalized not in completed:
            return ActiveBlank(
                word=word,
                normalized=normalized,
                position=_first_positions(session.verse_text).get(normalized),
            )
    return None


def session_state(session: PracticeSession) -> SessionState:
    return "active" if active_blank(session) is not None else "session_complete"


def _round_finished(session: PracticeSession) -> bool:
    completed = set(session.completed_words)
    return all(normalize_text(word) in completed for word in session.target_words)


def process_submission(
    session: PracticeSession,
    raw_input: object,
    unsegmented_min_length: int = DEFAULT_UNSEGMENTED_MIN_LENGTH,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> tuple[PracticeSession, SubmissionResult]:
    """
    Judge a submission for the active blank and apply it.

    Flow:
        [1] Normalize the input like the alignment engine does
        [2] No active blank -> no-op tagged "session-complete"
        [3] Collect acceptable answers (original word + translations)
        [4] Correct -> complete the word
        [5] Wrong in practice mode -> complete the word anyway, log the attempt
        [6] Wrong in strict mode -> no state change
        [7] Advance the round or finish the session when every target is done

    Args:
        session: Current session state
        raw_input: The learner's submission (non-text counts as an empty answer)

    Returns:
        tuple[PracticeSession, SubmissionResult]: New state and what happened
    """
    # [1]
    attempt = raw_input if isinstance(raw_input, str) else ""
    normalized_input = normalize_text(attempt)

    # [2]
    blank = active_blank(session)
    if blank is None:
        return session, SubmissionResult(reason="session-complete")

    # [3]
    accepted = acceptable_answers(
        session,
        blank.position,
        expected_word=blank.word,
        unsegmented_min_length=unsegmented_min_length,
        prefix_length=prefix_length,
    )
    is_correct = bool(normalized_input) and normalized_input in accepted

    completed_words = list(session.completed_words)
    if blank.normalized not in completed_words:
        completed_words.append(blank.normalized)

    if is_correct:
        # [4]
        updated = session.model_copy(update={"completed_words": completed_words})
        result = SubmissionResult(
            is_correct=True,
            advanced=True,
            expected_word=blank.word,
            matched_language=accepted.language_for(normalized_input),
            reason="correct",
        )
    elif session.mode == "practice":
        # [5]
        wrong_attempts = [
            *session.wrong_attempts,
            WrongAttempt(
                word=blank.word,
                user_attempt=attempt,
                expected_word=blank.word,
                round=session.current_round,
            ),
        ]
        updated = session.model_copy(
            update={
                "completed_words": completed_words,
                "wrong_attempts": wrong_attempts,
            }
        )
        result = SubmissionResult(
            is_correct=False,
            advanced=True,
            expected_word=blank.word,
            reason="practice-pass",
        )
    else:
        # [6]
        return session, SubmissionResult(
            is_correct=False,
            advanced=False,
            expected_word=blank.word,
            reason="strict-rejected",
        )

    # [7]
    if not _round_finished(updated):
        return updated, result

    if updated.current_round < updated.max_rounds:
        next_round = updated.current_round + 1
        logfire.debug("Round complete", round=updated.current_round, next_round=next_round)
        updated = updated.model_copy(
            update={"completed_words": [], "current_round": next_round}
        )
        return updated, result.model_copy(update={"round_completed": True})

    logfire.debug(
        "Session complete",
        rounds=updated.current_round,
        wrong_attempts=len(updated.wrong_attempts),
    )
    return updated, result.model_copy(
        update={"round_completed": True, "session_completed": True}
    )


def placeholder_for(word: str) -> str:
    """Underscores sized to the word without giving its exact length away."""
    length = len(normalize_text(word).replace(" ", ""))
    if length <= BlankDisplay.SHORT_WORD_MAX:
        count = BlankDisplay.SHORT_WORD_MAX
    elif length <= BlankDisplay.MEDIUM_WORD_MAX:
        count = length
    elif length <= BlankDisplay.LONG_WORD_MAX:
        count = min(BlankDisplay.LONG_WORD_CAP, length)
    else:
        count = BlankDisplay.VERY_LONG_WORD_CAP
    return BlankDisplay.PLACEHOLDER * count


def render_blank_view(
    session: PracticeSession,
    keystrokes: str = "",
    letter_echo: bool = False,
) -> list[BlankWord]:
    """
    Project the session onto the verse words for display.

    Only the first occurrence of the active word is interactive; later
    occurrences stay hidden until the word is completed, then reveal.

    Args:
        session: Session to project
        keystrokes: The learner's in-progress input for the active blank
        letter_echo: Show typed characters inside the active blank instead of
            underscores (presentation only)

    Returns:
        list[BlankWord]: One entry per whitespace-delimited verse word
    """
    targets = {normalize_text(word) for word in session.target_words}
    completed = set(session.completed_words)
    blank = active_blank(session)

    view = []
    for index, word in enumerate(split_words(session.verse_text)):
        normalized = normalize_text(word)
        if normalized not in targets:
            kind, display = "regular", word
        elif normalized in completed:
            kind, display = "completed", word
        elif blank is not None and index == blank.position:
            kind = "active_blank"
            display = keystrokes if letter_echo and keystrokes else placeholder_for(word)
        else:
            kind, display = "waiting_blank", placeholder_for(word)
        view.append(BlankWord(word=word, kind=kind, position=index, display=display))
    return view


def format_blank_text(view: Sequence[BlankWord], chars_per_line: int = 35) -> str:
    """Wrap the rendered words into lines of at most chars_per_line characters."""
    lines: list[str] = []
    current = ""
    for entry in view:
        if not current:
            current = entry.display
        elif len(current) + 1 + len(entry.display) > chars_per_line:
            lines.append(current)
            current = entry.display
        else:
            current = f"{current} {entry.display}"
    if current:
        lines.append(current)
    return "\n".join(lines)


def progress(session: PracticeSession) -> ProgressSnapshot:
    """Completed targets this round and across all rounds."""
    total = len(session.target_words)
    completed = set(session.completed_words)
    done = sum(1 for word in session.target_words if normalize_text(word) in completed)

    overall_total = total * session.max_rounds
    overall_done = (session.current_round - 1) * total + done
    return ProgressSnapshot(
        current_round=session.current_round,
        max_rounds=session.max_rounds,
        round=ProgressCount(completed=done, total=total, percentage=percentage(done, total)),
        overall=ProgressCount(
            completed=overall_done,
            total=overall_total,
            percentage=percentage(overall_done, overall_total),
        ),
    )
