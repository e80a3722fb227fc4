"""
Translation Matcher - which answers are accepted for a blank.

Every language variant of the verse is treated as a parallel, whitespace-
tokenized text and the word at the blank's token index is accepted. This index
mapping is an approximation: it only holds when the variants have a roughly 1:1
word correspondence, which is common for short openings and breaks down as
word order diverges.

Fallback ladder per variant:
    [1] Exact token index
    [2] Unsegmented scripts (Thai, Chinese, Japanese) at position 0 only:
        known verse openings, then a fixed-length character prefix
    [3] Reject (the variant contributes nothing)
"""

from collections.abc import Iterator

import logfire

from constants import UnsegmentedScripts
from models.session_models import PracticeSession, TranslationContext
from utils import normalize_text, split_words

__all__ = [
    "AcceptedAnswers",
    "translated_word_at",
    "acceptable_answers",
]

DEFAULT_UNSEGMENTED_MIN_LENGTH = 10
DEFAULT_PREFIX_LENGTH = 5
LEGACY_TRANSLATION_LANGUAGE = "translated"


class AcceptedAnswers:
    """Set of normalized answers, remembering the language each came from."""

    def __init__(self) -> None:
        self._languages: dict[str, str] = {}

    def add(self, answer: str | None, language: str) -> None:
        normalized = normalize_text(answer)
        # First language to contribute an answer keeps it
        if normalized and normalized not in self._languages:
            self._languages[normalized] = language

    def language_for(self, answer: str) -> str | None:
        """Language that contributed the answer, or None if not accepted."""
        return self._languages.get(normalize_text(answer))

    def __contains__(self, answer: object) -> bool:
        return normalize_text(answer) in self._languages

    def __iter__(self) -> Iterator[str]:
        return iter(self._languages)

    def __len__(self) -> int:
        return len(self._languages)

    def __repr__(self) -> str:
        return f"AcceptedAnswers({self._languages!r})"


def _is_unsegmented(words: list[str], min_length: int) -> bool:
    return len(words) == 1 and len(words[0]) > min_length


def translated_word_at(
    translated_verse: str | None,
    position: int,
    unsegmented_min_length: int = DEFAULT_UNSEGMENTED_MIN_LENGTH,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> str | None:
    """
    Best-effort word of a translated verse at a token index.

    Args:
        translated_verse: Full text of the verse in another language
        position: Token index of the blank in the original verse
        unsegmented_min_length: A single token longer than this is treated as
            an unsegmented script
        prefix_length: Characters taken from an unsegmented verse when no known
            opening matches (clamped to 2..6)

    Returns:
        str | None: The candidate word, or None when nothing can be matched
    """
    words = split_words(translated_verse)
    if not words or position < 0:
        return None

    if _is_unsegmented(words, unsegmented_min_length):
        if position != 0:
            return None
        verse = words[0]
        for opening in UnsegmentedScripts.OPENINGS:
            if verse.startswith(opening):
                return opening
        length = min(
            max(prefix_length, UnsegmentedScripts.MIN_PREFIX_LENGTH),
            UnsegmentedScripts.MAX_PREFIX_LENGTH,
        )
        return verse[:length]

    if position < len(words):
        return words[position]
    return None


def acceptable_answers(
    session: PracticeSession,
    position: int | None,
    expected_word: str | None = None,
    unsegmented_min_length: int = DEFAULT_UNSEGMENTED_MIN_LENGTH,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> AcceptedAnswers:
    """
    Answers accepted for the blank at a token position of the session's verse.

    Args:
        session: Session whose verse and translation context are consulted
        position: Token index of the blank in session.verse_text
        expected_word: The blank's canonical word, accepted even when the
            position cannot be resolved in the verse
        unsegmented_min_length: See translated_word_at
        prefix_length: See translated_word_at

    Returns:
        AcceptedAnswers: The original-language word always; translations only
        when the session carries an enabled TranslationContext
    """
    context = session.translation_context
    if not isinstance(context, TranslationContext):
        context = None
    source_language = context.source_language if context else "en"
    accepted = AcceptedAnswers()

    verse_words = split_words(session.verse_text)
    if position is not None and 0 <= position < len(verse_words):
        accepted.add(verse_words[position], source_language)
    accepted.add(expected_word, source_language)

    if position is None or context is None or not context.is_translated:
        return accepted

    for language, verse in (context.multi_language_translations or {}).items():
        accepted.add(
            translated_word_at(verse, position, unsegmented_min_length, prefix_length),
            language,
        )

    if context.translated_verse:
        accepted.add(
            translated_word_at(
                context.translated_verse,
                position,
                unsegmented_min_length,
                prefix_length,
            ),
            LEGACY_TRANSLATION_LANGUAGE,
        )

    logfire.debug(
        "Acceptable answers resolved",
        position=position,
        answers=len(accepted),
    )
    return accepted
