"""
Accuracy Scorer - turns an alignment into a ComparisonResult.

Strategies:
    - ServerAlignmentScore (primary): correct aligned words / original verse length
    - LocalPositionalScore (fallback): index-by-index comparison with a length
      penalty, used only when the alignment cannot be computed

Both strategies share the same feedback tiers.
"""

from collections.abc import Callable, Sequence

import logfire

from constants import AlignmentSuggestions, FeedbackTiers
from models.alignment_models import (
    AlignmentPair,
    ComparisonResult,
    ScoreFeedback,
    ScoringStrategy,
    WordToken,
)
from services.alignment_engine import align, tokenize
from utils import percentage, round_half_up

__all__ = [
    "server_alignment_score",
    "local_positional_score",
    "feedback_for",
    "build_comparison_result",
    "compare_verses",
    "positional_comparison",
    "with_explanation",
]

Aligner = Callable[[Sequence[WordToken], Sequence[WordToken]], list[AlignmentPair]]


def server_alignment_score(correct_count: int, total_original_words: int) -> int:
    """Percentage of the original verse recited correctly."""
    return percentage(correct_count, total_original_words)


def local_positional_score(user_words: Sequence[str], original_words: Sequence[str]) -> int:
    """Positional (non-aligned) accuracy with a penalty for length mismatch."""
    longest = max(len(user_words), len(original_words))
    if longest == 0:
        return 0

    matches = sum(
        1 for user_word, original_word in zip(user_words, original_words)
        if user_word == original_word
    )
    length_penalty = abs(len(user_words) - len(original_words)) / longest
    accuracy = (matches / longest) * (1 - length_penalty * 0.5)
    return max(0, min(100, round_half_up(accuracy * 100)))


def feedback_for(accuracy: int, explanation: str | None = None) -> ScoreFeedback:
    """
    Map an accuracy score to its feedback tier.

    Args:
        accuracy: Score in [0, 100]
        explanation: Optional free-text explanation from the feedback collaborator

    Returns:
        ScoreFeedback: Tier, fixed message and cumulative suggestions
    """
    if accuracy >= FeedbackTiers.EXCELLENT_MIN:
        tier = "excellent"
    elif accuracy >= FeedbackTiers.GOOD_MIN:
        tier = "good"
    elif accuracy >= FeedbackTiers.FAIR_MIN:
        tier = "fair"
    else:
        tier = "retry"

    suggestions: list[str] = []
    if accuracy < FeedbackTiers.EXCELLENT_MIN:
        suggestions.extend(FeedbackTiers.BELOW_EXCELLENT)
    if accuracy < FeedbackTiers.GOOD_MIN:
        suggestions.extend(FeedbackTiers.BELOW_GOOD)
    if accuracy < FeedbackTiers.FAIR_MIN:
        suggestions.extend(FeedbackTiers.BELOW_FAIR)

    feedback = FeedbackTiers.MESSAGES[tier]
    if explanation and explanation.strip():
        feedback = f"{feedback} {explanation.strip()}"

    return ScoreFeedback(
        tier=tier,
        feedback=feedback,
        suggestions=suggestions,
        explanation=explanation,
    )


def _detailed_feedback(
    correct: int,
    incorrect: int,
    missing: int,
    extra: int,
    total: int,
    version: str | None,
) -> str:
    lines = [f"Analysis for {version or 'your Bible version'}:", ""]
    if total and correct == total and not extra:
        lines.append("Perfect! You memorized the verse exactly as written.")
        return "\n".join(lines)

    lines.append("Word Analysis:")
    lines.append(f"- Correct words: {correct}/{total}")
    if incorrect:
        lines.append(f"- Incorrect words: {incorrect}")
    if missing:
        lines.append(f"- Missing words: {missing}")
    if extra:
        lines.append(f"- Extra words: {extra}")

    focus = []
    if missing:
        focus.append("- Pay attention to words you might have skipped")
    if incorrect:
        focus.append("- Double-check the exact wording of challenging words")
    if extra:
        focus.append("- Practice reciting without adding extra words")
    if focus:
        lines.extend(["", "Focus Areas:", *focus])
    return "\n".join(lines)


def build_comparison_result(
    pairs: Sequence[AlignmentPair],
    total_original_words: int,
    accuracy: int,
    strategy: ScoringStrategy = "server_alignment",
    version: str | None = None,
    explanation: str | None = None,
) -> ComparisonResult:
    """Split pairs into user/original views, count statuses and attach feedback."""
    user_alignment: list[AlignmentPair] = []
    original_alignment: list[AlignmentPair] = []
    counts = {"correct": 0, "incorrect": 0, "missing": 0, "extra": 0}

    for pair in pairs:
        counts[pair.status] += 1
        if pair.status in ("correct", "incorrect", "extra"):
            user_alignment.append(pair)
        if pair.status == "incorrect":
            original_alignment.append(
                pair.model_copy(
                    update={
                        "suggestion": AlignmentSuggestions.YOU_WROTE.format(
                            user=pair.user_word
                        )
                    }
                )
            )
        elif pair.status in ("correct", "missing"):
            original_alignment.append(pair)

    score_feedback = feedback_for(accuracy, explanation)
    return ComparisonResult(
        accuracy=accuracy,
        total_words=total_original_words,
        correct_words=counts["correct"],
        incorrect_words=counts["incorrect"],
        missing_words=counts["missing"],
        extra_words=counts["extra"],
        user_alignment=user_alignment,
        original_alignment=original_alignment,
        feedback=score_feedback.feedback,
        suggestions=score_feedback.suggestions,
        tier=score_feedback.tier,
        strategy=strategy,
        detailed_feedback=_detailed_feedback(
            counts["correct"],
            counts["incorrect"],
            counts["missing"],
            counts["extra"],
            total_original_words,
            version,
        ),
        explanation=score_feedback.explanation,
    )


def positional_comparison(
    user_input: object,
    original_verse: object,
    version: str | None = None,
) -> ComparisonResult:
    """Degraded comparison: word i of the attempt against word i of the verse."""
    user_tokens = tokenize(user_input)
    original_tokens = tokenize(original_verse)
    user = [t.normalized_text for t in user_tokens]
    original = [t.normalized_text for t in original_tokens]

    pairs = []
    for position in range(max(len(user), len(original))):
        user_word = user[position] if position < len(user) else None
        original_word = original[position] if position < len(original) else None
        if user_word and original_word:
            if user_word == original_word:
                pairs.append(
                    AlignmentPair(
                        user_word=user_word,
                        original_word=original_word,
                        status="correct",
                        position=position,
                    )
                )
            else:
                pairs.append(
                    AlignmentPair(
                        user_word=user_word,
                        original_word=original_word,
                        status="incorrect",
                        position=position,
                        suggestion=AlignmentSuggestions.SHOULD_BE.format(
                            original=original_word
                        ),
                    )
                )
        elif user_word:
            pairs.append(
                AlignmentPair(
                    user_word=user_word,
                    status="extra",
                    position=position,
                    suggestion=AlignmentSuggestions.EXTRA,
                )
            )
        else:
            pairs.append(
                AlignmentPair(
                    original_word=original_word,
                    status="missing",
                    position=position,
                    suggestion=AlignmentSuggestions.MISSING,
                )
            )

    accuracy = local_positional_score(user, original)
    return build_comparison_result(
        pairs,
        total_original_words=len(original),
        accuracy=accuracy,
        strategy="local_positional",
        version=version,
    )


def compare_verses(
    user_input: object,
    original_verse: object,
    version: str | None = None,
    aligner: Aligner = align,
) -> ComparisonResult:
    """
    Score a recitation attempt against the original verse.

    Flow:
        [1] Tokenize attempt and verse
        [2] Align via the aligner (edit-distance engine by default)
        [3] Score with ServerAlignmentScore
        [4] If the aligner fails, fall back to LocalPositionalScore

    Args:
        user_input: The learner's typed attempt
        original_verse: The reference verse text
        version: Optional Bible version label for the detailed feedback
        aligner: Alignment collaborator (swappable for a remote implementation)

    Returns:
        ComparisonResult: Always renderable, zeroed for empty or non-text verses
    """
    user_tokens = tokenize(user_input)
    original_tokens = tokenize(original_verse)

    try:
        pairs = aligner(user_tokens, original_tokens)
    except Exception as e:
        logfire.warn(
            "Alignment unavailable, using positional fallback", error=str(e)
        )
        return positional_comparison(user_input, original_verse, version)

    correct = sum(1 for pair in pairs if pair.status == "correct")
    accuracy = server_alignment_score(correct, len(original_tokens))
    result = build_comparison_result(
        pairs,
        total_original_words=len(original_tokens),
        accuracy=accuracy,
        version=version,
    )
    logfire.info(
        "Verse comparison complete",
        accuracy=result.accuracy,
        correct=result.correct_words,
        incorrect=result.incorrect_words,
        missing=result.missing_words,
        extra=result.extra_words,
    )
    return result


def with_explanation(result: ComparisonResult, explanation: str | None) -> ComparisonResult:
    """Attach a collaborator's free-text explanation to an existing result."""
    if not explanation or not explanation.strip():
        return result
    score_feedback = feedback_for(result.accuracy, explanation)
    return result.model_copy(
        update={
            "feedback": score_feedback.feedback,
            "explanation": score_feedback.explanation,
        }
    )
