"""
Alignment Engine - word-level alignment of a recitation against the verse.

Flow:
    [1] Tokenize both texts (whitespace split + shared normalization)
    [2] Build the Wagner-Fischer cost matrix (unit insert/delete/substitute)
    [3] Backtrack from [n][m] to [0][0], classifying each aligned position

Tie-breaking on equal-cost moves is fixed: substitution, then deletion
("extra"), then insertion ("missing"). Expected classifications depend on it.
"""

from collections.abc import Sequence

import logfire

from constants import AlignmentSuggestions
from models.alignment_models import AlignmentPair, WordToken
from utils import normalize_text, split_words

__all__ = [
    "tokenize",
    "build_cost_matrix",
    "align",
]


def tokenize(text: object) -> list[WordToken]:
    """Split text into WordTokens, dropping tokens that normalize to nothing."""
    tokens = []
    for raw in split_words(text):
        normalized = normalize_text(raw)
        if normalized:
            tokens.append(
                WordToken(text=raw, normalized_text=normalized, position=len(tokens))
            )
    return tokens


def _as_tokens(words: Sequence[WordToken | str]) -> list[WordToken]:
    tokens = []
    for word in words:
        if isinstance(word, WordToken):
            tokens.append(word)
        else:
            normalized = normalize_text(word)
            if not normalized:
                continue
            tokens.append(
                WordToken(
                    text=str(word), normalized_text=normalized, position=len(tokens)
                )
            )
    return tokens


def build_cost_matrix(user: Sequence[str], original: Sequence[str]) -> list[list[int]]:
    """Edit-distance matrix of shape (len(user)+1) x (len(original)+1)."""
    n, m = len(user), len(original)
    matrix = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n + 1):
        matrix[i][0] = i
    for j in range(m + 1):
        matrix[0][j] = j

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            if user[i - 1] == original[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i - 1][j],  # deletion (extra user word)
                    matrix[i][j - 1],  # insertion (missing original word)
                )
    return matrix


def align(
    user_words: Sequence[WordToken | str], original_words: Sequence[WordToken | str]
) -> list[AlignmentPair]:
    """
    Compute the minimum-edit-distance alignment of two word sequences.

    Args:
        user_words: The learner's words (WordTokens or plain strings)
        original_words: The verse's words (WordTokens or plain strings)

    Returns:
        list[AlignmentPair]: Pairs in aligned order with positions 0..k-1
    """
    user = [t.normalized_text for t in _as_tokens(user_words)]
    original = [t.normalized_text for t in _as_tokens(original_words)]
    matrix = build_cost_matrix(user, original)

    unreachable = len(user) + len(original) + 1
    reversed_pairs: list[dict] = []
    i, j = len(user), len(original)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and user[i - 1] == original[j - 1]:
            reversed_pairs.append(
                {
                    "user_word": user[i - 1],
                    "original_word": original[j - 1],
                    "status": "correct",
                }
            )
            i, j = i - 1, j - 1
            continue

        substitution = matrix[i - 1][j - 1] + 1 if i > 0 and j > 0 else unreachable
        deletion = matrix[i - 1][j] + 1 if i > 0 else unreachable
        insertion = matrix[i][j - 1] + 1 if j > 0 else unreachable
        best = min(substitution, deletion, insertion)

        if substitution == best:
            reversed_pairs.append(
                {
                    "user_word": user[i - 1],
                    "original_word": original[j - 1],
                    "status": "incorrect",
                    "suggestion": AlignmentSuggestions.SHOULD_BE.format(
                        original=original[j - 1]
                    ),
                }
            )
            i, j = i - 1, j - 1
        elif deletion == best:
            reversed_pairs.append(
                {
                    "user_word": user[i - 1],
                    "status": "extra",
                    "suggestion": AlignmentSuggestions.EXTRA,
                }
            )
            i -= 1
        else:
            reversed_pairs.append(
                {
                    "original_word": original[j - 1],
                    "status": "missing",
                    "suggestion": AlignmentSuggestions.MISSING,
                }
            )
            j -= 1

    pairs = [
        AlignmentPair(position=position, **fields)
        for position, fields in enumerate(reversed(reversed_pairs))
    ]
    logfire.debug(
        "Alignment computed",
        user_words=len(user),
        original_words=len(original),
        distance=matrix[len(user)][len(original)],
    )
    return pairs
