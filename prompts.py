"""Prompts for Gemini feedback on verse recitation and practice sessions."""

import json

import logfire

from models.alignment_models import ComparisonResult
from models.session_models import SessionCompletion

PRACTICE_SUMMARY_SYSTEM_PROMPT = """You are a warm, encouraging Bible memorization coach.

<constraints>
- Be encouraging and supportive
- Talk about the specific words the learner missed, never invent others
- Keep each field short: one or two sentences, strategies max 3 items
- Use simple language
</constraints>

<examples>
Input: Verse="For God so loved the world" Missed=[{"expected":"world","typed":"earth"}] FirstAttempt=["loved"] Accuracy=50
Output: {"feedback":"Nice work getting through every blank!","analysis":"You wrote 'earth' where the verse says 'world', a natural swap with the same meaning.","strategies":["Picture the whole world when you reach the end of the verse","Say the last phrase aloud three times"],"next_steps":"Run one more round focusing on the ending.","encouragement":"You're close to having this verse by heart!"}
</examples>"""


SCORE_EXPLANATION_SYSTEM_PROMPT = """You explain verse recitation results to a learner.

<constraints>
- One or two encouraging sentences
- Mention at most two specific words
- Plain text only, no lists or markdown
</constraints>"""


def build_practice_summary_prompt(completion: SessionCompletion) -> str:
    """Build the end-of-session summary prompt from the attempt log."""
    missed = [
        {
            "expected": attempt.expected_word,
            "typed": attempt.user_attempt,
            "round": attempt.round,
        }
        for attempt in completion.wrong_attempts
    ]

    logfire.info(
        "Building practice summary prompt",
        missed=len(missed),
        first_attempt=len(completion.correct_first_attempt),
        accuracy=completion.first_attempt_accuracy,
    )

    return f"""<task>
Summarize a fill-in-the-blank practice session for a learner memorizing a verse.
</task>

<input>
Verse: "{completion.verse_text}"
Rounds: {completion.rounds}
First-attempt accuracy: {completion.first_attempt_accuracy}
Correct on first attempt: {json.dumps(completion.correct_first_attempt, ensure_ascii=False)}
</input>

<data>
{json.dumps(missed, indent=2, ensure_ascii=False)}
</data>

<instructions>
1. feedback: overall reaction to the session
2. analysis: what the missed words have in common (meaning swaps, skipped small words, spelling)
3. strategies: up to 3 concrete memorization tips for these words
4. next_steps: what to practice next
5. encouragement: one closing sentence
</instructions>

Return JSON:
{{"feedback":"<text>","analysis":"<text>","strategies":["<tip>"],"next_steps":"<text>","encouragement":"<text>"}}"""


def build_score_explanation_prompt(comparison: ComparisonResult) -> str:
    """Build the prompt for a short free-text explanation of a recitation score."""
    mistakes = [
        {
            "status": pair.status,
            "expected": pair.original_word,
            "typed": pair.user_word,
        }
        for pair in comparison.user_alignment + comparison.original_alignment
        if pair.status != "correct"
    ]
    # Incorrect pairs appear in both views
    unique_mistakes = list({json.dumps(m, sort_keys=True): m for m in mistakes}.values())

    return f"""<input>
Accuracy: {comparison.accuracy}%
Correct words: {comparison.correct_words}/{comparison.total_words}
</input>

<data>
{json.dumps(unique_mistakes, indent=2, ensure_ascii=False)}
</data>

Explain the result to the learner."""
