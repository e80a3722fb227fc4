"""Application constants."""


# Text normalization
PUNCTUATION = ".,!?;:\"'"


class FeedbackTiers:
    """Accuracy thresholds and the fixed feedback attached to each tier."""

    EXCELLENT_MIN = 90
    GOOD_MIN = 70
    FAIR_MIN = 50

    MESSAGES = {
        "excellent": "Excellent work! You nailed it!",
        "good": "Good job! You're getting there!",
        "fair": "Good effort! Keep practicing!",
        "retry": "Don't give up! Practice makes perfect!",
    }

    # Suggestions are cumulative: a lower tier gets every suggestion above it too
    BELOW_EXCELLENT = [
        "Try reading the verse aloud several times before memorizing",
        "Focus on understanding the meaning of each phrase",
    ]
    BELOW_GOOD = [
        "Break the verse into smaller chunks and memorize piece by piece",
        "Practice writing the verse by hand to improve retention",
    ]
    BELOW_FAIR = [
        "Start with shorter verses to build confidence",
        "Use memory techniques like visualization or rhythm",
    ]


class AlignmentSuggestions:
    """Per-word hints attached to alignment pairs."""

    SHOULD_BE = 'Should be "{original}"'
    YOU_WROTE = 'You wrote "{user}"'
    EXTRA = "This word should be removed"
    MISSING = "This word was missing from your answer"


class UnsegmentedScripts:
    """Verse openings for scripts written without spaces between words."""

    OPENINGS = [
        "เพราะ",  # Thai "For/Because"
        "因为",  # Chinese "Because"
        "神爱世人",  # Chinese "God loves the world"
        "神愛世人",  # Traditional Chinese
        "神は世を愛し",  # Japanese
    ]

    MIN_PREFIX_LENGTH = 2
    MAX_PREFIX_LENGTH = 6


class BlankDisplay:
    """Placeholder sizing for rendered blanks."""

    PLACEHOLDER = "_"
    SHORT_WORD_MAX = 3
    MEDIUM_WORD_MAX = 6
    LONG_WORD_MAX = 10
    LONG_WORD_CAP = 8
    VERY_LONG_WORD_CAP = 10


class SessionSummaryDefaults:
    """Summaries used when the feedback collaborator is skipped or unavailable."""

    PERFECT = {
        "feedback": "Outstanding work! You completed all fill-in-the-blank words correctly!",
        "analysis": "You demonstrated excellent recall and accuracy throughout your practice session.",
        "strategies": [
            "Continue practicing regularly to maintain this level of mastery",
            "Try challenging yourself with longer verses",
            "Consider practicing under time pressure to build confidence",
        ],
        "next_steps": "Move on to a new verse or review this one again tomorrow.",
        "encouragement": "Keep up the great work!",
    }

    FALLBACK = {
        "feedback": "Practice session complete. Review the words you missed below.",
        "analysis": "Focus on the words that gave you trouble and try the verse again.",
        "strategies": [
            "Say the missed words aloud in the context of the full verse",
            "Practice the verse again after a short break",
        ],
        "next_steps": "Start another round with this verse when you are ready.",
        "encouragement": "Every practice session makes the verse stick a little better!",
    }
