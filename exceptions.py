"""Custom exceptions for the verse practice engine.

The scoring and session core never raises for ordinary input; these exist for
the feedback collaborator boundary.
"""


class PracticeEngineError(Exception):
    """Raised by the feedback adapter; caught by SessionOrchestrator.summarize.

    The orchestrator logs `error_type` and swaps in a fixed summary, so a
    failure here never reaches the learner or alters a score.

    Attributes:
        message: What went wrong, safe to log
        details: Request context such as the Gemini model name
        error_type: "configuration", "feedback_generation" or "invalid_response"
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        error_type: str = "general",
    ):
        self.message = message
        self.details = details or {}
        self.error_type = error_type
        super().__init__(self.message)


class ConfigurationError(PracticeEngineError):
    """Missing or unusable configuration (e.g. no Gemini API key)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, error_type="configuration")


class FeedbackGenerationError(PracticeEngineError):
    """The feedback collaborator could not produce a summary."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, error_type="feedback_generation")


class InvalidFeedbackResponseError(PracticeEngineError):
    """Invalid structured response from Gemini."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, error_type="invalid_response")
