"""
Feedback Service - Gemini-backed natural-language feedback collaborator.

Flow:
    [1] Receive terminal session data (or a ComparisonResult) from the core
    [2] Perfect session shortcut: fixed praise, no API call
    [3] Ask Gemini for a structured SessionSummary (cached on disk)
    [4] Optional free-text explanation of a recitation score

The scoring and session core never depends on this service for correctness;
its output is opaque display text.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

from google import genai
from google.genai import types
import logfire
from pydantic import ValidationError

from config import AppConfig
from constants import SessionSummaryDefaults
from exceptions import (
    ConfigurationError,
    FeedbackGenerationError,
    InvalidFeedbackResponseError,
)
from models.alignment_models import ComparisonResult
from models.session_models import SessionCompletion, SessionSummary
from prompts import (
    PRACTICE_SUMMARY_SYSTEM_PROMPT,
    SCORE_EXPLANATION_SYSTEM_PROMPT,
    build_practice_summary_prompt,
    build_score_explanation_prompt,
)
from services.summary_cache import SummaryCacheService


@dataclass
class GeminiFeedbackService:
    """
    Generates end-of-session summaries and score explanations with Gemini.

    Designed as a long-lived instance (one per hosting application).
    """

    config: AppConfig
    _cache: SummaryCacheService | None = field(default=None, init=False, repr=False)
    _executor: ThreadPoolExecutor = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Initialize the summary cache and thread pool for async operations."""
        # Thread pool for running sync Gemini calls in async context
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="gemini")

        if self.config.summary_cache_enabled:
            self._cache = SummaryCacheService(
                cache_dir=Path(self.config.summary_cache_dir),
                cache_size_mb=self.config.summary_cache_size_mb,
            )

    @cached_property
    def client(self) -> genai.Client:
        """Gemini API client (cached for service lifetime)."""
        if not self.config.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        return genai.Client(api_key=self.config.gemini_api_key)

    def generate_practice_summary(self, completion: SessionCompletion) -> SessionSummary:
        """
        Summarize a finished practice session.

        Args:
            completion: First-attempt results and the wrong-attempt log

        Returns:
            SessionSummary: Learner-facing summary

        Raises:
            FeedbackGenerationError: Gemini call failed
            InvalidFeedbackResponseError: Gemini returned unusable output
        """
        if not completion.wrong_attempts:
            logfire.info("Perfect session, using template summary")
            return SessionSummary(**SessionSummaryDefaults.PERFECT)

        if self._cache is not None:
            return self._cache.get_or_generate(completion, self._summarize_with_gemini)
        return self._summarize_with_gemini(completion)

    async def generate_practice_summary_async(
        self, completion: SessionCompletion
    ) -> SessionSummary:
        """Run generate_practice_summary in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, self.generate_practice_summary, completion
        )

    def _summarize_with_gemini(self, completion: SessionCompletion) -> SessionSummary:
        prompt = build_practice_summary_prompt(completion)
        try:
            response = self.client.models.generate_content(
                model=self.config.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=PRACTICE_SUMMARY_SYSTEM_PROMPT,
                    temperature=self.config.feedback_temperature,
                    max_output_tokens=self.config.feedback_max_output_tokens,
                    response_mime_type="application/json",
                    response_schema=SessionSummary,
                    thinking_config=types.ThinkingConfig(
                        thinking_budget=self.config.feedback_thinking_budget
                    ),
                ),
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logfire.error("Gemini summary request failed", error=str(e))
            raise FeedbackGenerationError(
                f"Gemini summary request failed: {e}",
                details={"model": self.config.model_name},
            ) from e

        summary = self._parse_summary_response(response)
        usage = getattr(response, "usage_metadata", None)
        logfire.info(
            "Gemini summary complete",
            prompt_tokens=getattr(usage, "prompt_token_count", None),
            output_tokens=getattr(usage, "candidates_token_count", None),
            strategies=len(summary.strategies),
        )
        return summary

    def _parse_summary_response(
        self, response: types.GenerateContentResponse
    ) -> SessionSummary:
        """
        Parse Gemini structured output into SessionSummary.

        The Gemini client returns the structured object in `response.parsed` when
        `response_schema` is provided, so no manual JSON parsing is needed.
        """
        parsed = getattr(response, "parsed", None)
        text_preview = (getattr(response, "text", None) or "")[:300]
        candidates = getattr(response, "candidates", None) or []
        finish_reasons = [getattr(c, "finish_reason", None) for c in candidates]

        if parsed is None:
            logfire.error(
                "Gemini returned no structured output",
                model=self.config.model_name,
                text_preview=text_preview,
                candidate_count=len(candidates),
                finish_reasons=finish_reasons,
            )
            raise InvalidFeedbackResponseError("Gemini returned no structured output")

        if hasattr(parsed, "model_dump"):
            parsed = parsed.model_dump()

        try:
            return SessionSummary.model_validate(parsed)
        except ValidationError as e:
            logfire.error(
                "Invalid Gemini structured output",
                error=str(e),
                model=self.config.model_name,
                text_preview=text_preview,
                finish_reasons=finish_reasons,
            )
            raise InvalidFeedbackResponseError(
                f"Invalid Gemini structured output: {e}"
            ) from e

    def explain_score(self, comparison: ComparisonResult) -> str | None:
        """Short free-text explanation of a recitation score, or None on failure."""
        if comparison.total_words == 0:
            return None
        try:
            response = self.client.models.generate_content(
                model=self.config.model_name,
                contents=build_score_explanation_prompt(comparison),
                config=types.GenerateContentConfig(
                    system_instruction=SCORE_EXPLANATION_SYSTEM_PROMPT,
                    temperature=self.config.feedback_temperature,
                    max_output_tokens=self.config.feedback_max_output_tokens,
                ),
            )
        except Exception as e:
            logfire.warn("Score explanation unavailable", error=str(e))
            return None

        text = (getattr(response, "text", None) or "").strip()
        return text or None

    async def explain_score_async(self, comparison: ComparisonResult) -> str | None:
        """Run explain_score in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.explain_score, comparison)
