"""Service for caching generated session summaries with diskcache."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import diskcache
import logfire

from models.session_models import SessionCompletion, SessionSummary


@dataclass
class SummaryCacheService:
    """Caches session summaries keyed on the verse and the learner's mistakes."""

    cache_dir: Path
    cache_size_mb: int
    _cache: diskcache.Cache = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Initialize diskcache.Cache with cache_dir and size_limit parameters."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

            size_limit_bytes = self.cache_size_mb * 1024 * 1024
            self._cache = diskcache.Cache(
                str(self.cache_dir), size_limit=size_limit_bytes
            )
            logfire.info(
                f"SummaryCacheService initialized with cache_dir={self.cache_dir}, size_limit={self.cache_size_mb}MB"
            )
        except Exception as e:
            logfire.error(f"Failed to initialize diskcache: {e}")
            self._cache = None

    @staticmethod
    def cache_key(completion: SessionCompletion) -> tuple:
        """Identical verse, mistakes and first-attempt words share a summary."""
        mistakes = tuple(
            (a.expected_word.lower(), a.user_attempt.strip().lower())
            for a in completion.wrong_attempts
        )
        return (
            completion.verse_text.strip(),
            mistakes,
            tuple(sorted(completion.correct_first_attempt)),
        )

    def get_or_generate(
        self,
        completion: SessionCompletion,
        generate: Callable[[SessionCompletion], SessionSummary],
    ) -> SessionSummary:
        """Return a cached summary or generate and store one.

        Args:
            completion: Terminal session data
            generate: Called on a cache miss

        Returns:
            SessionSummary: Cached or freshly generated summary

        Raises:
            Exception: Whatever generate raises on a cache miss
        """
        if self._cache is None:
            logfire.warning("Cache not available, generating summary directly")
            return generate(completion)

        key = self.cache_key(completion)
        try:
            cached = self._cache.get(key)
            if cached is not None:
                summary = SessionSummary.model_validate(cached)
                logfire.debug("Summary cache hit", verse=completion.verse_text[:50])
                return summary
        except Exception as e:
            # Unreadable or stale entries are regenerated and overwritten
            logfire.warning("Ignoring unusable cached summary", error=str(e))

        logfire.debug("Summary cache miss", verse=completion.verse_text[:50])
        summary = generate(completion)

        try:
            self._cache[key] = summary.model_dump()
        except Exception as e:
            logfire.warning(f"Failed to cache summary: {e}")

        return summary

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
