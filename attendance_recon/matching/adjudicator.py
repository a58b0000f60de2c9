"""LLM adjudication of ambiguous name matches.

Handles what rule-based scoring can't decide on its own:
- Abbreviations (Muh. -> Muhammad)
- Nicknames and handles (adinafadillah -> Adina Fadillah Balqis)
- Rejecting matches that only share a common word (Dwi, Putri)

The oracle is untrusted: every verdict is validated against the request
and failed attempts are retried with exponential backoff. Exhausted
retries degrade to a "no match" verdict instead of raising.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

import structlog
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from attendance_recon.config import settings
from attendance_recon.matching.exceptions import (
    AdjudicationValidationError,
    ConfigurationError,
)
from attendance_recon.matching.prompts import build_adjudication_prompt
from attendance_recon.matching.schemas import Adjudication, MatchType
from attendance_recon.services.llm_client import LLMClient

logger = structlog.get_logger()


@runtime_checkable
class Adjudicator(Protocol):
    """Protocol for oracles that confirm or deny a candidate name match."""

    async def adjudicate(
        self, target_name: str, candidate_names: Sequence[str]
    ) -> Adjudication:
        """Return a verdict for target_name against candidate_names."""
        ...

    def check_ready(self) -> None:
        """Raise ConfigurationError if the oracle cannot be called."""
        ...


def validate_adjudication(
    verdict: Adjudication,
    target_name: str,
    candidate_names: Sequence[str],
) -> None:
    """Check an oracle verdict against the request that produced it.

    Args:
        verdict: Parsed oracle response
        target_name: Name that was sent for adjudication
        candidate_names: Candidates offered in the same request

    Raises:
        AdjudicationValidationError: If the verdict echoes a different
            name, has an out-of-range confidence, or picks a name that
            was not offered
    """
    if verdict.zoom_name != target_name:
        raise AdjudicationValidationError(
            f"zoomName mismatch: expected {target_name!r}, got {verdict.zoom_name!r}"
        )
    if not 0.0 <= verdict.confidence <= 1.0:
        raise AdjudicationValidationError(
            f"confidence out of range: {verdict.confidence}"
        )
    if verdict.best_match is not None and verdict.best_match not in candidate_names:
        raise AdjudicationValidationError(
            f"bestMatch {verdict.best_match!r} is not one of the candidates"
        )


class LLMAdjudicator:
    """Adjudicates name matches with an LLM oracle.

    Attempts are sequential. Before retry n (n >= 1) the adjudicator
    waits backoff_seconds * 2^(n-1) seconds, which is 2s then 4s with
    the defaults.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        temperature: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize with LLM client and retry policy.

        Args:
            llm_client: Client for making LLM requests
            max_retries: Retries after the first attempt (default from settings)
            backoff_seconds: Backoff multiplier (default from settings)
            temperature: Sampling temperature (default from settings)
            sleep: Coroutine used to wait between attempts
        """
        self._llm_client = llm_client
        self._max_retries = (
            settings.adjudication_max_retries if max_retries is None else max_retries
        )
        self._backoff_seconds = (
            settings.adjudication_backoff_seconds
            if backoff_seconds is None
            else backoff_seconds
        )
        self._temperature = (
            settings.adjudication_temperature if temperature is None else temperature
        )
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def check_ready(self) -> None:
        """Fail fast when no API credential is configured.

        Raises:
            ConfigurationError: If the LLM client has no credential
        """
        if not self._llm_client.is_configured:
            raise ConfigurationError(
                "Anthropic API key not found. Set ANTHROPIC_API_KEY environment variable."
            )

    async def adjudicate(
        self,
        target_name: str,
        candidate_names: Sequence[str],
    ) -> Adjudication:
        """Ask the oracle whether target_name matches one of the candidates.

        Args:
            target_name: Name to adjudicate (echoed back as zoomName)
            candidate_names: Names the oracle may choose from

        Returns:
            Validated verdict, or a zero-confidence "ai-inferred" verdict
            with bestMatch=None once all attempts have failed
        """
        candidates = list(candidate_names)
        prompt = build_adjudication_prompt(target_name, candidates)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self._backoff_seconds, max=60),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(logger, log_level=logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            verdict = await retrying(
                self._attempt, prompt, target_name, candidates
            )
        except Exception as e:
            logger.warning(
                "adjudication exhausted",
                zoom_name=target_name,
                attempts=self.max_attempts,
                last_error=str(e),
            )
            return Adjudication(
                zoom_name=target_name,
                best_match=None,
                confidence=0.0,
                reason=(
                    f"AI adjudication failed after {self.max_attempts} attempts: {e}"
                ),
                match_type=MatchType.AI_INFERRED,
            )

        logger.debug(
            "adjudication verdict",
            zoom_name=target_name,
            best_match=verdict.best_match,
            confidence=verdict.confidence,
            match_type=verdict.match_type.value if verdict.match_type else None,
        )
        return verdict

    async def _attempt(
        self,
        prompt: str,
        target_name: str,
        candidates: list[str],
    ) -> Adjudication:
        verdict = await self._llm_client.extract(
            prompt, Adjudication, temperature=self._temperature
        )
        validate_adjudication(verdict, target_name, candidates)
        return verdict
