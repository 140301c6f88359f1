"""Request/response cycle of the wine advisor.

Extraction and ranking run locally. Only the prose comes from the external text
generator; it is time-bounded, and any failure falls back to a templated reply,
so :meth:`SommelierAdvisor.advise` never raises for collaborator problems.
"""

from __future__ import annotations

import asyncio
from uuid import uuid4

from .contracts import AdvisoryRequest, AdvisoryResponse, CatalogItem, PreferenceRecord
from .generator import GeneratorUnavailable, TextGenerator
from .logging_config import get_logger, request_id_ctx
from .pairings import PairingLookup, StaticPairingLookup
from .preferences import extract_preferences, has_recommend_intent
from .prompts import clarification_message, fallback_response, system_prompt, user_prompt
from .ranking import rank_wines
from .settings import settings

logger = get_logger(__name__)


class SommelierAdvisor:
    def __init__(
        self,
        generator: TextGenerator | None = None,
        pairings: PairingLookup | None = None,
        *,
        limit: int | None = None,
        timeout: float | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        self.generator = generator
        self.pairings = pairings or StaticPairingLookup()
        self.limit = limit if limit is not None else settings.RECOMMENDATION_LIMIT
        self.timeout = (
            timeout if timeout is not None else settings.SOMMELIER_GENERATION_TIMEOUT_SECONDS
        )
        self.max_output_tokens = (
            max_output_tokens
            if max_output_tokens is not None
            else settings.SOMMELIER_MAX_OUTPUT_TOKENS
        )

    def _food_pairings(self, preferences: PreferenceRecord) -> list[str]:
        if not preferences.color:
            return []
        return list(self.pairings.pairings_for(preferences.color))

    async def _generate(
        self, request: AdvisoryRequest, recommendations: list[CatalogItem]
    ) -> str | None:
        generator = self.generator
        if generator is None or not getattr(generator, "available", True):
            logger.info("generator_unavailable", reason="not_configured")
            return None
        try:
            text = await asyncio.wait_for(
                generator.generate(
                    system_prompt(request.language),
                    user_prompt(request.message, recommendations),
                    self.max_output_tokens,
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.warning("generator_timeout", timeout_seconds=self.timeout)
            return None
        except GeneratorUnavailable as exc:
            logger.warning("generator_failed", error=str(exc))
            return None
        except Exception:
            logger.exception("generator_error")
            return None
        text = (text or "").strip()
        return text or None

    async def advise(self, request: AdvisoryRequest) -> AdvisoryResponse:
        token = request_id_ctx.set(uuid4().hex[:12])
        try:
            preferences = extract_preferences(request.message, request.language)
            if preferences.is_empty and not has_recommend_intent(request.message):
                logger.info("advice_needs_more_info", language=request.language)
                return AdvisoryResponse(
                    message=clarification_message(request.language),
                    needs_more_info=True,
                    preferences=preferences,
                    source="clarification",
                )

            recommendations = rank_wines(request.wines, preferences, self.limit)
            food_pairings = self._food_pairings(preferences)
            prose = await self._generate(request, recommendations)
            source = "generator" if prose else "fallback"
            if prose is None:
                prose = fallback_response(preferences, recommendations, request.language)

            logger.info(
                "advice_served",
                source=source,
                language=request.language,
                color=preferences.color,
                price_range=preferences.price_range,
                recommendations=len(recommendations),
            )
            return AdvisoryResponse(
                message=prose,
                recommendations=recommendations or None,
                food_pairings=food_pairings or None,
                preferences=preferences,
                source=source,
            )
        finally:
            request_id_ctx.reset(token)

    def advise_sync(self, request: AdvisoryRequest) -> AdvisoryResponse:
        return asyncio.run(self.advise(request))


__all__ = ["SommelierAdvisor"]
