from __future__ import annotations

import asyncio
import logging
from typing import Any

from branchout.generators.segmenter import split_sentences
from branchout.generators.templates import select_template
from branchout.generators.thread_generator import CHAR_LIMIT, pack_thread, twitter_length
from branchout.models.types import (
    AdaptationRequest,
    Platform,
    PlatformResult,
    Style,
    Tone,
    resolve_platform,
)
from branchout.processors.completion import RemoteCompleter

logger = logging.getLogger(__name__)


class Adapter:
    """Adapts one piece of content for several platforms at once.

    Each platform tries the hosted model first (when configured) and falls
    back to its local template on any failure. Platforms never affect each
    other: one failing does not stop the rest.
    """

    def __init__(
        self,
        completer: RemoteCompleter | None = None,
        remote_timeout: float | None = 30.0,
    ) -> None:
        self.completer = completer
        self.remote_timeout = remote_timeout

    def adapt(
        self,
        content: str,
        platforms: list[str],
        tone: Any = Tone.PROFESSIONAL,
        style: Any = Style.ENGAGING,
    ) -> dict[str, PlatformResult]:
        return asyncio.run(self.adapt_async(content, platforms, tone, style))

    async def adapt_async(
        self,
        content: str,
        platforms: list[str],
        tone: Any = Tone.PROFESSIONAL,
        style: Any = Style.ENGAGING,
    ) -> dict[str, PlatformResult]:
        request = AdaptationRequest.build(content, platforms, tone, style)
        logger.info(
            "Adapting content for %s (tone=%s, style=%s)",
            ", ".join(request.platforms), request.tone.value, request.style.value,
        )

        outcomes = await asyncio.gather(
            *(self._adapt_platform(request, platform_id) for platform_id in request.platforms)
        )
        return dict(zip(request.platforms, outcomes))

    async def _adapt_platform(self, request: AdaptationRequest, platform_id: str) -> PlatformResult:
        if self.completer is not None and self.completer.has_instruction(platform_id):
            try:
                text = await asyncio.wait_for(
                    self.completer.adapt(platform_id, request.content, request.tone, request.style),
                    timeout=self.remote_timeout,
                )
                return PlatformResult(
                    status="success",
                    adapted_content=_shape_remote(platform_id, text),
                    source="remote",
                )
            except Exception as exc:
                logger.warning(
                    "Remote adaptation for %s failed, using local template: %s",
                    platform_id, str(exc) or type(exc).__name__,
                )

        return self._adapt_locally(request, platform_id)

    def _adapt_locally(self, request: AdaptationRequest, platform_id: str) -> PlatformResult:
        try:
            formatter = select_template(platform_id, request.tone)
            adapted = formatter(request.content)
        except Exception as exc:
            logger.exception("Local template failed for %s: %s", platform_id, exc)
            return PlatformResult(status="error", adapted_content=None, error=str(exc))
        return PlatformResult(status="success", adapted_content=adapted, source="template")


def _shape_remote(platform_id: str, text: str) -> str | list[str]:
    if resolve_platform(platform_id) is not Platform.TWITTER:
        return text
    if twitter_length(text) <= CHAR_LIMIT:
        return [text]
    return pack_thread(split_sentences(text))
