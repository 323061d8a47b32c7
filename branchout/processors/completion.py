from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any

import anthropic

from branchout.errors import RemoteUnavailable
from branchout.models.types import Platform, Style, Tone, resolve_platform

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-latest"

PLATFORM_INSTRUCTIONS: dict[Platform, str] = {
    Platform.INSTAGRAM: """Create an Instagram-optimized version of this content:
- Keep it visual and engaging
- Use relevant emojis sparingly
- Include 5-10 relevant hashtags at the end
- Maximum 2200 characters
- Focus on visual storytelling""",
    Platform.LINKEDIN: """Create a LinkedIn-optimized version of this content:
- Professional tone
- Focus on value and insights
- Include a call-to-action
- Maximum 3000 characters
- Use professional language""",
    Platform.TWITTER: """Create a Twitter/X-optimized version of this content:
- Concise and punchy
- Maximum 280 characters (or create a thread if needed)
- Use 1-3 relevant hashtags
- Make it shareable and engaging""",
    Platform.FACEBOOK: """Create a Facebook-optimized version of this content:
- Conversational tone
- Encourage engagement and discussion
- Include a question or call-to-action
- Can be longer form but keep it engaging""",
    Platform.THREADS: """Create a Threads-optimized version of this content:
- Short and conversational
- Maximum 500 characters
- At most one hashtag
- End with something people can reply to""",
}

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def build_adaptation_prompt(instruction: str, content: str, tone: Tone, style: Style) -> str:
    return (
        f"{instruction}\n\n"
        f'Original content:\n"{content}"\n\n'
        f"Tone: {tone.value}\n"
        f"Style: {style.value}\n\n"
        "Please provide only the adapted content without any explanations "
        "or meta-commentary."
    )


def strip_json_fences(text: str) -> str:
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


class RemoteCompleter:
    """Hosted text completion over the Anthropic Messages API.

    The SDK client is blocking; the async entry points push each call onto a
    worker thread so several platforms can be in flight at once. Every
    failure surfaces as :class:`RemoteUnavailable`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
        timeout: float = 30.0,
        client: Any = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("An Anthropic API key is required")
            client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    def has_instruction(self, platform_id: str) -> bool:
        return resolve_platform(platform_id) in PLATFORM_INSTRUCTIONS

    def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        """Send a single user prompt and return the stripped text reply."""
        try:
            message = self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise RemoteUnavailable(f"Completion request failed: {exc}") from exc

        parts = [
            block.text
            for block in getattr(message, "content", None) or []
            if getattr(block, "type", None) == "text"
        ]
        text = "".join(parts).strip()
        if not text:
            raise RemoteUnavailable("Completion returned no text")
        return text

    async def adapt(self, platform_id: str, content: str, tone: Tone, style: Style) -> str:
        instruction = PLATFORM_INSTRUCTIONS.get(resolve_platform(platform_id))
        if instruction is None:
            raise RemoteUnavailable(f"No remote instruction for platform {platform_id!r}")

        prompt = build_adaptation_prompt(instruction, content, tone, style)
        logger.debug("Requesting remote adaptation for %s", platform_id)
        return await asyncio.to_thread(self.complete, prompt)

    def generate_hashtags(self, content: str, platform: str, count: int = 10) -> list[str]:
        prompt = (
            f"Generate {count} relevant hashtags for this {platform} post:\n"
            f'"{content}"\n\n'
            "Provide only the hashtags, separated by spaces, without the # symbol."
        )
        text = self.complete(prompt, max_tokens=256)
        return [f"#{tag.lstrip('#').lower()}" for tag in text.split() if tag.lstrip("#")]

    def improve(self, content: str, feedback: str) -> str:
        prompt = (
            "Improve this social media content based on the feedback:\n\n"
            f'Original content:\n"{content}"\n\n'
            f'Feedback:\n"{feedback}"\n\n'
            "Provide only the improved content without explanations."
        )
        return self.complete(prompt)

    def analyze_tone(self, content: str) -> dict[str, Any]:
        prompt = (
            "Analyze the tone of this social media content and provide a brief "
            f'assessment:\n\n"{content}"\n\n'
            "Provide a JSON response with:\n"
            "{\n"
            '  "tone": "primary tone (professional/casual/friendly/urgent/etc)",\n'
            '  "sentiment": "positive/negative/neutral",\n'
            '  "engagementLevel": "high/medium/low",\n'
            '  "suggestions": ["suggestion 1", "suggestion 2"]\n'
            "}"
        )
        text = self.complete(prompt, max_tokens=256)
        try:
            analysis = json.loads(strip_json_fences(text))
        except json.JSONDecodeError as exc:
            raise RemoteUnavailable(f"Tone analysis was not valid JSON: {exc}") from exc
        if not isinstance(analysis, dict):
            raise RemoteUnavailable("Tone analysis was not a JSON object")
        return analysis
