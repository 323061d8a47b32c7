"""Local, deterministic platform templates.

Used whenever the hosted model is not configured or fails for a platform.
Every Twitter/X template goes through the thread packer so long content
comes back as a numbered thread.
"""
from __future__ import annotations

import logging
from typing import Callable, Union

from branchout.generators.segmenter import split_sentences
from branchout.generators.thread_generator import pack_thread
from branchout.models.types import Platform, Tone, normalize_platform_id, resolve_platform

logger = logging.getLogger(__name__)

AdaptedContent = Union[str, list[str]]
Formatter = Callable[[str], AdaptedContent]

GENERIC_HASHTAGS = "#content #social"

# (prefix, suffix) per tone
TWITTER_AFFIXES: dict[Tone, tuple[str, str]] = {
    Tone.PROFESSIONAL: ("", "#Business #Insights"),
    Tone.CASUAL: ("", "🙌"),
    Tone.FRIENDLY: ("Hey friends! 👋", "💛"),
    Tone.URGENT: ("🚨 URGENT:", "Don't miss out! ⏰"),
    Tone.INSPIRATIONAL: ("✨", "#Inspiration #Motivation"),
}

PLATFORM_TEMPLATES: dict[tuple[Platform, Tone], str] = {
    (Platform.LINKEDIN, Tone.PROFESSIONAL): (
        "{text}\n\nWhat are your thoughts on this? I'd love to hear your "
        "perspective in the comments.\n\n#Leadership #Innovation #ProfessionalGrowth"
    ),
    (Platform.LINKEDIN, Tone.CASUAL): (
        "{text}\n\nCurious how others see this. Drop a comment! 👇\n\n#Thoughts #Work"
    ),
    (Platform.LINKEDIN, Tone.FRIENDLY): (
        "Hi everyone! 👋\n\n{text}\n\nWould love to connect with anyone working "
        "on something similar.\n\n#Community #Networking"
    ),
    (Platform.LINKEDIN, Tone.URGENT): (
        "⚡ Important update:\n\n{text}\n\nIf this affects your team, now is the "
        "time to act.\n\n#Update #Business"
    ),
    (Platform.LINKEDIN, Tone.INSPIRATIONAL): (
        "{text}\n\nEvery step forward counts. Keep building. 🚀\n\n"
        "#Motivation #Growth #Leadership"
    ),
    (Platform.INSTAGRAM, Tone.PROFESSIONAL): (
        "{text}\n\n📌 Save this for later.\n\n"
        "#business #entrepreneur #success #growth #marketing"
    ),
    (Platform.INSTAGRAM, Tone.CASUAL): (
        "{text} ✌️\n\n#vibes #dailylife #instagood #photooftheday #mood"
    ),
    (Platform.INSTAGRAM, Tone.FRIENDLY): (
        "{text} 💕\n\nTag a friend who needs to see this! 👇\n\n"
        "#friends #community #love #instagood #share"
    ),
    (Platform.INSTAGRAM, Tone.URGENT): (
        "🚨 {text}\n\nLink in bio! ⏰\n\n#limitedtime #dontmissout #news #update #now"
    ),
    (Platform.INSTAGRAM, Tone.INSPIRATIONAL): (
        "✨ {text} ✨\n\nDouble tap if this speaks to you. 💫\n\n"
        "#inspiration #motivation #mindset #goals #believe"
    ),
    (Platform.FACEBOOK, Tone.PROFESSIONAL): (
        "{text}\n\nWhat do you think? Share your thoughts in the comments below."
    ),
    (Platform.FACEBOOK, Tone.CASUAL): (
        "{text} 😄\n\nAnyone else? Let me know in the comments!"
    ),
    (Platform.FACEBOOK, Tone.FRIENDLY): (
        "Hey everyone! 👋\n\n{text}\n\nWould love to hear from you all! 💙"
    ),
    (Platform.FACEBOOK, Tone.URGENT): (
        "⚠️ IMPORTANT: {text}\n\nPlease share this with anyone who needs to know!"
    ),
    (Platform.FACEBOOK, Tone.INSPIRATIONAL): (
        "🌟 {text}\n\nShare this if it inspired you today! 💫"
    ),
    (Platform.THREADS, Tone.CASUAL): "{text}\n\nthoughts? 👀",
    (Platform.THREADS, Tone.FRIENDLY): "{text} 💬\n\nReply and say hi!",
    (Platform.THREADS, Tone.INSPIRATIONAL): "{text} ✨",
}


def supported_tones(platform: Platform) -> frozenset[Tone]:
    if platform is Platform.TWITTER:
        return frozenset(TWITTER_AFFIXES)
    return frozenset(tone for (p, tone) in PLATFORM_TEMPLATES if p is platform)


def select_template(platform_id: str, tone: Tone) -> Formatter:
    """Return the formatter for *platform_id* in *tone*, or the generic one."""
    platform = resolve_platform(platform_id)

    if platform is Platform.TWITTER and tone in TWITTER_AFFIXES:
        return _twitter_formatter(tone)

    template = PLATFORM_TEMPLATES.get((platform, tone))
    if template is None:
        logger.debug("No %s template for %s, using generic format", tone.value, platform_id)
        return generic_formatter(normalize_platform_id(platform_id))

    def _format(text: str) -> str:
        return template.format(text=text.strip())

    return _format


def generic_formatter(platform_id: str) -> Formatter:
    def _format(text: str) -> str:
        return f"{text}\n\n#{platform_id} {GENERIC_HASHTAGS}"

    return _format


def _twitter_formatter(tone: Tone) -> Formatter:
    prefix, suffix = TWITTER_AFFIXES[tone]

    def _format(text: str) -> list[str]:
        return pack_thread(split_sentences(text), prefix=prefix, suffix=suffix, tone=tone)

    return _format
