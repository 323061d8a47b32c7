from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from branchout.errors import InputError

logger = logging.getLogger(__name__)

THREAD_SEPARATOR = "\n\n---\n\n"


class Platform(str, enum.Enum):
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    THREADS = "threads"
    UNKNOWN = "unknown"


_PLATFORM_ALIASES: dict[str, Platform] = {
    "twitter": Platform.TWITTER,
    "x": Platform.TWITTER,
    "twitter/x": Platform.TWITTER,
    "linkedin": Platform.LINKEDIN,
    "instagram": Platform.INSTAGRAM,
    "facebook": Platform.FACEBOOK,
    "threads": Platform.THREADS,
}


def normalize_platform_id(identifier: str) -> str:
    return identifier.strip().lower()


def resolve_platform(identifier: str) -> Platform:
    """Map a requested platform identifier onto a known platform, or UNKNOWN."""
    return _PLATFORM_ALIASES.get(normalize_platform_id(identifier), Platform.UNKNOWN)


class Tone(str, enum.Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    FRIENDLY = "friendly"
    URGENT = "urgent"
    INSPIRATIONAL = "inspirational"

    @classmethod
    def parse(cls, value: Any) -> Tone:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise InputError(f"Unrecognized tone {value!r}. Choose from {valid}") from None


class Style(str, enum.Enum):
    ENGAGING = "engaging"
    INFORMATIVE = "informative"
    STORYTELLING = "storytelling"
    PROMOTIONAL = "promotional"


class ContentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PostStatus(str, enum.Enum):
    PENDING = "pending"
    POSTED = "posted"


@dataclass
class ContentItem:
    """A piece of original text submitted by one user."""

    id: str
    user_id: str
    title: str | None
    original_content: str
    created_at: datetime
    content_type: str = "post"
    status: ContentStatus = ContentStatus.DRAFT


@dataclass
class AdaptationRequest:
    """The validated input of one adaptation call. Never persisted."""

    content: str
    platforms: list[str] = field(default_factory=list)
    tone: Tone = Tone.PROFESSIONAL
    style: Style = Style.ENGAGING

    @classmethod
    def build(
        cls,
        content: str | None,
        platforms: list[str] | None,
        tone: Any = Tone.PROFESSIONAL,
        style: Any = Style.ENGAGING,
    ) -> AdaptationRequest:
        if not isinstance(content, str) or not content.strip():
            raise InputError("Content is required")
        if not platforms or not isinstance(platforms, (list, tuple)):
            raise InputError("Platforms array is required")

        seen: list[str] = []
        for platform in platforms:
            if not isinstance(platform, str) or not platform.strip():
                raise InputError(f"Invalid platform identifier {platform!r}")
            key = normalize_platform_id(platform)
            if key not in seen:
                seen.append(key)

        return cls(
            content=content,
            platforms=seen,
            tone=Tone.parse(tone),
            style=_parse_style(style),
        )


def _parse_style(value: Any) -> Style:
    if isinstance(value, Style):
        return value
    try:
        return Style(str(value).strip().lower())
    except ValueError:
        logger.warning("Unrecognized style %r, using %s", value, Style.ENGAGING.value)
        return Style.ENGAGING


@dataclass
class PlatformResult:
    """Outcome of adapting content for a single platform."""

    status: str
    adapted_content: str | list[str] | None
    error: str | None = None
    source: str = "template"

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "adaptedContent": self.adapted_content,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


def flatten_adapted_content(adapted: str | list[str]) -> str:
    if isinstance(adapted, list):
        return THREAD_SEPARATOR.join(adapted)
    return adapted


def split_adapted_content(flat: str) -> list[str]:
    return [part for part in flat.split(THREAD_SEPARATOR) if part.strip()]


@dataclass
class PlatformPost:
    """A saved adaptation for one platform, linked to its content item."""

    id: str
    content_id: str
    platform: str
    adapted_content: str
    character_count: int
    created_at: datetime
    status: PostStatus = PostStatus.PENDING
    posted_at: datetime | None = None
