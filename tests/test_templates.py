"""Tests for branchout.generators.templates."""
from __future__ import annotations

import pytest

from branchout.generators.templates import (
    PLATFORM_TEMPLATES,
    TWITTER_AFFIXES,
    select_template,
    supported_tones,
)
from branchout.generators.thread_generator import CHAR_LIMIT, twitter_length
from branchout.models.types import Platform, Tone


class TestTwitterTemplates:
    @pytest.mark.parametrize("platform_id", ["twitter", "x", "twitter/x", "Twitter/X"])
    def test_aliases_produce_threads(self, platform_id):
        adapted = select_template(platform_id, Tone.CASUAL)("Just launched my app!")
        assert adapted == ["Just launched my app! 🙌"]

    def test_every_tone_is_supported(self):
        assert supported_tones(Platform.TWITTER) == frozenset(Tone)

    def test_urgent_long_content_becomes_thread(self):
        text = " ".join(
            f"Update {i}: the migration window moves again so please re-check your plans."
            for i in range(8)
        )
        posts = select_template("twitter", Tone.URGENT)(text)

        prefix, _suffix = TWITTER_AFFIXES[Tone.URGENT]
        assert len(posts) >= 2
        assert posts[0].startswith(prefix)
        assert all(twitter_length(post) <= CHAR_LIMIT for post in posts)

    def test_professional_suffix_goes_on_new_paragraph(self):
        adapted = select_template("twitter", Tone.PROFESSIONAL)("Quarterly numbers are in.")
        assert adapted == ["Quarterly numbers are in.\n\n#Business #Insights"]


class TestPlatformTemplates:
    @pytest.mark.parametrize("platform, tone", sorted(PLATFORM_TEMPLATES, key=str))
    def test_template_keeps_original_text(self, platform, tone):
        adapted = select_template(platform.value, tone)("  We shipped version two.  ")
        assert isinstance(adapted, str)
        assert "We shipped version two." in adapted
        assert "{text}" not in adapted

    def test_linkedin_professional(self):
        adapted = select_template("linkedin", Tone.PROFESSIONAL)("We hit our goal.")
        assert adapted.startswith("We hit our goal.\n\n")
        assert adapted.endswith("#Leadership #Innovation #ProfessionalGrowth")

    def test_threads_supports_a_subset_of_tones(self):
        assert supported_tones(Platform.THREADS) == {
            Tone.CASUAL,
            Tone.FRIENDLY,
            Tone.INSPIRATIONAL,
        }


class TestGenericFallback:
    def test_unknown_platform(self):
        adapted = select_template("unknown-platform", Tone.FRIENDLY)("Hello there")
        assert adapted == "Hello there\n\n#unknown-platform #content #social"

    def test_unsupported_tone_on_known_platform(self):
        adapted = select_template("threads", Tone.URGENT)("Server maintenance tonight.")
        assert adapted == "Server maintenance tonight.\n\n#threads #content #social"

    def test_identifier_is_normalised(self):
        adapted = select_template("  Mastodon ", Tone.CASUAL)("Hi")
        assert adapted == "Hi\n\n#mastodon #content #social"

    def test_content_is_kept_as_given(self):
        adapted = select_template("unknown-platform", Tone.CASUAL)("  Spaced out.\n")
        assert adapted == "  Spaced out.\n\n\n#unknown-platform #content #social"
