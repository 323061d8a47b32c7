"""Tests for the Twitter/X thread packer in branchout.generators.thread_generator."""
from __future__ import annotations

import re

import pytest

from branchout.errors import InputError
from branchout.generators.thread_generator import (
    CHAR_LIMIT,
    ELLIPSIS,
    pack_thread,
    truncate,
    twitter_length,
)
from branchout.models.types import Tone

_NUMBERING = re.compile(r" \((\d+)/(\d+)\)$")


def _strip_numbering(post: str) -> str:
    return _NUMBERING.sub("", post)


def _long_sentences(count: int = 12) -> list[str]:
    return [
        f"Sentence number {i} carries a little extra padding text to take up room."
        for i in range(count)
    ]


class TestTwitterLength:
    def test_counts_utf16_code_units(self):
        assert twitter_length("abc") == 3
        assert twitter_length("🙌") == 2
        assert twitter_length("é") == 1


class TestSinglePost:
    def test_short_content_is_single_unnumbered_post(self):
        posts = pack_thread(["Hello world."], suffix="🙌", tone=Tone.CASUAL)
        assert posts == ["Hello world. 🙌"]

    def test_prefix_and_paragraph_suffix(self):
        posts = pack_thread(
            ["Big news.", "Read on."],
            prefix="🚨 URGENT:",
            suffix="Act now!",
            tone=Tone.URGENT,
        )
        assert posts == ["🚨 URGENT: Big news. Read on.\n\nAct now!"]

    def test_exactly_at_budget_is_not_split(self):
        sentence = "a" * (CHAR_LIMIT - 1) + "."
        assert pack_thread([sentence]) == [sentence]


class TestThreadPacking:
    def test_every_post_fits_and_is_numbered(self):
        posts = pack_thread(_long_sentences())
        total = len(posts)

        assert total > 1
        for idx, post in enumerate(posts, start=1):
            assert twitter_length(post) <= CHAR_LIMIT
            assert post.endswith(f" ({idx}/{total})")

    def test_sentences_are_preserved_in_order(self):
        sentences = _long_sentences()
        posts = pack_thread(sentences)
        rebuilt = " ".join(_strip_numbering(post) for post in posts)
        assert rebuilt == " ".join(sentences)

    def test_first_post_starts_with_prefix(self):
        posts = pack_thread(_long_sentences(), prefix="🚨 URGENT:", tone=Tone.URGENT)
        assert posts[0].startswith("🚨 URGENT: Sentence number 0")

    def test_prefix_gets_own_post_when_first_sentence_needs_the_room(self):
        first = "a" * 264 + "."
        posts = pack_thread(
            [first, "Second sentence here."], prefix="🚨 URGENT:", tone=Tone.URGENT
        )
        assert posts == [
            "🚨 URGENT: (1/3)",
            f"{first} (2/3)",
            "Second sentence here. (3/3)",
        ]
        assert ELLIPSIS not in "".join(posts)

    def test_oversized_first_sentence_stays_behind_prefix(self):
        posts = pack_thread(["z" * 300 + ".", "Tail."], prefix="✨", tone=Tone.INSPIRATIONAL)
        assert len(posts) == 2
        assert posts[0].startswith("✨ zzz")
        assert posts[0].endswith(f"{ELLIPSIS} (1/2)")

    def test_suffix_joins_last_post_when_it_fits(self):
        first = "A" * 200 + "."
        second = "B" * 100 + "."
        posts = pack_thread([first, second], suffix="🙌", tone=Tone.CASUAL)
        assert posts == [f"{first} (1/2)", f"{second} 🙌 (2/2)"]

    def test_suffix_becomes_own_post_when_last_is_full(self):
        first = "A" * 200 + "."
        second = "B" * 260 + "."
        posts = pack_thread(
            [first, second], suffix="#Business #Insights", tone=Tone.PROFESSIONAL
        )
        assert posts == [
            f"{first} (1/3)",
            f"{second} (2/3)",
            "#Business #Insights (3/3)",
        ]

    def test_astral_characters_count_double(self):
        sentences = ["🚀" * 100 + "."] * 3
        posts = pack_thread(sentences)
        assert len(posts) == 3
        assert all(twitter_length(post) <= CHAR_LIMIT for post in posts)

    def test_is_idempotent(self):
        sentences = _long_sentences()
        first = pack_thread(sentences, prefix="✨", suffix="#Inspiration", tone=Tone.INSPIRATIONAL)
        second = pack_thread(sentences, prefix="✨", suffix="#Inspiration", tone=Tone.INSPIRATIONAL)
        assert first == second

    def test_nothing_to_pack_raises(self):
        with pytest.raises(InputError):
            pack_thread([])


class TestOverflowTruncation:
    def test_cuts_at_whitespace_past_seventy_percent(self):
        text = " ".join(["word"] * 80)
        posts = pack_thread([text])

        assert len(posts) == 1
        post = posts[0]
        assert twitter_length(post) <= CHAR_LIMIT
        assert post.endswith(f"{ELLIPSIS} (1/1)")
        body = post[: -len(f"{ELLIPSIS} (1/1)")]
        assert body.endswith("word")
        assert body.split(" ") == ["word"] * len(body.split(" "))

    def test_hard_cut_without_whitespace(self):
        posts = pack_thread(["x" * 400])
        assert posts == ["x" * 273 + f"{ELLIPSIS} (1/1)"]

    def test_hard_cut_when_whitespace_is_too_early(self):
        text = "a" * 10 + " " + "b" * 390
        posts = pack_thread([text])
        assert posts == ["a" * 10 + " " + "b" * 262 + f"{ELLIPSIS} (1/1)"]

    def test_oversized_sentence_inside_thread(self):
        posts = pack_thread(["Short opener.", "y" * 300 + ".", "Closing line."])
        assert len(posts) == 3
        assert posts[1].endswith(f"{ELLIPSIS} (2/3)")
        assert all(twitter_length(post) <= CHAR_LIMIT for post in posts)

    def test_truncate_leaves_short_text_alone(self):
        assert truncate("fits fine", 20) == "fits fine"
