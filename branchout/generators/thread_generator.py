from __future__ import annotations

import logging

from branchout.errors import InputError
from branchout.models.types import Tone

logger = logging.getLogger(__name__)

CHAR_LIMIT = 280
# Room for the longest numbering we expect, " (99/99)".
NUMBERING_RESERVE = len(" (99/99)")
ELLIPSIS = "…"
WHITESPACE_CUT_RATIO = 0.7

_INLINE_SUFFIX_TONES = frozenset({Tone.CASUAL, Tone.FRIENDLY})


def twitter_length(text: str) -> int:
    """Length in UTF-16 code units, the way the web client counts it.

    X itself weights some characters differently; this simpler count is
    kept on purpose.
    """
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2


def suffix_separator(tone: Tone) -> str:
    return " " if tone in _INLINE_SUFFIX_TONES else "\n\n"


def compose_single(body: str, prefix: str = "", suffix: str = "", tone: Tone = Tone.PROFESSIONAL) -> str:
    text = " ".join(part for part in (prefix, body) if part)
    if suffix:
        text = f"{text}{suffix_separator(tone)}{suffix}" if text else suffix
    return text


def pack_thread(
    sentences: list[str],
    prefix: str = "",
    suffix: str = "",
    tone: Tone = Tone.PROFESSIONAL,
    budget: int = CHAR_LIMIT,
) -> list[str]:
    """Pack sentences into numbered posts of at most *budget* characters.

    Content that fits in one post is returned as a single, unnumbered post.
    Otherwise sentences are packed greedily, the suffix is attached to the
    last post (or becomes its own post), and every post gets " (i/N)".
    A post that still overflows is cut with an ellipsis before its number.
    """
    sentences = [s for s in sentences if s]
    if not sentences and not prefix and not suffix:
        raise InputError("Nothing to pack into a thread")

    single = compose_single(" ".join(sentences), prefix, suffix, tone)
    if twitter_length(single) <= budget:
        return [single]

    segments = _pack_sentences(sentences, prefix, budget)
    _attach_suffix(segments, suffix, tone, budget)
    return _number_segments(segments, budget)


def _fits(text: str, budget: int) -> bool:
    return twitter_length(text) + NUMBERING_RESERVE <= budget


def _pack_sentences(sentences: list[str], prefix: str, budget: int) -> list[str]:
    segments: list[str] = []
    current = prefix
    holds_sentence = False

    for sentence in sentences:
        if not current:
            current = sentence
        elif _fits(f"{current} {sentence}", budget):
            current = f"{current} {sentence}"
        elif holds_sentence or _fits(sentence, budget):
            segments.append(current)
            current = sentence
        else:
            # sentence overflows on its own; it is truncated behind the prefix
            current = f"{current} {sentence}"
        holds_sentence = True

    if current:
        segments.append(current)
    return segments


def _attach_suffix(segments: list[str], suffix: str, tone: Tone, budget: int) -> None:
    if not suffix:
        return
    if not segments:
        segments.append(suffix)
        return

    joined = f"{segments[-1]}{suffix_separator(tone)}{suffix}"
    if _fits(joined, budget):
        segments[-1] = joined
    else:
        segments.append(suffix)


def _number_segments(segments: list[str], budget: int) -> list[str]:
    total = len(segments)
    posts: list[str] = []
    for idx, text in enumerate(segments, start=1):
        numbering = f" ({idx}/{total})"
        available = budget - twitter_length(numbering)
        if twitter_length(text) > available:
            logger.debug("Post %d/%d overflows by %d chars, truncating",
                         idx, total, twitter_length(text) - available)
            text = truncate(text, available)
        posts.append(f"{text}{numbering}")
    return posts


def truncate(text: str, width: int) -> str:
    """Shorten *text* to *width* units, ending in an ellipsis.

    Cuts at the last whitespace when it lies past 70% of *width*,
    otherwise cuts mid-word.
    """
    if twitter_length(text) <= width:
        return text

    head = _take_units(text, width - twitter_length(ELLIPSIS))
    boundary = _last_whitespace(head)
    if boundary > 0 and twitter_length(head[:boundary]) > width * WHITESPACE_CUT_RATIO:
        head = head[:boundary]
    return head.rstrip() + ELLIPSIS


def _take_units(text: str, units: int) -> str:
    used = 0
    for idx, char in enumerate(text):
        size = 2 if ord(char) > 0xFFFF else 1
        if used + size > units:
            return text[:idx]
        used += size
    return text


def _last_whitespace(text: str) -> int:
    for idx in range(len(text) - 1, -1, -1):
        if text[idx].isspace():
            return idx
    return -1
