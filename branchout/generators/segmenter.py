from __future__ import annotations

import re

from branchout.errors import InputError

# Split right after a run of terminal punctuation. Abbreviations ("e.g.") and
# decimals ("3.5") split too.
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])(?![.!?])")


def split_sentences(text: str) -> list[str]:
    """Split *text* into trimmed sentence units, punctuation kept attached.

    Text without any terminal punctuation comes back as a single unit.
    """
    if not text or not text.strip():
        raise InputError("Cannot segment empty content")

    units = [unit.strip() for unit in _SENTENCE_BOUNDARY.split(text)]
    return [unit for unit in units if unit]
