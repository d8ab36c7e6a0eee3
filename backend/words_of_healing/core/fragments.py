"""
Verse fragment generation for ordering puzzles.

A verse is cut into 7-8 short word groups which the participant puts back
in order. ``original_index`` is the sort key that rebuilds the verse.
"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence


MIN_FRAGMENTS = 7
MAX_FRAGMENTS = 8
WORDS_PER_FRAGMENT = 2


@dataclass(frozen=True)
class Fragment:
    """A selectable word group."""
    id: str
    text: str
    original_index: int

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "original_index": self.original_index}


def _renumber(texts: list[str]) -> list[Fragment]:
    return [
        Fragment(id=f"fragment-{index}", text=text, original_index=index)
        for index, text in enumerate(texts)
    ]


def split(text: str) -> list[Fragment]:
    """
    Split verse text into 7-8 fragments.

    Words are grouped in pairs (the last group keeps any odd word). Too few
    groups: the group with the most words is halved until there are seven,
    or until every group is a single word. Too many: the last group is folded
    into its predecessor until eight remain.

    Args:
        text: Verse text. Whitespace is normalized.

    Returns:
        Fragments in verse order with dense ids and indices starting at 0.
        Empty text gives an empty list; fewer than seven words gives one
        fragment per word.
    """
    words = text.split()
    texts = [
        " ".join(words[start:start + WORDS_PER_FRAGMENT])
        for start in range(0, len(words), WORDS_PER_FRAGMENT)
    ]

    while 0 < len(texts) < MIN_FRAGMENTS:
        longest = max(range(len(texts)), key=lambda i: (len(texts[i].split()), -i))
        longest_words = texts[longest].split()
        if len(longest_words) <= 1:
            break
        mid = (len(longest_words) + 1) // 2
        texts[longest:longest + 1] = [
            " ".join(longest_words[:mid]),
            " ".join(longest_words[mid:]),
        ]

    while len(texts) > MAX_FRAGMENTS:
        last = texts.pop()
        texts[-1] = f"{texts[-1]} {last}"

    return _renumber(texts)


def shuffle(
    fragments: Sequence[Fragment],
    rng: Optional[random.Random] = None,
) -> list[Fragment]:
    """Return a uniformly shuffled copy (Fisher-Yates). The input is untouched."""
    rng = rng or random.Random()
    shuffled = list(fragments)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def from_phrases(phrases: Sequence[str], prefix: str = "fragment") -> list[Fragment]:
    """Wrap pre-cut phrases (already in answer order) as fragments."""
    return [
        Fragment(id=f"{prefix}-{index}", text=phrase, original_index=index)
        for index, phrase in enumerate(phrases)
    ]


def in_verse_order(fragments: Sequence[Fragment]) -> list[Fragment]:
    """Sort fragments back into the order they had in the verse."""
    return sorted(fragments, key=lambda f: f.original_index)


def join(fragments: Sequence[Fragment]) -> str:
    return " ".join(f.text for f in fragments)


__all__ = [
    "Fragment",
    "split",
    "shuffle",
    "from_phrases",
    "in_verse_order",
    "join",
]
