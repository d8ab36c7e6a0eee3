"""
Level catalog and puzzle shapes.

Each level number maps to a ``LevelSpec`` (type, countdown, labels) and a
builder producing one of two puzzle variants:

- ``OrderedPuzzle``: put fragments back in verse order (levels 1, 4, 5, 6)
- ``SingleChoicePuzzle``: pick the one correct option (levels 2, 3, 7)
"""

import random
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional, Sequence, Union

from . import content
from .fragments import Fragment, from_phrases, in_verse_order, shuffle, split
from .state import LevelType


REFERENCE_REVEAL_SECONDS = 15


@dataclass(frozen=True)
class LevelSpec:
    """Static description of one level."""
    number: int
    level_type: LevelType
    duration: int
    name: str
    subtitle: str


LEVELS: dict[int, LevelSpec] = {
    1: LevelSpec(1, LevelType.INTRO, 45, "Intro", "Complete the Verse"),
    2: LevelSpec(2, LevelType.MCQ, 30, "Quiz", "Multiple Choice"),
    3: LevelSpec(3, LevelType.IMAGE, 30, "Vision", "Identify the Person"),
    4: LevelSpec(4, LevelType.EASY, 45, "Beginner", "Arrange Fragments"),
    5: LevelSpec(5, LevelType.MEDIUM2, 45, "Apprentice", "Arrange Fragments"),
    6: LevelSpec(6, LevelType.MEDIUM, 45, "Acolyte", "Arrange Fragments"),
    7: LevelSpec(7, LevelType.IMAGE2, 45, "Scholar", "Identify the Person"),
}


def level_spec(level: int) -> LevelSpec:
    try:
        return LEVELS[level]
    except KeyError:
        raise ValueError(f"Unknown level: {level}") from None


@dataclass
class OrderedPuzzle:
    """Arrange fragments into the canonical order."""
    level: int
    fragments: list[Fragment]
    prompt: str = ""
    reference: str = ""
    reveal_reference_after: Optional[int] = None
    kind: Literal["ordered"] = field(default="ordered", init=False)

    @property
    def answer(self) -> list[Fragment]:
        return in_verse_order(self.fragments)

    @property
    def item_ids(self) -> set[str]:
        return {f.id for f in self.fragments}

    def can_submit(self, selection: Sequence[str]) -> bool:
        """Only a complete ordering may be submitted."""
        return len(selection) == len(self.fragments)

    def is_correct(self, selection: Sequence[str]) -> bool:
        answer = self.answer
        if len(selection) != len(answer):
            return False
        by_id = {f.id: f for f in self.fragments}
        for chosen, expected in zip(selection, answer):
            fragment = by_id.get(chosen)
            if fragment is None or fragment.original_index != expected.original_index:
                return False
        return True

    def display_reference(self, elapsed_seconds: float) -> str:
        """Reference text to show; some levels hide all but the book at first."""
        if self.reveal_reference_after is None or elapsed_seconds >= self.reveal_reference_after:
            return self.reference
        return self.reference.split(" ")[0] if self.reference else ""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "prompt": self.prompt,
            "items": [{"id": f.id, "text": f.text} for f in self.fragments],
            "required_selection": len(self.fragments),
        }


@dataclass
class SingleChoicePuzzle:
    """Pick exactly one option."""
    level: int
    options: list[str]
    answer: str
    prompt: str = ""
    reference: str = ""
    image_url: Optional[str] = None
    explanation: str = ""
    kind: Literal["single_choice"] = field(default="single_choice", init=False)

    @property
    def item_ids(self) -> set[str]:
        return set(self.options)

    def can_submit(self, selection: Sequence[str]) -> bool:
        return len(selection) == 1

    def is_correct(self, selection: Sequence[str]) -> bool:
        return len(selection) == 1 and selection[0] == self.answer

    def display_reference(self, elapsed_seconds: float) -> str:
        return self.reference

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "prompt": self.prompt,
            "image_url": self.image_url,
            "items": [{"id": option, "text": option} for option in self.options],
            "required_selection": 1,
        }


Puzzle = Union[OrderedPuzzle, SingleChoicePuzzle]


def _shuffled(options: Sequence[str], rng: random.Random) -> list[str]:
    shuffled = list(options)
    rng.shuffle(shuffled)
    return shuffled


def _intro(rng: random.Random) -> Puzzle:
    verse = content.fixed_incomplete_verse()
    return OrderedPuzzle(
        level=1,
        fragments=shuffle(from_phrases(verse.missing_fragments, prefix="intro-frag"), rng),
        prompt=verse.visible_text,
        reference=verse.reference,
    )


def _mcq(rng: random.Random) -> Puzzle:
    verse = content.fixed_mcq_verse()
    return SingleChoicePuzzle(
        level=2,
        options=_shuffled([verse.correct_ending, *verse.wrong_options], rng),
        answer=verse.correct_ending,
        prompt=verse.incomplete_text,
        reference=verse.reference,
    )


def _image(level: int, question: content.ImageQuestion, rng: random.Random) -> Puzzle:
    return SingleChoicePuzzle(
        level=level,
        options=_shuffled([question.correct_answer, *question.wrong_options], rng),
        answer=question.correct_answer,
        prompt=question.question,
        image_url=question.image_url,
        explanation=question.explanation,
    )


def _arrange(level: int, verse: content.Verse, rng: random.Random, reveal_after=None) -> Puzzle:
    return OrderedPuzzle(
        level=level,
        fragments=shuffle(split(verse.text), rng),
        reference=verse.reference,
        reveal_reference_after=reveal_after,
    )


PUZZLE_BUILDERS: dict[int, Callable[[random.Random], Puzzle]] = {
    1: _intro,
    2: _mcq,
    3: lambda rng: _image(3, content.fixed_image_question(), rng),
    4: lambda rng: _arrange(4, content.fixed_verse("easy"), rng),
    5: lambda rng: _arrange(5, content.fixed_medium2_verse(), rng),
    6: lambda rng: _arrange(
        6, content.fixed_verse("medium"), rng, reveal_after=REFERENCE_REVEAL_SECONDS
    ),
    7: lambda rng: _image(7, content.fixed_image_question_2(), rng),
}


def build_puzzle(level: int, rng: Optional[random.Random] = None) -> Puzzle:
    """Build the puzzle for a level with freshly randomized presentation order."""
    level_spec(level)
    return PUZZLE_BUILDERS[level](rng or random.Random())
