"""Tests for the level catalog and puzzle variants."""

import random

import pytest

from words_of_healing.core import content
from words_of_healing.core.puzzles import (
    LEVELS,
    REFERENCE_REVEAL_SECONDS,
    OrderedPuzzle,
    SingleChoicePuzzle,
    build_puzzle,
    level_spec,
)
from words_of_healing.core.state import LevelType


class TestLevelCatalog:
    def test_seven_levels_in_play_order(self):
        assert [LEVELS[n].level_type for n in range(1, 8)] == [
            LevelType.INTRO,
            LevelType.MCQ,
            LevelType.IMAGE,
            LevelType.EASY,
            LevelType.MEDIUM2,
            LevelType.MEDIUM,
            LevelType.IMAGE2,
        ]

    def test_durations(self):
        assert {n: LEVELS[n].duration for n in LEVELS} == {
            1: 45, 2: 30, 3: 30, 4: 45, 5: 45, 6: 45, 7: 45,
        }

    @pytest.mark.parametrize("level", [0, 8, -1])
    def test_unknown_level(self, level):
        with pytest.raises(ValueError):
            level_spec(level)
        with pytest.raises(ValueError):
            build_puzzle(level)


class TestBuildPuzzle:
    @pytest.mark.parametrize("level", [1, 4, 5, 6])
    def test_ordered_levels(self, level):
        puzzle = build_puzzle(level, random.Random(1))
        assert isinstance(puzzle, OrderedPuzzle)
        assert puzzle.kind == "ordered"
        assert puzzle.level == level

    @pytest.mark.parametrize("level", [2, 3, 7])
    def test_single_choice_levels(self, level):
        puzzle = build_puzzle(level, random.Random(1))
        assert isinstance(puzzle, SingleChoicePuzzle)
        assert puzzle.kind == "single_choice"
        assert puzzle.answer in puzzle.options
        assert len(set(puzzle.options)) == len(puzzle.options)

    def test_same_content_for_everyone(self):
        a = build_puzzle(4, random.Random(1))
        b = build_puzzle(4, random.Random(2))
        assert [f.text for f in a.answer] == [f.text for f in b.answer]

    def test_intro_uses_missing_phrases(self):
        puzzle = build_puzzle(1, random.Random(5))
        verse = content.fixed_incomplete_verse()
        assert [f.text for f in puzzle.answer] == list(verse.missing_fragments)
        assert puzzle.prompt == verse.visible_text

    def test_levels_three_and_seven_differ(self):
        assert build_puzzle(3).answer != build_puzzle(7).answer


class TestOrderedPuzzle:
    def test_correct_order(self):
        puzzle = build_puzzle(4, random.Random(9))
        answer_ids = [f.id for f in puzzle.answer]
        assert puzzle.can_submit(answer_ids)
        assert puzzle.is_correct(answer_ids)

    def test_wrong_order(self):
        puzzle = build_puzzle(4, random.Random(9))
        answer_ids = [f.id for f in puzzle.answer]
        swapped = [answer_ids[1], answer_ids[0], *answer_ids[2:]]
        assert not puzzle.is_correct(swapped)

    def test_partial_selection(self):
        puzzle = build_puzzle(4, random.Random(9))
        answer_ids = [f.id for f in puzzle.answer]
        assert not puzzle.can_submit(answer_ids[:-1])
        assert not puzzle.is_correct(answer_ids[:-1])
        assert not puzzle.can_submit([])

    def test_to_dict_hides_answer(self):
        puzzle = build_puzzle(5, random.Random(9))
        data = puzzle.to_dict()
        assert data["required_selection"] == len(puzzle.fragments)
        assert all(set(item) == {"id", "text"} for item in data["items"])

    def test_level_six_reference_hint(self):
        puzzle = build_puzzle(6)
        assert puzzle.reference == "Ezekiel 36:26"
        assert puzzle.display_reference(0) == "Ezekiel"
        assert puzzle.display_reference(REFERENCE_REVEAL_SECONDS - 1) == "Ezekiel"
        assert puzzle.display_reference(REFERENCE_REVEAL_SECONDS) == "Ezekiel 36:26"

    def test_other_levels_show_full_reference(self):
        puzzle = build_puzzle(4)
        assert puzzle.display_reference(0) == puzzle.reference


class TestSingleChoicePuzzle:
    def test_exact_match(self):
        puzzle = build_puzzle(2, random.Random(4))
        assert puzzle.is_correct([puzzle.answer])
        assert not puzzle.is_correct([puzzle.answer.upper()])

    def test_needs_exactly_one(self):
        puzzle = build_puzzle(3, random.Random(4))
        assert not puzzle.can_submit([])
        assert puzzle.can_submit([puzzle.options[0]])
        assert not puzzle.can_submit(puzzle.options[:2])

    def test_explanation_carried(self):
        puzzle = build_puzzle(7)
        assert puzzle.explanation == content.fixed_image_question_2().explanation
        assert puzzle.to_dict()["image_url"] == content.fixed_image_question_2().image_url
