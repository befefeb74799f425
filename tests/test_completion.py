"""
Completion evaluator tests.

Covers block satisfaction rules, chapter completion and the unlock frontier.
"""

from guidedbook.classroom import (
    completed_chapter_ids,
    is_block_satisfied,
    is_chapter_complete,
    missing_blocks,
    unlock_frontier_index,
)
from guidedbook.schemas import ChecklistBlock, ExerciseBlock, InputListBlock

from conftest import complete_through


class TestBlockSatisfaction:
    """Test per-block completion rules."""

    def test_exercise_absent_empty_whitespace(self):
        block = ExerciseBlock(id="x")
        assert not is_block_satisfied(block, {})
        assert not is_block_satisfied(block, {"x": ""})
        assert not is_block_satisfied(block, {"x": "   \n\t"})

    def test_exercise_with_text(self):
        assert is_block_satisfied(ExerciseBlock(id="x"), {"x": " ok "})

    def test_exercise_non_string_value(self):
        assert not is_block_satisfied(ExerciseBlock(id="x"), {"x": ["a"]})
        assert not is_block_satisfied(ExerciseBlock(id="x"), {"x": True})

    def test_input_list_requires_every_field(self):
        block = InputListBlock(id="x", prompts=["a", "b", "c"])
        assert not is_block_satisfied(block, {"x_0": "1", "x_1": "2"})
        assert not is_block_satisfied(block, {"x_0": "1", "x_1": "2", "x_2": " "})
        assert is_block_satisfied(block, {"x_0": "1", "x_1": "2", "x_2": "3"})

    def test_checklist_min_selections(self):
        block = ChecklistBlock(id="x", options=["a", "b", "c", "d"], min_selections=2, max_selections=3)
        assert not is_block_satisfied(block, {"x": ["a"]})
        assert is_block_satisfied(block, {"x": ["a", "b"]})

    def test_checklist_defaults_to_one_selection(self):
        block = ChecklistBlock(id="x", options=["a", "b"])
        assert not is_block_satisfied(block, {"x": []})
        assert is_block_satisfied(block, {"x": ["b"]})

    def test_checklist_non_list_value(self):
        block = ChecklistBlock(id="x", options=["a", "b"])
        assert not is_block_satisfied(block, {"x": "a"})

    def test_missing_id_is_vacuously_satisfied(self):
        assert is_block_satisfied(ExerciseBlock(), {})
        assert is_block_satisfied(InputListBlock(prompts=["a"]), {})


class TestChapterCompletion:
    """Test chapter-level completion."""

    def test_chapter_without_required_blocks_always_complete(self, catalog):
        intro = catalog.get_chapter("intro")
        assert is_chapter_complete(intro, {})
        assert is_chapter_complete(intro, {"anything": "value", "e1": ""})

    def test_optional_block_does_not_gate(self, catalog):
        chapter = catalog.get_chapter("ch-2")
        answers = {"il_0": "1", "il_1": "2", "il_2": "3"}
        assert is_chapter_complete(chapter, answers)

    def test_missing_blocks_lists_unsatisfied(self, catalog):
        chapter = catalog.get_chapter("ch-2")
        missing = missing_blocks(chapter, {"il_0": "1"})
        assert [block.id for block in missing] == ["il"]
        assert missing_blocks(chapter, {"il_0": "1", "il_1": "2", "il_2": "3"}) == []

    def test_completed_chapter_ids_in_catalog_order(self, catalog, progress):
        complete_through(progress, 1)
        progress.set("ck", ["A", "C"])
        assert completed_chapter_ids(catalog, progress) == ["intro", "ch-1", "ch-3"]


class TestUnlockFrontier:
    """Test the first-incomplete-chapter frontier."""

    def test_fresh_progress_stops_at_first_exercise(self, catalog):
        # intro has no exercises, so the frontier is the first gated chapter
        assert unlock_frontier_index(catalog, {}) == 1

    def test_frontier_after_two_complete_chapters(self, catalog, progress):
        complete_through(progress, 1)
        assert unlock_frontier_index(catalog, progress) == 2

    def test_frontier_all_complete_is_last_index(self, catalog, progress):
        complete_through(progress, 4)
        assert unlock_frontier_index(catalog, progress) == 4

    def test_later_completion_does_not_skip_gap(self, catalog, progress):
        progress.set("e4", "answered early")
        assert unlock_frontier_index(catalog, progress) == 1
