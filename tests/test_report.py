"""
Report builder tests.
"""

from guidedbook.classroom import build_report, collect_entries
from guidedbook.schemas import ChecklistBlock, ExerciseBlock, InputListBlock


class TestCollectEntries:
    """Test per-block answer collection."""

    def test_exercise_blank_excluded(self):
        block = ExerciseBlock(id="e")
        assert collect_entries(block, {"e": "   "}) == []
        assert collect_entries(block, {"e": "texto"})[0].answer == "texto"

    def test_input_list_keeps_filled_fields_with_prompts(self):
        block = InputListBlock(id="x", prompts=["Primeira", "Segunda", "Terceira"])
        entries = collect_entries(block, {"x_0": "um", "x_1": "", "x_2": "três"})
        assert [(entry.prompt, entry.answer) for entry in entries] == [
            ("Primeira", "um"),
            ("Terceira", "três"),
        ]

    def test_checklist_selected_items(self):
        block = ChecklistBlock(id="c", options=["a", "b", "c"])
        entries = collect_entries(block, {"c": ["c", "a"]})
        assert [entry.answer for entry in entries] == ["c", "a"]

    def test_block_without_id(self):
        assert collect_entries(ExerciseBlock(), {"": "x"}) == []


class TestBuildReport:
    """Test chapter aggregation."""

    def test_empty_progress_gives_empty_report(self, catalog):
        report = build_report(catalog, {})
        assert report.is_empty
        assert report.title == "Livro de Teste"

    def test_chapters_without_answers_omitted(self, catalog):
        report = build_report(catalog, {"e1": "frase", "e4": "fim"})
        assert [chapter.chapter_id for chapter in report.chapters] == ["ch-1", "ch-4"]
        assert report.chapters[1].subtitle == "Final"

    def test_optional_block_included_when_answered(self, catalog):
        report = build_report(catalog, {"notes": "uma nota"})
        chapter = report.chapters[0]
        assert chapter.chapter_id == "ch-2"
        assert chapter.blocks[0].block_id == "notes"
        assert chapter.blocks[0].kind == "exercise"

    def test_block_order_follows_catalog(self, catalog):
        report = build_report(catalog, {"notes": "n", "il_1": "dois"})
        assert [block.block_id for block in report.chapters[0].blocks] == ["il", "notes"]

    def test_custom_title(self, catalog):
        assert build_report(catalog, {}, title="Minhas respostas").title == "Minhas respostas"

    def test_illustration_keys_ignored(self, catalog):
        report = build_report(catalog, {"img_intro": "https://example.com/a.png"})
        assert report.is_empty
