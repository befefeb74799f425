"""
Catalog loader tests.
"""

import logging

import pytest

from guidedbook.classroom import CatalogError, load_catalog, parse_catalog
from guidedbook.schemas import ChecklistBlock


class TestBundledCatalog:
    """Test the catalog shipped with the package."""

    def test_loads(self):
        catalog = load_catalog()
        assert len(catalog) == 14
        assert catalog.chapter_ids()[0] == "intro"
        assert catalog.chapter_ids()[-1] == "bonus"

    def test_routine_checklist_bounds(self):
        catalog = load_catalog()
        block = next(
            block for block in catalog.get_chapter("chapter-10").blocks
            if isinstance(block, ChecklistBlock)
        )
        assert block.id == "ex-10-routine"
        assert block.min_selections == 3
        assert block.max_selections == 3

    def test_answer_keys_unique(self):
        keys = load_catalog().answer_keys()
        assert len(keys) == len(set(keys))


class TestLoadCatalog:
    """Test file loading errors."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.yaml")

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="Could not parse"):
            load_catalog(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text("title: Livro\nchapters: []\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="Invalid catalog"):
            load_catalog(path)

    def test_valid_file(self, tmp_path):
        path = tmp_path / "course.yaml"
        path.write_text(
            "title: Livro\n"
            "chapters:\n"
            "  - id: a\n"
            "    title: A\n"
            "    blocks:\n"
            "      - type: exercise\n"
            "        id: e\n",
            encoding="utf-8",
        )
        catalog = load_catalog(path)
        assert catalog.answer_keys() == ["e"]


class TestParseCatalog:
    """Test validation of in-memory catalog data."""

    def test_top_level_must_be_mapping(self):
        with pytest.raises(CatalogError, match="mapping"):
            parse_catalog([{"id": "a"}])

    def test_catalog_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_catalog({"title": "t"})

    def test_duplicate_keys_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate answer key"):
            parse_catalog({"title": "t", "chapters": [
                {"id": "a", "title": "A", "blocks": [{"type": "exercise", "id": "e"}]},
                {"id": "b", "title": "B", "blocks": [{"type": "checklist", "id": "e", "options": ["x"]}]},
            ]})

    def test_unknown_block_type_rejected(self):
        with pytest.raises(CatalogError):
            parse_catalog({"title": "t", "chapters": [
                {"id": "a", "title": "A", "blocks": [{"type": "video", "url": "x"}]},
            ]})

    def test_required_block_without_id_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            parse_catalog({"title": "t", "chapters": [
                {"id": "a", "title": "A", "blocks": [{"type": "exercise", "label": "sem id"}]},
            ]})
        assert "without id" in caplog.text
