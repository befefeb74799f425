"""
PDF export tests.

Layout is checked with a fixed-width splitter so page breaks are
predictable; rendering is checked on the real reportlab output.
"""

from datetime import date

from guidedbook.schemas import Report, ReportBlock, ReportChapter, ReportEntry
from guidedbook.viewer import layout_report, measure_answer_box, render_report_pdf
from guidedbook.viewer.pdf import MARGIN, PAGE_HEIGHT


def fixed_split(text, font, size, width):
    """Split every 40 characters, independent of font metrics."""
    return [text[i:i + 40] for i in range(0, len(text), 40)]


def make_report(chapter_count=1, answer_length=20, blocks_per_chapter=1):
    chapters = []
    for c in range(chapter_count):
        blocks = [
            ReportBlock(
                block_id=f"b{c}_{b}",
                kind="exercise",
                label=f"Exercício {c}.{b}",
                entries=[ReportEntry(answer="x" * answer_length)],
            )
            for b in range(blocks_per_chapter)
        ]
        chapters.append(ReportChapter(chapter_id=f"c{c}", title=f"Capítulo {c}", blocks=blocks))
    return Report(title="Livro", chapters=chapters)


class TestMeasureAnswerBox:
    """Test answer box measurement."""

    def test_single_line_answer(self):
        block = ReportBlock(block_id="b", kind="exercise", entries=[ReportEntry(answer="curta")])
        height, lines = measure_answer_box(block, 400, fixed_split)
        # padding + one answer line + spacing + padding
        assert height == 15 + 11 + 10 + 15 - 10
        assert [line.style for line in lines] == ["answer"]

    def test_prompts_add_lines(self):
        block = ReportBlock(block_id="b", kind="input_list", entries=[
            ReportEntry(prompt="Pergunta", answer="um"),
            ReportEntry(prompt="Outra", answer="dois"),
        ])
        height, lines = measure_answer_box(block, 400, fixed_split)
        assert [line.style for line in lines] == ["prompt", "answer", "prompt", "answer"]
        assert height > measure_answer_box(
            ReportBlock(block_id="b", kind="exercise", entries=[ReportEntry(answer="um")]),
            400, fixed_split,
        )[0]

    def test_checklist_items_bulleted(self):
        block = ReportBlock(block_id="b", kind="checklist", entries=[ReportEntry(answer="A")])
        _, lines = measure_answer_box(block, 400, fixed_split)
        assert lines[0].text == "• A"

    def test_multiline_answer_keeps_paragraphs(self):
        block = ReportBlock(block_id="b", kind="exercise", entries=[ReportEntry(answer="um\ndois\ntrês")])
        _, lines = measure_answer_box(block, 400, fixed_split)
        assert [line.text for line in lines] == ["um", "dois", "três"]


class TestLayoutReport:
    """Test pagination."""

    def test_small_report_fits_one_page(self):
        layout = layout_report(make_report(), split_text=fixed_split)
        assert layout.pages == 1
        assert [unit.kind for unit in layout.units] == ["chapter_title", "label", "answer_box"]

    def test_empty_report_has_one_page(self):
        layout = layout_report(Report(title="Livro"), split_text=fixed_split)
        assert layout.pages == 1
        assert layout.units == []

    def test_long_report_breaks_pages_without_overflow(self):
        layout = layout_report(
            make_report(chapter_count=6, answer_length=400, blocks_per_chapter=3),
            split_text=fixed_split,
        )
        assert layout.pages > 1
        for unit in layout.units:
            assert unit.y + unit.height <= PAGE_HEIGHT - MARGIN

    def test_units_keep_report_order(self):
        layout = layout_report(
            make_report(chapter_count=6, answer_length=400, blocks_per_chapter=3),
            split_text=fixed_split,
        )
        positions = [(unit.page, unit.y) for unit in layout.units]
        assert positions == sorted(positions)
        titles = [unit.lines[0] for unit in layout.units if unit.kind == "chapter_title"]
        assert titles == [f"Capítulo {c}" for c in range(6)]

    def test_new_pages_start_at_top_margin(self):
        layout = layout_report(
            make_report(chapter_count=6, answer_length=400, blocks_per_chapter=3),
            split_text=fixed_split,
        )
        for page in range(2, layout.pages + 1):
            assert layout.units_on_page(page)[0].y == MARGIN

    def test_oversized_box_gets_own_page_without_blank_pages(self):
        layout = layout_report(make_report(answer_length=40 * 120), split_text=fixed_split)
        box = layout.units[-1]
        assert box.kind == "answer_box"
        assert box.page == 2
        assert box.y == MARGIN
        assert layout.pages == 2
        assert all(layout.units_on_page(page) for page in range(1, layout.pages + 1))


class TestRenderReportPdf:
    """Test reportlab output."""

    def test_output_is_pdf(self):
        data = render_report_pdf(make_report(), "Maria", date(2024, 5, 1))
        assert data.startswith(b"%PDF")

    def test_empty_report_renders(self):
        assert render_report_pdf(Report(title="Livro")).startswith(b"%PDF")

    def test_multi_page_report_renders(self):
        report = make_report(chapter_count=8, answer_length=600, blocks_per_chapter=3)
        assert render_report_pdf(report).startswith(b"%PDF")
