"""
GuidedBook Viewer - Rendering components for chapter display and export.

This module provides:
- Chapter rendering for display blocks and exercise headers
- On-screen summary of the reader's answers
- Paginated PDF export of the answers
- Generated chapter illustrations
"""

from .chapter import (
    get_chapter_css,
    render_chapter_header,
    render_text,
    render_quote,
    render_subheader,
    render_list,
    render_display_block,
    render_exercise_header,
    selection_hint,
    is_option_disabled,
    render_incomplete_notice,
)

from .completion import (
    get_report_css,
    render_report_block,
    render_report_chapter,
    render_report,
)

from .pdf import (
    BoxLine,
    LayoutUnit,
    PageLayout,
    measure_answer_box,
    layout_report,
    render_report_pdf,
    DEFAULT_FILENAME,
)

from .illustrations import (
    illustration_key,
    chapter_seed,
    build_image_url,
    probe_image,
    resolve_illustration,
)

__all__ = [
    # Chapter rendering
    "get_chapter_css",
    "render_chapter_header",
    "render_text",
    "render_quote",
    "render_subheader",
    "render_list",
    "render_display_block",
    "render_exercise_header",
    "selection_hint",
    "is_option_disabled",
    "render_incomplete_notice",
    # Answers summary
    "get_report_css",
    "render_report_block",
    "render_report_chapter",
    "render_report",
    # PDF export
    "BoxLine",
    "LayoutUnit",
    "PageLayout",
    "measure_answer_box",
    "layout_report",
    "render_report_pdf",
    "DEFAULT_FILENAME",
    # Illustrations
    "illustration_key",
    "chapter_seed",
    "build_image_url",
    "probe_image",
    "resolve_illustration",
]
