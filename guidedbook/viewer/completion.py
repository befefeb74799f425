"""
Completion renderer - On-screen summary of the reader's answers.

Provides:
- Report rendering grouped by chapter
- Answer boxes for single answers, input lists and checklists
"""

import html

from guidedbook.schemas import Report, ReportBlock, ReportChapter


def get_report_css() -> str:
    """Get CSS styles for the answers summary."""
    return """
    <style>
    .report-chapter {
        margin-top: 2em;
    }
    .report-chapter-title {
        font-family: Georgia, serif;
        font-size: 1.3em;
        font-weight: 700;
        color: #075985;
    }
    .report-label {
        font-weight: 700;
        color: #1e293b;
        margin-top: 1em;
    }
    .report-box {
        background: #f8fafc;
        border: 1px solid #e2e8f0;
        border-radius: 8px;
        padding: 1em;
        margin-top: 0.5em;
    }
    .report-prompt {
        color: #64748b;
        margin-top: 0.5em;
    }
    .report-answer {
        color: #1e293b;
        font-weight: 500;
        white-space: pre-wrap;
    }
    .report-answer.indented {
        padding-left: 1em;
        border-left: 2px solid #e2e8f0;
    }
    .report-empty {
        color: #94a3b8;
        font-style: italic;
    }
    </style>
    """


def render_report_block(block: ReportBlock) -> str:
    parts = []
    if block.label:
        parts.append(f'<div class="report-label">{html.escape(block.label)}</div>')
    parts.append('<div class="report-box">')

    if block.kind == "checklist":
        parts.append('<ul>')
        for entry in block.entries:
            parts.append(f'<li class="report-answer">{html.escape(entry.answer)}</li>')
        parts.append('</ul>')
    else:
        for entry in block.entries:
            if entry.prompt:
                parts.append(f'<div class="report-prompt">{html.escape(entry.prompt)}</div>')
                parts.append(f'<div class="report-answer indented">{html.escape(entry.answer)}</div>')
            else:
                parts.append(f'<div class="report-answer">{html.escape(entry.answer)}</div>')

    parts.append('</div>')
    return ''.join(parts)


def render_report_chapter(chapter: ReportChapter) -> str:
    parts = ['<div class="report-chapter">']
    parts.append(f'<h3 class="report-chapter-title">{html.escape(chapter.title)}</h3>')
    for block in chapter.blocks:
        parts.append(render_report_block(block))
    parts.append('</div>')
    return ''.join(parts)


def render_report(report: Report) -> str:
    """Render the full answers summary as HTML."""
    if report.is_empty:
        return '<p class="report-empty">Nenhuma resposta registrada ainda.</p>'
    return ''.join(render_report_chapter(chapter) for chapter in report.chapters)
