"""
Chapter renderer - Generate HTML for chapter display blocks.

Features:
- Chapter header with book kicker, title and subtitle
- Text, quote, subheader and list blocks (catalog HTML is trusted)
- Highlighted action steps and check-style list items
- Exercise headers and checklist selection hints

Input widgets themselves are drawn by the Streamlit shell.
"""

import html
from typing import Optional

from guidedbook.schemas import (
    CHECK_ITEM_MARKER,
    Block,
    Chapter,
    ChecklistBlock,
    InputBlock,
    ListBlock,
    QuoteBlock,
    SubheaderBlock,
    TextBlock,
)


def get_chapter_css() -> str:
    """Get CSS styles for chapter display."""
    return """
    <style>
    .chapter-kicker {
        color: #0284c7;
        font-weight: 700;
        letter-spacing: 0.08em;
        font-size: 0.75em;
        text-transform: uppercase;
    }
    .chapter-title {
        font-family: Georgia, serif;
        font-size: 2.2em;
        font-weight: 700;
        color: #0f172a;
        margin: 0.2em 0;
    }
    .chapter-subtitle {
        font-size: 1.25em;
        color: #64748b;
        font-weight: 300;
        margin-bottom: 1em;
    }
    .chapter-text {
        color: #334155;
        font-size: 1.1em;
        line-height: 1.7;
    }
    .chapter-quote {
        border-left: 4px solid #38bdf8;
        background: #f0f9ff;
        padding: 0.6em 1.4em;
        margin: 1.5em 0;
        font-family: Georgia, serif;
        font-style: italic;
        font-size: 1.2em;
        color: #0c4a6e;
    }
    .chapter-subheader {
        font-family: Georgia, serif;
        font-size: 1.5em;
        font-weight: 700;
        color: #1e293b;
        margin-top: 1.5em;
    }
    .chapter-list {
        list-style: none;
        padding-left: 0;
    }
    .chapter-list li {
        margin: 0.5em 0;
        color: #334155;
    }
    .chapter-list li::before {
        content: "•";
        color: #0ea5e9;
        margin-right: 0.6em;
    }
    .chapter-list li.check-item::before {
        content: "✓";
        color: #16a34a;
    }
    .action-step {
        background: #f0f9ff;
        border: 1px solid #bae6fd;
        border-radius: 12px;
        padding: 1em;
        font-weight: 700;
        font-size: 1.1em;
        color: #075985;
        margin: 1.5em 0;
    }
    .exercise-kicker {
        color: #0369a1;
        font-weight: 700;
        font-size: 0.75em;
        text-transform: uppercase;
        letter-spacing: 0.05em;
    }
    .exercise-label {
        font-weight: 700;
        font-size: 1.1em;
        color: #0f172a;
        margin: 0.4em 0;
    }
    .exercise-prompt {
        color: #475569;
        font-size: 0.95em;
        font-style: italic;
    }
    .selection-hint {
        color: #94a3b8;
        font-size: 0.8em;
        font-style: italic;
    }
    </style>
    """


def render_chapter_header(chapter: Chapter, book_title: str) -> str:
    parts = ['<div class="chapter-header">']
    parts.append(f'<span class="chapter-kicker">{html.escape(book_title)}</span>')
    parts.append(f'<h1 class="chapter-title">{html.escape(chapter.title)}</h1>')
    if chapter.subtitle:
        parts.append(f'<h2 class="chapter-subtitle">{html.escape(chapter.subtitle)}</h2>')
    parts.append('</div>')
    return ''.join(parts)


def render_text(block: TextBlock) -> str:
    if block.is_action_step:
        return f'<div class="action-step">▶ {block.display_text}</div>'
    return f'<p class="chapter-text">{block.display_text}</p>'


def render_quote(block: QuoteBlock) -> str:
    return f'<blockquote class="chapter-quote">"{block.content}"</blockquote>'


def render_subheader(block: SubheaderBlock) -> str:
    return f'<h3 class="chapter-subheader">{block.content}</h3>'


def render_list(block: ListBlock) -> str:
    parts = ['<ul class="chapter-list">']
    for item in block.items:
        stripped = item.strip()
        if stripped.startswith(CHECK_ITEM_MARKER):
            text = stripped[len(CHECK_ITEM_MARKER):].strip()
            parts.append(f'<li class="check-item">{text}</li>')
        else:
            parts.append(f'<li>{item}</li>')
    parts.append('</ul>')
    return ''.join(parts)


def render_display_block(block: Block) -> str:
    """Render a display-only block; input blocks render as ""."""
    if isinstance(block, TextBlock):
        return render_text(block)
    elif isinstance(block, QuoteBlock):
        return render_quote(block)
    elif isinstance(block, SubheaderBlock):
        return render_subheader(block)
    elif isinstance(block, ListBlock):
        return render_list(block)
    return ""


def render_exercise_header(block: InputBlock) -> str:
    """Kicker, label and instructions shown above an input block."""
    parts = ['<div class="exercise-kicker">▶ Exercício Prático</div>']
    if block.label:
        parts.append(f'<div class="exercise-label">{html.escape(block.label)}</div>')

    instructions = getattr(block, "prompt", None) or (
        block.placeholder if block.type == "input_list" else None
    )
    if instructions:
        parts.append(f'<p class="exercise-prompt">{html.escape(instructions)}</p>')
    return ''.join(parts)


def selection_hint(block: ChecklistBlock) -> Optional[str]:
    """Selection-count instruction for a checklist, if it has bounds."""
    low, high = block.min_selections, block.max_selections
    if low and high and low == high:
        return f"Selecione exatamente {low} opções."
    if low and high:
        return f"Selecione entre {low} e {high} opções."
    if low:
        return f"Selecione no mínimo {low} opções."
    if high:
        return f"Selecione no máximo {high} opções."
    return None


def is_option_disabled(block: ChecklistBlock, selected: list[str], option: str) -> bool:
    """Unselected options are disabled once max_selections is reached."""
    if option in selected or not block.max_selections:
        return False
    return len(selected) >= block.max_selections


def render_incomplete_notice(is_last: bool) -> str:
    """Explanation shown while the current chapter blocks navigation."""
    action = "concluir" if is_last else "avançar"
    return (
        "**Ação necessária:** Você precisa completar todos os exercícios "
        f"deste capítulo para poder {action}."
    )
