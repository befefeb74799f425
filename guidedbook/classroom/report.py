"""
Report builder - Aggregate every non-empty answer by chapter.

Inclusion is answer-presence based, not completion based: optional
blocks are included when answered, and partially answered input lists
contribute only their filled fields.
"""

from collections.abc import Mapping
from typing import Optional

from guidedbook.schemas import (
    AnswerValue,
    Catalog,
    ChecklistBlock,
    ExerciseBlock,
    InputBlock,
    InputListBlock,
    Report,
    ReportBlock,
    ReportChapter,
    ReportEntry,
)

from .answers import has_text, selection_value, text_value


def collect_entries(block: InputBlock, progress: Mapping[str, AnswerValue]) -> list[ReportEntry]:
    """Non-empty answers of one block, in display order."""
    if not block.id:
        return []

    if isinstance(block, ExerciseBlock):
        value = progress.get(block.id)
        return [ReportEntry(answer=text_value(value))] if has_text(value) else []

    if isinstance(block, InputListBlock):
        entries = []
        for prompt, key in zip(block.prompts, block.answer_keys()):
            value = progress.get(key)
            if has_text(value):
                entries.append(ReportEntry(prompt=prompt, answer=text_value(value)))
        return entries

    if isinstance(block, ChecklistBlock):
        return [ReportEntry(answer=item) for item in selection_value(progress.get(block.id))]

    return []


def build_report(
    catalog: Catalog,
    progress: Mapping[str, AnswerValue],
    title: Optional[str] = None,
) -> Report:
    """
    Build the completion report.

    Chapters without any answered block are omitted. Chapter, block and
    input list field order follow the catalog.
    """
    chapters = []
    for chapter in catalog.chapters:
        blocks = []
        for block in chapter.input_blocks():
            entries = collect_entries(block, progress)
            if entries:
                blocks.append(ReportBlock(
                    block_id=block.id,
                    kind=block.type,
                    label=block.label,
                    entries=entries,
                ))
        if blocks:
            chapters.append(ReportChapter(
                chapter_id=chapter.id,
                title=chapter.title,
                subtitle=chapter.subtitle,
                blocks=blocks,
            ))

    return Report(title=title or catalog.title, chapters=chapters)
