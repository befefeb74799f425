"""
Completion evaluator - Pure checks over (catalog, progress).

Provides:
- Per-block and per-chapter completion
- Completed chapter ids in catalog order
- Unlock frontier (index of the first incomplete chapter)

Only non-optional exercise, input list and checklist blocks gate a
chapter. A required block without an id can never be answered, so it is
treated as satisfied rather than locking the reader out.
"""

from collections.abc import Mapping

from guidedbook.schemas import (
    AnswerValue,
    Catalog,
    Chapter,
    ChecklistBlock,
    ExerciseBlock,
    InputBlock,
    InputListBlock,
)

from .answers import has_text, selection_value


def is_block_satisfied(block: InputBlock, progress: Mapping[str, AnswerValue]) -> bool:
    """Check whether one input block has the answers completion requires."""
    if not block.id:
        return True

    if isinstance(block, ExerciseBlock):
        return has_text(progress.get(block.id))

    if isinstance(block, InputListBlock):
        # Every sub-field is required; partial answers do not count
        return all(has_text(progress.get(key)) for key in block.answer_keys())

    if isinstance(block, ChecklistBlock):
        return len(selection_value(progress.get(block.id))) >= block.required_selections

    return True


def missing_blocks(chapter: Chapter, progress: Mapping[str, AnswerValue]) -> list[InputBlock]:
    """Required blocks of a chapter that are not yet satisfied."""
    return [
        block for block in chapter.required_blocks()
        if not is_block_satisfied(block, progress)
    ]


def is_chapter_complete(chapter: Chapter, progress: Mapping[str, AnswerValue]) -> bool:
    """
    Check whether every required exercise of a chapter is satisfied.

    Chapters without required exercises are always complete.
    """
    return all(is_block_satisfied(block, progress) for block in chapter.required_blocks())


def completed_chapter_ids(catalog: Catalog, progress: Mapping[str, AnswerValue]) -> list[str]:
    """Ids of complete chapters, in catalog order."""
    return [
        chapter.id for chapter in catalog.chapters
        if is_chapter_complete(chapter, progress)
    ]


def unlock_frontier_index(catalog: Catalog, progress: Mapping[str, AnswerValue]) -> int:
    """
    Index of the first incomplete chapter.

    Chapters at or before this index are navigable. Returns the last
    index when every chapter is complete.
    """
    for index, chapter in enumerate(catalog.chapters):
        if not is_chapter_complete(chapter, progress):
            return index
    return len(catalog.chapters) - 1
