"""
Navigator - Chapter sequencing, completion gating, and view state.

Provides:
- Next/previous/jump navigation gated by chapter completion
- Chapter availability for the sidebar (locked/available/completed)
- Answer updates routed to the progress store
- View mode switching (chapters, profile, completion)

Gating failures are expected and advisory: every navigation method
returns False instead of raising when the move is not allowed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from guidedbook.schemas import AnswerValue, Catalog, Chapter, ChecklistBlock, InputBlock, Report

from .completion import (
    completed_chapter_ids,
    is_chapter_complete,
    missing_blocks,
    unlock_frontier_index,
)
from .progress import CursorStore, ProgressStore
from .report import build_report


logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    """Which screen the reader shell shows."""
    CHAPTERS = "chapters"
    PROFILE = "profile"
    COMPLETION = "completion"
    LOGIN = "login"
    PURCHASE_SUCCESS = "purchase_success"


class ChapterAvailability(str, Enum):
    """Chapter availability status for UI display."""
    LOCKED = "locked"           # Beyond the unlock boundary
    AVAILABLE = "available"     # Reachable, exercises pending
    COMPLETED = "completed"     # Required exercises satisfied


@dataclass
class NavigationChapter:
    """Chapter with navigation metadata."""
    chapter: Chapter
    index: int
    availability: ChapterAvailability
    is_current: bool


class Navigator:
    """
    Navigate through the catalog with completion gating.

    Combines the Catalog (content) with the ProgressStore (answers) and
    the CursorStore (current chapter) to provide gated navigation.
    """

    def __init__(self, catalog: Catalog, progress: ProgressStore, cursor: CursorStore):
        """
        Initialize navigator and restore the persisted cursor.

        Args:
            catalog: Ordered chapter catalog
            progress: Store with the reader's answers
            cursor: Store with the persisted current chapter id
        """
        self.catalog = catalog
        self.progress = progress
        self.cursor = cursor
        self.view_mode = ViewMode.CHAPTERS

        saved_id = cursor.load()
        index = catalog.index_of(saved_id)
        if index is None:
            if saved_id:
                logger.info(f"Stored chapter '{saved_id}' no longer exists, starting at the first chapter")
            index = 0
        self._index = index
        # Furthest chapter reached; chapters up to here never re-lock
        self._furthest_index = max(index, unlock_frontier_index(catalog, progress))

    # -------------------------------------------------------------------------
    # Current position
    # -------------------------------------------------------------------------

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_chapter(self) -> Chapter:
        return self.catalog.chapters[self._index]

    @property
    def total_chapters(self) -> int:
        return len(self.catalog)

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self.catalog) - 1

    def is_current_chapter_complete(self) -> bool:
        return is_chapter_complete(self.current_chapter, self.progress)

    def get_missing_blocks(self) -> list[InputBlock]:
        """Required blocks still blocking the current chapter."""
        return missing_blocks(self.current_chapter, self.progress)

    def get_chapter_position(self) -> tuple[int, int]:
        """Current position as (1-based index, total)."""
        return (self._index + 1, len(self.catalog))

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def unlocked_index(self) -> int:
        """Highest navigable chapter index."""
        self._furthest_index = max(
            self._furthest_index,
            unlock_frontier_index(self.catalog, self.progress),
        )
        return self._furthest_index

    def is_chapter_selectable(self, chapter_id: str) -> bool:
        index = self.catalog.index_of(chapter_id)
        return index is not None and index <= self.unlocked_index()

    def completed_chapter_ids(self) -> list[str]:
        return completed_chapter_ids(self.catalog, self.progress)

    def get_chapter_availability(self, chapter: Chapter, index: int) -> ChapterAvailability:
        if index > self.unlocked_index():
            return ChapterAvailability.LOCKED
        if is_chapter_complete(chapter, self.progress):
            return ChapterAvailability.COMPLETED
        return ChapterAvailability.AVAILABLE

    def get_navigation_list(self) -> list[NavigationChapter]:
        """All chapters annotated with availability and current marker."""
        return [
            NavigationChapter(
                chapter=chapter,
                index=index,
                availability=self.get_chapter_availability(chapter, index),
                is_current=index == self._index,
            )
            for index, chapter in enumerate(self.catalog.chapters)
        ]

    def get_status_indicator(self, chapter_id: str) -> str:
        """
        Get status indicator for sidebar display.

        Returns:
            → for current
            ✓ for completed
            ○ for available
            🔒 for locked
        """
        index = self.catalog.index_of(chapter_id)
        if index is None:
            return ""
        if index == self._index:
            return "→"

        availability = self.get_chapter_availability(self.catalog.chapters[index], index)
        if availability == ChapterAvailability.COMPLETED:
            return "✓"
        elif availability == ChapterAvailability.AVAILABLE:
            return "○"
        else:
            return "🔒"

    def get_progress_summary(self) -> dict:
        """Get progress summary for display."""
        total = len(self.catalog)
        completed = len(self.completed_chapter_ids())
        return {
            "total_chapters": total,
            "completed": completed,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "current_chapter_id": self.current_chapter.id,
            "unlocked_index": self.unlocked_index(),
        }

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def _move_to(self, index: int):
        self._index = index
        self._furthest_index = max(self._furthest_index, index)
        self.cursor.save(self.catalog.chapters[index].id)

    def next(self) -> bool:
        """Advance one chapter if the current one is complete."""
        if not self.is_current_chapter_complete():
            return False
        if self._index + 1 >= len(self.catalog):
            return False
        self._move_to(self._index + 1)
        return True

    def previous(self) -> bool:
        """Go back one chapter. Never gated."""
        if self._index <= 0:
            return False
        self._move_to(self._index - 1)
        return True

    def jump_to(self, chapter_id: str) -> bool:
        """Open a chapter from the chapter list if it is unlocked."""
        index = self.catalog.index_of(chapter_id)
        if index is None or index > self.unlocked_index():
            return False
        self._move_to(index)
        self.view_mode = ViewMode.CHAPTERS
        return True

    def complete_journey(self) -> bool:
        """Finish the last chapter and switch to the completion view."""
        if not self.is_last or not self.is_current_chapter_complete():
            return False
        self.view_mode = ViewMode.COMPLETION
        return True

    def restart(self):
        """Back to the first chapter. Answers are kept."""
        self._move_to(0)
        self.view_mode = ViewMode.CHAPTERS

    def reset_cursor(self):
        """Forget the stored cursor (sign-out) and return to the first chapter."""
        self.cursor.clear()
        self._index = 0
        self._furthest_index = unlock_frontier_index(self.catalog, self.progress)
        self.view_mode = ViewMode.CHAPTERS

    # -------------------------------------------------------------------------
    # View mode
    # -------------------------------------------------------------------------

    def open_profile(self):
        self.view_mode = ViewMode.PROFILE

    def open_completion(self):
        self.view_mode = ViewMode.COMPLETION

    def back_to_chapters(self):
        self.view_mode = ViewMode.CHAPTERS

    # -------------------------------------------------------------------------
    # Answers
    # -------------------------------------------------------------------------

    def update_answer(self, key: str, value: AnswerValue):
        self.progress.set(key, value)

    def clear_answer(self, key: str):
        self.progress.clear(key)

    def clear_block(self, block: InputBlock):
        self.progress.clear_block(block)

    def toggle_option(self, block: ChecklistBlock, option: str) -> list[str]:
        return self.progress.toggle_option(block, option)

    def build_report(self) -> Report:
        return build_report(self.catalog, self.progress)
