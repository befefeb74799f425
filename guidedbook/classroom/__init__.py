"""
GuidedBook Classroom - Runtime components for reading and gating chapters.

This module provides:
- load_catalog: Load and validate the chapter catalog
- ProgressStore / CursorStore: Persist answers and the current chapter
- Completion checks: chapter completion and the unlock frontier
- Navigator: Gated chapter navigation and view state
- build_report: Aggregate answers for review and export
"""

from .loader import (
    CatalogError,
    load_catalog,
    parse_catalog,
)

from .storage import (
    StorageTransport,
    SQLiteStorage,
    MemoryStorage,
    DEFAULT_STORAGE_DB,
)

from .progress import (
    ProgressStore,
    CursorStore,
    PERSISTENCE_ERRORS,
)

from .completion import (
    is_block_satisfied,
    is_chapter_complete,
    missing_blocks,
    completed_chapter_ids,
    unlock_frontier_index,
)

from .navigator import (
    Navigator,
    ViewMode,
    ChapterAvailability,
    NavigationChapter,
)

from .report import (
    build_report,
    collect_entries,
)

__all__ = [
    # Loader
    "CatalogError",
    "load_catalog",
    "parse_catalog",
    # Storage
    "StorageTransport",
    "SQLiteStorage",
    "MemoryStorage",
    "DEFAULT_STORAGE_DB",
    # Progress
    "ProgressStore",
    "CursorStore",
    "PERSISTENCE_ERRORS",
    # Completion
    "is_block_satisfied",
    "is_chapter_complete",
    "missing_blocks",
    "completed_chapter_ids",
    "unlock_frontier_index",
    # Navigator
    "Navigator",
    "ViewMode",
    "ChapterAvailability",
    "NavigationChapter",
    # Report
    "build_report",
    "collect_entries",
]
