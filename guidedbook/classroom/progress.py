"""
ProgressStore - Reader answers persisted as one JSON snapshot.

Stores reader state separately from the static catalog:
- Exercise answers (flat answer-key -> value mapping)
- Current chapter cursor

Every mutation rewrites the full snapshot. Persistence is best effort:
failures are logged and the in-memory state stays authoritative.
"""

import json
import logging
import sqlite3
from collections.abc import Mapping
from typing import Iterator, Optional

from guidedbook.config import ACTIVE_CHAPTER_KEY, PROGRESS_STORAGE_KEY
from guidedbook.schemas import AnswerValue, ChecklistBlock, InputBlock, UserProgress

from .answers import empty_value_for, empty_value_for_block, selection_value, toggle_selection
from .storage import StorageTransport


logger = logging.getLogger(__name__)

PERSISTENCE_ERRORS = (sqlite3.Error, OSError, TypeError, ValueError)


class ProgressStore(Mapping):
    """
    Flat mapping of answer keys to answer values.

    Read access follows the Mapping protocol so the completion
    evaluator can take the store directly.
    """

    def __init__(self, storage: StorageTransport, key: str = PROGRESS_STORAGE_KEY):
        """
        Initialize the store and load the persisted snapshot.

        Args:
            storage: Transport used for the snapshot blob
            key: Storage key holding the snapshot
        """
        self.storage = storage
        self.key = key
        self._data: UserProgress = self.load_all()

    # -------------------------------------------------------------------------
    # Mapping protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, key: str) -> AnswerValue:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def snapshot(self) -> UserProgress:
        """Copy of the current in-memory state."""
        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in self._data.items()
        }

    # -------------------------------------------------------------------------
    # Bulk persistence
    # -------------------------------------------------------------------------

    def load_all(self) -> UserProgress:
        """
        Read the stored snapshot.

        Returns an empty dict if nothing is stored, the blob is corrupted,
        or the transport fails.
        """
        try:
            raw = self.storage.read_key(self.key)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not read progress snapshot: {e}")
            return {}

        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding corrupted progress snapshot: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning("Discarding progress snapshot that is not a JSON object")
            return {}
        return data

    def save_all(self, snapshot: Optional[UserProgress] = None) -> bool:
        """
        Persist a full snapshot (default: the in-memory state).

        Returns True if the write succeeded.
        """
        data = self._data if snapshot is None else snapshot
        try:
            self.storage.write_key(self.key, json.dumps(data, ensure_ascii=False))
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Progress not persisted, keeping in-memory state: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def set(self, key: str, value: AnswerValue) -> bool:
        """Replace one answer and persist the whole store."""
        stored = list(value) if isinstance(value, list) else value
        self._data = {**self._data, key: stored}
        return self.save_all()

    def clear(self, key: str) -> bool:
        """Reset one answer to its empty form ("" or [])."""
        return self.set(key, empty_value_for(self._data.get(key)))

    def clear_block(self, block: InputBlock) -> bool:
        """Reset every answer key produced by an input block."""
        keys = block.answer_keys()
        if not keys:
            return True
        empty = empty_value_for_block(block)
        self._data = {**self._data, **{key: empty for key in keys}}
        return self.save_all()

    def toggle_option(self, block: ChecklistBlock, option: str) -> list[str]:
        """
        Toggle a checklist option, honouring max_selections.

        Returns the resulting selection. Unknown options and blocks
        without an id leave the store unchanged.
        """
        if not block.id or option not in block.options:
            return selection_value(self._data.get(block.id)) if block.id else []

        current = selection_value(self._data.get(block.id))
        updated = toggle_selection(current, option, block.max_selections)
        if updated != current:
            self.set(block.id, updated)
        return updated

    def reset(self):
        """Drop every answer (used on sign-out)."""
        self._data = {}
        try:
            self.storage.delete_key(self.key)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not delete progress snapshot: {e}")


class CursorStore:
    """Persisted id of the chapter the reader is on."""

    def __init__(self, storage: StorageTransport, key: str = ACTIVE_CHAPTER_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Optional[str]:
        try:
            return self.storage.read_key(self.key)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not read active chapter: {e}")
            return None

    def save(self, chapter_id: str) -> bool:
        try:
            self.storage.write_key(self.key, chapter_id)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Active chapter not persisted: {e}")
            return False
        return True

    def clear(self):
        try:
            self.storage.delete_key(self.key)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not clear active chapter: {e}")
