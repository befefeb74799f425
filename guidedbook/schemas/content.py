"""
Content schemas for GuidedBook.

Defines Pydantic models for the static course catalog:
- Display blocks (text, quote, subheader, list)
- Input blocks (exercise, input list, checklist) that produce answer keys
- Chapters and the ordered catalog with answer-key validation
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Literal, Optional, Union


# Answer keys starting with this prefix are reserved for cached chapter illustrations
ILLUSTRATION_KEY_PREFIX = "img_"

# Marker for highlighted action steps inside text blocks
ACTION_STEP_MARKER = "[ACTION_STEP]"

# Marker for check-style items inside list blocks
CHECK_ITEM_MARKER = "✓"


class BlockBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str


# -----------------------------------------------------------------------------
# Display blocks (never collect input, never gate completion)
# -----------------------------------------------------------------------------

class TextBlock(BlockBase):
    type: Literal["text"] = "text"
    content: str  # may contain inline HTML (<strong>)

    @property
    def is_action_step(self) -> bool:
        return self.content.startswith(ACTION_STEP_MARKER)

    @property
    def display_text(self) -> str:
        """Text without the action step marker."""
        if self.is_action_step:
            return self.content[len(ACTION_STEP_MARKER):].strip()
        return self.content


class QuoteBlock(BlockBase):
    type: Literal["quote"] = "quote"
    content: str


class SubheaderBlock(BlockBase):
    type: Literal["subheader"] = "subheader"
    content: str


class ListBlock(BlockBase):
    type: Literal["list"] = "list"
    items: list[str] = Field(..., min_length=1)


# -----------------------------------------------------------------------------
# Input blocks (produce answer keys)
# -----------------------------------------------------------------------------

class InputBlockBase(BlockBase):
    id: Optional[str] = None  # answer key; a missing id never gates completion
    label: Optional[str] = None
    placeholder: Optional[str] = None
    is_optional: bool = False

    def answer_keys(self) -> list[str]:
        """Answer keys this block writes into the progress store."""
        return [self.id] if self.id else []


class ExerciseBlock(InputBlockBase):
    """Single free-text answer stored under ``id``."""
    type: Literal["exercise"] = "exercise"
    prompt: Optional[str] = None  # instruction shown above the text area


class InputListBlock(InputBlockBase):
    """
    N independent free-text answers, one per prompt.

    Answers are stored under derived keys ``{id}_{index}``.
    """
    type: Literal["input_list"] = "input_list"
    prompts: list[str] = Field(..., min_length=1)
    input_type: Literal["text", "textarea"] = "text"

    def answer_keys(self) -> list[str]:
        if not self.id:
            return []
        return [f"{self.id}_{index}" for index in range(len(self.prompts))]


class ChecklistBlock(InputBlockBase):
    """Multi-select answer stored under ``id`` as a list of selected options."""
    type: Literal["checklist"] = "checklist"
    options: list[str] = Field(..., min_length=1)
    min_selections: Optional[int] = Field(default=None, ge=1)
    max_selections: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def selection_bounds_valid(self):
        if (
            self.min_selections is not None
            and self.max_selections is not None
            and self.min_selections > self.max_selections
        ):
            raise ValueError("min_selections cannot exceed max_selections")
        bound = self.max_selections or self.min_selections
        if bound is not None and bound > len(self.options):
            raise ValueError("selection bounds exceed the number of options")
        return self

    @property
    def required_selections(self) -> int:
        return self.min_selections or 1


Block = Union[
    TextBlock,
    QuoteBlock,
    SubheaderBlock,
    ListBlock,
    ExerciseBlock,
    InputListBlock,
    ChecklistBlock,
]

InputBlock = Union[ExerciseBlock, InputListBlock, ChecklistBlock]

INPUT_BLOCK_TYPES = (ExerciseBlock, InputListBlock, ChecklistBlock)


def is_input_block(block: BlockBase) -> bool:
    return isinstance(block, INPUT_BLOCK_TYPES)


# -----------------------------------------------------------------------------
# Chapters and catalog
# -----------------------------------------------------------------------------

class Chapter(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    subtitle: Optional[str] = None
    image_prompt: Optional[str] = None
    blocks: list[Block] = []

    def input_blocks(self) -> list[InputBlock]:
        """Answer-collecting blocks in chapter order."""
        return [block for block in self.blocks if is_input_block(block)]

    def required_blocks(self) -> list[InputBlock]:
        """Input blocks that count towards chapter completion."""
        return [block for block in self.input_blocks() if not block.is_optional]

    def answer_keys(self) -> list[str]:
        keys = []
        for block in self.input_blocks():
            keys.extend(block.answer_keys())
        return keys


class Catalog(BaseModel):
    """
    Ordered, immutable course catalog.

    Chapter order defines the reading journey and the unlock order.
    Answer keys are validated for global uniqueness because the
    progress store is a single flat mapping.
    """
    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: Optional[str] = None
    chapters: list[Chapter] = Field(..., min_length=1)

    @model_validator(mode="after")
    def identifiers_unique(self):
        seen_chapters: set[str] = set()
        seen_keys: dict[str, str] = {}
        for chapter in self.chapters:
            if chapter.id in seen_chapters:
                raise ValueError(f"Duplicate chapter id: {chapter.id}")
            seen_chapters.add(chapter.id)

            for key in chapter.answer_keys():
                if key.startswith(ILLUSTRATION_KEY_PREFIX):
                    raise ValueError(
                        f"Answer key '{key}' uses reserved prefix '{ILLUSTRATION_KEY_PREFIX}'"
                    )
                previous = seen_keys.get(key)
                if previous is not None:
                    raise ValueError(
                        f"Duplicate answer key: {key} (in {previous} and {chapter.id})"
                    )
                seen_keys[key] = chapter.id
        return self

    def __len__(self) -> int:
        return len(self.chapters)

    @property
    def first_chapter(self) -> Chapter:
        return self.chapters[0]

    def chapter_ids(self) -> list[str]:
        return [chapter.id for chapter in self.chapters]

    def index_of(self, chapter_id: Optional[str]) -> Optional[int]:
        """Position of a chapter in catalog order, or None if unknown."""
        for index, chapter in enumerate(self.chapters):
            if chapter.id == chapter_id:
                return index
        return None

    def get_chapter(self, chapter_id: Optional[str]) -> Optional[Chapter]:
        index = self.index_of(chapter_id)
        return self.chapters[index] if index is not None else None

    def answer_keys(self) -> list[str]:
        keys = []
        for chapter in self.chapters:
            keys.extend(chapter.answer_keys())
        return keys
