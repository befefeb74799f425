"""
GuidedBook Schemas - Pydantic models for the course reader.

This module exports all schema classes for:
- Content: chapters, typed blocks, catalog
- Progress: answer values and the flat progress mapping
- Report: aggregated answers for review and export
- Access: reader profiles and payment webhook payloads
"""

# Content schemas
from .content import (
    TextBlock,
    QuoteBlock,
    SubheaderBlock,
    ListBlock,
    ExerciseBlock,
    InputListBlock,
    ChecklistBlock,
    Block,
    InputBlock,
    INPUT_BLOCK_TYPES,
    is_input_block,
    Chapter,
    Catalog,
    ILLUSTRATION_KEY_PREFIX,
    ACTION_STEP_MARKER,
    CHECK_ITEM_MARKER,
)

# Progress schemas
from .progress import (
    AnswerValue,
    UserProgress,
)

# Report schemas
from .report import (
    ReportEntry,
    ReportBlock,
    ReportChapter,
    Report,
)

# Access schemas
from .access import (
    Profile,
    Account,
    Buyer,
    PurchaseData,
    WebhookPayload,
)

__all__ = [
    # Content
    'TextBlock',
    'QuoteBlock',
    'SubheaderBlock',
    'ListBlock',
    'ExerciseBlock',
    'InputListBlock',
    'ChecklistBlock',
    'Block',
    'InputBlock',
    'INPUT_BLOCK_TYPES',
    'is_input_block',
    'Chapter',
    'Catalog',
    'ILLUSTRATION_KEY_PREFIX',
    'ACTION_STEP_MARKER',
    'CHECK_ITEM_MARKER',
    # Progress
    'AnswerValue',
    'UserProgress',
    # Report
    'ReportEntry',
    'ReportBlock',
    'ReportChapter',
    'Report',
    # Access
    'Profile',
    'Account',
    'Buyer',
    'PurchaseData',
    'WebhookPayload',
]
