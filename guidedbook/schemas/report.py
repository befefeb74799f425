"""
Report schemas for GuidedBook.

The completion report groups every non-empty answer by chapter, in
catalog order, for on-screen review and PDF export.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal, Optional


class ReportEntry(BaseModel):
    prompt: Optional[str] = None  # input list prompt label; None for single answers
    answer: str


class ReportBlock(BaseModel):
    block_id: str
    kind: Literal["exercise", "input_list", "checklist"]
    label: Optional[str] = None
    entries: list[ReportEntry] = Field(..., min_length=1)


class ReportChapter(BaseModel):
    chapter_id: str
    title: str
    subtitle: Optional[str] = None
    blocks: list[ReportBlock] = Field(..., min_length=1)


class Report(BaseModel):
    title: str
    generated_at: datetime = Field(default_factory=datetime.now)
    chapters: list[ReportChapter] = []

    @property
    def is_empty(self) -> bool:
        return not self.chapters

    @property
    def answer_count(self) -> int:
        return sum(len(block.entries) for chapter in self.chapters for block in chapter.blocks)
