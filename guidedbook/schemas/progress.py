"""
Progress schemas for GuidedBook.

The progress store is a flat mapping from answer key to answer value.
The value shape follows the producing block:
- exercise / input list field: str
- checklist: list[str] of selected options
- legacy flags: bool
"""

from typing import Union


AnswerValue = Union[str, list[str], bool]

UserProgress = dict[str, AnswerValue]
