"""
Answer value helpers shared by the progress store, evaluator and report.

The progress store does not enforce value shapes, so every reader of a
value goes through these coercions.
"""

from typing import Optional

from guidedbook.schemas import AnswerValue, ChecklistBlock, InputBlock


def text_value(value: Optional[AnswerValue]) -> str:
    """Free-text view of a stored value ("" when absent or not text)."""
    return value if isinstance(value, str) else ""


def has_text(value: Optional[AnswerValue]) -> bool:
    """True if the value is a string with non-whitespace content."""
    return bool(text_value(value).strip())


def selection_value(value: Optional[AnswerValue]) -> list[str]:
    """Checklist view of a stored value ([] when absent or not a list)."""
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


def empty_value_for(value: Optional[AnswerValue]) -> AnswerValue:
    """Empty form matching the shape of an existing value."""
    return [] if isinstance(value, list) else ""


def empty_value_for_block(block: InputBlock) -> AnswerValue:
    return [] if isinstance(block, ChecklistBlock) else ""


def toggle_selection(
    current: list[str],
    option: str,
    max_selections: Optional[int] = None,
) -> list[str]:
    """
    Toggle one checklist option.

    Deselecting always succeeds. Selecting past max_selections is a
    no-op and returns the current selection unchanged.
    """
    if option in current:
        return [item for item in current if item != option]
    if max_selections and len(current) >= max_selections:
        return list(current)
    return [*current, option]
