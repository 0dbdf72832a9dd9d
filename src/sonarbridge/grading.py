"""Grade and color classification for quality-gate metrics.

SonarQube reports ratings as ``"1"`` (best) through ``"6"``; the chat report shows
them as letters. Colors are WeCom markdown font colors.
"""

from __future__ import annotations

from .models import STATUS_OK

STYLE_PASS = "info"
STYLE_FAIL = "warning"
STYLE_WARNING = "warning"
STYLE_EMPTY = "comment"

_GRADES = {
    "1": "A",
    "2": "B",
    "3": "C",
    "4": "D",
    "5": "E",
    "6": "F",
}


def classify_grade(raw_value: str) -> str:
    """Map a numeric rating to its letter grade; other values pass through."""
    return _GRADES.get(raw_value, raw_value)


def classify_status_color(status: str) -> str:
    """Return the pass style for ``OK`` and the fail style for anything else."""
    if status == STATUS_OK:
        return STYLE_PASS
    return STYLE_FAIL


def colorize(text: str, style: str) -> str:
    return f'<font color="{style}">{text}</font>'
