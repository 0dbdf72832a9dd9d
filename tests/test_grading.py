"""Tests for grade and status color classification."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sonarbridge.grading import STYLE_FAIL, STYLE_PASS, classify_grade, classify_status_color, colorize


@pytest.mark.parametrize(
    "raw_value, grade",
    [("1", "A"), ("2", "B"), ("3", "C"), ("4", "D"), ("5", "E"), ("6", "F")],
)
def test_classify_grade_maps_ratings_to_letters(raw_value, grade):
    """Verify numeric SonarQube ratings map to letter grades."""
    assert classify_grade(raw_value) == grade


@pytest.mark.parametrize("raw_value", ["", "0", "7", "1.0", "85.3", "A", " 1"])
def test_classify_grade_returns_other_values_unchanged(raw_value):
    """Verify values outside the rating table pass through untouched."""
    assert classify_grade(raw_value) == raw_value


def test_classify_status_color_ok_is_pass_style():
    """Verify an OK condition uses the pass style."""
    assert classify_status_color("OK") == STYLE_PASS


@pytest.mark.parametrize("status", ["ERROR", "WARN", "ok", ""])
def test_classify_status_color_other_statuses_use_fail_style(status):
    """Verify every status other than OK uses the fail style."""
    assert classify_status_color(status) == STYLE_FAIL


def test_colorize_wraps_text_in_font_tag():
    """Verify colorize produces WeCom markdown font markup."""
    assert colorize("A", "info") == '<font color="info">A</font>'
