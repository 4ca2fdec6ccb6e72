"""Tests for identifier normalization."""

import pytest
from hypothesis import given, strategies as st

from rulegraph.kernel.ids import is_valid_id, normalize_id


@pytest.mark.parametrize("raw,expected", [
    ("Systolic Pressure", "systolic_pressure"),
    ("  blood-pressure  ", "blood_pressure"),
    ("BMI", "bmi"),
    ("a - b", "a_b"),
    ("__leading__trailing__", "leading_trailing"),
    ("temp (°C)", "temp_c"),
    ("naïve", "nave"),
    ("x.y/z", "xyz"),
    ("tab\tand\nnewline", "tab_and_newline"),
    ("", ""),
    ("!!!", ""),
])
def test_normalize_id(raw, expected):
    assert normalize_id(raw) == expected


@pytest.mark.parametrize("raw", [
    "Systolic Pressure", "  a--b  ", "ÄÖÜ", "_x_", "x__y", "ALL CAPS-AND dashes", "",
])
def test_normalize_id_is_idempotent(raw):
    once = normalize_id(raw)
    assert normalize_id(once) == once


@given(st.text())
def test_normalize_id_is_idempotent_for_any_text(raw):
    once = normalize_id(raw)
    assert normalize_id(once) == once
    assert is_valid_id(raw) == (once != "")


def test_is_valid_id():
    assert is_valid_id("weight")
    assert is_valid_id(" Weight ")
    assert not is_valid_id("")
    assert not is_valid_id("   ")
    assert not is_valid_id("---")
    assert not is_valid_id("é")
