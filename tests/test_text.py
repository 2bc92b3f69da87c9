"""Tests for accent-insensitive text folding."""

import pytest

from cinema_showtimes.text import contains_normalized, normalize


def test_vietnamese_place_name_folds_to_ascii():
    assert normalize("Đà Lạt") == normalize("da lat") == "da lat"


def test_lowercase_d_with_stroke():
    assert normalize("phim đặc biệt") == "phim dac biet"


@pytest.mark.parametrize("text", ["Avéngers: Kỷ Nguyên", "ĐẠI HỌC", "plain", "", "Crème brûlée"])
def test_normalize_is_idempotent(text):
    assert normalize(normalize(text)) == normalize(text)


def test_none_folds_to_empty():
    assert normalize(None) == ""


def test_contains_normalized():
    assert contains_normalized("Avéngers: Kỷ Nguyên", "avengers")
    assert contains_normalized("Phòng Chiếu 3", "PHONG CHIEU")
    assert not contains_normalized("Room 1", "room 2")
    assert not contains_normalized(None, "room")
