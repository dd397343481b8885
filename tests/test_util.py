import pytest

from blood_platform.db import MAX_ROW_ID, _qmark_to_pct, is_row_id, like_contains
from blood_platform.util.normalization import normalize_blood_group
from blood_platform.util.pagination import page_window

pytestmark = pytest.mark.unit


class TestNormalizeBloodGroup:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("A+", "A+"),
            ("ab-", "AB-"),
            (" o+ ", "O+"),
            ("A ", "A+"),
            ("AB ", "AB+"),
            ("", None),
            ("   ", None),
            (None, None),
        ],
    )
    def test_valid(self, raw, expected):
        assert normalize_blood_group(raw) == expected

    @pytest.mark.parametrize("raw", ["A", "C+", "O", "AB+-", "B +"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            normalize_blood_group(raw)


class TestPageWindow:
    def test_total_pages_is_ceiling(self):
        assert page_window(page=1, page_size=10, total=0).total_pages == 0
        assert page_window(page=1, page_size=10, total=1).total_pages == 1
        assert page_window(page=1, page_size=10, total=10).total_pages == 1
        assert page_window(page=1, page_size=10, total=11).total_pages == 2

    def test_offset(self):
        assert page_window(page=3, page_size=10, total=50).offset == 20

    def test_page_below_one_is_clamped(self):
        assert page_window(page=0, page_size=10, total=5).page == 1

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError):
            page_window(page=1, page_size=0, total=5)


def test_like_contains_escapes_wildcards():
    assert like_contains(" Dha ") == "%dha%"
    assert like_contains("50%_off") == "%50\\%\\_off%"


def test_qmark_to_pct_leaves_literals_alone():
    sql = "SELECT * FROM users WHERE status='active?' AND email=? AND name LIKE ?"
    assert _qmark_to_pct(sql) == "SELECT * FROM users WHERE status='active?' AND email=%s AND name LIKE %s"


@pytest.mark.parametrize("value,expected", [(1, True), (MAX_ROW_ID, True), (0, False), (MAX_ROW_ID + 1, False), ("12", True), ("x", False), (None, False)])
def test_is_row_id(value, expected):
    assert is_row_id(value) is expected
