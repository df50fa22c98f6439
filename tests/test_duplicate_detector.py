"""
tests/test_duplicate_detector.py

Unit tests for in-file duplicate key detection.
"""

from __future__ import annotations

from conftest import empty_row, make_row

from app.validators.duplicate_detector import DuplicateDetector, duplicate_key


class TestDuplicateKey:
    def test_numeric_fields_are_normalized(self) -> None:
        assert duplicate_key(make_row(month="8")) == duplicate_key(make_row(month="08"))
        assert duplicate_key(make_row(channel_id="1")) == duplicate_key(make_row(channel_id=" 1 "))
        assert duplicate_key(make_row(tag_id="10")) == duplicate_key(make_row(tag_id="010"))

    def test_year_is_part_of_the_key(self) -> None:
        assert duplicate_key(make_row(year="2025")) != duplicate_key(make_row(year="2026"))

    def test_account_rows_ignore_tag_id(self) -> None:
        first = make_row(tag_header="Account", tag_name="Account", tag_id="1")
        second = make_row(tag_header="Account", tag_name="Account", tag_id="2")
        assert duplicate_key(first) == duplicate_key(second)

    def test_unparseable_values_compare_as_trimmed_text(self) -> None:
        assert duplicate_key(make_row(month="Aug")) == duplicate_key(make_row(month=" Aug "))
        assert duplicate_key(make_row(month="Aug")) != duplicate_key(make_row(month="Sep"))


class TestDuplicateDetector:
    def test_flags_every_colliding_row(self) -> None:
        rows = [make_row(), make_row(spends_target="2000"), make_row(channel_id="2")]
        detector = DuplicateDetector(rows)

        assert detector.is_duplicate(rows[0])
        assert detector.is_duplicate(rows[1])
        assert not detector.is_duplicate(rows[2])

    def test_empty_rows_never_collide(self) -> None:
        rows = [empty_row(), empty_row(), make_row()]
        detector = DuplicateDetector(rows)

        assert not detector.is_duplicate(rows[2])

    def test_describe_mentions_the_raw_key_fields(self) -> None:
        message = DuplicateDetector.describe(make_row())
        assert message == (
            "Category entry already exists for client_subgroup_id=5, channel_id=1, "
            "tag_id=10, month=8, and year=2025 in this upload"
        )
