"""Tests for psql listing output parsing."""

import pytest

from pgsac.catalog.listing import (
    RELATION_BASIC,
    RELATION_EXTENDED,
    ROUTINE,
    ListingFormat,
    parse_listing,
)


class TestParseListing:
    """Test parse_listing."""

    def test_basic_rows(self):
        output = "app|orders|table|postgres\napp|users|table|postgres\n"

        parsed = parse_listing(output, RELATION_BASIC)

        assert parsed.rows == [
            ["app", "orders", "table", "postgres"],
            ["app", "users", "table", "postgres"],
        ]
        assert parsed.skipped == 0

    def test_blank_lines_ignored(self):
        output = "\napp|users|table|postgres\n\n\n"

        parsed = parse_listing(output, RELATION_BASIC)

        assert len(parsed.rows) == 1
        assert parsed.skipped == 0

    def test_empty_output(self):
        parsed = parse_listing("", RELATION_BASIC)

        assert parsed.rows == []
        assert parsed.skipped == 0

    def test_under_width_rows_skipped_and_counted(self):
        output = "app|users|table|postgres\nDid not find any relation\napp|orders\n"

        parsed = parse_listing(output, RELATION_BASIC)

        assert [row[1] for row in parsed.rows] == ["users"]
        assert parsed.skipped == 2

    def test_extended_tolerates_extra_fields(self):
        output = (
            "app|users|table|postgres|permanent|heap|16 kB|\n"
            "app|orders|table|postgres|8192 bytes|\n"
            "app|short|table|postgres|\n"
        )

        parsed = parse_listing(output, RELATION_EXTENDED)

        assert [row[1] for row in parsed.rows] == ["users", "orders"]
        assert parsed.skipped == 1

    def test_routine_records_use_control_separators(self):
        output = "app\x1fadd\x1finteger, integer\x1f23 23\x1eapp\x1fnow_utc\x1f\x1f\n"

        parsed = parse_listing(output, ROUTINE)

        assert parsed.rows == [
            ["app", "add", "integer, integer", "23 23"],
            ["app", "now_utc", "", ""],
        ]


class TestListingFormat:
    """Test ListingFormat validation."""

    def test_columns_must_fit(self):
        with pytest.raises(ValueError, match="needs at least 4 fields"):
            ListingFormat(name="broken", separator="|", expected_fields=2, name_column=3)

    def test_custom_columns(self):
        fmt = ListingFormat(name="swapped", separator=",", expected_fields=2, schema_column=1, name_column=0)

        parsed = parse_listing("users,app\n", fmt)

        assert parsed.rows[0][fmt.schema_column] == "app"
        assert parsed.rows[0][fmt.name_column] == "users"
