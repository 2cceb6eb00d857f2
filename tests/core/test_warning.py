"""Unit tests for warning parsing and identity.

Pure function tests - no mocks needed.
"""

import pytest

from stormrelay.core.warning import (
    WarningRecord,
    parse_warning,
    parse_warnings,
    warning_identity,
)


def make_raw(**overrides):
    """Build a raw warning record as scraped from the page."""
    raw = {
        "type": "thunderstorm",
        "severity": "2",
        "text": "Búrky s krupobitím",
        "start_time": "21.10. 14:00",
        "end_time": "21.10. 22:00",
    }
    raw.update(overrides)
    return raw


class TestParseWarning:
    """Tests for parse_warning()."""

    def test_parses_complete_record(self):
        record = parse_warning(make_raw())

        assert record == WarningRecord(
            type="thunderstorm",
            severity="2",
            text="Búrky s krupobitím",
            start_time="21.10. 14:00",
            end_time="21.10. 22:00",
        )

    def test_strips_whitespace(self):
        record = parse_warning(make_raw(text="  Silný vietor \n"))

        assert record.text == "Silný vietor"

    def test_converts_values_to_strings(self):
        record = parse_warning(make_raw(severity=3))

        assert record.severity == "3"

    @pytest.mark.parametrize("name", ["type", "severity", "text", "start_time", "end_time"])
    def test_missing_field_returns_none(self, name):
        raw = make_raw()
        del raw[name]

        assert parse_warning(raw) is None

    @pytest.mark.parametrize("name", ["type", "severity", "text", "start_time", "end_time"])
    def test_null_field_returns_none(self, name):
        assert parse_warning(make_raw(**{name: None})) is None

    @pytest.mark.parametrize("name", ["type", "severity", "text"])
    def test_blank_field_returns_none(self, name):
        assert parse_warning(make_raw(**{name: "   "})) is None

    def test_non_dict_returns_none(self):
        assert parse_warning(None) is None


class TestParseWarnings:
    """Tests for parse_warnings()."""

    def test_drops_malformed_and_keeps_order(self):
        raw_records = [
            make_raw(type="wind"),
            make_raw(text=None),
            make_raw(type="rain"),
        ]

        warnings = parse_warnings(raw_records)

        assert [w.type for w in warnings] == ["wind", "rain"]

    def test_empty_list(self):
        assert parse_warnings([]) == []


class TestWarningIdentity:
    """Tests for warning_identity()."""

    def test_is_sha1_hex(self):
        identity = warning_identity(parse_warning(make_raw()))

        assert len(identity) == 40
        int(identity, 16)

    def test_text_does_not_change_identity(self):
        """A reworded headline is the same warning."""
        a = parse_warning(make_raw(text="Búrky"))
        b = parse_warning(make_raw(text="Búrky s krupobitím a nárazmi vetra"))

        assert warning_identity(a) == warning_identity(b)

    @pytest.mark.parametrize("name,value", [
        ("type", "wind"),
        ("severity", "3"),
        ("start_time", "22.10. 00:00"),
        ("end_time", "22.10. 06:00"),
    ])
    def test_other_fields_change_identity(self, name, value):
        base = parse_warning(make_raw())
        changed = parse_warning(make_raw(**{name: value}))

        assert warning_identity(base) != warning_identity(changed)

    def test_field_boundaries_are_unambiguous(self):
        """Moving an underscore between fields gives a different warning."""
        a = parse_warning(make_raw(type="a_b", severity="c"))
        b = parse_warning(make_raw(type="a", severity="b_c"))

        assert warning_identity(a) != warning_identity(b)
