"""Tests for ActuationStatus rendering and parsing."""

from __future__ import annotations

import pytest

from kapply.models.identity import ObjectIdentity
from kapply.models.status import ActuationStatus, InventoryEntry, render_actuation_status


class TestRendering:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (ActuationStatus.PENDING, "Pending"),
            (ActuationStatus.SUCCEEDED, "Succeeded"),
            (ActuationStatus.SKIPPED, "Skipped"),
            (ActuationStatus.FAILED, "Failed"),
        ],
    )
    def test_str(self, status: ActuationStatus, expected: str) -> None:
        assert str(status) == expected
        assert render_actuation_status(int(status)) == expected

    @pytest.mark.parametrize("value", [-1, 4, 99])
    def test_unknown_value_renders_tagged(self, value: int) -> None:
        assert render_actuation_status(value) == f"ActuationStatus({value})"

    def test_fixed_ordering(self) -> None:
        assert [int(s) for s in ActuationStatus] == [0, 1, 2, 3]
        assert ActuationStatus.PENDING < ActuationStatus.SUCCEEDED < ActuationStatus.SKIPPED < ActuationStatus.FAILED


class TestParsing:
    def test_empty_string_is_pending(self) -> None:
        assert ActuationStatus.parse("") is ActuationStatus.PENDING

    def test_parse_each_rendered_name(self) -> None:
        for status in ActuationStatus:
            assert ActuationStatus.parse(str(status)) is status

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(ValueError, match="unknown actuation status"):
            ActuationStatus.parse("Deleted")


class TestInventoryEntry:
    def test_default_status_is_pending(self) -> None:
        entry = InventoryEntry(identity=ObjectIdentity("", "Pod", "default", "a"))
        assert entry.status is ActuationStatus.PENDING
