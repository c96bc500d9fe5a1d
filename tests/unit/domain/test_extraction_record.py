"""Tests for the extraction record and its companions."""

from __future__ import annotations

import pytest

from gleaner.domain.entities import (
    CastMember,
    ExtractionItem,
    ExtractionRecord,
    ExtractionStatus,
)


class TestExtractionRecordDefaults:
    def test_empty_record_has_total_schema(self) -> None:
        data = ExtractionRecord().to_dict()
        assert data["title"] == ""
        assert data["screenshots"] == []
        assert data["cast"] == []
        assert data["magnetLinks"] == []
        assert data["downloadLinks"] == []
        assert data["durationMinutes"] == 0
        assert data["rating"] == 0.0
        assert data["extractionStatus"] == "success"

    def test_list_defaults_are_not_shared(self) -> None:
        a = ExtractionRecord()
        b = ExtractionRecord()
        a.tags.append("x")
        assert b.tags == []


class TestExtractionRecordSerialization:
    def test_to_dict_uses_camel_case_keys(self, record: ExtractionRecord) -> None:
        data = record.to_dict()
        assert data["releaseDate"] == "2018-07-13"
        assert data["sourceId"] == "javbus"
        assert data["cast"][0]["profileUrl"] == "https://www.javbus.com/star/abc"
        assert data["magnetLinks"][0]["seeders"] == 3

    def test_from_dict_restores_record(self, record: ExtractionRecord) -> None:
        restored = ExtractionRecord.from_dict(record.to_dict())
        assert restored == record

    def test_from_dict_tolerates_missing_keys(self) -> None:
        restored = ExtractionRecord.from_dict({"title": "Only a title"})
        assert restored.title == "Only a title"
        assert restored.cast == []
        assert restored.extraction_status is ExtractionStatus.SUCCESS

    def test_from_dict_rejects_non_mapping(self) -> None:
        with pytest.raises(ValueError):
            ExtractionRecord.from_dict(["not", "a", "dict"])  # type: ignore[arg-type]

    def test_from_dict_rejects_unknown_status(self) -> None:
        with pytest.raises(ValueError):
            ExtractionRecord.from_dict({"extractionStatus": "weird"})

    def test_cast_member_dict(self) -> None:
        member = CastMember(name="A", avatar="https://x.test/a.jpg")
        assert member.to_dict() == {
            "name": "A",
            "profileUrl": "",
            "avatar": "https://x.test/a.jpg",
        }


class TestExtractionItem:
    def test_from_dict_maps_aliases(self) -> None:
        item = ExtractionItem.from_dict(
            {"id": 7, "url": "https://a.test/x", "sourceHint": "javbus", "query": "IPX-156"}
        )
        assert item.id == "7"
        assert item.source_hint == "javbus"
        assert item.keyword == "IPX-156"

    def test_from_dict_empty_hint_becomes_none(self) -> None:
        item = ExtractionItem.from_dict({"url": "https://a.test/x", "sourceHint": ""})
        assert item.source_hint is None
