"""Tests for tolerant JSON extraction and child-name parsing."""

import pytest

from backend.populate import response_parser
from backend.populate.settings import LEVEL_LABELS
from domain.location import Level


class TestParse:

    def test_plain_json(self):
        assert response_parser.parse('{"items": []}') == {"items": []}

    def test_code_fence(self):
        raw = '```json\n{"items": [{"name": "Nalgonda"}]}\n```'
        assert response_parser.parse(raw) == {"items": [{"name": "Nalgonda"}]}

    def test_prose_around_object(self):
        raw = 'Here are the districts:\n{"items": [{"name": "Nalgonda"}]}\nHope this helps!'
        assert response_parser.parse(raw) == {"items": [{"name": "Nalgonda"}]}

    def test_brackets_inside_strings(self):
        raw = 'Result: {"items": [{"name": "Kothagudem {old}"}]} trailing ] text'
        assert response_parser.parse(raw)["items"][0]["name"] == "Kothagudem {old}"

    def test_bare_list_after_prose(self):
        assert response_parser.parse('Sure! ["A", "B"]') == ["A", "B"]

    def test_skips_unparseable_candidate(self):
        raw = "[see below] {\"items\": [\"A\"]}"
        assert response_parser.parse(raw) == {"items": ["A"]}

    @pytest.mark.parametrize("raw", [None, "", "   ", "no json here", '{"items": [', "{'single': 'quotes'}"])
    def test_unusable_input(self, raw):
        assert response_parser.parse(raw) is None


class TestParseChildNames:

    def test_items_of_objects(self):
        raw = '{"items": [{"name": "Nalgonda"}, {"name": "Warangal"}]}'
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == ["Nalgonda", "Warangal"]

    def test_level_named_key(self):
        raw = '{"districts": [{"name": "Nalgonda"}]}'
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == ["Nalgonda"]

    def test_mandal_key_and_custom_name_field(self):
        raw = '{"mandals": [{"mandalName": "Miryalaguda", "code": 12}]}'
        assert response_parser.parse_child_names(raw, Level.LOCAL_AREA) == ["Miryalaguda"]

    def test_bare_list_of_strings(self):
        assert response_parser.parse_child_names('["Kazipet", "Madikonda"]', Level.SETTLEMENT) == [
            "Kazipet",
            "Madikonda",
        ]

    def test_english_key(self):
        raw = '{"items": [{"en": "Kazipet", "te": "కాజీపేట"}]}'
        assert response_parser.parse_child_names(raw, Level.SETTLEMENT) == ["Kazipet"]

    def test_single_unknown_list_key(self):
        raw = '{"results": ["Kazipet"]}'
        assert response_parser.parse_child_names(raw, Level.SETTLEMENT) == ["Kazipet"]

    def test_configured_plural_is_a_listing_key(self):
        labels = dict(LEVEL_LABELS)
        labels[Level.SUB_REGION] = ("county", "Counties")
        raw = '{"counties": ["Cork", "Kerry"], "notes": ["Partial list"]}'

        assert response_parser.parse_child_names(raw, Level.SUB_REGION, labels) == ["Cork", "Kerry"]
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == []

    def test_duplicates_collapsed_first_wins(self):
        raw = '{"items": ["Nalgonda", "NALGONDA", " nalgonda ", "Warangal"]}'
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == ["Nalgonda", "Warangal"]

    def test_whitespace_collapsed(self):
        raw = '{"items": ["  Ranga   Reddy "]}'
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == ["Ranga Reddy"]

    def test_malformed_entries_skipped(self):
        raw = '{"items": [{"name": "Nalgonda"}, {"code": 7}, 42, null, {"name": ""}]}'
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == ["Nalgonda"]

    def test_already_parsed_value(self):
        assert response_parser.parse_child_names({"items": ["A"]}, Level.SUB_REGION) == ["A"]

    @pytest.mark.parametrize("raw", [None, "", "garbage", '{"items": "Nalgonda"}', '{"a": [1], "b": [2]}'])
    def test_fails_closed(self, raw):
        assert response_parser.parse_child_names(raw, Level.SUB_REGION) == []
