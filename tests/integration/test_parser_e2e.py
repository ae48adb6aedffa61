"""
End-to-end tests: rules files → service → parse → link.
"""
import json
import logging

import pytest

from lore_parser.config.loader import RuleConfigError
from lore_parser.extraction.parser import build_parser
from lore_parser.linking.linker import InMemoryDirectory
from lore_parser.models.entity import HitSource, Link
from lore_parser.models.kind import EntityKind
from lore_parser.models.parse_io import ParseRequest
from lore_parser.service.pipeline import LoreParsingService, configure_logging

MYTHOS_TEXT = "Theron Blackwood visited the Crystal Spire on 15th Stormtide, Year 412 AE."


class TestCourtScene:
    """Title pattern + coreference over a short scene."""

    def test_title_hit_and_coreference(self, title_patterns, court_text):
        parser = build_parser(patterns=title_patterns)
        hits = parser.parse(court_text, fuzzy=False).hits

        assert [h.text for h in hits] == ["Lord Rawn", "his", "The Lord"]

        lord = hits[0]
        assert lord.kind == EntityKind.PERSON
        assert lord.source == HitSource.PATTERN
        assert (lord.start, lord.end) == (0, 9)
        assert lord.score == pytest.approx(0.91)

        for coref in hits[1:]:
            assert coref.pattern_id == "coref"
            assert coref.link.name == "Lord Rawn"
            assert coref.link.slug == "lord-rawn"
            assert coref.score == pytest.approx(0.819)
            assert coref.score <= 0.85

    def test_response_is_json_serializable(self, title_patterns, court_text):
        parser = build_parser(patterns=title_patterns)
        payload = json.loads(json.dumps(parser.parse(court_text).to_dict()))
        assert payload["hits"][0]["span"]["text"] == "Lord Rawn"
        assert "Lord" in payload["tokens"]


class TestLoreParsingService:
    def test_project_request(self, rules_dir):
        service = LoreParsingService(rules_dir)
        req = ParseRequest(text=MYTHOS_TEXT, project_id="mythos", fuzzy=False)
        hits = service.parse_lore(req).hits

        assert [(h.kind, h.text) for h in hits] == [
            (EntityKind.PERSON, "Theron Blackwood"),
            (EntityKind.PLACE, "Crystal Spire"),
            (EntityKind.DATE, "15th Stormtide, Year 412 AE"),
        ]
        date = hits[-1]
        assert date.pattern_id == "full_date"
        assert date.score == pytest.approx(0.95)

    def test_default_parser_ignores_project_rules(self, rules_dir):
        service = LoreParsingService(rules_dir)
        hits = service.parse_lore_text(MYTHOS_TEXT, fuzzy=False).hits
        assert hits == []

    def test_project_parser_cached(self, rules_dir):
        service = LoreParsingService(rules_dir)
        assert service.parser_for("mythos") is service.parser_for("mythos")
        assert service.parser_for(None) is service.parser

    def test_kind_filter(self, rules_dir):
        service = LoreParsingService(rules_dir)
        req = ParseRequest(text=MYTHOS_TEXT, project_id="mythos", kinds=["Date"], fuzzy=False)
        assert [h.text for h in service.parse_lore(req).hits] == ["15th Stormtide, Year 412 AE"]

    def test_linking_with_directory(self, rules_dir):
        spire = Link(name="Crystal Spire", kind=EntityKind.PLACE, id="pl-9", slug="crystal-spire")
        directory = InMemoryDirectory([spire])
        service = LoreParsingService(rules_dir, lookup=directory.by_kind_text)

        req = ParseRequest(text=MYTHOS_TEXT, project_id="mythos", fuzzy=False)
        linked = {h.text: h.link for h in service.parse_lore(req).hits}

        assert linked["Crystal Spire"] == spire
        assert linked["Theron Blackwood"] is None

    def test_per_call_lookup_overrides(self, rules_dir):
        service = LoreParsingService(rules_dir)
        amicae = Link(name="Amicae", kind=EntityKind.PERSON, id="p-1")

        response = service.parse_lore(
            ParseRequest(text="Amicae left Eryndor", fuzzy=False),
            lookup=InMemoryDirectory([amicae]).by_kind_text,
        )
        assert response.hits[0].link == amicae

    def test_missing_rules_dir(self, tmp_path):
        with pytest.raises(RuleConfigError):
            LoreParsingService(tmp_path)

    def test_malformed_project_overlay(self, rules_dir, write_rules):
        write_rules(rules_dir, "calendar.bad.yaml", "months: 12\n")
        service = LoreParsingService(rules_dir)

        with pytest.raises(RuleConfigError):
            service.parse_lore(ParseRequest(text="x", project_id="bad"))
        assert service.parse_lore_text("Amicae", fuzzy=False).hits[0].text == "Amicae"

    def test_request_logged(self, rules_dir, caplog):
        configure_logging("DEBUG")
        service = LoreParsingService(rules_dir)

        with caplog.at_level(logging.INFO, logger="lore_parser.service.pipeline"):
            service.parse_lore(ParseRequest(text=MYTHOS_TEXT, project_id="mythos", fuzzy=False))

        assert "parse_lore project=mythos" in caplog.text
