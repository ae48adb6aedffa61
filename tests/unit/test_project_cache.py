"""
Unit tests for default / per-project parser construction and caching.
"""
import threading
import time
from pathlib import Path

import pytest

from lore_parser.config import settings
from lore_parser.config.loader import RuleConfigError
from lore_parser.extraction.parser import Parser
from lore_parser.models.kind import EntityKind
from lore_parser.service import project_cache
from lore_parser.service.project_cache import (
    ProjectParserCache,
    _safe_project_id,
    build_default_parser,
    build_project_parser,
)


def _texts(parser, text):
    return [h.text for h in parser.parse(text, fuzzy=False).hits]


class TestBuildDefaultParser:
    def test_missing_base_file(self, tmp_path):
        with pytest.raises(RuleConfigError) as exc_info:
            build_default_parser(tmp_path)
        assert exc_info.value.errors == ["base rules file not found"]

    def test_base_rules_and_default_calendar(self, rules_dir):
        parser = build_default_parser(rules_dir)
        ids = [r.id for r in parser.rules]

        assert ids[0] == "person_title"
        assert ids[1:] == ["date_month", "epoch_year", "season_date", "full_date"]
        assert _texts(parser, "Amicae left Eryndor") == ["Amicae", "Eryndor"]

    def test_project_calendar_not_applied(self, rules_dir):
        parser = build_default_parser(rules_dir)
        assert _texts(parser, "the 15th Stormtide") == []

    def test_shipped_rules_load(self):
        parser = build_default_parser()
        assert len(parser.rules) > 4

    def test_shipped_rules_live_in_package(self):
        package_dir = Path(project_cache.__file__).resolve().parents[1]
        rules = package_dir / "rules"
        assert (rules / "entities.yaml").is_file()
        assert (rules / "patterns.yaml").is_file()
        assert settings._DEFAULT_RULES_DIR == rules


class TestBuildProjectParser:
    def test_overlay_appended(self, rules_dir):
        parser = build_project_parser("mythos", rules_dir)
        assert _texts(parser, "Theron Blackwood reached Crystal Spire") == ["Theron Blackwood", "Crystal Spire"]
        assert _texts(parser, "Amicae stayed") == ["Amicae"]

    def test_calendar_merged(self, rules_dir):
        parser = build_project_parser("mythos", rules_dir)
        [hit] = parser.parse("the 15th Stormtide", fuzzy=False).hits
        assert hit.kind == EntityKind.DATE
        assert _texts(parser, "the 3rd of March") == ["3rd of March"]

    def test_project_without_overlays(self, rules_dir):
        parser = build_project_parser("plain", rules_dir)
        assert _texts(parser, "Theron Blackwood reached Eryndor") == ["Eryndor"]

    def test_malformed_overlay(self, rules_dir, write_rules):
        write_rules(rules_dir, "patterns.broken.yaml", "patterns: [{id: x}]\n")
        with pytest.raises(RuleConfigError):
            build_project_parser("broken", rules_dir)


class TestSafeProjectId:
    def test_path_characters_replaced(self):
        assert _safe_project_id("../secret") == "__secret"
        assert _safe_project_id("a\\b") == "a_b"
        assert _safe_project_id("my world") == "my_world"
        assert _safe_project_id("mythos") == "mythos"

    def test_traversal_does_not_reach_overlay(self, rules_dir):
        parser = build_project_parser("../mythos", rules_dir)
        assert _texts(parser, "Theron Blackwood") == []


class TestProjectParserCache:
    def test_cached_instance_reused(self, rules_dir):
        cache = ProjectParserCache(rules_dir)
        first = cache.get("mythos")

        assert isinstance(first, Parser)
        assert cache.get("mythos") is first
        assert "mythos" in cache
        assert len(cache) == 1

    def test_projects_are_separate(self, rules_dir):
        cache = ProjectParserCache(rules_dir)
        assert cache.get("mythos") is not cache.get("plain")
        assert len(cache) == 2

    def test_failed_build_not_cached(self, rules_dir, write_rules):
        write_rules(rules_dir, "entities.broken.yaml", "kinds: [oops]\n")
        cache = ProjectParserCache(rules_dir)

        with pytest.raises(RuleConfigError):
            cache.get("broken")
        assert "broken" not in cache

    def test_clear(self, rules_dir):
        cache = ProjectParserCache(rules_dir)
        first = cache.get("mythos")
        cache.clear()
        assert len(cache) == 0
        assert cache.get("mythos") is not first

    def test_clear_keeps_build_locks(self, rules_dir):
        cache = ProjectParserCache(rules_dir, single_flight=True)
        lock = cache._build_lock("mythos")
        cache.get("mythos")

        with lock:
            cache.clear()
            assert cache._build_lock("mythos") is lock

    def test_single_flight_builds_once(self, rules_dir, monkeypatch):
        calls = []
        real_build = project_cache.build_project_parser

        def slow_build(project_id, root):
            calls.append(project_id)
            time.sleep(0.05)
            return real_build(project_id, root)

        monkeypatch.setattr(project_cache, "build_project_parser", slow_build)
        cache = ProjectParserCache(rules_dir, single_flight=True)

        barrier = threading.Barrier(6)
        results = []

        def worker():
            barrier.wait()
            results.append(cache.get("mythos"))

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == ["mythos"]
        assert len(results) == 6
        assert all(p is results[0] for p in results)

    def test_single_flight_from_settings(self, rules_dir, monkeypatch):
        monkeypatch.setattr(project_cache, "LORE_CACHE_SINGLE_FLIGHT", True)
        assert ProjectParserCache(rules_dir).single_flight is True
        assert ProjectParserCache(rules_dir, single_flight=False).single_flight is False
