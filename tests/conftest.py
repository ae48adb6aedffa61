"""
Shared test fixtures for the lore parser test suite.
"""
import textwrap

import pytest

from lore_parser.extraction.dictionary_matcher import DictionaryMatcher
from lore_parser.extraction.patterns import PatternSet
from lore_parser.models.entity import EntityHit, HitSource, Span
from lore_parser.models.kind import EntityKind


# ==========================================================================
# Hits
# ==========================================================================

@pytest.fixture
def make_hit():
    """Factory: make_hit("Rawn", 5, 9, score=0.8, kind=EntityKind.PERSON)."""

    def _make(text, start, end, score=0.8, kind=EntityKind.PERSON, source=HitSource.DICTIONARY):
        return EntityHit(
            kind=kind,
            span=Span(start, end, text),
            source=source,
            pattern_id=None,
            score=score,
        )

    return _make


# ==========================================================================
# Dictionary & Patterns
# ==========================================================================

@pytest.fixture
def lore_matcher():
    return DictionaryMatcher.from_mapping({
        "Person": ["Amicae", "Queen Amicae", "Rawn"],
        "Place": ["Eryndor", "Storm Coast"],
    })


@pytest.fixture
def title_patterns():
    patterns = PatternSet.empty()
    patterns.add_pattern(
        "person_title",
        EntityKind.PERSON,
        r"(?:Lord|Lady)\s+([A-Z][a-z]+)",
        0.9,
    )
    return patterns


# ==========================================================================
# Rules directory
# ==========================================================================

BASE_ENTITIES = """
kinds:
  Person:
    titles: [Lord, Lady]
    gazetteer: [Amicae, Queen Amicae]
  Place: [Eryndor, Storm Coast]
"""

BASE_PATTERNS = r"""
patterns:
  - id: person_title
    kind: Person
    regex: '(?:Lord|Lady)\s+[A-Z][a-z]+'
    score: 0.9
    constraints:
      min_len: 3
      max_tokens: 3
      disallow: [Lord Nobody]
    hints:
      left: [said]
      right: [of]
"""

MYTHOS_ENTITIES = """
kinds:
  Person: [Theron Blackwood]
  Place:
    gazetteer: [Crystal Spire]
"""

MYTHOS_CALENDAR = """
months: [Stormtide, Frostfall]
epochs: [AE]
"""


def _write_rules(directory, name, content):
    path = directory / name
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def rules_dir(tmp_path):
    """Base rules plus a 'mythos' project overlay (entities + calendar)."""
    _write_rules(tmp_path, "entities.yaml", BASE_ENTITIES)
    _write_rules(tmp_path, "patterns.yaml", BASE_PATTERNS)
    _write_rules(tmp_path, "entities.mythos.yaml", MYTHOS_ENTITIES)
    _write_rules(tmp_path, "calendar.mythos.yaml", MYTHOS_CALENDAR)
    return tmp_path


# ==========================================================================
# Texts
# ==========================================================================

@pytest.fixture
def court_text():
    return "Lord Rawn entered the hall. He drew his sword. The Lord commanded silence."


@pytest.fixture
def write_rules():
    """write_rules(directory, "entities.yaml", yaml_text) -> Path (text is dedented)."""
    return _write_rules
