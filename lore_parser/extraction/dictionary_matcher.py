"""
Dictionary Matcher — gazetteer lookup over an Aho-Corasick automaton.

Exact, case-sensitive surface strings grouped by kind. One pass over the
text reports every occurrence, overlapping ones included; deduplication is
left to the merger.
"""
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

import ahocorasick

from lore_parser.config.loader import existing_paths, load_rules_document
from lore_parser.config.schemas import ENTITIES_SCHEMA
from lore_parser.models.kind import Kind, parse_kind

logger = logging.getLogger(__name__)


class DictionaryMatch(NamedTuple):
    start: int
    end: int
    kind: Kind
    surface: str


class DictionaryMatcher:
    """
    Multi-pattern exact-string matcher.

    Entries added with add_entry() are recorded but not searchable until
    rebuild() recompiles the automaton.
    """

    def __init__(self, entries: Optional[List[Tuple[Kind, str]]] = None) -> None:
        self.entries: List[Tuple[Kind, str]] = list(entries or [])
        self._automaton = None
        self.rebuild()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "DictionaryMatcher":
        return cls()

    @classmethod
    def from_mapping(cls, mapping: Dict[str, List[str]]) -> "DictionaryMatcher":
        """Build from {kind label: [surface, ...]}."""
        entries: List[Tuple[Kind, str]] = []
        for label, surfaces in mapping.items():
            kind = parse_kind(label)
            for surface in surfaces:
                entries.append((kind, surface))
        return cls(entries)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "DictionaryMatcher":
        """Load from a single entities YAML file."""
        return cls.from_mapping(_read_gazetteer(path))

    @classmethod
    def load_many(cls, paths: Iterable[Union[str, Path]]) -> "DictionaryMatcher":
        """Load and concatenate entity files, skipping ones that do not exist."""
        entries: List[Tuple[Kind, str]] = []
        for path in existing_paths(paths):
            for label, surfaces in _read_gazetteer(path).items():
                kind = parse_kind(label)
                entries.extend((kind, s) for s in surfaces)
        return cls(entries)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_entry(self, kind: Kind, surface: str) -> None:
        """Record an entry. Call rebuild() before it can match."""
        self.entries.append((kind, surface))

    def rebuild(self) -> None:
        """Recompile the automaton from the current entries."""
        by_surface: Dict[str, List[Tuple[Kind, str]]] = defaultdict(list)
        for kind, surface in self.entries:
            if not surface:
                logger.warning("Skipping empty dictionary surface for kind %r", kind)
                continue
            by_surface[surface].append((kind, surface))

        if not by_surface:
            self._automaton = None
            return

        automaton = ahocorasick.Automaton()
        for surface, payload in by_surface.items():
            automaton.add_word(surface, (len(surface), payload))
        automaton.make_automaton()
        self._automaton = automaton
        logger.debug("Dictionary automaton built with %d surfaces", len(by_surface))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def find_all(self, text: str) -> List[DictionaryMatch]:
        """Every occurrence of every surface, overlapping included."""
        if self._automaton is None or not text:
            return []

        matches: List[DictionaryMatch] = []
        for end_index, (length, payload) in self._automaton.iter(text):
            end = end_index + 1
            start = end - length
            for kind, surface in payload:
                matches.append(DictionaryMatch(start, end, kind, surface))
        return matches

    def __len__(self) -> int:
        return len(self.entries)


def _read_gazetteer(path: Union[str, Path]) -> Dict[str, List[str]]:
    """Flatten an entities document to {kind label: [surface, ...]}."""
    document = load_rules_document(path, ENTITIES_SCHEMA, "entities")
    gazetteer: Dict[str, List[str]] = {}
    for label, cfg in document["kinds"].items():
        if cfg is None:
            surfaces: List[str] = []
        elif isinstance(cfg, list):
            surfaces = cfg
        else:
            surfaces = cfg.get("gazetteer") or []
        gazetteer[label] = list(surfaces)
    return gazetteer
