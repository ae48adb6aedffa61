"""
Project Parser Cache — one immutable Parser per project id.

Rules directory layout:

    entities.yaml              base dictionary (required)
    patterns.yaml              base pattern rules (required)
    entities.<project>.yaml    optional overlay, appended
    patterns.<project>.yaml    optional overlay, appended
    calendar.<project>.yaml    optional, merged onto the default calendar

Concurrency: the lock only guards the dict. On a miss the parser is built
outside the lock and inserted afterwards, so two threads missing the same
project concurrently may both build it and the later insert wins. Builds are
deterministic, so both results are equivalent. Pass single_flight=True to
serialize builds per project id instead.

The lock is a plain threading.Lock rather than a reader/writer lock. It is
held only for a single dict read or insert, never across a build, so readers
never wait behind a build and the two are equivalent here.
"""
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from lore_parser.config.constants import (
    BASE_ENTITIES_FILE,
    BASE_PATTERNS_FILE,
    PROJECT_CALENDAR_FILE,
    PROJECT_ENTITIES_FILE,
    PROJECT_PATTERNS_FILE,
)
from lore_parser.config.loader import RuleConfigError
from lore_parser.config.settings import LORE_CACHE_SINGLE_FLIGHT, LORE_RULES_DIR
from lore_parser.extraction.calendar import Calendar
from lore_parser.extraction.dictionary_matcher import DictionaryMatcher
from lore_parser.extraction.parser import Parser
from lore_parser.extraction.patterns import PatternSet
from lore_parser.observability.metrics import record_cache_lookup, record_parser_build

logger = logging.getLogger(__name__)


def _safe_project_id(project_id: str) -> str:
    """Strip characters that would escape the rules directory."""
    return (
        project_id
        .replace("/", "_")
        .replace("\\", "_")
        .replace("..", "_")
        .replace(" ", "_")
    )


def _require(path: Path) -> Path:
    if not path.exists():
        logger.error("Base rules file missing: %s", path)
        raise RuleConfigError(str(path), ["base rules file not found"])
    return path


def build_default_parser(rules_dir: Union[str, Path, None] = None) -> Parser:
    """Parser over the base rules files plus the default calendar."""
    root = Path(rules_dir) if rules_dir is not None else LORE_RULES_DIR

    matcher = DictionaryMatcher.load(_require(root / BASE_ENTITIES_FILE))
    patterns = PatternSet.load(_require(root / BASE_PATTERNS_FILE))
    patterns.with_extra(Calendar.default().generate_patterns())

    record_parser_build("default")
    logger.info(
        "Default parser built from %s: %d dictionary entries, %d rules",
        root, len(matcher), len(patterns),
    )
    return Parser(matcher, patterns)


def build_project_parser(project_id: str, rules_dir: Union[str, Path, None] = None) -> Parser:
    """Parser over the base rules plus whatever overlays exist for *project_id*."""
    root = Path(rules_dir) if rules_dir is not None else LORE_RULES_DIR
    pid = _safe_project_id(project_id)

    matcher = DictionaryMatcher.load_many([
        _require(root / BASE_ENTITIES_FILE),
        root / PROJECT_ENTITIES_FILE.format(project_id=pid),
    ])
    patterns = PatternSet.load_many([
        _require(root / BASE_PATTERNS_FILE),
        root / PROJECT_PATTERNS_FILE.format(project_id=pid),
    ])

    calendar = Calendar.default()
    calendar_path = root / PROJECT_CALENDAR_FILE.format(project_id=pid)
    if calendar_path.exists():
        calendar = calendar.merge(Calendar.load(calendar_path).config)
    patterns.with_extra(calendar.generate_patterns())

    record_parser_build("project")
    logger.info(
        "Parser built for project '%s': %d dictionary entries, %d rules",
        project_id, len(matcher), len(patterns),
    )
    return Parser(matcher, patterns)


class ProjectParserCache:
    """Process-lifetime map of project id → Parser."""

    def __init__(
        self,
        rules_dir: Union[str, Path, None] = None,
        single_flight: Optional[bool] = None,
    ) -> None:
        self.rules_dir = Path(rules_dir) if rules_dir is not None else LORE_RULES_DIR
        self.single_flight = LORE_CACHE_SINGLE_FLIGHT if single_flight is None else single_flight
        self._parsers: Dict[str, Parser] = {}
        self._lock = threading.Lock()
        self._build_locks: Dict[str, threading.Lock] = {}

    def get(self, project_id: str) -> Parser:
        """Cached parser for *project_id*, building it on a miss."""
        parser = self._lookup(project_id)
        if parser is not None:
            return parser

        if not self.single_flight:
            # Unsynchronized build: concurrent misses may each build.
            return self._insert(project_id, build_project_parser(project_id, self.rules_dir))

        with self._build_lock(project_id):
            parser = self._lookup(project_id, count=False)
            if parser is not None:
                return parser
            return self._insert(project_id, build_project_parser(project_id, self.rules_dir))

    def clear(self) -> None:
        with self._lock:
            self._parsers.clear()

    def __contains__(self, project_id: str) -> bool:
        with self._lock:
            return project_id in self._parsers

    def __len__(self) -> int:
        with self._lock:
            return len(self._parsers)

    def _lookup(self, project_id: str, count: bool = True) -> Optional[Parser]:
        with self._lock:
            parser = self._parsers.get(project_id)
        if count:
            record_cache_lookup("hit" if parser is not None else "miss")
        return parser

    def _insert(self, project_id: str, parser: Parser) -> Parser:
        with self._lock:
            self._parsers[project_id] = parser
        return parser

    def _build_lock(self, project_id: str) -> threading.Lock:
        with self._lock:
            return self._build_locks.setdefault(project_id, threading.Lock())
