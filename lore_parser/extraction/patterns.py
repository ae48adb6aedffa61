"""
Pattern Set — compiled regex rules with a kind and a static score.

Rules come from YAML files (base + optional per-project overlays) and from
generated sources such as the calendar. The set only grows: overlays and
generated rules are appended, nothing is removed or replaced.

Constraints (min_len, max_tokens, disallow) and context hints (left/right
words) are parsed and kept on each rule but are not evaluated by matching.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

import regex as re

from lore_parser.config.loader import RuleConfigError, existing_paths, load_rules_document
from lore_parser.config.schemas import PATTERNS_SCHEMA
from lore_parser.models.kind import Kind, parse_kind
from lore_parser.observability.metrics import record_config_error

logger = logging.getLogger(__name__)

# Named groups that, when present and matched, replace the whole match as
# the reported text.
REPORTED_GROUPS: Tuple[str, ...] = ("name", "title")


class PatternCompileError(RuleConfigError):
    """Raised when a rule's regex does not compile."""

    def __init__(self, source: str, rule_id: str, error: str) -> None:
        self.rule_id = rule_id
        super().__init__(source, [f"rule '{rule_id}': invalid regex: {error}"])


@dataclass(frozen=True)
class Constraints:
    min_len: Optional[int] = None
    max_tokens: Optional[int] = None
    disallow: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Hints:
    left: Optional[Tuple[str, ...]] = None
    right: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class PatternMatch:
    """Full-match offsets plus the text the rule reports."""

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class CompiledPatternRule:
    id: str
    kind: Kind
    regex: Any  # compiled regex.Pattern
    score: float
    constraints: Constraints = field(default_factory=Constraints)
    hints: Hints = field(default_factory=Hints)

    def matches(self, text: str) -> Iterator[PatternMatch]:
        """
        Yield every match. Offsets always cover the full match; the text
        prefers the "name" group, then "title", then the full match.
        """
        for m in self.regex.finditer(text):
            reported = m.group(0)
            for group in REPORTED_GROUPS:
                if group in self.regex.groupindex and m.group(group) is not None:
                    reported = m.group(group)
                    break
            yield PatternMatch(m.start(), m.end(), reported)


class PatternSet:
    """Ordered list of compiled rules."""

    def __init__(self, rules: Optional[List[CompiledPatternRule]] = None) -> None:
        self.rules: List[CompiledPatternRule] = list(rules or [])

    @classmethod
    def empty(cls) -> "PatternSet":
        return cls()

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PatternSet":
        """Load rules from a single patterns YAML file."""
        return cls(_read_rules(path))

    @classmethod
    def load_many(cls, paths: Iterable[Union[str, Path]]) -> "PatternSet":
        """Load and concatenate pattern files, skipping ones that do not exist."""
        rules: List[CompiledPatternRule] = []
        for path in existing_paths(paths):
            rules.extend(_read_rules(path))
        return cls(rules)

    def add_pattern(self, rule_id: str, kind: Kind, regex_src: str, score: float) -> None:
        """Append an ad hoc rule without constraints or hints."""
        self.rules.append(
            CompiledPatternRule(
                id=rule_id,
                kind=kind,
                regex=_compile(regex_src, rule_id, "<ad hoc>"),
                score=score,
            )
        )

    def with_extra(self, extra: Iterable[Tuple[str, Kind, str, float]]) -> "PatternSet":
        """Append generated (id, kind, regex, score) rules; returns self."""
        for rule_id, kind, regex_src, score in extra:
            self.rules.append(
                CompiledPatternRule(
                    id=rule_id,
                    kind=kind,
                    regex=_compile(regex_src, rule_id, "<generated>"),
                    score=score,
                )
            )
        return self

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[CompiledPatternRule]:
        return iter(self.rules)


def _compile(regex_src: str, rule_id: str, source: str):
    try:
        return re.compile(regex_src)
    except re.error as exc:
        record_config_error("patterns")
        logger.error("Invalid regex in rule '%s' (%s): %s", rule_id, source, exc)
        raise PatternCompileError(source, rule_id, str(exc)) from exc


def _tuple_or_none(values: Optional[List[str]]) -> Optional[Tuple[str, ...]]:
    return tuple(values) if values is not None else None


def _read_rules(path: Union[str, Path]) -> List[CompiledPatternRule]:
    document = load_rules_document(path, PATTERNS_SCHEMA, "patterns")
    source = str(path)

    rules: List[CompiledPatternRule] = []
    for raw in document["patterns"]:
        constraints = raw.get("constraints") or {}
        hints = raw.get("hints") or {}
        rules.append(
            CompiledPatternRule(
                id=raw["id"],
                kind=parse_kind(raw["kind"]),
                regex=_compile(raw["regex"], raw["id"], source),
                score=float(raw["score"]),
                constraints=Constraints(
                    min_len=constraints.get("min_len"),
                    max_tokens=constraints.get("max_tokens"),
                    disallow=_tuple_or_none(constraints.get("disallow")),
                ),
                hints=Hints(
                    left=_tuple_or_none(hints.get("left")),
                    right=_tuple_or_none(hints.get("right")),
                ),
            )
        )

    logger.info("Compiled %d pattern rules from %s", len(rules), source)
    return rules
