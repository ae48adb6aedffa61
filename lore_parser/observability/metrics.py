"""
Prometheus Metrics — parser observability.

Exposes counters and histograms for:
- Parse latency
- Hits emitted per source (dictionary / pattern / fuzzy)
- Parser builds (default vs per-project)
- Project parser cache lookups (hit / miss)
- Rules file configuration errors

Usage
-----
    from lore_parser.observability.metrics import timed_parse, record_hits

    with timed_parse():
        response = parser.parse(text)

    record_hits("pattern", 3)
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

PARSE_LATENCY: Histogram = Histogram(
    "lore_parse_seconds",
    "Time spent in a single Parser.parse call, in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

HITS_EMITTED: Counter = Counter(
    "lore_parse_hits_total",
    "Hits surviving a parse call, by provenance",
    ["source"],
)

PARSER_BUILDS: Counter = Counter(
    "lore_parser_builds_total",
    "Parsers built from rules files, by scope (default / project)",
    ["scope"],
)

CACHE_LOOKUPS: Counter = Counter(
    "lore_parser_cache_lookups_total",
    "Project parser cache lookups, by result (hit / miss)",
    ["result"],
)

CONFIG_ERRORS: Counter = Counter(
    "lore_rules_config_errors_total",
    "Rules files rejected at build time, by document type",
    ["document"],
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_hits(source: str, count: int = 1) -> None:
    """Increment the emitted-hits counter for *source* by *count*."""
    if count > 0:
        HITS_EMITTED.labels(source=source).inc(count)


def record_parser_build(scope: str) -> None:
    """Increment the parser build counter for *scope*."""
    PARSER_BUILDS.labels(scope=scope).inc()


def record_cache_lookup(result: str) -> None:
    """Increment the cache lookup counter for *result* ("hit" or "miss")."""
    CACHE_LOOKUPS.labels(result=result).inc()


def record_config_error(document: str) -> None:
    """Increment the configuration error counter for *document*."""
    CONFIG_ERRORS.labels(document=document).inc()


@contextmanager
def timed_parse() -> Generator[None, None, None]:
    """
    Context manager that records parse latency.

    Usage::

        with timed_parse():
            response = parser.parse(text)
    """
    with PARSE_LATENCY.time():
        yield
