"""
Rules file loading — YAML parse + schema conformance.

Every rules document goes through the same two stages:
    1. YAML parse (yaml.safe_load)
    2. Schema validation (jsonschema)

Any failure is fatal and raised as RuleConfigError naming the file. A path
that does not exist is only an error for base files; optional per-project
overlays are filtered out beforehand with existing_paths().
"""
import logging
from pathlib import Path
from typing import Iterable, List, NoReturn, Union

import yaml
from jsonschema import ValidationError, validate

from lore_parser.observability.metrics import record_config_error

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class RuleConfigError(Exception):
    """Raised when a rules file cannot be read, parsed or validated."""

    def __init__(self, source: str, errors: List[str]) -> None:
        self.source = source
        self.errors = errors
        super().__init__(f"Invalid rules file '{source}': {errors}")


def load_rules_document(path: PathLike, schema: dict, document: str) -> dict:
    """
    Read and validate a single YAML rules document.

    Args:
        path: File to read.
        schema: JSON Schema the parsed document must satisfy.
        document: Document type ("entities" | "patterns" | "calendar"),
                  used for error reporting and metrics.

    Returns:
        The parsed document. An empty file yields an empty dict, which is
        then validated like any other document.

    Raises:
        RuleConfigError: If the file is unreadable, not YAML, or off-schema.
    """
    source = str(path)

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        _fail(source, document, [f"cannot read file: {exc}"])

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        _fail(source, document, [f"YAML parse error: {exc}"])

    if data is None:
        data = {}

    try:
        validate(instance=data, schema=schema)
    except ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        _fail(source, document, [f"schema violation at {location}: {exc.message}"])

    logger.debug("Loaded %s rules from %s", document, source)
    return data


def existing_paths(paths: Iterable[PathLike]) -> List[Path]:
    """Keep only the paths that exist; missing overlays mean "no override"."""
    found: List[Path] = []
    for p in paths:
        candidate = Path(p)
        if candidate.exists():
            found.append(candidate)
        else:
            logger.debug("Rules file not present, skipping: %s", candidate)
    return found


def _fail(source: str, document: str, errors: List[str]) -> NoReturn:
    record_config_error(document)
    logger.error("Rules file %s rejected: %s", source, errors)
    raise RuleConfigError(source, errors)
