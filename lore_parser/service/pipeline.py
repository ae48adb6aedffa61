"""
Lore Parsing Service — main entry point for annotating manuscript text.

Flow per request:
    1. Select parser (project parser when project_id is set, else default)
    2. parse_request (parse + kind filter)
    3. Link hits with the injected directory lookup

Building the default parser reads the rules directory and may raise
RuleConfigError; once built, parse_lore only fails if a project parser has
to be built from a malformed overlay.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from lore_parser.config.settings import LOG_LEVEL
from lore_parser.extraction.parser import Parser
from lore_parser.linking.linker import KindLookup, link_entities, null_lookup
from lore_parser.models.parse_io import ParseRequest, ParseResponse
from lore_parser.service.project_cache import ProjectParserCache, build_default_parser

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Root logging setup for processes embedding the parser."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stdout,
    )


class LoreParsingService:
    """Default parser + per-project cache + linking."""

    def __init__(
        self,
        rules_dir: Union[str, Path, None] = None,
        lookup: Optional[KindLookup] = None,
        single_flight: Optional[bool] = None,
    ) -> None:
        self.parser: Parser = build_default_parser(rules_dir)
        self.projects = ProjectParserCache(rules_dir, single_flight=single_flight)
        self.lookup: KindLookup = lookup if lookup is not None else null_lookup

    def parser_for(self, project_id: Optional[str]) -> Parser:
        if project_id is None:
            return self.parser
        return self.projects.get(project_id)

    def parse_lore(self, req: ParseRequest, lookup: Optional[KindLookup] = None) -> ParseResponse:
        """
        Parse a request and link its hits.

        Args:
            req: The parse request.
            lookup: Directory lookup for this call. Defaults to the service's.

        Returns:
            ParseResponse with links set where the lookup resolved a hit.
        """
        parser = self.parser_for(req.project_id)
        response = parser.parse_request(req)
        response.hits = link_entities(response.hits, lookup or self.lookup)

        logger.info(
            "parse_lore project=%s chars=%d hits=%d",
            req.project_id, len(req.text), len(response.hits),
        )
        return response

    def parse_lore_text(self, text: str, fuzzy: bool = True) -> ParseResponse:
        return self.parse_lore(ParseRequest(text=text, fuzzy=fuzzy))
