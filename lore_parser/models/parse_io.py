"""
Parse request / response contracts.

The request crosses the service boundary and is validated with Pydantic;
the response is assembled in-process from EntityHit dataclasses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from lore_parser.models.entity import EntityHit
from lore_parser.models.kind import Kind, parse_kind


class ParseRequest(BaseModel):
    """Text to annotate plus optional project scope and filters."""

    text: str = Field(..., description="Source text. Empty text is valid.")
    project_id: Optional[str] = Field(None, description="Selects per-project rules overlays.")
    kinds: Optional[List[str]] = Field(
        None,
        description="Kind labels to keep (e.g. 'Person', 'Date', or a custom label). None keeps all.",
    )
    fuzzy: Optional[bool] = Field(None, description="Add capitalized-phrase candidates. Defaults to true.")

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("project_id must not be blank")
        return v

    def kind_filter(self) -> Optional[Set[Kind]]:
        if self.kinds is None:
            return None
        return {parse_kind(label) for label in self.kinds}


@dataclass
class ParseResponse:
    """Ordered hits and the token list of the parsed text."""

    hits: List[EntityHit] = field(default_factory=list)
    tokens: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "hits": [h.to_dict() for h in self.hits],
            "tokens": list(self.tokens),
        }
