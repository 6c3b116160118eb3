"""
Typed records shared by the extractor, venue parser, metrics and CSV generator
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PublicationType(str, Enum):
    """Record type, valued with the labels written to PoPCites.csv"""

    JOURNAL_ARTICLE = "Journal article"
    CONFERENCE_PAPER = "Conference paper"


@dataclass(frozen=True)
class RawRecord:
    """One publication row as read from the profile table."""

    title: str
    authors: str
    venue: str
    year: str
    citation_count: int = 0
    view_url: str = ""
    cites_url: str = ""


@dataclass(frozen=True)
class VenueFields:
    type: PublicationType
    source_name: str = ""
    volume: Optional[int] = None
    issue: Optional[int] = None
    start_page: Optional[int] = None
    end_page: Optional[int] = None


@dataclass(frozen=True)
class Metrics:
    # Empty strings mean "unknown"; they serialize as empty cells.
    cites_per_year: str = ""
    cites_per_author: str = ""


@dataclass(frozen=True)
class EnrichedRecord:
    """A RawRecord plus everything derived from it at export time."""

    raw: RawRecord
    venue: VenueFields
    rank: int
    query_date: str
    query_year: int
    author_count: Optional[int] = None
    age: Optional[int] = None
    metrics: Metrics = field(default_factory=Metrics)

    @property
    def ecc(self) -> int:
        return self.raw.citation_count


@dataclass(frozen=True)
class BibtexCapture:
    url: str
    selected_count: int
