"""
Citation metrics and record enrichment
"""
import math
import re
from datetime import datetime
from typing import Iterable, List, Optional

from extractor import PublicationExtractor
from models import EnrichedRecord, Metrics, RawRecord
from venue_parser import VenueParser, DEFAULT_PARSER

ELLIPSIS_TOKENS = {"...", "…"}
QUERY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class CitationMetrics:
    """Derives the per-record metrics written to PoPCites.csv"""

    @staticmethod
    def author_count(authors: str) -> Optional[int]:
        """Count comma-separated authors, ignoring the "..." truncation marker"""
        text = PublicationExtractor.clean_text(authors)
        if not text:
            return None
        names = [PublicationExtractor.clean_text(part) for part in text.split(",")]
        names = [name for name in names if name and name not in ELLIPSIS_TOKENS]
        return len(names) or None

    @staticmethod
    def parse_year(year: str) -> Optional[int]:
        match = re.match(r'\s*(\d+)', year or "")
        return int(match.group(1)) if match else None

    @staticmethod
    def record_age(year: str, query_year: int) -> Optional[int]:
        """Years since publication, floored at 1; None when the year is unknown"""
        year_number = CitationMetrics.parse_year(year)
        if year_number is None:
            return None
        return max(1, query_year - year_number)

    @staticmethod
    def round_half_up(value: float) -> int:
        return int(math.floor(value + 0.5))

    @staticmethod
    def derive(citations: int, author_count: Optional[int], age: Optional[int]) -> Metrics:
        cites_per_year = ""
        if age and age > 0:
            cites_per_year = f"{citations / age:.2f}"

        cites_per_author = ""
        if author_count and author_count > 0:
            cites_per_author = str(CitationMetrics.round_half_up(citations / author_count))

        return Metrics(cites_per_year=cites_per_year, cites_per_author=cites_per_author)


def format_query_date(query_time: datetime) -> str:
    return query_time.strftime(QUERY_DATE_FORMAT)


def enrich_record(
    raw: RawRecord,
    rank: int,
    query_time: datetime,
    parser: VenueParser = DEFAULT_PARSER,
) -> EnrichedRecord:
    author_count = CitationMetrics.author_count(raw.authors)
    age = CitationMetrics.record_age(raw.year, query_time.year)
    return EnrichedRecord(
        raw=raw,
        venue=parser.parse(raw.venue, raw.year),
        rank=rank,
        query_date=format_query_date(query_time),
        query_year=query_time.year,
        author_count=author_count,
        age=age,
        metrics=CitationMetrics.derive(raw.citation_count, author_count, age),
    )


def enrich_records(
    records: Iterable[RawRecord],
    query_time: Optional[datetime] = None,
    parser: VenueParser = DEFAULT_PARSER,
) -> List[EnrichedRecord]:
    """Enrich a snapshot of records; every row shares one query timestamp"""
    query_time = query_time or datetime.now()
    return [
        enrich_record(raw, rank, query_time, parser)
        for rank, raw in enumerate(records, start=1)
    ]
