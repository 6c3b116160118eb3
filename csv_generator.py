"""
CSV and text generators for profile exports
"""
import csv
import io
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from metrics import CitationMetrics
from models import EnrichedRecord, RawRecord

PUBLICATIONS_HEADERS = [
    "title",
    "authors",
    "venue",
    "year",
    "citation_count",
    "citation_for_view_url",
    "cites_url",
]

# Column layout expected by Publish or Perish style citation-metrics tools.
POPCITES_HEADERS = [
    "Cites", "Authors", "Title", "Year", "Source", "Publisher", "ArticleURL", "CitesURL", "GSRank", "QueryDate",
    "Type", "DOI", "ISSN", "CitationURL", "Volume", "Issue", "StartPage", "EndPage", "ECC", "CitesPerYear",
    "CitesPerAuthor", "AuthorCount", "Age", "Abstract", "FullTextURL", "RelatedURL",
]

POPCITES_FILENAME = "PoPCites.csv"
PUBLICATIONS_FILENAME = "google_scholar_publications_{stamp}.csv"
BIBTEX_LINKS_FILENAME = "google_scholar_bibtex_links_{stamp}.txt"
STAMP_FORMAT = "%Y-%m-%d_%H%M%S"
QUOTE_TRIGGERS = (",", '"', "\r", "\n")


class CSVGenerator:
    """Serializes extracted publication records"""

    @staticmethod
    def to_csv(rows: Iterable[Dict], headers: Sequence[str]) -> str:
        """
        Build delimited text: a header line, then one line per row

        Values containing a comma, double quote or line break are quoted with
        inner quotes doubled; missing values become empty cells. Lines are
        joined with "\\n" and the last line is not terminated.
        """
        lines = [CSVGenerator._format_line(headers)]
        for row in rows:
            lines.append(CSVGenerator._format_line([row.get(header) for header in headers]))
        return "\n".join(lines)

    @staticmethod
    def read_csv(text: str) -> List[Dict[str, str]]:
        """Parse text produced by ``to_csv`` back into row dictionaries"""
        if not text:
            return []
        return list(csv.DictReader(io.StringIO(text, newline="")))

    @staticmethod
    def _escape(value) -> str:
        if value is None:
            return ""
        text = str(value)
        if any(char in text for char in QUOTE_TRIGGERS):
            return '"' + text.replace('"', '""') + '"'
        return text

    @staticmethod
    def _format_line(values: Sequence) -> str:
        return ",".join(CSVGenerator._escape(value) for value in values)

    @staticmethod
    def publications_row(record: RawRecord) -> Dict:
        return {
            "title": record.title,
            "authors": record.authors,
            "venue": record.venue,
            "year": record.year,
            "citation_count": record.citation_count,
            "citation_for_view_url": record.view_url,
            "cites_url": record.cites_url,
        }

    @staticmethod
    def popcites_row(record: EnrichedRecord) -> Dict:
        raw = record.raw
        venue = record.venue
        return {
            "Cites": raw.citation_count,
            "Authors": raw.authors,
            "Title": raw.title,
            "Year": CitationMetrics.parse_year(raw.year),
            "Source": venue.source_name,
            "Publisher": "",
            "ArticleURL": "",
            "CitesURL": raw.cites_url,
            "GSRank": record.rank,
            "QueryDate": record.query_date,
            "Type": venue.type.value,
            "DOI": "",
            "ISSN": "",
            "CitationURL": raw.view_url,
            "Volume": venue.volume,
            "Issue": venue.issue,
            "StartPage": venue.start_page,
            "EndPage": venue.end_page,
            "ECC": record.ecc,
            "CitesPerYear": record.metrics.cites_per_year,
            "CitesPerAuthor": record.metrics.cites_per_author,
            "AuthorCount": record.author_count,
            "Age": record.age,
            "Abstract": "",
            "FullTextURL": "",
            "RelatedURL": "",
        }

    @staticmethod
    def generate_publications_csv(records: Iterable[RawRecord]) -> str:
        rows = [CSVGenerator.publications_row(record) for record in records]
        return CSVGenerator.to_csv(rows, PUBLICATIONS_HEADERS)

    @staticmethod
    def generate_popcites_csv(records: Iterable[EnrichedRecord]) -> str:
        rows = [CSVGenerator.popcites_row(record) for record in records]
        return CSVGenerator.to_csv(rows, POPCITES_HEADERS)

    @staticmethod
    def generate_bibtex_link_text(url: str, selected_count: int) -> str:
        """Small header comment block followed by the captured export link"""
        lines = [
            "# Google Scholar BibTeX export link (generated via Scholar UI Export menu)",
            f"# Selected rows (loaded/visible): {selected_count}",
            url,
            "",
        ]
        return "\n".join(lines)

    @staticmethod
    def timestamp(now: Optional[datetime] = None) -> str:
        return (now or datetime.now()).strftime(STAMP_FORMAT)

    @staticmethod
    def publications_filename(now: Optional[datetime] = None) -> str:
        return PUBLICATIONS_FILENAME.format(stamp=CSVGenerator.timestamp(now))

    @staticmethod
    def bibtex_links_filename(now: Optional[datetime] = None) -> str:
        return BIBTEX_LINKS_FILENAME.format(stamp=CSVGenerator.timestamp(now))
