import pytest

from extractor import PublicationExtractor
from models import RawRecord


def test_extract_records_reads_every_row(profile_html):
    records = PublicationExtractor.extract_records(profile_html)

    assert len(records) == 3
    first = records[0]
    assert first.title == "Hyperbolic metamaterials for imaging"
    assert first.authors == "A Smith, B Jones, C Lee, D Kim"
    assert first.venue == "Applied Physics Reviews 6 (4), 41308, 2019"
    assert first.year == "2019"
    assert first.citation_count == 120
    assert first.view_url == (
        "https://scholar.google.com/citations?view_op=view_citation&hl=en"
        "&user=abcUSER&citation_for_view=abcUSER:1"
    )
    assert first.cites_url == "https://scholar.google.com/scholar?oi=bibs&hl=en&cites=111"


def test_missing_citation_link_counts_as_zero(profile_html):
    conference = PublicationExtractor.extract_records(profile_html)[1]

    assert conference.citation_count == 0
    assert conference.cites_url == ""


def test_year_falls_back_to_venue_text(profile_html):
    record = PublicationExtractor.extract_records(profile_html)[2]

    assert record.year == "2018"
    assert record.title == "Laser cutting study"
    assert record.venue == "Optics & Laser Technology 181, 111730, 2018"
    assert record.cites_url == "https://scholar.google.com/scholar?cites=333"


def test_extract_records_uses_given_base_url(profile_html):
    record = PublicationExtractor.extract_records(profile_html, "https://scholar.google.de")[2]
    assert record.cites_url == "https://scholar.google.de/scholar?cites=333"


def test_extract_records_without_rows(empty_profile_html):
    assert PublicationExtractor.extract_records(empty_profile_html) == []
    assert PublicationExtractor.extract_records("") == []


def test_extract_record_tolerates_sparse_rows():
    html = '<table><tr class="gsc_a_tr"><td class="gsc_a_t"></td></tr></table>'
    records = PublicationExtractor.extract_records(html)
    assert records == [RawRecord(title="", authors="", venue="", year="")]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("  A   B  ", "A B"),
        ("A\u00a0\u00a0B", "A B"),
        ("line\n\tbreak", "line break"),
        ("", ""),
        (None, ""),
    ],
)
def test_clean_text_compacts_whitespace(raw, expected):
    assert PublicationExtractor.clean_text(raw) == expected


@pytest.mark.parametrize("raw", ["\u00a0 x \u00a0 y\t", "a  b", "", "plain"])
def test_clean_text_is_idempotent(raw):
    once = PublicationExtractor.clean_text(raw)
    assert PublicationExtractor.clean_text(once) == once
    assert "\u00a0" not in once
    assert "  " not in once


def test_extract_and_resolve_year_helpers():
    assert PublicationExtractor.extract_year("Nature 521, 436-444, 2015") == "2015"
    assert PublicationExtractor.extract_year("Volume 1850 only") == ""
    assert PublicationExtractor.extract_year("") == ""
    assert PublicationExtractor.resolve_year(" 2021 ", "Journal 2018") == "2021"
    assert PublicationExtractor.resolve_year("", "Journal 3, 2018") == "2018"
    assert PublicationExtractor.resolve_year("", "Journal 3, 12") == ""


@pytest.mark.parametrize(
    "label,expected",
    [("120", 120), ("5,754", 5754), ("12*", 12), ("", 0), (None, 0)],
)
def test_parse_citation_count(label, expected):
    assert PublicationExtractor.parse_citation_count(label) == expected


def test_absolute_url_handles_relative_and_absolute():
    assert PublicationExtractor.absolute_url("/citations") == "https://scholar.google.com/citations"
    assert PublicationExtractor.absolute_url("https://example.org/a") == "https://example.org/a"
    assert PublicationExtractor.absolute_url("//example.org/doc") == "https://example.org/doc"
    assert PublicationExtractor.absolute_url("") == ""
