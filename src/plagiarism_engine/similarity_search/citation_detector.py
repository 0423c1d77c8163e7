# src/plagiarism_engine/similarity_search/citation_detector.py
"""
Regex detection of quoted passages and in-text citations.

Each quote style is an independent pass; passes may overlap one another
(a single-quoted passage inside a double-quoted one is reported twice).
Offsets index the raw text and include the quote marks.
"""

import re
from typing import Iterable, List, Optional, Protocol

from plagiarism_engine.models.plagiarism_models import (
    CitationFormat,
    DetectedCitation,
    DetectedQuote,
    QuoteType,
    UncitedQuote,
)
from . import configs

QUOTE_PATTERNS = [
    (re.compile(r'"([^"]+)"'), QuoteType.DOUBLE),
    (re.compile(r"'([^']+)'"), QuoteType.SINGLE),
    (re.compile("“([^”]+)”"), QuoteType.SMART),
    (re.compile("«([^»]+)»"), QuoteType.GUILLEMET),
    (re.compile("「([^」]+)」"), QuoteType.GUILLEMET),
]

# (Smith, 2023) / (Smith et al., 2023) / (Smith & Jones, 2023a)
AUTHOR_YEAR_RE = re.compile(r"\([A-Z][a-z]+(?:\s+(?:et\s+al\.|&\s+[A-Z][a-z]+))?,\s*\d{4}[a-z]?\)")
# [1] / [1, 2] / [1-5]
NUMERIC_RE = re.compile(r"\[[\d,\-\s]+\]")
# footnote number right after terminal punctuation: "... shown.12 Next"
FOOTNOTE_RE = re.compile(r"[.!?]\s*(\d{1,3})(?=\s|$)")


class OffsetSpan(Protocol):
    start_offset: int
    end_offset: int


def detect_quotes(text: str) -> List[DetectedQuote]:
    if not text:
        return []
    quotes = [
        DetectedQuote(text=m.group(1), start_offset=m.start(), end_offset=m.end(), quote_type=quote_type)
        for pattern, quote_type in QUOTE_PATTERNS
        for m in pattern.finditer(text)
    ]
    return sorted(quotes, key=lambda q: q.start_offset)


def detect_citations(text: str) -> List[DetectedCitation]:
    if not text:
        return []
    citations = [
        DetectedCitation(citation=m.group(0), start_offset=m.start(), end_offset=m.end(),
                         format=CitationFormat.AUTHOR_YEAR)
        for m in AUTHOR_YEAR_RE.finditer(text)
    ]
    citations += [
        DetectedCitation(citation=m.group(0), start_offset=m.start(), end_offset=m.end(),
                         format=CitationFormat.NUMERIC)
        for m in NUMERIC_RE.finditer(text)
    ]
    # only the digits are the citation, not the punctuation before them
    citations += [
        DetectedCitation(citation=m.group(1), start_offset=m.start(1), end_offset=m.end(1),
                         format=CitationFormat.FOOTNOTE)
        for m in FOOTNOTE_RE.finditer(text)
    ]
    return sorted(citations, key=lambda c: c.start_offset)


def has_nearby_citation(span: OffsetSpan,
                        citations: Iterable[DetectedCitation],
                        max_distance: int = configs.CITATION_MAX_DISTANCE) -> bool:
    """True when a citation ends at most `max_distance` chars before the span or starts at most that far after it."""
    for citation in citations:
        if citation.end_offset <= span.start_offset and span.start_offset - citation.end_offset <= max_distance:
            return True
        if citation.start_offset >= span.end_offset and citation.start_offset - span.end_offset <= max_distance:
            return True
    return False


def find_uncited_quotes(text: str,
                        min_length: int = configs.MIN_QUOTE_LENGTH,
                        max_distance: int = configs.CITATION_MAX_DISTANCE,
                        quotes: Optional[List[DetectedQuote]] = None,
                        citations: Optional[List[DetectedCitation]] = None) -> List[UncitedQuote]:
    """Quotes of at least `min_length` characters with no citation nearby."""
    quotes = detect_quotes(text) if quotes is None else quotes
    citations = detect_citations(text) if citations is None else citations

    return [
        UncitedQuote(
            id=f"uncited-{quote.start_offset}",
            text=quote.text,
            start_offset=quote.start_offset,
            end_offset=quote.end_offset,
            quote_type=quote.quote_type,
            suggestion=configs.UNCITED_QUOTE_SUGGESTION,
        )
        for quote in quotes
        if len(quote.text) >= min_length and not has_nearby_citation(quote, citations, max_distance)
    ]
