# src/plagiarism_engine/models/plagiarism_models.py
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config_models import Classification, PlagiarismConfig


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------- ENUMS ---------------- #

class ExclusionReason(str, Enum):
    QUOTED = "quoted"
    CITED = "cited"
    COMMON_PHRASE = "common-phrase"
    USER_EXCLUDED = "user-excluded"


class SourceType(str, Enum):
    USER_DOCUMENT = "user-document"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


class MatchType(str, Enum):
    EXACT = "exact"
    NEAR_EXACT = "near-exact"


class QuoteType(str, Enum):
    DOUBLE = "double"
    SINGLE = "single"
    SMART = "smart"
    GUILLEMET = "guillemet"


class CitationFormat(str, Enum):
    AUTHOR_YEAR = "author-year"
    NUMERIC = "numeric"
    FOOTNOTE = "footnote"


class SuspiciousPatternType(str, Enum):
    CHARACTER_SUBSTITUTION = "character-substitution"
    INVISIBLE_CHARACTERS = "invisible-characters"
    INCONSISTENT_STYLE = "inconsistent-style"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ---------------- TEXT & FINGERPRINTS ---------------- #

class NormalizedWord(FrozenModel):
    word: str
    char_start: int
    char_end: int


class NGram(FrozenModel):
    words: Tuple[str, ...]
    char_position: int
    word_index: int

    @property
    def text(self) -> str:
        return " ".join(self.words)


class HashedNGram(NGram):
    hash: int


class Fingerprint(FrozenModel):
    """A winnowed n-gram: the unit that is stored and compared."""
    hash: int
    char_position: int
    ngram_text: str
    word_offset: int


class FingerprintSet(FrozenModel):
    document_id: str
    fingerprints: Tuple[Fingerprint, ...] = ()
    ngram_size: int
    window_size: int
    word_count: int
    generated_at: datetime = Field(default_factory=utc_now)

    def hashes(self) -> Set[int]:
        return {fp.hash for fp in self.fingerprints}


class IndexEntry(FrozenModel):
    document_id: str
    fingerprint: Fingerprint


class FingerprintPair(FrozenModel):
    """Two fingerprints whose hash AND n-gram text agree."""
    query: Fingerprint
    source: Fingerprint


# ---------------- INPUT DOCUMENTS ---------------- #

class SourceDocument(FrozenModel):
    id: str
    title: str = ""
    content: str = ""
    created_at: Optional[datetime] = None


# ---------------- MATCHES ---------------- #

class MatchSource(FrozenModel):
    type: SourceType = SourceType.UNKNOWN
    id: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    snippet: Optional[str] = None


class Match(FrozenModel):
    id: str
    text: str
    start_offset: int
    end_offset: int
    word_count: int
    similarity: float = Field(ge=0.0, le=100.0)
    match_type: MatchType = MatchType.EXACT
    source: MatchSource
    source_start_offset: int = -1
    source_end_offset: int = -1
    excluded: bool = False
    exclusion_reason: Optional[ExclusionReason] = None


class SourceDocumentInfo(FrozenModel):
    id: str
    title: str
    created_at: Optional[datetime] = None
    snippet: str


class SelfPlagiarismMatch(Match):
    source_document: SourceDocumentInfo


# ---------------- QUOTES & CITATIONS ---------------- #

class DetectedQuote(FrozenModel):
    text: str
    start_offset: int
    end_offset: int
    quote_type: QuoteType


class DetectedCitation(FrozenModel):
    citation: str
    start_offset: int
    end_offset: int
    format: CitationFormat


class UncitedQuote(FrozenModel):
    id: str
    text: str
    start_offset: int
    end_offset: int
    quote_type: QuoteType
    suggestion: str


# ---------------- SUSPICIOUS PATTERNS ---------------- #

class TextSpan(FrozenModel):
    start: int
    end: int


class SuspiciousPattern(FrozenModel):
    type: SuspiciousPatternType
    description: str
    severity: int = Field(ge=1, le=5)
    positions: List[TextSpan] = Field(default_factory=list)


# ---------------- REPORT ---------------- #

class PlagiarismStats(FrozenModel):
    total_words: int = 0
    matched_words: int = 0
    quoted_words: int = 0
    cited_words: int = 0
    excluded_words: int = 0
    unique_sources: int = 0
    fingerprints_generated: int = 0
    fingerprints_matched: int = 0
    processing_time_ms: float = 0.0


class SourceSummary(FrozenModel):
    source: MatchSource
    match_count: int
    words_matched: int
    contribution_percent: float


class PlagiarismResult(FrozenModel):
    """
    Terminal report of one check.

    `confidence` is a coarse reliability signal derived from document length
    and fingerprint count; it is NOT a statistical confidence interval.
    """
    id: str
    document_id: str
    checked_at: datetime = Field(default_factory=utc_now)
    similarity_score: float = Field(ge=0.0, le=100.0)
    originality_score: float = Field(ge=0.0, le=100.0)
    classification: Classification
    confidence: Confidence
    matches: List[Match] = Field(default_factory=list)
    self_plagiarism: List[SelfPlagiarismMatch] = Field(default_factory=list)
    uncited_quotes: List[UncitedQuote] = Field(default_factory=list)
    suspicious_patterns: List[SuspiciousPattern] = Field(default_factory=list)
    stats: PlagiarismStats
    sources: List[SourceSummary] = Field(default_factory=list)
    config: PlagiarismConfig


class ContainmentHit(FrozenModel):
    document_id: str
    shared_hashes: int
    containment: float


class QuickCheckResult(FrozenModel):
    similarity_score: float
    originality_score: float
    self_plagiarism_count: int
    uncited_quote_count: int
    flagged_documents: List[ContainmentHit] = Field(default_factory=list)
