# src/plagiarism_engine/models/__init__.py
from .config_models import (
    Classification,
    ClassificationThresholds,
    CheckSettings,
    ExclusionSettings,
    PlagiarismConfig,
    DEFAULT_PLAGIARISM_CONFIG,
)
from .plagiarism_models import (
    CitationFormat,
    Confidence,
    ContainmentHit,
    DetectedCitation,
    DetectedQuote,
    ExclusionReason,
    Fingerprint,
    FingerprintPair,
    FingerprintSet,
    HashedNGram,
    IndexEntry,
    Match,
    MatchSource,
    MatchType,
    NGram,
    NormalizedWord,
    PlagiarismResult,
    PlagiarismStats,
    QuickCheckResult,
    QuoteType,
    SelfPlagiarismMatch,
    SourceDocumentInfo,
    SourceDocument,
    SourceSummary,
    SourceType,
    SuspiciousPattern,
    SuspiciousPatternType,
    TextSpan,
    UncitedQuote,
)
