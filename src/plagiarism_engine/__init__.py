"""Document fingerprinting and plagiarism detection."""

from plagiarism_engine.similarity_search.pipeline import detect_plagiarism, quick_plagiarism_check
from plagiarism_engine.similarity_search.result_aggregator import exclude_match, include_match, match_at_position

__version__ = "0.1.0"

__all__ = [
    "detect_plagiarism",
    "quick_plagiarism_check",
    "exclude_match",
    "include_match",
    "match_at_position",
]
