# src/plagiarism_engine/similarity_search/exclusion_policy.py
import logging
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

import ahocorasick

from plagiarism_engine.models.config_models import PlagiarismConfig
from plagiarism_engine.models.plagiarism_models import (
    DetectedCitation,
    DetectedQuote,
    ExclusionReason,
    Match,
)
from .citation_detector import detect_citations, detect_quotes, has_nearby_citation

logger = logging.getLogger(__name__)

COMMON_ACADEMIC_PHRASES: Tuple[str, ...] = (
    "in this study",
    "the results show",
    "it has been shown",
    "previous research",
    "the purpose of this study",
    "in conclusion",
    "the findings suggest",
    "according to",
    "in addition",
    "on the other hand",
    "for example",
    "in other words",
    "as a result",
    "in particular",
    "with respect to",
    "in the context of",
    "in terms of",
    "based on the findings",
    "the data suggests",
    "further research is needed",
    "limitations of this study",
    "implications for practice",
    "significant difference",
    "statistical analysis",
    "the present study",
    "literature review",
    "research methodology",
    "data collection",
    "qualitative analysis",
    "quantitative analysis",
)


@lru_cache(maxsize=64)
def _phrase_automaton(phrases: Tuple[str, ...]) -> Optional[ahocorasick.Automaton]:
    """Case-folded Aho-Corasick automaton; None when there is nothing to look for."""
    automaton = ahocorasick.Automaton()
    for phrase in phrases:
        key = phrase.lower()
        if key:
            automaton.add_word(key, phrase)
    if len(automaton) == 0:
        return None
    automaton.make_automaton()
    return automaton


def find_phrase(text: str, phrases: Iterable[str]) -> Optional[str]:
    """First phrase (by end position) contained in `text`, ignoring case."""
    automaton = _phrase_automaton(tuple(phrases))
    if automaton is None or not text:
        return None
    for _, phrase in automaton.iter(text.lower()):
        return phrase
    return None


def is_within_quote(match: Match, quotes: Iterable[DetectedQuote]) -> bool:
    return any(q.start_offset <= match.start_offset and match.end_offset <= q.end_offset for q in quotes)


def should_exclude_match(match: Match,
                         text: str,
                         config: PlagiarismConfig,
                         quotes: Optional[List[DetectedQuote]] = None,
                         citations: Optional[List[DetectedCitation]] = None) -> Optional[ExclusionReason]:
    """
    Rules are tried in order: quoted, cited, common phrase, custom phrase.
    The first one that fires is the reason; None means the match counts.
    """
    exclusions = config.exclusions

    if exclusions.quotes:
        if quotes is None:
            quotes = detect_quotes(text)
        if is_within_quote(match, quotes):
            return ExclusionReason.QUOTED

    if exclusions.citations:
        if citations is None:
            citations = detect_citations(text)
        if has_nearby_citation(match, citations, config.match_citation_distance):
            return ExclusionReason.CITED

    if exclusions.common_phrases and find_phrase(match.text, COMMON_ACADEMIC_PHRASES):
        return ExclusionReason.COMMON_PHRASE

    if exclusions.custom_phrases and find_phrase(match.text, exclusions.custom_phrases):
        return ExclusionReason.USER_EXCLUDED

    return None


def apply_exclusions(matches: Iterable[Match], text: str, config: PlagiarismConfig) -> List[Match]:
    """Annotated copies of every match; nothing is dropped."""
    # quotes and citations depend only on the text: detect them once for all matches
    quotes = detect_quotes(text) if config.exclusions.quotes else []
    citations = detect_citations(text) if config.exclusions.citations else []

    annotated = []
    for match in matches:
        reason = should_exclude_match(match, text, config, quotes, citations)
        if reason is not None:
            match = match.model_copy(update={"excluded": True, "exclusion_reason": reason})
        annotated.append(match)

    excluded = sum(1 for m in annotated if m.excluded)
    if excluded:
        logger.debug("Excluded %d of %d matches", excluded, len(annotated))
    return annotated
