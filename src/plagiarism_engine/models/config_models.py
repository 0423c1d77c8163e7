# src/plagiarism_engine/models/config_models.py
from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plagiarism_engine.similarity_search import configs


class Classification(str, Enum):
    """Ordered similarity buckets, lowest risk first."""
    ORIGINAL = "original"
    ACCEPTABLE = "acceptable"
    NEEDS_REVIEW = "needs-review"
    CONCERNING = "concerning"
    HIGH_RISK = "high-risk"
    CRITICAL = "critical"


CLASSIFICATION_ORDER = list(Classification)


class ExclusionSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    quotes: bool = True
    citations: bool = True
    common_phrases: bool = True
    custom_phrases: Tuple[str, ...] = ()

    @field_validator("custom_phrases")
    @classmethod
    def _drop_blank_phrases(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(p.strip() for p in value if p and p.strip())


class CheckSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    self_plagiarism: bool = True
    uncited_quotes: bool = True
    suspicious_patterns: bool = True
    # the engine never calls out; the flag only tells the caller a lookup is wanted
    external_api: bool = False


class ClassificationThresholds(BaseModel):
    """
    Inclusive upper bounds for every bucket except the last one.

    bounds[i] is the highest score still classified as CLASSIFICATION_ORDER[i];
    scores above bounds[-1] are critical, so the scale covers [0, 100].
    """
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    bounds: Tuple[float, ...] = Field(default=configs.CLASSIFICATION_THRESHOLDS)

    @field_validator("bounds")
    @classmethod
    def _check_bounds(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        expected = len(CLASSIFICATION_ORDER) - 1
        if len(value) != expected:
            raise ValueError(f"expected {expected} classification bounds, got {len(value)}")
        if any(b < 0 or b > 100 for b in value):
            raise ValueError("classification bounds must lie within [0, 100]")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("classification bounds must be strictly increasing")
        return value

    def classify(self, score: float) -> Classification:
        for bound, label in zip(self.bounds, CLASSIFICATION_ORDER):
            if score <= bound:
                return label
        return CLASSIFICATION_ORDER[-1]


class PlagiarismConfig(BaseModel):
    """
    Immutable check configuration.

    Never mutate the shared default; derive a new value with `with_overrides`.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    ngram_size: int = Field(default=configs.NGRAM_SIZE, ge=1)
    window_size: int = Field(default=configs.WINNOW_WINDOW, ge=1)
    min_match_length: int = Field(default=configs.MIN_MATCH_LENGTH, ge=1)
    exclusions: ExclusionSettings = Field(default_factory=ExclusionSettings)
    checks: CheckSettings = Field(default_factory=CheckSettings)
    classification: ClassificationThresholds = Field(default_factory=ClassificationThresholds)
    citation_distance: int = Field(default=configs.CITATION_MAX_DISTANCE, ge=0)
    match_citation_distance: int = Field(default=configs.MATCH_CITATION_DISTANCE, ge=0)
    min_quote_length: int = Field(default=configs.MIN_QUOTE_LENGTH, ge=0)

    def with_overrides(self, **overrides: Any) -> "PlagiarismConfig":
        """Return a validated copy with nested overrides applied, e.g. exclusions={"quotes": False}."""
        merged = _deep_merge(self.model_dump(), overrides)
        return PlagiarismConfig.model_validate(merged)


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


DEFAULT_PLAGIARISM_CONFIG = PlagiarismConfig()
