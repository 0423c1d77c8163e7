# src/plagiarism_engine/api/plagiarism_api.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from plagiarism_engine.models.config_models import DEFAULT_PLAGIARISM_CONFIG, PlagiarismConfig
from plagiarism_engine.models.plagiarism_models import (
    FingerprintSet,
    PlagiarismResult,
    QuickCheckResult,
    SourceDocument,
)
from plagiarism_engine.similarity_search import configs
from plagiarism_engine.similarity_search.evidence_algorithm.fingerprint_matcher import generate_fingerprints
from plagiarism_engine.similarity_search.pipeline import detect_plagiarism, quick_plagiarism_check

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/plagiarism",
    tags=["plagiarism"]
)


class CheckRequest(BaseModel):
    document_id: str
    text: str = ""
    user_documents: List[SourceDocument] = Field(default_factory=list)
    external_documents: List[SourceDocument] = Field(default_factory=list)
    # overrides of the default configuration, e.g. {"exclusions": {"quotes": false}}
    config: Dict[str, Any] = Field(default_factory=dict)


class QuickCheckRequest(BaseModel):
    document_id: str
    text: str = ""
    user_documents: List[SourceDocument] = Field(default_factory=list)
    config: Dict[str, Any] = Field(default_factory=dict)


class FingerprintRequest(BaseModel):
    document_id: str
    text: str = ""
    ngram_size: Optional[int] = None
    window_size: Optional[int] = None


def _config_from(overrides: Dict[str, Any]) -> PlagiarismConfig:
    try:
        return DEFAULT_PLAGIARISM_CONFIG.with_overrides(**overrides)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid configuration: {str(e)}")


@router.post("/check", response_model=PlagiarismResult)
def check_document(request: CheckRequest):
    """Full check against the caller's documents and any supplied external corpus."""
    config = _config_from(request.config)
    try:
        return detect_plagiarism(
            request.text,
            request.document_id,
            user_documents=request.user_documents,
            config=config,
            external_documents=request.external_documents,
        )
    except Exception as e:
        logger.exception("Plagiarism check failed for %s", request.document_id)
        raise HTTPException(status_code=500, detail=f"Plagiarism check failed: {str(e)}")


@router.post("/quick-check", response_model=QuickCheckResult)
def quick_check(request: QuickCheckRequest):
    config = _config_from(request.config)
    try:
        return quick_plagiarism_check(request.text, request.document_id, request.user_documents, config)
    except Exception as e:
        logger.exception("Quick check failed for %s", request.document_id)
        raise HTTPException(status_code=500, detail=f"Quick check failed: {str(e)}")


@router.post("/fingerprints", response_model=FingerprintSet)
def fingerprints(request: FingerprintRequest):
    ngram_size = request.ngram_size if request.ngram_size is not None else configs.NGRAM_SIZE
    window_size = request.window_size if request.window_size is not None else configs.WINNOW_WINDOW
    try:
        return generate_fingerprints(request.text, request.document_id, ngram_size, window_size)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
