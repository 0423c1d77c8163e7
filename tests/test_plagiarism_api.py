# tests/test_plagiarism_api.py
import sys
import os
import pytest
from fastapi.testclient import TestClient

# Ensure src is in the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from plagiarism_engine.api.main import app

SHARED = "The quick brown fox jumps over the lazy dog near the river"
USER_DOC = {
    "id": "older-essay",
    "title": "Older essay",
    "content": f"Another preface sentence begins now. {SHARED}! Different ending appears.",
}


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_check_document(client):
    response = client.post("/plagiarism/check", json={
        "document_id": "draft",
        "text": SHARED,
        "user_documents": [USER_DOC],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["similarity_score"] == 100
    assert body["classification"] == "critical"
    assert len(body["matches"]) == 1
    assert body["matches"][0]["word_count"] == 12
    assert body["self_plagiarism"][0]["source_document"]["id"] == "older-essay"


def test_check_with_invalid_config(client):
    response = client.post("/plagiarism/check", json={
        "document_id": "draft",
        "text": SHARED,
        "config": {"ngram_size": 0},
    })
    assert response.status_code == 422


def test_check_requires_document_id(client):
    response = client.post("/plagiarism/check", json={"text": SHARED})
    assert response.status_code == 422


def test_quick_check(client):
    response = client.post("/plagiarism/quick-check", json={
        "document_id": "draft",
        "text": SHARED,
        "user_documents": [USER_DOC],
    })
    assert response.status_code == 200
    body = response.json()
    assert set(body) >= {"similarity_score", "originality_score", "self_plagiarism_count", "flagged_documents"}
    assert body["similarity_score"] + body["originality_score"] == 100


def test_fingerprints(client):
    response = client.post("/plagiarism/fingerprints", json={
        "document_id": "draft",
        "text": SHARED,
        "ngram_size": 3,
        "window_size": 2,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["document_id"] == "draft"
    assert body["ngram_size"] == 3
    assert body["word_count"] == 12
    assert body["fingerprints"]


def test_fingerprints_invalid_window(client):
    response = client.post("/plagiarism/fingerprints", json={
        "document_id": "draft",
        "text": SHARED,
        "window_size": 0,
    })
    assert response.status_code == 422
