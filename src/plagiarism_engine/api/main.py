# src/plagiarism_engine/api/main.py
import logging

from fastapi import FastAPI

from plagiarism_engine import __version__
from plagiarism_engine.api.plagiarism_api import router as plagiarism_router
from plagiarism_engine.similarity_search import configs

logging.basicConfig(level=logging.DEBUG if configs.ENABLE_DEBUG_LOGS else logging.INFO)

app = FastAPI(title="Plagiarism Engine", version=__version__)

# Include plagiarism routes
app.include_router(plagiarism_router)


@app.get("/")
def read_root():
    return {"message": "Plagiarism engine is running!"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
