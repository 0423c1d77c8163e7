from dotenv import load_dotenv
import os

load_dotenv()


def _parse_thresholds(raw: str):
    return tuple(float(part) for part in raw.split(",") if part.strip())


# ============================================================
# 🔢 Fingerprinting
# ============================================================
NGRAM_SIZE = int(os.getenv("NGRAM_SIZE", 5))
WINNOW_WINDOW = int(os.getenv("WINNOW_WINDOW", 4))

# Polynomial hash parameters (hash = (hash * PRIME + ord(c)) mod MOD)
HASH_PRIME = 31
HASH_MOD = 1_000_000_007


# ============================================================
# 🧩 Match reconstruction
# ============================================================
MIN_MATCH_LENGTH = int(os.getenv("MIN_MATCH_LENGTH", 5))
SOURCE_SNIPPET_CHARS = int(os.getenv("SOURCE_SNIPPET_CHARS", 100))


# ============================================================
# ⚡ Quick check
# ============================================================
QUICK_NGRAM_SIZE = int(os.getenv("QUICK_NGRAM_SIZE", 4))
# a candidate document is flagged when MORE than this many hashes are shared
QUICK_MATCH_THRESHOLD = int(os.getenv("QUICK_MATCH_THRESHOLD", 5))
QUICK_SCORE_PER_DOCUMENT = float(os.getenv("QUICK_SCORE_PER_DOCUMENT", 10))
QUICK_SCORE_CAP = float(os.getenv("QUICK_SCORE_CAP", 50))


# ============================================================
# 📝 Quotes & citations
# ============================================================
MIN_QUOTE_LENGTH = int(os.getenv("MIN_QUOTE_LENGTH", 20))
CITATION_MAX_DISTANCE = int(os.getenv("CITATION_MAX_DISTANCE", 100))
# Matches get a little more slack than quotes when looking for a citation
MATCH_CITATION_DISTANCE = int(os.getenv("MATCH_CITATION_DISTANCE", 150))
UNCITED_QUOTE_SUGGESTION = "Add a citation for this quoted text"


# ============================================================
# 📊 Scoring
# ============================================================
# Upper bounds (inclusive) of original / acceptable / needs-review / concerning / high-risk.
# Anything above the last bound is critical.
CLASSIFICATION_THRESHOLDS = _parse_thresholds(os.getenv("CLASSIFICATION_THRESHOLDS", "10,20,40,60,80"))

CONFIDENCE_HIGH_MIN_WORDS = int(os.getenv("CONFIDENCE_HIGH_MIN_WORDS", 500))
CONFIDENCE_HIGH_MIN_FINGERPRINTS = int(os.getenv("CONFIDENCE_HIGH_MIN_FINGERPRINTS", 50))
CONFIDENCE_LOW_MAX_WORDS = int(os.getenv("CONFIDENCE_LOW_MAX_WORDS", 100))


# ============================================================
# 🧵 Concurrency
# ============================================================
MAX_WORKERS = int(os.getenv("MAX_WORKERS", min(8, (os.cpu_count() or 1) + 4)))
USE_PROCESS_POOL = os.getenv("USE_PROCESS_POOL", "false").lower() == "true"
# below this many documents the corpus is fingerprinted inline
PARALLEL_MIN_DOCUMENTS = int(os.getenv("PARALLEL_MIN_DOCUMENTS", 8))


# ============================================================
# 🧪 Debugging
# ============================================================
ENABLE_DEBUG_LOGS = os.getenv("ENABLE_DEBUG_LOGS", "false").lower() == "true"
