import os

# Prefer DATABASE_URL (e.g., Postgres in production). Fallback to local SQLite.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quizforge.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_UPLOAD_FILES = int(os.getenv("MAX_UPLOAD_FILES", "10"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
EXTRACTION_CACHE_TTL = int(os.getenv("EXTRACTION_CACHE_TTL", str(24 * 3600)))

# Upper bound on numberOfQuestions; the attempt loop runs 3x this many times
MAX_QUESTIONS = int(os.getenv("MAX_QUESTIONS", "50"))

# Optional path to the tesseract binary when it is not on PATH
TESSERACT_CMD = os.getenv("TESSERACT_CMD")

UPLOAD_RATE_LIMIT = os.getenv("UPLOAD_RATE_LIMIT", "30/minute")
GENERATION_RATE_LIMIT = os.getenv("GENERATION_RATE_LIMIT", "20/minute")
