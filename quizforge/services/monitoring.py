"""
Health checks and Prometheus metrics for the extraction and generation services
"""
import time

import psutil
import pytesseract
import structlog
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlmodel import Session, select

from quizforge.db import engine
from quizforge.models import Document, Quiz
from quizforge.services.cache import cache
from quizforge.services.repository import count_rows

logger = structlog.get_logger()

# Prometheus metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
EXTRACTION_REQUESTS = Counter('extraction_requests_total', 'Text extraction attempts', ['media_type', 'status'])
QUIZ_GENERATION_REQUESTS = Counter('quiz_generation_requests_total', 'Quiz generation requests', ['type', 'status'])
QUESTIONS_PER_QUIZ = Histogram(
    'questions_per_quiz', 'Number of questions in generated quizzes',
    buckets=(0, 1, 5, 10, 20, 50, 100)
)
TOTAL_DOCUMENTS = Gauge('documents_total', 'Number of stored documents')
TOTAL_QUIZZES = Gauge('quizzes_total', 'Number of stored quizzes')

# A failing check here marks the whole service unhealthy; OCR only degrades image uploads
CRITICAL_CHECKS = ("database", "cache")


def _check(healthy: bool, message: str, **extra) -> dict:
    return {"status": "healthy" if healthy else "unhealthy", "message": message, **extra}


class HealthChecker:
    def __init__(self):
        self.start_time = time.time()

    def check_database(self) -> dict:
        try:
            with Session(engine) as session:
                session.exec(select(Document).limit(1)).all()
            return _check(True, "Database connection successful")
        except Exception as e:
            logger.error("database_check_failed", error=str(e))
            return _check(False, f"Database connection failed: {e}")

    def check_cache(self) -> dict:
        """Round-trip a throwaway key through the extraction cache"""
        backend = cache.backend
        probe = "health:probe"
        try:
            cache.set(probe, "ok", expire=10)
            value = cache.get(probe)
            cache.delete(probe)
        except Exception as e:
            logger.error("cache_check_failed", error=str(e))
            return _check(False, f"Cache unavailable: {e}", backend=backend)
        return _check(value == "ok", "Cache round-trip " + ("succeeded" if value == "ok" else "failed"), backend=backend)

    def check_ocr(self) -> dict:
        try:
            version = pytesseract.get_tesseract_version()
            return _check(True, f"Tesseract {version} available")
        except Exception as e:
            logger.warning("ocr_check_failed", error=str(e))
            return _check(False, f"Tesseract not available: {e}")

    def get_system_metrics(self) -> dict:
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')
            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory_percent": memory.percent,
                "memory_available_gb": round(memory.available / (1024**3), 2),
                "disk_percent": disk.percent,
                "disk_free_gb": round(disk.free / (1024**3), 2),
                "uptime_seconds": round(time.time() - self.start_time, 1),
            }
        except Exception as e:
            logger.error("system_metrics_failed", error=str(e))
            return {"error": str(e)}

    def get_application_metrics(self) -> dict:
        """Stored document and quiz counts; also refreshes the matching gauges"""
        try:
            with Session(engine) as session:
                documents = count_rows(session, Document)
                quizzes = count_rows(session, Quiz)
        except Exception as e:
            logger.error("application_metrics_failed", error=str(e))
            return {"error": str(e)}

        TOTAL_DOCUMENTS.set(documents)
        TOTAL_QUIZZES.set(quizzes)
        return {"documents": documents, "quizzes": quizzes}

    def get_health_status(self) -> dict:
        checks = {
            "database": self.check_database(),
            "cache": self.check_cache(),
            "ocr": self.check_ocr(),
        }
        failing = [name for name, check in checks.items() if check["status"] == "unhealthy"]

        return {
            "status": "unhealthy" if any(name in CRITICAL_CHECKS for name in failing) else "healthy",
            "timestamp": time.time(),
            "checks": checks,
            "system_metrics": self.get_system_metrics(),
            "application_metrics": self.get_application_metrics(),
            "unhealthy_components": failing,
        }


health_checker = HealthChecker()


def get_metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
