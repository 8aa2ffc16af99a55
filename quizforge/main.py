import time

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from quizforge.db import init_db
from quizforge.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from quizforge.routers import files as files_router
from quizforge.routers import quizzes as quizzes_router
from quizforge.services.logging import configure_logging, log_api_request
from quizforge.services.monitoring import REQUEST_COUNT, REQUEST_DURATION, get_metrics, health_checker

configure_logging()
logger = structlog.get_logger()

app = FastAPI(
    title="Quizforge",
    description="Generates quizzes from uploaded PDFs, images and videos",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def endpoint_label(request: Request) -> str:
    # Label by route template so /api/files/1 and /api/files/2 share a series
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@app.middleware("http")
async def record_request(request: Request, call_next):
    started = time.perf_counter()
    log_api_request(request)

    try:
        response = await call_next(request)
    except Exception as e:
        log_api_request(request, error=e)
        raise

    elapsed = time.perf_counter() - started
    endpoint = endpoint_label(request)
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()
    REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(elapsed)

    log_api_request(request, response, duration=round(elapsed, 4))
    return response


# ----------------- Health & Monitoring -----------------
@app.get("/health")
async def health_check():
    return health_checker.get_health_status()


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return get_metrics()


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("quizforge_started")


app.include_router(files_router.router)
app.include_router(quizzes_router.router)
