import logging
import os
import time

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from api import state  # noqa: E402
from api.routers import auth, ops, tasks  # noqa: E402
from storage import db  # noqa: E402
from taskmind.errors import TaskmindError  # noqa: E402
from taskmind.metrics import REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL  # noqa: E402

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = os.getenv("API_PREFIX", "/api").rstrip("/")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="taskmind")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory wiring so the app is usable before (or without) startup
state.configure(use_database=False)

app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(tasks.router, prefix=API_PREFIX)
app.include_router(ops.router)


@app.exception_handler(TaskmindError)
async def taskmind_error_handler(request: Request, exc: TaskmindError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    start = time.time()
    response = await call_next(request)

    # Label by route template so task ids do not explode the label space
    route = request.scope.get("route")
    endpoint = getattr(route, "path", "unmatched")

    # Prometheus counters (best-effort)
    try:
        REQUESTS_TOTAL.labels(
            endpoint=endpoint, method=request.method, status=str(response.status_code)
        ).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    except Exception:
        pass

    return response


@app.on_event("startup")
async def startup() -> None:
    if db.DATABASE_URL:
        await db.init_db_pool()
        await db.init_schema()
        state.configure(use_database=True)
    else:
        logger.warning("DATABASE_URL not set. Tasks and accounts are kept in memory.")


@app.on_event("shutdown")
async def shutdown() -> None:
    await db.close_db_pool()
