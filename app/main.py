import asyncio
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger

from app.api.programs import router as programs_router
from app.core.logger import setup_logger_from_settings
from app.db.session import init_db

REQUEST_ID_HEADER = "X-Request-Id"

setup_logger_from_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Ensure database tables exist before serving requests."""
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    await asyncio.sleep(0)
    yield


app = FastAPI(title="Coach Portal", lifespan=lifespan)

app.include_router(programs_router)

logger.info("FastAPI application initialized")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests under the caller's X-Request-Id (or a fresh one)."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    with logger.contextualize(request_id=request_id):
        logger.debug(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
