from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uuid
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from database.connection import SessionLocal, create_tables
from database.seed import ensure_default_admin
from app.routers import all_routers

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover
    try:
        create_tables()
        ensure_default_admin(SessionLocal)
        logger.info("🚀 Sego Command Agent started (lifespan init)")
    except Exception as e:
        logger.warning(f"⚠️  Database initialization failed: {e}. App will continue without database.")
        logger.info("🚀 Sego Command Agent started (lifespan init - limited mode)")
    yield
    logger.info("👋 Lifespan shutdown")

app = FastAPI(
    title="Sego Command Agent",
    description="Spanish natural-language command agent for projects, tasks, tickets and warehouse requests",
    version="1.0.0",
    lifespan=lifespan,
)


def _include_routers(app: FastAPI):
    for router in all_routers:
        app.include_router(router)
        app.include_router(router, prefix="/v1")


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # pragma: no cover
    rid = str(uuid.uuid4())
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("Unhandled error")
    return JSONResponse(status_code=500, content={
        "error": {"type": exc.__class__.__name__, "message": str(exc)},
        "request_id": getattr(request.state, "request_id", None)
    })

_include_routers(app)

if __name__ == "__main__":  # pragma: no cover
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
