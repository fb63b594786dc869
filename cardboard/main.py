import os
import sys
import time
import logging
import logging.config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from contextlib import asynccontextmanager

from cardboard import __version__
from cardboard.core.config import ENV, CORS_ORIGINS
from cardboard.core.errors import CardboardError
from cardboard.db.base import Base
from cardboard.db import models  # noqa: F401  registers tables on Base.metadata
from cardboard.db.session import engine, async_session
from cardboard.api.routes import auth, boards, categories, cards, public, storage

# Load logging config if present
if os.path.exists("logging.conf"):
    logging.config.fileConfig("logging.conf", disable_existing_loggers=False)
else:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
logger = logging.getLogger("cardboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")

    yield  # App runs here

    await engine.dispose()
    logger.info("Shutting down...")


# Create FastAPI app with lifespan
app = FastAPI(
    title="Cardboard API",
    version=__version__,
    lifespan=lifespan,
)

# Dev-only CORS settings
if ENV == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("CORS allowed for development environment")
elif CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"CORS restricted to {', '.join(CORS_ORIGINS)}")
else:
    logger.info("Running in production environment - CORS restricted")


request_logger = logging.getLogger("cardboard.http")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = None
    try:
        response = await call_next(request)
        return response
    except Exception:
        request_logger.exception("request_failed method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        duration_ms = int((time.time() - start) * 1000)
        request_logger.info(
            "request method=%s path=%s status=%s duration_ms=%s",
            request.method,
            request.url.path,
            getattr(response, "status_code", "ERR"),
            duration_ms,
        )


@app.exception_handler(CardboardError)
async def cardboard_error_handler(request: Request, exc: CardboardError):
    # provider messages go back verbatim
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# API routes
app.include_router(auth.router)
app.include_router(boards.router)
app.include_router(categories.router)
app.include_router(cards.router)
app.include_router(public.router)
app.include_router(storage.router)


@app.api_route("/api/health", methods=["GET", "HEAD"])
async def health(request: Request):
    status = {
        "api": "ok",
        "database": None,
    }

    http_status = 200

    # --- Database check ---
    try:
        async with async_session() as db:
            await db.execute(text("SELECT 1"))
        status["database"] = "connected"
    except Exception as e:
        status["database"] = f"error: {e}"
        http_status = 503

    return JSONResponse(content=status, status_code=http_status)
