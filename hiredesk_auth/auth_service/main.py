"""
HireDesk auth service - registration, login and JWT session lifecycle
"""
from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import init_db
from .errors import register_error_handlers
from .routes import auth, dev_monitor, health, uploads

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database on startup"""
    init_db()
    yield


app = FastAPI(
    title="HireDesk Auth Service",
    description="Registration, login and JWT access/refresh token lifecycle",
    version="1.0.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Process-Time"] = str(process_time)
    logger.info(
        "Request processed: %s %s - Completed in %.4f secs",
        request.method, request.url.path, process_time
    )
    return response


# Credentials must be allowed for the refresh cookie to reach the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(uploads.router)
app.include_router(health.router)
app.include_router(dev_monitor.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "HireDesk Auth Service",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health",
    }
