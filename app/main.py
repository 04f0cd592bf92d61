from fastapi import Depends, FastAPI, Request
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from app.api import auth, users
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.metrics import request_count, request_duration, db_connected, get_metrics_text
from app.core.security import authenticate
from app.db.init_db import create_tables
from app.db.session import engine, get_db
import time
import logging

logger = logging.getLogger(__name__)


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            request_count.labels(
                method=request.method,
                endpoint=_endpoint_label(request),
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=_endpoint_label(request)
            ).observe(time.time() - start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("Application starting...")

    try:
        if settings.CREATE_TABLES:
            await create_tables(engine)
        db_connected.set(1)
        logger.info("Database connected")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)

    yield

    logger.info("Application shutting down...")
    await engine.dispose()
    db_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)
register_exception_handlers(app)

authenticated = [Depends(authenticate)]

app.include_router(auth.router)
app.include_router(auth.session_router, dependencies=authenticated)
app.include_router(users.router, dependencies=authenticated)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
        db_connected.set(1)
    except SQLAlchemyError as e:
        logger.error(f"Health check database probe failed: {e}")
        database = "disconnected"
        db_connected.set(0)

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "database": database
        }
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
