from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sessionlog.api.routes import auth, user_logs
from sessionlog.core.config import settings
from sessionlog.core.errors import register_exception_handlers
from sessionlog.core.logging import setup_logging
from sessionlog.core.middleware import LatencyMonitorMiddleware, RequestIdMiddleware
from sessionlog.db.base import Base
from sessionlog.db.session import engine

# Setup logging
logger = setup_logging()


tags_metadata = [
    {
        "name": "auth",
        "description": "**Authentication** - Register, log in and log out. Every login opens a user log entry; logout closes it.",
    },
    {
        "name": "user-logs",
        "description": "**User Logs** - Administrative audit view of login sessions. **Requires admin role.**",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if settings.AUTO_CREATE_TABLES:
        # Local convenience; deployments run alembic migrations instead
        import sessionlog.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
## SessionLog API

Authentication with a per-session user log: who logged in, when, from where,
with which token, and when the session closed.
    """,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Latency Monitoring (SLO Check)
app.add_middleware(LatencyMonitorMiddleware)

# Request ID Tracing
app.add_middleware(RequestIdMiddleware)

register_exception_handlers(app)

app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])

app.include_router(
    user_logs.router,
    prefix=f"{settings.API_V1_PREFIX}/user-logs",
    tags=["user-logs"],
)


@app.get("/health", summary="Health check")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", summary="API root")
async def root():
    """Root endpoint with API info"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health",
    }
