"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Builds the services and stores them on app.state
- Registers API routes (users, payments)
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.core.security import build_credential_service
from app.db.mongo import (
    connect_to_mongo,
    close_mongo_connection,
    check_database_health,
    get_users_collection,
)
from app.db.indexes import create_indexes
from app.services.account_service import AccountService
from app.services.checkout_service import CheckoutService
from app.services.notification_service import build_notification_service
from app.services.payment_gateway import build_payment_gateway, build_line_item
from app.services.user_store import MongoUserStore
from app.api import users, payments

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


def build_services(app: FastAPI, user_store) -> None:
    """
    Wires the collaborators together and exposes them to request handlers.
    """
    credentials = build_credential_service()
    checkout = CheckoutService(
        gateway=build_payment_gateway(),
        user_store=user_store,
        line_item=build_line_item(),
    )
    notifier = build_notification_service()
    if not notifier.is_configured():
        logger.warning("Email transport not configured; receipt emails will fail and be skipped")

    app.state.credentials = credentials
    app.state.checkout_service = checkout
    app.state.account_service = AccountService(
        user_store=user_store,
        credentials=credentials,
        checkout=checkout,
        notifier=notifier,
        currency=settings.PRODUCT_CURRENCY,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting Sleep Haven API...")

    try:
        logger.info("Validating configuration...")
        validate_settings()

        logger.info("Connecting to MongoDB...")
        await connect_to_mongo()

        logger.info("Creating database indexes...")
        await create_indexes()

        build_services(app, MongoUserStore(get_users_collection()))

        logger.info("Sleep Haven API started successfully")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("Shutting down Sleep Haven API...")

    try:
        await app.state.account_service.wait_for_notifications()
        await close_mongo_connection()
        logger.info("Sleep Haven API shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="Sleep Haven API",
    description="Accounts, checkout and paid-plan provisioning for Sleep Haven",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


app.include_router(users.router, prefix=settings.API_PREFIX, tags=["Users"])
app.include_router(payments.router, prefix=settings.API_PREFIX, tags=["Payments"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "Sleep Haven API",
        "version": "1.0.0",
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Checks database connectivity.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0",
        "checks": {}
    }

    db_healthy = await check_database_health()
    health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
    if not db_healthy:
        health_status["status"] = "degraded"

    health_status["checks"]["payments"] = "configured" if settings.STRIPE_SECRET_KEY else "not_configured"
    health_status["checks"]["email"] = "configured" if settings.email_configured else "not_configured"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
