import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - registers tables with Base
from .config import (
    DATABASE_URL,
    EMAIL_FROM_ADDRESS,
    FRONTEND_URL,
    PLATFORM_FEE_PERCENTAGE,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
    RESEND_API_KEY,
    SLACK_WEBHOOK_URL,
)
from .database import Base, create_db_engine, create_session_factory
from .domain.addresses.router import router as addresses_router
from .domain.applications.router import router as applications_router
from .domain.availability.router import router as availability_router
from .domain.bookings.router import router as bookings_router
from .domain.cleaners.router import router as cleaners_router
from .domain.companies.router import router as companies_router
from .domain.invites.router import router as invites_router
from .domain.pricing.router import router as pricing_router
from .domain.pricing.service import PricingService
from .domain.users.router import router as users_router
from .email_service import MailService, NullMailService
from .services.document_storage import DocumentStorage, NullDocumentStorage
from .services.notification_service import NotificationService, NullNotificationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:5173").split(",")


def build_mail_service() -> MailService:
    if not RESEND_API_KEY:
        logger.warning("⚠️ RESEND_API_KEY not set - transactional email disabled")
        return NullMailService()
    return MailService(RESEND_API_KEY, EMAIL_FROM_ADDRESS)


def build_notification_service() -> NotificationService:
    if not SLACK_WEBHOOK_URL:
        logger.info("SLACK_WEBHOOK_URL not set - admin notifications disabled")
        return NullNotificationService()
    return NotificationService(SLACK_WEBHOOK_URL)


def build_storage_service() -> DocumentStorage:
    if not all([R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY]):
        logger.warning("⚠️ R2 credentials not set - document uploads disabled")
        return NullDocumentStorage()
    return DocumentStorage(R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    engine = app.state.engine
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    db = app.state.session_factory()
    try:
        PricingService(db, app.state.platform_fee_percentage).seed_catalog()
    except Exception as e:
        logger.error(f"Failed to seed service catalog: {e}")
    finally:
        db.close()

    yield
    logger.info("Application shutting down...")
    engine.dispose()


def create_app(
    database_url: Optional[str] = None,
    mail_service: Optional[MailService] = None,
    notification_service: Optional[NotificationService] = None,
    storage_service: Optional[DocumentStorage] = None,
    platform_fee_percentage: Optional[float] = None,
) -> FastAPI:
    """
    Build the API with its collaborators attached to app.state

    Collaborators not passed in are built from the environment; missing
    credentials fall back to no-op implementations.
    """
    app = FastAPI(title="CleanBuddy API", version="1.0.0", lifespan=lifespan)

    engine = create_db_engine(database_url or DATABASE_URL)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.mail_service = mail_service or build_mail_service()
    app.state.notification_service = notification_service or build_notification_service()
    app.state.storage_service = storage_service or build_storage_service()
    app.state.platform_fee_percentage = (
        PLATFORM_FEE_PERCENTAGE if platform_fee_percentage is None else platform_fee_percentage
    )
    app.state.frontend_url = FRONTEND_URL

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} - Error: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "internal error"})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    app.include_router(users_router)
    app.include_router(addresses_router)
    app.include_router(cleaners_router)
    app.include_router(companies_router)
    app.include_router(availability_router)
    app.include_router(pricing_router)
    app.include_router(bookings_router)
    app.include_router(applications_router)
    app.include_router(invites_router)

    @app.get("/")
    def root():
        return {"message": "CleanBuddy API is running"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
