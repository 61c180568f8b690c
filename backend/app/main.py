"""
LexBridge Document Workflow: FastAPI application entry point.
Versioned legal documents, segment translation, and role-gated sign-off.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.errors import (
    WorkflowError, request_validation_handler, workflow_error_handler,
)
from app.core.logging import setup_logging, get_logger

# Initialize structured logging FIRST
setup_logging(level="DEBUG" if settings.DEBUG else "INFO")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting document workflow service", extra={
        "event": "startup",
        "app_name": settings.APP_NAME,
        "environment": settings.APP_ENV,
        "ai_provider": settings.AI_PROVIDER,
    })

    from app.database.postgresql import engine, Base
    from app.database.mongodb import connect_mongo, close_mongo

    try:
        # ── PostgreSQL ── (model imports register the tables)
        from app.auth.models import User  # noqa: F401
        from app.audit.models import AuditEvent  # noqa: F401
        from app.document.models import Document  # noqa: F401
        from app.versioning.models import DocumentVersion  # noqa: F401
        from app.segmentation.models import VersionSegment  # noqa: F401
        from app.translation.models import SegmentTranslation  # noqa: F401
        from app.workflow.models import Approval  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("PostgreSQL tables created", extra={"event": "db_ready", "db": "postgresql"})

        # ── MongoDB ──
        await connect_mongo()

        # ── Seed Admin User ──
        await _seed_admin()

    except Exception as e:
        logger.error(f"Startup check failed: {e}", extra={"event": "startup_partial_failure"})
        if settings.APP_ENV == "production":
            logger.critical("Fatal startup failure in production. Crashing.")
            raise
        logger.warning("Continuing startup in non-production mode with degraded features.")

    yield

    # ── Shutdown ──
    await close_mongo()
    await engine.dispose()
    logger.info("Application shutdown complete", extra={"event": "shutdown"})


async def _seed_admin():
    """Seed the admin account if missing, and keep its role at admin."""
    from sqlalchemy import select

    from app.auth.models import User, UserRole
    from app.core.security import get_password_hash
    from app.database.postgresql import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
        admin = result.scalar_one_or_none()
        if not admin:
            session.add(User(
                email=settings.ADMIN_EMAIL,
                full_name="System Admin",
                password_hash=get_password_hash(settings.ADMIN_DEFAULT_PASSWORD),
                role=UserRole.ADMIN.value,
                is_active=True,
            ))
            logger.info("Admin user seeded", extra={"event": "admin_seeded", "email": settings.ADMIN_EMAIL})
        elif admin.role != UserRole.ADMIN.value:
            admin.role = UserRole.ADMIN.value
            logger.info("Admin user role synced to 'admin'", extra={"event": "admin_role_sync", "email": settings.ADMIN_EMAIL})
        await session.commit()


# ── Application ──
app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(WorkflowError, workflow_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──
from app.auth.router import router as auth_router
from app.document.router import router as document_router
from app.versioning.router import router as versioning_router
from app.translation.router import router as translation_router
from app.workflow.router import router as workflow_router
from app.audit.router import router as audit_router
from app.verify.router import router as verify_router

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(document_router, prefix="/api/documents", tags=["Documents"])
app.include_router(versioning_router, prefix="/api/documents", tags=["Versions"])
app.include_router(translation_router, prefix="/api/documents", tags=["Translation"])
app.include_router(workflow_router, prefix="/api/documents", tags=["Approvals"])
app.include_router(audit_router, prefix="/api/audit", tags=["Audit"])
app.include_router(verify_router, prefix="/api/verify", tags=["Verify"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "ai_provider": settings.AI_PROVIDER,
        "target_langs": settings.default_target_langs,
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}
