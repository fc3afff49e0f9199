"""
Main FastAPI Application
Entry point for the backend server
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.factory import bootstrap_admin_data, create_store
from app.db.store import DocumentStore
from app.exceptions import AppError
from app.logging_config import configure_logging
from app.services.users import UserService

# Import routers
from app.api.routes import auth, company, employees, inventory, invoices, kpi, kra, payroll

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
    logger.info("Starting %s %s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = create_store(settings)

    # Auto-create the first super admin if none exists
    if settings.BOOTSTRAP_ADMIN:
        admin = await UserService(app.state.store).bootstrap_admin(bootstrap_admin_data(settings))
        if admin is not None:
            logger.warning("Default super admin created (%s); change its password", admin.email)

    yield

    logger.info("Shutting down")
    if owns_store:
        await app.state.store.close()
        app.state.store = None


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the API; pass a store to skip creating one from settings"""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Payroll, KRA/KPI performance, inventory and GST invoicing API",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc"
    )
    app.state.store = store

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(employees.router, prefix="/api/users", tags=["Users"])
    app.include_router(kra.router, prefix="/api/kra", tags=["KRA"])
    app.include_router(kpi.router, prefix="/api/kpi", tags=["KPI"])
    app.include_router(payroll.router, prefix="/api/payroll", tags=["Payroll"])
    app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
    app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
    app.include_router(company.router, prefix="/api/company", tags=["Company Settings"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": f"{settings.APP_NAME} API",
            "version": settings.APP_VERSION,
            "docs": "/api/docs"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat()
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
