"""
Store Factory
Builds the configured DocumentStore implementation
"""
import logging

from app.config import Settings
from app.db.memory import InMemoryDocumentStore
from app.db.mongo import MongoDocumentStore
from app.db.store import DocumentStore
from app.models.employee import EmployeeCreate

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> DocumentStore:
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        logger.info("Using in-memory document store; data is lost on restart")
        return InMemoryDocumentStore()
    if backend == "mongo":
        logger.info("Using MongoDB database %s", settings.MONGODB_DB_NAME)
        return MongoDocumentStore.from_url(settings.MONGODB_URL, settings.MONGODB_DB_NAME)
    raise ValueError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'")


def bootstrap_admin_data(settings: Settings) -> EmployeeCreate:
    return EmployeeCreate(
        employee_code="ADMIN001",
        name="System Admin",
        email=settings.BOOTSTRAP_ADMIN_EMAIL,
        password=settings.BOOTSTRAP_ADMIN_PASSWORD,
        phone="+91-0000000000",
        department="Management",
        designation="Administrator",
    )
