"""
API Dependencies
Hands the application's document store to the routes
"""
from starlette.requests import HTTPConnection

from app.db.store import DocumentStore


def get_store(connection: HTTPConnection) -> DocumentStore:
    """The store created in the lifespan (or installed by tests)"""
    return connection.app.state.store
