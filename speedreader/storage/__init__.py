"""Persistence for documents, preferences and reading sessions."""

from speedreader.storage.database import get_connection, initialize_database
from speedreader.storage.store import DocumentStore

__all__ = ["DocumentStore", "get_connection", "initialize_database"]
