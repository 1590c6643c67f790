"""
Storage layer for Live Hub
"""

from .database_config import Base, build_engine, init_db, session_scope
from .document_models import Document
from .store import DocumentStore, SqlDocumentStore, RedisDocumentStore

__all__ = [
    'Base', 'build_engine', 'init_db', 'session_scope', 'Document',
    'DocumentStore', 'SqlDocumentStore', 'RedisDocumentStore'
]
