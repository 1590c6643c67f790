"""
Document store adapters for Live Hub.
Maps string keys to JSON documents with compare-and-swap updates.
"""

import copy
import json
import logging

import redis
from sqlalchemy import update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from livehub.utils.errors import StoreError, StoreConflictError
from .database_config import build_engine, init_db, make_session_factory, session_scope
from .document_models import Document

logger = logging.getLogger(__name__)


class DocumentStore:
    """Base interface shared by every backend.

    ``update(key, mutate, default)`` reads the document (or a copy of
    ``default``), lets ``mutate`` edit it in place and writes it back only if
    nobody else wrote the key in between. On a version mismatch the whole
    cycle is retried, so ``mutate`` must not have side effects outside the
    document. Whatever ``mutate`` returns is handed back to the caller; if it
    raises, nothing is written.
    """

    def __init__(self, max_retries=5):
        self.max_retries = max_retries

    def get(self, key, default=None):
        raise NotImplementedError

    def put(self, key, doc):
        raise NotImplementedError

    def update(self, key, mutate, default=None):
        raise NotImplementedError


class SqlDocumentStore(DocumentStore):
    """SQLAlchemy-backed store using a version column for CAS"""

    def __init__(self, engine, max_retries=5):
        super().__init__(max_retries)
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)
        init_db(engine)

    @classmethod
    def from_url(cls, database_url, max_retries=5):
        return cls(build_engine(database_url), max_retries=max_retries)

    def _read(self, key):
        with session_scope(self.SessionLocal) as db:
            row = db.get(Document, key)
            if row is None:
                return None, 0
            return json.loads(row.value), row.version

    def get(self, key, default=None):
        try:
            doc, _ = self._read(key)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read '{key}': {e}")
        return doc if doc is not None else copy.deepcopy(default)

    def put(self, key, doc):
        try:
            with session_scope(self.SessionLocal) as db:
                row = db.get(Document, key)
                if row is None:
                    db.add(Document(key=key, value=json.dumps(doc), version=1))
                else:
                    row.value = json.dumps(doc)
                    row.version = row.version + 1
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write '{key}': {e}")

    def update(self, key, mutate, default=None):
        for attempt in range(self.max_retries):
            try:
                doc, version = self._read(key)
            except SQLAlchemyError as e:
                raise StoreError(f"Failed to read '{key}': {e}")

            if doc is None:
                doc = copy.deepcopy(default)
            result = mutate(doc)

            try:
                with session_scope(self.SessionLocal) as db:
                    if version == 0:
                        db.add(Document(key=key, value=json.dumps(doc), version=1))
                        written = True
                    else:
                        outcome = db.execute(
                            sql_update(Document)
                            .where(Document.key == key, Document.version == version)
                            .values(value=json.dumps(doc), version=version + 1)
                        )
                        written = outcome.rowcount == 1
            except IntegrityError:
                # Someone created the key first
                written = False
            except SQLAlchemyError as e:
                raise StoreError(f"Failed to write '{key}': {e}")

            if written:
                return result
            logger.warning(f"Version conflict on '{key}' (attempt {attempt + 1}/{self.max_retries})")

        raise StoreConflictError(f"Gave up updating '{key}' after {self.max_retries} conflicting writes")


class RedisDocumentStore(DocumentStore):
    """Redis-backed store using WATCH/MULTI/EXEC for CAS"""

    def __init__(self, client, prefix="livehub:", max_retries=5):
        super().__init__(max_retries)
        self.client = client
        self.prefix = prefix

    def _key(self, key):
        return f"{self.prefix}{key}"

    def get(self, key, default=None):
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as e:
            raise StoreError(f"Failed to read '{key}': {e}")
        if raw is None:
            return copy.deepcopy(default)
        return json.loads(raw)

    def put(self, key, doc):
        try:
            self.client.set(self._key(key), json.dumps(doc))
        except redis.RedisError as e:
            raise StoreError(f"Failed to write '{key}': {e}")

    def update(self, key, mutate, default=None):
        name = self._key(key)
        try:
            with self.client.pipeline() as pipe:
                for attempt in range(self.max_retries):
                    try:
                        pipe.watch(name)
                        raw = pipe.get(name)
                        doc = json.loads(raw) if raw is not None else copy.deepcopy(default)
                        result = mutate(doc)
                        pipe.multi()
                        pipe.set(name, json.dumps(doc))
                        pipe.execute()
                        return result
                    except redis.WatchError:
                        logger.warning(f"Version conflict on '{key}' (attempt {attempt + 1}/{self.max_retries})")
                        continue
        except redis.RedisError as e:
            raise StoreError(f"Failed to update '{key}': {e}")

        raise StoreConflictError(f"Gave up updating '{key}' after {self.max_retries} conflicting writes")
