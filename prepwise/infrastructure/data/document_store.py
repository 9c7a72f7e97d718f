"""
File-backed document store.
One JSON file per document, one directory per collection.
"""
import os
import re
import json
import uuid
import logging
import tempfile
import threading
from typing import Dict, List, Optional, Any

from ...errors import PersistenceError

logger = logging.getLogger("document_store")

_DOC_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonDocumentStore:
    """
    Stores documents as JSON files under ``root_dir/<collection>/<id>.json``.

    Read and write failures are caught here and normalized to ``None``,
    an empty list or ``False``; callers never see an exception.
    """

    def __init__(self, root_dir: str = "./_prepwise"):
        self.root_dir = root_dir
        self._write_lock = threading.Lock()
        os.makedirs(self.root_dir, exist_ok=True)

    def _collection_dir(self, collection: str) -> str:
        if not _DOC_ID.match(collection):
            raise PersistenceError(f"Invalid collection name: {collection!r}")
        return os.path.join(self.root_dir, collection)

    def _document_path(self, collection: str, doc_id: str) -> str:
        if not doc_id or not _DOC_ID.match(doc_id):
            raise PersistenceError(f"Invalid document id: {doc_id!r}")
        return os.path.join(self._collection_dir(collection), f"{doc_id}.json")

    @staticmethod
    def new_id() -> str:
        """Allocate a fresh document identifier."""
        return uuid.uuid4().hex

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document, with its ``id`` field set, or None."""
        try:
            path = self._document_path(collection, doc_id)
            if not os.path.exists(path):
                return None
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (PersistenceError, OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {collection}/{doc_id}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Document {collection}/{doc_id} is not a JSON object, ignoring it")
            return None
        data["id"] = doc_id
        return data

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
        """
        Create or fully overwrite a document.

        The file is written to a temporary path and moved into place, so a
        reader sees either the old or the new document.

        Returns:
            True if the document was written
        """
        payload = {k: v for k, v in data.items() if k != "id"}
        try:
            path = self._document_path(collection, doc_id)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with self._write_lock:
                fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".tmp")
                try:
                    with os.fdopen(fd, 'w', encoding='utf-8') as f:
                        json.dump(payload, f, indent=2, ensure_ascii=False)
                    os.replace(tmp_path, path)
                except BaseException:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                    raise
        except (PersistenceError, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {collection}/{doc_id}: {e}")
            return False

        logger.debug(f"Wrote document {collection}/{doc_id}")
        return True

    def add(self, collection: str, data: Dict[str, Any]) -> Optional[str]:
        """Create a document under a newly allocated id; returns the id or None."""
        doc_id = self.new_id()
        return doc_id if self.set(collection, doc_id, data) else None

    def list(self, collection: str) -> List[Dict[str, Any]]:
        """All documents of a collection, in no particular order."""
        try:
            directory = self._collection_dir(collection)
            if not os.path.isdir(directory):
                return []
            filenames = sorted(os.listdir(directory))
        except (PersistenceError, OSError) as e:
            logger.error(f"Failed to list {collection}: {e}")
            return []

        documents = []
        for filename in filenames:
            if filename.endswith('.json'):
                doc = self.get(collection, filename[:-5])
                if doc is not None:
                    documents.append(doc)
        return documents

    def where(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        """Documents whose fields equal every given filter value."""
        return [
            doc for doc in self.list(collection)
            if all(doc.get(field) == value for field, value in filters.items())
        ]
