# store.py
"""
JSON-file store for uploaded documents, their chunks and saved chat messages.

Layout on disk: {"documents": [...], "chunks": [...], "messages": [...]}. Every row carries an
owner_id and every query filters on it. The whole file is rewritten after each
mutation.
"""
import logging
import threading
import uuid
from typing import List, Optional

from app.core.chunker import Chunk
from app.core.config import settings
from app.core.parser import ParsedDocument
from app.utils import save_json, load_json, utc_now_iso

logger = logging.getLogger(__name__)


class DocumentNotFound(LookupError):
    pass


class DocumentLimitReached(Exception):
    pass


class NotesStore:
    def __init__(self, path: str = None):
        self.path = path or settings.NOTES_DB_PATH
        self.documents: List[dict] = []
        self.chunks: List[dict] = []
        self.messages: List[dict] = []
        self._lock = threading.Lock()
        self.load()

    def load(self):
        try:
            data = load_json(self.path)
        except FileNotFoundError:
            data = {}
        self.documents = data.get("documents", [])
        self.chunks = data.get("chunks", [])
        self.messages = data.get("messages", [])

    def save(self):
        save_json({"documents": self.documents, "chunks": self.chunks, "messages": self.messages}, self.path)

    def count_documents(self, owner_id: str) -> int:
        return sum(1 for d in self.documents if d["owner_id"] == owner_id)

    def add_document(self, owner_id: str, parsed: ParsedDocument, file_size: int,
                     chunks: List[Chunk], limit: int = None) -> dict:
        """
        Store document metadata and all of its chunks. Returns the document row.
        When limit is given, raises DocumentLimitReached if the owner already
        has that many documents; the count is taken under the write lock.
        """
        document_id = str(uuid.uuid4())
        doc = {
            "document_id": document_id,
            "owner_id": owner_id,
            "filename": parsed.filename,
            "file_type": parsed.file_type,
            "file_size": file_size,
            "page_count": parsed.page_count,
            "word_count": parsed.word_count,
            "chunks_count": len(chunks),
            "uploaded_at": utc_now_iso(),
        }
        rows = [
            {
                "owner_id": owner_id,
                "document_id": document_id,
                "filename": parsed.filename,
                "file_type": parsed.file_type,
                "chunk_index": c.chunk_index,
                "text": c.text,
                "start_index": c.start_index,
                "end_index": c.end_index,
            }
            for c in chunks
        ]
        with self._lock:
            if limit is not None and self.count_documents(owner_id) >= limit:
                raise DocumentLimitReached(f"{owner_id} already has {limit} document(s)")
            self.documents.append(doc)
            self.chunks.extend(rows)
            self.save()
        logger.info("Stored document %s (%s) with %d chunks", document_id, parsed.filename, len(rows))
        return doc

    def list_documents(self, owner_id: str) -> List[dict]:
        docs = [d for d in self.documents if d["owner_id"] == owner_id]
        return sorted(docs, key=lambda d: d["uploaded_at"], reverse=True)

    def get_document(self, owner_id: str, document_id: str) -> Optional[dict]:
        for d in self.documents:
            if d["owner_id"] == owner_id and d["document_id"] == document_id:
                return d
        return None

    def get_chunks(self, owner_id: str, document_id: str = None, limit: int = None) -> List[dict]:
        rows = [
            c for c in self.chunks
            if c["owner_id"] == owner_id and (document_id is None or c["document_id"] == document_id)
        ]
        # stable sort keeps documents in upload order
        order = {}
        for c in rows:
            order.setdefault(c["document_id"], len(order))
        rows.sort(key=lambda c: (order[c["document_id"]], c["chunk_index"]))
        if limit is not None:
            rows = rows[:limit]
        return rows

    def delete_document(self, owner_id: str, document_id: str) -> int:
        with self._lock:
            if self.get_document(owner_id, document_id) is None:
                raise DocumentNotFound(document_id)
            before = len(self.chunks)
            self.chunks = [
                c for c in self.chunks
                if not (c["owner_id"] == owner_id and c["document_id"] == document_id)
            ]
            self.documents = [
                d for d in self.documents
                if not (d["owner_id"] == owner_id and d["document_id"] == document_id)
            ]
            self.save()
        deleted = before - len(self.chunks)
        logger.info("Deleted document %s and %d chunks", document_id, deleted)
        return deleted

    # --- Chat messages ---
    def add_message(self, owner_id: str, message_text: str, sender: str,
                    document_id: str = None, sources: list = None) -> dict:
        msg = {
            "message_id": str(uuid.uuid4()),
            "owner_id": owner_id,
            "document_id": document_id or None,
            "message_text": message_text,
            "sender": sender,
            "sources": sources or None,
            "created_at": utc_now_iso(),
        }
        with self._lock:
            self.messages.append(msg)
            self.save()
        return msg

    def list_messages(self, owner_id: str, document_id: str = None) -> List[dict]:
        """
        Messages of one conversation, oldest first. document_id=None is the
        conversation across all notes, not "every conversation".
        """
        document_id = document_id or None
        return [
            m for m in self.messages
            if m["owner_id"] == owner_id and m["document_id"] == document_id
        ]

    def clear_messages(self, owner_id: str, document_id: str = None) -> int:
        document_id = document_id or None
        with self._lock:
            before = len(self.messages)
            self.messages = [
                m for m in self.messages
                if not (m["owner_id"] == owner_id and m["document_id"] == document_id)
            ]
            self.save()
        return before - len(self.messages)
