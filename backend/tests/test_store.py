import pytest

from app.core.chunker import chunk_text
from app.core.parser import ParsedDocument
from app.core.store import DocumentLimitReached, DocumentNotFound, NotesStore


def _parsed(name="notes.txt", text="Alpha beta. Gamma delta. Epsilon zeta."):
    return ParsedDocument(text=text, filename=name, file_type="txt", word_count=len(text.split()))


def _add(store, owner, name="notes.txt", text="Alpha beta. Gamma delta. Epsilon zeta."):
    parsed = _parsed(name, text)
    return store.add_document(owner, parsed, len(text), chunk_text(text, 15, 5))


def test_add_and_get(store):
    doc = _add(store, "u1")
    assert doc["owner_id"] == "u1"
    assert doc["chunks_count"] == 3
    assert store.get_document("u1", doc["document_id"]) == doc
    chunks = store.get_chunks("u1", doc["document_id"])
    assert [c["chunk_index"] for c in chunks] == [0, 1, 2]
    assert chunks[0]["text"] == "Alpha beta."
    assert chunks[0]["filename"] == "notes.txt"


def test_persists_to_disk(store):
    doc = _add(store, "u1")
    reopened = NotesStore(store.path)
    assert reopened.get_document("u1", doc["document_id"])["filename"] == "notes.txt"
    assert len(reopened.get_chunks("u1")) == 3


def test_owners_are_isolated(store):
    doc = _add(store, "u1")
    assert store.get_document("u2", doc["document_id"]) is None
    assert store.get_chunks("u2") == []
    assert store.list_documents("u2") == []
    assert store.count_documents("u1") == 1
    with pytest.raises(DocumentNotFound):
        store.delete_document("u2", doc["document_id"])


def test_list_newest_first(store):
    first = _add(store, "u1", "a.txt")
    second = _add(store, "u1", "b.txt")
    first["uploaded_at"] = "2020-01-01T00:00:00+00:00"
    names = [d["filename"] for d in store.list_documents("u1")]
    assert names == ["b.txt", "a.txt"]
    assert second["uploaded_at"] > first["uploaded_at"]


def test_chunks_limit_and_order_across_documents(store):
    _add(store, "u1", "a.txt")
    _add(store, "u1", "b.txt")
    rows = store.get_chunks("u1")
    assert [r["filename"] for r in rows] == ["a.txt"] * 3 + ["b.txt"] * 3
    assert len(store.get_chunks("u1", limit=4)) == 4


def test_delete_removes_document_and_chunks(store):
    doc = _add(store, "u1")
    other = _add(store, "u1", "keep.txt")
    assert store.delete_document("u1", doc["document_id"]) == 3
    assert store.get_document("u1", doc["document_id"]) is None
    assert store.get_chunks("u1", doc["document_id"]) == []
    assert len(store.get_chunks("u1", other["document_id"])) == 3
    with pytest.raises(DocumentNotFound):
        store.delete_document("u1", doc["document_id"])


def test_add_document_enforces_limit_under_lock(store):
    _add(store, "u1", "a.txt")
    parsed = _parsed("b.txt")
    with pytest.raises(DocumentLimitReached):
        store.add_document("u1", parsed, 10, chunk_text(parsed.text, 15, 5), limit=1)
    assert store.count_documents("u1") == 1
    assert len(store.get_chunks("u1")) == 3
    # other owners have their own allowance
    store.add_document("u2", parsed, 10, [], limit=1)


def test_messages_per_conversation_oldest_first(store):
    store.add_message("u1", "hi", "user")
    store.add_message("u1", "hello", "assistant", sources=[{"document_id": "d1", "filename": "a.txt"}])
    store.add_message("u1", "about doc", "user", document_id="d1")
    store.add_message("u2", "other owner", "user")

    general = store.list_messages("u1")
    assert [m["message_text"] for m in general] == ["hi", "hello"]
    assert general[1]["sources"] == [{"document_id": "d1", "filename": "a.txt"}]
    assert [m["message_text"] for m in store.list_messages("u1", "d1")] == ["about doc"]
    assert store.list_messages("u1", "") == general

    reopened = NotesStore(store.path)
    assert len(reopened.list_messages("u1")) == 2

    assert store.clear_messages("u1") == 2
    assert store.list_messages("u1") == []
    assert len(store.list_messages("u1", "d1")) == 1
    assert len(store.list_messages("u2")) == 1
