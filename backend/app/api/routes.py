# backend/app/api/routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Header, HTTPException, UploadFile

from app.api.models import (
    ChatMessageList, ChatMessageRequest, ChatMessageResponse, ChatRequest, ChatResponse,
    ChunkList, ConceptRequest, ConceptResponse, DeleteResponse, DocumentList,
    FlashcardRequest, FlashcardResponse, QARequest, QAResponse, QuizRequest, QuizResponse,
    StudyPlanRequest, StudyPlanResponse, UploadResponse,
)
from app.core.chunker import ChunkingConfigError, chunk_text
from app.core.config import settings
from app.core.llm import GeminiClient, LLMError
from app.core.parser import DocumentParseError, is_allowed_upload, parse_document
from app.core.search import keyword_search
from app.core.store import DocumentLimitReached, DocumentNotFound, NotesStore
from app.core.study import InsufficientContent, StudyAssistant
from app.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()

# Initialize shared resources (singleton style)
notes_store = NotesStore(settings.NOTES_DB_PATH)
assistant = StudyAssistant(GeminiClient())

DOCUMENT_SOURCES = ("document", "documents")
CONTENT_CHUNKS = 10
QA_CHUNKS = 3
QA_SNIPPET_CHARS = 1000
SENDERS = ("user", "assistant")


# ---------- Dependencies ----------
def get_store() -> NotesStore:
    return notes_store

def get_assistant() -> StudyAssistant:
    return assistant

def get_owner(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def _document_content(store: NotesStore, owner: str, document_id: str):
    chunks = store.get_chunks(owner, document_id=document_id, limit=CONTENT_CHUNKS)
    if not chunks:
        raise HTTPException(status_code=404, detail="Document not found or no content available")
    return "\n\n".join(c["text"] for c in chunks), chunks[0]["filename"]


def _source_content(store: NotesStore, owner: str, source_type: str,
                    source_id: Optional[str], custom_text: Optional[str]):
    if source_type in DOCUMENT_SOURCES and source_id:
        return _document_content(store, owner, source_id)
    if source_type == "custom" and custom_text:
        return custom_text, "Custom text"
    raise HTTPException(status_code=400, detail="Invalid source type or missing content")


def _limit_detail():
    return f"You have reached your free limit of {settings.FREE_DOCUMENT_LIMIT} document(s)."


# ---------- Notes ----------
@router.post("/notes/upload", response_model=UploadResponse)
def upload_note(file: UploadFile = File(...), owner: str = Depends(get_owner),
                store: NotesStore = Depends(get_store)):
    if store.count_documents(owner) >= settings.FREE_DOCUMENT_LIMIT:
        raise HTTPException(status_code=403, detail=_limit_detail())

    filename = file.filename or ""
    if not is_allowed_upload(filename, file.content_type):
        raise HTTPException(status_code=400, detail="Invalid file type. Only PDF, DOCX, and TXT files are allowed.")

    # one byte past the limit is enough to reject
    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File size exceeds upload limit")

    try:
        parsed = parse_document(data, filename, file.content_type)
    except DocumentParseError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        chunks = chunk_text(parsed.text, settings.CHUNK_SIZE, settings.CHUNK_OVERLAP)
    except ChunkingConfigError as e:
        logger.error("Bad chunking configuration: %s", e)
        raise HTTPException(status_code=500, detail="Server chunking configuration is invalid")

    try:
        doc = store.add_document(owner, parsed, len(data), chunks, limit=settings.FREE_DOCUMENT_LIMIT)
    except DocumentLimitReached:
        raise HTTPException(status_code=403, detail=_limit_detail())
    logger.info("Uploaded %s for %s: %d chunks", filename, owner, len(chunks))
    return {
        "document_id": doc["document_id"],
        "filename": parsed.filename,
        "chunks": len(chunks),
        "metadata": parsed.metadata,
    }

@router.get("/notes/documents", response_model=DocumentList)
def list_documents(owner: str = Depends(get_owner), store: NotesStore = Depends(get_store)):
    docs = store.list_documents(owner)
    return {
        "documents": [
            {
                "document_id": d["document_id"],
                "filename": d["filename"],
                "file_type": d["file_type"],
                "uploaded_at": d["uploaded_at"],
                "chunks": d.get("chunks_count") or 0,
            }
            for d in docs
        ]
    }

@router.get("/notes/documents/{document_id}/chunks", response_model=ChunkList)
def list_chunks(document_id: str, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store)):
    if store.get_document(owner, document_id) is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"document_id": document_id, "chunks": store.get_chunks(owner, document_id=document_id)}

@router.delete("/notes/documents/{document_id}", response_model=DeleteResponse)
def delete_document(document_id: str, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store)):
    try:
        deleted = store.delete_document(owner, document_id)
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"deleted": deleted}

@router.post("/notes/chat", response_model=ChatResponse)
def chat(req: ChatRequest, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store),
         study: StudyAssistant = Depends(get_assistant)):
    if not req.query or not req.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    chunks = store.get_chunks(owner, document_id=req.document_id)
    hits = keyword_search(chunks, req.query, limit=settings.SEARCH_LIMIT)
    try:
        return study.answer_question(req.query, hits)
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")

@router.get("/notes/chat/messages", response_model=ChatMessageList)
def list_chat_messages(document_id: Optional[str] = None, owner: str = Depends(get_owner),
                       store: NotesStore = Depends(get_store)):
    return {"messages": store.list_messages(owner, document_id)}

@router.post("/notes/chat/messages", response_model=ChatMessageResponse)
def save_chat_message(req: ChatMessageRequest, owner: str = Depends(get_owner),
                      store: NotesStore = Depends(get_store)):
    if not req.message_text or not req.sender:
        raise HTTPException(status_code=400, detail="message_text and sender are required")
    if req.sender not in SENDERS:
        raise HTTPException(status_code=400, detail='sender must be "user" or "assistant"')
    sources = [s.model_dump() for s in req.sources] if req.sources else None
    document_id = (req.document_id or "").strip() or None
    msg = store.add_message(owner, req.message_text, req.sender, document_id=document_id, sources=sources)
    return {"message": msg}

@router.delete("/notes/chat/messages", response_model=DeleteResponse)
def clear_chat_messages(document_id: Optional[str] = None, owner: str = Depends(get_owner),
                        store: NotesStore = Depends(get_store)):
    return {"deleted": store.clear_messages(owner, document_id)}

# ---------- Generators ----------
@router.post("/ai/flashcards", response_model=FlashcardResponse)
def flashcards(req: FlashcardRequest, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store),
               study: StudyAssistant = Depends(get_assistant)):
    content, _ = _source_content(store, owner, req.source_type, req.source_id, req.custom_text)
    try:
        cards = study.generate_flashcards(content, count=req.count, focus=req.focus)
    except InsufficientContent as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")
    return {"flashcards": cards}

@router.post("/quiz/generate", response_model=QuizResponse)
def generate_quiz(req: QuizRequest, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store),
                  study: StudyAssistant = Depends(get_assistant)):
    content, source_name = _source_content(store, owner, req.source_type, req.source_id, req.custom_text)
    try:
        questions = study.generate_quiz(content, question_count=req.question_count, difficulty=req.difficulty)
    except InsufficientContent as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")
    return {
        "quiz": {
            "source_type": req.source_type,
            "source_id": req.source_id,
            "source_name": source_name,
            "difficulty": req.difficulty,
            "questions": questions,
            "generated_at": utc_now_iso(),
        }
    }

@router.post("/ai/study-plan", response_model=StudyPlanResponse)
def study_plan(req: StudyPlanRequest, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store),
               study: StudyAssistant = Depends(get_assistant)):
    materials = [d["filename"] for d in store.list_documents(owner)[:5]]
    try:
        plan = study.generate_study_plan(materials, focus_area=req.focus_area, duration=req.duration)
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")
    return {"plan": plan}

@router.post("/ai/concepts", response_model=ConceptResponse)
def concepts(req: ConceptRequest, owner: str = Depends(get_owner), study: StudyAssistant = Depends(get_assistant)):
    try:
        result = study.extract_concepts(req.text)
    except InsufficientContent:
        raise HTTPException(status_code=400, detail="Please provide at least 50 characters of text")
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")
    return result

@router.post("/ai/qa", response_model=QAResponse)
def question_answer(req: QARequest, owner: str = Depends(get_owner), store: NotesStore = Depends(get_store),
                    study: StudyAssistant = Depends(get_assistant)):
    contents = []
    # video summaries are not stored by this backend
    if req.search_in in ("all", "documents"):
        hits = keyword_search(store.get_chunks(owner), req.question, limit=QA_CHUNKS)
        contents = [{"text": h.text[:QA_SNIPPET_CHARS], "source": f"notes:{h.filename}"} for h in hits]
    try:
        return study.answer_with_citations(req.question, contents)
    except InsufficientContent as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=f"LLM error: {e}")
