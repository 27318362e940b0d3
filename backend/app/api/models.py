# models.py
from pydantic import BaseModel, Field
from typing import List, Optional

# ---------- Requests ----------
class Source(BaseModel):
    document_id: str
    filename: str

class ChatRequest(BaseModel):
    query: str
    document_id: Optional[str] = None

class FlashcardRequest(BaseModel):
    source_type: str  # 'documents' or 'custom'
    source_id: Optional[str] = None
    custom_text: Optional[str] = None
    count: int = Field(6, ge=1, le=30)
    focus: Optional[str] = None

class QuizRequest(BaseModel):
    source_type: str  # 'document' or 'custom'
    source_id: Optional[str] = None
    custom_text: Optional[str] = None
    question_count: int = Field(5, ge=1, le=20)
    difficulty: str = "medium"

class StudyPlanRequest(BaseModel):
    focus_area: Optional[str] = None
    duration: int = Field(3, ge=1, le=30)

class ConceptRequest(BaseModel):
    text: str

class QARequest(BaseModel):
    question: str
    search_in: str = "all"  # 'all', 'documents' or 'videos'

class ChatMessageRequest(BaseModel):
    message_text: str
    sender: str  # 'user' or 'assistant'
    document_id: Optional[str] = None
    sources: Optional[List[Source]] = None

# ---------- Responses ----------
class DocumentMetadata(BaseModel):
    filename: str
    file_type: str
    page_count: Optional[int] = None
    word_count: int

class UploadResponse(BaseModel):
    success: bool = True
    document_id: str
    filename: str
    chunks: int
    metadata: DocumentMetadata

class DocumentItem(BaseModel):
    document_id: str
    filename: str
    file_type: str
    uploaded_at: str
    chunks: int

class DocumentList(BaseModel):
    documents: List[DocumentItem]

class ChunkItem(BaseModel):
    chunk_index: int
    text: str
    start_index: int
    end_index: int

class ChunkList(BaseModel):
    document_id: str
    chunks: List[ChunkItem]

class DeleteResponse(BaseModel):
    success: bool = True
    deleted: int

class ChatResponse(BaseModel):
    answer: str
    sources: List[Source]
    relevant_chunks: int = 0

class Flashcard(BaseModel):
    front: str
    back: str
    tag: str

class FlashcardResponse(BaseModel):
    success: bool = True
    flashcards: List[Flashcard]

class QuizQuestion(BaseModel):
    id: int
    question: str
    options: List[str]
    correct_answer: int
    explanation: str

class Quiz(BaseModel):
    source_type: str
    source_id: Optional[str] = None
    source_name: str
    difficulty: str
    questions: List[QuizQuestion]
    generated_at: str

class QuizResponse(BaseModel):
    success: bool = True
    quiz: Quiz

class PlanDay(BaseModel):
    title: str
    focus: str
    actions: List[str]

class StudyPlanResponse(BaseModel):
    success: bool = True
    plan: List[PlanDay]

class Concept(BaseModel):
    title: str
    importance: str
    detail: str

class ConceptResponse(BaseModel):
    success: bool = True
    concepts: List[Concept]
    concept_map: List[List[str]]

class Citation(BaseModel):
    source: str
    snippet: str

class QAResponse(BaseModel):
    success: bool = True
    answer: str
    citations: List[Citation]

class ChatMessage(BaseModel):
    message_id: str
    document_id: Optional[str] = None
    message_text: str
    sender: str
    sources: Optional[List[Source]] = None
    created_at: str

class ChatMessageResponse(BaseModel):
    message: ChatMessage

class ChatMessageList(BaseModel):
    messages: List[ChatMessage]
