# backend/app/core/study.py
"""
Study tools built on the LLM client.

- answer_question(query, hits): answer from the student's own notes only.
- answer_with_citations(question, contents): cited answer over labelled snippets.
- generate_flashcards / generate_quiz / generate_study_plan / extract_concepts:
  ask the model for JSON and normalise what comes back.

Every method raises LLMError when the model call fails or the reply cannot be used.
"""
import logging
from typing import List, Optional

from app.core.llm import GeminiClient, LLMError, extract_json
from app.core.search import SearchHit

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 100
MIN_CONCEPT_CHARS = 50
MIN_QUESTION_CHARS = 10
CITATION_SNIPPET_CHARS = 150
MAX_PROMPT_CONTENT = 8000

NO_CONTEXT_ANSWER = (
    "I couldn't find relevant information in your uploaded notes. "
    "Please try rephrasing your question or upload more documents."
)

NO_CONTENT_QA_ANSWER = (
    "I couldn't find relevant information in your content. "
    "Please upload documents first."
)

DIFFICULTY_INSTRUCTIONS = {
    "easy": "Make questions straightforward with obvious correct answers.",
    "medium": "Make questions moderately challenging that test understanding.",
    "hard": "Make questions challenging that require deep understanding and critical thinking.",
}


class InsufficientContent(ValueError):
    pass


class StudyAssistant:
    def __init__(self, client: GeminiClient):
        self.client = client

    def _ask(self, prompt: str) -> str:
        success, out = self.client.generate(prompt)
        if not success:
            raise LLMError(out)
        return out

    def _ask_json(self, prompt: str) -> dict:
        out = self._ask(prompt)
        try:
            return extract_json(out)
        except LLMError:
            logger.warning("Could not parse model reply: %s", out[:500])
            raise

    @staticmethod
    def _check_content(content: str, minimum: int = MIN_CONTENT_CHARS) -> str:
        content = (content or "").strip()
        if len(content) < minimum:
            raise InsufficientContent("Not enough content to generate study material")
        return content[:MAX_PROMPT_CONTENT]

    # --- Chat with notes ---
    def answer_question(self, query: str, hits: List[SearchHit]) -> dict:
        if not hits:
            return {"answer": NO_CONTEXT_ANSWER, "sources": [], "relevant_chunks": 0}

        context = "\n\n---\n\n".join(f"[From {h.filename}]\n{h.text}" for h in hits)
        prompt = "\n".join([
            "You are a helpful assistant that answers questions based on university notes provided by the user.",
            "Use only the information from the provided context. If the answer is not in the context, say so.",
            "Be concise and clear. Format your answers with proper structure when needed.",
            "",
            "Context from notes:",
            "",
            context,
            "",
            f"Question: {query}",
            "",
            "Answer based on the context above:",
        ])
        answer = self._ask(prompt)

        sources = {}
        for h in hits:
            sources.setdefault(h.document_id, h.filename)
        return {
            "answer": answer,
            "sources": [{"document_id": d, "filename": f} for d, f in sources.items()],
            "relevant_chunks": len(hits),
        }

    # --- Flashcards ---
    def generate_flashcards(self, content: str, count: int = 6, focus: Optional[str] = None) -> List[dict]:
        content = self._check_content(content)
        focus_line = f" Focus on: {focus}." if focus else ""
        prompt = (
            f"You are a flashcard generator. Create {count} flashcards from the provided content.\n"
            "Each flashcard should have:\n"
            "- front: A clear question or prompt\n"
            "- back: A concise answer or explanation\n"
            '- tag: A category (e.g., "Core idea", "Keywords", "Application", "Pitfall")\n\n'
            "Return ONLY valid JSON in this format:\n"
            '{"flashcards": [{"front": "Question or prompt", "back": "Answer or explanation", "tag": "Category"}]}\n\n'
            f"Make flashcards diverse and useful for spaced repetition.{focus_line}\n\n"
            f"Generate {count} flashcards from this content:\n\n{content}"
        )
        data = self._ask_json(prompt)

        cards = []
        for item in data.get("flashcards") or []:
            if not isinstance(item, dict) or not item.get("front") or not item.get("back"):
                continue
            cards.append({
                "front": str(item["front"]),
                "back": str(item["back"]),
                "tag": str(item.get("tag") or "Core idea"),
            })
        if not cards:
            raise LLMError("No flashcards generated")
        return cards

    # --- Quiz ---
    def generate_quiz(self, content: str, question_count: int = 5, difficulty: str = "medium") -> List[dict]:
        content = self._check_content(content)
        instructions = DIFFICULTY_INSTRUCTIONS.get(difficulty, DIFFICULTY_INSTRUCTIONS["medium"])
        prompt = (
            f"You are a quiz generator for educational content. Generate exactly {question_count} "
            "multiple choice questions based on the provided content.\n"
            f"{instructions}\n\n"
            "IMPORTANT: Return ONLY valid JSON in this exact format, no other text:\n"
            '{"questions": [{"id": 1, "question": "What is...?", '
            '"options": ["Option A", "Option B", "Option C", "Option D"], '
            '"correctAnswer": 0, "explanation": "Brief explanation of why this is correct"}]}\n\n'
            "Rules:\n"
            "- Each question must have exactly 4 options\n"
            "- correctAnswer is the index (0-3) of the correct option\n"
            "- Make questions diverse - test different concepts\n"
            "- All content must be based on the provided material\n\n"
            f"Generate {question_count} quiz questions from this content:\n\n{content}"
        )
        data = self._ask_json(prompt)

        questions = []
        for item in data.get("questions") or []:
            if not isinstance(item, dict):
                continue
            options = item.get("options")
            answer = item.get("correctAnswer", item.get("correct_answer"))
            if not item.get("question") or not isinstance(options, list) or len(options) != 4:
                continue
            if not isinstance(answer, int) or isinstance(answer, bool) or not 0 <= answer <= 3:
                continue
            questions.append({
                "id": len(questions) + 1,
                "question": str(item["question"]),
                "options": [str(o) for o in options],
                "correct_answer": answer,
                "explanation": str(item.get("explanation") or ""),
            })
        if not questions:
            raise LLMError("No questions generated")
        return questions

    # --- Study plan ---
    def generate_study_plan(self, materials: List[str], focus_area: Optional[str] = None,
                            duration: int = 3) -> List[dict]:
        summary = "\n".join([
            "Available materials:",
            f"- Documents: {', '.join(materials) or 'None'}",
            f"Focus area: {focus_area or 'General study'}",
            f"Duration: {duration} days",
        ])
        prompt = (
            f"You are a study plan generator. Create a {duration}-day study plan based on available materials.\n"
            "Return ONLY valid JSON in this format:\n"
            '{"plan": [{"title": "Day 1 - Phase name", "focus": "Main focus area", '
            '"actions": ["Action 1", "Action 2", "Action 3"]}]}\n'
            "Make the plan practical with specific, actionable steps.\n\n"
            f"Generate a {duration}-day study plan:\n\n{summary}"
        )
        data = self._ask_json(prompt)

        plan = []
        for day in data.get("plan") or []:
            if not isinstance(day, dict) or not day.get("title"):
                continue
            actions = day.get("actions") or []
            plan.append({
                "title": str(day["title"]),
                "focus": str(day.get("focus") or ""),
                "actions": [str(a) for a in actions] if isinstance(actions, list) else [str(actions)],
            })
        return plan

    # --- Concepts ---
    def extract_concepts(self, text: str) -> dict:
        text = self._check_content(text, MIN_CONCEPT_CHARS)
        prompt = (
            "You are a concept extraction expert. Extract key concepts from the provided text and show how they relate.\n"
            "Return ONLY valid JSON in this format:\n"
            '{"concepts": [{"title": "Concept name", "importance": "High|Medium|Low", "detail": "Brief explanation"}], '
            '"conceptMap": [["Concept A", "Concept B"], ["Concept B", "Concept C"]]}\n'
            'The conceptMap shows relationships: [from, to] means "from leads to to".\n\n'
            f"Extract key concepts from this text:\n\n{text}"
        )
        data = self._ask_json(prompt)

        concepts = []
        for item in data.get("concepts") or []:
            if not isinstance(item, dict) or not item.get("title"):
                continue
            concepts.append({
                "title": str(item["title"]),
                "importance": str(item.get("importance") or "Medium"),
                "detail": str(item.get("detail") or ""),
            })
        edges = []
        for pair in data.get("conceptMap") or data.get("concept_map") or []:
            if isinstance(pair, list) and len(pair) == 2:
                edges.append([str(pair[0]), str(pair[1])])
        return {"concepts": concepts, "concept_map": edges}

    # --- Cited Q&A ---
    def answer_with_citations(self, question: str, contents: List[dict]) -> dict:
        """
        contents: [{"text": ..., "source": "notes:<filename>"}, ...]
        An unparseable reply is used verbatim as the answer, cited with the
        first two snippets.
        """
        question = (question or "").strip()
        if len(question) < MIN_QUESTION_CHARS:
            raise InsufficientContent(
                f"Please provide a valid question (at least {MIN_QUESTION_CHARS} characters)"
            )
        if not contents:
            return {"answer": NO_CONTENT_QA_ANSWER, "citations": []}

        context = "\n\n---\n\n".join(f"[From {c['source']}]\n{c['text']}" for c in contents)
        prompt = (
            "You are a helpful assistant that answers questions based on provided context.\n"
            "Always cite your sources. Return ONLY valid JSON in this format:\n"
            '{"answer": "Your answer text", "citations": [{"source": "notes:filename.pdf", '
            '"snippet": "Relevant quote from source"}]}\n'
            "Include 2-3 citations that directly support your answer.\n\n"
            f"Context:\n\n{context}\n\nQuestion: {question}\n\nAnswer with citations:"
        )
        out = self._ask(prompt)
        try:
            data = extract_json(out)
        except LLMError:
            logger.info("Q&A reply was not JSON, using raw text")
            return {
                "answer": out,
                "citations": [
                    {"source": c["source"], "snippet": c["text"][:CITATION_SNIPPET_CHARS]}
                    for c in contents[:2]
                ],
            }

        citations = [
            {"source": str(c.get("source") or ""), "snippet": str(c.get("snippet") or "")}
            for c in data.get("citations") or []
            if isinstance(c, dict)
        ]
        return {"answer": str(data.get("answer") or out), "citations": citations}
