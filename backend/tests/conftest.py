import os
import tempfile

# must run before app.core.config is imported
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="studyhub-test-"))
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from app.api import routes
from app.core.store import NotesStore
from app.core.study import StudyAssistant
from app.main import app


class FakeLLM:
    """Scripted stand-in for GeminiClient: returns queued replies, records prompts."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.prompts = []

    def generate(self, prompt, model=None):
        self.prompts.append(prompt)
        if not self.replies:
            return False, "no scripted reply"
        return self.replies.pop(0)


@pytest.fixture
def store(tmp_path):
    return NotesStore(str(tmp_path / "notes.json"))


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def client(store, llm):
    app.dependency_overrides[routes.get_store] = lambda: store
    app.dependency_overrides[routes.get_assistant] = lambda: StudyAssistant(llm)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
