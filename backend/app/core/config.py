# backend/app/core/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]  # backend/
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings:
    # LLM provider
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "").strip()
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-flash-latest").strip()
    GEMINI_TIMEOUT: int = int(os.getenv("GEMINI_TIMEOUT", 30))

    # Local storage for uploaded notes and their chunks
    STORAGE_DIR: Path = Path(os.getenv("STORAGE_DIR", str(BASE_DIR / "app" / "storage")))
    NOTES_DB_PATH: str = str(STORAGE_DIR / "notes.json")

    # Chunking / retrieval
    CHUNK_SIZE: int = int(os.getenv("CHUNK_SIZE", 1000))
    CHUNK_OVERLAP: int = int(os.getenv("CHUNK_OVERLAP", 200))
    SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", 5))

    # Upload limits
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    FREE_DOCUMENT_LIMIT: int = int(os.getenv("FREE_DOCUMENT_LIMIT", 10))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS (for dev)
    ALLOW_ORIGINS = ["*"]

# instantiate
settings = Settings()

# Ensure storage dir exists
settings.STORAGE_DIR.mkdir(parents=True, exist_ok=True)
