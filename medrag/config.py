# Runtime configuration loaded from the environment

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    openai_api_key: Optional[str] = None
    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-4o-mini"
    max_tokens: int = 1000
    temperature: float = 0.3
    embedding_batch_size: int = 64

    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: Optional[str] = None

    database_url: str = "sqlite:///./knowledge_graph.db"

    chunk_size: int = 1000
    chunk_overlap: int = 200
    retrieval_top_k: int = 4
    chat_require_context: bool = False

    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    max_file_size: int = 52428800
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8001

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
        origins = [origin.strip() for origin in origins if origin.strip()]

        settings = cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
            chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
            max_tokens=_get_int("OPENAI_MAX_TOKENS", 1000),
            temperature=_get_float("OPENAI_TEMPERATURE", 0.3),
            embedding_batch_size=_get_int("EMBEDDING_BATCH_SIZE", 64),
            qdrant_url=os.getenv("QDRANT_URL", "http://localhost:6333"),
            qdrant_api_key=os.getenv("QDRANT_API_KEY") or None,
            database_url=os.getenv("DATABASE_URL", "sqlite:///./knowledge_graph.db"),
            chunk_size=_get_int("CHUNK_SIZE", 1000),
            chunk_overlap=_get_int("CHUNK_OVERLAP", 200),
            retrieval_top_k=_get_int("RETRIEVAL_TOP_K", 4),
            chat_require_context=_get_bool("CHAT_REQUIRE_CONTEXT", False),
            allowed_origins=origins,
            max_file_size=_get_int("MAX_FILE_SIZE", 52428800),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_get_int("PORT", 8001),
        )
        settings.validate()
        return settings

    def validate(self):
        if self.chunk_size <= 0:
            raise ValueError("CHUNK_SIZE must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("CHUNK_OVERLAP must be between 0 and CHUNK_SIZE")
        if self.retrieval_top_k <= 0:
            raise ValueError("RETRIEVAL_TOP_K must be positive")
        if self.embedding_batch_size <= 0:
            raise ValueError("EMBEDDING_BATCH_SIZE must be positive")
