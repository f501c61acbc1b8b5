# Service container shared by the request handlers

import logging
from dataclasses import dataclass

from openai import OpenAI
from qdrant_client import QdrantClient

from .chat_service import ChatService
from .config import Settings
from .database import DatabaseService
from .document_processor import DocumentProcessor
from .ingestion_service import PDFIngestionService
from .knowledge_graph import KnowledgeGraphService
from .rag_service import RAGService
from .vector_store import VectorStoreService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    ingestion: PDFIngestionService
    chat: ChatService
    knowledge_graph: KnowledgeGraphService


def assemble_services(
    settings: Settings,
    rag: RAGService,
    qdrant: QdrantClient,
    database: DatabaseService,
) -> Services:
    vector_store = VectorStoreService(qdrant)
    processor = DocumentProcessor(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap)
    return Services(
        ingestion=PDFIngestionService(processor, rag, vector_store),
        chat=ChatService(
            rag,
            vector_store,
            top_k=settings.retrieval_top_k,
            require_context=settings.chat_require_context,
        ),
        knowledge_graph=KnowledgeGraphService(database),
    )


def build_services(settings: Settings) -> Services:
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY environment variable is not set. Please set it with your actual OpenAI API key.")

    rag = RAGService(
        OpenAI(api_key=settings.openai_api_key),
        embedding_model=settings.embedding_model,
        chat_model=settings.chat_model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        batch_size=settings.embedding_batch_size,
    )

    if settings.qdrant_url == ":memory:":
        qdrant = QdrantClient(":memory:")
    else:
        qdrant = QdrantClient(url=settings.qdrant_url, api_key=settings.qdrant_api_key)

    database = DatabaseService(settings.database_url)
    database.init_db()

    logger.info(f"Services ready (qdrant={settings.qdrant_url}, chat_model={settings.chat_model})")
    return assemble_services(settings, rag, qdrant, database)
