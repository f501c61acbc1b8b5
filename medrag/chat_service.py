# Chat service: similarity search + grounded or general answer

import logging

from .rag_service import RAGService
from .vector_store import VectorStoreService

logger = logging.getLogger(__name__)


class NoRelevantContentError(Exception):
    pass


class ChatService:
    def __init__(
        self,
        rag: RAGService,
        vector_store: VectorStoreService,
        top_k: int = 4,
        require_context: bool = False,
    ):
        self.rag = rag
        self.vector_store = vector_store
        self.top_k = top_k
        # When set, an empty search raises instead of answering from general knowledge
        self.require_context = require_context

    def answer(self, query: str, collection_name: str) -> str:
        query_vector = self.rag.embed_query(query)
        results = self.vector_store.similarity_search(collection_name, query_vector, k=self.top_k)

        if not results:
            if self.require_context:
                raise NoRelevantContentError("No relevant content found in PDF")
            logger.info(f"No context in {collection_name}, answering from general knowledge")
        else:
            logger.info(f"Answering from {len(results)} chunk(s) in {collection_name}")

        return self.rag.generate_answer(query, results)
