# Vector store service backed by Qdrant

import logging
import uuid
from typing import List

from langchain_core.documents import Document
from qdrant_client import QdrantClient
from qdrant_client.http import models as rest

from .models import RetrievedChunk

logger = logging.getLogger(__name__)

CONTENT_KEY = "page_content"
METADATA_KEY = "metadata"


class VectorStoreService:
    """Thin wrapper over a Qdrant client.

    Points are stored with the same payload layout LangChain's Qdrant
    integration uses (``page_content`` + ``metadata``), so collections
    written here can be read by either side.
    """

    def __init__(self, client: QdrantClient, upsert_batch_size: int = 256):
        self.client = client
        self.upsert_batch_size = upsert_batch_size

    def collection_exists(self, collection_name: str) -> bool:
        return self.client.collection_exists(collection_name)

    def delete_collection(self, collection_name: str):
        self.client.delete_collection(collection_name)

    def create_collection(self, collection_name: str, vector_size: int):
        if self.collection_exists(collection_name):
            logger.warning(f"Collection {collection_name} already exists, deleting it")
            self.delete_collection(collection_name)

        self.client.create_collection(
            collection_name=collection_name,
            vectors_config=rest.VectorParams(size=vector_size, distance=rest.Distance.COSINE),
        )
        logger.info(f"Created collection {collection_name} (dim={vector_size})")

    def add_documents(self, collection_name: str, docs: List[Document], embeddings: List[List[float]]) -> int:
        if len(docs) != len(embeddings):
            raise ValueError(f"Got {len(embeddings)} embeddings for {len(docs)} documents")

        points = [
            rest.PointStruct(
                id=str(uuid.uuid4()),
                vector=embedding,
                payload={CONTENT_KEY: doc.page_content, METADATA_KEY: doc.metadata},
            )
            for doc, embedding in zip(docs, embeddings)
        ]
        for i in range(0, len(points), self.upsert_batch_size):
            self.client.upsert(
                collection_name=collection_name,
                points=points[i:i + self.upsert_batch_size],
            )

        logger.info(f"Stored {len(points)} chunks in {collection_name}")
        return len(points)

    def similarity_search(self, collection_name: str, query_vector: List[float], k: int = 4) -> List[RetrievedChunk]:
        # An unknown collection is treated as empty
        if not self.collection_exists(collection_name):
            logger.info(f"Collection {collection_name} not found, no context available")
            return []

        response = self.client.query_points(
            collection_name=collection_name,
            query=query_vector,
            limit=k,
            with_payload=True,
        )

        results = []
        for point in response.points:
            payload = point.payload or {}
            results.append(RetrievedChunk(
                content=payload.get(CONTENT_KEY, ""),
                metadata=payload.get(METADATA_KEY) or {},
                score=point.score,
            ))
        return results
