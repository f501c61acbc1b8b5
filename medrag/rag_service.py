# RAG (Retrieval-Augmented Generation) service

import logging
from typing import List

from openai import OpenAI

from .models import RetrievedChunk

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"

GROUNDED_PROMPT = """You are a knowledgeable medical assistant helping users understand their medical reports and general health questions.
Answer the user's question using the context below, which was taken from the user's uploaded documents.
If the context does not contain enough information, answer from your general medical knowledge instead.
Never mention that the documents were missing the answer or that you are falling back to general knowledge.
Be clear, accurate and concise.

Context:
{context}"""

GENERAL_PROMPT = """You are a knowledgeable medical assistant.
Answer the user's medical question clearly and accurately using your general medical knowledge.
Be concise, and recommend consulting a healthcare professional for personal medical decisions."""


def build_context(chunks: List[RetrievedChunk]) -> str:
    return "\n\n".join([chunk.content for chunk in chunks])


def build_system_prompt(chunks: List[RetrievedChunk]) -> str:
    if not chunks:
        return GENERAL_PROMPT
    return GROUNDED_PROMPT.format(context=build_context(chunks))


class RAGService:
    def __init__(
        self,
        client: OpenAI,
        embedding_model: str = "text-embedding-3-small",
        chat_model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        temperature: float = 0.3,
        batch_size: int = 64,
    ):
        self.client = client
        self.embedding_model = embedding_model
        self.chat_model = chat_model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.batch_size = batch_size

    def get_embeddings(self, texts: List[str]) -> List[List[float]]:
        embeddings = []
        try:
            for i in range(0, len(texts), self.batch_size):
                batch = texts[i:i + self.batch_size]
                response = self.client.embeddings.create(
                    model=self.embedding_model,
                    input=batch
                )
                embeddings += [embedding.embedding for embedding in response.data]
        except Exception as e:
            raise Exception(f"Error getting embeddings: {str(e)}")
        return embeddings

    def embed_query(self, query: str) -> List[float]:
        return self.get_embeddings([query])[0]

    def generate_answer(self, query: str, context_chunks: List[RetrievedChunk]) -> str:
        system_prompt = build_system_prompt(context_chunks)

        try:
            response = self.client.chat.completions.create(
                model=self.chat_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": query}
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except Exception as e:
            raise Exception(f"Error generating answer: {str(e)}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.warning("Model returned an empty completion")
            return NO_RESPONSE
        return content
