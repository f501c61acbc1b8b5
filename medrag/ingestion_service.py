# PDF ingestion: temp files -> pages -> chunks -> embeddings -> collection

import logging
import os
import tempfile
import uuid
from typing import List

from langchain_core.documents import Document

from .document_processor import DocumentProcessor
from .models import IngestionResult, UploadedPDF, UploadMetadata
from .rag_service import RAGService
from .vector_store import VectorStoreService

logger = logging.getLogger(__name__)

COLLECTION_PREFIX = "medical-reports-"


class IngestionError(Exception):
    pass


def new_collection_name() -> str:
    return f"{COLLECTION_PREFIX}{uuid.uuid4()}"


class PDFIngestionService:
    def __init__(self, processor: DocumentProcessor, rag: RAGService, vector_store: VectorStoreService):
        self.processor = processor
        self.rag = rag
        self.vector_store = vector_store

    def ingest(self, files: List[UploadedPDF], metadata: UploadMetadata) -> IngestionResult:
        if not files:
            raise ValueError("No PDF files uploaded")

        collection_name = new_collection_name()
        if self.vector_store.collection_exists(collection_name):
            logger.warning(f"Collection name collision on {collection_name}, deleting existing collection")
            self.vector_store.delete_collection(collection_name)

        temp_file_paths = []
        try:
            all_split_docs: List[Document] = []
            for file in files:
                temp_file_path = os.path.join(tempfile.gettempdir(), f"{uuid.uuid4()}.pdf")
                temp_file_paths.append(temp_file_path)
                with open(temp_file_path, "wb") as f:
                    f.write(file.content)

                split_docs = self.processor.process_pdf(temp_file_path, file.filename, metadata)
                logger.info(f"{file.filename}: {len(split_docs)} chunk(s)")
                all_split_docs.extend(split_docs)

            if not all_split_docs:
                raise IngestionError("No extractable text found in the uploaded PDF files")

            embeddings = self.rag.get_embeddings([doc.page_content for doc in all_split_docs])
            self.vector_store.create_collection(collection_name, vector_size=len(embeddings[0]))
            self.vector_store.add_documents(collection_name, all_split_docs, embeddings)
        finally:
            for temp_file_path in temp_file_paths:
                if os.path.exists(temp_file_path):
                    try:
                        os.remove(temp_file_path)
                    except OSError as e:
                        logger.error(f"Failed to delete temp file {temp_file_path}: {e}")

        return IngestionResult(
            collection_name=collection_name,
            files_processed=[file.filename for file in files],
            total_chunks=len(all_split_docs),
        )
