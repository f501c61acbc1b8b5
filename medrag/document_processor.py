# Document processing service

import logging
from datetime import datetime, timezone
from typing import List, Optional

import PyPDF2
from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from .models import UploadMetadata

logger = logging.getLogger(__name__)


class DocumentProcessor:
    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        self.text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
        )

    def load_pdf(self, pdf_path: str, source: Optional[str] = None) -> List[Document]:
        """Read a PDF from disk into one document per page."""
        source = source or pdf_path
        try:
            with open(pdf_path, "rb") as pdf_file:
                pdf_reader = PyPDF2.PdfReader(pdf_file)
                docs = []
                for page_number, page in enumerate(pdf_reader.pages, start=1):
                    text = page.extract_text() or ""
                    docs.append(Document(
                        page_content=text,
                        metadata={"source": source, "page": page_number},
                    ))
        except Exception as e:
            raise Exception(f"Error extracting text from PDF {source}: {str(e)}")

        logger.info(f"Loaded {len(docs)} page(s) from {source}")
        return docs

    def attach_metadata(self, docs: List[Document], file_name: str, metadata: UploadMetadata) -> List[Document]:
        upload_date = datetime.now(timezone.utc).isoformat()
        for doc in docs:
            doc.metadata = {
                **doc.metadata,
                "file_name": file_name,
                "patient_name": metadata.patient_name or "Unknown",
                "report_type": metadata.report_type or "General",
                "duration": metadata.duration or "Not specified",
                "upload_date": upload_date,
            }
        return docs

    def split_documents(self, docs: List[Document]) -> List[Document]:
        return self.text_splitter.split_documents(docs)

    def process_pdf(self, pdf_path: str, file_name: str, metadata: UploadMetadata) -> List[Document]:
        docs = self.load_pdf(pdf_path, source=file_name)
        docs = self.attach_metadata(docs, file_name, metadata)
        return self.split_documents(docs)
