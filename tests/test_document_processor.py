from medrag.document_processor import DocumentProcessor
from medrag.models import UploadMetadata

from .conftest import make_pdf


def write_pdf(tmp_path, pages, name="report.pdf"):
    path = tmp_path / name
    path.write_bytes(make_pdf(pages))
    return str(path)


def test_load_pdf_one_document_per_page(tmp_path):
    path = write_pdf(tmp_path, ["Glucose fasting 126 mg per dL", "Impression: type 2 diabetes"])

    docs = DocumentProcessor().load_pdf(path, source="labs.pdf")

    assert len(docs) == 2
    assert "Glucose fasting" in docs[0].page_content
    assert "type 2 diabetes" in docs[1].page_content
    assert docs[1].metadata == {"source": "labs.pdf", "page": 2}


def test_metadata_defaults(tmp_path):
    path = write_pdf(tmp_path, ["Chest X-ray normal"])
    processor = DocumentProcessor()

    docs = processor.attach_metadata(processor.load_pdf(path), "xray.pdf", UploadMetadata())

    metadata = docs[0].metadata
    assert metadata["file_name"] == "xray.pdf"
    assert metadata["patient_name"] == "Unknown"
    assert metadata["report_type"] == "General"
    assert metadata["duration"] == "Not specified"
    assert metadata["upload_date"]


def test_metadata_values_are_kept(tmp_path):
    path = write_pdf(tmp_path, ["CBC within normal limits"])
    processor = DocumentProcessor()
    metadata = UploadMetadata(patient_name="Jane Doe", report_type="Blood test", duration="3 months")

    docs = processor.process_pdf(path, "cbc.pdf", metadata)

    assert docs[0].metadata["patient_name"] == "Jane Doe"
    assert docs[0].metadata["report_type"] == "Blood test"
    assert docs[0].metadata["duration"] == "3 months"


def test_long_page_is_split_with_overlap(tmp_path):
    words = " ".join(f"word{i:04d}" for i in range(400))
    path = write_pdf(tmp_path, [words])

    chunks = DocumentProcessor(chunk_size=1000, chunk_overlap=200).process_pdf(path, "long.pdf", UploadMetadata())

    assert len(chunks) > 1
    assert all(len(chunk.page_content) <= 1000 for chunk in chunks)
    # consecutive chunks share text
    tail = chunks[0].page_content.split()[-1]
    assert tail in chunks[1].page_content
    assert all(chunk.metadata["file_name"] == "long.pdf" for chunk in chunks)
