import hashlib
import re
from types import SimpleNamespace
from typing import List

import pytest
from fastapi.testclient import TestClient
from qdrant_client import QdrantClient

from medrag.config import Settings
from medrag.database import DatabaseService, EntityRecord, RelationshipRecord
from medrag.main import create_app
from medrag.rag_service import RAGService
from medrag.services import assemble_services

EMBEDDING_DIM = 64


def embed_text(text: str) -> List[float]:
    """Bag-of-words hash embedding, stable across runs."""
    vector = [0.0] * EMBEDDING_DIM
    for word in re.findall(r"\w+", text.lower()):
        index = int(hashlib.md5(word.encode()).hexdigest(), 16) % (EMBEDDING_DIM - 1)
        vector[index] += 1.0
    vector[-1] = 0.1
    return vector


class FakeOpenAI:
    """Stands in for openai.OpenAI: records calls, returns canned output."""

    def __init__(self, answer: str = "Generated answer"):
        self.answer = answer
        self.embedding_calls = []
        self.chat_calls = []
        self.embedding_error = None
        self.chat_error = None
        self.embeddings = SimpleNamespace(create=self._create_embeddings)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create_completion))

    def _create_embeddings(self, model, input):
        if self.embedding_error:
            raise self.embedding_error
        self.embedding_calls.append(list(input))
        return SimpleNamespace(data=[SimpleNamespace(embedding=embed_text(text)) for text in input])

    def _create_completion(self, model, messages, **kwargs):
        if self.chat_error:
            raise self.chat_error
        self.chat_calls.append(messages)
        message = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    @property
    def last_system_prompt(self) -> str:
        return self.chat_calls[-1][0]["content"]


def make_pdf(pages: List[str]) -> bytes:
    """Build a minimal PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{page_id} 0 R" for page_id in page_ids)

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, pages):
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>".encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


@pytest.fixture
def settings():
    return Settings(log_level="WARNING", allowed_origins=["*"])


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def rag(fake_openai):
    return RAGService(fake_openai, batch_size=8)


@pytest.fixture
def qdrant():
    client = QdrantClient(":memory:")
    yield client
    client.close()


@pytest.fixture
def database():
    db = DatabaseService("sqlite://")
    db.init_db()
    return db


@pytest.fixture
def seeded_database(database):
    with database.session() as session:
        session.add_all([
            EntityRecord(id="e1", name="Diabetes", description="A chronic metabolic disease with high blood sugar", entity_type="disease"),
            EntityRecord(id="e2", name="Polyuria", description="Frequent urination, common in diabetes", entity_type="symptom"),
            EntityRecord(id="e3", name="Insulin", description="Hormone therapy used for diabetes", entity_type="drug"),
            EntityRecord(id="e4", name="Obesity", description="Excess body fat", entity_type="risk_factor"),
            EntityRecord(id="e5", name="Asthma", description="Chronic airway inflammation", entity_type="disease"),
        ])
        session.flush()
        session.add_all([
            RelationshipRecord(id="r1", from_entity_id="e1", to_entity_id="e2", relationship_type="has_symptom"),
            RelationshipRecord(id="r2", from_entity_id="e3", to_entity_id="e1", relationship_type="treatment_for"),
            RelationshipRecord(id="r3", from_entity_id="e4", to_entity_id="e1", relationship_type="risk_factor_of"),
        ])
    return database


@pytest.fixture
def services(settings, rag, qdrant, seeded_database):
    return assemble_services(settings, rag, qdrant, seeded_database)


@pytest.fixture
def client(settings, services):
    app = create_app(settings, services)
    with TestClient(app) as test_client:
        yield test_client
