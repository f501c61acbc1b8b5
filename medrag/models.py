# Data models for the MedRAG API

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class UploadedPDF(BaseModel):
    filename: str
    content: bytes


class UploadMetadata(BaseModel):
    patient_name: Optional[str] = None
    report_type: Optional[str] = None
    duration: Optional[str] = None


class IngestionResult(BaseModel):
    collection_name: str
    files_processed: List[str]
    total_chunks: int


class RetrievedChunk(BaseModel):
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None


class ChatResponse(BaseModel):
    message: str
    response: str


class UploadResponseMetadata(BaseModel):
    patientName: str
    reportType: str
    duration: str


class UploadResponse(BaseModel):
    message: str
    collectionName: str
    filesProcessed: List[str]
    metadata: UploadResponseMetadata
    totalChunks: int


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


# Knowledge graph rows are owned by an external store, so unknown columns
# are carried through untouched.

class KGEntity(BaseModel):
    model_config = ConfigDict(extra="allow", from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    entity_type: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class KGRelationship(BaseModel):
    model_config = ConfigDict(extra="allow", from_attributes=True)

    id: str
    from_entity_id: str
    to_entity_id: str
    relationship_type: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    from_entity: Optional[KGEntity] = None
    to_entity: Optional[KGEntity] = None


class KGMatch(BaseModel):
    entity: KGEntity
    relationships: List[KGRelationship] = Field(default_factory=list)


class SubQuery(BaseModel):
    query: str
    type: Optional[str] = None


class SubQueryResult(BaseModel):
    subQuery: str
    type: Optional[str] = None
    entities: List[KGMatch]


class KGNavigateResponse(BaseModel):
    success: bool = True
    results: List[SubQueryResult]
