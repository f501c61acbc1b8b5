from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile
import os
import logging
from datetime import datetime
from typing import Optional

from . import __version__
from .chat_service import NoRelevantContentError
from .config import Settings
from .models import (
    ChatResponse,
    ErrorResponse,
    KGNavigateResponse,
    SubQuery,
    UploadedPDF,
    UploadMetadata,
    UploadResponse,
    UploadResponseMetadata,
)
from .services import Services, build_services

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def read_json_object(request: Request) -> Optional[dict]:
    """Return the JSON request body if it is an object, otherwise None."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="MedRAG Medical Q&A API",
        description="Medical question answering over uploaded reports and a knowledge graph",
        version=__version__
    )
    app.state.settings = settings
    app.state.services = services or build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=HTMLResponse)
    async def index():
        with open(os.path.join(STATIC_DIR, "index.html"), encoding="utf-8") as f:
            return HTMLResponse(f.read())

    @app.get("/api/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": __version__
        }

    @app.post("/upload", response_model=UploadResponse)
    async def upload_pdf(
        request: Request,
        services: Services = Depends(get_services),
        settings: Settings = Depends(get_settings),
    ):
        form = await request.form()

        # Field names are pdf0..pdfN, so take every part that carries a file
        files = []
        for field_name, value in form.multi_items():
            if not isinstance(value, UploadFile) or not value.filename:
                continue
            content = await value.read()
            if len(content) > settings.max_file_size:
                return error_response(
                    400, f"File too large. Maximum size is {settings.max_file_size} bytes", value.filename
                )
            files.append(UploadedPDF(filename=value.filename, content=content))

        if not files:
            return error_response(400, "No PDF files uploaded")

        metadata = UploadMetadata(
            patient_name=form.get("patientName") or None,
            report_type=form.get("reportType") or None,
            duration=form.get("duration") or None,
        )
        logger.info(f"Upload of {len(files)} file(s), declared count={form.get('count')}")

        try:
            result = services.ingestion.ingest(files, metadata)
        except Exception as e:
            logger.error(f"Error processing PDFs: {e}", exc_info=True)
            return error_response(500, "Failed to process PDF files", str(e))

        return UploadResponse(
            message=f"{len(result.files_processed)} PDF file(s) processed successfully",
            collectionName=result.collection_name,
            filesProcessed=result.files_processed,
            metadata=UploadResponseMetadata(
                patientName=metadata.patient_name or "Not provided",
                reportType=metadata.report_type or "Not provided",
                duration=metadata.duration or "Not provided",
            ),
            totalChunks=result.total_chunks,
        )

    @app.post("/chat", response_model=ChatResponse)
    async def chat_with_pdf(request: Request, services: Services = Depends(get_services)):
        payload = await read_json_object(request)
        query = payload.get("query") if payload else None
        collection_name = payload.get("collectionName") if payload else None

        # Non-string values count as missing; blank strings are passed through
        if not (isinstance(query, str) and query) or not (isinstance(collection_name, str) and collection_name):
            return error_response(400, "Query and collection name are required")

        try:
            answer = services.chat.answer(query, collection_name)
        except NoRelevantContentError as e:
            return error_response(404, str(e))
        except Exception as e:
            logger.error(f"Error processing chat request: {e}", exc_info=True)
            return error_response(500, "Failed to process chat request", str(e))

        return ChatResponse(message="Chat completed successfully", response=answer)

    @app.post("/api/agents/kg-navigate", response_model=KGNavigateResponse)
    async def navigate_knowledge_graph(request: Request, services: Services = Depends(get_services)):
        payload = await read_json_object(request)
        raw_sub_queries = payload.get("subQueries") if payload else None
        if not isinstance(raw_sub_queries, list):
            return error_response(400, "Valid subQueries array is required")

        try:
            sub_queries = [SubQuery.model_validate(item) for item in raw_sub_queries]
        except ValidationError as e:
            logger.warning(f"Rejected subQueries payload: {e}")
            return error_response(400, "Valid subQueries array is required")

        try:
            results = services.knowledge_graph.navigate(sub_queries)
        except Exception as e:
            logger.error(f"KG navigation error: {e}", exc_info=True)
            return error_response(500, "Failed to navigate knowledge graph", str(e))

        return KGNavigateResponse(success=True, results=results)

    return app
