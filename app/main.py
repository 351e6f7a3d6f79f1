import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.questions import questions_router
from app.api.v1.recordings import recordings_router
from app.core.config import settings
from app.core.exceptions import (
    AppError,
    ProviderError,
    RecordingNotFoundError,
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    not_found_exception_handler,
    provider_exception_handler,
)
from app.core.logger import set_correlation_id, setup_logger
from app.services.pipeline.question_pipeline import QuestionGenerationService
from app.services.pipeline.resume_processor import ResumeProcessor
from app.services.repository import InMemoryRecordStore
from app.services.storage import S3ObjectStorage
from app.services.transcription.job_processor import TranscriptionJobProcessor

# Setup logger with fresh log file on startup
setup_logger(
    log_level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    clear_log=True,
    use_json=settings.LOG_JSON,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: Interview Coach AI backend")
    store = InMemoryRecordStore()
    app.state.record_store = store
    app.state.object_storage = S3ObjectStorage()
    app.state.question_service = QuestionGenerationService(store)
    app.state.resume_processor = ResumeProcessor(store)
    app.state.job_processor = TranscriptionJobProcessor(store, app.state.object_storage)
    yield
    await app.state.job_processor.wait_for_pending()
    logger.info("Application shutdown")


app = FastAPI(
    title="Interview Coach AI",
    description="Multi-provider question generation and recording transcription for interview practice.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(ProviderError, provider_exception_handler)
app.add_exception_handler(RecordingNotFoundError, not_found_exception_handler)
app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for simplicity in development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    set_correlation_id(correlation_id)
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


# Include routers
app.include_router(questions_router, prefix="/api/v1", tags=["questions"])
app.include_router(recordings_router, prefix="/api/v1", tags=["recordings"])


@app.get("/health")
async def health():
    return {"status": "ok"}
