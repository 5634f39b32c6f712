import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ..config import settings
from ..infrastructure.database.connection import init_db
from ..services.exceptions import (
    PersistenceError,
    SessionNotFoundError,
    ValidationError,
)
from ..services.refinement import PromptRefinementService, SessionHistory
from .dependencies import get_engine, get_refinement_service
from .schemas import (
    CreateSessionRequest,
    Envelope,
    ErrorResponse,
    FeedbackRead,
    HealthResponse,
    IterationRead,
    RefinementRead,
    RefineRequest,
    SessionCreated,
    SessionDetail,
    SessionRead,
)

logger = logging.getLogger(__name__)

ENDPOINT = "/api/prompt-refinement"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db(get_engine())
    logger.info("Prompt refinement service ready")
    yield


app = FastAPI(title="Prompt Refinement Service", lifespan=lifespan)


# --- Error Mapping ---

def _error(status_code: int, message: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Registered before CORSMiddleware so it runs inside it and 500s still carry CORS headers
@app.middleware("http")
async def handle_unexpected_error(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception(f"Prompt refinement error: {exc}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", details=str(exc))


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(RequestValidationError)
async def handle_malformed_body(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected malformed request body: {exc.errors()}")
    return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")


@app.exception_handler(SessionNotFoundError)
async def handle_not_found(request: Request, exc: SessionNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Session not found")


@app.exception_handler(PersistenceError)
async def handle_persistence_error(request: Request, exc: PersistenceError):
    # Detail was logged where it happened; the message is generic
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


# --- Endpoints ---

@app.options(ENDPOINT)
@app.options(f"{ENDPOINT}/health")
def preflight():
    """
    Bare OPTIONS. Browser preflights never reach this: the CORS middleware
    answers them itself with a 200 and a plain-text "OK" body.
    """
    return Response(status_code=status.HTTP_200_OK)


@app.get(f"{ENDPOINT}/health", response_model=HealthResponse)
def health():
    return HealthResponse(timestamp=datetime.now(timezone.utc))


@app.post(
    ENDPOINT,
    response_model=Envelope[SessionCreated],
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    body: CreateSessionRequest,
    service: PromptRefinementService = Depends(get_refinement_service),
):
    """Starts a refinement session for a post or content idea."""
    session = service.create_session(
        original_prompt=body.original_prompt,
        post_id=body.post_id,
        content_idea_id=body.content_idea_id,
        user_id=body.user_id,
    )
    return Envelope[SessionCreated](
        data=SessionCreated(
            session_id=session.id,
            original_prompt=session.original_prompt,
            current_prompt=session.current_prompt,
            status=session.status,
        )
    )


@app.put(ENDPOINT, response_model=Envelope[RefinementRead])
async def refine_prompt(
    body: RefineRequest,
    service: PromptRefinementService = Depends(get_refinement_service),
):
    """Records the next version of the prompt from feedback or a manual edit."""
    result = await service.refine(
        session_id=body.session_id,
        feedback=body.feedback,
        manual_edit=body.manual_edit,
        user_id=body.user_id,
    )

    # Explicitly Map: RefinementResult (Service) -> RefinementRead (API)
    return Envelope[RefinementRead](
        data=RefinementRead(
            session_id=result.session_id,
            iteration_id=result.iteration.id,
            refined_prompt=result.refined_prompt,
            ai_confidence=result.ai_confidence,
            iteration_number=result.iteration_number,
            feedback=result.feedback,
            is_manual_edit=result.is_manual_edit,
        )
    )


@app.get(ENDPOINT, response_model=None)
def get_session(
    request: Request,
    session_id: Optional[str] = Query(None, alias="sessionId"),
    service: PromptRefinementService = Depends(get_refinement_service),
):
    """
    Returns the session with its full history.
    The bare path (no query string) doubles as the health check.
    """
    if not request.url.query:
        return health()

    history = service.get_session(session_id)
    return Envelope[SessionDetail](data=_to_detail(history))


def _to_detail(history: SessionHistory) -> SessionDetail:
    return SessionDetail(
        session=SessionRead.model_validate(history.session, from_attributes=True),
        iterations=[
            IterationRead.model_validate(iteration, from_attributes=True)
            for iteration in history.iterations
        ],
        feedback=[
            FeedbackRead.model_validate(entry, from_attributes=True)
            for entry in history.feedback
        ],
        total_iterations=history.total_iterations,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "prompt_refinement.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
    )
