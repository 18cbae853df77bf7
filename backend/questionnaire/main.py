"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the questionnaire intake
backend. Controllers are intentionally thin: they accept requests,
delegate to `SubmissionService`, and translate outcomes into JSON
responses.

Endpoints implemented:
- POST /api/submissions
- GET /api/submissions
- GET /api/submissions/export.csv
- GET /api/submissions/{referenceNumber}
- GET /api/options
- GET /health
"""

from contextlib import asynccontextmanager
from typing import Any, List
from fastapi import APIRouter, FastAPI, Depends, Body, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import json
import logging
import time
import uuid
from .database import Database, get_session
from . import repositories, services, schemas
from .repositories import DuplicateReferenceError, StoreUnavailableError
from .schemas import ErrorOut, OptionsOut, SubmissionCreated, SubmissionOut
from .utils.export import export_filename, submissions_to_csv
from .config import settings

logger = logging.getLogger("questionnaire.api")
router = APIRouter()
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    body = ErrorOut(error=message, **extra).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def create_app(db: Database | None = None) -> FastAPI:
    """Build the application around an explicit `Database` handle.

    The handle is opened when the app starts serving and closed at
    shutdown. Without an argument the configured `DATABASE_URL` is used.
    """
    database = db or Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        logger.info("database opened %s", database.url)
        try:
            yield
        finally:
            database.close()
            logger.info("database closed")

    app = FastAPI(title="Study Abroad Questionnaire API", lifespan=lifespan)
    app.state.db = database

    # Wide-open CORS keeps a separately served wizard frontend working in dev.
    if settings.ALLOW_DEV_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        request.state.request_id = req_id
        started = time.perf_counter()
        response: Response
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
            logger.exception(
                "request_failed %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": elapsed_ms,
                    },
                    ensure_ascii=True,
                ),
            )
            raise
        response.headers["X-Request-ID"] = req_id
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        if request.url.path.startswith("/api"):
            logger.info(
                "request_done %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "status_code": response.status_code,
                        "duration_ms": elapsed_ms,
                    },
                    ensure_ascii=True,
                ),
            )
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies (e.g. invalid JSON) get the same 400 shape as rule failures."""
        errors = [{"path": [str(p) for p in e.get("loc", ())[1:]], "message": e.get("msg", "")} for e in exc.errors()]
        return _error(400, "Validation failed", details="Request body is not valid JSON", errors=errors)

    app.include_router(router)
    return app


@router.post(
    "/api/submissions",
    response_model=SubmissionCreated,
    responses={400: {"model": ErrorOut}, 409: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
def create_submission(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    """Validate and store a questionnaire.

    The body is re-validated here whatever the client checked. Only
    `{id, referenceNumber}` is returned.
    """
    svc = services.SubmissionService(db)
    try:
        outcome = svc.create(payload)
    except DuplicateReferenceError as e:
        logger.info("duplicate reference number %s", e.reference_number)
        return _error(409, "Submission with this reference number already exists")
    except StoreUnavailableError:
        logger.exception("Error creating submission")
        return _error(500, "Failed to create submission")
    if isinstance(outcome, SubmissionCreated):
        return outcome
    # expected user input problem: not a server error
    logger.info("validation failed: %s", outcome.details)
    return _error(
        400,
        "Validation failed",
        details=outcome.details,
        errors=[e.as_dict() for e in outcome.errors],
    )


@router.get("/api/submissions", response_model=List[SubmissionOut], responses={500: {"model": ErrorOut}})
def list_submissions(db: Session = Depends(get_session)):
    """Return all submissions, newest first. Intended for the admin view."""
    try:
        return services.SubmissionService(db).list_all()
    except StoreUnavailableError:
        logger.exception("Error fetching submissions")
        return _error(500, "Failed to fetch submissions")


@router.get("/api/submissions/export.csv", responses={500: {"model": ErrorOut}})
def export_submissions(db: Session = Depends(get_session)):
    """Download all submissions as CSV."""
    try:
        rows = services.SubmissionService(db).list_all()
    except StoreUnavailableError:
        logger.exception("Error exporting submissions")
        return _error(500, "Failed to export submissions")
    text = submissions_to_csv(r.model_dump(by_alias=True, mode="json") for r in rows)
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get(
    "/api/submissions/{reference_number}",
    response_model=SubmissionOut,
    responses={404: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
def get_submission(reference_number: str, db: Session = Depends(get_session)):
    """Return one submission by exact reference number."""
    try:
        found = services.SubmissionService(db).get_by_reference(reference_number)
    except StoreUnavailableError:
        logger.exception("Error fetching submission")
        return _error(500, "Failed to fetch submission")
    if found is None:
        return _error(404, "Submission not found")
    return found


@router.get("/api/options", response_model=OptionsOut)
def options():
    """Choice lists and wizard step layouts shared with clients."""
    return OptionsOut(
        genders=schemas.GENDERS,
        education_levels=schemas.EDUCATION_LEVELS,
        program_types=schemas.PROGRAM_TYPES,
        study_reasons=schemas.STUDY_REASONS,
        funding_methods=schemas.FUNDING_METHODS,
        challenges=schemas.CHALLENGES,
        contact_methods=schemas.CONTACT_METHODS,
        steps={
            variant: [
                schemas.FormStep(number=i, label=label, fields=fields)
                for i, (label, fields) in enumerate(steps, start=1)
            ]
            for variant, steps in schemas.FORM_STEPS.items()
        },
    )


@router.get("/health")
def health(db: Session = Depends(get_session)):
    """Lightweight health check for uptime monitoring."""
    try:
        total = repositories.SubmissionRepository(db).count()
    except StoreUnavailableError:
        logger.exception("health check could not reach the database")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok", "submissions": total}


app = create_app()
