# backend/api.py
"""
HTTP surface for the career-prep backend.

Routes stay thin: check the required fields, hand off to the services and
turn stored records into camelCase JSON. create_app() wires everything from
a Settings object so tests can swap in their own engine and gateway.
"""

import logging
from contextlib import asynccontextmanager
from functools import wraps
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from config import Settings, configure_logging
from db import init_db, make_engine, ping
from errors import (
    CareerPrepError,
    InvalidRequestError,
    NotFoundError,
    PayloadTooLargeError,
    RequestFailedError
)
from schemas import (
    CoverLetterRequest,
    InterviewInitRequest,
    InterviewSessionOut,
    JobAnalyzeRequest,
    JobDescriptionOut,
    JobIntelRequest,
    MatchOut,
    MatchRequest,
    ProfileOut,
    ProfileUpdateRequest,
    ResumeOut,
    ResumeRewriteRequest,
    SessionRequest,
    SubmitRequest,
    UserOut,
    UserSyncRequest
)
from services.analysis import (
    AnalysisService,
    reconcile_resume_analysis,
    resume_match_context,
    jd_match_context,
    resume_rewrite_data,
    jd_rewrite_context,
    resume_cover_letter_context,
    jd_cover_letter_context
)
from services.interview_orchestrator import InterviewOrchestrator
from services.model_gateway import Attachment, ModelGateway
from services.session_store import SessionStore
from services.text_extractor import extract_text

logger = logging.getLogger(__name__)


NAVIGATION = [
    {"label": "Dashboard", "href": "/dashboard"},
    {"label": "Resume", "href": "/resume"},
    {"label": "Interview", "href": "/interview"},
    {"label": "Profile", "href": "/profile"},
]

HIGHLIGHTS = {
    "atsScore": 82,
    "mockSessions": 128,
    "successRate": 96,
    "offersTracked": 47,
}

DEMO_USER = {
    "email": "demo@interviewexpert.ai",
    "name": "Demo Candidate",
    "image": "https://github.com/shadcn.png",
}


# ---------- Dependencies ----------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_analysis(request: Request) -> AnalysisService:
    return request.app.state.analysis


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    return request.app.state.orchestrator


def reports(summary: str):
    """
    Route decorator: caller errors (4xx) pass through, anything else is
    logged and reported as 500 {"error": summary, "detail": message}.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except CareerPrepError as e:
                if e.status_code < 500:
                    raise
                logger.exception(summary)
                raise RequestFailedError(summary, str(e)) from e
            except Exception as e:
                logger.exception(summary)
                raise RequestFailedError(summary, str(e) or type(e).__name__) from e
        return wrapper
    return decorator


def require(*values: Any, message: str) -> None:
    if not all(values):
        raise InvalidRequestError(message)


router = APIRouter()


# ---------- Static / health ----------
@router.get("/")
def root():
    return {"message": "API running"}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/api/db/health")
def db_health(request: Request):
    engine: Engine = request.app.state.engine
    try:
        ping(engine)
    except Exception:
        logger.exception("Database healthcheck failed")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Database connection failed"},
        )
    return {"status": "ok", "provider": engine.dialect.name}


@router.get("/api/navigation")
def navigation():
    return {"links": NAVIGATION}


@router.get("/api/highlights")
def highlights():
    return HIGHLIGHTS


# ---------- Resume ----------
@router.post("/api/resume/analyze")
@reports("Failed to analyze resume")
def analyze_resume(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_store),
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    if file is None:
        raise InvalidRequestError("No file uploaded")

    # one byte past the limit is enough to know it is too large
    data = file.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLargeError(f"File exceeds {settings.max_upload_bytes} bytes")

    filename = file.filename or "resume"
    content_type = file.content_type or "application/octet-stream"
    logger.info(f"Resume upload: {filename} ({content_type}, {len(data)} bytes)")

    raw_text = extract_text(data, content_type, filename)
    result = analysis.analyze_resume(Attachment(filename, content_type, data), raw_text)

    resume = store.create_resume(
        filename=filename,
        content_type=content_type,
        size=len(data),
        raw_text=raw_text,
        **reconcile_resume_analysis(result),
    )
    return ResumeOut.model_validate(resume).to_wire()


@router.post("/api/resume/rewrite")
@reports("Failed to rewrite resume")
def rewrite_resume(
    req: ResumeRewriteRequest,
    store: SessionStore = Depends(get_store),
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    resume_data: Any = req.text
    if not resume_data and req.resume_id:
        resume = store.get_resume(req.resume_id)
        if resume is not None:
            resume_data = resume_rewrite_data(resume)

    if not resume_data:
        raise InvalidRequestError("No text available for rewrite")

    jd_context = None
    if req.job_description_id:
        jd = store.get_job_description(req.job_description_id)
        if jd is not None:
            jd_context = jd_rewrite_context(jd)

    rewrite = analysis.rewrite_resume(resume_data, jd_context)

    if req.resume_id:
        # only what the model actually returned overwrites the record
        fields = {
            "rewritten": rewrite.rewritten_full or rewrite.rewritten,
            "bullet_points": rewrite.bullet_points,
            "keywords": rewrite.keywords,
            "skills": rewrite.skills,
        }
        store.update_resume(req.resume_id, **{k: v for k, v in fields.items() if v is not None})

    body = rewrite.model_dump(by_alias=True, exclude_none=True, mode="json")
    body["targeted"] = jd_context is not None
    return body


# ---------- Job descriptions ----------
@router.post("/api/job/analyze")
@reports("Failed to analyze job description")
def analyze_job(
    req: JobAnalyzeRequest,
    store: SessionStore = Depends(get_store),
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    require(req.text and req.text.strip(), message="Job description text is required")

    result = analysis.analyze_job_description(req.text)
    jd = store.create_job_description(
        title=result.title,
        company=result.company,
        raw_text=req.text,
        required_skills=result.required_skills,
        preferred_skills=result.preferred_skills,
        role_focus=result.role_focus,
        seniority_level=result.seniority_level,
        hidden_signals=result.hidden_signals,
    )
    return JobDescriptionOut.model_validate(jd).to_wire()


@router.post("/api/job/match")
@reports("Failed to calculate match")
def match_job(
    req: MatchRequest,
    store: SessionStore = Depends(get_store),
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    require(req.resume_id, req.job_description_id, message="resumeId and jobDescriptionId are required")

    existing = store.find_match(req.resume_id, req.job_description_id)
    if existing is not None:
        return MatchOut.model_validate(existing).to_wire()

    resume, jd = store.require_resume_and_job(req.resume_id, req.job_description_id)
    result = analysis.score_match(resume_match_context(resume), jd_match_context(jd))

    match = store.create_match(req.resume_id, req.job_description_id, result.score, result.to_wire())
    logger.info(f"Match {match.id}: score={match.score}")
    return MatchOut.model_validate(match).to_wire()


@router.post("/api/job-intel")
@reports("Failed to generate job intel")
def job_intel(
    req: JobIntelRequest,
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    job_description = (req.job_description or "").strip()
    require(job_description, message="Job description is required.")

    resume_text = (req.resume_text or "").strip() or None
    return analysis.job_intel(job_description, resume_text).to_wire()


# ---------- Interview ----------
@router.post("/api/interview/init")
@reports("Failed to initialize interview")
def interview_init(
    req: InterviewInitRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    require(req.resume_id, req.job_description_id, message="resumeId and jobDescriptionId are required")

    session = orchestrator.init_session(req.resume_id, req.job_description_id, req.type, req.difficulty)
    return InterviewSessionOut.model_validate(session).to_wire()


@router.post("/api/interview/next")
@reports("Failed to generate next question")
def interview_next(
    req: SessionRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    require(req.session_id, message="sessionId is required")
    return orchestrator.next_question(req.session_id).to_wire()


@router.post("/api/interview/submit")
@reports("Failed to submit answer")
def interview_submit(
    req: SubmitRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    require(req.session_id, req.question, req.answer, message="Missing required fields")
    return orchestrator.submit_answer(req.session_id, req.question, req.answer, req.type).to_wire()


@router.post("/api/interview/results")
@reports("Failed to generate results")
def interview_results(
    req: SessionRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    require(req.session_id, message="sessionId is required")
    return orchestrator.results(req.session_id).to_wire()


# ---------- Cover letter ----------
@router.post("/api/cover-letter/generate")
@reports("Failed to generate cover letter")
def generate_cover_letter(
    req: CoverLetterRequest,
    store: SessionStore = Depends(get_store),
    analysis: AnalysisService = Depends(get_analysis),
) -> Dict[str, Any]:
    require(req.resume_id, message="resumeId is required")

    resume = store.get_resume(req.resume_id)
    if resume is None:
        raise NotFoundError("Resume not found")

    jd_context = None
    if req.job_description_id:
        jd = store.get_job_description(req.job_description_id)
        if jd is not None:
            jd_context = jd_cover_letter_context(jd)

    return analysis.generate_cover_letter(resume_cover_letter_context(resume), jd_context).to_wire()


# ---------- Users & profile ----------
@router.get("/api/profile")
@reports("Failed to fetch profile")
def get_profile(store: SessionStore = Depends(get_store)) -> Dict[str, Any]:
    # single-user mode: the first user owns the profile
    user = store.first_user()
    if user is None:
        user, _ = store.upsert_user(**DEMO_USER)
        logger.info(f"Created demo user {user.id}")

    profile = store.get_or_create_profile(user.id)
    return {
        "user": UserOut.model_validate(user).to_wire(),
        "profile": ProfileOut.model_validate(profile).to_wire(),
    }


@router.post("/api/profile")
@reports("Failed to update profile")
def update_profile(
    req: ProfileUpdateRequest,
    store: SessionStore = Depends(get_store),
) -> Dict[str, Any]:
    user = store.first_user()
    if user is None:
        raise NotFoundError("No user found")

    profile = store.update_profile(user.id, req.target_role, req.target_company)
    return ProfileOut.model_validate(profile).to_wire()


@router.post("/api/users/sync")
@reports("Failed to sync user")
def sync_user(
    req: UserSyncRequest,
    store: SessionStore = Depends(get_store),
) -> Dict[str, Any]:
    require(req.email, message="email is required")

    user, created = store.upsert_user(req.email, req.name, req.image)
    return {
        "status": "created" if created else "updated",
        "user": UserOut.model_validate(user).to_wire(),
    }


# ---------- Error handlers ----------
async def career_prep_error_handler(request: Request, exc: CareerPrepError) -> JSONResponse:
    if exc.status_code >= 500:
        detail = getattr(exc, "detail", str(exc))
        error = str(exc) if isinstance(exc, RequestFailedError) else "Internal error"
        return JSONResponse(status_code=exc.status_code, content={"error": error, "detail": detail})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# ---------- App factory ----------
def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[ModelGateway] = None,
    engine: Optional[Engine] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Runtime configuration; read from the environment if omitted
        gateway: Model gateway (tests pass a fake); built from settings if omitted
        engine: Database engine; built from settings.database_url if omitted
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = engine or make_engine(settings.database_url)
    gateway = gateway or ModelGateway.from_settings(settings)

    store = SessionStore(engine)
    analysis = AnalysisService(gateway)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info(f"Database ready ({engine.dialect.name})")
        yield

    app = FastAPI(title="Career Prep API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.store = store
    app.state.analysis = analysis
    app.state.orchestrator = InterviewOrchestrator(store, analysis)

    app.add_exception_handler(CareerPrepError, career_prep_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
