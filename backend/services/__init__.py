# backend/services/__init__.py
"""
Services Package for the career-prep backend

Leaves first:
    - text_extractor: PDF/DOCX/plain-text extraction with a readable fallback
    - model_gateway: OpenAI chat calls with retry and JSON salvage
    - analysis: one model-backed operation per feature (resume, JD, match, ...)
    - session_store: persistence for resumes, JDs, matches, sessions, users
    - interview_orchestrator: init / next / submit / results interview loop
"""

from .text_extractor import extract_text, UNREADABLE_TEXT
from .model_gateway import (
    Attachment,
    ModelGateway,
    RetryPolicy,
    call_with_policy,
    is_retryable_error,
    parse_model_json
)
from .analysis import AnalysisService, reconcile_resume_analysis
from .session_store import SessionStore
from .interview_orchestrator import (
    InterviewOrchestrator,
    suggest_difficulty,
    MAX_ROUNDS
)

__all__ = [
    "extract_text",
    "UNREADABLE_TEXT",
    "Attachment",
    "ModelGateway",
    "RetryPolicy",
    "call_with_policy",
    "is_retryable_error",
    "parse_model_json",
    "AnalysisService",
    "reconcile_resume_analysis",
    "SessionStore",
    "InterviewOrchestrator",
    "suggest_difficulty",
    "MAX_ROUNDS",
]
