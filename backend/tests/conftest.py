"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest before running tests.
Every test runs against an in-memory SQLite database and a fake model
gateway, so no network or real database is needed.
"""

import os
import sys

# Add backend directory to path for imports FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Load the real .env file if it exists; tests never use its DATABASE_URL
from dotenv import load_dotenv
env_path = os.path.join(os.path.dirname(__file__), '..', '.env')
load_dotenv(env_path)

# Only set dummy values if not already set by .env
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "test-api-key-for-testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from api import create_app
from config import Settings
from db import init_db
from errors import ModelGatewayError
from services.analysis import AnalysisService
from services.interview_orchestrator import InterviewOrchestrator
from services.session_store import SessionStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (full HTTP stack)"
    )


# ============================================================================
# FAKE MODEL GATEWAY
# ============================================================================

class FakeGateway:
    """
    Stands in for ModelGateway.

    Answers are keyed by result type name ("MatchAnalysis", ...). A value can
    be a dict, a callable taking the prompt parts, or an exception to raise.
    Every call is recorded in `calls` as (type name, parts).
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def generate(self, parts, schema, system=None):
        name = schema.__name__
        self.calls.append((name, list(parts)))

        response = self.responses.get(name)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(parts)
        if response is None:
            raise ModelGatewayError(f"No canned response for {name}")
        return schema.model_validate(response)

    def calls_for(self, name):
        return [parts for called, parts in self.calls if called == name]


DEFAULT_RESPONSES = {
    "ResumeAnalysis": {
        "atsScore": 78.6,
        "strengths": ["Quantified impact"],
        "weaknesses": ["No summary section"],
        "keywords": ["Python", "Distributed Systems"],
        "techSkills": ["Python", "FastAPI", "PostgreSQL"],
        "softSkills": ["Mentoring"],
        "projects": [{"name": "Ledger", "tech": "Python", "description": "Payments ledger", "impact": "2x throughput"}],
        "workExperience": [{"role": "Backend Engineer", "company": "Globex", "duration": "2020-2024", "description": "APIs"}],
        "leadership": [],
        "education": [{"degree": "BSc CS", "school": "State U", "year": "2019"}],
        "impactMetrics": ["Cut p99 latency by 40%"],
        "domain": "Backend",
        "bulletPoints": ["Built payments API", "Cut p99 latency by 40%", "Mentored 3 engineers"],
        "rewritten": "Backend engineer focused on payments.",
        "comparisonNote": "Senior level",
    },
    "JobDescriptionAnalysis": {
        "title": "Senior Backend Engineer",
        "company": "Acme",
        "requiredSkills": ["Python", "PostgreSQL"],
        "preferredSkills": ["Kubernetes"],
        "roleFocus": "Backend",
        "seniorityLevel": "Senior",
        "hiddenSignals": ["On-call"],
    },
    "MatchAnalysis": {
        "score": 72,
        "missingSkills": ["Kubernetes"],
        "strongMatches": ["Python"],
        "gapAnalysis": "Little infrastructure experience.",
        "recommendation": "Tailor Resume",
        "reasoning": "Strong backend, weak ops.",
    },
    "InterviewQuestion": {
        "question": "How did you measure the 40% latency reduction?",
        "type": "Resume Deep-Dive",
        "difficulty": "Medium",
        "hints": "Baseline, tooling, rollout",
        "isDeepDive": True,
    },
    "AnswerEvaluation": {
        "score": 70,
        "feedback": "Clear but light on numbers.",
        "improvements": "Quantify the result.",
        "redFlags": [],
    },
    "StarAnalysis": {
        "hasSituation": True,
        "hasTask": True,
        "hasAction": True,
        "hasResult": False,
        "missingComponents": ["Result"],
        "starScore": 75,
        "rewriteSuggestion": "Close with the measured outcome.",
    },
    "ResumeRewrite": {
        "rewritten": "Backend engineer who ships payments systems.",
        "bulletPoints": ["Architected payments API serving 5k rps"],
        "keywords": ["Payments", "Python"],
        "skills": ["Python", "FastAPI"],
        "rewrittenFull": "Full rewritten resume text",
    },
    "CoverLetter": {"coverLetter": "# Dear Hiring Team\n\nI am excited to apply."},
    "InterviewReport": {
        "overallScore": 74,
        "summary": "Solid technical depth, vague on results.",
        "strengths": ["Depth"],
        "weaknesses": ["Results"],
        "readinessLevel": "Medium",
        "heatmap": [
            {"topic": "Communication", "score": 70},
            {"topic": "Technical Depth", "score": 80},
            {"topic": "Problem Solving", "score": 72},
        ],
    },
    "JobIntel": {
        "summary": "Backend role on the payments team.",
        "jobData": {"title": "Senior Backend Engineer", "company": "Acme"},
        "requirements": ["Python", "PostgreSQL"],
        "techStack": ["Python", "PostgreSQL", "Kubernetes"],
        "exampleResume": "- Built payments API",
        "resumeSuggestions": [],
        "tailoredBullets": [],
        "gaps": [],
    },
}


# ============================================================================
# FIXTURES - Database, services and HTTP client
# ============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SessionStore(engine)


@pytest.fixture
def fake_gateway():
    return FakeGateway(DEFAULT_RESPONSES)


@pytest.fixture
def analysis(fake_gateway):
    return AnalysisService(fake_gateway)


@pytest.fixture
def orchestrator(store, analysis):
    return InterviewOrchestrator(store, analysis)


@pytest.fixture
def resume(store):
    """A stored resume in the current (techSkills/softSkills) shape."""
    return store.create_resume(
        filename="jane_doe.pdf",
        content_type="application/pdf",
        size=2048,
        raw_text="Jane Doe\nBackend Engineer at Globex",
        ats_score=79,
        skills=["Python", "FastAPI"],
        tech_skills=["Python", "FastAPI"],
        soft_skills=["Mentoring"],
        projects=[{"name": "Ledger", "tech": "Python", "description": "Payments ledger"}],
        work_experience=[{"role": "Backend Engineer", "company": "Globex", "description": "APIs"}],
        impact_metrics=["Cut p99 latency by 40%"],
        bullet_points=["Built payments API"],
    )


@pytest.fixture
def job_description(store):
    return store.create_job_description(
        title="Senior Backend Engineer",
        company="Acme",
        raw_text="We are hiring a senior backend engineer. Python, PostgreSQL.",
        required_skills=["Python", "PostgreSQL"],
        role_focus="Backend",
        seniority_level="Senior",
    )


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", openai_api_key=None, max_upload_bytes=64 * 1024)


@pytest.fixture
def test_client(settings, fake_gateway, engine):
    """
    Creates a FastAPI TestClient wired to the in-memory database and the
    fake gateway.
    """
    app = create_app(settings, gateway=fake_gateway, engine=engine)
    with TestClient(app) as client:
        yield client
