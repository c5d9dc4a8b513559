# models.py
"""
Database tables for the career-prep backend.

List and nested document fields (skills, projects, exchanges, ...) are stored
as JSON columns. Always assign a new list/dict when changing them; JSON
columns do not track in-place mutation.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from sqlalchemy import Column, JSON, Text, UniqueConstraint
from sqlmodel import SQLModel, Field


STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Resume(SQLModel, table=True):
    """
    One uploaded resume plus everything the model derived from it.

    Created by /api/resume/analyze; rewritten/bullet_points/keywords/skills
    may later be overwritten by /api/resume/rewrite.
    """
    __tablename__ = "resumes"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    filename: str = Field(index=True)
    content_type: str = "application/octet-stream"
    size: int = 0
    raw_text: str = Field(default="", sa_column=Column(Text))

    ats_score: Optional[int] = None
    strengths: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    weaknesses: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    tech_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    soft_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    projects: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    work_experience: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    leadership: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    education: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    impact_metrics: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    domain: Optional[str] = None
    bullet_points: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    rewritten: Optional[str] = Field(default=None, sa_column=Column(Text))
    comparison_note: Optional[str] = None


class JobDescription(SQLModel, table=True):
    __tablename__ = "job_descriptions"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    title: str = "Unknown"
    company: str = "Unknown"
    raw_text: str = Field(default="", sa_column=Column(Text))
    required_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    preferred_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    role_focus: Optional[str] = None
    seniority_level: Optional[str] = None
    hidden_signals: List[str] = Field(default_factory=list, sa_column=Column(JSON))


class Match(SQLModel, table=True):
    """Resume-to-job score. At most one row per (resume, job description)."""
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("resume_id", "job_description_id", name="uq_match_resume_job"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    resume_id: str = Field(foreign_key="resumes.id", index=True)
    job_description_id: str = Field(foreign_key="job_descriptions.id", index=True)
    score: float = 0.0
    analysis: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class InterviewSession(SQLModel, table=True):
    """
    A mock interview.

    exchanges is append-only; the current round is len(exchanges).
    version is bumped on every exchange append (compare-and-swap).
    """
    __tablename__ = "interview_sessions"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    resume_id: str = Field(foreign_key="resumes.id", index=True)
    job_description_id: str = Field(foreign_key="job_descriptions.id", index=True)

    # denormalized from the job description at init time
    company: str = "Unknown"
    role: str = "Unknown"

    type: str = "SCREENING"
    difficulty: str = "MEDIUM"
    status: str = Field(default=STATUS_IN_PROGRESS, index=True)
    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None

    exchanges: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    overall_score: Optional[float] = None
    feedback_summary: Optional[str] = Field(default=None, sa_column=Column(Text))

    version: int = Field(default=1, nullable=False)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    email: str = Field(index=True, unique=True)
    name: Optional[str] = None
    image: Optional[str] = None


class InterviewProfile(SQLModel, table=True):
    __tablename__ = "interview_profiles"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    user_id: str = Field(foreign_key="users.id", unique=True, index=True)
    target_role: Optional[str] = None
    target_company: Optional[str] = None
