# backend/services/session_store.py
"""
Session Store

CRUD over the document tables (resumes, job descriptions, matches, interview
sessions, users, profiles). Every call opens its own short-lived DB session,
so callers always see what is persisted now, never a cached copy.

Two writes are guarded:
- matches: unique per (resume, job description); a duplicate insert returns
  the row already stored
- interview exchanges: appended with a compare-and-swap on `version`

Users (unique email) and profiles (unique user) are created on first use; an
insert that loses to a concurrent one falls back to the stored row.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from errors import ConflictError, NotFoundError
from models import (
    Resume,
    JobDescription,
    Match,
    InterviewSession,
    User,
    InterviewProfile,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    utcnow
)

logger = logging.getLogger(__name__)


class SessionStore:

    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self) -> Session:
        # returned objects stay readable after the session closes
        return Session(self.engine, expire_on_commit=False)

    def _add(self, obj):
        with self._session() as db:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return obj

    def _get(self, model, obj_id: Optional[str]):
        if not obj_id:
            return None
        with self._session() as db:
            return db.get(model, obj_id)

    # ------------------------------------------------------------------
    # Resumes
    # ------------------------------------------------------------------

    def create_resume(self, **fields: Any) -> Resume:
        return self._add(Resume(**fields))

    def get_resume(self, resume_id: Optional[str]) -> Optional[Resume]:
        return self._get(Resume, resume_id)

    def update_resume(self, resume_id: str, **fields: Any) -> Optional[Resume]:
        """Overwrite the given fields; returns None if the resume does not exist."""
        with self._session() as db:
            resume = db.get(Resume, resume_id)
            if resume is None:
                return None
            for key, value in fields.items():
                setattr(resume, key, value)
            db.add(resume)
            db.commit()
            db.refresh(resume)
            return resume

    # ------------------------------------------------------------------
    # Job descriptions
    # ------------------------------------------------------------------

    def create_job_description(self, **fields: Any) -> JobDescription:
        return self._add(JobDescription(**fields))

    def get_job_description(self, jd_id: Optional[str]) -> Optional[JobDescription]:
        return self._get(JobDescription, jd_id)

    def require_resume_and_job(self, resume_id: str, jd_id: str) -> Tuple[Resume, JobDescription]:
        resume = self.get_resume(resume_id)
        jd = self.get_job_description(jd_id)
        if resume is None or jd is None:
            raise NotFoundError("Resume or Job Description not found")
        return resume, jd

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def find_match(self, resume_id: str, jd_id: str) -> Optional[Match]:
        with self._session() as db:
            return db.exec(
                select(Match)
                .where(Match.resume_id == resume_id)
                .where(Match.job_description_id == jd_id)
            ).first()

    def create_match(self, resume_id: str, jd_id: str, score: float, analysis: Dict[str, Any]) -> Match:
        """Insert a match; if one was stored in the meantime, keep and return that one."""
        try:
            return self._add(Match(
                resume_id=resume_id,
                job_description_id=jd_id,
                score=score,
                analysis=analysis,
            ))
        except IntegrityError:
            existing = self.find_match(resume_id, jd_id)
            if existing is None:
                raise
            logger.info(f"Match for resume={resume_id} jd={jd_id} already stored, keeping first")
            return existing

    # ------------------------------------------------------------------
    # Interview sessions
    # ------------------------------------------------------------------

    def create_session(self, **fields: Any) -> InterviewSession:
        fields.setdefault("exchanges", [])
        fields.setdefault("status", STATUS_IN_PROGRESS)
        return self._add(InterviewSession(**fields))

    def get_session(self, session_id: Optional[str]) -> Optional[InterviewSession]:
        return self._get(InterviewSession, session_id)

    def require_session(self, session_id: str) -> InterviewSession:
        session = self.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    def append_exchange(self, session_id: str, exchanges: List[Dict[str, Any]], exchange: Dict[str, Any], expected_version: int) -> bool:
        """
        Compare-and-swap append.

        Writes exchanges + [exchange] only if the stored version is still
        expected_version. Returns False when another writer got there first.
        """
        stmt = (
            update(InterviewSession)
            .where(InterviewSession.id == session_id)
            .where(InterviewSession.version == expected_version)
            .values(exchanges=list(exchanges) + [exchange], version=expected_version + 1)
        )
        with self._session() as db:
            result = db.execute(stmt)
            db.commit()
            return result.rowcount == 1

    def complete_session(self, session_id: str, overall_score: float, feedback_summary: str) -> InterviewSession:
        """
        Mark a session COMPLETED with its summary fields. Happens once.

        Raises:
            ConflictError: if the session was already completed
        """
        stmt = (
            update(InterviewSession)
            .where(InterviewSession.id == session_id)
            .where(InterviewSession.status == STATUS_IN_PROGRESS)
            .values(
                status=STATUS_COMPLETED,
                overall_score=overall_score,
                feedback_summary=feedback_summary,
                end_time=utcnow(),
                version=InterviewSession.version + 1,
            )
        )
        with self._session() as db:
            result = db.execute(stmt)
            db.commit()
            if result.rowcount != 1:
                raise ConflictError("Interview already completed")
        return self.require_session(session_id)

    # ------------------------------------------------------------------
    # Users and profiles
    # ------------------------------------------------------------------

    def upsert_user(self, email: str, name: Optional[str] = None, image: Optional[str] = None) -> Tuple[User, bool]:
        """Create or update a user by email. Returns (user, created)."""
        try:
            return self._write_user(email, name, image)
        except IntegrityError:
            # the same email was inserted between our read and our write
            logger.info(f"User {email} created concurrently, updating stored row")
            user, _ = self._write_user(email, name, image)
            return user, False

    def _find_user(self, db: Session, email: str) -> Optional[User]:
        return db.exec(select(User).where(User.email == email)).first()

    def _write_user(self, email: str, name: Optional[str], image: Optional[str]) -> Tuple[User, bool]:
        with self._session() as db:
            user = self._find_user(db, email)
            created = user is None
            if created:
                user = User(email=email, name=name, image=image)
            else:
                # missing values keep what is stored
                user.name = name if name is not None else user.name
                user.image = image if image is not None else user.image
            db.add(user)
            db.commit()
            db.refresh(user)
            return user, created

    def first_user(self) -> Optional[User]:
        with self._session() as db:
            return db.exec(select(User).order_by(User.created_at)).first()

    def _find_profile(self, user_id: str) -> Optional[InterviewProfile]:
        with self._session() as db:
            return db.exec(select(InterviewProfile).where(InterviewProfile.user_id == user_id)).first()

    def get_or_create_profile(self, user_id: str) -> InterviewProfile:
        profile = self._find_profile(user_id)
        if profile is not None:
            return profile
        try:
            return self._add(InterviewProfile(user_id=user_id))
        except IntegrityError:
            existing = self._find_profile(user_id)
            if existing is None:
                raise
            logger.info(f"Profile for user {user_id} created concurrently, keeping first")
            return existing

    def update_profile(self, user_id: str, target_role: Optional[str], target_company: Optional[str]) -> InterviewProfile:
        profile = self.get_or_create_profile(user_id)
        with self._session() as db:
            profile = db.get(InterviewProfile, profile.id)
            profile.target_role = target_role
            profile.target_company = target_company
            profile.updated_at = utcnow()
            db.add(profile)
            db.commit()
            db.refresh(profile)
            return profile
