# backend/services/interview_orchestrator.py
"""
Interview Orchestrator Service

Runs the mock-interview loop: init -> next -> submit -> ... -> results.

The only state a session carries is its exchange list; the current round is
len(exchanges). Every step re-reads the session from the store, so nothing is
cached in process and sessions survive restarts.

Completion is split across two steps: `next` reports that the round limit
was reached, `results` is what marks the session COMPLETED.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any, Union

from errors import ConflictError, NotFoundError
from models import InterviewSession, STATUS_COMPLETED
from schemas import (
    Exchange,
    InterviewComplete,
    InterviewReport,
    NextQuestion,
    StarAnalysis,
    SubmitResult
)
from services.analysis import AnalysisService, resume_interview_context, jd_interview_context
from services.session_store import SessionStore

logger = logging.getLogger(__name__)


MAX_ROUNDS = 5
DEFAULT_TYPE = "SCREENING"
DEFAULT_DIFFICULTY = "MEDIUM"
DEFAULT_QUESTION_TYPE = "General"

# Question types whose answers also get a STAR completeness check
STAR_TYPES = {"Behavioral", "Resume Deep-Dive"}

# Compare-and-swap attempts when appending an exchange
APPEND_ATTEMPTS = 3


def suggest_difficulty(scores: List[Optional[float]]) -> str:
    """
    Pick the next question's difficulty from the running average score.

    Missing scores count as 0; with no prior answers the average is 50.

    Returns:
        "HARD" if average >= 80, "EASY" if average < 50, else "MEDIUM"
    """
    values = [s or 0 for s in scores]
    average = sum(values) / len(values) if values else 50

    if average >= 80:
        return "HARD"
    if average < 50:
        return "EASY"
    return "MEDIUM"


class InterviewOrchestrator:
    """
    Coordinates the session lifecycle over the store and the analysis services.

    Dependencies:
    - SessionStore: reads and writes sessions, resumes and job descriptions
    - AnalysisService: question generation, answer evaluation, STAR check, report
    """

    def __init__(self, store: SessionStore, analysis: AnalysisService, max_rounds: int = MAX_ROUNDS):
        self.store = store
        self.analysis = analysis
        self.max_rounds = max_rounds

    def init_session(
        self,
        resume_id: str,
        jd_id: str,
        interview_type: Optional[str] = None,
        difficulty: Optional[str] = None
    ) -> InterviewSession:
        """
        Create an IN_PROGRESS session with no exchanges.

        Raises:
            NotFoundError: if the resume or job description does not exist
        """
        _, jd = self.store.require_resume_and_job(resume_id, jd_id)

        session = self.store.create_session(
            resume_id=resume_id,
            job_description_id=jd_id,
            company=jd.company,
            role=jd.title,
            type=interview_type or DEFAULT_TYPE,
            difficulty=difficulty or DEFAULT_DIFFICULTY,
        )
        logger.info(f"Interview session {session.id} started: type={session.type}, role={session.role}")
        return session

    def next_question(self, session_id: str) -> Union[NextQuestion, InterviewComplete]:
        """
        Generate the next question, or report that the interview is over
        (round limit reached or results already produced).

        Nothing is persisted here; a question only lands in the session once
        it is answered through submit_answer.
        """
        session = self.store.require_session(session_id)
        if session.status == STATUS_COMPLETED:
            logger.info(f"Session {session_id} already completed")
            return InterviewComplete(total_rounds=self.max_rounds)

        resume = self.store.get_resume(session.resume_id)
        jd = self.store.get_job_description(session.job_description_id)
        if resume is None or jd is None:
            raise NotFoundError("Context data missing")

        exchanges = session.exchanges or []
        current_round = len(exchanges)

        if current_round >= self.max_rounds:
            logger.info(f"Session {session_id} reached {self.max_rounds} rounds")
            return InterviewComplete(total_rounds=self.max_rounds)

        suggested = suggest_difficulty([ex.get("score") for ex in exchanges])
        logger.info(f"Session {session_id} round {current_round + 1}: suggested difficulty {suggested}")

        question = self.analysis.generate_question(
            resume_interview_context(resume),
            jd_interview_context(jd),
            exchanges,
            session.type,
            suggested,
        )

        return NextQuestion(
            **question.model_dump(),
            suggested_difficulty=suggested,
            current_round=current_round + 1,
            total_rounds=self.max_rounds,
        )

    def submit_answer(
        self,
        session_id: str,
        question: str,
        answer: str,
        question_type: Optional[str] = None
    ) -> SubmitResult:
        """
        Evaluate an answer and append exactly one Exchange to the session.

        A failed evaluation aborts with nothing appended. A failed STAR check
        is logged and the exchange is stored with star_analysis=None.

        Raises:
            NotFoundError: unknown session (checked before any model call)
            ConflictError: session is completed or already has max_rounds exchanges
            ModelGatewayError: the evaluation call failed
        """
        session = self.store.require_session(session_id)
        self._check_open(session)

        question_type = question_type or DEFAULT_QUESTION_TYPE
        evaluation = self.analysis.evaluate_answer(question, answer, question_type)

        star_analysis: Optional[StarAnalysis] = None
        if question_type in STAR_TYPES:
            try:
                star_analysis = self.analysis.analyze_star(question, answer)
            except Exception:
                logger.exception(f"STAR analysis failed for session {session_id}, continuing without it")

        exchange = Exchange(
            question=question,
            answer=answer,
            type=question_type,
            feedback=evaluation.feedback,
            score=evaluation.score,
            improvements=evaluation.improvements,
            red_flags=evaluation.red_flags,
            star_analysis=star_analysis,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._append(session, exchange.to_wire())

        return SubmitResult(**evaluation.model_dump(), star_analysis=star_analysis)

    def results(self, session_id: str) -> InterviewReport:
        """
        Generate the final report and mark the session COMPLETED.

        Raises:
            NotFoundError: unknown session
            ConflictError: no answered rounds yet, or already completed
        """
        session = self.store.require_session(session_id)
        if session.status == STATUS_COMPLETED:
            raise ConflictError("Interview already completed")
        if not session.exchanges:
            raise ConflictError("No answers submitted yet")

        report = self.analysis.generate_report(session.exchanges, session.type)
        self.store.complete_session(session_id, report.overall_score, report.summary)

        logger.info(f"Session {session_id} completed: overallScore={report.overall_score}")
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_open(self, session: InterviewSession) -> None:
        if session.status == STATUS_COMPLETED:
            raise ConflictError("Interview already completed")
        if len(session.exchanges or []) >= self.max_rounds:
            raise ConflictError(f"Interview already has {self.max_rounds} answers")

    def _append(self, session: InterviewSession, exchange: Dict[str, Any]) -> None:
        """
        Append with compare-and-swap on the session version.

        On a lost race the session is re-read and the same exchange is
        appended to the fresh list; the model is not called again.
        """
        for attempt in range(APPEND_ATTEMPTS):
            if self.store.append_exchange(session.id, session.exchanges or [], exchange, session.version):
                return

            logger.warning(
                f"Concurrent update on session {session.id} "
                f"(Attempt {attempt + 1}/{APPEND_ATTEMPTS}), re-reading"
            )
            session = self.store.require_session(session.id)
            self._check_open(session)

        raise ConflictError("Session was updated concurrently, please retry")
