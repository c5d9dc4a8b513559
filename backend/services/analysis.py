# backend/services/analysis.py
"""
Analysis Services

One method per model-backed operation. Each builds its prompt from
prompts.PromptTemplates, goes through the ModelGateway and returns the
typed result from schemas.py. No state is kept between calls.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from prompts import PromptTemplates, truncate, RESUME_TEXT_LIMIT, JD_CONTEXT_LIMIT, JD_ANALYSIS_LIMIT
from schemas import (
    ResumeAnalysis,
    JobDescriptionAnalysis,
    MatchAnalysis,
    InterviewQuestion,
    AnswerEvaluation,
    StarAnalysis,
    ResumeRewrite,
    CoverLetter,
    InterviewReport,
    JobIntel
)
from services.model_gateway import Attachment, ModelGateway

logger = logging.getLogger(__name__)


def reconcile_resume_analysis(analysis: ResumeAnalysis) -> Dict[str, Any]:
    """
    Map either resume-analysis shape onto Resume record fields.

    `skills` prefers techSkills and falls back to the legacy flat list.
    """
    if analysis.tech_skills is not None:
        skills = analysis.tech_skills
    elif analysis.skills is not None:
        skills = analysis.skills
    else:
        skills = []

    return {
        "ats_score": round(analysis.ats_score) if analysis.ats_score is not None else None,
        "strengths": analysis.strengths,
        "weaknesses": analysis.weaknesses,
        "keywords": analysis.keywords,
        "skills": list(skills),
        "tech_skills": analysis.tech_skills or [],
        "soft_skills": analysis.soft_skills or [],
        "projects": analysis.projects,
        "work_experience": analysis.work_experience,
        "leadership": analysis.leadership,
        "education": analysis.education,
        "impact_metrics": analysis.impact_metrics,
        "domain": analysis.domain,
        "bullet_points": analysis.bullet_points,
        "rewritten": analysis.rewritten,
        "comparison_note": analysis.comparison_note,
    }


def is_structured_resume(resume_data: Any) -> bool:
    """Structured rewrite mode applies when per-section data is available."""
    return isinstance(resume_data, dict) and bool(
        resume_data.get("workExperience") or resume_data.get("projects")
    )


class AnalysisService:
    """
    Model-backed analyses used by the HTTP layer and the interview orchestrator.

    Dependencies:
    - ModelGateway: transport, retry and JSON contract
    """

    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    def _generate(self, parts, schema):
        return self.gateway.generate(parts, schema, system=PromptTemplates.SYSTEM)

    def analyze_resume(self, attachment: Optional[Attachment], raw_text: str) -> ResumeAnalysis:
        parts: List[Any] = [PromptTemplates.resume_analysis()]
        if attachment is not None:
            parts.append(attachment)
        parts.append(PromptTemplates.resume_text(raw_text))

        result = self._generate(parts, ResumeAnalysis)
        logger.info(f"Resume analyzed: schema={result.schema_version}, atsScore={result.ats_score}")
        return result

    def analyze_job_description(self, text: str) -> JobDescriptionAnalysis:
        result = self._generate([PromptTemplates.job_description_analysis(text)], JobDescriptionAnalysis)
        logger.info(f"JD analyzed: title={result.title}, company={result.company}, required={len(result.required_skills)}")
        return result

    def score_match(self, resume_context: Dict[str, Any], jd_context: Dict[str, Any]) -> MatchAnalysis:
        return self._generate([PromptTemplates.match(resume_context, jd_context)], MatchAnalysis)

    def generate_question(
        self,
        resume_context: Dict[str, Any],
        jd_context: Dict[str, Any],
        history: List[Dict[str, Any]],
        current_type: str,
        suggested_difficulty: str
    ) -> InterviewQuestion:
        prompt = PromptTemplates.next_question(
            resume_context, jd_context, history, current_type, suggested_difficulty
        )
        return self._generate([prompt], InterviewQuestion)

    def evaluate_answer(self, question: str, answer: str, question_type: str) -> AnswerEvaluation:
        return self._generate([PromptTemplates.answer_evaluation(question, answer, question_type)], AnswerEvaluation)

    def analyze_star(self, question: str, answer: str) -> StarAnalysis:
        return self._generate([PromptTemplates.star_analysis(question, answer)], StarAnalysis)

    def rewrite_resume(
        self,
        resume_data: Union[str, Dict[str, Any]],
        jd_context: Optional[Dict[str, Any]] = None
    ) -> ResumeRewrite:
        """
        Rewrite a resume given as raw text or as stored record data.

        Record data with work experience or projects gets the per-section
        rewrite, which must keep item and bullet counts.
        """
        structured = is_structured_resume(resume_data)
        structured_input = None
        if structured:
            structured_input = {
                "workExperience": resume_data.get("workExperience") or [],
                "projects": resume_data.get("projects") or [],
                "leadership": resume_data.get("leadership") or [],
            }

        parts = [
            PromptTemplates.rewrite(structured, structured_input, jd_context),
            PromptTemplates.resume_content(resume_data),
        ]
        logger.info(f"Rewriting resume: structured={structured}, targeted={jd_context is not None}")
        return self._generate(parts, ResumeRewrite)

    def generate_cover_letter(self, resume_context: Dict[str, Any], jd_context: Optional[Dict[str, Any]]) -> CoverLetter:
        target = jd_context or PromptTemplates.DEFAULT_COVER_LETTER_TARGET
        return self._generate([PromptTemplates.cover_letter(resume_context, target)], CoverLetter)

    def generate_report(self, history: List[Dict[str, Any]], interview_type: str) -> InterviewReport:
        return self._generate([PromptTemplates.interview_report(history, interview_type)], InterviewReport)

    def job_intel(self, job_description: str, resume_text: Optional[str] = None) -> JobIntel:
        return self._generate([PromptTemplates.job_intel(job_description, resume_text)], JobIntel)


# ============================================================================
# Context builders: what each prompt gets to see of the stored records
# ============================================================================

def resume_match_context(resume) -> Dict[str, Any]:
    return {
        "skills": list(resume.tech_skills or []) + list(resume.soft_skills or []),
        "projects": resume.projects or [],
        "experience": resume.bullet_points or [],
    }


def jd_match_context(jd) -> Dict[str, Any]:
    return {
        "title": jd.title,
        "required": jd.required_skills or [],
        "roleFocus": jd.role_focus,
        "signals": jd.hidden_signals or [],
        "text": truncate(jd.raw_text, JD_ANALYSIS_LIMIT),
    }


def resume_interview_context(resume) -> Dict[str, Any]:
    return {
        "skills": resume.tech_skills or [],
        "projects": resume.projects or [],
        "impactMetrics": resume.impact_metrics or [],
        "workExperience": resume.work_experience or [],
    }


def jd_interview_context(jd) -> Dict[str, Any]:
    return {
        "role": jd.title,
        "focus": jd.role_focus,
        "level": jd.seniority_level,
        "required": jd.required_skills or [],
    }


def resume_rewrite_data(resume) -> Dict[str, Any]:
    return {
        "rawText": truncate(resume.raw_text, RESUME_TEXT_LIMIT),
        "summary": resume.rewritten,
        "skills": resume.skills or [],
        "bulletPoints": resume.bullet_points or [],
        "workExperience": resume.work_experience or [],
        "projects": resume.projects or [],
        "leadership": resume.leadership or [],
    }


def jd_rewrite_context(jd) -> Dict[str, Any]:
    return {
        "title": jd.title,
        "required": jd.required_skills or [],
        "roleFocus": jd.role_focus,
        "text": truncate(jd.raw_text, JD_CONTEXT_LIMIT),
    }


def resume_cover_letter_context(resume) -> Dict[str, Any]:
    return {
        # no parsed candidate name; the filename stands in
        "name": resume.filename,
        "skills": list(resume.tech_skills or []) + list(resume.soft_skills or []),
        "highlights": resume.impact_metrics or [],
        "experience": (resume.bullet_points or [])[:5],
    }


def jd_cover_letter_context(jd) -> Dict[str, Any]:
    return {
        "title": jd.title,
        "company": jd.company,
        "text": truncate(jd.raw_text, JD_CONTEXT_LIMIT),
    }
