"""
Test suite for the Analysis Services

Covers resume-analysis reconciliation (legacy vs current shape), rewrite
mode selection, prompt contents the services are responsible for, and the
context builders that decide what the model sees of stored records.

Run tests with: pytest backend/tests/test_analysis.py -v
"""

import os
import sys

import pytest

# Add backend directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from models import JobDescription
from prompts import JD_ANALYSIS_LIMIT, JD_CONTEXT_LIMIT
from schemas import ResumeAnalysis
from services.analysis import (
    is_structured_resume,
    jd_match_context,
    jd_rewrite_context,
    reconcile_resume_analysis,
    resume_rewrite_data
)
from services.model_gateway import Attachment


# ============================================================================
# TEST CASES - Resume analysis reconciliation
# ============================================================================

class TestReconcileResumeAnalysis:

    def test_legacy_skills_used_when_tech_skills_missing(self):
        analysis = ResumeAnalysis.model_validate({"atsScore": 64, "skills": ["Go"]})

        fields = reconcile_resume_analysis(analysis)

        assert analysis.schema_version == "legacy"
        assert fields["skills"] == ["Go"]
        assert fields["tech_skills"] == []
        assert fields["soft_skills"] == []

    def test_tech_skills_preferred_over_legacy(self):
        analysis = ResumeAnalysis.model_validate({
            "skills": ["Go"],
            "techSkills": ["Rust", "Kafka"],
            "softSkills": ["Ownership"],
        })

        fields = reconcile_resume_analysis(analysis)

        assert analysis.schema_version == "current"
        assert fields["skills"] == ["Rust", "Kafka"]
        assert fields["soft_skills"] == ["Ownership"]

    def test_empty_tech_skills_still_wins(self):
        """An explicit empty techSkills list is the current shape, not a missing field."""
        analysis = ResumeAnalysis.model_validate({"skills": ["Go"], "techSkills": []})

        assert reconcile_resume_analysis(analysis)["skills"] == []

    def test_no_skills_at_all(self):
        fields = reconcile_resume_analysis(ResumeAnalysis.model_validate({}))

        assert fields["skills"] == []
        assert fields["ats_score"] is None

    def test_ats_score_rounded_and_clamped(self):
        assert reconcile_resume_analysis(ResumeAnalysis.model_validate({"atsScore": 78.6}))["ats_score"] == 79
        assert reconcile_resume_analysis(ResumeAnalysis.model_validate({"atsScore": 130}))["ats_score"] == 100

    def test_lenient_lists(self):
        analysis = ResumeAnalysis.model_validate({
            "strengths": "Clear layout",
            "projects": [{"name": "Ledger"}, "stray string", None],
            "impactMetrics": None,
        })

        assert analysis.strengths == ["Clear layout"]
        assert analysis.projects == [{"name": "Ledger"}]
        assert analysis.impact_metrics == []


# ============================================================================
# TEST CASES - AnalysisService
# ============================================================================

class TestAnalyzeResume:

    def test_attachment_and_text_sent(self, analysis, fake_gateway):
        pdf = Attachment("cv.pdf", "application/pdf", b"%PDF")

        result = analysis.analyze_resume(pdf, "Jane Doe")

        parts = fake_gateway.calls_for("ResumeAnalysis")[0]
        assert pdf in parts
        assert parts[-1] == "RESUME_TEXT:\nJane Doe"
        assert result.tech_skills == ["Python", "FastAPI", "PostgreSQL"]

    def test_resume_text_truncated(self, analysis, fake_gateway):
        analysis.analyze_resume(None, "x" * 9000)

        parts = fake_gateway.calls_for("ResumeAnalysis")[0]
        assert parts[-1] == "RESUME_TEXT:\n" + "x" * 8000


class TestRewriteResume:

    def test_structured_mode_for_record_with_sections(self, analysis, fake_gateway, resume):
        analysis.rewrite_resume(resume_rewrite_data(resume))

        prompt = fake_gateway.calls_for("ResumeRewrite")[0][0]
        assert "Keep EXACTLY the same number of items" in prompt
        assert "Globex" in prompt
        assert "TARGET JOB DESCRIPTION" not in prompt

    def test_unstructured_mode_for_plain_text(self, analysis, fake_gateway):
        analysis.rewrite_resume("Jane Doe, backend engineer")

        prompt, content = fake_gateway.calls_for("ResumeRewrite")[0]
        assert "rewrittenFull" in prompt
        assert "Keep EXACTLY" not in prompt
        assert content == "RESUME_CONTENT:\nJane Doe, backend engineer"

    def test_record_with_empty_sections_is_unstructured(self):
        assert not is_structured_resume({"workExperience": [], "projects": []})
        assert not is_structured_resume("plain text")
        assert is_structured_resume({"projects": [{"name": "Ledger"}]})

    def test_job_context_adds_tailoring(self, analysis, fake_gateway, job_description):
        analysis.rewrite_resume("Jane Doe", jd_rewrite_context(job_description))

        prompt = fake_gateway.calls_for("ResumeRewrite")[0][0]
        assert "TARGET JOB DESCRIPTION" in prompt
        assert "Senior Backend Engineer" in prompt


class TestOtherServices:

    def test_cover_letter_default_target(self, analysis, fake_gateway):
        result = analysis.generate_cover_letter({"name": "cv.pdf"}, None)

        prompt = fake_gateway.calls_for("CoverLetter")[0][0]
        assert '"Software Engineer"' in prompt
        assert '"Hiring Team"' in prompt
        assert result.cover_letter.startswith("# Dear Hiring Team")

    def test_job_intel_without_resume(self, analysis, fake_gateway):
        result = analysis.job_intel("Backend role, Python")

        prompt = fake_gateway.calls_for("JobIntel")[0][0]
        assert "Candidate Resume" not in prompt
        assert result.tech_stack == ["Python", "PostgreSQL", "Kubernetes"]

    def test_job_description_blank_company_is_unknown(self, analysis, fake_gateway):
        fake_gateway.responses["JobDescriptionAnalysis"] = {"title": "", "company": None}

        result = analysis.analyze_job_description("Some role")

        assert result.title == "Unknown"
        assert result.company == "Unknown"


# ============================================================================
# TEST CASES - Context builders
# ============================================================================

class TestContextBuilders:

    @pytest.fixture
    def long_jd(self):
        return JobDescription(title="SRE", company="Acme", raw_text="y" * 6000)

    def test_match_context_truncates_to_analysis_limit(self, long_jd):
        assert len(jd_match_context(long_jd)["text"]) == JD_ANALYSIS_LIMIT

    def test_rewrite_context_truncates_to_context_limit(self, long_jd):
        assert len(jd_rewrite_context(long_jd)["text"]) == JD_CONTEXT_LIMIT
