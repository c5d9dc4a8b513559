# schemas.py
"""
Pydantic shapes for everything that crosses a boundary.

- Model results: what each analysis prompt asks the model to return. They are
  lenient on purpose (nulls become empty lists, scores are clamped) because the
  model does not always follow the schema to the letter.
- Request/response bodies for the HTTP surface.

Wire keys are camelCase (the frontend contract); Python attributes are snake_case.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [v if isinstance(v, str) else str(v) for v in value if v is not None]
    return [str(value)]


def _as_dict_list(value: Any) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, (list, tuple)):
        return [v for v in value if isinstance(v, dict)]
    return []


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(str(v) for v in value if v is not None)
    return str(value)


def _clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"score must be a number, got {value!r}")
    return max(0.0, min(100.0, score))


StrList = Annotated[List[str], BeforeValidator(_as_str_list)]
DictList = Annotated[List[Dict[str, Any]], BeforeValidator(_as_dict_list)]
Text = Annotated[str, BeforeValidator(_as_text)]
Score = Annotated[float, BeforeValidator(_clamp_score)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ============================================================================
# Model results
# ============================================================================

class ResumeAnalysis(CamelModel):
    """
    Resume analysis as returned by the model.

    Two shapes exist in the wild: the legacy one with a flat `skills` list and
    the current one with `techSkills`/`softSkills`. Both parse into this model;
    `services.analysis.reconcile_resume_analysis` maps either onto a record.
    """
    ats_score: Optional[float] = None
    strengths: StrList = []
    weaknesses: StrList = []
    keywords: StrList = []
    skills: Optional[List[str]] = None
    tech_skills: Optional[List[str]] = None
    soft_skills: Optional[List[str]] = None
    projects: DictList = []
    work_experience: DictList = []
    leadership: DictList = []
    education: DictList = []
    impact_metrics: StrList = []
    domain: Optional[str] = None
    bullet_points: StrList = []
    rewritten: Optional[str] = None
    comparison_note: Optional[str] = None

    @field_validator("skills", "tech_skills", "soft_skills", mode="before")
    @classmethod
    def _optional_str_list(cls, value):
        # None must survive: it is how the legacy shape is told apart
        return None if value is None else _as_str_list(value)

    @field_validator("ats_score", mode="before")
    @classmethod
    def _optional_score(cls, value):
        return None if value is None else _clamp_score(value)

    @property
    def schema_version(self) -> str:
        if self.tech_skills is None and self.soft_skills is None and self.skills is not None:
            return "legacy"
        return "current"


class JobDescriptionAnalysis(CamelModel):
    title: str = "Unknown"
    company: str = "Unknown"
    required_skills: StrList = []
    preferred_skills: StrList = []
    role_focus: Optional[str] = None
    seniority_level: Optional[str] = None
    hidden_signals: StrList = []

    @field_validator("title", "company", mode="before")
    @classmethod
    def _unknown_if_blank(cls, value):
        if value is None or not str(value).strip():
            return "Unknown"
        return str(value).strip()


class MatchAnalysis(CamelModel):
    score: Score
    missing_skills: StrList = []
    strong_matches: StrList = []
    gap_analysis: Text = ""
    recommendation: Text = ""
    reasoning: Text = ""


class InterviewQuestion(CamelModel):
    question: str
    type: str = "General"
    difficulty: str = "Medium"
    hints: Text = ""
    is_deep_dive: bool = False


class AnswerEvaluation(CamelModel):
    score: Score
    feedback: Text = ""
    improvements: Text = ""
    red_flags: StrList = []


class StarAnalysis(CamelModel):
    has_situation: bool = False
    has_task: bool = False
    has_action: bool = False
    has_result: bool = False
    missing_components: StrList = []
    star_score: Score = 0.0
    rewrite_suggestion: Text = ""


class ResumeRewrite(CamelModel):
    """
    Unstructured mode fills the flat fields; structured mode fills the
    per-section lists. Fields the model did not return stay None.
    """
    rewritten: Optional[str] = None
    bullet_points: Optional[StrList] = None
    keywords: Optional[StrList] = None
    skills: Optional[StrList] = None
    rewritten_full: Optional[str] = None
    work_experience: Optional[DictList] = None
    projects: Optional[DictList] = None
    leadership: Optional[DictList] = None


class CoverLetter(CamelModel):
    cover_letter: str


class TopicScore(CamelModel):
    topic: str
    score: Score


class InterviewReport(CamelModel):
    overall_score: Score
    summary: Text = ""
    strengths: StrList = []
    weaknesses: StrList = []
    readiness_level: Text = ""
    heatmap: List[TopicScore] = []

    @field_validator("heatmap", mode="before")
    @classmethod
    def _heatmap_list(cls, value):
        return _as_dict_list(value)


class JobIntel(CamelModel):
    summary: Text = ""
    job_data: Dict[str, Any] = {}
    requirements: StrList = []
    tech_stack: StrList = []
    example_resume: Text = ""
    resume_suggestions: StrList = []
    tailored_bullets: StrList = []
    gaps: StrList = []

    @field_validator("job_data", mode="before")
    @classmethod
    def _job_data_dict(cls, value):
        return value if isinstance(value, dict) else {}


# ============================================================================
# Interview workflow
# ============================================================================

class Exchange(CamelModel):
    """One answered round, as stored in InterviewSession.exchanges."""
    question: str
    answer: str
    type: str
    feedback: str = ""
    score: float = 0.0
    improvements: str = ""
    red_flags: List[str] = []
    star_analysis: Optional[StarAnalysis] = None
    timestamp: str


class NextQuestion(InterviewQuestion):
    suggested_difficulty: str
    current_round: int
    total_rounds: int
    is_complete: bool = False


class InterviewComplete(CamelModel):
    is_complete: bool = True
    message: str = "Interview Concluded"
    total_rounds: int


class SubmitResult(AnswerEvaluation):
    star_analysis: Optional[StarAnalysis] = None


# ============================================================================
# HTTP request bodies (required fields are checked by hand -> 400)
# ============================================================================

class ResumeRewriteRequest(CamelModel):
    resume_id: Optional[str] = None
    text: Optional[str] = None
    job_description_id: Optional[str] = None


class JobAnalyzeRequest(CamelModel):
    text: Optional[str] = None


class MatchRequest(CamelModel):
    resume_id: Optional[str] = None
    job_description_id: Optional[str] = None


class InterviewInitRequest(CamelModel):
    resume_id: Optional[str] = None
    job_description_id: Optional[str] = None
    type: Optional[str] = None
    difficulty: Optional[str] = None


class SessionRequest(CamelModel):
    session_id: Optional[str] = None


class SubmitRequest(CamelModel):
    session_id: Optional[str] = None
    question: Optional[str] = None
    answer: Optional[str] = None
    type: Optional[str] = None


class CoverLetterRequest(CamelModel):
    resume_id: Optional[str] = None
    job_description_id: Optional[str] = None


class JobIntelRequest(CamelModel):
    job_description: Optional[str] = None
    resume_text: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    target_role: Optional[str] = None
    target_company: Optional[str] = None


class UserSyncRequest(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


# ============================================================================
# HTTP response bodies for stored records
# ============================================================================

class ResumeOut(CamelModel):
    id: str
    created_at: datetime
    filename: str
    content_type: str
    size: int
    raw_text: str
    ats_score: Optional[int] = None
    strengths: List[str] = []
    weaknesses: List[str] = []
    keywords: List[str] = []
    skills: List[str] = []
    tech_skills: List[str] = []
    soft_skills: List[str] = []
    projects: List[Dict[str, Any]] = []
    work_experience: List[Dict[str, Any]] = []
    leadership: List[Dict[str, Any]] = []
    education: List[Dict[str, Any]] = []
    impact_metrics: List[str] = []
    domain: Optional[str] = None
    bullet_points: List[str] = []
    rewritten: Optional[str] = None
    comparison_note: Optional[str] = None


class JobDescriptionOut(CamelModel):
    id: str
    created_at: datetime
    title: str
    company: str
    raw_text: str
    required_skills: List[str] = []
    preferred_skills: List[str] = []
    role_focus: Optional[str] = None
    seniority_level: Optional[str] = None
    hidden_signals: List[str] = []


class MatchOut(CamelModel):
    id: str
    created_at: datetime
    resume_id: str
    job_description_id: str
    score: float
    analysis: Dict[str, Any] = {}


class InterviewSessionOut(CamelModel):
    id: str
    created_at: datetime
    resume_id: str
    job_description_id: str
    company: str
    role: str
    type: str
    difficulty: str
    status: str
    start_time: datetime
    end_time: Optional[datetime] = None
    exchanges: List[Dict[str, Any]] = []
    overall_score: Optional[float] = None
    feedback_summary: Optional[str] = None
    version: int


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


class ProfileOut(CamelModel):
    id: str
    user_id: str
    target_role: Optional[str] = None
    target_company: Optional[str] = None
    created_at: datetime
    updated_at: datetime
