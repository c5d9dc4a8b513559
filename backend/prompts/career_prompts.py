# backend/prompts/career_prompts.py
"""
Career Prep Prompt Templates

Every template spells out the exact JSON shape expected back; the matching
pydantic models live in schemas.py.

Usage:
    from prompts.career_prompts import PromptTemplates

    prompt = PromptTemplates.answer_evaluation(
        question="Tell me about a time you disagreed with your manager.",
        answer="...",
        question_type="Behavioral"
    )
"""

import json
from typing import Any, Dict, List, Optional


RESUME_TEXT_LIMIT = 8000
JD_CONTEXT_LIMIT = 3000
JD_ANALYSIS_LIMIT = 5000


def truncate(text: Optional[str], limit: int) -> str:
    """Clip long inputs to a fixed character budget before they go in a prompt."""
    text = text or ""
    return text if len(text) <= limit else text[:limit]


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class PromptTemplates:
    """
    Static class containing all prompt templates for the analysis services.

    All methods are static and return prompt strings ready for the gateway.
    """

    SYSTEM = (
        "You are an expert career coach, technical recruiter and interview bar raiser. "
        "You must return STRICT JSON ONLY (no prose, no markdown) following the given schema."
    )

    # Default target when a cover letter is requested without a job description
    DEFAULT_COVER_LETTER_TARGET = {"title": "Software Engineer", "company": "Hiring Team"}

    @staticmethod
    def resume_analysis() -> str:
        return """
You are a senior hiring manager and resume strategist. Analyze the attached resume
(its extracted text follows as RESUME_TEXT) and respond in strict JSON.
Pull out quantifiable impact, separate hard skills from soft skills, and structure
the project, work and leadership history.

Return ONLY JSON with this shape:
{
  "atsScore": number,            // 0-100 ATS readiness
  "strengths": [string],
  "weaknesses": [string],
  "techSkills": [string],        // languages, frameworks, tools
  "softSkills": [string],        // leadership, communication, ...
  "keywords": [string],          // high-value keywords present
  "projects": [{"name": string, "tech": string, "description": string, "impact": string}],
  "workExperience": [{"role": string, "company": string, "duration": string, "description": string}],
  "leadership": [{"role": string, "organization": string, "duration": string, "description": string}],
  "education": [{"degree": string, "school": string, "year": string}],
  "impactMetrics": [string],     // e.g. "Cut p99 latency by 40%"
  "domain": string,              // Backend, Frontend, Full Stack, ML, DevOps, ...
  "bulletPoints": [string],      // the 3 strongest bullets found
  "rewritten": string,           // 3-4 line professional summary
  "comparisonNote": string       // one sentence on level (Entry / Senior / Staff)
}
Find metrics even when they are buried in prose.
""".strip()

    @staticmethod
    def resume_text(raw_text: str) -> str:
        return f"RESUME_TEXT:\n{truncate(raw_text, RESUME_TEXT_LIMIT)}"

    @staticmethod
    def job_description_analysis(text: str) -> str:
        return f"""
You are an expert technical recruiter. Extract the hiring signals from this job description.

Return ONLY JSON with this shape:
{{
  "title": string,               // job title
  "company": string,             // company name, "Unknown" if it cannot be inferred
  "requiredSkills": [string],    // must-have technical skills
  "preferredSkills": [string],   // nice-to-have skills
  "roleFocus": string,           // Backend, AI/ML, Frontend, System Design, Product, ...
  "seniorityLevel": string,      // Junior, Senior, Staff, Principal
  "hiddenSignals": [string]      // cultural/operational signals: "Fast-paced", "On-call", ...
}}

JOB_DESCRIPTION:
{truncate(text, JD_ANALYSIS_LIMIT)}
""".strip()

    @staticmethod
    def match(resume_context: Dict[str, Any], jd_context: Dict[str, Any]) -> str:
        return f"""
You are a hiring manager. Score this candidate against the job description.
Match on meaning, not just keywords.

Resume: {to_json(resume_context)}
Job Description: {to_json(jd_context)}

Return ONLY JSON with this shape:
{{
  "score": number,               // 0-100, be strict: 80+ is a strong hire signal
  "missingSkills": [string],
  "strongMatches": [string],
  "gapAnalysis": string,         // 2-3 sentences on what is missing
  "recommendation": string,      // "Apply Now", "Tailor Resume" or "Not a Fit"
  "reasoning": string
}}
""".strip()

    @staticmethod
    def next_question(
        resume_context: Dict[str, Any],
        jd_context: Dict[str, Any],
        history: List[Dict[str, Any]],
        current_type: str,
        suggested_difficulty: str
    ) -> str:
        if history:
            history_block = f"History: {to_json(history)}"
        else:
            history_block = (
                "This is the START of the interview. Open with a strong behavioral "
                "or resume-based deep-dive question."
            )

        return f"""
You are an interview bar raiser running an adaptive interview.

When the resume claims specific metrics or achievements, ask deep-dive follow-ups
that probe them: how it was measured, what the baseline was, what the technical
approach was.

Step 1: Read the conversation so far.
{history_block}

Step 2: Ask the NEXT question.
Current Focus: {current_type}
Suggested Difficulty: {suggested_difficulty}

Candidate Skills: {to_json(resume_context.get("skills") or [])}
Candidate Projects: {to_json(resume_context.get("projects") or [])}
Candidate Metrics: {to_json(resume_context.get("impactMetrics") or [])}
Candidate Work Experience: {to_json(resume_context.get("workExperience") or [])}
Target Job: {to_json(jd_context)}

Rules:
- Weak or vague previous answers: drill down or simplify.
- Strong previous answers: raise the difficulty or move to a new topic.
- Match the suggested difficulty level: {suggested_difficulty}

Return ONLY JSON with this shape:
{{
  "question": string,
  "type": string,                // "Behavioral", "Technical", "System Design", "Resume Deep-Dive"
  "difficulty": string,          // "Easy", "Medium", "Hard"
  "hints": string,
  "isDeepDive": boolean          // true if the question probes a specific resume claim
}}
""".strip()

    @staticmethod
    def answer_evaluation(question: str, answer: str, question_type: str) -> str:
        return f"""
You are an interview bar raiser. Evaluate this answer.

Question ({question_type}): "{question}"
Candidate Answer: "{answer}"

Criteria:
1. Clarity and structure (STAR for behavioral questions)
2. Technical accuracy
3. Depth of knowledge

Return ONLY JSON with this shape:
{{
  "score": number,               // 0-100
  "feedback": string,            // 2-3 sentences of constructive feedback
  "improvements": string,        // "Better way to say this: ..."
  "redFlags": [string]           // warning signs, e.g. "Blame", "Vague"
}}
""".strip()

    @staticmethod
    def star_analysis(question: str, answer: str) -> str:
        return f"""
You are a behavioral interview coach. Check this answer against the STAR framework.

Question: "{question}"
Answer: "{answer}"

1. SITUATION: is the context described (who, what, when, where)?
2. TASK: is the challenge or responsibility explained?
3. ACTION: are the candidate's own actions detailed ("I", not "we")?
4. RESULT: is the outcome quantified?

Mark a component missing if it is vague or only implied.

Return ONLY JSON with this shape:
{{
  "hasSituation": boolean,
  "hasTask": boolean,
  "hasAction": boolean,
  "hasResult": boolean,
  "missingComponents": [string], // e.g. ["Result", "Situation"]
  "starScore": number,           // 0-100, 25 points per component present
  "rewriteSuggestion": string    // STAR-compliant version in 2-3 sentences
}}
""".strip()

    @staticmethod
    def rewrite(structured: bool, structured_input: Optional[Dict[str, Any]], jd_context: Optional[Dict[str, Any]]) -> str:
        if structured:
            prompt = f"""
You are a resume strategist. Rewrite each section of the resume so it can be shown
side by side with the original.

Rules:
1. Keep EXACTLY the same number of items (jobs, projects, roles) as the input.
2. Keep the same number of bullets per item, each one stronger (action + impact + metric).
3. If a job description is given, tailor every bullet to it.

Input Data:
{to_json(structured_input or {})}

Return ONLY JSON with this shape:
{{
  "rewritten": string,           // professional summary
  "workExperience": [{{"role": string, "company": string, "duration": string, "description": string, "bullets": [string]}}],
  "projects": [{{"name": string, "tech": string, "description": string, "bullets": [string]}}],
  "leadership": [{{"role": string, "organization": string, "bullets": [string]}}]
}}
""".strip()
        else:
            prompt = """
You are a resume rewriting assistant. Rewrite the resume content to be concise,
ATS-friendly and quantified where possible.

Return ONLY JSON with this shape:
{
  "rewritten": string,           // short summary/profile rewrite
  "bulletPoints": [string],      // optimized bullet points
  "keywords": [string],          // high-impact keywords
  "skills": [string],
  "rewrittenFull": string        // full text rewrite
}
""".strip()

        if jd_context:
            prompt += f"""

TARGET JOB DESCRIPTION:
{to_json(jd_context)}

Tailoring:
1. Work keywords from the job description into the bullet points.
2. Swap weak verbs for strong ones that fit the role's level ("Helped" -> "Architected")."""

        return prompt

    @staticmethod
    def resume_content(resume_data: Any) -> str:
        if isinstance(resume_data, str):
            return f"RESUME_CONTENT:\n{truncate(resume_data, RESUME_TEXT_LIMIT)}"
        return f"RESUME_CONTENT:\n{to_json(resume_data)}"

    @staticmethod
    def cover_letter(resume_context: Dict[str, Any], jd_context: Dict[str, Any]) -> str:
        return f"""
You are an expert career coach. Write a compelling cover letter for this candidate
targeting this job.

Candidate Profile:
{to_json(resume_context)}

Target Job:
{to_json(jd_context)}

Tone: professional, confident, enthusiastic.
Format: Markdown, structured as
1. Header (placeholder contact info)
2. Hook tying the candidate's domain to the company's mission
3. Why me: 2-3 concrete resume achievements mapped to the job requirements
4. Why you: what draws the candidate to the company and product
5. Call to action

Return ONLY JSON with this shape:
{{
  "coverLetter": string          // the full markdown letter
}}
""".strip()

    @staticmethod
    def interview_report(history: List[Dict[str, Any]], interview_type: str) -> str:
        return f"""
You are a hiring committee. Write the final report for this mock interview.

Interview Type: {interview_type}
Conversation History:
{to_json(history)}

Goal: judge whether the candidate is ready for a real interview loop.

Return ONLY JSON with this shape:
{{
  "overallScore": number,        // 0-100
  "summary": string,             // executive summary of the performance
  "strengths": [string],
  "weaknesses": [string],
  "readinessLevel": string,      // "High", "Medium", "Low"
  "heatmap": [                   // score per topic
    {{"topic": "Communication", "score": number}},
    {{"topic": "Technical Depth", "score": number}},
    {{"topic": "Problem Solving", "score": number}}
  ]
}}
""".strip()

    @staticmethod
    def job_intel(job_description: str, resume_text: Optional[str] = None) -> str:
        resume_block = ""
        if resume_text:
            resume_block = f'\nCandidate Resume:\n"""\n{truncate(resume_text, RESUME_TEXT_LIMIT)}\n"""\n'

        return f"""
You are an interview and ATS expert. Given a job description and optionally a
candidate resume, return a concise briefing.

Job Description:
\"\"\"
{truncate(job_description, JD_ANALYSIS_LIMIT)}
\"\"\"
{resume_block}
Return ONLY JSON with this shape:
{{
  "summary": string,             // one-sentence overview of the role
  "jobData": object,             // title, company, location, level, employmentType, compensation, team/stack when present
  "requirements": [string],      // the 5-8 most critical requirements
  "techStack": [string],         // tools, languages, frameworks, clouds
  "exampleResume": string,       // tailored resume snippet with bullets
  "resumeSuggestions": [string], // only with a resume: 5-8 targeted changes
  "tailoredBullets": [string],   // only with a resume: 3-6 rewrites aligned to the role
  "gaps": [string]               // only with a resume: 3-6 missing proof points
}}
""".strip()
