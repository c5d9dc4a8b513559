# backend/prompts/__init__.py
"""
Prompts Package

Contains the LLM prompt templates used by the analysis services.
"""

from .career_prompts import (
    PromptTemplates,
    truncate,
    RESUME_TEXT_LIMIT,
    JD_CONTEXT_LIMIT,
    JD_ANALYSIS_LIMIT
)

__all__ = [
    "PromptTemplates",
    "truncate",
    "RESUME_TEXT_LIMIT",
    "JD_CONTEXT_LIMIT",
    "JD_ANALYSIS_LIMIT"
]
