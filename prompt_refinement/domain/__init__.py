"""
Domain Layer - Refinement Data Models

Defines the Session, Iteration and Feedback records of a refinement
thread, along with the version numbering constants.
"""

from prompt_refinement.domain.models import (
    CLIENT_FEEDBACK,
    FIRST_STORED_ITERATION_NUMBER,
    ORIGINAL_ITERATION_NUMBER,
    GenerationMetadata,
    IterationType,
    PromptFeedback,
    PromptIteration,
    RefinementSession,
    SessionStatus,
)

__all__ = [
    "CLIENT_FEEDBACK",
    "FIRST_STORED_ITERATION_NUMBER",
    "ORIGINAL_ITERATION_NUMBER",
    "GenerationMetadata",
    "IterationType",
    "PromptFeedback",
    "PromptIteration",
    "RefinementSession",
    "SessionStatus",
]
