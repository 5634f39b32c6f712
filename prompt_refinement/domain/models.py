"""
Domain Layer - Refinement Data Models

Defines the refinement thread for one artifact (the Session), its
append-only version history (Iterations) and the client notes that
drove each refinement attempt (Feedback).

Version numbering is explicit: the original prompt is version 1 and is
never stored as a row, so the first stored Iteration is version 2.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

ORIGINAL_ITERATION_NUMBER = 1
FIRST_STORED_ITERATION_NUMBER = ORIGINAL_ITERATION_NUMBER + 1

CLIENT_FEEDBACK = "client_feedback"


class SessionStatus(str, Enum):
    """
    Only ACTIVE is ever assigned here. Transitions are left to the integrating system.
    """
    ACTIVE = "active"


class IterationType(str, Enum):
    """
    ORIGINAL: the implicit version 1 (the session's original prompt). Never stored.
    AI_REFINED: produced by the refinement engine from client feedback.
    MANUAL_EDIT: a caller-supplied replacement prompt.
    """
    ORIGINAL = "original"
    AI_REFINED = "ai_refined"
    MANUAL_EDIT = "manual_edit"


class GenerationMetadata(BaseModel):
    """Audit snapshot taken when an Iteration is created. Never recomputed."""
    feedback: Optional[str] = None
    original_prompt: str
    previous_prompt: str
    refined_at: datetime


class RefinementSession(BaseModel):
    id: str
    post_id: Optional[str] = None
    content_idea_id: Optional[str] = None
    original_prompt: str
    current_prompt: str
    # Stored as-is so statuses set by the integrating system survive a read
    status: str = SessionStatus.ACTIVE.value
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PromptIteration(BaseModel):
    id: str
    session_id: str
    iteration_number: int = Field(..., ge=FIRST_STORED_ITERATION_NUMBER)
    prompt_text: str
    iteration_type: IterationType
    ai_confidence: float = Field(..., ge=0.0, le=1.0)
    generation_metadata: GenerationMetadata
    created_at: datetime

    @property
    def is_manual_edit(self) -> bool:
        return self.iteration_type == IterationType.MANUAL_EDIT


class PromptFeedback(BaseModel):
    id: str
    session_id: str
    feedback_type: str = CLIENT_FEEDBACK
    feedback_text: str
    ai_suggested_prompt: str
    feedback_author: Optional[str] = None
    created_at: datetime
