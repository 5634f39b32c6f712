"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
Every body on the wire uses camelCase keys.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..domain.models import IterationType

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---
# Required fields are Optional here; the service reports them as 400s with its own messages.

class CreateSessionRequest(ApiModel):
    post_id: Optional[str] = None
    content_idea_id: Optional[str] = None
    original_prompt: Optional[str] = None
    user_id: Optional[str] = None


class RefineRequest(ApiModel):
    session_id: Optional[str] = None
    feedback: Optional[str] = None
    manual_edit: Optional[str] = None
    user_id: Optional[str] = None


# --- Responses ---

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "prompt-refinement"
    timestamp: datetime


class SessionCreated(ApiModel):
    session_id: str
    original_prompt: str
    current_prompt: str
    status: str


class RefinementRead(ApiModel):
    session_id: str
    iteration_id: str
    refined_prompt: str
    ai_confidence: float
    iteration_number: int
    feedback: Optional[str] = None
    is_manual_edit: bool


class SessionRead(ApiModel):
    id: str
    post_id: Optional[str] = None
    content_idea_id: Optional[str] = None
    original_prompt: str
    current_prompt: str
    status: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GenerationMetadataRead(ApiModel):
    feedback: Optional[str] = None
    original_prompt: str
    previous_prompt: str
    refined_at: datetime


class IterationRead(ApiModel):
    id: str
    session_id: str
    iteration_number: int
    prompt_text: str
    iteration_type: IterationType
    ai_confidence: float
    generation_metadata: GenerationMetadataRead
    created_at: datetime


class FeedbackRead(ApiModel):
    id: str
    session_id: str
    feedback_type: str
    feedback_text: str
    ai_suggested_prompt: str
    feedback_author: Optional[str] = None
    created_at: datetime


class SessionDetail(ApiModel):
    session: SessionRead
    iterations: List[IterationRead]
    feedback: List[FeedbackRead]
    total_iterations: int
