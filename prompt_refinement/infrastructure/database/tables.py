"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic domain models (RefinementSession, PromptIteration).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class SessionDBModel(SQLModel, table=True):
    """
    Persistence model for refinement sessions.
    Maps 1-to-1 with the 'prompt_refinement_sessions' table in Postgres.
    """

    __tablename__ = "prompt_refinement_sessions"

    id: str = Field(default_factory=new_id, primary_key=True)

    # At least one of these identifies the artifact being refined
    post_id: Optional[str] = Field(default=None, index=True)
    content_idea_id: Optional[str] = Field(default=None, index=True)

    original_prompt: str
    current_prompt: str
    session_status: str = Field(default="active")

    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IterationDBModel(SQLModel, table=True):
    """
    Persistence model for the append-only version ledger.
    Maps 1-to-1 with the 'prompt_iterations' table in Postgres.
    """

    __tablename__ = "prompt_iterations"
    __table_args__ = (
        UniqueConstraint("session_id", "iteration_number", name="uq_prompt_iterations_session_number"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(foreign_key="prompt_refinement_sessions.id", index=True)
    iteration_number: int
    prompt_text: str
    iteration_type: str
    ai_confidence: float = Field(default=0.0)

    # JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
    generation_metadata: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    )

    created_at: datetime = Field(default_factory=utcnow)


class FeedbackDBModel(SQLModel, table=True):
    """
    Persistence model for client feedback.
    Maps 1-to-1 with the 'prompt_feedback' table in Postgres.
    """

    __tablename__ = "prompt_feedback"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(foreign_key="prompt_refinement_sessions.id", index=True)
    feedback_type: str
    feedback_text: str
    ai_suggested_prompt: str
    feedback_author: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
