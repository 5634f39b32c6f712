from abc import ABC, abstractmethod
from typing import List, Optional

from sqlmodel import Session, select

from ..domain.models import CLIENT_FEEDBACK, PromptFeedback
from ..infrastructure.database.tables import FeedbackDBModel


class FeedbackLog(ABC):
    """Append-only record of client feedback per session."""

    @abstractmethod
    def append(
        self,
        session_id: str,
        feedback_text: str,
        suggested_prompt: str,
        author: Optional[str] = None,
    ) -> PromptFeedback:
        pass

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[PromptFeedback]:
        """Returns the session's feedback, oldest first."""
        pass


class SqlFeedbackLog(FeedbackLog):

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        session_id: str,
        feedback_text: str,
        suggested_prompt: str,
        author: Optional[str] = None,
    ) -> PromptFeedback:
        if not feedback_text:
            raise ValueError("Feedback text must not be empty.")

        db_model = FeedbackDBModel(
            session_id=session_id,
            feedback_type=CLIENT_FEEDBACK,
            feedback_text=feedback_text,
            ai_suggested_prompt=suggested_prompt,
            feedback_author=author,
        )
        self.db.add(db_model)
        self.db.flush()
        return PromptFeedback.model_validate(db_model, from_attributes=True)

    def list_by_session(self, session_id: str) -> List[PromptFeedback]:
        statement = (
            select(FeedbackDBModel)
            .where(FeedbackDBModel.session_id == session_id)
            .order_by(FeedbackDBModel.created_at, FeedbackDBModel.id)
        )
        return [
            PromptFeedback.model_validate(row, from_attributes=True)
            for row in self.db.exec(statement).all()
        ]
