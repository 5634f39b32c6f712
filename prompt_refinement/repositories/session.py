from abc import ABC, abstractmethod
from typing import Optional

from sqlmodel import Session, select

from ..domain.models import RefinementSession, SessionStatus
from ..infrastructure.database.tables import SessionDBModel, utcnow


class SessionStore(ABC):
    """
    Defines how the application accesses refinement sessions.
    Implementations are bound to a Unit of Work, so writes only become
    visible when the unit commits.
    """

    @abstractmethod
    def create(
        self,
        original_prompt: str,
        post_id: Optional[str] = None,
        content_idea_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> RefinementSession:
        """Creates an active session whose current prompt is the original prompt."""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[RefinementSession]:
        """Retrieves a session by ID."""
        pass

    @abstractmethod
    def get_for_update(self, session_id: str) -> Optional[RefinementSession]:
        """Retrieves a session and locks it until the unit of work ends."""
        pass

    @abstractmethod
    def update_current_prompt(self, session_id: str, new_prompt: str):
        """Moves the session's current pointer to new_prompt."""
        pass


class SqlSessionStore(SessionStore):
    """
    SQL storage for sessions on a shared SQLModel Session.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        original_prompt: str,
        post_id: Optional[str] = None,
        content_idea_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> RefinementSession:
        db_model = SessionDBModel(
            post_id=post_id,
            content_idea_id=content_idea_id,
            original_prompt=original_prompt,
            current_prompt=original_prompt,
            created_by=created_by,
            session_status=SessionStatus.ACTIVE.value,
        )
        self.db.add(db_model)
        self.db.flush()
        return self._to_domain(db_model)

    def get(self, session_id: str) -> Optional[RefinementSession]:
        result = self.db.get(SessionDBModel, session_id)
        if not result:
            return None
        return self._to_domain(result)

    def get_for_update(self, session_id: str) -> Optional[RefinementSession]:
        # SELECT ... FOR UPDATE serializes concurrent refinements of one session.
        # SQLite ignores the clause and relies on the iteration uniqueness constraint instead.
        statement = (
            select(SessionDBModel)
            .where(SessionDBModel.id == session_id)
            .with_for_update()
        )
        result = self.db.exec(statement).first()
        if not result:
            return None
        return self._to_domain(result)

    def update_current_prompt(self, session_id: str, new_prompt: str):
        result = self.db.get(SessionDBModel, session_id)
        if not result:
            raise ValueError(f"Session {session_id} does not exist in DB.")

        result.current_prompt = new_prompt
        result.updated_at = utcnow()
        self.db.add(result)
        self.db.flush()

    @staticmethod
    def _to_domain(row: SessionDBModel) -> RefinementSession:
        return RefinementSession(
            id=row.id,
            post_id=row.post_id,
            content_idea_id=row.content_idea_id,
            original_prompt=row.original_prompt,
            current_prompt=row.current_prompt,
            status=row.session_status,
            created_by=row.created_by,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
