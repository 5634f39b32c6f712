from abc import ABC, abstractmethod
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from ..domain.models import (
    FIRST_STORED_ITERATION_NUMBER,
    GenerationMetadata,
    IterationType,
    PromptIteration,
)
from ..infrastructure.database.tables import IterationDBModel


class IterationLedger(ABC):
    """
    Append-only, numbered version history per session.
    Rows are never updated or deleted.
    """

    @abstractmethod
    def next_number(self, session_id: str) -> int:
        """
        Returns FIRST_STORED_ITERATION_NUMBER for a session with no rows,
        else the highest stored number + 1.
        Callers must hold the session lock until the appended row commits.
        """
        pass

    @abstractmethod
    def append(
        self,
        session_id: str,
        number: int,
        prompt_text: str,
        iteration_type: IterationType,
        confidence: float,
        metadata: GenerationMetadata,
    ) -> PromptIteration:
        pass

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[PromptIteration]:
        """Returns the session's iterations in ascending number order."""
        pass


class SqlIterationLedger(IterationLedger):

    def __init__(self, db: Session):
        self.db = db

    def next_number(self, session_id: str) -> int:
        statement = select(func.max(IterationDBModel.iteration_number)).where(
            IterationDBModel.session_id == session_id
        )
        highest = self.db.exec(statement).one()
        if highest is None:
            return FIRST_STORED_ITERATION_NUMBER
        return highest + 1

    def append(
        self,
        session_id: str,
        number: int,
        prompt_text: str,
        iteration_type: IterationType,
        confidence: float,
        metadata: GenerationMetadata,
    ) -> PromptIteration:
        db_model = IterationDBModel(
            session_id=session_id,
            iteration_number=number,
            prompt_text=prompt_text,
            iteration_type=iteration_type.value,
            ai_confidence=confidence,
            generation_metadata=metadata.model_dump(mode="json"),
        )
        self.db.add(db_model)
        # Flush now so a numbering collision surfaces as IntegrityError here
        self.db.flush()
        return self._to_domain(db_model)

    def list_by_session(self, session_id: str) -> List[PromptIteration]:
        statement = (
            select(IterationDBModel)
            .where(IterationDBModel.session_id == session_id)
            .order_by(IterationDBModel.iteration_number)
        )
        return [self._to_domain(row) for row in self.db.exec(statement).all()]

    @staticmethod
    def _to_domain(row: IterationDBModel) -> PromptIteration:
        return PromptIteration(
            id=row.id,
            session_id=row.session_id,
            iteration_number=row.iteration_number,
            prompt_text=row.prompt_text,
            iteration_type=IterationType(row.iteration_type),
            ai_confidence=row.ai_confidence,
            generation_metadata=GenerationMetadata(**row.generation_metadata),
            created_at=row.created_at,
        )
