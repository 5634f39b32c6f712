"""
Unit of Work.

Binds the session store, iteration ledger and feedback log to a single
database transaction. Nothing is persisted until commit(); leaving the
context without committing (or on an exception) rolls everything back.

Usage:
    with SqlUnitOfWork(engine) as uow:
        session = uow.sessions.get_for_update(session_id)
        number = uow.iterations.next_number(session_id)
        uow.iterations.append(...)
        uow.sessions.update_current_prompt(session_id, prompt)
        uow.commit()
"""

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .feedback import FeedbackLog, SqlFeedbackLog
from .iteration import IterationLedger, SqlIterationLedger
from .session import SessionStore, SqlSessionStore


class SqlUnitOfWork:
    sessions: SessionStore
    iterations: IterationLedger
    feedback: FeedbackLog

    def __init__(self, engine: Engine):
        self.engine = engine
        self._db = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._db = Session(self.engine)
        self.sessions = SqlSessionStore(self._db)
        self.iterations = SqlIterationLedger(self._db)
        self.feedback = SqlFeedbackLog(self._db)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            # No-op after a successful commit
            self._db.rollback()
        finally:
            self._db.close()
            self._db = None

    def commit(self):
        self._db.commit()

    def rollback(self):
        self._db.rollback()
