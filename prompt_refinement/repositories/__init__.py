from prompt_refinement.repositories.feedback import FeedbackLog, SqlFeedbackLog
from prompt_refinement.repositories.iteration import IterationLedger, SqlIterationLedger
from prompt_refinement.repositories.session import SessionStore, SqlSessionStore
from prompt_refinement.repositories.unit_of_work import SqlUnitOfWork

__all__ = [
    "FeedbackLog",
    "IterationLedger",
    "SessionStore",
    "SqlFeedbackLog",
    "SqlIterationLedger",
    "SqlSessionStore",
    "SqlUnitOfWork",
]
