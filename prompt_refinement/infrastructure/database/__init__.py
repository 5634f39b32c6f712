from prompt_refinement.infrastructure.database.connection import build_engine, init_db
from prompt_refinement.infrastructure.database.tables import (
    FeedbackDBModel,
    IterationDBModel,
    SessionDBModel,
)

__all__ = [
    "build_engine",
    "init_db",
    "FeedbackDBModel",
    "IterationDBModel",
    "SessionDBModel",
]
