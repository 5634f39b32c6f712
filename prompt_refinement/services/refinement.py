"""
Prompt Refinement Service - Application Orchestration Layer

This service is the entry point for all refinement operations. It sequences
the Refinement Engine and the persistence layer for each request:

    Refine: ValidateInput -> (ManualPath | AIPath) -> ComputeIterationNumber
            -> PersistIteration -> [PersistFeedback] -> UpdateSessionPointer

The last four steps run in one Unit of Work with the session row locked, so
the ledger and the session's current pointer can never disagree, and
iteration numbers stay gap-free and collision-free under concurrent calls.
The provider call happens before the lock is taken.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..domain.models import (
    GenerationMetadata,
    IterationType,
    PromptFeedback,
    PromptIteration,
    RefinementSession,
)
from ..infrastructure.database.tables import utcnow
from ..refinement.engine import PromptRefiner
from ..refinement.outcomes import ProviderFailed
from ..repositories.unit_of_work import SqlUnitOfWork
from .exceptions import (
    PartialFetchError,
    PersistenceError,
    SessionNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class RefinementResult:
    """What a successful Refine call produced."""

    session_id: str
    iteration: PromptIteration
    feedback: Optional[str]
    is_manual_edit: bool
    provider_failed: bool = False

    @property
    def refined_prompt(self) -> str:
        return self.iteration.prompt_text

    @property
    def ai_confidence(self) -> float:
        return self.iteration.ai_confidence

    @property
    def iteration_number(self) -> int:
        return self.iteration.iteration_number


@dataclass
class SessionHistory:
    """A session with its full history. fetch_errors lists sub-fetches that degraded to empty."""

    session: RefinementSession
    iterations: List[PromptIteration] = field(default_factory=list)
    feedback: List[PromptFeedback] = field(default_factory=list)
    fetch_errors: List[PartialFetchError] = field(default_factory=list)

    @property
    def total_iterations(self) -> int:
        return len(self.iterations)


class PromptRefinementService:
    def __init__(
        self,
        unit_of_work_factory: Callable[[], SqlUnitOfWork],
        refiner: PromptRefiner,
        max_retries: int = 2,
    ):
        self.unit_of_work = unit_of_work_factory
        self.refiner = refiner
        self.max_retries = max_retries

    def create_session(
        self,
        original_prompt: Optional[str],
        post_id: Optional[str] = None,
        content_idea_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> RefinementSession:
        """Opens a refinement thread for one artifact."""
        if not original_prompt:
            raise ValidationError("Original prompt is required")
        if not post_id and not content_idea_id:
            raise ValidationError("Either postId or contentIdeaId is required")

        try:
            with self.unit_of_work() as uow:
                session = uow.sessions.create(
                    original_prompt=original_prompt,
                    post_id=post_id or None,
                    content_idea_id=content_idea_id or None,
                    created_by=user_id,
                )
                uow.commit()
        except SQLAlchemyError as e:
            logger.error(f"Session creation failed: {e}")
            raise PersistenceError("Failed to create refinement session") from e

        logger.info(f"Created refinement session {session.id}")
        return session

    async def refine(
        self,
        session_id: Optional[str],
        feedback: Optional[str] = None,
        manual_edit: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> RefinementResult:
        """
        Produces the next version of the session's prompt.

        A manual edit wins over feedback and skips the engine. A call with
        neither records an unchanged iteration at confidence 0.0.
        """
        if not session_id:
            raise ValidationError("Session ID is required")

        session = self._load_session(session_id)
        provider_failed = False
        # None keeps whatever prompt is current when the write lock is taken
        candidate: Optional[str] = None
        confidence = 0.0

        if manual_edit:
            candidate, confidence = manual_edit, 0.0
            iteration_type = IterationType.MANUAL_EDIT
        elif feedback:
            outcome = await self.refiner.refine(
                current_prompt=session.current_prompt,
                feedback=feedback,
                original_prompt=session.original_prompt,
            )
            if isinstance(outcome, ProviderFailed):
                # Fail open: record a no-op version instead of failing the request
                logger.warning(f"Refinement provider failed for session {session_id}: {outcome.error}")
                provider_failed = True
            else:
                candidate, confidence = outcome.prompt, outcome.confidence
            iteration_type = IterationType.AI_REFINED
        else:
            iteration_type = IterationType.AI_REFINED

        iteration = self._record_iteration(
            session_id=session_id,
            candidate=candidate,
            iteration_type=iteration_type,
            confidence=confidence,
            feedback=feedback,
            user_id=user_id,
        )

        logger.info(f"Refined prompt for session {session_id} (iteration {iteration.iteration_number})")
        return RefinementResult(
            session_id=session_id,
            iteration=iteration,
            feedback=feedback,
            is_manual_edit=bool(manual_edit),
            provider_failed=provider_failed,
        )

    def get_session(self, session_id: Optional[str]) -> SessionHistory:
        """
        Returns the session with its iterations and feedback.
        A failed list fetch is logged and degrades to an empty list.
        """
        if not session_id:
            raise ValidationError("Session ID is required")

        history = SessionHistory(session=self._load_session(session_id))

        try:
            with self.unit_of_work() as uow:
                history.iterations = uow.iterations.list_by_session(session_id)
        except SQLAlchemyError as e:
            logger.error(f"Iterations fetch failed for session {session_id}: {e}")
            history.fetch_errors.append(PartialFetchError("iterations", e))

        try:
            with self.unit_of_work() as uow:
                history.feedback = uow.feedback.list_by_session(session_id)
        except SQLAlchemyError as e:
            logger.error(f"Feedback fetch failed for session {session_id}: {e}")
            history.fetch_errors.append(PartialFetchError("feedback", e))

        return history

    def _load_session(self, session_id: str) -> RefinementSession:
        try:
            with self.unit_of_work() as uow:
                session = uow.sessions.get(session_id)
        except SQLAlchemyError as e:
            logger.error(f"Session fetch failed for {session_id}: {e}")
            raise PersistenceError("Failed to load refinement session") from e

        if not session:
            raise SessionNotFoundError(session_id)
        return session

    def _record_iteration(
        self,
        session_id: str,
        candidate: Optional[str],
        iteration_type: IterationType,
        confidence: float,
        feedback: Optional[str],
        user_id: Optional[str],
    ) -> PromptIteration:
        """
        Appends the iteration, the optional feedback and moves the session pointer
        as one transaction. Retries when another writer took the same number.

        The metadata snapshot and, when candidate is None, the prompt text come
        from the locked row, so a no-op version never reverts a newer commit.
        """
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                with self.unit_of_work() as uow:
                    locked = uow.sessions.get_for_update(session_id)
                    if not locked:
                        raise SessionNotFoundError(session_id)

                    prompt_text = locked.current_prompt if candidate is None else candidate
                    metadata = GenerationMetadata(
                        feedback=feedback,
                        original_prompt=locked.original_prompt,
                        previous_prompt=locked.current_prompt,
                        refined_at=utcnow(),
                    )

                    number = uow.iterations.next_number(session_id)
                    iteration = uow.iterations.append(
                        session_id=session_id,
                        number=number,
                        prompt_text=prompt_text,
                        iteration_type=iteration_type,
                        confidence=confidence,
                        metadata=metadata,
                    )
                    if feedback:
                        uow.feedback.append(
                            session_id=session_id,
                            feedback_text=feedback,
                            suggested_prompt=prompt_text,
                            author=user_id,
                        )
                    uow.sessions.update_current_prompt(session_id, prompt_text)
                    uow.commit()
                    return iteration
            except IntegrityError as e:
                logger.warning(
                    f"Iteration number conflict for session {session_id} "
                    f"(attempt {attempt}/{attempts}): {e}"
                )
            except SQLAlchemyError as e:
                logger.error(f"Iteration write failed for session {session_id}: {e}")
                raise PersistenceError("Failed to create prompt iteration") from e

        raise PersistenceError("Failed to create prompt iteration")
