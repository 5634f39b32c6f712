"""
Service Layer Exceptions

Custom exceptions for the PromptRefinementService and the layers beneath it.
The HTTP layer maps each of these to a status code.
"""


class PromptRefinementError(Exception):
    """Base class for every error raised by this package."""
    pass


class ValidationError(PromptRefinementError):
    """Raised when a required field is missing or invalid."""
    pass


class SessionNotFoundError(PromptRefinementError):
    """Raised when no session exists for the given ID."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class ProviderError(PromptRefinementError):
    """
    Raised by LLM adapters when the text-completion call fails.
    The refinement engine absorbs it; it never reaches the caller.
    """
    pass


class PersistenceError(PromptRefinementError):
    """Raised when a store operation fails. The message is safe to show to clients."""
    pass


class PartialFetchError(PersistenceError):
    """
    A secondary list fetch failed while reading a session.
    Recorded on the result and logged, never raised to the caller.
    """

    def __init__(self, resource: str, cause: Exception):
        super().__init__(f"Failed to fetch {resource}")
        self.resource = resource
        self.cause = cause
