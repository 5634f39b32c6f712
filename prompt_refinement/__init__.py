"""
Prompt Refinement Service

An iterative, AI-assisted refinement engine for image-generation prompts.
A caller opens a session with an original prompt, then submits feedback or
manual edits; every change becomes a numbered, immutable iteration while the
session tracks the current prompt.
"""

from prompt_refinement.domain import (
    GenerationMetadata,
    IterationType,
    PromptFeedback,
    PromptIteration,
    RefinementSession,
    SessionStatus,
)
from prompt_refinement.refinement import (
    PromptRefiner,
    ProviderFailed,
    RefinedPrompt,
)
from prompt_refinement.services import (
    PromptRefinementService,
    RefinementResult,
    SessionHistory,
)

__all__ = [
    # Domain Layer
    "GenerationMetadata",
    "IterationType",
    "PromptFeedback",
    "PromptIteration",
    "RefinementSession",
    "SessionStatus",
    # Refinement Layer
    "PromptRefiner",
    "ProviderFailed",
    "RefinedPrompt",
    # Service Layer
    "PromptRefinementService",
    "RefinementResult",
    "SessionHistory",
]
