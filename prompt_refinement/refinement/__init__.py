"""
Refinement Layer - AI Prompt Refinement

Defines the PromptRefiner (stateless LLM wrapper) and the outcome values
it returns instead of raising.
"""

from prompt_refinement.refinement.engine import PromptRefiner, interpret_response
from prompt_refinement.refinement.outcomes import (
    ProviderFailed,
    RefinedPrompt,
    RefinementOutcome,
)

__all__ = [
    "PromptRefiner",
    "ProviderFailed",
    "RefinedPrompt",
    "RefinementOutcome",
    "interpret_response",
]
