"""
Refinement outcomes.

The refinement engine never raises. It returns one of these values and the
orchestrator decides what to persist.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RefinedPrompt:
    """The provider answered. parsed_as_json is False when the malformed-output fallback was used."""

    prompt: str
    confidence: float
    parsed_as_json: bool = True


@dataclass(frozen=True)
class ProviderFailed:
    """The provider call raised or timed out. Nothing usable came back."""

    error: str


RefinementOutcome = Union[RefinedPrompt, ProviderFailed]
