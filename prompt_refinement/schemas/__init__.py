"""
Schemas - Structured Output Models for LLM Responses

Defines the Pydantic model used to read the refinement engine's JSON
responses.
"""

from prompt_refinement.schemas.refinement import RefinementPayload

__all__ = [
    "RefinementPayload",
]
