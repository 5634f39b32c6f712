"""
Schemas - Structured Output Models for LLM Responses

This module defines the Pydantic model for the JSON object the refinement
prompt asks the LLM to return. Providers do not always honour the format,
so the fields are lenient: anything unusable is treated as absent and the
refinement engine substitutes its defaults.
"""
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RefinementPayload(BaseModel):
    """
    The JSON structure the LLM is asked to generate for a refinement request.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    refined_prompt: Optional[str] = Field(
        None,
        alias="refinedPrompt",
        description="The refined image-generation prompt."
    )
    confidence: Optional[float] = Field(
        None,
        description="How well the refinement addressed the feedback, 0.0 to 1.0."
    )

    @field_validator("refined_prompt", mode="before")
    @classmethod
    def _text_only(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("confidence", mode="before")
    @classmethod
    def _finite_number_only(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return number if math.isfinite(number) else None
