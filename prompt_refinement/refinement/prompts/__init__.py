"""
Prompt building for prompt refinement.

The system message fixes the engineer persona and guidelines; the user
message carries the original prompt, the current prompt and the feedback.
"""

from typing import List

from .loader import render
from .templates import Template


def build_refinement_messages(
    current_prompt: str,
    feedback: str,
    original_prompt: str,
) -> List[dict]:
    return [
        {"role": "system", "content": render(Template.REFINE_SYSTEM)},
        {
            "role": "user",
            "content": render(
                Template.REFINE_USER,
                original_prompt=original_prompt,
                current_prompt=current_prompt,
                feedback=feedback,
            ),
        },
    ]


__all__ = ["Template", "build_refinement_messages", "render"]
