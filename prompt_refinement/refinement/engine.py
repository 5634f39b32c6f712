"""
Refinement Engine - AI Prompt Refinement Layer

The PromptRefiner is a stateless wrapper around the LLM. Given the current
prompt, the client's feedback and the session's original prompt, it asks
the provider for a refined prompt plus a confidence score.

Provider output is untrusted:
1. A JSON object is read through RefinementPayload. A missing or empty
   prompt falls back to the current prompt; a missing confidence is 0.5.
   Confidence is always clamped to [0.0, 1.0].
2. Anything that is not JSON has its markdown code fences stripped and the
   remaining text becomes the prompt, with a fixed confidence of 0.6.
3. If the call itself raises or times out, ProviderFailed is returned.

refine() never raises.
"""

import asyncio
import json
import logging
import re

from ..llm.interface import LLMProvider
from ..schemas.refinement import RefinementPayload
from .outcomes import ProviderFailed, RefinedPrompt, RefinementOutcome
from .prompts import build_refinement_messages

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
UNPARSED_CONFIDENCE = 0.6

_CODE_FENCE = re.compile(r"```json|```")


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text).strip()


def interpret_response(raw: str, current_prompt: str) -> RefinedPrompt:
    """Turns raw provider text into a candidate prompt and confidence."""
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        # JSONDecodeError is a ValueError; so is the int digit limit. Deep nesting recurses.
        stripped = strip_code_fences(raw or "")
        logger.warning("Refinement response was not JSON, using stripped text")
        return RefinedPrompt(
            prompt=stripped or current_prompt,
            confidence=UNPARSED_CONFIDENCE,
            parsed_as_json=False,
        )

    # Valid JSON that is not an object carries neither field
    payload = RefinementPayload.model_validate(parsed if isinstance(parsed, dict) else {})

    prompt = payload.refined_prompt if payload.refined_prompt and payload.refined_prompt.strip() else current_prompt
    confidence = DEFAULT_CONFIDENCE if payload.confidence is None else payload.confidence

    return RefinedPrompt(prompt=prompt, confidence=clamp_confidence(confidence))


class PromptRefiner:
    # DEPENDENCY INJECTION: We ask for the generic Provider
    def __init__(
        self,
        llm_provider: LLMProvider,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout_seconds: float = 30.0,
    ):
        self.llm = llm_provider
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def refine(
        self,
        current_prompt: str,
        feedback: str,
        original_prompt: str,
    ) -> RefinementOutcome:
        messages = build_refinement_messages(
            current_prompt=current_prompt,
            feedback=feedback,
            original_prompt=original_prompt,
        )

        try:
            raw = await asyncio.wait_for(
                self.llm.generate_text(
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"AI refinement timed out after {self.timeout_seconds}s")
            return ProviderFailed(error=f"Provider call timed out after {self.timeout_seconds}s")
        except Exception as e:
            logger.error(f"AI refinement failed: {e}")
            return ProviderFailed(error=str(e))

        try:
            return interpret_response(raw, current_prompt)
        except Exception as e:
            logger.error(f"AI refinement response could not be read: {e}")
            return ProviderFailed(error=f"Unreadable provider response: {e}")
