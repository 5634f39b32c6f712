import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..interface import LLMProvider
from ...services.exceptions import ProviderError

logger = logging.getLogger(__name__)


class OpenAIAdapter(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4",
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        # Single attempt: the refinement engine fails open instead of retrying
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model_name = model_name

    async def generate_text(
        self,
        messages: List[dict],
        temperature: float,
        max_tokens: int,
    ) -> str:
        # This is where the specific OpenAI implementation lives.
        # If OpenAI changes their API tomorrow, we ONLY change this file.
        try:
            completion = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ProviderError(f"OpenAI completion failed: {e}") from e

        if not completion.choices:
            raise ProviderError("OpenAI returned no choices")

        # We unwrap the specific OpenAI response structure here
        content = completion.choices[0].message.content
        logger.debug(f"OpenAI completion finished ({completion.choices[0].finish_reason})")
        return content or ""
