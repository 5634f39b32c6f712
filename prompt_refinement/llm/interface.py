from abc import ABC, abstractmethod
from typing import List


class LLMProvider(ABC):
    """
    Abstract Base Class interface that defines the contract for any LLM provider
    (OpenAI, Anthropic, Local LLaMA, etc.)
    """

    @abstractmethod
    async def generate_text(
        self,
        messages: List[dict],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Generates a free-form completion for role-tagged messages.
        Raises ProviderError when the call fails.
        """
        pass
