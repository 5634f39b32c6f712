from prompt_refinement.llm.interface import LLMProvider

__all__ = ["LLMProvider"]
