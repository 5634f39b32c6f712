"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the core Singleton services (Engine, LLM Adapter, Refiner).
2. Wiring them together (e.g., injecting the Unit of Work factory and the
   Refiner into the PromptRefinementService).
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

This is the only place that reads settings; everything below it receives
explicit constructor arguments. Tests override get_refinement_service.
"""

from functools import lru_cache, partial

from fastapi import Depends
from sqlalchemy.engine import Engine

from ..config import settings
from ..infrastructure.database.connection import build_engine
from ..llm.adapters.openai_adapter import OpenAIAdapter
from ..llm.interface import LLMProvider
from ..refinement.engine import PromptRefiner
from ..repositories.unit_of_work import SqlUnitOfWork
from ..services.refinement import PromptRefinementService


# Database Engine (Singleton)
@lru_cache()
def get_engine() -> Engine:
    return build_engine(settings.DATABASE_URL)


# LLM Provider (Singleton)
@lru_cache()
def get_llm_provider() -> LLMProvider:
    return OpenAIAdapter(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.OPENAI_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
    )


# The Refinement Engine (Singleton)
@lru_cache()
def get_prompt_refiner(
    llm: LLMProvider = Depends(get_llm_provider),
) -> PromptRefiner:
    return PromptRefiner(
        llm_provider=llm,
        temperature=settings.LLM_TEMPERATURE,
        max_tokens=settings.LLM_MAX_TOKENS,
        timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
    )


# The Refinement Service (Singleton Service)
@lru_cache()
def get_refinement_service(
    engine: Engine = Depends(get_engine),
    refiner: PromptRefiner = Depends(get_prompt_refiner),
) -> PromptRefinementService:
    """
    Injects all necessary components into the PromptRefinementService.
    """
    return PromptRefinementService(
        unit_of_work_factory=partial(SqlUnitOfWork, engine),
        refiner=refiner,
        max_retries=settings.MAX_RETRIES,
    )
