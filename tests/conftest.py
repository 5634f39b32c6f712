"""Shared fixtures: an in-memory SQLite store, a scripted LLM and a wired service."""

import json
import os

# Settings are read at import time by the app modules
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from functools import partial
from unittest.mock import AsyncMock

import pytest
from sqlmodel import SQLModel

from prompt_refinement.infrastructure.database.connection import build_engine, init_db
from prompt_refinement.llm.interface import LLMProvider
from prompt_refinement.refinement.engine import PromptRefiner
from prompt_refinement.repositories.unit_of_work import SqlUnitOfWork
from prompt_refinement.services.refinement import PromptRefinementService

MOONLIT_RESPONSE = json.dumps(
    {"refinedPrompt": "A cat in a moonlit garden", "confidence": 0.85}
)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def uow_factory(engine):
    return partial(SqlUnitOfWork, engine)


@pytest.fixture
def llm():
    provider = AsyncMock(spec=LLMProvider)
    provider.generate_text.return_value = MOONLIT_RESPONSE
    return provider


@pytest.fixture
def refiner(llm):
    return PromptRefiner(llm_provider=llm, temperature=0.7, max_tokens=500, timeout_seconds=1.0)


@pytest.fixture
def service(uow_factory, refiner):
    return PromptRefinementService(
        unit_of_work_factory=uow_factory,
        refiner=refiner,
        max_retries=2,
    )


@pytest.fixture
def cat_session(service):
    return service.create_session(
        original_prompt="A cat in a garden",
        post_id="p1",
        user_id="user-1",
    )
