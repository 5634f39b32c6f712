"""Tests for the PromptRefinementService orchestrator."""

import asyncio
import json

import pytest
from sqlalchemy.exc import OperationalError

from prompt_refinement.domain.models import IterationType
from prompt_refinement.repositories.feedback import SqlFeedbackLog
from prompt_refinement.repositories.iteration import SqlIterationLedger
from prompt_refinement.repositories.session import SqlSessionStore
from prompt_refinement.services.exceptions import (
    PartialFetchError,
    PersistenceError,
    ProviderError,
    SessionNotFoundError,
    ValidationError,
)


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is down"))


class TestCreateSession:

    def test_current_prompt_starts_as_original(self, service):
        session = service.create_session(original_prompt="A cat in a garden", post_id="p1", user_id="u1")

        assert session.current_prompt == "A cat in a garden"
        assert session.original_prompt == "A cat in a garden"
        assert session.status == "active"
        assert session.created_by == "u1"

    def test_content_idea_alone_is_enough(self, service):
        session = service.create_session(original_prompt="A cat", content_idea_id="idea-7")
        assert session.content_idea_id == "idea-7"
        assert session.post_id is None

    @pytest.mark.parametrize("prompt", [None, ""])
    def test_original_prompt_required(self, service, prompt):
        with pytest.raises(ValidationError, match="Original prompt is required"):
            service.create_session(original_prompt=prompt, post_id="p1")

    def test_artifact_id_required(self, service):
        with pytest.raises(ValidationError, match="postId or contentIdeaId"):
            service.create_session(original_prompt="A cat")

    def test_store_failure(self, service, monkeypatch):
        monkeypatch.setattr(SqlSessionStore, "create", _db_down)
        with pytest.raises(PersistenceError, match="Failed to create refinement session"):
            service.create_session(original_prompt="A cat", post_id="p1")


class TestRefine:

    @pytest.mark.asyncio
    async def test_ai_refinement_happy_path(self, service, cat_session):
        result = await service.refine(cat_session.id, feedback="make it night time", user_id="u1")

        assert result.iteration_number == 2
        assert result.iteration.iteration_type == IterationType.AI_REFINED
        assert result.ai_confidence == pytest.approx(0.85)
        assert result.refined_prompt == "A cat in a moonlit garden"
        assert not result.is_manual_edit

        history = service.get_session(cat_session.id)
        assert history.session.current_prompt == "A cat in a moonlit garden"
        assert [f.ai_suggested_prompt for f in history.feedback] == ["A cat in a moonlit garden"]
        assert history.feedback[0].feedback_author == "u1"

    @pytest.mark.asyncio
    async def test_manual_edit_skips_the_provider(self, service, cat_session, llm):
        result = await service.refine(cat_session.id, manual_edit="A dog in a garden")

        llm.generate_text.assert_not_awaited()
        assert result.iteration.iteration_type == IterationType.MANUAL_EDIT
        assert result.ai_confidence == 0.0
        assert result.is_manual_edit
        assert service.get_session(cat_session.id).feedback == []

    @pytest.mark.asyncio
    async def test_manual_edit_with_feedback_still_logs_feedback(self, service, cat_session, llm):
        result = await service.refine(
            cat_session.id, feedback="it should be a dog", manual_edit="A dog in a garden"
        )

        llm.generate_text.assert_not_awaited()
        assert result.iteration.is_manual_edit
        feedback = service.get_session(cat_session.id).feedback
        assert len(feedback) == 1
        assert feedback[0].feedback_text == "it should be a dog"
        assert feedback[0].ai_suggested_prompt == "A dog in a garden"

    @pytest.mark.asyncio
    async def test_malformed_provider_output(self, service, cat_session, llm):
        llm.generate_text.return_value = "```json A cat at night```"

        result = await service.refine(cat_session.id, feedback="make it night time")

        assert result.refined_prompt == "A cat at night"
        assert result.ai_confidence == pytest.approx(0.6)

    @pytest.mark.asyncio
    async def test_provider_failure_records_a_no_op_iteration(self, service, cat_session, llm):
        llm.generate_text.side_effect = ProviderError("upstream 503")

        result = await service.refine(cat_session.id, feedback="make it night time")

        assert result.provider_failed
        assert result.refined_prompt == "A cat in a garden"
        assert result.ai_confidence == 0.0
        assert result.iteration_number == 2
        assert service.get_session(cat_session.id).session.current_prompt == "A cat in a garden"

    @pytest.mark.asyncio
    async def test_provider_failure_keeps_edit_committed_during_the_call(self, service, cat_session, llm):
        async def edit_then_fail(**kwargs):
            await service.refine(cat_session.id, manual_edit="A dog in a garden")
            raise ProviderError("upstream 503")

        llm.generate_text.side_effect = edit_then_fail

        result = await service.refine(cat_session.id, feedback="make it night time")

        assert result.provider_failed
        assert result.refined_prompt == "A dog in a garden"
        metadata = result.iteration.generation_metadata
        assert metadata.previous_prompt == "A dog in a garden"

        history = service.get_session(cat_session.id)
        assert [i.iteration_number for i in history.iterations] == [2, 3]
        assert history.session.current_prompt == "A dog in a garden"

    @pytest.mark.asyncio
    async def test_neither_feedback_nor_edit_records_unchanged_prompt(self, service, cat_session, llm):
        result = await service.refine(cat_session.id)

        llm.generate_text.assert_not_awaited()
        assert result.refined_prompt == "A cat in a garden"
        assert result.ai_confidence == 0.0
        assert result.iteration.iteration_type == IterationType.AI_REFINED
        assert service.get_session(cat_session.id).total_iterations == 1

    @pytest.mark.asyncio
    async def test_metadata_snapshot(self, service, cat_session):
        await service.refine(cat_session.id, manual_edit="A dog in a garden")
        result = await service.refine(cat_session.id, feedback="make it night time")

        metadata = result.iteration.generation_metadata
        assert metadata.feedback == "make it night time"
        assert metadata.original_prompt == "A cat in a garden"
        assert metadata.previous_prompt == "A dog in a garden"
        assert metadata.refined_at is not None

    @pytest.mark.asyncio
    async def test_ledger_is_gap_free_and_tracks_pointer(self, service, cat_session, llm):
        llm.generate_text.return_value = json.dumps({"refinedPrompt": "A cat at dusk", "confidence": 3})

        steps = [
            {"feedback": "darker"},
            {"manual_edit": "A cat at midnight"},
            {"feedback": "add stars"},
            {},
        ]
        for step in steps:
            result = await service.refine(cat_session.id, **step)
            current = service.get_session(cat_session.id).session.current_prompt
            assert current == result.refined_prompt

        history = service.get_session(cat_session.id)
        assert [i.iteration_number for i in history.iterations] == [2, 3, 4, 5]
        assert all(0.0 <= i.ai_confidence <= 1.0 for i in history.iterations)
        assert all(i.ai_confidence == 0.0 for i in history.iterations if i.is_manual_edit)
        assert history.session.current_prompt == history.iterations[-1].prompt_text

    @pytest.mark.asyncio
    async def test_concurrent_refines_get_distinct_numbers(self, service, cat_session, llm):
        counter = {"n": 0}

        async def slow_provider(**kwargs):
            counter["n"] += 1
            n = counter["n"]
            await asyncio.sleep(0.01 * (5 - n))
            return json.dumps({"refinedPrompt": f"variant {n}", "confidence": 0.7})

        llm.generate_text.side_effect = slow_provider

        results = await asyncio.gather(
            *[service.refine(cat_session.id, feedback=f"change {i}") for i in range(4)]
        )

        assert sorted(r.iteration_number for r in results) == [2, 3, 4, 5]
        history = service.get_session(cat_session.id)
        assert history.session.current_prompt == history.iterations[-1].prompt_text
        assert len(history.feedback) == 4

    @pytest.mark.asyncio
    async def test_numbering_conflict_is_retried(self, service, cat_session, monkeypatch):
        await service.refine(cat_session.id, manual_edit="A dog")

        real_next_number = SqlIterationLedger.next_number
        calls = []

        def stale_once(self, session_id):
            calls.append(session_id)
            if len(calls) == 1:
                return 2
            return real_next_number(self, session_id)

        monkeypatch.setattr(SqlIterationLedger, "next_number", stale_once)

        result = await service.refine(cat_session.id, feedback="make it night time")

        assert len(calls) == 2
        assert result.iteration_number == 3
        history = service.get_session(cat_session.id)
        assert [i.iteration_number for i in history.iterations] == [2, 3]
        assert len(history.feedback) == 1

    @pytest.mark.asyncio
    async def test_persistent_conflict_gives_up(self, service, cat_session, monkeypatch):
        await service.refine(cat_session.id, manual_edit="A dog")
        monkeypatch.setattr(SqlIterationLedger, "next_number", lambda self, session_id: 2)

        with pytest.raises(PersistenceError, match="Failed to create prompt iteration"):
            await service.refine(cat_session.id, manual_edit="A bird")

        assert service.get_session(cat_session.id).session.current_prompt == "A dog"

    @pytest.mark.asyncio
    async def test_failed_feedback_write_rolls_back_iteration(self, service, cat_session, monkeypatch):
        monkeypatch.setattr(SqlFeedbackLog, "append", _db_down)

        with pytest.raises(PersistenceError):
            await service.refine(cat_session.id, feedback="make it night time")

        history = service.get_session(cat_session.id)
        assert history.iterations == []
        assert history.session.current_prompt == "A cat in a garden"

    @pytest.mark.asyncio
    async def test_session_id_required(self, service):
        with pytest.raises(ValidationError, match="Session ID is required"):
            await service.refine(None, feedback="make it night time")

    @pytest.mark.asyncio
    async def test_unknown_session(self, service, llm):
        with pytest.raises(SessionNotFoundError):
            await service.refine("does-not-exist", feedback="make it night time")
        llm.generate_text.assert_not_awaited()


class TestGetSession:

    @pytest.mark.asyncio
    async def test_full_history(self, service, cat_session):
        await service.refine(cat_session.id, feedback="make it night time")
        await service.refine(cat_session.id, manual_edit="A dog", feedback="use a dog")

        history = service.get_session(cat_session.id)

        assert history.total_iterations == 2
        assert [i.iteration_type for i in history.iterations] == [
            IterationType.AI_REFINED,
            IterationType.MANUAL_EDIT,
        ]
        assert [f.feedback_text for f in history.feedback] == ["make it night time", "use a dog"]
        assert history.fetch_errors == []

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get_session("does-not-exist")

    def test_session_id_required(self, service):
        with pytest.raises(ValidationError):
            service.get_session("")

    @pytest.mark.asyncio
    async def test_failed_iteration_fetch_degrades_to_empty(self, service, cat_session, monkeypatch):
        await service.refine(cat_session.id, feedback="make it night time")
        monkeypatch.setattr(SqlIterationLedger, "list_by_session", _db_down)

        history = service.get_session(cat_session.id)

        assert history.iterations == []
        assert history.total_iterations == 0
        assert len(history.feedback) == 1
        assert len(history.fetch_errors) == 1
        assert isinstance(history.fetch_errors[0], PartialFetchError)
        assert history.fetch_errors[0].resource == "iterations"

    def test_failed_session_fetch_is_an_error(self, service, cat_session, monkeypatch):
        monkeypatch.setattr(SqlSessionStore, "get", _db_down)
        with pytest.raises(PersistenceError):
            service.get_session(cat_session.id)
