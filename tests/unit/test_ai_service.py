"""
Unit tests for AIService.

The record store is the in-memory store on a fake clock and the
text-generation backend is a scripted client, so every test controls exactly
what the model "answers" and when messages were written.
"""

import json
from unittest.mock import patch

import pytest

from app.domains.ai.client import ChatRole
from app.domains.ai.service import (
    NO_MESSAGES_MESSAGE,
    NO_NEW_MESSAGES_MESSAGE,
    AIService,
    extract_json_object,
    fallback_title,
    parse_contract,
    strip_html,
)
from app.exceptions.ai import AIParsingError, AIRateLimitError, AIServiceError, AITimeoutError
from app.exceptions.community import NoPostsToAnalyzeError, PostNotFoundError, RoomNotFoundError
from app.schemas.ai import ContentJudgment, ContentValidity, SyncOutcome
from app.store.records import MessageKind

ALICE_MESSAGES = ["hi", "anyone tried the new model?", "it's 20% faster"]


@pytest.fixture
def service(store, text_client):
    return AIService(store, text_client)


async def _chat(store, room_id, author, texts, clock=None):
    for text in texts:
        await store.add_message(room_id, text, author=author)
        if clock:
            clock.advance(1)


class TestJsonHelpers:
    """Test cases for response parsing helpers."""

    def test_extract_json_object_from_code_fence(self):
        response = 'Sure!\n```json\n{"title": "T", "content": "C"}\n```\nDone.'

        assert extract_json_object(response) == {"title": "T", "content": "C"}

    def test_extract_json_object_no_json(self):
        with pytest.raises(AIParsingError):
            extract_json_object("I cannot help with that.")

    def test_extract_json_object_invalid_json(self):
        with pytest.raises(AIParsingError):
            extract_json_object('{"title": "T", }')

    def test_parse_contract_accepts_camel_case(self):
        judgment = parse_contract(
            '{"hasContent": true, "reason": "r", "contentType": "opinion"}',
            ContentJudgment,
            "content judgment",
        )

        assert judgment.has_content is True
        assert judgment.content_type == "opinion"

    def test_parse_contract_wrong_shape(self):
        with pytest.raises(AIParsingError) as exc_info:
            parse_contract('{"reason": "missing flag"}', ContentJudgment, "content judgment")

        assert exc_info.value.details["stage"] == "content judgment"

    def test_fallback_title(self):
        assert fallback_title("alice") == "[AI generated] alice's chat summary"

    def test_strip_html(self):
        assert strip_html("<p>Hello <b>there</b></p>") == "Hello  there"


class TestChatToPostPipeline:
    """Test cases for generate_post_preview."""

    @pytest.mark.asyncio
    async def test_generates_preview(
        self,
        service,
        store,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(
            judgment_has_content, generated_post_response, "Alice asked about the new model."
        )

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.GENERATED
        assert result.post.title == "The new model is 20% faster"
        assert "20% faster" in result.post.content
        assert result.summary == "Alice asked about the new model."
        assert result.message_count == 3
        assert result.content_type == "information"
        assert text_client.call_count == 3

    @pytest.mark.asyncio
    async def test_judgment_sees_only_the_users_messages(
        self,
        service,
        store,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        await store.add_message(test_room.id, "bob's unrelated line", author="bob")
        text_client.queue(judgment_has_content, generated_post_response, "summary")

        await service.generate_post_preview(test_room.id, "alice")

        judgment_request = text_client.requests[0]
        assert judgment_request.messages[0].role == ChatRole.SYSTEM
        user_turn = judgment_request.messages[1].content
        assert "hi\nanyone tried the new model?\nit's 20% faster" in user_turn
        assert "bob's unrelated line" not in user_turn

    @pytest.mark.asyncio
    async def test_summary_sees_the_whole_room(
        self,
        service,
        store,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ["first point"])
        await store.add_message(test_room.id, "a reply", author="bob")
        text_client.queue(judgment_has_content, generated_post_response, "summary")

        await service.generate_post_preview(test_room.id, "alice")

        summary_turn = text_client.requests[2].messages[1].content
        assert "alice: first point" in summary_turn
        assert "bob: a reply" in summary_turn

    @pytest.mark.asyncio
    async def test_preview_has_no_side_effects(
        self,
        service,
        store,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(judgment_has_content, generated_post_response, "summary")

        await service.generate_post_preview(test_room.id, "alice")

        assert await store.list_posts(test_room.id) == []
        assert await store.get_sync_cursor(test_room.id, "alice") is None

    @pytest.mark.asyncio
    async def test_no_messages(self, service, text_client, test_room):
        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.NO_MESSAGES
        assert result.message == NO_MESSAGES_MESSAGE
        assert result.post is None
        assert result.is_terminal_without_messages
        assert text_client.call_count == 0

    @pytest.mark.asyncio
    async def test_no_new_messages_after_sync(self, service, store, text_client, fake_clock, test_room):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        fake_clock.advance(5)
        await store.record_sync(test_room.id, "alice")
        fake_clock.advance(5)

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.NO_NEW_MESSAGES
        assert result.message == NO_NEW_MESSAGES_MESSAGE
        assert text_client.call_count == 0

    @pytest.mark.asyncio
    async def test_message_at_cursor_time_is_excluded(
        self, service, store, text_client, fake_clock, test_room
    ):
        await store.record_sync(test_room.id, "alice")
        await store.add_message(test_room.id, "written at the sync instant", author="alice")

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.NO_NEW_MESSAGES
        assert text_client.call_count == 0

    @pytest.mark.asyncio
    async def test_only_messages_after_cursor_are_used(
        self,
        service,
        store,
        text_client,
        fake_clock,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ["old news"], fake_clock)
        await store.record_sync(test_room.id, "alice")
        fake_clock.advance(1)
        await _chat(store, test_room.id, "alice", ["fresh take"], fake_clock)
        text_client.queue(judgment_has_content, generated_post_response, "summary")

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.message_count == 1
        judgment_turn = text_client.requests[0].messages[1].content
        assert "fresh take" in judgment_turn
        assert "old news" not in judgment_turn

    @pytest.mark.asyncio
    async def test_message_count_never_drops_unsynced_messages(
        self,
        service,
        store,
        text_client,
        fake_clock,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", [f"point {i}" for i in range(5)], fake_clock)
        text_client.queue(judgment_has_content, generated_post_response, "summary")

        result = await service.generate_post_preview(test_room.id, "alice", message_count=2)

        assert result.message_count == 5
        judgment_turn = text_client.requests[0].messages[1].content
        assert "point 0\npoint 1\npoint 2\npoint 3\npoint 4" in judgment_turn

        fake_clock.advance(1)
        await service.publish_post(test_room.id, "alice", result.post.title, result.post.content)
        again = await service.generate_post_preview(test_room.id, "alice")

        assert again.outcome == SyncOutcome.NO_NEW_MESSAGES

    @pytest.mark.asyncio
    async def test_insufficient_content(
        self, service, store, text_client, test_room, judgment_no_content
    ):
        await _chat(store, test_room.id, "alice", ["hi", "hello"])
        text_client.queue(judgment_no_content)

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.INSUFFICIENT_CONTENT
        assert result.post is None
        assert result.reason == "Only greetings"
        assert result.content_type == "chatter"
        assert text_client.call_count == 1

    @pytest.mark.asyncio
    async def test_unparseable_judgment_is_terminal(self, service, store, text_client, test_room):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue("Yes, this looks like good content!")

        with pytest.raises(AIParsingError):
            await service.generate_post_preview(test_room.id, "alice")

        assert text_client.call_count == 1

    @pytest.mark.asyncio
    async def test_unparseable_post_uses_fallback_title(
        self, service, store, text_client, test_room, judgment_has_content
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(judgment_has_content, "The new model is faster, says alice.", "summary")

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.GENERATED
        assert result.post.title == "[AI generated] alice's chat summary"
        assert result.post.content == "The new model is faster, says alice."

    @pytest.mark.asyncio
    async def test_post_missing_title_uses_fallback_title(
        self, service, store, text_client, test_room, judgment_has_content
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(judgment_has_content, json.dumps({"content": "Body only"}), "summary")

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.post.title == fallback_title("alice")
        assert result.post.content == "Body only"

    @pytest.mark.asyncio
    async def test_summary_failure_is_tolerated(
        self,
        service,
        store,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(
            judgment_has_content, generated_post_response, AITimeoutError("summary timed out")
        )

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.GENERATED
        assert result.post is not None
        assert result.summary is None

    @pytest.mark.asyncio
    async def test_generation_transport_error_propagates(
        self, service, store, text_client, test_room, judgment_has_content
    ):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(judgment_has_content, AIRateLimitError("slow down", retry_after=30))

        with pytest.raises(AIRateLimitError):
            await service.generate_post_preview(test_room.id, "alice")

        assert text_client.call_count == 2

    @pytest.mark.asyncio
    async def test_blank_messages_are_ignored(self, service, store, text_client, test_room):
        await store.add_message(test_room.id, "   ", author="alice")
        await store.add_message(test_room.id, None, author="alice", kind=MessageKind.SYSTEM)

        result = await service.generate_post_preview(test_room.id, "alice")

        assert result.outcome == SyncOutcome.NO_MESSAGES

    @pytest.mark.asyncio
    async def test_unknown_room(self, service):
        with pytest.raises(RoomNotFoundError):
            await service.generate_post_preview("missing-room", "alice")


class TestPublish:
    """Test cases for publish_post and record_sync."""

    @pytest.mark.asyncio
    async def test_publish_creates_post_and_advances_cursor(
        self, service, store, fake_clock, test_room
    ):
        fake_clock.advance(30)

        post, synced_at = await service.publish_post(
            test_room.id, "alice", "Faster model", "It's 20% faster"
        )

        assert post.author == "alice"
        assert post.title == "Faster model"
        assert synced_at == fake_clock.current
        assert await store.get_sync_cursor(test_room.id, "alice") == synced_at
        assert [p.id for p in await store.list_posts(test_room.id)] == [post.id]

    @pytest.mark.asyncio
    async def test_failed_post_creation_leaves_cursor(self, service, store, test_room):
        with patch.object(store, "create_post", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                await service.publish_post(test_room.id, "alice", "Title", "Content")

        assert await store.get_sync_cursor(test_room.id, "alice") is None

    @pytest.mark.asyncio
    async def test_publish_unknown_room(self, service, store):
        with pytest.raises(RoomNotFoundError):
            await service.publish_post("missing-room", "alice", "Title", "Content")

    @pytest.mark.asyncio
    async def test_record_sync(self, service, store, fake_clock, test_room):
        synced_at = await service.record_sync(test_room.id, "alice")

        assert synced_at == fake_clock.current
        assert await store.has_any_sync(test_room.id)


class TestPostAnalysis:
    """Test cases for analyze_post."""

    @pytest.mark.asyncio
    async def test_analyze_post(self, service, text_client, test_room, test_post, post_analysis_response):
        text_client.queue(
            json.dumps({"shouldAnalyze": True, "reason": "Makes a claim", "contentType": "claim"}),
            post_analysis_response,
        )

        result = await service.analyze_post(test_room.id, test_post.id)

        assert result.should_analyze is True
        assert result.analysis.content_validity == ContentValidity.MEDIUM
        assert result.analysis.analysis.suggestions == "Link the benchmark"
        assert result.analysis.has_debatable_content is True
        assert "First impressions" in text_client.requests[0].messages[1].content

    @pytest.mark.asyncio
    async def test_analyze_post_not_needed(self, service, text_client, test_room, test_post):
        text_client.queue(
            json.dumps({"shouldAnalyze": False, "reason": "Just a greeting", "contentType": "other"})
        )

        result = await service.analyze_post(test_room.id, test_post.id)

        assert result.should_analyze is False
        assert result.analysis is None
        assert result.reason == "Just a greeting"
        assert text_client.call_count == 1

    @pytest.mark.asyncio
    async def test_analyze_post_unparseable_critique(self, service, text_client, test_room, test_post):
        text_client.queue(
            json.dumps({"shouldAnalyze": True, "reason": "r", "contentType": "claim"}),
            "The post is mostly fine.",
        )

        with pytest.raises(AIParsingError):
            await service.analyze_post(test_room.id, test_post.id)

    @pytest.mark.asyncio
    async def test_analyze_missing_post(self, service, text_client, test_room):
        with pytest.raises(PostNotFoundError):
            await service.analyze_post(test_room.id, "post_missing")

        assert text_client.call_count == 0


class TestRoomQuality:
    """Test cases for analyze_room_quality."""

    @pytest.mark.asyncio
    async def test_analyze_room_quality(
        self, service, store, text_client, test_room, room_quality_response
    ):
        await store.create_post(test_room.id, "Tips", "<p>Use <b>batching</b></p>", author="bob")
        text_client.queue(room_quality_response)

        result = await service.analyze_room_quality(test_room.id)

        assert result.post_count == 1
        assert result.analysis.overall_score == 72
        assert result.analysis.scores.practicality == 90
        prompt = text_client.requests[0].messages[1].content
        assert "Use  batching" in prompt
        assert "bob" not in prompt

    @pytest.mark.asyncio
    async def test_room_without_posts(self, service, text_client, test_room):
        with pytest.raises(NoPostsToAnalyzeError):
            await service.analyze_room_quality(test_room.id)

        assert text_client.call_count == 0

    @pytest.mark.asyncio
    async def test_score_out_of_range(self, service, store, text_client, test_post, test_room):
        text_client.queue(
            json.dumps(
                {
                    "scores": {
                        "contentDepth": 170,
                        "logicalThinking": 1,
                        "discussionQuality": 1,
                        "creativity": 1,
                        "practicality": 1,
                    },
                    "overallScore": 50,
                }
            )
        )

        with pytest.raises(AIParsingError):
            await service.analyze_room_quality(test_room.id)


class TestServiceStatus:
    def test_not_configured(self, service):
        with patch("app.domains.ai.service.settings") as mock_settings:
            mock_settings.has_ai_enabled = False

            status = service.get_service_status()

        assert status.service_available is False

    def test_configured(self, service):
        with patch("app.domains.ai.service.settings") as mock_settings:
            mock_settings.has_ai_enabled = True
            mock_settings.gemini_model = "gemini-1.5-flash"

            status = service.get_service_status()

        assert status.service_available is True
        assert status.model_name == "gemini-1.5-flash"

    @pytest.mark.asyncio
    async def test_ai_service_error_is_not_swallowed(self, service, store, text_client, test_room):
        await _chat(store, test_room.id, "alice", ALICE_MESSAGES)
        text_client.queue(AIServiceError("AI generation failed: boom"))

        with pytest.raises(AIServiceError, match="boom"):
            await service.generate_post_preview(test_room.id, "alice")
