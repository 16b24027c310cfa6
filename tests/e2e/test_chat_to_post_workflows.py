"""
End-to-end workflows for chat-to-post.

These drive the HTTP API the way the room page does: chat, preview, edit,
confirm, and preview again.
"""

from unittest.mock import patch

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.store.memory import InMemoryStore


class TestChatToPostWorkflow:
    """A user turns their chat into a post and the cursor moves on."""

    @pytest.mark.asyncio
    async def test_preview_confirm_then_nothing_new(
        self,
        client: AsyncClient,
        store,
        fake_clock,
        text_client,
        judgment_has_content,
        generated_post_response,
    ):
        room = (await client.post("/api/rooms", json={"name": "r1"})).json()["data"]
        for text in ["hi", "anyone tried the new model?", "it's 20% faster"]:
            await store.add_message(room["id"], text, author="alice")
            fake_clock.advance(1)

        text_client.queue(judgment_has_content, generated_post_response, "alice asked about a model.")
        preview = await client.post(
            f"/api/rooms/{room['id']}/ai/generate-posts", json={"user_id": "alice"}
        )
        assert preview.status_code == status.HTTP_200_OK
        draft = preview.json()["data"]["post"]
        assert preview.json()["data"]["outcome"] == "generated"
        assert "anyone tried the new model?" in text_client.requests[0].messages[1].content

        fake_clock.advance(5)
        confirm = await client.post(
            f"/api/rooms/{room['id']}/ai/confirm",
            json={"user_id": "alice", "title": draft["title"], "content": draft["content"] + " Edited."},
        )
        assert confirm.status_code == status.HTTP_201_CREATED

        posts = (await client.get(f"/api/rooms/{room['id']}/posts")).json()["posts"]
        assert len(posts) == 1
        assert posts[0]["content"].endswith("Edited.")

        again = await client.post(
            f"/api/rooms/{room['id']}/ai/generate-posts", json={"user_id": "alice"}
        )
        assert again.status_code == status.HTTP_400_BAD_REQUEST
        assert again.json()["error_code"] == "NO_NEW_MESSAGES"
        assert text_client.call_count == 3

    @pytest.mark.asyncio
    async def test_only_messages_after_confirm_are_used(
        self,
        client: AsyncClient,
        store,
        fake_clock,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await store.add_message(test_room.id, "old point", author="alice")
        fake_clock.advance(1)
        await client.post(
            f"/api/rooms/{test_room.id}/ai/confirm",
            json={"user_id": "alice", "title": "Old post", "content": "Old content"},
        )
        fake_clock.advance(1)
        await store.add_message(test_room.id, "new point", author="alice")

        text_client.queue(judgment_has_content, generated_post_response, "summary")
        response = await client.post(
            f"/api/rooms/{test_room.id}/ai/generate-posts", json={"user_id": "alice"}
        )

        assert response.json()["data"]["message_count"] == 1
        prompt = text_client.requests[0].messages[1].content
        assert "new point" in prompt
        assert "old point" not in prompt

    @pytest.mark.asyncio
    async def test_manual_post_then_record_sync(
        self, client: AsyncClient, store, fake_clock, test_room
    ):
        await store.add_message(test_room.id, "something useful", author="alice")
        fake_clock.advance(1)

        created = await client.post(
            f"/api/rooms/{test_room.id}/posts",
            json={"title": "Written by hand", "content": "Body", "author": "alice"},
        )
        assert created.status_code == status.HTTP_201_CREATED
        await client.post(f"/api/rooms/{test_room.id}/ai/record-sync", json={"user_id": "alice"})

        response = await client.post(
            f"/api/rooms/{test_room.id}/ai/generate-posts", json={"user_id": "alice"}
        )
        assert response.json()["error_code"] == "NO_NEW_MESSAGES"

    @pytest.mark.asyncio
    async def test_failed_publish_keeps_messages_eligible(
        self,
        client: AsyncClient,
        store,
        fake_clock,
        text_client,
        test_room,
        judgment_has_content,
        generated_post_response,
    ):
        await store.add_message(test_room.id, "it's 20% faster", author="alice")
        fake_clock.advance(1)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        with patch.object(InMemoryStore, "create_post", side_effect=RuntimeError("disk full")):
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                failed = await ac.post(
                    f"/api/rooms/{test_room.id}/ai/confirm",
                    json={"user_id": "alice", "title": "Faster", "content": "It is faster"},
                )

        assert failed.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert await store.get_sync_cursor(test_room.id, "alice") is None
        assert await store.list_posts(test_room.id) == []

        text_client.queue(judgment_has_content, generated_post_response, "summary")
        retry = await client.post(
            f"/api/rooms/{test_room.id}/ai/generate-posts", json={"user_id": "alice"}
        )
        assert retry.json()["data"]["outcome"] == "generated"
        assert retry.json()["data"]["message_count"] == 1

    @pytest.mark.asyncio
    async def test_cursors_are_per_user(
        self,
        client: AsyncClient,
        store,
        fake_clock,
        text_client,
        test_room,
        judgment_no_content,
    ):
        await store.add_message(test_room.id, "alice here", author="alice")
        await store.add_message(test_room.id, "bob here", author="bob")
        fake_clock.advance(1)
        await client.post(f"/api/rooms/{test_room.id}/ai/record-sync", json={"user_id": "alice"})

        text_client.queue(judgment_no_content)
        response = await client.post(
            f"/api/rooms/{test_room.id}/ai/generate-posts", json={"user_id": "bob"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["outcome"] == "insufficient_content"
        assert "bob here" in text_client.requests[0].messages[1].content
