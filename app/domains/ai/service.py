"""AI service layer: chat-to-post pipeline, publishing, and content analysis."""

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.domains.ai import prompts
from app.domains.ai.client import TextGenerationClient
from app.domains.ai.prompts import PromptTemplate
from app.exceptions.ai import AIParsingError
from app.exceptions.community import NoPostsToAnalyzeError, PostNotFoundError, RoomNotFoundError
from app.schemas.ai import (
    AIServiceStatus,
    ChatToPostResult,
    ContentJudgment,
    LLMContract,
    PostAnalysis,
    PostAnalysisJudgment,
    PostAnalysisResponse,
    PostDraft,
    RoomQualityAnalysis,
    RoomQualityResponse,
    SyncOutcome,
)
from app.store.base import RecordStore
from app.store.records import MessageRecord, PostRecord, RoomRecord

logger = logging.getLogger(__name__)

ContractT = TypeVar("ContractT", bound=LLMContract)

_HTML_TAG = re.compile(r"<[^>]+>")

NO_MESSAGES_MESSAGE = "There are no messages from this user in the room."
NO_NEW_MESSAGES_MESSAGE = "There are no new messages since the last AI sync."


def fallback_title(user_id: str) -> str:
    """Title used when the generated post cannot be parsed."""
    return f"[AI generated] {user_id}'s chat summary"


def extract_json_object(response: str) -> dict[str, Any]:
    """Parse the outermost JSON object in a model response.

    Models often wrap JSON in code fences or a sentence of prose, so this
    takes everything from the first ``{`` to the last ``}``.

    Raises:
        AIParsingError: If no JSON object can be decoded.
    """
    json_start = response.find("{")
    json_end = response.rfind("}") + 1

    if json_start == -1 or json_end == 0:
        raise AIParsingError("No JSON found in response")

    try:
        data = json.loads(response[json_start:json_end])
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI JSON: {str(e)}")
        raise AIParsingError(f"Invalid JSON response: {str(e)}") from e

    if not isinstance(data, dict):
        raise AIParsingError("AI response JSON is not an object")
    return data


def parse_contract(response: str, model: type[ContractT], stage: str) -> ContractT:
    """Parse ``response`` into ``model`` or raise ``AIParsingError`` naming the stage."""
    data = extract_json_object(response)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        logger.error(f"AI {stage} response has the wrong shape: {str(e)}")
        raise AIParsingError(
            f"Failed to parse AI {stage} response",
            details={"stage": stage, "errors": e.errors(include_url=False, include_context=False)},
        ) from e


def strip_html(content: str) -> str:
    return _HTML_TAG.sub(" ", content).strip()


class AIService:
    """Service class for AI operations.

    All state lives in the record store; the service only reads messages and
    posts, calls the text-generation client, and parses its answers.
    """

    def __init__(self, store: RecordStore, client: TextGenerationClient):
        """Initialize AI service.

        Args:
            store: Record store for rooms, messages, posts and the sync cursor.
            client: Text-generation client used for every model call.
        """
        self.store = store
        self.client = client
        self.language = settings.ai_response_language

    async def _ask(self, template: PromptTemplate, **fields: str) -> str:
        request = template.render(language=self.language, **fields)
        return await self.client.complete(request)

    async def _get_room(self, room_id: str) -> RoomRecord:
        room = await self.store.get_room(room_id)
        if not room:
            raise RoomNotFoundError()
        return room

    # Chat-to-post pipeline

    async def generate_post_preview(
        self, room_id: str, user_id: str, message_count: int | None = None
    ) -> ChatToPostResult:
        """Turn the user's unsynced chat messages into a post preview.

        Runs gather, judge, generate and summarize in order. Nothing is
        written: the post and the sync cursor only change in ``publish_post``.

        Args:
            room_id: Room to read.
            user_id: Message author whose messages become the post.
            message_count: Requested sample size. Every unsynced message is
                still read, because publishing moves the cursor past all of
                them; a larger backlog is only logged.

        Returns:
            ChatToPostResult with one of the ``SyncOutcome`` values.

        Raises:
            RoomNotFoundError: If the room does not exist.
            AIParsingError: If the judgment cannot be parsed.
            AIServiceError: If a judgment or generation call fails.
        """
        await self._get_room(room_id)

        # Step 1: gather
        cursor = await self.store.get_sync_cursor(room_id, user_id)
        messages = await self.store.list_user_messages_since(room_id, user_id, cursor)
        texts = [m.text for m in messages if m.text and m.text.strip()]
        if message_count and len(texts) > message_count:
            logger.warning(
                f"AI sync backlog for {user_id} in room {room_id}: {len(texts)} messages, "
                f"{message_count} requested; using all of them"
            )
        logger.info(
            f"AI sync gather: room={room_id} user={user_id} cursor={cursor} messages={len(texts)}"
        )

        if not texts:
            if await self.store.has_any_sync(room_id):
                return ChatToPostResult(
                    outcome=SyncOutcome.NO_NEW_MESSAGES, message=NO_NEW_MESSAGES_MESSAGE
                )
            return ChatToPostResult(outcome=SyncOutcome.NO_MESSAGES, message=NO_MESSAGES_MESSAGE)

        user_text = "\n".join(texts)

        # Step 2: judge
        judgment_response = await self._ask(
            prompts.CONTENT_JUDGMENT, user_id=user_id, messages=user_text
        )
        judgment = parse_contract(judgment_response, ContentJudgment, "content judgment")
        logger.info(
            f"AI sync judgment: has_content={judgment.has_content} "
            f"type={judgment.content_type!r} reason={judgment.reason!r}"
        )

        if not judgment.has_content:
            return ChatToPostResult(
                outcome=SyncOutcome.INSUFFICIENT_CONTENT,
                message_count=len(texts),
                reason=judgment.reason,
                content_type=judgment.content_type,
                message=f"Not enough content to turn into a post. ({judgment.reason})",
            )

        # Step 3: generate
        post_response = await self._ask(prompts.CHAT_TO_POST, user_id=user_id, messages=user_text)
        draft = self._build_draft(post_response, user_id)
        logger.info(f"AI sync preview generated: {draft.title!r}")

        # Step 4: summarize (best effort)
        summary = await self._summarize_room(room_id)

        return ChatToPostResult(
            outcome=SyncOutcome.GENERATED,
            post=draft,
            summary=summary,
            message_count=len(texts),
            reason=judgment.reason,
            content_type=judgment.content_type,
            message="Post preview generated. Review it and confirm to publish.",
        )

    def _build_draft(self, response: str, user_id: str) -> PostDraft:
        """Parse the generated post, falling back to a default title and the raw text."""
        try:
            data = extract_json_object(response)
        except AIParsingError:
            logger.warning("Generated post is not JSON; using fallback title and raw response")
            data = {}

        title = data.get("title")
        content = data.get("content")
        title = title.strip() if isinstance(title, str) else ""
        content = content.strip() if isinstance(content, str) else ""

        return PostDraft(
            title=title or fallback_title(user_id),
            content=content or response.strip() or fallback_title(user_id),
        )

    async def _summarize_room(self, room_id: str) -> str | None:
        try:
            recent = await self.store.list_recent_messages(room_id, settings.ai_summary_window)
            chat = "\n".join(self._format_chat_line(m) for m in recent if m.text)
            if not chat:
                return None
            summary = (await self._ask(prompts.CHAT_SUMMARY, chat=chat)).strip()
            return summary or None
        except Exception as e:
            logger.warning(f"Room summary failed for room {room_id}, omitting it: {str(e)}")
            return None

    @staticmethod
    def _format_chat_line(message: MessageRecord) -> str:
        return f"{message.author or 'anon'}: {message.text}"

    # Confirmation

    async def publish_post(
        self, room_id: str, user_id: str, title: str, content: str
    ) -> tuple[PostRecord, datetime]:
        """Create the confirmed post, then advance the (room, user) sync cursor.

        If creating the post raises, the cursor is not touched and the same
        messages stay eligible for the next preview.
        """
        await self._get_room(room_id)
        post = await self.store.create_post(room_id, title, content, author=user_id)
        synced_at = await self.store.record_sync(room_id, user_id)
        logger.info(f"Published AI post {post.id} in room {room_id} for {user_id}")
        return post, synced_at

    async def record_sync(self, room_id: str, user_id: str) -> datetime:
        await self._get_room(room_id)
        return await self.store.record_sync(room_id, user_id)

    # Analysis

    async def analyze_post(self, room_id: str, post_id: str) -> PostAnalysisResponse:
        """Judge whether the post merits critique, then critique it.

        Parse failures at either step raise ``AIParsingError``; there is no
        fallback result.
        """
        post = await self.store.get_post(room_id, post_id)
        if not post:
            raise PostNotFoundError()

        judgment_response = await self._ask(
            prompts.POST_ANALYSIS_JUDGMENT, title=post.title, content=post.content
        )
        judgment = parse_contract(judgment_response, PostAnalysisJudgment, "post analysis judgment")
        logger.info(f"Post {post_id} analysis judgment: should_analyze={judgment.should_analyze}")

        if not judgment.should_analyze:
            return PostAnalysisResponse(
                post_id=post.id,
                should_analyze=False,
                reason=judgment.reason,
                content_type=judgment.content_type,
                analysis_timestamp=datetime.now(UTC),
            )

        analysis_response = await self._ask(
            prompts.POST_ANALYSIS, title=post.title, content=post.content
        )
        analysis = parse_contract(analysis_response, PostAnalysis, "post analysis")

        return PostAnalysisResponse(
            post_id=post.id,
            should_analyze=True,
            reason=judgment.reason,
            content_type=judgment.content_type,
            analysis=analysis,
            analysis_timestamp=datetime.now(UTC),
        )

    async def analyze_room_quality(self, room_id: str) -> RoomQualityResponse:
        """Score the room's newest posts against the five-dimension rubric.

        Only titles and contents are sent; authors and dates are left out.

        Raises:
            NoPostsToAnalyzeError: If the room has no posts.
        """
        await self._get_room(room_id)
        posts = await self.store.list_posts(room_id, limit=settings.quality_analysis_post_limit)
        if not posts:
            raise NoPostsToAnalyzeError()

        logger.info(f"Analyzing room {room_id} quality with {len(posts)} posts")
        rendered = "\n\n".join(
            f"[{index}] Title: {post.title}\n{strip_html(post.content)}"
            for index, post in enumerate(posts, 1)
        )
        response = await self._ask(prompts.ROOM_QUALITY, post_count=str(len(posts)), posts=rendered)
        analysis = parse_contract(response, RoomQualityAnalysis, "room quality")

        return RoomQualityResponse(
            room_id=room_id,
            post_count=len(posts),
            analysis=analysis,
            analysis_timestamp=datetime.now(UTC),
        )

    def get_service_status(self) -> AIServiceStatus:
        if not settings.has_ai_enabled:
            return AIServiceStatus(service_available=False, model_name="not_configured")
        return AIServiceStatus(service_available=True, model_name=settings.gemini_model)
