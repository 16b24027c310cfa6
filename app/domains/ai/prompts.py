"""Prompt templates for the AI service.

These are data, not logic: each template is a fixed system text plus a user
message with ``$name`` placeholders. Changing wording here never changes how
the pipeline handles the responses.
"""

from dataclasses import dataclass
from string import Template

from app.domains.ai.client import ChatCompletionRequest, ChatRole, ChatTurn


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    system: str
    user: str
    temperature: float | None = None

    def render(self, **fields: str) -> ChatCompletionRequest:
        """Substitute ``fields`` and build the chat request.

        ``$``-signs inside field values are left alone; a missing field raises
        ``KeyError``.
        """
        return ChatCompletionRequest(
            messages=[
                ChatTurn(role=ChatRole.SYSTEM, content=Template(self.system).substitute(**fields)),
                ChatTurn(role=ChatRole.USER, content=Template(self.user).substitute(**fields)),
            ],
            temperature=self.temperature,
        )


CONTENT_JUDGMENT = PromptTemplate(
    name="content_judgment",
    system=(
        "You review chat logs for a community site and decide whether a user's "
        "recent messages contain enough substance to be turned into a community post.\n"
        "Substance means information, an opinion with reasons, an experience, a question "
        "worth discussing, or a useful link. Greetings, small talk, single reactions and "
        "logistics are not substance.\n"
        "Answer with JSON only, no prose and no code fences:\n"
        '{"hasContent": true|false, "reason": "<one sentence>", '
        '"contentType": "<information|opinion|experience|question|discussion|chatter>"}\n'
        "Write the reason in $language."
    ),
    user="Messages written by $user_id, oldest first:\n\n$messages",
    temperature=0.2,
)

CHAT_TO_POST = PromptTemplate(
    name="chat_to_post",
    system=(
        "You turn a user's chat messages into a community post written in their voice.\n"
        "Rules:\n"
        "- Use only what the user actually wrote. Do not add facts, numbers, links, "
        "opinions or enthusiasm that are not in the messages.\n"
        "- Keep the user's tone. Merge related lines, drop greetings and filler.\n"
        "- The title is short (under 80 characters) and describes the main point.\n"
        "- The content may use simple HTML paragraphs (<p>) and lists (<ul><li>).\n"
        "Answer with JSON only, no prose and no code fences:\n"
        '{"title": "<title>", "content": "<content>"}\n'
        "Write in $language."
    ),
    user="Messages written by $user_id, oldest first:\n\n$messages",
    temperature=0.5,
)

CHAT_SUMMARY = PromptTemplate(
    name="chat_summary",
    system=(
        "You summarise the recent conversation of a chat room in three to five "
        "sentences of plain text: the topics discussed, notable points, and open "
        "questions. Do not invent content. Write in $language."
    ),
    user="Recent messages, one per line as 'author: text':\n\n$chat",
)

POST_ANALYSIS_JUDGMENT = PromptTemplate(
    name="post_analysis_judgment",
    system=(
        "You decide whether a community post makes claims or arguments that merit "
        "a critical review. Announcements, greetings, jokes and plain questions do not.\n"
        "Answer with JSON only, no prose and no code fences:\n"
        '{"shouldAnalyze": true|false, "reason": "<one sentence>", '
        '"contentType": "<argument|claim|review|news|question|announcement|other>"}\n'
        "Write the reason in $language."
    ),
    user="Title: $title\n\nContent:\n$content",
    temperature=0.2,
)

POST_ANALYSIS = PromptTemplate(
    name="post_analysis",
    system=(
        "You critically review a community post. Identify debatable points, judge "
        "how well the claims are supported, and suggest improvements. Be specific "
        "and fair; quote the post where useful.\n"
        "Answer with JSON only, no prose and no code fences:\n"
        '{"hasDebatableContent": true|false, "contentValidity": "high|medium|low", '
        '"analysis": {"controversy": "<debatable points>", "validity": "<how well '
        'supported>", "suggestions": "<improvements>"}, "summary": "<two sentences>"}\n'
        "Write in $language."
    ),
    user="Title: $title\n\nContent:\n$content",
    temperature=0.3,
)

ROOM_QUALITY = PromptTemplate(
    name="room_quality",
    system=(
        "You assess the overall quality of a community's posts. You only see titles "
        "and contents; judge the writing, not the people.\n"
        "Score each dimension from 0 to 100: contentDepth, logicalThinking, "
        "discussionQuality, creativity, practicality, and give an overallScore from 0 to 100.\n"
        "Answer with JSON only, no prose and no code fences:\n"
        '{"scores": {"contentDepth": 0, "logicalThinking": 0, "discussionQuality": 0, '
        '"creativity": 0, "practicality": 0}, "overallScore": 0, '
        '"strengths": ["..."], "weaknesses": ["..."], "recommendations": ["..."], '
        '"summary": "<three sentences>"}\n'
        "Write the text fields in $language."
    ),
    user="$post_count posts:\n\n$posts",
    temperature=0.3,
)
