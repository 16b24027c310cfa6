"""
Unit tests for prompt templates.
"""

import pytest

from app.domains.ai import prompts
from app.domains.ai.client import ChatRole

ALL_TEMPLATES = [
    prompts.CONTENT_JUDGMENT,
    prompts.CHAT_TO_POST,
    prompts.CHAT_SUMMARY,
    prompts.POST_ANALYSIS_JUDGMENT,
    prompts.POST_ANALYSIS,
    prompts.ROOM_QUALITY,
]


class TestPromptTemplate:
    def test_render_builds_system_and_user_turns(self):
        request = prompts.CHAT_TO_POST.render(
            language="English", user_id="alice", messages="hi\nit's 20% faster"
        )

        assert [turn.role for turn in request.messages] == [ChatRole.SYSTEM, ChatRole.USER]
        assert "Write in English." in request.messages[0].content
        assert "alice" in request.messages[1].content
        assert "it's 20% faster" in request.messages[1].content
        assert request.temperature == prompts.CHAT_TO_POST.temperature

    def test_dollar_signs_in_values_are_kept(self):
        request = prompts.CHAT_SUMMARY.render(language="English", chat="bob: costs $5 per $unit")

        assert "bob: costs $5 per $unit" in request.messages[1].content

    def test_missing_field_raises(self):
        with pytest.raises(KeyError):
            prompts.CONTENT_JUDGMENT.render(language="English", user_id="alice")

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.name)
    def test_every_template_names_the_language(self, template):
        assert "$language" in template.system

    def test_templates_have_unique_names(self):
        assert len({t.name for t in ALL_TEMPLATES}) == len(ALL_TEMPLATES)
