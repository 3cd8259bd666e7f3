"""Tests for the prompt template."""

from dream_rag.query import PromptTemplate
from dream_rag.query.prompts import DREAM_INTERPRETER_PREAMBLE


class TestPromptTemplate:
    """Test prompt rendering."""

    def test_contains_all_sections_in_order(self):
        prompt = PromptTemplate().render("Paris is the capital of France.\n--\n", "What is the capital of France?")

        preamble_at = prompt.index(DREAM_INTERPRETER_PREAMBLE.strip()[:40])
        context_at = prompt.index("Paris is the capital of France.")
        question_at = prompt.index("What is the capital of France?")
        assert preamble_at < context_at < question_at
        assert prompt.rstrip().endswith("Answer as markdown:")

    def test_render_is_deterministic(self):
        template = PromptTemplate()
        assert template.render("ctx", "q") == template.render("ctx", "q")

    def test_empty_context_still_renders(self):
        """Test that an empty context leaves an empty section."""
        prompt = PromptTemplate().render("", "I dreamed of falling")

        assert "Context sections:\n\n" in prompt
        assert "I dreamed of falling" in prompt

    def test_question_is_trimmed(self):
        prompt = PromptTemplate().render("", "  why water?  \n")
        assert "Question:\nwhy water?\n" in prompt

    def test_custom_preamble(self):
        prompt = PromptTemplate(preamble="Be brief.").render("ctx", "q")

        assert prompt.startswith("Be brief.")
        assert "dream interpreting expert" not in prompt

    def test_empty_preamble_uses_default(self):
        assert PromptTemplate(preamble="").preamble == DREAM_INTERPRETER_PREAMBLE
