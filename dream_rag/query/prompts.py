"""Prompt template for dream interpretation answers."""

DREAM_INTERPRETER_PREAMBLE = (
    "You are a very enthusiastic dream interpreting expert who loves to help people! "
    "Given the following sections from the dream documentation, answer the question "
    "using only that information, outputted in markdown format. If the sections are "
    "empty or unrelated, offer an interpretation people can relate to. Your answer "
    "should sound like the wording reference.\n"
    "\n"
    "Wording reference:\n"
    '"You have not seen the world as it is. You have only seen it reflected in the '
    "mirror of your mind, and that mirror is shaped by everything you identify with. "
    'A dream is that same mirror, turned inward."'
)

PROMPT_LAYOUT = """{preamble}

Context sections:
{context}

Question:
{question}

Answer as markdown:
"""


class PromptTemplate:
    """Renders the final prompt from a preamble, context and question."""

    def __init__(self, preamble: str | None = None, layout: str = PROMPT_LAYOUT):
        """Initialize the template.

        Args:
            preamble: Persona and style instructions, defaults to the dream
                interpreter persona
            layout: Format string with preamble, context and question fields
        """
        self.preamble = preamble or DREAM_INTERPRETER_PREAMBLE
        self.layout = layout

    def render(self, context: str, question: str) -> str:
        """Render the prompt.

        Both fields are always rendered, so an empty context shows up as an
        empty section rather than disappearing.
        """
        return self.layout.format(
            preamble=self.preamble.strip(),
            context=context.strip(),
            question=question.strip(),
        )
