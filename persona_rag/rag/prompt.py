"""
Persona prompt template.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Sequence

from persona_rag.config import DEFAULT_PERSONA_DESCRIPTION, DEFAULT_PERSONA_NAME
from persona_rag.errors import MissingVariable
from persona_rag.vector_store.base import Match

CONTEXT_SEPARATOR = "\n\n"
TEMPLATE_VARIABLES = ("context", "question")

PERSONA_PREAMBLE = """\
You are an AI emulating {persona_name}, {persona_description}.
Use the provided context to answer accurately as if you were {persona_name}, speaking in the first person."""

PROMPT_TEMPLATE = """\
{preamble}

CONTEXT:
{{context}}

QUESTION:
{{question}}

Guidelines:
- Base your response strictly on the provided context.
- If the context doesn't contain enough information, say so plainly instead of guessing.
- Never invent facts that are not in the context.
- Maintain a friendly, conversational tone.

ANSWER:
"""


@dataclass(frozen=True)
class PromptContext:
    context: str
    question: str


def join_context(matches: Sequence[Match]) -> str:
    return CONTEXT_SEPARATOR.join(match.content for match in matches)


class PromptBuilder:
    """Renders the persona template; `context` and `question` are the only variables."""

    def __init__(
        self,
        persona_name: str = DEFAULT_PERSONA_NAME,
        persona_description: str = DEFAULT_PERSONA_DESCRIPTION,
    ) -> None:
        self.persona_name = persona_name
        self.persona_description = persona_description
        preamble = PERSONA_PREAMBLE.format(persona_name=persona_name, persona_description=persona_description)
        self.preamble = preamble
        # Escape braces that came from the persona text so only the two variables remain
        self.template = PROMPT_TEMPLATE.format(preamble=preamble.replace("{", "{{").replace("}", "}}"))

    @property
    def variables(self) -> tuple[str, ...]:
        return tuple(name for _, name, _, _ in string.Formatter().parse(self.template) if name)

    def build(self, context: str | None, question: str | None) -> str:
        if context is None:
            raise MissingVariable("context")
        if question is None:
            raise MissingVariable("question")
        return self.template.format(context=context, question=question)

    def build_from(self, prompt_context: PromptContext) -> str:
        return self.build(prompt_context.context, prompt_context.question)


__all__ = [
    "CONTEXT_SEPARATOR",
    "PromptBuilder",
    "PromptContext",
    "PROMPT_TEMPLATE",
    "TEMPLATE_VARIABLES",
    "join_context",
]
