"""Unit tests for the LLM client and the AnswerGenerator."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from conftest import ScriptedLLM
from persona_rag.errors import BackendUnavailable, EmptyCompletion, RateLimited
from persona_rag.llm.client import LLMClient
from persona_rag.llm.generator import AnswerGenerator
from persona_rag.rag.prompt import PromptBuilder, PromptContext

CHAT_URL = "https://api.openai.com/v1/chat/completions"


# ── Fakes ──


class FakeCompletions:
    def __init__(self, content=None, error=None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def make_llm(completions: FakeCompletions) -> LLMClient:
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return LLMClient(model="test-chat", temperature=0.0, client=client)


# ── LLMClient ──


@pytest.mark.asyncio
async def test_complete_returns_content_unmodified():
    completions = FakeCompletions(content="  Go\n")
    llm = make_llm(completions)

    assert await llm.complete("prompt text") == "  Go\n"
    assert completions.calls[0]["model"] == "test-chat"
    assert completions.calls[0]["messages"] == [{"role": "user", "content": "prompt text"}]


@pytest.mark.asyncio
@pytest.mark.parametrize("completions", [FakeCompletions(content=None), FakeCompletions(content="   "), FakeCompletions(choices=False)])
async def test_empty_completion(completions):
    with pytest.raises(EmptyCompletion):
        await make_llm(completions).complete("prompt")


@pytest.mark.asyncio
async def test_llm_errors_are_translated():
    rate_limited = openai.RateLimitError(
        "slow down", response=httpx.Response(429, request=httpx.Request("POST", CHAT_URL)), body=None
    )
    with pytest.raises(RateLimited):
        await make_llm(FakeCompletions(error=rate_limited)).complete("prompt")

    unreachable = openai.APIConnectionError(request=httpx.Request("POST", CHAT_URL))
    with pytest.raises(BackendUnavailable) as exc_info:
        await make_llm(FakeCompletions(error=unreachable)).complete("prompt")
    assert exc_info.value.backend == "openai-chat"


# ── AnswerGenerator ──


@pytest.mark.asyncio
async def test_answer_sends_rendered_prompt(immediate_retry):
    llm = ScriptedLLM("Go")
    builder = PromptBuilder()
    generator = AnswerGenerator(llm, prompt_builder=builder, retry_policy=immediate_retry)

    answer = await generator.answer(PromptContext(context="Alice loves Go. Bob", question="What does Alice love?"))

    assert answer.text == "Go"
    assert answer.can_answer is True
    assert llm.prompts == [builder.build("Alice loves Go. Bob", "What does Alice love?")]


@pytest.mark.asyncio
async def test_answer_retries_transient_errors(immediate_retry):
    llm = ScriptedLLM(BackendUnavailable("openai-chat", "502"), RateLimited("openai-chat", "429"), "Go")
    generator = AnswerGenerator(llm, retry_policy=immediate_retry)

    answer = await generator.answer(PromptContext(context="CTX", question="Q?"))

    assert answer.text == "Go"
    assert len(llm.prompts) == 3


@pytest.mark.asyncio
async def test_answer_surfaces_empty_completion_without_retrying(immediate_retry):
    llm = ScriptedLLM(EmptyCompletion("nothing"), "late")
    generator = AnswerGenerator(llm, retry_policy=immediate_retry)

    with pytest.raises(EmptyCompletion):
        await generator.answer(PromptContext(context="CTX", question="Q?"))

    assert len(llm.prompts) == 1
