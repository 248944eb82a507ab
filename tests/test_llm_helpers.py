"""
LLMHelper tests with the provider SDKs replaced by fakes
"""
from types import SimpleNamespace

import pytest

import llm_helpers
from config import LLM_MAX_TOKENS, LLM_TEMPERATURE, LLM_TOP_P, PROVIDERS, SYSTEM_PROMPT
from llm_helpers import LLMHelper


class FakeChatOpenAI:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.reply = SimpleNamespace(content="Take paracetamol.", usage_metadata={"total_tokens": 12})
        self.received = []
        FakeChatOpenAI.instances.append(self)

    def invoke(self, messages):
        self.received.append(messages)
        return self.reply


class FakeGenerativeModel:
    def __init__(self, model_name, system_instruction, generation_config):
        self.model_name = model_name
        self.system_instruction = system_instruction
        self.generation_config = generation_config
        self.response = None

    def generate_content(self, message):
        return self.response


class _Blocked:
    candidates = [object()]
    usage_metadata = None

    @property
    def text(self):
        raise ValueError("no text parts")


@pytest.fixture
def fake_chat(monkeypatch):
    FakeChatOpenAI.instances = []
    monkeypatch.setattr(llm_helpers, "ChatOpenAI", FakeChatOpenAI)
    return FakeChatOpenAI


@pytest.fixture
def fake_genai(monkeypatch):
    configured = {}
    module = SimpleNamespace(
        configure=lambda api_key: configured.update(api_key=api_key),
        GenerativeModel=FakeGenerativeModel,
        configured=configured,
    )
    monkeypatch.setattr(llm_helpers, "genai", module)
    return module


class TestGroq:
    def test_client_settings(self, fake_chat):
        LLMHelper("groq", "gsk-test")
        kwargs = fake_chat.instances[0].kwargs

        assert kwargs["model"] == PROVIDERS["groq"]["model"]
        assert kwargs["base_url"] == "https://api.groq.com/openai/v1"
        assert kwargs["api_key"] == "gsk-test"
        assert kwargs["temperature"] == LLM_TEMPERATURE
        assert kwargs["max_tokens"] == LLM_MAX_TOKENS
        assert kwargs["top_p"] == LLM_TOP_P
        assert kwargs["max_retries"] == 0

    def test_model_override(self, fake_chat):
        helper = LLMHelper("groq", "gsk-test", model="llama-3.1-8b-instant")

        assert helper.model == "llama-3.1-8b-instant"
        assert fake_chat.instances[0].kwargs["model"] == "llama-3.1-8b-instant"

    def test_complete_sends_system_prompt(self, fake_chat):
        helper = LLMHelper("groq", "gsk-test")

        assert helper.complete("I have a rash") == "Take paracetamol."
        system, human = fake_chat.instances[0].received[0]
        assert system.content == SYSTEM_PROMPT
        assert human.content == "I have a rash"

    def test_empty_content_is_no_candidate(self, fake_chat):
        helper = LLMHelper("groq", "gsk-test")
        fake_chat.instances[0].reply = SimpleNamespace(content="", usage_metadata=None)

        assert helper.complete("hello") is None

    def test_errors_propagate(self, fake_chat):
        helper = LLMHelper("groq", "gsk-test")

        def boom(messages):
            raise RuntimeError("Error code: 429")

        fake_chat.instances[0].invoke = boom
        with pytest.raises(RuntimeError):
            helper.complete("hello")


class TestGemini:
    def test_model_setup(self, fake_genai):
        helper = LLMHelper("gemini", "AIza-test")

        assert fake_genai.configured == {"api_key": "AIza-test"}
        assert helper.llm.model_name == PROVIDERS["gemini"]["model"]
        assert helper.llm.system_instruction == SYSTEM_PROMPT
        assert helper.llm.generation_config["max_output_tokens"] == LLM_MAX_TOKENS

    def test_complete(self, fake_genai):
        helper = LLMHelper("gemini", "AIza-test")
        helper.llm.response = SimpleNamespace(
            candidates=[object()],
            text="Drink fluids.",
            usage_metadata=SimpleNamespace(total_token_count=9, prompt_token_count=4, candidates_token_count=5),
        )

        assert helper.complete("fever?") == "Drink fluids."

    def test_no_candidates(self, fake_genai):
        helper = LLMHelper("gemini", "AIza-test")
        helper.llm.response = SimpleNamespace(candidates=[], usage_metadata=None)

        assert helper.complete("fever?") is None

    def test_blocked_candidate(self, fake_genai):
        helper = LLMHelper("gemini", "AIza-test")
        helper.llm.response = _Blocked()

        assert helper.complete("fever?") is None


class TestValidation:
    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            LLMHelper("mistral", "key")

    def test_missing_key(self):
        with pytest.raises(ValueError):
            LLMHelper("groq", "")
