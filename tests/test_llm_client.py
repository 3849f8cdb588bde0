import pytest

import utils.llm_client as llm_client
from utils.error_utils import GenerationFailure
from utils.llm_client import GeminiLLMClient, LLMClient, get_llm_client, parse_json_response


def test_base_client_always_fails():
    client = LLMClient()
    assert not client.enabled
    with pytest.raises(GenerationFailure):
        client.generate("anything")
    with pytest.raises(GenerationFailure):
        client.generate_json("anything")


@pytest.mark.parametrize(
    "text,expected",
    [
        ('```json\n{"a": 1}\n```', {"a": 1}),
        ("```\n[1, 2]\n```", [1, 2]),
        ('  {"plain": true}  ', {"plain": True}),
        ('```JSON\n[{"title": "x"}]```', [{"title": "x"}]),
    ],
)
def test_parse_json_response_strips_fences(text, expected):
    assert parse_json_response(text) == expected


@pytest.mark.parametrize("text", ["", None, "```json\n```", "not json at all", '{"a": 1'])
def test_parse_json_response_rejects_garbage(text):
    with pytest.raises(GenerationFailure):
        parse_json_response(text)


def test_gemini_client_disabled_without_flag(monkeypatch):
    monkeypatch.delenv("USE_GEMINI_LLM", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    client = GeminiLLMClient()
    assert not client.enabled
    with pytest.raises(GenerationFailure):
        client.generate("prompt")


def test_gemini_client_disabled_without_key(monkeypatch):
    monkeypatch.setenv("USE_GEMINI_LLM", "1")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    assert not GeminiLLMClient().enabled


class _FakeResponse:
    def __init__(self, text):
        self.text = text


def _enable_fake_gemini(monkeypatch, reply=None, error=None):
    monkeypatch.setenv("USE_GEMINI_LLM", "1")
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setattr(llm_client.genai, "configure", lambda **kwargs: None)

    calls = []

    class FakeModel:
        def __init__(self, name):
            self.name = name

        def generate_content(self, prompt, generation_config=None):
            calls.append((self.name, prompt, generation_config))
            if error is not None:
                raise error
            return _FakeResponse(reply)

    monkeypatch.setattr(llm_client.genai, "GenerativeModel", FakeModel)
    return calls


def test_gemini_client_returns_completion(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-test")
    calls = _enable_fake_gemini(monkeypatch, reply="  generated text \n")
    client = GeminiLLMClient()
    assert client.enabled
    assert client.generate("hello") == "generated text"
    assert calls[0][0] == "gemini-test"
    assert calls[0][1] == "hello"


def test_gemini_client_parses_fenced_json(monkeypatch):
    _enable_fake_gemini(monkeypatch, reply='```json\n[{"k": "v"}]\n```')
    assert GeminiLLMClient().generate_json("p") == [{"k": "v"}]


def test_gemini_client_wraps_service_errors(monkeypatch):
    _enable_fake_gemini(monkeypatch, error=RuntimeError("quota exceeded"))
    with pytest.raises(GenerationFailure) as exc_info:
        GeminiLLMClient().generate("p")
    assert "quota exceeded" in str(exc_info.value)


def test_gemini_client_rejects_empty_completion(monkeypatch):
    _enable_fake_gemini(monkeypatch, reply="   ")
    with pytest.raises(GenerationFailure):
        GeminiLLMClient().generate("p")


def test_get_llm_client_always_returns_a_client(monkeypatch):
    monkeypatch.delenv("USE_GEMINI_LLM", raising=False)
    client = get_llm_client()
    assert isinstance(client, LLMClient)
    assert not client.enabled
