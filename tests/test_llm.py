import json
import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import anthropic
import openai
import pytest
import requests

from tsautodoc.config import ModelConfig
from tsautodoc.errors import MalformedResponse, RequestFailure
from tsautodoc.llm import completion, get_client_llm, required_credential, required_settings
from tsautodoc.llm.models import query_anthropic, query_ollama, query_openai
from tsautodoc.llm.ollama_utils import is_ollama_model_name, normalize_ollama_model_name
from tsautodoc.llm.result import QueryResult

MESSAGES = [
    {"role": "system", "content": "sys"},
    {"role": "user", "content": "code"},
]
MODEL = ModelConfig(
    model="gpt-3.5-turbo",
    max_tokens=100,
    n=2,
    stop=["\n\n\n"],
    temperature=0.3,
    top_p=0.9,
    retries=5,
)


def openai_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4),
    )


class TestComplete:
    def test_returns_trimmed_content(self):
        result = QueryResult(content="\n  /** Docs. */  \n", model_name="m")
        with patch.object(completion, "query", return_value=result) as query:
            assert completion.complete("sys", "code", MODEL) == "/** Docs. */"
        query.assert_called_once_with(MESSAGES, MODEL)

    def test_logs_request_and_response(self, caplog):
        result = QueryResult(content="answer", model_name="m")
        with patch.object(completion, "query", return_value=result):
            with caplog.at_level(logging.INFO):
                completion.complete("sys", "code", MODEL)
        assert json.dumps(MESSAGES) in caplog.text
        assert "answer" in caplog.text

    def test_request_failure_returns_none(self):
        with patch.object(completion, "query", side_effect=RequestFailure("timeout")):
            assert completion.complete("sys", "code", MODEL) is None

    def test_missing_content_returns_none(self, caplog):
        result = QueryResult(content=None, model_name="m")
        with patch.object(completion, "query", return_value=result):
            assert completion.complete("sys", "code", MODEL) is None
        assert "Unexpected message format" in caplog.text

    def test_single_attempt_despite_retries(self):
        with patch.object(completion, "query", side_effect=RequestFailure("boom")) as query:
            completion.complete("sys", "code", MODEL)
        assert query.call_count == 1

    def test_dispatches_on_client_type(self):
        session = requests.Session()
        with patch.dict(completion._clients, {"ollama:llama3": (session, "llama3")}):
            with patch.object(completion, "query_ollama") as query_ollama_mock:
                completion.query(MESSAGES, ModelConfig(model="ollama:llama3"))
        assert query_ollama_mock.call_args[0][:2] == (session, "llama3")

    def test_client_creation_failure_is_a_request_failure(self):
        with patch.dict(completion._clients, clear=True):
            with patch.object(completion, "get_client_llm", side_effect=openai.OpenAIError("no key")):
                assert completion.complete("sys", "code", MODEL) is None

    def test_azure_client_without_endpoint_returns_none(self, monkeypatch, caplog):
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "azure-key")
        for variable in (
            "AZURE_API_VERSION",
            "AZURE_API_ENDPOINT",
            "OPENAI_API_VERSION",
            "AZURE_OPENAI_ENDPOINT",
        ):
            monkeypatch.delenv(variable, raising=False)
        with patch.dict(completion._clients, clear=True):
            assert completion.complete("sys", "code", ModelConfig(model="azure-gpt-4o")) is None
        assert "Cannot create a client for azure-gpt-4o" in caplog.text


class TestQueryOpenAI:
    def test_sends_configured_parameters(self):
        client = MagicMock()
        client.chat.completions.create.return_value = openai_response("hello")

        result = query_openai(client, "gpt-3.5-turbo", MESSAGES, MODEL)

        assert result.content == "hello"
        assert result.input_tokens == 3
        client.chat.completions.create.assert_called_once_with(
            model="gpt-3.5-turbo",
            messages=MESSAGES,
            n=2,
            max_tokens=100,
            stop=["\n\n\n"],
            temperature=0.3,
            top_p=0.9,
        )

    def test_optional_parameters_are_omitted(self):
        client = MagicMock()
        client.chat.completions.create.return_value = openai_response("hello")
        query_openai(client, "gpt-4o", MESSAGES, ModelConfig(model="gpt-4o"))
        kwargs = client.chat.completions.create.call_args.kwargs
        assert set(kwargs) == {"model", "messages", "n"}

    def test_sdk_error_becomes_request_failure(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError("rate limited")
        with pytest.raises(RequestFailure):
            query_openai(client, "gpt-4o", MESSAGES, MODEL)

    def test_no_choices_is_malformed(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[], usage=None)
        with pytest.raises(MalformedResponse):
            query_openai(client, "gpt-4o", MESSAGES, MODEL)


class TestQueryOllama:
    def test_posts_to_chat_endpoint(self):
        session = MagicMock()
        session.base_url = "http://ollama:11434"
        session.post.return_value.json.return_value = {
            "message": {"content": "hi"},
            "prompt_eval_count": 7,
            "eval_count": 2,
        }

        result = query_ollama(session, "llama3", MESSAGES, MODEL)

        assert result.content == "hi"
        assert result.output_tokens == 2
        url = session.post.call_args[0][0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "http://ollama:11434/api/chat"
        assert payload["stream"] is False
        assert payload["options"] == {
            "temperature": 0.3,
            "top_p": 0.9,
            "num_predict": 100,
            "stop": ["\n\n\n"],
        }

    def test_http_error_becomes_request_failure(self):
        session = MagicMock()
        session.base_url = "http://ollama:11434"
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        with pytest.raises(RequestFailure):
            query_ollama(session, "llama3", MESSAGES, MODEL)

    def test_missing_message(self):
        session = MagicMock()
        session.base_url = "http://ollama:11434"
        session.post.return_value.json.return_value = {"error": "model not found"}
        assert query_ollama(session, "llama3", MESSAGES, MODEL).content is None


class TestQueryAnthropic:
    def test_system_message_is_separate(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(type="text", text="hi")],
            usage=SimpleNamespace(input_tokens=1, output_tokens=2),
        )

        result = query_anthropic(client, "claude-3-5-haiku-latest", MESSAGES, MODEL)

        assert result.content == "hi"
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "code"}]
        assert kwargs["stop_sequences"] == ["\n\n\n"]
        assert kwargs["max_tokens"] == 100

    def test_sdk_error_becomes_request_failure(self):
        client = MagicMock()
        client.messages.create.side_effect = anthropic.AnthropicError("overloaded")
        with pytest.raises(RequestFailure):
            query_anthropic(client, "claude-3-5-haiku-latest", MESSAGES, MODEL)


class TestClient:
    @pytest.mark.parametrize(
        "model_name, variable",
        [
            ("gpt-3.5-turbo", "OPENAI_API_KEY"),
            ("claude-3-5-sonnet-latest", "ANTHROPIC_API_KEY"),
            ("azure-gpt-4o", "AZURE_OPENAI_API_KEY"),
            ("deepseek-chat", "DEEPSEEK_API_KEY"),
            ("gemini-2.0-flash", "GEMINI_API_KEY"),
            ("ollama:llama3", None),
        ],
    )
    def test_required_credential(self, model_name, variable):
        assert required_credential(model_name) == variable

    def test_required_settings(self):
        assert required_settings("azure-gpt-4o") == [
            "AZURE_OPENAI_API_KEY",
            "AZURE_API_VERSION",
            "AZURE_API_ENDPOINT",
        ]
        assert required_settings("gpt-4o") == ["OPENAI_API_KEY"]
        assert required_settings("ollama:llama3") == []

    def test_ollama_client(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434/")
        client, model = get_client_llm("ollama:llama3")
        assert isinstance(client, requests.Session)
        assert client.base_url == "http://gpu-box:11434"
        assert model == "llama3"

    def test_openai_client_has_retries_disabled(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        client, model = get_client_llm("gpt-4o")
        assert isinstance(client, openai.OpenAI)
        assert client.max_retries == 0
        assert model == "gpt-4o"

    def test_anthropic_client(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        client, _ = get_client_llm("claude-3-5-haiku-latest")
        assert isinstance(client, anthropic.Anthropic)

    def test_ollama_name_helpers(self):
        assert is_ollama_model_name("Ollama/llama3")
        assert not is_ollama_model_name("gpt-4o")
        assert not is_ollama_model_name(None)
        assert normalize_ollama_model_name("ollama://qwen2.5-coder") == "qwen2.5-coder"
        assert normalize_ollama_model_name("llama3") == "llama3"
