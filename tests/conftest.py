from pathlib import Path

import pytest

from tsautodoc.config import parse_config

CONFIG_DATA = {
    "minLength": 50,
    "prompt": {
        "en": {
            "systemContent": "Document TypeScript.",
            "beforeCode": "Document {methodName}:\n",
            "afterCode": "\nEnd.",
        },
        "es": {
            "systemContent": "Documenta TypeScript.",
            "beforeCode": "Documenta:\n",
            "afterCode": "\nFin.",
        },
    },
    "testPrompt": {
        "systemContent": "Write Jest tests.",
        "beforeCode": "Test {className}.{methodName} in {testFileName}:\n",
        "afterCode": "\n",
    },
    "openAiConfig": {
        "model": "gpt-3.5-turbo",
        "max_tokens": 300,
        "n": 1,
        "stop": None,
        "temperature": 0.2,
        "retries": 3,
    },
}


class FakeCompleter:
    """Stands in for tsautodoc.llm.complete and records every prompt."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def __call__(self, system_content, user_message, model_config):
        self.calls.append((system_content, user_message))
        return self.reply


@pytest.fixture
def fake_completer():
    return FakeCompleter


@pytest.fixture
def config_data():
    return {key: value for key, value in CONFIG_DATA.items()}


@pytest.fixture
def config(config_data):
    return parse_config(config_data)


@pytest.fixture
def write_ts(tmp_path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
