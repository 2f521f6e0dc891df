import json
import logging

import pytest

from tsautodoc.config import DEFAULT_DOC_KINDS, load_config, parse_config
from tsautodoc.errors import ConfigLoadFailure


def test_parse_language_keyed_prompts(config):
    assert config.min_length == 50
    assert config.prompt_for("es").system_content == "Documenta TypeScript."
    assert config.prompt_for("en").before == "Document {methodName}:\n"
    assert config.doc_kinds == DEFAULT_DOC_KINDS


def test_flat_prompt_applies_to_every_language(config):
    template = config.test_prompt_for("fr")
    assert template.system_content == "Write Jest tests."


def test_unknown_language_falls_back_to_english(config, caplog):
    with caplog.at_level(logging.WARNING):
        template = config.prompt_for("de")
    assert template.system_content == "Document TypeScript."
    assert "'de'" in caplog.text


def test_model_parameters(config):
    model = config.model
    assert model.model == "gpt-3.5-turbo"
    assert model.max_tokens == 300
    assert model.temperature == 0.2
    assert model.top_p is None
    assert model.retries == 3


def test_unit_test_options(config_data):
    config_data["unitTests"] = {"outputDir": "__tests__", "includeFunctions": True}
    config = parse_config(config_data)
    assert config.tests_output_dir == "__tests__"
    assert config.tests_include_functions is True


def test_missing_min_length(config_data):
    del config_data["minLength"]
    with pytest.raises(ConfigLoadFailure):
        parse_config(config_data)


def test_missing_model(config_data):
    config_data["openAiConfig"] = {"max_tokens": 10}
    with pytest.raises(ConfigLoadFailure):
        parse_config(config_data)


def test_incomplete_prompt(config_data):
    config_data["prompt"] = {"en": {"systemContent": "x"}}
    with pytest.raises(ConfigLoadFailure, match="beforeCode"):
        parse_config(config_data)


def test_unknown_kind(config_data):
    config_data["documenter"] = {"kinds": ["method", "namespace"]}
    with pytest.raises(ConfigLoadFailure, match="namespace"):
        parse_config(config_data)


def test_missing_test_prompt_fails_on_use(config_data):
    del config_data["testPrompt"]
    config = parse_config(config_data)
    with pytest.raises(ConfigLoadFailure):
        config.test_prompt_for("en")


def test_load_config_from_file(tmp_path, config_data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    assert load_config(path).min_length == 50


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigLoadFailure):
        load_config(tmp_path / "nope.json")


def test_load_config_malformed(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{minLength: 1", encoding="utf-8")
    with pytest.raises(ConfigLoadFailure, match="not valid JSON"):
        load_config(path)
