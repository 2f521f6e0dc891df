"""Loading of the JSON configuration shared by both command line tools.

The file is read once at start-up. Prompt sections may either be flat::

    "prompt": {"systemContent": "...", "beforeCode": "...", "afterCode": "..."}

or keyed by a language code, in which case English is the fallback::

    "prompt": {"en": {...}, "es": {...}}
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import ConfigLoadFailure

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_LANGUAGE = "en"
DEFAULT_DOC_KINDS = ("method", "property", "constructor", "enum_member")
ALL_KINDS = (
    "class",
    "method",
    "property",
    "constructor",
    "function",
    "enum",
    "enum_member",
)
_PROMPT_FIELDS = ("systemContent", "beforeCode", "afterCode")


@dataclass(frozen=True)
class PromptTemplate:
    system_content: str
    before: str
    after: str


@dataclass(frozen=True)
class ModelConfig:
    model: str
    max_tokens: Optional[int] = None
    n: int = 1
    stop: Optional[Union[str, List[str]]] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    # Loaded for compatibility with existing config files; requests are sent once.
    retries: int = 0
    timeout: Optional[float] = None


@dataclass(frozen=True)
class ToolConfig:
    min_length: int
    model: ModelConfig
    prompts: Dict[str, PromptTemplate]
    test_prompts: Dict[str, PromptTemplate] = field(default_factory=dict)
    doc_kinds: tuple = DEFAULT_DOC_KINDS
    tests_output_dir: str = ""
    tests_include_functions: bool = False

    def prompt_for(self, language: str = DEFAULT_LANGUAGE) -> PromptTemplate:
        return _pick_language(self.prompts, language, "prompt")

    def test_prompt_for(self, language: str = DEFAULT_LANGUAGE) -> PromptTemplate:
        return _pick_language(self.test_prompts, language, "testPrompt")


def _pick_language(
    templates: Dict[str, PromptTemplate], language: str, section: str
) -> PromptTemplate:
    if not templates:
        raise ConfigLoadFailure(f"The '{section}' section is missing from the configuration.")
    if language in templates:
        return templates[language]
    if DEFAULT_LANGUAGE in templates:
        logger.warning(
            f"No '{section}' template for language '{language}', using '{DEFAULT_LANGUAGE}'"
        )
        return templates[DEFAULT_LANGUAGE]
    raise ConfigLoadFailure(
        f"No '{section}' template for language '{language}' and no '{DEFAULT_LANGUAGE}' fallback."
    )


def _parse_template(raw: dict, where: str) -> PromptTemplate:
    missing = [name for name in _PROMPT_FIELDS if not isinstance(raw.get(name), str)]
    if missing:
        raise ConfigLoadFailure(f"{where} is missing string fields: {', '.join(missing)}")
    return PromptTemplate(
        system_content=raw["systemContent"],
        before=raw["beforeCode"],
        after=raw["afterCode"],
    )


def _parse_prompts(raw: Optional[dict], section: str) -> Dict[str, PromptTemplate]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigLoadFailure(f"'{section}' must be an object.")
    # A flat section applies to every language.
    if any(name in raw for name in _PROMPT_FIELDS):
        return {DEFAULT_LANGUAGE: _parse_template(raw, f"'{section}'")}
    templates = {}
    for language, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigLoadFailure(f"'{section}.{language}' must be an object.")
        templates[language] = _parse_template(entry, f"'{section}.{language}'")
    return templates


def _parse_model(raw: Optional[dict]) -> ModelConfig:
    if not isinstance(raw, dict) or not raw.get("model"):
        raise ConfigLoadFailure("'openAiConfig.model' is required.")
    try:
        return ModelConfig(
            model=str(raw["model"]),
            max_tokens=raw.get("max_tokens"),
            n=int(raw.get("n", 1)),
            stop=raw.get("stop"),
            temperature=raw.get("temperature"),
            top_p=raw.get("top_p"),
            retries=int(raw.get("retries", 0)),
            timeout=raw.get("timeout"),
        )
    except (TypeError, ValueError) as e:
        raise ConfigLoadFailure(f"Invalid 'openAiConfig' value: {e}") from e


def parse_config(data: dict) -> ToolConfig:
    """Build a ToolConfig from the decoded JSON document."""
    if not isinstance(data, dict):
        raise ConfigLoadFailure("The configuration must be a JSON object.")
    try:
        min_length = int(data["minLength"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigLoadFailure("'minLength' must be an integer.") from e

    documenter = data.get("documenter") or {}
    kinds = tuple(documenter.get("kinds") or DEFAULT_DOC_KINDS)
    unknown = [k for k in kinds if k not in ALL_KINDS]
    if unknown:
        raise ConfigLoadFailure(f"Unknown declaration kinds: {', '.join(unknown)}")

    unit_tests = data.get("unitTests") or {}
    return ToolConfig(
        min_length=min_length,
        model=_parse_model(data.get("openAiConfig")),
        prompts=_parse_prompts(data.get("prompt"), "prompt"),
        test_prompts=_parse_prompts(data.get("testPrompt"), "testPrompt"),
        doc_kinds=kinds,
        tests_output_dir=unit_tests.get("outputDir") or "",
        tests_include_functions=bool(unit_tests.get("includeFunctions", False)),
    )


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ToolConfig:
    """Read and validate the configuration file at ``path``.

    Raises:
        ConfigLoadFailure: If the file is missing, is not valid JSON or lacks
            required fields.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigLoadFailure(f"Cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigLoadFailure(f"Configuration file {path} is not valid JSON: {e}") from e
    return parse_config(data)
