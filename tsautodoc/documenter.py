"""Adds generated JSDoc comments to undocumented TypeScript declarations."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from . import prompts
from .applier import apply_doc
from .config import DEFAULT_LANGUAGE, ModelConfig, ToolConfig
from .llm import complete
from .selector import DocSelector
from .source import discover_files, load_source_file

logger = logging.getLogger(__name__)

Completer = Callable[[str, str, ModelConfig], Optional[str]]


@dataclass
class DocumenterSummary:
    files: int = 0
    requests: int = 0
    comments: int = 0


def run_documenter(
    directory: Union[str, Path],
    config: ToolConfig,
    language: str = DEFAULT_LANGUAGE,
    completer: Completer = complete,
) -> DocumenterSummary:
    """Document every qualifying declaration of the sources under ``directory``.

    Files are handled one at a time; each modified file is saved once, after
    all of its declarations have been processed.
    """
    template = config.prompt_for(language)
    selector = DocSelector(config.min_length, config.doc_kinds)
    summary = DocumenterSummary()

    for path in discover_files(directory):
        logger.info(f"Processing file {path}")
        try:
            source_file = load_source_file(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {path}: {e}")
            continue
        summary.files += 1

        for declaration in source_file.declarations:
            if not selector.select(declaration):
                continue
            prompt = prompts.build(
                template,
                declaration.text,
                {
                    "className": declaration.class_name or "",
                    "methodName": declaration.name or "",
                },
            )
            summary.requests += 1
            generated = completer(prompt.system_content, prompt.user_message, config.model)
            if apply_doc(declaration, generated):
                summary.comments += 1

        if source_file.modified:
            logger.info(f"Saving changes in {path}")
            source_file.save()

    return summary
