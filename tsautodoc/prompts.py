"""Prompt assembly from the configured templates."""
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .config import PromptTemplate

# Pattern based: markers inside string literals are stripped as well.
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")


@dataclass(frozen=True)
class Prompt:
    system_content: str
    user_message: str


def substitute(text: str, substitutions: Optional[Mapping[str, str]]) -> str:
    """Replace ``{name}`` tokens literally; unknown tokens stay as they are."""
    for name, value in (substitutions or {}).items():
        text = text.replace("{" + name + "}", value)
    return text


def strip_comments(code: str) -> str:
    """Remove ``/* ... */`` and ``// ...`` comments from ``code``."""
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", code))


def build(
    template: PromptTemplate,
    body: str,
    substitutions: Optional[Mapping[str, str]] = None,
) -> Prompt:
    """Concatenate the before text, ``body`` and the after text of ``template``.

    Placeholders are substituted in the template fragments only; ``body`` is
    sent untouched.
    """
    before = substitute(template.before, substitutions)
    after = substitute(template.after, substitutions)
    return Prompt(
        system_content=substitute(template.system_content, substitutions),
        user_message=before + body + after,
    )
