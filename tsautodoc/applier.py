"""Writes generated text back: JSDoc splices and new test files."""
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import ExtractionFailure
from .source import Declaration, DocComment, clean_comment_body

logger = logging.getLogger(__name__)

COMMENT_OPEN = "/**"
COMMENT_CLOSE = "*/"


def extract_comment(text: str) -> str:
    """Return the content of the first ``/** ... */`` block in ``text``.

    The ``*`` gutter and surrounding whitespace are removed from every line.

    Raises:
        ExtractionFailure: If either marker is missing.
    """
    start = text.find(COMMENT_OPEN)
    if start == -1:
        raise ExtractionFailure("Comment start not found")
    end = text.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
    if end == -1:
        raise ExtractionFailure("Comment end not found")
    return clean_comment_body(text[start + len(COMMENT_OPEN):end])


def render_doc_comment(content: str, indent: str = "", newline: str = "\n") -> str:
    """Render ``content`` as a JSDoc block whose continuation lines use ``indent``.

    A leading newline in ``content`` starts the description on the line after
    ``/**``, which is always the case for generated comments.
    Lines are joined with ``newline``, the line ending of the target file.
    """
    lines = content.split("\n")
    if content.startswith("\n"):
        lines = lines[1:]
    body = [
        f"{indent} * {line}".rstrip() if line else f"{indent} *"
        for line in (l.replace(COMMENT_CLOSE, "*\\/") for l in lines)
    ]
    return newline.join([COMMENT_OPEN] + body + [f"{indent} {COMMENT_CLOSE}"])


def apply_doc(declaration: Declaration, generated_text: Optional[str]) -> bool:
    """Attach the comment found in ``generated_text`` to ``declaration``.

    The first existing documentation comment is replaced; without one, a new
    comment is inserted above the declaration. Returns True when the source
    was changed.
    """
    if generated_text is None:
        logger.warning(f"No documentation generated for the {declaration.label} in {declaration.path}")
        return False
    try:
        content = "\n" + extract_comment(generated_text)
    except ExtractionFailure as e:
        logger.warning(f"Skipping the {declaration.label} in {declaration.path}: {e}")
        return False

    source_file = declaration.source_file
    newline = source_file.newline
    if declaration.doc_comments:
        existing = declaration.doc_comments[0]
        logger.info(f"Updating documentation for the {declaration.label} in file {declaration.path}:{content}")
        source_file.add_edit(existing.start, existing.end, render_doc_comment(content, existing.indent, newline))
        existing.content = content
    else:
        logger.info(f"Adding documentation for the {declaration.label} in file {declaration.path}:{content}")
        rendered = render_doc_comment(content, declaration.indent, newline)
        rendered += newline + declaration.indent
        if declaration.inline:
            rendered = newline + declaration.indent + rendered
        source_file.add_edit(declaration.start, declaration.start, rendered)
        declaration.doc_comments.append(DocComment(content, indent=declaration.indent))
    return True


def ensure_directory(directory: Path) -> None:
    """Create ``directory`` after creating its missing ancestors, top-down."""
    if directory.exists():
        return
    ensure_directory(directory.parent)
    directory.mkdir()


def write_test_file(path: Union[str, Path], content: str) -> None:
    """Write ``content`` verbatim to ``path``, creating parent directories."""
    path = Path(path)
    ensure_directory(path.parent)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Created unit test file: {path}")
