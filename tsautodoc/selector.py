"""Decides which declarations get documented or receive a generated test."""
import logging
from pathlib import Path
from typing import Iterable

from .source import Declaration

logger = logging.getLogger(__name__)


def spec_file_name(declaration: Declaration) -> str:
    """``<base>.<methodName>.spec.<ext>`` for the file owning ``declaration``."""
    path = declaration.path
    return f"{path.stem}.{declaration.name}.spec{path.suffix}"


def spec_file_path(declaration: Declaration, output_dir: str = "") -> Path:
    """Where the generated test for ``declaration`` is written.

    Beside the source file by default, or in ``output_dir`` relative to the
    source file's directory (e.g. ``__tests__``).
    """
    directory = declaration.path.parent
    if output_dir:
        directory = directory / output_dir
    return directory / spec_file_name(declaration)


class DocSelector:
    """Selects undocumented declarations whose source is long enough."""

    def __init__(self, min_length: int, kinds: Iterable[str]):
        self.min_length = min_length
        self.kinds = frozenset(kinds)

    def select(self, declaration: Declaration) -> bool:
        if declaration.kind not in self.kinds:
            return False
        if declaration.documentation.strip():
            return False
        if len(declaration.text) > self.min_length:
            return True
        logger.warning(
            f"The {declaration.label} in file {declaration.path} is too short to be documented"
        )
        return False


class UnitTestSelector:
    """Selects class methods that have no generated test file yet."""

    def __init__(self, min_length: int, output_dir: str = "", include_functions: bool = False):
        self.min_length = min_length
        self.output_dir = output_dir
        self.include_functions = include_functions

    def eligible_kind(self, declaration: Declaration) -> bool:
        if declaration.kind == "method":
            return declaration.class_name is not None
        return self.include_functions and declaration.kind == "function"

    def select(self, declaration: Declaration) -> bool:
        return (
            self.eligible_kind(declaration)
            and bool(declaration.name)
            and len(declaration.text) > self.min_length
            and not spec_file_path(declaration, self.output_dir).exists()
        )
