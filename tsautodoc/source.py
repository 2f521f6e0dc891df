"""Discovery and parsing of TypeScript sources with tree-sitter.

A :class:`SourceFile` keeps the original bytes of the file and a list of
pending text edits. Declarations point into the original bytes, so edits
never shift each other; they are applied in one pass when the file is
rendered or saved.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser

logger = logging.getLogger(__name__)

SOURCE_PATTERNS = ("**/*.ts", "**/*.tsx")

_CLASS_TYPES = ("class_declaration", "abstract_class_declaration")
_FUNCTION_TYPES = ("function_declaration", "generator_function_declaration")
_ENUM_MEMBER_TYPES = (
    "property_identifier",
    "string",
    "number",
    "computed_property_name",
    "enum_assignment",
)
_LEADING_STAR = re.compile(r"^\* ?")

# Tree-sitter parsers (initialized lazily)
_parsers = {}


def get_parser(path: Union[str, Path]) -> Parser:
    """Get or create the parser matching the file extension (.tsx uses the TSX grammar)."""
    key = "tsx" if Path(path).suffix.lower() == ".tsx" else "typescript"
    if key not in _parsers:
        language = tsts.language_tsx() if key == "tsx" else tsts.language_typescript()
        _parsers[key] = Parser(Language(language))
    return _parsers[key]


def clean_comment_body(body: str) -> str:
    """Strip the ``*`` gutter from the lines of a comment body.

    Blank lines left over from the lines holding the markers are dropped at
    both ends.
    """
    lines = [_LEADING_STAR.sub("", line.strip()) for line in body.split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


@dataclass
class DocComment:
    """A ``/** ... */`` block attached to a declaration.

    ``start``/``end`` are byte offsets into the original source; both are
    None for a comment that was inserted during this run.
    """

    content: str
    start: Optional[int] = None
    end: Optional[int] = None
    indent: str = ""

    @classmethod
    def from_text(cls, text: str, start: int, end: int, indent: str) -> "DocComment":
        body = text[3:-2] if text.endswith("*/") else text[3:]
        return cls(clean_comment_body(body), start, end, indent)


@dataclass
class Declaration:
    kind: str
    name: Optional[str]
    text: str
    source_file: "SourceFile"
    start: int
    indent: str
    doc_comments: List[DocComment] = field(default_factory=list)
    class_name: Optional[str] = None
    class_text: Optional[str] = None
    # True when other code precedes the declaration on its first line.
    inline: bool = False

    @property
    def path(self) -> Path:
        return self.source_file.path

    @property
    def label(self) -> str:
        if self.name:
            return f"{self.kind} '{self.name}'"
        return self.kind

    @property
    def documentation(self) -> str:
        return "\n".join(comment.content for comment in self.doc_comments)


class SourceFile:
    def __init__(self, path: Union[str, Path], source: bytes):
        self.path = Path(path)
        self.source = source
        self.declarations: List[Declaration] = []
        self._edits: List[Tuple[int, int, bytes]] = []

    @property
    def modified(self) -> bool:
        return bool(self._edits)

    def slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def add_edit(self, start: int, end: int, text: str) -> None:
        """Schedule replacing ``source[start:end]`` with ``text``."""
        for other_start, other_end, _ in self._edits:
            if start < other_end and other_start < end or start == other_start:
                raise ValueError(f"Overlapping edit at bytes {start}-{end} in {self.path}")
        self._edits.append((start, end, text.encode("utf-8")))

    @property
    def newline(self) -> str:
        """Line ending used by the file; inserted text follows it."""
        return "\r\n" if b"\r\n" in self.source else "\n"

    def render_bytes(self) -> bytes:
        data = self.source
        for start, end, replacement in sorted(self._edits, key=lambda e: e[0], reverse=True):
            data = data[:start] + replacement + data[end:]
        return data

    def render(self) -> str:
        return self.render_bytes().decode("utf-8")

    def save(self) -> None:
        self.path.write_bytes(self.render_bytes())


def discover_files(
    directory: Union[str, Path], patterns: Iterable[str] = SOURCE_PATTERNS
) -> List[Path]:
    """Return every file under ``directory`` matching one of ``patterns``."""
    root = Path(directory)
    found = set()
    for pattern in patterns:
        found.update(p for p in root.glob(pattern) if p.is_file())
    return sorted(found)


def _line_prefix(source: bytes, offset: int) -> bytes:
    line_start = source.rfind(b"\n", 0, offset) + 1
    return source[line_start:offset]


def _indent_of(source: bytes, offset: int) -> Tuple[str, bool]:
    prefix = _line_prefix(source, offset)
    if not prefix.strip():
        return prefix.decode("utf-8"), False
    whitespace = prefix[: len(prefix) - len(prefix.lstrip())]
    return whitespace.decode("utf-8"), True


def _leading_node(node: Node) -> Node:
    """Return the first decorator written in front of ``node``, or ``node`` itself."""
    first = node
    prev = node.prev_sibling
    while prev is not None and prev.type == "decorator":
        first = prev
        prev = prev.prev_sibling
    return first


def _doc_comments(anchor: Node, source: bytes) -> List[DocComment]:
    comments: List[DocComment] = []
    prev = anchor.prev_sibling
    while prev is not None and prev.type == "comment":
        text = source[prev.start_byte:prev.end_byte].decode("utf-8")
        if text.startswith("/**") and not text.startswith("/**/"):
            indent, _ = _indent_of(source, prev.start_byte)
            comments.insert(0, DocComment.from_text(text, prev.start_byte, prev.end_byte, indent))
        prev = prev.prev_sibling
    return comments


def _ambient_body(node: Node) -> Optional[Node]:
    return next((child for child in node.named_children if child.type != "comment"), None)


def _name_of(node: Node, source: bytes) -> Optional[str]:
    name_node = node if node.type in _ENUM_MEMBER_TYPES else node.child_by_field_name("name")
    if name_node is None:
        return None
    if name_node.type == "enum_assignment":
        name_node = name_node.child_by_field_name("name")
    name = source[name_node.start_byte:name_node.end_byte].decode("utf-8")
    return name.strip("'\"") or None


class _Builder:
    """Turns the syntax tree of one file into its list of declarations."""

    def __init__(self, source_file: SourceFile):
        self.file = source_file
        self.source = source_file.source

    def declaration(
        self,
        kind: str,
        node: Node,
        anchor: Node,
        name: Optional[str] = None,
        class_name: Optional[str] = None,
        class_text: Optional[str] = None,
    ) -> Declaration:
        first = _leading_node(anchor)
        indent, inline = _indent_of(self.source, first.start_byte)
        return Declaration(
            kind=kind,
            name=name,
            text=self.file.slice(first.start_byte, node.end_byte),
            source_file=self.file,
            start=first.start_byte,
            indent=indent,
            doc_comments=_doc_comments(first, self.source),
            class_name=class_name,
            class_text=class_text,
            inline=inline,
        )

    def class_members(
        self, class_node: Node, anchor: Node, ambient: bool = False
    ) -> List[Declaration]:
        class_name = _name_of(class_node, self.source)
        class_decl = self.declaration("class", class_node, anchor, class_name, class_name)
        class_text = class_decl.text
        methods, properties, constructors = [], [], []
        body = class_node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type == "method_definition":
                if any(child.type in ("get", "set") for child in member.children):
                    continue
                name = _name_of(member, self.source)
                if name == "constructor":
                    target, kind, name = constructors, "constructor", None
                else:
                    target, kind = methods, "method"
            elif member.type == "abstract_method_signature" or (
                ambient and member.type == "method_signature"
            ):
                target, kind, name = methods, "method", _name_of(member, self.source)
            elif member.type == "public_field_definition":
                target, kind, name = properties, "property", _name_of(member, self.source)
            else:
                continue
            target.append(self.declaration(kind, member, member, name, class_name, class_text))
        return [class_decl] + methods + properties + constructors

    def enum_members(self, enum_node: Node, anchor: Node) -> List[Declaration]:
        enum_name = _name_of(enum_node, self.source)
        declarations = [self.declaration("enum", enum_node, anchor, enum_name)]
        body = enum_node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type in _ENUM_MEMBER_TYPES:
                declarations.append(
                    self.declaration("enum_member", member, member, _name_of(member, self.source))
                )
        return declarations

    def build(self, root: Node) -> List[Declaration]:
        classes, functions, enums = [], [], []
        for statement in root.named_children:
            anchor, node, ambient = statement, statement, False
            if node.type == "export_statement":
                node = node.child_by_field_name("declaration")
            if node is not None and node.type == "ambient_declaration":
                # declare class / declare enum; declare module and global blocks are skipped
                node, ambient = _ambient_body(node), True
            if node is None:
                continue
            if node.type in _CLASS_TYPES:
                classes.extend(self.class_members(node, anchor, ambient))
            elif node.type in _FUNCTION_TYPES:
                name = _name_of(node, self.source)
                functions.append(self.declaration("function", node, anchor, name))
            elif node.type == "enum_declaration":
                enums.extend(self.enum_members(node, anchor))
        return classes + functions + enums


def parse_source(path: Union[str, Path], source: bytes) -> SourceFile:
    """Parse ``source`` (the content of ``path``) into a SourceFile."""
    source_file = SourceFile(path, source)
    tree = get_parser(path).parse(source)
    if tree.root_node.has_error:
        logger.warning(f"Syntax errors in {path}; declarations may be incomplete")
    source_file.declarations = _Builder(source_file).build(tree.root_node)
    return source_file


def load_source_file(path: Union[str, Path]) -> SourceFile:
    """Read and parse the file at ``path``.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    source = Path(path).read_bytes()
    source.decode("utf-8")
    return parse_source(path, source)
