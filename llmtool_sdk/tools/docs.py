"""
Doc comment parsing — summary line + per-parameter descriptions.

Understands docstrings, ``#`` comments attached above a definition, and the
C-family doc markers (``///``, ``//!``, ``/** ... */``) used when the doc
text is supplied by hand to :func:`~llmtool_sdk.tools.registry.make_tool`.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

_PARAM_LINE = re.compile(r"^-\s*parameter\s+(?P<rest>.*)$", re.IGNORECASE)
_SECTION_HEADER = re.compile(r"^(?P<title>[A-Za-z][A-Za-z ]*):$")
_ARGS_SECTIONS = {"args", "arguments", "parameters", "params"}
_OTHER_SECTIONS = {
    "returns", "return", "yields", "raises", "example", "examples",
    "note", "notes", "attributes", "usage", "see also", "warning", "warnings",
}
_ARG_ENTRY = re.compile(r"^(?P<name>\*{0,2}\w+)\s*(?:\([^)]*\))?\s*:(?P<desc>.*)$")
# Tool/linter directives, never documentation.
_PRAGMA = re.compile(r"^(?:(?i:noqa)\b|type:|pylint:|pragma:|fmt:|mypy:|isort:|pyright:)")


@dataclass
class DocComment:
    """Result of :func:`parse_doc_comment`."""

    summary: str = ""
    params: Dict[str, str] = field(default_factory=dict)


def _strip_markers(text: str) -> List[str]:
    """Remove comment markers from one fragment and return its lines.

    Leading indentation after the marker is kept; ``Args:`` parsing needs it
    to tell entries from continuation lines.
    """
    lines: List[str] = []
    in_block = False

    for raw in inspect.cleandoc(text).splitlines():
        line = raw.rstrip()
        stripped = line.strip()

        if not in_block and stripped.startswith("/**"):
            in_block = True
            stripped = stripped[3:]
        if in_block:
            closes = "*/" in stripped
            if closes:
                stripped = stripped.replace("*/", "", 1)
            if stripped.strip().startswith("*"):
                stripped = stripped.strip()[1:]
            lines.append(stripped.rstrip())
            if closes:
                in_block = False
            continue

        if stripped.startswith("///") or stripped.startswith("//!"):
            line = stripped[3:]
        elif stripped.startswith("#"):
            line = stripped.lstrip("#")
            if _PRAGMA.match(line.strip()):
                continue
        lines.append(line.rstrip())

    return lines


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def parse_doc_comment(*fragments: Optional[str]) -> DocComment:
    """Parse one or more raw comment fragments, in source order.

    The first non-empty line that is not a parameter entry is the summary.
    ``- Parameter name: text`` lines and single-line entries of a Google
    style ``Args:`` section fill the parameter map. Everything else is
    dropped.
    """
    lines: List[str] = []
    for fragment in fragments:
        if fragment:
            lines.extend(_strip_markers(fragment))

    doc = DocComment()
    in_args = False
    entry_indent: Optional[int] = None

    for raw in lines:
        line = raw.strip()

        m = _PARAM_LINE.match(line)
        if m:
            name, colon, desc = m.group("rest").partition(":")
            name = name.strip()
            if colon and name:
                doc.params[name] = desc.strip()
            continue

        header = _SECTION_HEADER.match(line)
        title = header.group("title").strip().lower() if header else ""
        if title in _ARGS_SECTIONS or title in _OTHER_SECTIONS:
            in_args = title in _ARGS_SECTIONS
            entry_indent = None
            continue

        if in_args:
            if not line:
                in_args = False
                continue
            # Deeper than the first entry: a continuation line.
            if entry_indent is not None and _indent(raw) > entry_indent:
                continue
            entry = _ARG_ENTRY.match(line)
            if entry:
                if entry_indent is None:
                    entry_indent = _indent(raw)
                doc.params[entry.group("name").lstrip("*")] = entry.group("desc").strip()
            continue

        if not doc.summary and line:
            doc.summary = line

    return doc


def extract_doc(fn: Callable) -> DocComment:
    """Parse the comments above *fn* and its docstring."""
    target = inspect.unwrap(fn)
    try:
        comments = inspect.getcomments(target)
    except (TypeError, OSError):
        comments = None
    return parse_doc_comment(comments, inspect.getdoc(target))
