"""
Norg todo and heading parsing utilities.

Works on raw bytes so every span it reports is a byte offset, both absolute
(into the whole buffer) and relative to the start of the line.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.exceptions import MalformedDocumentError
from ..core.models import (
    TASK_ID_TAG,
    ByteRange,
    InLineRange,
    Todo,
    TodoRanges,
    TodoState,
)

logger = logging.getLogger(__name__)


# First-level unordered list item carrying a todo state: "- ( )", "- (-)", "- (x)".
# "--" starts a nested list and is not a first-level item.
TODO_RE = re.compile(rb'^[ \t]*-(?!-)[ \t]+\((?P<state>[ x\-])\)(?=[ \t]|$)(?P<rest>.*)$')
# Trailing identifier comment; group "sep" is the blank right before it.
TAG_RE = re.compile(
    rb'(?P<sep>[ \t])(?P<comment>%' + re.escape(TASK_ID_TAG.encode()) + rb'[ \t]+(?P<id>[^\s%]+)[ \t]*%)[ \t]*$'
)
# First-level heading; "**" is a nested heading.
HEADING_RE = re.compile(rb'^[ \t]*\*(?!\*)[ \t]+(?P<title>.*\S)[ \t]*$')
VERBATIM_START_RE = re.compile(rb'^[ \t]*@(?!end\b)(?P<name>[\w.-]+)')
VERBATIM_END_RE = re.compile(rb'^[ \t]*@end[ \t]*$')


@dataclass
class ParsedSource:
    """Todos and first-level headings found in a buffer."""

    todos: List[Todo] = field(default_factory=list)
    headings: Dict[str, int] = field(default_factory=dict)


def _decode(raw: bytes, line: int) -> str:
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise MalformedDocumentError(f"invalid utf-8: {exc}", line) from exc


def _strip_cr(raw: bytes) -> bytes:
    return raw[:-1] if raw.endswith(b'\r') else raw


def parse_tagged_todo(raw_line: bytes, line: int, line_start: int) -> Optional[Todo]:
    """
    Parse a todo line that ends with an identifier comment.

    Args:
        raw_line: Line bytes without the newline
        line: 0-based line number
        line_start: Absolute offset of the line's first byte

    Returns:
        Todo with ``id`` set, or None if the line is not a tagged todo
    """
    body = _strip_cr(raw_line)
    match = TODO_RE.match(body)
    if not match:
        return None

    rest_start = match.start('rest')
    tag = TAG_RE.search(body, rest_start)
    if not tag:
        return None

    state_col = match.start('state')
    comment = InLineRange(tag.start('comment'), tag.end('comment'))
    # Content runs from after ")" to the blank separating it from the comment
    content = InLineRange(rest_start, comment.start - 1)
    state = InLineRange(state_col, state_col + 1)

    return Todo(
        content=_decode(body[content.start:content.end], line).strip(),
        id=_decode(tag.group('id'), line),
        line=line,
        state=TodoState.from_marker(match.group('state').decode('ascii')),
        byte_ranges=_absolute(line_start, content, comment, state),
        in_line=TodoRanges(content=content, id_comment=comment, state=state),
    )


def parse_untagged_todo(raw_line: bytes, line: int, line_start: int) -> Optional[Todo]:
    """Parse any todo line, treating the whole remainder as content."""
    body = _strip_cr(raw_line)
    match = TODO_RE.match(body)
    if not match:
        return None

    text = _decode(match.group('rest'), line).strip()
    if not text:
        return None

    state_col = match.start('state')
    content = InLineRange(match.start('rest'), len(body))
    state = InLineRange(state_col, state_col + 1)

    return Todo(
        content=text,
        id=None,
        line=line,
        state=TodoState.from_marker(match.group('state').decode('ascii')),
        byte_ranges=_absolute(line_start, content, None, state),
        in_line=TodoRanges(content=content, id_comment=None, state=state),
    )


def parse_heading(raw_line: bytes, line: int) -> Optional[str]:
    """Return the title of a first-level heading, or None."""
    match = HEADING_RE.match(_strip_cr(raw_line))
    if not match:
        return None
    return _decode(match.group('title'), line).strip()


def _absolute(line_start: int, content: InLineRange, comment: Optional[InLineRange], state: InLineRange) -> TodoRanges[ByteRange]:
    def shift(r: InLineRange) -> ByteRange:
        return ByteRange(line_start + r.start, line_start + r.end)

    return TodoRanges(
        content=shift(content),
        id_comment=shift(comment) if comment is not None else None,
        state=shift(state),
    )


def merge_todo(records: Dict[int, Todo], todo: Todo) -> None:
    """Add a todo to the per-line records.

    A tagged record always replaces what is on its line; an untagged one is
    only kept if the line has nothing yet.
    """
    if todo.is_tagged or todo.line not in records:
        records[todo.line] = todo


def iter_lines(source: bytes):
    """Yield ``(line_number, line_start_offset, raw_line)`` for each line."""
    offset = 0
    for number, raw in enumerate(source.split(b'\n')):
        yield number, offset, raw
        offset += len(raw) + 1


def last_verbatim_end(source: bytes) -> int:
    """Line number of the last ``@end`` line, or -1."""
    last = -1
    for number, _, raw in iter_lines(source):
        if VERBATIM_END_RE.match(_strip_cr(raw)):
            last = number
    return last


def parse_norg(source: bytes) -> ParsedSource:
    """
    Extract todos and first-level headings from a Norg buffer.

    Lines between ``@tag`` and ``@end`` are verbatim and never interpreted.
    An ``@tag`` line with no ``@end`` anywhere after it is ordinary text.
    For headings the last occurrence of a title wins.

    Raises:
        MalformedDocumentError: If a matched line is not valid UTF-8
    """
    records: Dict[int, Todo] = {}
    headings: Dict[str, int] = {}
    verbatim = False
    last_end = last_verbatim_end(source)

    for number, line_start, raw in iter_lines(source):
        if verbatim:
            if VERBATIM_END_RE.match(_strip_cr(raw)):
                verbatim = False
            continue

        start = VERBATIM_START_RE.match(raw)
        if start:
            if number < last_end:
                verbatim = True
                continue
            logger.debug(f"No @end after @{start.group('name').decode(errors='replace')} on line {number + 1}")

        title = parse_heading(raw, number)
        if title is not None:
            headings[title] = number
            continue

        for candidate in (parse_tagged_todo(raw, number, line_start),
                          parse_untagged_todo(raw, number, line_start)):
            if candidate is not None:
                merge_todo(records, candidate)

    todos = sorted(records.values(), key=lambda t: t.line)
    return ParsedSource(todos=todos, headings=headings)
