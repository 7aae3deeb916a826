"""Parsed Norg document with the edit operations used by the sync engine."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..core.exceptions import NotFoundError, during
from ..core.models import NOT_FOUND, LineNumbers, SyncConfig, Todo, TodoState, format_tag, single_line
from ..utils.date import parse_filename_day
from ..utils.io import atomic_write, backup_file
from .parser import parse_norg

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class NorgDocument:
    """
    A Norg file held as a byte buffer plus the todos parsed from it.

    Every structural edit rebuilds the buffer from its lines and reparses, so
    ``todos`` and ``line_numbers`` always describe the current buffer. Only
    ``mark_completed`` edits in place, as it never changes any length.
    """

    def __init__(
        self,
        config: SyncConfig,
        path: Optional[Path] = None,
        modified_at: Optional[datetime] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.path = Path(path) if path is not None else None
        self.modified_at = modified_at or EPOCH
        self.logger = logger or logging.getLogger(__name__)
        self.source = b""
        self.todos: List[Todo] = []
        self.line_numbers = LineNumbers()

    @classmethod
    def open(cls, path: Union[str, Path], config: SyncConfig, logger: Optional[logging.Logger] = None) -> "NorgDocument":
        """
        Read and parse a Norg file.

        Raises:
            NotFoundError: If the file does not exist
            ContextError: If reading or parsing fails
        """
        path = Path(path)
        if not path.exists():
            raise NotFoundError(f"file: {path}")

        with during("reading metadata"):
            stat = os.stat(path)
        with during("reading norg file"):
            source = path.read_bytes()

        modified_at = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        document = cls(config, path=path, modified_at=modified_at, logger=logger)
        with during(f"parsing {path}"):
            document.reparse(source)
        return document

    @classmethod
    def from_text(
        cls,
        text: Union[str, bytes],
        config: SyncConfig,
        path: Optional[Union[str, Path]] = None,
        modified_at: Optional[datetime] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "NorgDocument":
        """Parse an in-memory document."""
        document = cls(config, path=Path(path) if path else None, modified_at=modified_at, logger=logger)
        document.reparse(text.encode("utf-8") if isinstance(text, str) else bytes(text))
        return document

    @property
    def text(self) -> str:
        return self.source.decode("utf-8")

    @property
    def name(self) -> str:
        return str(self.path) if self.path is not None else "<memory>"

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def reparse(self, source: bytes) -> None:
        """Replace the buffer and rebuild todos and section boundaries."""
        parsed = parse_norg(source)

        self.source = source
        self.todos = parsed.todos

        todo_section = parsed.headings.get(self.config.section_todos, NOT_FOUND)
        self.line_numbers = LineNumbers(
            todo_section=todo_section,
            section_after_todo=_next_heading(parsed.headings, todo_section),
        )

        self._assign_due_dates(parsed.headings)

    def _assign_due_dates(self, headings: Dict[str, int]) -> None:
        header = self.config.section_todos_till_end_of_day
        if not header:
            return

        line_header = headings.get(header, NOT_FOUND)
        if line_header == NOT_FOUND:
            self.logger.debug(f"did not find section {header} in {self.name}")
            return
        if self.path is None:
            self.logger.debug(f"no file name to take a due date from for section {header}")
            return

        with during("parsing filename as date"):
            day = parse_filename_day(self.path)

        line_next = _next_heading(headings, line_header)
        for todo in self.todos:
            if line_header < todo.line and (line_next == NOT_FOUND or todo.line < line_next):
                todo.due_at = day

    # ------------------------------------------------------------------
    # Line access
    # ------------------------------------------------------------------
    def lines(self) -> List[bytearray]:
        return [bytearray(line) for line in self.source.split(b"\n")]

    def set_lines(self, lines: Iterable[Union[bytes, bytearray]]) -> None:
        self.reparse(b"\n".join(bytes(line) for line in lines))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def mark_completed(self, idx: int) -> None:
        """Flip the state marker of a todo to ``x`` in place."""
        todo = self.todos[idx]
        state = todo.byte_ranges.state
        if len(state) != 1:
            self.logger.warning(f"expected single byte for state char, found {len(state)} bytes")

        buffer = bytearray(self.source)
        buffer[state.start:state.end] = b"x"
        self.source = bytes(buffer)
        todo.state = TodoState.DONE

    def clear_tags(self, indices: Sequence[int]) -> None:
        """Remove the identifier comment, with its leading blank, from each listed todo."""
        lines = self.lines()
        for idx in indices:
            todo = self.todos[idx]
            comment = todo.in_line.id_comment
            if comment is None:
                self.logger.warning(f"Todo entry '{todo.content}' does not contain a tag, skipping…")
                continue
            del lines[todo.line][comment.start - 1:comment.end]
        self.set_lines(lines)

    def update_task_titles(self, items: Iterable[Tuple[int, str]]) -> None:
        """Replace the content of each ``(index, title)`` todo."""
        lines = self.lines()
        for idx, title in items:
            todo = self.todos[idx]
            content = todo.in_line.content
            lines[todo.line][content.start:content.end] = f" {single_line(title)}".encode("utf-8")
        self.set_lines(lines)

    def append_ids(self, items: Iterable[Tuple[int, str]]) -> None:
        """Tag each ``(index, task_id)`` todo with its identifier comment."""
        lines = self.lines()
        for idx, task_id in items:
            line = lines[self.todos[idx].line]
            tag = format_tag(task_id).encode("utf-8")
            if line.endswith(b"\r"):
                line[-1:-1] = tag
            else:
                line.extend(tag)
        self.set_lines(lines)

    def idx_by_todo_id(self, task_id: str) -> int:
        for idx, todo in enumerate(self.todos):
            if todo.id == task_id:
                return idx
        raise NotFoundError(f"todo with id {task_id}")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def backup(self, backup_dir: Optional[Path] = None) -> Path:
        """Copy the file as it is on disk to the backup location."""
        if self.path is None:
            raise NotFoundError("path of in-memory document")
        target = backup_file(self.path, backup_dir)
        self.logger.debug(f"Backed up {self.path} to {target}")
        return target

    def write(self) -> None:
        """Atomically replace the file with the current buffer."""
        if self.path is None:
            raise NotFoundError("path of in-memory document")
        atomic_write(self.path, self.source)


def _next_heading(headings: Dict[str, int], after: int) -> int:
    if after == NOT_FOUND:
        return NOT_FOUND
    following = [line for line in headings.values() if line > after]
    return min(following) if following else NOT_FOUND
