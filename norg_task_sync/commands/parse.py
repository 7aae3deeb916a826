"""Parse command - show how a Norg file is read (for debugging)."""

from pathlib import Path

from ..core.exceptions import InvalidFileExtensionError
from ..core.models import NOT_FOUND, SyncConfig
from ..norg.document import NorgDocument
from ..norg.files import is_norg_file


class ParseCommand:
    """Command printing the todos and sections found in one file."""

    def __init__(self, config: SyncConfig):
        self.config = config

    def run(self, target: Path, force_norg: bool = False) -> bool:
        target = Path(target)
        if not force_norg and not is_norg_file(target):
            raise InvalidFileExtensionError(target.suffix or "<none>")

        document = NorgDocument.open(target, self.config)
        numbers = document.line_numbers

        print(f"{document.name} (modified {document.modified_at.isoformat()})")
        print(f"todo section '{self.config.section_todos}': {_fmt_line(numbers.todo_section)}")
        print(f"next section: {_fmt_line(numbers.section_after_todo)}")
        print(f"{len(document.todos)} todos:")
        for todo in document.todos:
            tag = f" [{todo.id}]" if todo.id else ""
            due = f" due {todo.due_at.isoformat()}" if todo.due_at else ""
            print(f"  {todo.line + 1:>4}: ({todo.state.value}) {todo.content}{tag}{due}")
        return True


def _fmt_line(line: int) -> str:
    return "not found" if line == NOT_FOUND else f"line {line + 1}"
