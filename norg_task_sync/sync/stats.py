"""Per-file counters of a sync run."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

DONE = "✓"
NEW = "✻"
UPDATE = "⟳"
PULL = "↘"
PUSH = "↗"


@dataclass
class SyncStats:
    """What a sync run changed for one file."""

    file: Path
    pull_completed: int = 0
    push_completed: int = 0
    pull_new: int = 0
    push_new: int = 0
    newer_local: int = 0
    newer_remote: int = 0

    def any_change(self) -> bool:
        return (
            self.pull_completed
            + self.push_completed
            + self.pull_new
            + self.push_new
            + self.newer_local
            + self.newer_remote
        ) > 0

    def modified_file(self) -> bool:
        """Whether the document buffer was changed by the counted actions."""
        return (self.pull_new + self.pull_completed + self.push_new + self.newer_remote) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": str(self.file),
            "pull_completed": self.pull_completed,
            "push_completed": self.push_completed,
            "pull_new": self.pull_new,
            "push_new": self.push_new,
            "newer_local": self.newer_local,
            "newer_remote": self.newer_remote,
        }

    def __str__(self) -> str:
        return (
            f"{self.file}: "
            f"{DONE} {PULL} {self.pull_completed} {PUSH} {self.push_completed} | "
            f"{NEW} {PULL} {self.pull_new} {PUSH} {self.push_new} | "
            f"{UPDATE} {PULL} {self.newer_remote} {PUSH} {self.newer_local}"
        )
