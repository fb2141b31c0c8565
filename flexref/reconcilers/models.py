"""Result records produced by the file reconcilers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


class ChangeAction(str, enum.Enum):
    CREATED = "Created"
    UPDATED = "Updated"
    WROTE = "Wrote"


@dataclass(frozen=True)
class FileChange:
    """One file written by a reconciliation step."""

    path: Path
    action: ChangeAction
    detail: str = ""

    def describe(self) -> str:
        suffix = f" ({self.detail})" if self.detail else ""
        return f"{self.action.value}: {self.path}{suffix}"
