"""Collects non-fatal warnings for one workspace operation."""

from __future__ import annotations

import structlog

log = structlog.get_logger("flexref.diagnostics")


class Diagnostics:
    """Warning sink shared by the scanner, resolver and reconcilers of one run.

    Each warning is logged as a structured event and kept, in order, so the
    caller can report them after the operation finished.
    """

    def __init__(self) -> None:
        self.warnings: list[str] = []

    def warn(self, event: str, message: str, **fields: object) -> None:
        self.warnings.append(message)
        log.warning(event, message=message, **fields)
