"""Fatal errors and recoverable diagnostics.

Fatal problems raise :class:`GenerationError` and abort the run.
Recoverable ones are logged and collected on a :class:`Diagnostics`
object that travels through the pipeline and is returned with the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the description cannot be turned into code."""


@dataclass
class Diagnostic:
    level: int
    message: str

    def __str__(self) -> str:
        return f"{logging.getLevelName(self.level)}: {self.message}"


@dataclass
class Diagnostics:
    """Collects recoverable problems found while generating."""

    entries: list[Diagnostic] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.entries.append(Diagnostic(logging.WARNING, message))

    def info(self, message: str) -> None:
        logger.info(message)
        self.entries.append(Diagnostic(logging.INFO, message))

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.entries if d.level >= logging.WARNING]
