"""Generator settings, built from command line options."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .diagnostics import GenerationError

DEFAULT_PACKAGE_NAME = "main"
INFERENCE_CHOICES = ("gojson", "builtin")
GOJSON_ENV_VAR = "WADL2GO_GOJSON"


def default_gojson_command() -> str:
    return os.environ.get(GOJSON_ENV_VAR, "gojson")


@dataclass
class GeneratorConfig:
    """Everything one generator run needs.

    ``base_url`` replaces the base of every ``<resources>`` group when set.
    """

    wadl_file: str
    to_file: str
    package_name: str = DEFAULT_PACKAGE_NAME
    base_url: str = ""
    inference: str = "gojson"
    gojson_command: str = ""
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.gojson_command:
            self.gojson_command = default_gojson_command()

    @property
    def base_dir(self) -> Path:
        """Directory that grammar and example hrefs are relative to."""
        return Path(self.wadl_file).parent

    def validate(self) -> None:
        for name in ("wadl_file", "to_file", "package_name"):
            if not str(getattr(self, name) or "").strip():
                raise GenerationError(f"{name.replace('_', '-')} must not be empty")
        if self.inference not in INFERENCE_CHOICES:
            raise GenerationError(
                f"inference must be one of {', '.join(INFERENCE_CHOICES)}, got {self.inference!r}"
            )
