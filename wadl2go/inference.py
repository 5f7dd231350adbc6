"""Infer a Go result type from an example response body.

Two interchangeable implementations of :class:`StructInferencer`:

* :class:`GojsonInferencer` pipes the example through the external
  ``gojson`` tool and returns its output minus the two-line
  package/import preamble.
* :class:`BuiltinInferencer` derives an equivalent declaration in-process
  from the parsed JSON, for machines without ``gojson`` installed.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from typing import Any, Protocol, Sequence

from .diagnostics import GenerationError
from .naming import render_identifier

logger = logging.getLogger(__name__)

# Lines of package/import preamble printed by gojson before the type
_PREAMBLE_LINES = 2


class StructInferencer(Protocol):
    def infer(self, example: str, type_name: str) -> str:
        """Return a Go type declaration named type_name for the example."""
        ...


class GojsonInferencer:
    """Run ``gojson -name <type>`` with the example on stdin."""

    def __init__(self, command: Sequence[str] = ("gojson",)):
        self.command = list(command)

    def infer(self, example: str, type_name: str) -> str:
        cmd = [*self.command, "-name", type_name]
        logger.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                encoding="utf-8",
            )
        except OSError as exc:
            raise GenerationError(f"could not start {self.command[0]}: {exc}") from exc

        with proc:
            try:
                try:
                    proc.stdin.write(example)
                finally:
                    proc.stdin.close()
            except OSError as exc:
                raise GenerationError(f"could not write example to {self.command[0]}: {exc}") from exc

            for _ in range(_PREAMBLE_LINES):
                proc.stdout.readline()
            output = proc.stdout.read()
            proc.wait()

        return output


def _field_name(key: str) -> str:
    name = render_identifier(re.sub(r"[^0-9A-Za-z_-]", "_", key), True)
    if not name or name[0].isdigit():
        name = "Key" + name
    return name


class BuiltinInferencer:
    """Infer a gojson-style struct declaration without a subprocess."""

    def infer(self, example: str, type_name: str) -> str:
        try:
            value = json.loads(example)
        except json.JSONDecodeError as exc:
            raise GenerationError(f"example for {type_name} is not valid JSON: {exc}") from exc
        return f"type {type_name} {self._go_type(value, 0)}\n"

    def _go_type(self, value: Any, depth: int) -> str:
        if isinstance(value, bool):
            return "bool"
        if isinstance(value, int):
            return "int64"
        if isinstance(value, float):
            return "float64"
        if isinstance(value, str):
            return "string"
        if isinstance(value, list):
            if not value:
                return "[]interface{}"
            return "[]" + self._go_type(value[0], depth)
        if isinstance(value, dict):
            return self._struct(value, depth)
        return "interface{}"

    def _struct(self, obj: dict[str, Any], depth: int) -> str:
        indent = "\t" * (depth + 1)
        lines = ["struct {"]
        for key in sorted(obj):
            go_type = self._go_type(obj[key], depth + 1)
            lines.append(f'{indent}{_field_name(key)} {go_type} `json:"{key}"`')
        lines.append("\t" * depth + "}")
        return "\n".join(lines)


def get_inferencer(kind: str, gojson_command: str = "gojson") -> StructInferencer:
    if kind == "builtin":
        return BuiltinInferencer()
    if kind == "gojson":
        return GojsonInferencer([gojson_command])
    raise GenerationError(f"unknown struct inference {kind!r}")
