"""Semantic model built from a WADL description.

A :class:`Document` owns every :class:`Method`; each Method owns its
:class:`Variable` trees. Variables are never shared between parents.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .diagnostics import Diagnostics

# Values of Variable.request_type
TEMPLATE = "template"
QUERY = "query"
PLAIN = "plain"
HEADER = "header"
MATRIX = "matrix"


@dataclass
class Variable:
    """A typed parameter or body field."""

    name: str
    type: str = ""
    request_type: str = PLAIN
    required: bool = False
    uri: str = ""
    documentation: str = ""
    path: str = ""
    embedded: list[Variable] = field(default_factory=list)

    @property
    def is_nested(self) -> bool:
        return bool(self.embedded)


@dataclass
class Method:
    """One generated operation."""

    name: str
    http_verb: str = ""
    url: str = ""
    documentation: str = ""
    arguments: list[Variable] = field(default_factory=list)
    results: list[Variable] = field(default_factory=list)
    results_example: str = ""
    acceptable_status: list[str] = field(default_factory=list)


@dataclass
class Document:
    """Methods keyed by name. A repeated name replaces the earlier Method."""

    methods: dict[str, Method] = field(default_factory=dict)

    def add(self, method: Method, diagnostics: Diagnostics) -> None:
        if method.name in self.methods:
            diagnostics.warn(f"method {method.name} is defined more than once; keeping the last definition")
        self.methods[method.name] = method

    def get(self, name: str) -> Method | None:
        return self.methods.get(name)

    def sorted_methods(self) -> list[Method]:
        return [self.methods[name] for name in sorted(self.methods)]

    def __len__(self) -> int:
        return len(self.methods)
