"""Render Go source from a method Document.

For every method this emits a parameter struct, a results struct (from the
response params, or inferred from an example body) and a request function.
Declarations come from the Jinja2 templates in ``templates/``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import jinja2

from .diagnostics import Diagnostics
from .inference import StructInferencer
from .models import HEADER, PLAIN, QUERY, TEMPLATE, Document, Method, Variable
from .naming import case_first_char, params_type_name, render_identifier, results_type_name

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

# WADL / JSON schema type -> Go type, matched case-insensitively.
# An empty type is WADL's default, xsd:string.
_GO_TYPES: dict[str, str] = {
    "": "string",
    "string": "string",
    "xsd:string": "string",
    "csapi:uuid": "string",
    "csapi:string": "string",
    "xsd:int": "int",
    "xsd:integer": "int64",
    "integer": "int",
    "xsd:long": "int64",
    "xsd:double": "float64",
    "xsd:float": "float64",
    "number": "float64",
    "xsd:boolean": "bool",
    "boolean": "bool",
    "xsd:datetime": "time.Time",
    "xsd:date": "time.Time",
    "object": "interface{}",
}

# Markup found in WADL docs, turned into comment line breaks
_DOC_SCRUBS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"<para[^>]*>"), "\n"),
    (re.compile(r"</para>"), ""),
    (re.compile(r"<code[^>]*>"), ""),
    (re.compile(r"</code>"), ""),
    (re.compile(r"<itemizedlist[^>]*>"), "\n"),
    (re.compile(r"</itemizedlist>"), "\n"),
    (re.compile(r"<listitem[^>]*>"), "\n- "),
    (re.compile(r"</listitem>"), ""),
]


def render_type(wadl_type: str, diagnostics: Diagnostics) -> str:
    """Map a WADL type name to a Go type, passing unknown names through."""
    go_type = _GO_TYPES.get(wadl_type.lower())
    if go_type is None:
        diagnostics.warn(f"unknown WADL type: {wadl_type}")
        return wadl_type
    return go_type


def render_documentation(doc: str) -> list[str]:
    """Turn WADL documentation into Go comment lines."""
    text = " ".join(line.strip() for line in doc.splitlines())
    for pattern, replacement in _DOC_SCRUBS:
        text = pattern.sub(replacement, text)

    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line:
            lines.append(f"// {line}")
    return lines


def _go_string(value: str) -> str:
    return json.dumps(value)


@dataclass
class ArgumentPartition:
    """Arguments grouped by where they travel in the request."""

    template: list[Variable] = field(default_factory=list)
    query: list[Variable] = field(default_factory=list)
    header: list[Variable] = field(default_factory=list)
    body: list[Variable] = field(default_factory=list)


def partition_arguments(arguments: list[Variable]) -> ArgumentPartition:
    partition = ArgumentPartition()
    for arg in arguments:
        logger.debug("param type: %s", arg.request_type)
        if arg.request_type == TEMPLATE:
            partition.template.append(arg)
        elif arg.request_type == QUERY:
            partition.query.append(arg)
        elif arg.request_type == HEADER:
            partition.header.append(arg)
        elif arg.request_type == PLAIN:
            partition.body.append(arg)
    return partition


def create_environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["go_string"] = _go_string
    return env


class Emitter:
    """Renders Methods to Go declarations."""

    def __init__(
        self,
        inferencer: StructInferencer,
        diagnostics: Diagnostics,
        env: jinja2.Environment | None = None,
    ):
        self.inferencer = inferencer
        self.diagnostics = diagnostics
        self.env = env or create_environment()

    def _render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context).strip("\n")

    def render_collection(
        self,
        stem: str,
        variables: list[Variable],
        type_name: Callable[[str], str],
    ) -> list[str]:
        """Render a struct for variables, preceded by its nested structs."""
        declarations: list[str] = []
        fields = []
        for var in variables:
            if var.is_nested:
                nested_stem = render_identifier(stem + case_first_char(var.name, True), True)
                declarations.extend(self.render_collection(nested_stem, var.embedded, type_name))
                go_type = type_name(nested_stem)
            else:
                go_type = render_type(var.type, self.diagnostics)

            if var.request_type == PLAIN:
                tag = var.name if var.required else f"{var.name},omitempty"
            else:
                tag = "-"

            fields.append({
                "name": render_identifier(var.name, True),
                "type": go_type,
                "tag": tag,
                "required": var.required,
                "doc_lines": render_documentation(var.documentation),
            })

        declarations.append(self._render("collection.go.j2", name=type_name(stem), fields=fields))
        return declarations

    def render_results(self, stem: str, method: Method) -> list[str]:
        if method.results_example:
            inferred = self.inferencer.infer(method.results_example, results_type_name(stem))
            return [inferred.strip("\n")]
        # Always return something.
        return self.render_collection(stem, method.results, results_type_name)

    def render_function(self, stem: str, method: Method) -> str:
        partition = partition_arguments(method.arguments)

        template_vars = []
        for arg in partition.template:
            field_name = render_identifier(arg.name, True)
            if not arg.is_nested and _GO_TYPES.get(arg.type.lower()) == "string":
                value = f"args.{field_name}"
            else:
                value = f'fmt.Sprintf("%v", args.{field_name})'
            template_vars.append({"placeholder": arg.name, "value": value})

        return self._render(
            "function.go.j2",
            doc_lines=render_documentation(method.documentation),
            fun_name=stem,
            arg_type=params_type_name(stem),
            result_type=results_type_name(stem),
            http_verb=method.http_verb,
            url=method.url,
            template_vars=template_vars,
            query_vars=[
                {"name": arg.name, "field": render_identifier(arg.name, True)}
                for arg in partition.query
            ],
            header_vars=[
                {"name": arg.name, "field": render_identifier(arg.name, True)}
                for arg in partition.header
            ],
            acceptable_status=method.acceptable_status,
        )

    def render_method(self, method: Method) -> list[str]:
        """Params struct(s), results struct(s), then the request function."""
        stem = render_identifier(method.name, False)
        logger.debug("methName: %s", stem)
        if not method.url:
            self.diagnostics.warn(f"method {method.name} is not bound to any resource; its URL is empty")

        declarations = self.render_collection(stem, method.arguments, params_type_name)
        declarations.extend(self.render_results(stem, method))
        declarations.append(self.render_function(stem, method))
        return declarations

    def render_file(self, package_name: str, methods: list[Method]) -> str:
        declarations: list[str] = []
        for method in methods:
            declarations.extend(self.render_method(method))
        return self.env.get_template("file.go.j2").render(
            package_name=package_name,
            declarations=declarations,
        )


def generate(
    document: Document,
    package_name: str,
    inferencer: StructInferencer,
    diagnostics: Diagnostics,
) -> str:
    """Render the whole Document, methods sorted by name."""
    emitter = Emitter(inferencer, diagnostics)
    return emitter.render_file(package_name, document.sorted_methods())


def write_output(text: str, path: Path) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text)
