"""Build Variables from WADL params and JSON schema nodes.

Handles:
- WADL <param> elements (name, type, style, required, path, docs)
- Documentation flattening (each fragment trimmed, joined by newlines)
- JSON schema "properties" mappings, recursively for nested objects
- JSON schema "required" lists
"""

from __future__ import annotations

import logging
from typing import Any

from .diagnostics import Diagnostics
from .models import PLAIN, Variable
from .wadl import Doc, RawParam

logger = logging.getLogger(__name__)


def docs_to_text(docs: list[Doc]) -> str:
    """Flatten documentation fragments into one block of text."""
    text = "".join(f"{doc.content.strip()}\n" for doc in docs).strip()
    logger.debug("Documentation: %s", text)
    return text


def variables_from_params(params: list[RawParam]) -> list[Variable]:
    """Convert raw WADL params to Variables, preserving order."""
    return [
        Variable(
            name=param.name,
            type=param.type,
            request_type=param.style,
            required=param.required,
            path=param.path,
            documentation=docs_to_text(param.docs),
        )
        for param in params
    ]


def _schema_type(value: Any) -> str:
    """JSON schema "type" may be a string or a list like ["string", "null"]."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            if isinstance(item, str) and item != "null":
                return item
    return ""


def variables_from_json_schema(
    node: dict[str, Any],
    diagnostics: Diagnostics,
) -> list[Variable]:
    """Convert a JSON schema node's properties to plain (body) Variables."""
    variables: list[Variable] = []

    properties = node.get("properties")
    if isinstance(properties, dict):
        for prop_name, attrs in properties.items():
            if not isinstance(attrs, dict):
                diagnostics.warn(f"JSON schema property {prop_name!r} is not an object; skipping")
                continue
            variable = Variable(name=prop_name, request_type=PLAIN)
            for attr_name, attr in attrs.items():
                key = attr_name.lower()
                if key == "id":
                    variable.uri = str(attr)
                elif key == "type":
                    variable.type = _schema_type(attr)
                elif key == "properties":
                    nested = {"properties": attr, "required": attrs.get("required")}
                    variable.embedded = variables_from_json_schema(nested, diagnostics)
                elif key == "documentation":
                    variable.documentation = str(attr).strip()
            variables.append(variable)

    required = node.get("required")
    if isinstance(required, list):
        for required_name in required:
            matches = [v for v in variables if v.name == required_name]
            if not matches:
                diagnostics.warn(f"Unknown variable ({required_name}) was declared as required")
            for variable in matches:
                variable.required = True

    logger.debug("JSON SCHEMA: PARAMS: %s", variables)
    return variables
