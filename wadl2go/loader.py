"""Load the WADL description and the files it references.

Reads the description, JSON schema grammar includes, and example response
bodies. Referenced paths are resolved relative to the description's
directory.
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from .diagnostics import GenerationError
from .wadl import Application, parse_wadl

logger = logging.getLogger(__name__)

_HREF = re.compile(r"""\bhref\s*=\s*(["'])(.*?)\1""")


def load_description(path: Path) -> Application:
    """Load and parse a WADL file, aborting on any structural error."""
    try:
        contents = Path(path).read_bytes()
    except OSError as exc:
        raise GenerationError(f"could not read WADL file {path}: {exc}") from exc

    app, errors = parse_wadl(contents)
    if errors:
        raise GenerationError(
            f"{path} has {len(errors)} structural error(s):\n  " + "\n  ".join(errors)
        )
    return app


def read_json_schema(path: Path) -> dict[str, Any]:
    """Read a JSON schema include."""
    try:
        with open(path) as f:
            schema = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise GenerationError(f"could not read JSON schema {path}: {exc}") from exc
    if not isinstance(schema, dict):
        raise GenerationError(f"JSON schema {path} is not an object")
    return schema


def example_href(markup: str) -> str:
    """Return the href attribute of the first element in a doc fragment."""
    logger.debug("inner XML: %s", markup)
    try:
        wrapper = ET.fromstring(f"<doc>{markup}</doc>")
    except ET.ParseError as exc:
        # Free text around the reference may hold bare "&" or "<".
        match = _HREF.search(markup)
        if match is None:
            raise GenerationError(f"could not parse example reference {markup!r}: {exc}") from exc
        return match.group(2)
    for elem in wrapper.iter():
        if elem is not wrapper and elem.get("href"):
            return elem.get("href", "")
    raise GenerationError(f"example reference {markup!r} has no href")


def dereference_example(base_dir: Path, markup: str) -> str:
    """Read the example file an embedded ``<... href="..."/>`` points at."""
    href = example_href(markup)
    logger.debug("reading file: %s", href)
    try:
        return (Path(base_dir) / href).read_text()
    except OSError as exc:
        raise GenerationError(f"could not read example {href}: {exc}") from exc
