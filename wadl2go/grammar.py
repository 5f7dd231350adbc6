"""Resolve grammar includes into a pool of top-level Variables.

Each JSON schema include contributes the Variables of its "properties";
request representations later look them up by their ``id`` (``uri``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from .diagnostics import Diagnostics
from .loader import read_json_schema
from .models import Variable
from .schema_parser import variables_from_json_schema
from .wadl import Include

logger = logging.getLogger(__name__)


def resolve_grammars(
    includes: list[Include],
    base_dir: Path,
    diagnostics: Diagnostics,
) -> list[Variable]:
    """Load every supported include and return the flat Variable pool."""
    pool: list[Variable] = []
    for include in includes:
        file_type = Path(include.href).suffix
        if file_type != ".json":
            diagnostics.warn(f"skipping unsupported grammar type: {file_type or include.href}")
            continue
        schema = read_json_schema(Path(base_dir) / include.href)
        pool.extend(variables_from_json_schema(schema, diagnostics))
        logger.debug("grammar %s: %d variable(s)", include.href, len(pool))
    return pool


def find_by_uri(pool: list[Variable], uri: str) -> list[Variable]:
    """Every pool Variable whose uri equals the reference."""
    return [variable for variable in pool if variable.uri == uri]
