"""Build the method Document from a parsed WADL application.

Assembles one Method per declared WADL method, then walks the resource
tree to give each Method its URL and the parameters it inherits from
enclosing resources.
"""

from __future__ import annotations

import copy
import logging
import posixpath
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from .diagnostics import Diagnostics, GenerationError
from .grammar import find_by_uri, resolve_grammars
from .loader import dereference_example
from .models import Document, Method, Variable
from .schema_parser import docs_to_text, variables_from_params
from .wadl import Application, RawMethod, Resource

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# Characters left as-is when the URL path is rendered; "{" and "}" are
# escaped so generated code can replace "%7Bname%7D" placeholders.
_PATH_SAFE = "/:@!$&'()*+,;=%~"


def join_path(base: str, segment: str) -> str:
    """Join two URL paths and clean the result ("a//b/../c" -> "a/c")."""
    parts = [p for p in (base, segment) if p]
    if not parts:
        return ""
    joined = posixpath.normpath("/".join(parts))
    if joined.startswith("//"):
        joined = "/" + joined.lstrip("/")
    return joined


def parse_base_url(text: str) -> SplitResult:
    """Parse a resources base URL."""
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text):
        raise GenerationError(f"could not determine the base URL: invalid character in {text!r}")
    try:
        url = urlsplit(text)
        url.port  # noqa: B018 - validates the port
    except ValueError as exc:
        raise GenerationError(f"could not determine the base URL: {exc}") from exc
    return url


def url_string(url: SplitResult) -> str:
    path = quote(url.path, safe=_PATH_SAFE)
    if url.netloc and path and not path.startswith("/"):
        path = "/" + path
    return urlunsplit(url._replace(path=path))


def _is_json(media_type: str, context: str, diagnostics: Diagnostics) -> bool:
    if media_type == JSON_MEDIA_TYPE:
        return True
    diagnostics.info(f"skipping {context} representation: {media_type}")
    return False


def build_method(
    raw: RawMethod,
    pool: list[Variable],
    base_dir: Path,
    diagnostics: Diagnostics,
) -> Method:
    """Build a Method from a WADL method; its URL is filled in later."""
    logger.debug("rawMethod: %s", raw.id)
    method = Method(
        name=raw.id,
        http_verb=raw.name,
        documentation=docs_to_text(raw.docs),
    )

    if raw.request is not None:
        method.arguments.extend(variables_from_params(raw.request.params))
        for rep in raw.request.representations:
            if not _is_json(rep.media_type, "request", diagnostics):
                continue
            if rep.json_ref:
                logger.debug("jsonref: %s", rep.json_ref)
                # Grammar variables are matched at the top level only.
                method.arguments.extend(copy.deepcopy(find_by_uri(pool, rep.json_ref)))
            method.arguments.extend(variables_from_params(rep.params))

    for response in raw.responses:
        method.results.extend(variables_from_params(response.params))
        for status in response.status.split():
            if status not in method.acceptable_status:
                method.acceptable_status.append(status)

        for rep in response.representations:
            if not _is_json(rep.media_type, "response", diagnostics):
                continue
            if rep.docs:
                method.results_example = dereference_example(base_dir, rep.docs[0].content)
                logger.debug("example: %s", method.results_example)
            method.results.extend(variables_from_params(rep.params))
            break

    return method


def _inline_methods(resources: list[Resource]) -> Iterator[RawMethod]:
    for resource in resources:
        for binding in resource.methods:
            if binding.inline is not None:
                yield binding.inline
        yield from _inline_methods(resource.resources)


def assemble_methods(
    app: Application,
    pool: list[Variable],
    base_dir: Path,
    diagnostics: Diagnostics,
) -> Document:
    """Build every declared method, top-level and inline."""
    document = Document()
    raw_methods = list(app.methods)
    for group in app.resources_groups:
        raw_methods.extend(_inline_methods(group.resources))
    for raw in raw_methods:
        document.add(build_method(raw, pool, base_dir, diagnostics), diagnostics)
    return document


def walk_resources(
    document: Document,
    base: SplitResult,
    inherited: tuple[Variable, ...],
    resources: list[Resource],
    diagnostics: Diagnostics,
) -> None:
    """Bind methods to URLs and inherited params, depth first.

    ``base`` and ``inherited`` are immutable snapshots, so every branch
    sees only its own ancestors.
    """
    for resource in resources:
        url = base._replace(path=join_path(base.path, resource.path))
        params = (*inherited, *variables_from_params(resource.params))
        logger.debug("url for %s: %s", resource.id or resource.path, url_string(url))

        walk_resources(document, url, params, resource.resources, diagnostics)

        for binding in resource.methods:
            method = document.get(binding.key)
            if method is None:
                diagnostics.warn(f"referenced method {binding.href or binding.key} was not found")
                continue
            method.url = url_string(url)
            method.arguments.extend(copy.deepcopy(params))


def build_document(
    app: Application,
    base_dir: Path,
    diagnostics: Diagnostics,
    base_url: str = "",
) -> Document:
    """Run grammar resolution, method assembly and the resource walk."""
    pool = resolve_grammars(app.includes, base_dir, diagnostics)
    document = assemble_methods(app, pool, base_dir, diagnostics)

    for group in app.resources_groups:
        parsed = parse_base_url(base_url or group.base)
        logger.debug("base: %s", url_string(parsed))
        walk_resources(document, parsed, (), group.resources, diagnostics)

    return document
