"""Typed parse tree for WADL documents.

Only the elements and attributes the generator consumes are kept:

- ``application/grammars/include``
- ``application/resources/resource`` (recursively), with params and
  method bindings (``<method href="#id"/>`` or inline definitions)
- ``application/method`` with request, response, representation and
  param children
- ``doc`` elements, whose inner markup is kept as text

Elements are matched by local name, so the WADL namespace prefix does not
matter. Structural problems are collected in an error list returned next to
the tree; XML syntax errors raise :class:`GenerationError` immediately.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from xml.sax.saxutils import quoteattr

from .diagnostics import GenerationError


@dataclass
class Doc:
    title: str = ""
    content: str = ""


@dataclass
class RawParam:
    name: str
    style: str = ""
    type: str = ""
    required: bool = False
    path: str = ""
    docs: list[Doc] = field(default_factory=list)


@dataclass
class Representation:
    media_type: str = ""
    json_ref: str = ""
    params: list[RawParam] = field(default_factory=list)
    docs: list[Doc] = field(default_factory=list)


@dataclass
class Request:
    params: list[RawParam] = field(default_factory=list)
    representations: list[Representation] = field(default_factory=list)


@dataclass
class Response:
    status: str = ""
    params: list[RawParam] = field(default_factory=list)
    representations: list[Representation] = field(default_factory=list)


@dataclass
class RawMethod:
    id: str
    name: str = ""
    docs: list[Doc] = field(default_factory=list)
    request: Request | None = None
    responses: list[Response] = field(default_factory=list)


@dataclass
class MethodBinding:
    """A ``<method>`` inside a resource: a reference or an inline definition."""

    href: str = ""
    inline: RawMethod | None = None

    @property
    def key(self) -> str:
        if self.inline is not None:
            return self.inline.id
        if self.href[:1] in ("#", "/"):
            return self.href[1:]
        return self.href


@dataclass
class Resource:
    id: str = ""
    path: str = ""
    params: list[RawParam] = field(default_factory=list)
    methods: list[MethodBinding] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)


@dataclass
class ResourcesGroup:
    base: str = ""
    resources: list[Resource] = field(default_factory=list)


@dataclass
class Include:
    href: str


@dataclass
class Application:
    includes: list[Include] = field(default_factory=list)
    resources_groups: list[ResourcesGroup] = field(default_factory=list)
    methods: list[RawMethod] = field(default_factory=list)


def _local(tag: str) -> str:
    """Strip the namespace from an element or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if isinstance(child.tag, str) and _local(child.tag) == name]


def _markup(elem: ET.Element) -> str:
    """Serialize an element using local names only."""
    attrs = "".join(f" {_local(k)}={quoteattr(v)}" for k, v in elem.attrib.items())
    name = _local(elem.tag)
    inner = _inner_markup(elem)
    if not inner:
        return f"<{name}{attrs}/>"
    return f"<{name}{attrs}>{inner}</{name}>"


def _inner_markup(elem: ET.Element) -> str:
    # Character data (CDATA included) is kept as read, not re-escaped.
    parts = [elem.text or ""]
    for child in elem:
        if isinstance(child.tag, str):
            parts.append(_markup(child))
        parts.append(child.tail or "")
    return "".join(parts)


class _Walker:
    """Builds the typed tree and records structural errors."""

    def __init__(self) -> None:
        self.errors: list[str] = []

    def docs(self, elem: ET.Element) -> list[Doc]:
        return [
            Doc(title=doc.get("title", ""), content=_inner_markup(doc))
            for doc in _children(elem, "doc")
        ]

    def params(self, elem: ET.Element) -> list[RawParam]:
        params = []
        for node in _children(elem, "param"):
            name = node.get("name", "")
            if not name:
                self.errors.append(f"<param> without a name inside <{_local(elem.tag)}>")
                continue
            params.append(RawParam(
                name=name,
                style=node.get("style", ""),
                type=node.get("type", ""),
                required=node.get("required", "false").strip().lower() in ("true", "1"),
                path=node.get("path", ""),
                docs=self.docs(node),
            ))
        return params

    def representations(self, elem: ET.Element) -> list[Representation]:
        reps = []
        for node in _children(elem, "representation"):
            json_ref = ""
            for key, value in node.attrib.items():
                # json:ref from the OpenStack extension namespace
                if key.startswith("{") and _local(key) == "ref":
                    json_ref = value
            reps.append(Representation(
                media_type=node.get("mediaType", ""),
                json_ref=json_ref,
                params=self.params(node),
                docs=self.docs(node),
            ))
        return reps

    def method(self, elem: ET.Element) -> RawMethod | None:
        method_id = elem.get("id", "")
        if not method_id:
            self.errors.append(f"<method name={elem.get('name', '')!r}> without an id")
            return None
        request = None
        for node in _children(elem, "request")[:1]:
            request = Request(params=self.params(node), representations=self.representations(node))
        responses = [
            Response(
                status=node.get("status", ""),
                params=self.params(node),
                representations=self.representations(node),
            )
            for node in _children(elem, "response")
        ]
        return RawMethod(
            id=method_id,
            name=elem.get("name", ""),
            docs=self.docs(elem),
            request=request,
            responses=responses,
        )

    def resource(self, elem: ET.Element) -> Resource:
        bindings = []
        for node in _children(elem, "method"):
            if node.get("href"):
                bindings.append(MethodBinding(href=node.get("href", "")))
                continue
            inline = self.method(node)
            if inline is not None:
                bindings.append(MethodBinding(inline=inline))
        return Resource(
            id=elem.get("id", ""),
            path=elem.get("path", ""),
            params=self.params(elem),
            methods=bindings,
            resources=[self.resource(child) for child in _children(elem, "resource")],
        )

    def application(self, root: ET.Element) -> Application:
        app = Application()
        if _local(root.tag) != "application":
            self.errors.append(f"root element is <{_local(root.tag)}>, expected <application>")
            return app
        for grammars in _children(root, "grammars"):
            for node in _children(grammars, "include"):
                href = node.get("href", "")
                if not href:
                    self.errors.append("<include> without an href")
                    continue
                app.includes.append(Include(href=href))
        for node in _children(root, "resources"):
            app.resources_groups.append(ResourcesGroup(
                base=node.get("base", ""),
                resources=[self.resource(child) for child in _children(node, "resource")],
            ))
        for node in _children(root, "method"):
            method = self.method(node)
            if method is not None:
                app.methods.append(method)
        return app


def parse_wadl(text: str | bytes) -> tuple[Application, list[str]]:
    """Parse a WADL document.

    Returns:
        The application tree and a list of structural errors. Callers must
        abort when the list is non-empty.

    Raises:
        GenerationError: If the text is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise GenerationError(f"could not parse WADL document: {exc}") from exc
    walker = _Walker()
    app = walker.application(root)
    return app, walker.errors
