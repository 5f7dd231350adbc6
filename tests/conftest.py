"""Shared fixtures for wadl2go tests.

``tests/fixtures/pets.wadl`` is a small but complete description: nested
resources with inherited params, a JSON schema grammar, an unsupported
grammar include, an example response file, an inline method and a binding
to a method that does not exist.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from wadl2go.context_builder import build_document
from wadl2go.diagnostics import Diagnostics
from wadl2go.loader import load_description
from wadl2go.models import Document
from wadl2go.wadl import Application

FIXTURES = Path(__file__).parent / "fixtures"
PETS_WADL = FIXTURES / "pets.wadl"

WADL_NS = "http://wadl.dev.java.net/2009/02"


def wadl(body: str, extra_ns: str = "") -> str:
    """Wrap body in an <application> root element."""
    return f'<application xmlns="{WADL_NS}" {extra_ns}>{body}</application>'


class RecordingInferencer:
    """Struct inferencer that records its calls."""

    def __init__(self, output: str = "type Inferred struct {\n}\n"):
        self.output = output
        self.calls: list[tuple[str, str]] = []

    def infer(self, example: str, type_name: str) -> str:
        self.calls.append((example, type_name))
        return self.output.replace("Inferred", type_name)


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def pets_app() -> Application:
    return load_description(PETS_WADL)


@pytest.fixture
def pets_document(pets_app: Application, diagnostics: Diagnostics) -> Document:
    return build_document(pets_app, FIXTURES, diagnostics)


@pytest.fixture
def inferencer() -> RecordingInferencer:
    return RecordingInferencer()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write text to a file under tmp_path and return its path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path
    return _write
