"""Tests for the context_builder module."""

import pytest

from conftest import FIXTURES, wadl

from wadl2go.codegen import Emitter, render_documentation
from wadl2go.context_builder import (
    assemble_methods,
    build_document,
    join_path,
    parse_base_url,
    url_string,
)
from wadl2go.diagnostics import GenerationError
from wadl2go.models import Variable
from wadl2go.wadl import parse_wadl


def _document(body, diagnostics, base_dir=FIXTURES, base_url="", extra_ns=""):
    app, errors = parse_wadl(wadl(body, extra_ns))
    assert errors == []
    return build_document(app, base_dir, diagnostics, base_url=base_url)


class TestBuildDocument:
    """Test the full pipeline with the pets fixture."""

    def test_method_count(self, pets_document):
        assert sorted(pets_document.methods) == [
            "createPet", "createWidget", "deletePet", "getPet",
            "listPets", "listPhotos", "search_pets", "unboundMethod",
        ]

    def test_urls(self, pets_document):
        urls = {name: m.url for name, m in pets_document.methods.items()}
        assert urls["listPets"] == "http://api.example.com/v1/pets"
        assert urls["getPet"] == "http://api.example.com/v1/pets/%7Bpet_id%7D"
        assert urls["listPhotos"] == "http://api.example.com/v1/pets/%7Bpet_id%7D/photos"
        assert urls["search_pets"] == "http://api.example.com/v1/pets/search"
        assert urls["createWidget"] == "http://api.example.com/v1/widgets"

    def test_unbound_method_keeps_empty_url(self, pets_document):
        assert pets_document.methods["unboundMethod"].url == ""

    def test_inherited_arguments_follow_own(self, pets_document):
        get_pet = pets_document.methods["getPet"]
        assert [a.name for a in get_pet.arguments] == ["X-Auth-Token", "pet_id"]
        list_pets = pets_document.methods["listPets"]
        assert [a.name for a in list_pets.arguments] == ["limit", "X-Auth-Token"]

    def test_sibling_params_not_shared(self, pets_document):
        search = pets_document.methods["search_pets"]
        assert [a.name for a in search.arguments] == ["q", "X-Auth-Token"]

    def test_acceptable_status(self, pets_document):
        assert pets_document.methods["listPets"].acceptable_status == ["200", "203"]
        assert pets_document.methods["createWidget"].acceptable_status == ["200", "201"]
        assert pets_document.methods["listPhotos"].acceptable_status == []

    def test_results_example_loaded(self, pets_document):
        assert '"pets"' in pets_document.methods["listPets"].results_example

    def test_results_from_response_params(self, pets_document):
        get_pet = pets_document.methods["getPet"]
        assert [r.name for r in get_pet.results] == ["name", "born"]
        assert get_pet.results_example == ""

    def test_grammar_reference(self, pets_document):
        (widget,) = pets_document.methods["createWidget"].arguments
        assert widget.uri == "#Widget"
        assert widget.request_type == "plain"
        assert [(v.name, v.request_type) for v in widget.embedded] == [
            ("name", "plain"), ("size", "plain"),
        ]

    def test_diagnostics(self, pets_document, diagnostics):
        assert diagnostics.warnings == [
            "Unknown variable (ghost) was declared as required",
            "skipping unsupported grammar type: .xsd",
            "referenced method #fetchGadget was not found",
        ]
        infos = [d.message for d in diagnostics.entries if d.message not in diagnostics.warnings]
        assert infos == ["skipping response representation: application/xml"]

    def test_base_url_override(self, pets_app, diagnostics):
        document = build_document(pets_app, FIXTURES, diagnostics, base_url="https://staging.test/api")
        assert document.methods["listPets"].url == "https://staging.test/api/pets"


class TestScenarios:
    def test_template_parameter_resource(self, diagnostics):
        document = _document(
            '<resources base="http://x.test">'
            '<resource path="/pets/{id}">'
            '<param name="id" style="template" type="string" required="true"/>'
            '<method href="#getPet"/>'
            "</resource></resources>"
            '<method id="getPet" name="GET"><response status="200">'
            '<representation mediaType="application/json">'
            '<param name="name" style="plain" type="string"/>'
            "</representation></response></method>",
            diagnostics,
        )
        get_pet = document.methods["getPet"]
        assert get_pet.url == "http://x.test/pets/%7Bid%7D"
        assert [(a.name, a.request_type, a.required) for a in get_pet.arguments] == [
            ("id", "template", True),
        ]
        assert [r.name for r in get_pet.results] == ["name"]

    def test_json_ref_matches_every_pool_entry(self, diagnostics, write_file, tmp_path):
        write_file("a.json", '{"properties": {"w1": {"id": "#W"}, "w2": {"id": "#W"}, "o": {"id": "#O"}}}')
        document = _document(
            '<grammars><include href="a.json"/></grammars>'
            '<method id="m" name="POST"><request>'
            '<representation mediaType="application/json" json:ref="#W">'
            '<param name="extra" style="plain"/>'
            "</representation></request></method>",
            diagnostics,
            base_dir=tmp_path,
            extra_ns='xmlns:json="http://json-schema.org/schema#"',
        )
        assert [a.name for a in document.methods["m"].arguments] == ["w1", "w2", "extra"]

    def test_grammar_variables_are_copied(self, diagnostics, write_file, tmp_path):
        write_file("a.json", '{"properties": {"w": {"id": "#W"}}}')
        document = _document(
            '<grammars><include href="a.json"/></grammars>'
            '<method id="m1" name="POST"><request>'
            '<representation mediaType="application/json" json:ref="#W"/></request></method>'
            '<method id="m2" name="POST"><request>'
            '<representation mediaType="application/json" json:ref="#W"/></request></method>',
            diagnostics,
            base_dir=tmp_path,
            extra_ns='xmlns:json="http://json-schema.org/schema#"',
        )
        assert document.methods["m1"].arguments[0] is not document.methods["m2"].arguments[0]

    def test_non_json_request_representation_skipped(self, diagnostics):
        document = _document(
            '<method id="m" name="POST"><request>'
            '<param name="a" style="query"/>'
            '<representation mediaType="application/xml"><param name="b" style="plain"/></representation>'
            "</request></method>",
            diagnostics,
        )
        assert [a.name for a in document.methods["m"].arguments] == ["a"]
        assert diagnostics.warnings == []

    def test_only_first_json_representation_used(self, diagnostics, write_file, tmp_path):
        write_file("one.json", '{"one": 1}')
        write_file("two.json", '{"two": 2}')
        document = _document(
            '<method id="m" name="GET"><response status="200">'
            '<representation mediaType="application/json">'
            '<doc><code href="one.json"/></doc><param name="a" style="plain"/></representation>'
            '<representation mediaType="application/json">'
            '<doc><code href="two.json"/></doc><param name="b" style="plain"/></representation>'
            "</response></method>",
            diagnostics,
            base_dir=tmp_path,
        )
        method = document.methods["m"]
        assert method.results_example == '{"one": 1}'
        assert [r.name for r in method.results] == ["a"]

    def test_missing_example_is_fatal(self, diagnostics, tmp_path):
        with pytest.raises(GenerationError, match="could not read example"):
            _document(
                '<method id="m" name="GET"><response status="200">'
                '<representation mediaType="application/json">'
                '<doc><code href="gone.json"/></doc></representation>'
                "</response></method>",
                diagnostics,
                base_dir=tmp_path,
            )

    def test_duplicate_method_last_wins(self, diagnostics):
        document = _document(
            '<method id="m" name="GET"/><method id="m" name="POST"/>',
            diagnostics,
        )
        assert len(document) == 1
        assert document.methods["m"].http_verb == "POST"
        assert diagnostics.warnings == ["method m is defined more than once; keeping the last definition"]

    def test_unparseable_base_url_is_fatal(self, diagnostics):
        with pytest.raises(GenerationError, match="could not determine the base URL"):
            _document('<resources base="http://[::1"><resource path="a"/></resources>', diagnostics)

    def test_repeated_status_listed_once(self, diagnostics, inferencer):
        document = _document(
            '<method id="m" name="GET">'
            '<response status="200"/><response status="200 404"/><response status="404"/>'
            "</method>",
            diagnostics,
        )
        method = document.methods["m"]
        assert method.acceptable_status == ["200", "404"]
        code = Emitter(inferencer, diagnostics).render_function("m", method)
        assert "\tcase 200, 404:" in code

    def test_cdata_example_reference(self, diagnostics, write_file, tmp_path):
        write_file("ex.json", '{"id": 7}')
        document = _document(
            '<method id="m" name="GET"><response status="200">'
            '<representation mediaType="application/json">'
            '<doc><![CDATA[<code href="ex.json"/>]]></doc></representation>'
            "</response></method>",
            diagnostics,
            base_dir=tmp_path,
        )
        assert document.methods["m"].results_example == '{"id": 7}'

    def test_doc_entities_rendered_literally(self, diagnostics):
        document = _document(
            '<method id="m" name="GET"><doc>Use a &amp; b when x &lt; y</doc></method>',
            diagnostics,
        )
        lines = render_documentation(document.methods["m"].documentation)
        assert lines == ["// Use a & b when x < y"]

    def test_escaped_markup_in_doc_is_scrubbed(self, diagnostics):
        document = _document(
            '<method id="m" name="GET"><doc><![CDATA[<para>First.</para><para>Second.</para>]]></doc></method>',
            diagnostics,
        )
        lines = render_documentation(document.methods["m"].documentation)
        assert lines == ["// First.", "// Second."]


class TestInheritedParams:
    """Inherited parameter lists are per-branch snapshots."""

    BODY = (
        '<resources base="http://x.test/">'
        '<resource path="a"><param name="p1" style="template"/><param name="p2" style="template"/>'
        '<resource path="b"><param name="p3" style="query"/>'
        '<resource path="c"><param name="p4" style="query"/><method href="#deep"/></resource>'
        '<method href="#mid"/>'
        "</resource>"
        '<resource path="d"><param name="p5" style="query"/><method href="#sibling"/></resource>'
        "</resource></resources>"
        '<method id="deep" name="GET"/><method id="mid" name="GET"/><method id="sibling" name="GET"/>'
    )

    def test_counts_are_ancestors_plus_own(self, diagnostics):
        document = _document(self.BODY, diagnostics)
        assert [a.name for a in document.methods["deep"].arguments] == ["p1", "p2", "p3", "p4"]
        assert [a.name for a in document.methods["mid"].arguments] == ["p1", "p2", "p3"]

    def test_siblings_isolated(self, diagnostics):
        document = _document(self.BODY, diagnostics)
        assert [a.name for a in document.methods["sibling"].arguments] == ["p1", "p2", "p5"]

    def test_urls(self, diagnostics):
        document = _document(self.BODY, diagnostics)
        assert document.methods["deep"].url == "http://x.test/a/b/c"
        assert document.methods["sibling"].url == "http://x.test/a/d"

    def test_inherited_variables_not_shared(self, diagnostics):
        document = _document(self.BODY, diagnostics)
        deep_p1 = document.methods["deep"].arguments[0]
        mid_p1 = document.methods["mid"].arguments[0]
        assert deep_p1 == mid_p1
        assert deep_p1 is not mid_p1


class TestAssembleMethods:
    def test_inline_methods_assembled(self, pets_app, diagnostics):
        document = assemble_methods(pets_app, [], FIXTURES, diagnostics)
        assert "search_pets" in document.methods
        assert document.methods["search_pets"].url == ""

    def test_request_params_before_grammar_matches(self, diagnostics):
        app, _ = parse_wadl(wadl(
            '<method id="m" name="POST"><request><param name="first" style="query"/>'
            '<representation mediaType="application/json" json:ref="#W"/></request></method>',
            'xmlns:json="http://json-schema.org/schema#"',
        ))
        pool = [Variable("body", uri="#W")]
        document = assemble_methods(app, pool, FIXTURES, diagnostics)
        assert [a.name for a in document.methods["m"].arguments] == ["first", "body"]


class TestPaths:
    """URL path joining and rendering."""

    @pytest.mark.parametrize("base, segment, expected", [
        ("/v1", "pets", "/v1/pets"),
        ("/v1/", "/pets/", "/v1/pets"),
        ("/v1", "/pets", "/v1/pets"),
        ("", "pets", "pets"),
        ("", "/pets", "/pets"),
        ("/", "", "/"),
        ("", "", ""),
        ("/v1//x", "../y", "/v1/y"),
    ])
    def test_join_path(self, base, segment, expected):
        assert join_path(base, segment) == expected

    @pytest.mark.parametrize("base", ["", "/", "/v1", "/v1/"])
    def test_join_associative(self, base):
        assert join_path(join_path(base, "a"), "b") == join_path(base, "a/b")

    def test_url_string_escapes_braces(self):
        url = parse_base_url("http://x.test")._replace(path="/pets/{id}")
        assert url_string(url) == "http://x.test/pets/%7Bid%7D"

    def test_url_string_adds_leading_slash(self):
        url = parse_base_url("http://x.test")._replace(path="pets")
        assert url_string(url) == "http://x.test/pets"

    def test_url_string_keeps_query(self):
        assert url_string(parse_base_url("http://x.test/a?v=1")) == "http://x.test/a?v=1"

    def test_url_string_no_double_escape(self):
        assert url_string(parse_base_url("http://x.test/a%20b")) == "http://x.test/a%20b"

    @pytest.mark.parametrize("text", ["http://[::1", "http://x.test:port", "http://x .test"])
    def test_parse_base_url_rejects(self, text):
        with pytest.raises(GenerationError):
            parse_base_url(text)
