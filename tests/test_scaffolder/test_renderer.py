"""Tests for the Jinja2 renderer (tbk_scaffold.scaffolder.renderer)."""

from __future__ import annotations

import jinja2
import pytest

from tbk_scaffold.scaffolder.renderer import (
    TEMPLATE_SUFFIX,
    TemplateRenderer,
    and_,
    eq,
    is_template,
    not_,
    or_,
    output_name,
    render_template,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestHelpers:
    def test_eq(self):
        assert eq("redis", "redis")
        assert not eq("redis", "mongo")

    def test_or_and_not(self):
        assert or_(False, 0, "x")
        assert not or_(False, None)
        assert and_(True, 1, "x")
        assert not and_(True, "")
        assert not_(None) is True


class TestTemplateRenderer:
    def test_renders_context_fields(self, renderer, make_context):
        context = make_context("standard", "my-api")
        text = renderer.render_string("{{ project_name_pascal }}:{{ preset }}", context)
        assert text == "MyApi:standard"

    def test_conditionals_and_helpers(self, renderer, make_context):
        template = (
            '{% if eq(session_driver, "redis") %}redis{% else %}other{% endif %}'
            "|{% if or_(cache_redis, queues) %}needs-redis{% endif %}"
            "|{% if not_(admin) %}no-admin{% endif %}"
        )
        assert renderer.render_string(template, make_context("full")) == "redis|needs-redis|"
        assert renderer.render_string(template, make_context("minimal")) == "other||no-admin"

    def test_block_tags_leave_no_blank_lines(self, renderer, make_context):
        template = "a\n{% if auth %}\nauth\n{% endif %}\nb\n"
        assert renderer.render_string(template, make_context("minimal")) == "a\nb\n"
        assert renderer.render_string(template, make_context("standard")) == "a\nauth\nb\n"

    def test_keeps_trailing_newline(self, renderer, make_context):
        assert renderer.render_string("x\n", make_context("minimal")) == "x\n"

    def test_no_html_escaping(self, renderer):
        assert renderer.render_string("{{ v }}", {"v": "<a & b>"}) == "<a & b>"

    def test_casing_filters(self, renderer):
        text = renderer.render_string(
            "{{ n | kebab_case }} {{ n | pascal_case }} {{ n | camel_case }} {{ m | snake_case }}",
            {"n": "my-cool_app", "m": "sessionDriver"},
        )
        assert text == "my-cool-app MyCoolApp myCoolApp session_driver"

    def test_undefined_name_raises(self, renderer, make_context):
        with pytest.raises(jinja2.UndefinedError):
            renderer.render_string("{{ not_a_field }}", make_context("minimal"))

    def test_syntax_error_raises(self, renderer, make_context):
        with pytest.raises(jinja2.TemplateSyntaxError):
            renderer.render_string("{% if auth %}unterminated", make_context("minimal"))

    def test_typescript_template_literals_pass_through(self, renderer, make_context):
        source = "const url = `http://localhost:${port}/{{ project_name }}`;\n"
        assert (
            renderer.render_string(source, make_context("minimal", "demo"))
            == "const url = `http://localhost:${port}/demo`;\n"
        )


class TestModuleFunctions:
    def test_render_template_uses_shared_renderer(self, make_context):
        assert render_template("{{ project_name }}", make_context("minimal", "x1")) == "x1"

    def test_suffix(self):
        assert TEMPLATE_SUFFIX == ".j2"
        assert is_template("main.ts.j2")
        assert not is_template("main.ts")
        assert output_name("main.ts.j2") == "main.ts"
        assert output_name("tsconfig.json") == "tsconfig.json"
