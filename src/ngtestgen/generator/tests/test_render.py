"""Tests for the role template registry and render_spec."""

import pytest
from pydantic import ValidationError

from ngtestgen.exceptions import GenerationError
from ngtestgen.generator import ROLE_TEMPLATES, SpecBuilder, SpecContext, render_spec
from ngtestgen.models import Role
from ngtestgen.resolver import DependencyIndex

# --- Registry ---


def test_registry_covers_every_role_but_unknown():
    """Test each generatable role has exactly one template."""
    assert set(ROLE_TEMPLATES) == set(Role) - {Role.UNKNOWN}


def test_render_spec_unknown_role_raises(make_source):
    """Test a record without a template raises GenerationError."""
    record = make_source("main.ts", Role.UNKNOWN, declared_name="Main")

    with pytest.raises(GenerationError, match="No template"):
        render_spec(record, DependencyIndex())


def test_render_spec_dispatches_on_role(make_source, index):
    """Test render_spec uses the template registered for the role."""
    record = make_source(
        "dashboard.component.ts",
        Role.COMPONENT,
        declared_name="DashboardComponent",
        dependencies=["AuthService"],
    )

    text = render_spec(record, index)

    assert text is not None
    assert "fixture = TestBed.createComponent(DashboardComponent);" in text
    assert "import { AuthService } from './core/auth.service';" in text


def test_render_spec_skips_interface_models(make_source):
    """Test interface/type-only models render nothing."""
    record = make_source(
        "user.model.ts", Role.MODEL, declared_name="User", is_interface_or_type_only=True
    )

    assert render_spec(record, DependencyIndex()) is None


def test_render_spec_without_declared_name(make_source):
    """Test records with no recognizable export get the module-level spec."""
    record = make_source("broken.guard.ts", Role.GUARD, class_name="BrokenGuard")

    text = render_spec(record, DependencyIndex())

    assert text == (
        "import * as subject from './broken.guard';\n"
        "\n"
        "describe('BrokenGuard', () => {\n"
        "  it('should load the module', () => {\n"
        "    expect(subject).toBeDefined();\n"
        "  });\n"
        "});\n"
    )


def test_render_spec_is_pure(make_source, index):
    """Test rendering the same record twice gives the same text."""
    record = make_source("auth.service.ts", Role.SERVICE, declared_name="AuthService")

    assert render_spec(record, index) == render_spec(record, index)


# --- SpecContext ---


def test_spec_context_label_fallbacks(make_source):
    """Test the describe label falls back to class and base names."""
    named = make_source("a.pipe.ts", Role.PIPE, declared_name="APipe", class_name="Other")
    derived = make_source("b.pipe.ts", Role.PIPE, class_name="BPipe")
    bare = make_source("c.pipe.ts", Role.PIPE)

    labels = [SpecContext.create(r, DependencyIndex()).label for r in (named, derived, bare)]

    assert labels == ["APipe", "BPipe", "c.pipe"]


def test_spec_context_is_frozen(make_source):
    """Test the context cannot be modified by templates."""
    ctx = SpecContext.create(make_source("a.pipe.ts", Role.PIPE), DependencyIndex())

    with pytest.raises(ValidationError):
        ctx.record = make_source("b.pipe.ts", Role.PIPE)  # type: ignore[misc]


def test_spec_context_subject_path(make_source):
    """Test specs import their subject from the sibling module."""
    ctx = SpecContext.create(make_source("user.service.ts", Role.SERVICE), DependencyIndex())

    assert ctx.subject_path == "./user.service"


# --- SpecBuilder ---


def test_builder_groups_imports_in_first_use_order():
    """Test names are grouped per module without repetition."""
    builder = SpecBuilder()
    builder.use("b", "X")
    builder.use("a", "Y")
    builder.use("b", "X", "Z")
    builder.use_namespace("all", "c")
    builder.line("run();")

    assert builder.render() == (
        "import { X, Z } from 'b';\n"
        "import { Y } from 'a';\n"
        "import * as all from 'c';\n"
        "\n"
        "run();\n"
    )


def test_builder_block_indents_and_closes():
    """Test nested blocks indent by two spaces."""
    builder = SpecBuilder()
    with builder.block("describe('x', () => {"):
        with builder.block("it('y', () => {"):
            builder.line("expect(1).toBe(1);")
        builder.line()

    assert builder.render() == (
        "\n"
        "describe('x', () => {\n"
        "  it('y', () => {\n"
        "    expect(1).toBe(1);\n"
        "  });\n"
        "\n"
        "});\n"
    )


def test_builder_strips_trailing_blank_lines():
    """Test the body ends with exactly one newline."""
    builder = SpecBuilder()
    builder.lines("a;", "", "")

    assert builder.render() == "\na;\n"


def test_builder_custom_closer():
    """Test blocks accept a custom closing line."""
    builder = SpecBuilder()
    with builder.block("providers: [", "],"):
        builder.line("Foo,")

    assert builder.render().endswith("providers: [\n  Foo,\n],\n")
