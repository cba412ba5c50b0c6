"""Test content generation for discovered Angular source files.

Each role has one template; the registry below maps a role to the function
that renders its spec text. The generator never touches the filesystem,
writing is left to ``ngtestgen.writer``.

Typical usage:
    index = DependencyIndex.build(records)
    for record in records:
        text = render_spec(record, index)
        if text is None:
            continue  # interface/type-only model
"""

from collections.abc import Callable

from ..exceptions import GenerationError
from ..models import Role, SourceFile
from ..resolver import DependencyIndex
from .base import SpecBuilder, SpecContext
from .templates import (
    component_spec,
    directive_spec,
    generic_spec,
    guard_spec,
    interceptor_spec,
    model_spec,
    module_spec,
    pipe_spec,
    resolver_spec,
    service_spec,
)

__all__ = [
    "ROLE_TEMPLATES",
    "SpecBuilder",
    "SpecContext",
    "render_spec",
]


# One template per role; Role.UNKNOWN never reaches generation.
ROLE_TEMPLATES: dict[Role, Callable[[SpecContext], str]] = {
    Role.COMPONENT: component_spec,
    Role.SERVICE: service_spec,
    Role.DIRECTIVE: directive_spec,
    Role.PIPE: pipe_spec,
    Role.GUARD: guard_spec,
    Role.INTERCEPTOR: interceptor_spec,
    Role.RESOLVER: resolver_spec,
    Role.MODEL: model_spec,
    Role.MODULE: module_spec,
}


def render_spec(record: SourceFile, index: DependencyIndex) -> str | None:
    """Render the spec file text for a record.

    Args:
        record: The discovered source file.
        index: Declared-name index of every discovered file.

    Returns:
        The spec text, or None when the record should be skipped
        (interface/type-only models).

    Raises:
        GenerationError: If no template exists for the record's role.
    """
    if not record.is_testable:
        return None
    template = ROLE_TEMPLATES.get(record.role)
    if template is None:
        raise GenerationError(f"No template for role '{record.role.value}'")
    context = SpecContext.create(record, index)
    if not record.declared_name:
        return generic_spec(context)
    return template(context)
