"""
Building blocks shared by the spec templates.

SpecBuilder collects the import block and the indented body of a spec file;
SpecContext bundles what every template needs to know about the record it
renders.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import BaseModel, ConfigDict

from ..models import SourceFile
from ..resolver import DependencyIndex
from .dependencies import DependencyPlan, plan_dependencies

INDENT = "  "


class SpecBuilder:
    """Accumulates imports and body lines of a generated spec file.

    Imports are grouped per module in first-use order and names are never
    repeated, so templates can request an import wherever they need it.
    """

    def __init__(self) -> None:
        self._imports: dict[str, list[str]] = {}
        self._namespace_imports: dict[str, str] = {}
        self._lines: list[str] = []
        self._depth = 0

    def use(self, module: str, *names: str) -> None:
        """Import ``names`` from ``module``."""
        imported = self._imports.setdefault(module, [])
        for name in names:
            if name not in imported:
                imported.append(name)

    def use_namespace(self, alias: str, module: str) -> None:
        """Import ``module`` as a namespace object (``import * as alias``)."""
        self._namespace_imports[alias] = module

    def line(self, text: str = "") -> None:
        self._lines.append(f"{INDENT * self._depth}{text}" if text else "")

    def lines(self, *texts: str) -> None:
        for text in texts:
            self.line(text)

    @contextmanager
    def block(self, opener: str, closer: str = "});") -> Iterator[None]:
        """Emit ``opener``, indent everything inside the block, then ``closer``."""
        self.line(opener)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        self.line(closer)

    def render(self) -> str:
        header = [
            f"import {{ {', '.join(names)} }} from '{module}';"
            for module, names in self._imports.items()
            if names
        ]
        header.extend(
            f"import * as {alias} from '{module}';"
            for alias, module in self._namespace_imports.items()
        )
        body = list(self._lines)
        while body and not body[-1]:
            body.pop()
        return "\n".join([*header, "", *body]) + "\n"


class SpecContext(BaseModel):
    """
    Everything a template needs to render one record.

    Attributes:
        record: The record the spec is generated for.
        index: Declared-name index of the whole run.
        plan: The record's dependencies split into buckets.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    record: SourceFile
    index: DependencyIndex
    plan: DependencyPlan

    @classmethod
    def create(cls, record: SourceFile, index: DependencyIndex) -> "SpecContext":
        return cls(record=record, index=index, plan=plan_dependencies(record, index))

    @property
    def subject(self) -> str:
        """Identifier the spec imports and exercises."""
        return self.record.declared_name

    @property
    def label(self) -> str:
        """Title of the top-level describe block."""
        return self.record.declared_name or self.record.class_name or self.record.base_name

    @property
    def subject_path(self) -> str:
        """Module specifier of the record as seen from its own spec file."""
        return f"./{self.record.base_name}"

    def provider_lines(self, exclude: tuple[str, ...] = ()) -> list[str]:
        """Provider entries for every dependency bucket, each ending with a comma."""
        entries = [call for call, _ in self.plan.framework_providers(exclude)]
        entries.extend(binding.provider for binding in self.plan.tokens)
        entries.extend(mock.provider for mock in self.plan.mocks)
        return [f"{entry}," for entry in entries]

    def import_dependencies(self, builder: SpecBuilder, exclude: tuple[str, ...] = ()) -> None:
        """Request the imports every dependency bucket needs."""
        for call, module in self.plan.framework_providers(exclude):
            builder.use(module, call.split("(")[0])
        for binding in self.plan.tokens:
            builder.use(binding.import_path, binding.name)
        if self.plan.mocks:
            if any(mock.methods for mock in self.plan.mocks):
                builder.use("vitest", "vi", "type Mock")
            else:
                builder.use("vitest", "type Mock")
        for mock in self.plan.mocks:
            builder.use(mock.import_path, mock.name)

    def declare_mocks(self, builder: SpecBuilder) -> None:
        """Emit the describe-level ``let`` declarations of the mocks."""
        for mock in self.plan.mocks:
            builder.line(f"let {mock.variable}: {mock.type_literal};")

    def assign_mocks(self, builder: SpecBuilder) -> None:
        """Emit the beforeEach assignments that create fresh mock objects."""
        for mock in self.plan.mocks:
            if not mock.methods:
                builder.line(f"{mock.variable} = {{}};")
                continue
            with builder.block(f"{mock.variable} = {{", "};"):
                for method in mock.methods:
                    builder.line(f"{method}: vi.fn(),")
