"""
Dependency partitioning for generated specs.

Every injected name of a record lands in exactly one bucket:

- framework-provided names, satisfied by TestBed provider functions or by
  nothing at all;
- configuration tokens, bound to a literal placeholder with ``useValue``;
- custom dependencies, each replaced by a mock object with one ``vi.fn()``
  stub per public method the index knows about.
"""

from collections.abc import Mapping

from pydantic import BaseModel, Field

from ..models import SourceFile
from ..resolver import find_import_path, guess_config_path, resolve_import_path

HTTP_CLIENT = "HttpClient"

# Provider calls per framework name, with the module each call is imported from.
FRAMEWORK_PROVIDERS: dict[str, list[tuple[str, str]]] = {
    HTTP_CLIENT: [
        ("provideHttpClient()", "@angular/common/http"),
        ("provideHttpClientTesting()", "@angular/common/http/testing"),
    ],
    "Router": [("provideRouter([])", "@angular/router")],
    "ActivatedRoute": [("provideRouter([])", "@angular/router")],
}

FRAMEWORK_PROVIDED = frozenset(
    {
        *FRAMEWORK_PROVIDERS,
        "ElementRef",
        "ChangeDetectorRef",
        "DestroyRef",
        "Renderer2",
        "NgZone",
        "Injector",
        "FormBuilder",
        "DomSanitizer",
        "Location",
        "HttpTestingController",
    }
)

LOCAL_API_URL = "'http://localhost:3000'"

INJECTION_TOKENS: dict[str, str] = {
    "API_BASE_URL": LOCAL_API_URL,
    "API_URL": LOCAL_API_URL,
    "BASE_URL": LOCAL_API_URL,
    "APP_CONFIG": "{}",
    "ENVIRONMENT": "{ production: false }",
    "WINDOW": "window",
}


class TokenBinding(BaseModel):
    """A configuration token bound to a placeholder value."""

    name: str
    import_path: str
    value: str

    @property
    def provider(self) -> str:
        return f"{{ provide: {self.name}, useValue: {self.value} }}"


class MockDependency(BaseModel):
    """A custom dependency replaced by a generated mock object."""

    name: str
    import_path: str
    methods: list[str] = Field(default_factory=list)

    @property
    def variable(self) -> str:
        """Name of the mock variable ('mockAuthService')."""
        return f"mock{self.name[:1].upper()}{self.name[1:]}"

    @property
    def type_literal(self) -> str:
        """TypeScript type of the mock variable."""
        if not self.methods:
            return "Record<string, Mock>"
        return "{ " + "; ".join(f"{method}: Mock" for method in self.methods) + " }"

    @property
    def provider(self) -> str:
        return f"{{ provide: {self.name}, useValue: {self.variable} }}"


class DependencyPlan(BaseModel):
    """
    The three-way split of a record's dependencies.

    Attributes:
        framework: Framework-provided names, in dependency order.
        tokens: Configuration token bindings.
        mocks: Custom dependencies to mock.
    """

    framework: list[str] = Field(default_factory=list)
    tokens: list[TokenBinding] = Field(default_factory=list)
    mocks: list[MockDependency] = Field(default_factory=list)

    @property
    def needs_http(self) -> bool:
        return HTTP_CLIENT in self.framework

    def framework_providers(self, exclude: tuple[str, ...] = ()) -> list[tuple[str, str]]:
        """Unique (provider call, module) pairs for the framework names.

        Args:
            exclude: Framework names whose providers the template sets up
                itself.
        """
        providers: dict[str, str] = {}
        for name in self.framework:
            if name in exclude:
                continue
            for call, module in FRAMEWORK_PROVIDERS.get(name, []):
                providers.setdefault(call, module)
        return list(providers.items())


def token_import_path(record: SourceFile, token: str) -> str:
    """Module a configuration token is imported from."""
    return find_import_path(record.content, token) or guess_config_path(record)


def plan_dependencies(record: SourceFile, index: Mapping[str, SourceFile]) -> DependencyPlan:
    """Partition ``record.dependencies`` into framework, token and mock buckets.

    Args:
        record: Record the spec is generated for.
        index: Declared-name index used to find the public methods of custom
            dependencies and the files declaring them.

    Returns:
        DependencyPlan preserving the order of ``record.dependencies``.
    """
    plan = DependencyPlan()
    for name in record.dependencies:
        if name in FRAMEWORK_PROVIDED:
            plan.framework.append(name)
        elif name in INJECTION_TOKENS:
            plan.tokens.append(
                TokenBinding(
                    name=name,
                    import_path=token_import_path(record, name),
                    value=INJECTION_TOKENS[name],
                )
            )
        else:
            owner = index.get(name)
            plan.mocks.append(
                MockDependency(
                    name=name,
                    import_path=resolve_import_path(record, name, index),
                    methods=owner.public_method_names if owner is not None else [],
                )
            )
    return plan
