"""
Core data models for ngtestgen.

Role:
    The closed set of Angular file roles a source file can be classified into.

MethodSignature / MethodParameter:
    Public method shape extracted from a class body.

ContentAnalysis:
    Facts the content analyzer extracts from a file's text.

SourceFile:
    One discovered, classified and analyzed TypeScript file. Created during
    the discovery pass and read-only afterwards.

GenerationOutcome / GenerationResult:
    Per-file tri-state outcome (generated, skipped, failed) and the tally of
    a whole run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Role(str, Enum):
    """Functional category of an Angular source file."""

    COMPONENT = "component"
    SERVICE = "service"
    DIRECTIVE = "directive"
    PIPE = "pipe"
    GUARD = "guard"
    INTERCEPTOR = "interceptor"
    RESOLVER = "resolver"
    MODEL = "model"
    MODULE = "module"
    UNKNOWN = "unknown"


class MethodParameter(BaseModel):
    """A typed method parameter."""

    name: str
    type: str


class MethodSignature(BaseModel):
    """
    A public method found in a class body.

    Attributes:
        name: Method name.
        parameters: Parameters that carry a type annotation, in order.
        return_type: Raw return-type text (e.g. 'Observable<User[]>').
        is_async: True when the return type is an Observable or a Promise.
    """

    name: str
    parameters: list[MethodParameter] = Field(default_factory=list)
    return_type: str = ""
    is_async: bool = False


class ContentAnalysis(BaseModel):
    """
    Structural facts extracted from the text of a source file.

    Attributes:
        declared_name: Exported class name or functional const name; empty
            when nothing recognizable is exported.
        is_functional: The file exports a typed function constant instead of
            a class (guards, interceptors, resolvers).
        functional_type: The functional type marker that matched
            (e.g. 'CanActivateFn').
        is_standalone: A 'standalone: true' marker is present.
        is_interface_or_type_only: A model file exporting only interfaces or
            type aliases.
        selector: The 'selector' literal of a component or directive.
        dependencies: Injected type/token names, first-seen order, unique.
        public_methods: Public method signatures, first occurrence per name.
    """

    declared_name: str = ""
    is_functional: bool = False
    functional_type: str | None = None
    is_standalone: bool = False
    is_interface_or_type_only: bool = False
    selector: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    public_methods: list[MethodSignature] = Field(default_factory=list)


class SourceFile(ContentAnalysis):
    """
    A discovered TypeScript source file.

    Attributes:
        path: Absolute path of the file (identity key).
        base_name: File name without its extension ('user.service').
        extension: Source extension ('.ts').
        role: Role derived from the file name; never 'unknown'.
        class_name: PascalCase name derived from the file name, used as a
            label when no export could be found.
        existing_test_variant_count: Number of sibling test files already
            named after this file.
        content: Full text of the file.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    base_name: str
    extension: str = ".ts"
    role: Role
    class_name: str = ""
    existing_test_variant_count: int = 0
    content: str = Field(default="", repr=False)

    @property
    def file_name(self) -> str:
        """File name including the extension."""
        return self.path.name

    @property
    def is_testable(self) -> bool:
        """Interface/type-only models produce no test."""
        return not (self.role == Role.MODEL and self.is_interface_or_type_only)

    @property
    def public_method_names(self) -> list[str]:
        """Names of the public methods, in declaration order."""
        return [method.name for method in self.public_methods]


class GenerationStatus(str, Enum):
    """Outcome of generating a test for one file."""

    GENERATED = "generated"
    SKIPPED = "skipped"
    FAILED = "failed"


class GenerationOutcome(BaseModel):
    """
    Result of processing one source file.

    Attributes:
        source: Path of the source file.
        status: Generated, skipped or failed.
        output: Path of the written test file, when generated.
        message: Skip reason or error message.
    """

    source: Path
    status: GenerationStatus
    output: Path | None = None
    message: str = ""

    @property
    def source_name(self) -> str:
        return self.source.name


class GenerationResult(BaseModel):
    """
    Tally of a generation run.

    Attributes:
        root: Directory that was scanned.
        files_found: Number of source files discovered.
        outcomes: One outcome per discovered file, in processing order.
        started_at: Timestamp when the run started.
        duration: Run duration in seconds.
    """

    root: Path
    files_found: int = 0
    outcomes: list[GenerationOutcome] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration: float = 0.0

    def _count(self, status: GenerationStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @computed_field
    @property
    def succeeded(self) -> int:
        """Number of test files written."""
        return self._count(GenerationStatus.GENERATED)

    @computed_field
    @property
    def skipped(self) -> int:
        """Number of files skipped (interface/type-only models)."""
        return self._count(GenerationStatus.SKIPPED)

    @computed_field
    @property
    def failed(self) -> int:
        """Number of files whose generation failed."""
        return self._count(GenerationStatus.FAILED)

    @computed_field
    @property
    def total(self) -> int:
        """Number of processed files."""
        return len(self.outcomes)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    @computed_field
    @property
    def summary(self) -> str:
        """Summary of the run."""
        return (
            f"Generated {self.succeeded}, skipped {self.skipped}, failed {self.failed} "
            f"of {self.total} files in {self.duration:.2f}s"
        )
