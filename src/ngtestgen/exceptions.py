"""Custom exceptions for ngtestgen."""


class WorkspaceNotFoundError(LookupError):
    """Raised when no workspace path is given and none can be detected."""

    pass


class SourcePathNotFoundError(FileNotFoundError):
    """Raised when the directory to scan does not exist."""

    pass


class AnalysisError(ValueError):
    """Raised when a source file cannot be read or analyzed."""

    pass


class GenerationError(RuntimeError):
    """Raised when a spec file cannot be rendered or written."""

    pass
