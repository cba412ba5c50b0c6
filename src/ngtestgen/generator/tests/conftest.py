"""Shared fixtures for generator tests."""

from pathlib import Path

import pytest

from ngtestgen.models import MethodParameter, MethodSignature, Role, SourceFile
from ngtestgen.resolver import DependencyIndex


@pytest.fixture
def app_root():
    return Path("/workspace/src/app")


@pytest.fixture
def make_source(app_root):
    """Factory for records under /workspace/src/app."""

    def _make(file_name: str, role: Role, subdir: str = "", **fields) -> SourceFile:
        path = app_root / subdir / file_name if subdir else app_root / file_name
        stem = Path(file_name).stem
        return SourceFile(path=path, base_name=stem, role=role, **fields)

    return _make


@pytest.fixture
def method():
    """Factory for method signatures: method("getUser", ("id", "number"), returns="...")."""

    def _method(name: str, *parameters: tuple[str, str], returns: str = "void") -> MethodSignature:
        return MethodSignature(
            name=name,
            parameters=[MethodParameter(name=n, type=t) for n, t in parameters],
            return_type=returns,
            is_async=returns.startswith(("Observable", "Promise")),
        )

    return _method


@pytest.fixture
def auth_service(make_source, method):
    """A custom service other records depend on."""
    return make_source(
        "auth.service.ts",
        Role.SERVICE,
        subdir="core",
        declared_name="AuthService",
        public_methods=[method("login", returns="Observable<void>"), method("isLoggedIn", returns="boolean")],
    )


@pytest.fixture
def index(auth_service):
    return DependencyIndex.build([auth_service])
