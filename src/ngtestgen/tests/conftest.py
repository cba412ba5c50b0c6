"""Shared test fixtures for ngtestgen tests."""

from pathlib import Path

import pytest

from ngtestgen.config import DefaultSettings
from ngtestgen.models import Role, SourceFile


@pytest.fixture
def default_settings():
    """Settings with the built-in defaults."""
    return DefaultSettings()


@pytest.fixture
def angular_app(tmp_path):
    """Create a small Angular workspace layout.

    workspace/
        angular.json
        src/app/widget.component.ts
        src/app/user.service.ts
        src/app/user.model.ts
        src/app/main.ts
        node_modules/lib/lib.service.ts
    """
    root = tmp_path / "workspace"
    app = root / "src" / "app"
    app.mkdir(parents=True)
    (root / "angular.json").write_text("{}")

    (app / "widget.component.ts").write_text(
        "import { Component } from '@angular/core';\n"
        "\n"
        "@Component({\n"
        "  selector: 'app-widget',\n"
        "  standalone: true,\n"
        "  template: '<p>widget</p>',\n"
        "})\n"
        "export class WidgetComponent {}\n"
    )
    (app / "user.service.ts").write_text(
        "import { Injectable, inject } from '@angular/core';\n"
        "import { HttpClient } from '@angular/common/http';\n"
        "import { Observable } from 'rxjs';\n"
        "\n"
        "@Injectable({ providedIn: 'root' })\n"
        "export class UserService {\n"
        "  private http = inject(HttpClient);\n"
        "\n"
        "  getUsers(): Observable<User[]> {\n"
        "    return this.http.get<User[]>('/api/users');\n"
        "  }\n"
        "}\n"
    )
    (app / "user.model.ts").write_text(
        "export interface User {\n  id: number;\n  name: string;\n}\n"
    )
    (app / "main.ts").write_text("bootstrapApplication(AppComponent);\n")

    vendored = root / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "lib.service.ts").write_text("export class LibService {}\n")
    return root


@pytest.fixture
def make_record(tmp_path):
    """Factory for SourceFile records without touching the filesystem."""

    def _make(
        file_name: str = "user.service.ts",
        role: Role = Role.SERVICE,
        directory: Path | None = None,
        **fields,
    ) -> SourceFile:
        path = (directory or tmp_path) / file_name
        return SourceFile(
            path=path,
            base_name=Path(file_name).stem,
            role=role,
            **fields,
        )

    return _make
