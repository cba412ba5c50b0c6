"""
Cross-file dependency resolution.

After discovery, every record with a declared name goes into a
DependencyIndex. Generation uses it for two things:

- looking up the public methods of an injected service, so a mock with
  matching stubs can be generated;
- computing the module path a spec file should import a dependency from.

Import paths are resolved with a best-effort cascade, each step only running
when the previous one found nothing:

1. an import statement for the name in the source file itself;
2. the declaring file from the index, as a path relative to the source;
3. a conventional guess under the shared services directory.
"""

import logging
import os
import re
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from .models import SourceFile

logger = logging.getLogger(__name__)

NAMED_IMPORT = re.compile(
    r"import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\{([^}]*)\}\s*from\s*(['\"])([^'\"]+)\2"
)
DEFAULT_IMPORT = re.compile(
    r"import\s+(?:type\s+)?([\w$]+)\s*(?:,\s*\{[^}]*\})?\s*from\s*(['\"])([^'\"]+)\2"
)

# Suffixes reattached with a dot when guessing a file name: AuthService -> auth.service
ROLE_KEYWORDS = (
    "Component",
    "Service",
    "Directive",
    "Pipe",
    "Guard",
    "Interceptor",
    "Resolver",
    "Module",
    "Model",
)

CONVENTIONAL_SERVICES_DIR = "../../shared/services"

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class DependencyIndex(Mapping[str, SourceFile]):
    """
    Read-only mapping from declared name to the record declaring it.

    Built once after discovery; on duplicate names the record seen last
    wins.
    """

    def __init__(self, entries: Mapping[str, SourceFile] | None = None) -> None:
        self._entries: dict[str, SourceFile] = dict(entries or {})

    @classmethod
    def build(cls, records: Iterable[SourceFile]) -> "DependencyIndex":
        """Index every record that has a declared name."""
        entries: dict[str, SourceFile] = {}
        for record in records:
            if not record.declared_name:
                continue
            previous = entries.get(record.declared_name)
            if previous is not None and previous.path != record.path:
                logger.debug(
                    f"{record.declared_name} declared in {previous.path} and {record.path}, "
                    f"keeping {record.path}"
                )
            entries[record.declared_name] = record
        return cls(entries)

    def __getitem__(self, name: str) -> SourceFile:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def methods_for(self, name: str) -> list[str]:
        """Public method names of the record declaring ``name``."""
        record = self._entries.get(name)
        if record is None:
            return []
        return record.public_method_names


def _imported_name(specifier: str) -> str:
    """Exported name of one import specifier ('type Foo as Bar' -> 'Foo')."""
    words = specifier.split()
    if words[0] == "type" and len(words) > 1:
        return words[1]
    return words[0]


def find_import_path(content: str, name: str) -> str | None:
    """Return the module path an existing import statement uses for ``name``."""
    for match in NAMED_IMPORT.finditer(content):
        imported = [_imported_name(part) for part in match.group(1).split(",") if part.strip()]
        if name in imported:
            return match.group(3)
    for match in DEFAULT_IMPORT.finditer(content):
        if match.group(1) == name:
            return match.group(3)
    return None


def relative_module_path(from_file: Path, to_file: Path) -> str:
    """Module specifier of ``to_file`` as seen from ``from_file``.

    >>> relative_module_path(Path("/app/a/b.ts"), Path("/app/c/d.service.ts"))
    '../c/d.service'
    """
    relative = os.path.relpath(to_file.with_suffix(""), from_file.parent)
    relative = relative.replace(os.sep, "/")
    if not relative.startswith(("./", "../")):
        relative = f"./{relative}"
    return relative


def kebab_case(name: str) -> str:
    """'UserProfile' -> 'user-profile'."""
    return _WORD_BOUNDARY.sub("-", name).lower()


def conventional_file_name(name: str) -> str:
    """Guess the file name Angular conventions would give ``name``.

    >>> conventional_file_name("UserProfileService")
    'user-profile.service'
    """
    for keyword in ROLE_KEYWORDS:
        if name.endswith(keyword) and len(name) > len(keyword):
            return f"{kebab_case(name[: -len(keyword)])}.{keyword.lower()}"
    return kebab_case(name)


def resolve_import_path(record: SourceFile, name: str, index: Mapping[str, SourceFile]) -> str:
    """Module path a spec beside ``record`` should import ``name`` from.

    Args:
        record: The file whose spec is being generated.
        name: Dependency name to import.
        index: Declared-name index of all discovered files.

    Returns:
        A relative module specifier without extension.
    """
    if path := find_import_path(record.content, name):
        return path
    if (owner := index.get(name)) is not None:
        return relative_module_path(record.path, owner.path)
    guess = f"{CONVENTIONAL_SERVICES_DIR}/{conventional_file_name(name)}"
    logger.debug(f"Could not locate {name} for {record.file_name}, guessing {guess}")
    return guess


def guess_config_path(record: SourceFile) -> str:
    """Guess where configuration tokens such as API_BASE_URL live.

    Walks up from the record's directory until a 'shared' or 'app' folder is
    reached (at most ten levels). Inside 'shared' the config folder is a
    sibling; everywhere else it is assumed under 'shared/config'.
    """
    directory = record.path.parent
    depth = 0
    while directory.name not in ("shared", "app") and depth < 10:
        if directory.parent == directory:
            break
        directory = directory.parent
        depth += 1
    if directory.name == "shared":
        return "../config/api.config"
    return "../shared/config/api.config"
