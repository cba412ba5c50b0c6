"""
File classification by naming convention.

Angular files announce their role through a dotted suffix on the base name
('user.service.ts', 'auth.guard.ts'). Files without a recognized suffix fall
back to a substring check for 'model'/'interface'; anything else is Unknown
and never enters the discovered set.
"""

import re
from collections.abc import Iterable
from pathlib import Path, PurePath

from .models import Role

# Checked in order; the first matching suffix wins.
ROLE_SUFFIXES: list[tuple[str, Role]] = [
    (".component", Role.COMPONENT),
    (".service", Role.SERVICE),
    (".directive", Role.DIRECTIVE),
    (".pipe", Role.PIPE),
    (".guard", Role.GUARD),
    (".interceptor", Role.INTERCEPTOR),
    (".resolver", Role.RESOLVER),
    (".module", Role.MODULE),
]

MODEL_MARKERS = ("model", "interface")

TEST_FILE_MARKERS = (".spec.", ".test.")

_NAME_SEPARATORS = re.compile(r"[-.]+")


def base_name(file_name: str) -> str:
    """Return the file name without its final extension."""
    return PurePath(file_name).stem


def classify(file_name: str) -> Role:
    """Map a file name to its role.

    The suffix check is case-insensitive and runs on the base name, so both
    'auth.guard.ts' and 'auth.guard' classify as a guard.

    Args:
        file_name: File name, with or without its extension.

    Returns:
        The role, or Role.UNKNOWN when no convention matches.

    Examples:
        >>> classify("user-profile.component.ts")
        <Role.COMPONENT: 'component'>
        >>> classify("user.model.ts")
        <Role.MODEL: 'model'>
        >>> classify("main.ts")
        <Role.UNKNOWN: 'unknown'>
    """
    name = PurePath(file_name).name.lower()
    stem = base_name(name) if PurePath(name).suffix in (".ts", ".tsx", ".mts") else name
    for suffix, role in ROLE_SUFFIXES:
        if stem.endswith(suffix):
            return role
    if any(marker in stem for marker in MODEL_MARKERS):
        return Role.MODEL
    return Role.UNKNOWN


def is_test_file(file_name: str) -> bool:
    """True for files already following a test naming pattern."""
    name = PurePath(file_name).name.lower()
    return any(marker in name for marker in TEST_FILE_MARKERS)


def is_excluded(path: Path, root: Path, excluded_directories: Iterable[str]) -> bool:
    """Check whether any segment of ``path`` below ``root`` is excluded.

    Matching is on whole path segments: 'node_modules' excludes
    'src/node_modules' and 'src/node_modules/x.ts' but not
    'src/nodeXmodules/x.ts'.
    """
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    excluded = set(excluded_directories)
    return any(part in excluded for part in parts)


def derive_class_name(name: str) -> str:
    """Convert a kebab/dotted base name to PascalCase.

    >>> derive_class_name("user-profile.component")
    'UserProfileComponent'
    """
    parts = [part for part in _NAME_SEPARATORS.split(name) if part]
    return "".join(part[0].upper() + part[1:].lower() for part in parts)
