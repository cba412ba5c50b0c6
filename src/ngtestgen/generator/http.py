"""HTTP request sub-test helpers: verb inference and placeholder values."""

import re

from ..analyzer import split_top_level
from ..models import MethodSignature

# Checked in order; a method name starting with a prefix gets that verb.
VERB_PREFIXES: list[tuple[tuple[str, ...], str]] = [
    (("get",), "GET"),
    (
        (
            "create",
            "add",
            "archive",
            "restore",
            "login",
            "logout",
            "register",
            "refresh",
            "mark",
            "void",
            "send",
            "submit",
            "approve",
            "reject",
            "cancel",
        ),
        "POST",
    ),
    (("update",), "PUT"),
    (("delete", "remove"), "DELETE"),
]

DEFAULT_VERB = "GET"

BLOB_TYPES = ("Blob", "ArrayBuffer")

_OBSERVABLE = re.compile(r"^Observable\s*<(.*)>$", re.DOTALL)


def infer_http_verb(method_name: str) -> str:
    """
    >>> infer_http_verb("getUsers")
    'GET'
    >>> infer_http_verb("removeItem")
    'DELETE'
    """
    for prefixes, verb in VERB_PREFIXES:
        if method_name.startswith(prefixes):
            return verb
    return DEFAULT_VERB


def response_type(return_type: str) -> str:
    """Type argument of an Observable return type ('Observable<User[]>' -> 'User[]')."""
    if match := _OBSERVABLE.match(return_type.strip()):
        return match.group(1).strip()
    return ""


def is_request_method(method: MethodSignature) -> bool:
    """Observable-returning methods that do not download binary content."""
    if not method.return_type.startswith("Observable"):
        return False
    return not any(blob in method.return_type for blob in BLOB_TYPES)


def placeholder_argument(type_text: str) -> str:
    """A literal that type-checks loosely against ``type_text``."""
    type_text = type_text.strip()
    if type_text.endswith("[]") or type_text.startswith(("Array<", "ReadonlyArray<")):
        return "[]"
    if "|" in type_text:
        first = split_top_level(type_text, "|")[0]
        if first.startswith(("'", '"')):
            return first
        type_text = first
    return {
        "string": "'test'",
        "number": "1",
        "boolean": "true",
        "Date": "new Date()",
    }.get(type_text, "{} as any")


def placeholder_arguments(method: MethodSignature) -> str:
    """Comma-separated placeholder arguments for a call to ``method``."""
    return ", ".join(placeholder_argument(parameter.type) for parameter in method.parameters)


def flush_body(return_type: str) -> str:
    """Response body flushed through HttpTestingController for ``return_type``."""
    body_type = response_type(return_type)
    if body_type.endswith("[]") or body_type.startswith("Array<"):
        return "[]"
    return {
        "string": "''",
        "number": "0",
        "boolean": "true",
        "void": "null",
        "null": "null",
    }.get(body_type, "{}")
