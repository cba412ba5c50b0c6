"""
Regex-based structural analysis of Angular TypeScript sources.

This is not a TypeScript parser. Every fact is pulled out of the raw text with
regular expressions, which keeps the analysis cheap and dependency-free but
also imprecise:

- Patterns are not scope-aware. Identifiers inside comments or string
  literals that happen to look like ``inject(Foo)`` are picked up too.
- The ``standalone: true`` marker is searched for anywhere in the file, not
  only inside the decorator of the exported class.
- Method signatures are only recognized when the name starts a line, the
  parameter list contains no nested parentheses and the return type ends on
  the line of the closing parenthesis. Object-literal methods inside the
  class body are picked up as if they were class members.

These limits are accepted behaviour. Tests rely on them, so do not "fix" them
without updating the documented contract.
"""

import logging
import re

from .exceptions import AnalysisError
from .models import ContentAnalysis, MethodParameter, MethodSignature, Role

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z_$][\w$]*"

# Functional type markers per role, e.g. `export const authGuard: CanActivateFn = ...`
FUNCTIONAL_MARKERS: dict[Role, tuple[str, ...]] = {
    Role.GUARD: ("CanActivateFn", "CanActivateChildFn", "CanDeactivateFn", "CanMatchFn"),
    Role.INTERCEPTOR: ("HttpInterceptorFn",),
    Role.RESOLVER: ("ResolveFn",),
}

FUNCTIONAL_PATTERNS: dict[Role, re.Pattern[str]] = {
    role: re.compile(
        rf"export\s+const\s+({_IDENT})\s*:\s*({'|'.join(markers)})\b"
    )
    for role, markers in FUNCTIONAL_MARKERS.items()
}

EXPORTED_CLASS = re.compile(rf"export\s+(?:default\s+)?(?:abstract\s+)?class\s+({_IDENT})")
EXPORTED_INTERFACE = re.compile(rf"export\s+interface\s+({_IDENT})")
EXPORTED_TYPE = re.compile(rf"export\s+type\s+({_IDENT})")
CLASS_DECLARATION = re.compile(rf"\bclass\s+{_IDENT}")

STANDALONE_MARKER = re.compile(r"\bstandalone\s*:\s*true\b")
SELECTOR = re.compile(r"\bselector\s*:\s*(['\"`])(.+?)\1")

# inject(Foo) and inject<Foo>(Foo, { optional: true })
INJECT_CALL = re.compile(rf"\binject\s*(?:<[^<>()]*(?:<[^<>()]*>[^<>()]*)*>)?\s*\(\s*({_IDENT})")
CONSTRUCTOR = re.compile(r"\bconstructor\s*\(")
CONSTRUCTOR_PARAMETER = re.compile(
    rf"(?:\b(?:private|protected|public|readonly)\s+)+({_IDENT})\s*\??\s*:\s*({_IDENT})"
)
INJECT_DECORATOR = re.compile(rf"@Inject\s*\(\s*({_IDENT})\s*\)")

METHOD_LINE = re.compile(
    rf"^[ \t]*((?:(?:public|private|protected|static|override|async|abstract)\s+)*)"
    rf"({_IDENT})\s*(?:<[^>(]*>)?\s*\(([^()]*)\)[ \t]*:[ \t]*([^{{;\n]+?)[ \t]*(?:[{{;].*)?$",
    re.MULTILINE,
)

PRIMITIVE_TYPES = frozenset(
    {"string", "number", "boolean", "any", "void", "object", "unknown", "never", "undefined", "null"}
)

LIFECYCLE_HOOKS = frozenset(
    {
        "ngOnInit",
        "ngOnDestroy",
        "ngOnChanges",
        "ngDoCheck",
        "ngAfterContentInit",
        "ngAfterContentChecked",
        "ngAfterViewInit",
        "ngAfterViewChecked",
    }
)

# Names the method pattern can catch that are never methods.
RESERVED_WORDS = frozenset(
    {"constructor", "if", "for", "while", "switch", "catch", "function", "return", "new", "super"}
)

ASYNC_WRAPPERS = ("Observable", "Promise")

_HIDDEN_MODIFIERS = frozenset({"private", "protected"})
_DEFAULT_VALUE = re.compile(r"=(?!>)")


def analyze(role: Role, content: str) -> ContentAnalysis:
    """Extract structural facts from a file of the given role.

    Role-specific extraction runs first (export name, functional and
    standalone flags), followed by dependency extraction for every role and
    public method extraction for everything that is not an interface/type-only
    model.

    Args:
        role: Role assigned by the classifier.
        content: Raw file text.

    Returns:
        ContentAnalysis with the extracted fields.

    Raises:
        AnalysisError: If the text is malformed in a way extraction cannot
            get past (e.g. an unterminated constructor parameter list).
    """
    analysis = ContentAnalysis()

    if role in FUNCTIONAL_PATTERNS:
        if match := FUNCTIONAL_PATTERNS[role].search(content):
            analysis.declared_name = match.group(1)
            analysis.is_functional = True
            analysis.functional_type = match.group(2)
        elif match := EXPORTED_CLASS.search(content):
            analysis.declared_name = match.group(1)
        else:
            logger.debug(f"No functional or class export found for {role.value}")
    elif role == Role.MODEL:
        class_match = EXPORTED_CLASS.search(content)
        interface_match = EXPORTED_INTERFACE.search(content)
        type_match = EXPORTED_TYPE.search(content)
        analysis.is_interface_or_type_only = class_match is None and (
            interface_match is not None or type_match is not None
        )
        if first := class_match or interface_match or type_match:
            analysis.declared_name = first.group(1)
    else:
        if role in (Role.COMPONENT, Role.DIRECTIVE):
            analysis.is_standalone = STANDALONE_MARKER.search(content) is not None
            if selector := SELECTOR.search(content):
                analysis.selector = selector.group(2).strip()
        if match := EXPORTED_CLASS.search(content):
            analysis.declared_name = match.group(1)

    analysis.dependencies = extract_dependencies(content)

    if not analysis.is_interface_or_type_only:
        analysis.public_methods = extract_public_methods(content)

    return analysis


def constructor_parameters(content: str) -> str | None:
    """Return the text between the parentheses of the first constructor.

    Raises:
        AnalysisError: If the parameter list is never closed.
    """
    match = CONSTRUCTOR.search(content)
    if match is None:
        return None
    depth = 1
    for index in range(match.end(), len(content)):
        char = content[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return content[match.end() : index]
    raise AnalysisError("Unterminated constructor parameter list")


def extract_dependencies(content: str) -> list[str]:
    """Collect injected type and token names.

    Sources, in order: ``inject(...)`` call sites, constructor parameters with
    an access modifier (primitive types skipped), and ``@Inject(TOKEN)``
    decorators inside the constructor parameter list.

    Returns:
        Unique names in first-seen order.
    """
    found: dict[str, None] = {}

    for match in INJECT_CALL.finditer(content):
        found.setdefault(match.group(1))

    if (parameters := constructor_parameters(content)) is not None:
        for match in CONSTRUCTOR_PARAMETER.finditer(parameters):
            type_name = match.group(2)
            if type_name.lower() not in PRIMITIVE_TYPES:
                found.setdefault(type_name)
        for match in INJECT_DECORATOR.finditer(parameters):
            found.setdefault(match.group(1))

    return list(found)


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on separators that are not nested in brackets or generics."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    previous = ""
    for char in text:
        if char in "<([{":
            depth += 1
        elif char in ")]}" or (char == ">" and previous != "="):
            depth = max(0, depth - 1)
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        previous = char
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_parameter(text: str) -> MethodParameter | None:
    """Parse 'name: Type = default' into a parameter; None when untyped."""
    name_text, colon, type_text = text.partition(":")
    if not colon:
        return None
    name_words = name_text.replace("...", "").replace("?", "").split()
    type_text = _DEFAULT_VALUE.split(type_text, maxsplit=1)[0].strip()
    if not name_words or not type_text:
        return None
    return MethodParameter(name=name_words[-1], type=type_text)


def is_async_type(return_type: str) -> bool:
    """True for Observable/Promise return types."""
    return return_type.strip().startswith(ASYNC_WRAPPERS)


def extract_public_methods(content: str) -> list[MethodSignature]:
    """Find public method signatures in the class body.

    Only the text after the first class declaration is scanned. Private and
    protected members, underscore-prefixed names, the constructor and Angular
    lifecycle hooks are left out. The first occurrence of a name wins.
    """
    declaration = CLASS_DECLARATION.search(content)
    if declaration is None:
        return []
    body = content[declaration.end() :]

    methods: dict[str, MethodSignature] = {}
    for match in METHOD_LINE.finditer(body):
        modifiers, name, parameters, return_type = match.groups()
        if _HIDDEN_MODIFIERS.intersection(modifiers.split()):
            continue
        if name.startswith("_") or name in RESERVED_WORDS or name in LIFECYCLE_HOOKS:
            continue
        if name in methods:
            continue
        return_type = return_type.strip()
        methods[name] = MethodSignature(
            name=name,
            parameters=[
                parameter
                for text in split_top_level(parameters)
                if (parameter := parse_parameter(text)) is not None
            ],
            return_type=return_type,
            is_async=is_async_type(return_type),
        )
    return list(methods.values())
