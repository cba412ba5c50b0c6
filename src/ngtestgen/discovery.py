"""
Discovery pass: walk, classify, read and analyze.

Every candidate file below the root becomes one immutable SourceFile. Files
with no recognized role are dropped here; files that fail analysis are
logged and left out, so one bad file never stops a run.
"""

import logging
from pathlib import Path

import anyio

from .analyzer import analyze
from .classifier import base_name, classify, derive_class_name
from .config import DefaultSettings
from .exceptions import AnalysisError, SourcePathNotFoundError
from .models import Role, SourceFile
from .walker import Walker

logger = logging.getLogger(__name__)


async def count_test_variants(path: Path, settings: DefaultSettings) -> int:
    """Count sibling test files already named after ``path``.

    Matches '{base}.spec.ts' as well as numbered variants such as
    '{base}.spec.2.ts'. Names are compared literally, so '[' or '*' in a
    file name is never treated as a pattern.
    """
    prefix = f"{base_name(path.name)}.{settings.test_marker}"
    count = 0
    async for candidate in anyio.Path(path.parent).iterdir():
        name = candidate.name
        if name.startswith(prefix) and name.endswith(settings.test_extension):
            if await candidate.is_file():
                count += 1
    return count


async def load_source_file(path: Path, settings: DefaultSettings) -> SourceFile | None:
    """Build the record for one file, or None when it has no known role.

    Raises:
        AnalysisError: If the file cannot be read or analyzed.
    """
    role = classify(path.name)
    if role == Role.UNKNOWN:
        logger.debug(f"Ignoring (no Angular role): {path}")
        return None

    content = await Walker.read_source(path)
    analysis = analyze(role, content)
    name = base_name(path.name)
    return SourceFile(
        path=path,
        base_name=name,
        extension=path.suffix,
        role=role,
        class_name=derive_class_name(name),
        existing_test_variant_count=await count_test_variants(path, settings),
        content=content,
        **analysis.model_dump(),
    )


async def discover(root: Path, settings: DefaultSettings) -> list[SourceFile]:
    """Discover every testable-role source file below ``root``.

    Args:
        root: Directory to scan.
        settings: Settings supplying extensions and excluded directories.

    Returns:
        Records in walk order.

    Raises:
        SourcePathNotFoundError: If ``root`` does not exist or is not a directory.
    """
    root = Path(await anyio.Path(root).resolve())
    if not await anyio.Path(root).is_dir():
        raise SourcePathNotFoundError(f"Source path not found: {root}")

    records: list[SourceFile] = []
    async for path in Walker(root, settings).walk():
        try:
            record = await load_source_file(path, settings)
        except AnalysisError as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        if record is not None:
            records.append(record)

    logger.debug(f"Discovered {len(records)} source files under {root}")
    return records
