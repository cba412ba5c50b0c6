"""
Generation pipeline.

Discovers the source files under a root, builds the dependency index once
discovery is complete, then renders and writes one spec per record. Records
are processed one at a time with a cancellation checkpoint in between; a
failing record is recorded and the run moves on.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from anyio.lowlevel import checkpoint

from .config import DefaultSettings
from .discovery import discover
from .generator import render_spec
from .models import GenerationOutcome, GenerationResult, GenerationStatus, SourceFile
from .resolver import DependencyIndex
from .writer import target_path, write_spec, write_test_config

logger = logging.getLogger(__name__)

SKIP_REASON = "interface/type only"


async def generate_one(
    record: SourceFile, index: DependencyIndex, settings: DefaultSettings
) -> GenerationOutcome:
    """Render and write the spec for one record.

    Returns:
        A skipped outcome for interface/type-only models, a generated outcome
        with the written path otherwise.

    Raises:
        GenerationError: If rendering fails.
        OSError: If the spec cannot be written.
    """
    content = render_spec(record, index)
    if content is None:
        logger.debug(f"Skipping interface/type-only file: {record.path}")
        return GenerationOutcome(
            source=record.path, status=GenerationStatus.SKIPPED, message=SKIP_REASON
        )
    output = await write_spec(target_path(record, settings), content)
    logger.info(f"Generated {output}")
    return GenerationOutcome(source=record.path, status=GenerationStatus.GENERATED, output=output)


async def run(
    root: Path, settings: DefaultSettings, workspace_root: Path | None = None
) -> GenerationResult:
    """Generate specs for every discovered file under ``root``.

    Args:
        root: Workspace or source directory to scan.
        settings: Effective settings for the workspace.
        workspace_root: Directory receiving the test runner config; defaults
            to ``root``.

    Returns:
        GenerationResult with one outcome per discovered record.

    Raises:
        SourcePathNotFoundError: If ``root`` does not exist.
    """
    start_time = datetime.now(UTC)
    records = await discover(root, settings)
    index = DependencyIndex.build(records)
    result = GenerationResult(root=root, files_found=len(records), started_at=start_time)

    for record in records:
        await checkpoint()
        try:
            outcome = await generate_one(record, index, settings)
        except Exception as e:
            logger.warning(f"Failed to generate test for {record.path}: {e}")
            outcome = GenerationOutcome(
                source=record.path, status=GenerationStatus.FAILED, message=str(e)
            )
        result.outcomes.append(outcome)

    if records:
        try:
            await write_test_config(workspace_root or root, settings)
        except OSError as e:
            logger.warning(f"Could not write test runner config: {e}")

    end_time = datetime.now(UTC)
    result.duration = (end_time - start_time).total_seconds()
    logger.debug(f"Generation complete for {root}\n{result.summary}")
    return result
