"""
Async directory walker for Angular workspaces.

Yields the TypeScript files under a root directory that are candidates for
test generation: files with a configured source extension that are not
themselves tests and do not live below an excluded directory. Excluded
directories are pruned, never descended into.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path

import anyio

from .classifier import is_excluded, is_test_file
from .config import DefaultSettings
from .exceptions import AnalysisError

logger = logging.getLogger(__name__)


class Walker:
    """Walks a workspace directory and yields candidate source files."""

    def __init__(self, root: Path, settings: DefaultSettings) -> None:
        self.root = root
        self.settings = settings
        self._excluded = set(settings.excluded_directories)
        self._extensions = set(settings.source_extensions)

    async def walk(self) -> AsyncIterator[Path]:
        """Yield candidate source files in a stable, sorted order."""
        async for path in self._walk_recursive(anyio.Path(self.root)):
            if path.suffix.lower() not in self._extensions:
                continue
            if is_test_file(path.name):
                logger.debug(f"Ignoring (test file): {path}")
                continue
            yield Path(path)

    async def _walk_recursive(self, directory: anyio.Path) -> AsyncIterator[anyio.Path]:
        """Yield every file below ``directory``, pruning excluded directories."""
        try:
            entries = sorted([entry async for entry in directory.iterdir()], key=lambda e: e.name)
        except PermissionError:
            logger.warning(f"Permission denied: {directory}")
            return
        except OSError as e:
            logger.warning(f"Error reading directory {directory}: {e}")
            return

        for entry in entries:
            if await entry.is_dir():
                if await entry.is_symlink():
                    logger.debug(f"Ignoring (symlinked directory): {entry}")
                    continue
                if is_excluded(Path(entry), self.root, self._excluded):
                    logger.debug(f"Ignoring (excluded directory): {entry}")
                    continue
                async for path in self._walk_recursive(entry):
                    yield path
            elif await entry.is_file():
                yield entry

    @staticmethod
    async def read_source(path: Path) -> str:
        """Read a source file as text.

        UTF-8 is tried first; files that are not valid UTF-8 are decoded as
        latin-1, which accepts any byte sequence.

        Raises:
            AnalysisError: If the file cannot be read.
        """
        apath = anyio.Path(path)
        try:
            try:
                return await apath.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                return await apath.read_text(encoding="latin-1")
        except OSError as e:
            raise AnalysisError(f"Could not read {path}: {e}") from e
