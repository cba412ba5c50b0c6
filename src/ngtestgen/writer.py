"""
Writing generated specs to disk.

Specs are written beside their source file. An existing spec is never
overwritten: when a record already has test files, the new spec gets a
numeric discriminator ('user.service.spec.2.ts').
"""

import logging
from pathlib import Path

import anyio

from .config import DefaultSettings
from .models import SourceFile

logger = logging.getLogger(__name__)

TEST_CONFIG_FILENAME = "vitest.config.ts"
TEST_CONFIG_PATTERNS = ("vitest.config.*", "jest.config.*")
TEST_SETUP_FILE = "src/test-setup.ts"


def target_path(record: SourceFile, settings: DefaultSettings) -> Path:
    """Path the spec for ``record`` is written to.

    >>> record = SourceFile(path=Path("/app/user.service.ts"), base_name="user.service",
    ...                     role="service", existing_test_variant_count=1)
    >>> target_path(record, DefaultSettings()).name
    'user.service.spec.2.ts'
    """
    marker, extension = settings.test_marker, settings.test_extension
    if record.existing_test_variant_count == 0:
        name = f"{record.base_name}.{marker}{extension}"
    else:
        discriminator = record.existing_test_variant_count + 1
        name = f"{record.base_name}.{marker}.{discriminator}{extension}"
    return record.path.with_name(name)


async def write_spec(path: Path, content: str) -> Path:
    """Create ``path`` with ``content``.

    Raises:
        FileExistsError: If ``path`` already exists.
        OSError: On any other I/O failure.
    """
    async with await anyio.Path(path).open("x", encoding="utf-8") as f:
        await f.write(content)
    logger.debug(f"Wrote {path}")
    return path


def render_test_config(settings: DefaultSettings, has_setup_file: bool = False) -> str:
    """Text of a minimal Vitest configuration for an Angular workspace."""
    setup = ""
    if has_setup_file:
        setup = f"    setupFiles: ['{TEST_SETUP_FILE}'],\n"
    return (
        "import { defineConfig } from 'vitest/config';\n"
        "import angular from '@analogjs/vite-plugin-angular';\n"
        "\n"
        "export default defineConfig({\n"
        "  plugins: [angular()],\n"
        "  test: {\n"
        "    globals: true,\n"
        "    environment: 'jsdom',\n"
        f"    include: ['src/**/*.{settings.test_marker}{settings.test_extension}'],\n"
        f"{setup}"
        "    coverage: {\n"
        f"      thresholds: {{ lines: {settings.target_coverage} }},\n"
        "    },\n"
        "  },\n"
        "});\n"
    )


async def has_test_config(root: Path) -> bool:
    """True when the workspace already configures Vitest or Jest."""
    for pattern in TEST_CONFIG_PATTERNS:
        async for _ in anyio.Path(root).glob(pattern):
            return True
    return False


async def write_test_config(root: Path, settings: DefaultSettings) -> Path | None:
    """Write vitest.config.ts into ``root`` when enabled and no config exists.

    Returns:
        Path of the written file, or None when nothing was written.
    """
    if not settings.generate_test_config:
        return None
    if await has_test_config(root):
        logger.debug(f"Test runner already configured in {root}")
        return None
    has_setup_file = await anyio.Path(root / TEST_SETUP_FILE).is_file()
    path = await write_spec(
        root / TEST_CONFIG_FILENAME, render_test_config(settings, has_setup_file)
    )
    logger.info(f"Created {path}")
    return path
