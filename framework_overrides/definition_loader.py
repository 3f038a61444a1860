"""Load framework tables from YAML files."""

import asyncio
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from framework_overrides.models.framework import FrameworkTable

log = logging.getLogger(__name__)

BUILTIN_TABLE_PATH = Path(__file__).parent / "frameworks.yaml"


async def load_framework_table(path: Path) -> FrameworkTable:
    """Load and validate a framework table.

    Raises:
        FileNotFoundError: If the table file does not exist
        ValueError: If the file is empty, not valid YAML or fails validation

    """
    if not path.is_file():
        raise FileNotFoundError(f"Framework table not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty framework table: {path}")

    try:
        table = FrameworkTable.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid framework table schema in {path}: {e}") from e

    log.debug("Loaded %d framework(s) from %s", len(table.frameworks), path)
    return table


async def load_builtin_table() -> FrameworkTable:
    """Load the framework table shipped with the package."""
    return await load_framework_table(BUILTIN_TABLE_PATH)
