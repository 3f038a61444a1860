"""Lookup of framework overrides by name."""

from framework_overrides.models.framework import FrameworkOverride, FrameworkTable


class FrameworkNotFoundError(Exception):
    """Raised when a framework is not found."""


def resolve_framework(table: FrameworkTable, name: str) -> FrameworkOverride:
    """Return the override registered under ``name``.

    Raises:
        FrameworkNotFoundError: If no framework with the given name is found

    """
    for framework in table.frameworks:
        if framework.name == name:
            return framework

    raise FrameworkNotFoundError(
        f"Framework '{name}' not found. Available frameworks: {list(table.names)}"
    )


def merge_tables(*tables: FrameworkTable) -> FrameworkTable:
    """Merge tables in order, later rows replace earlier rows with the same name."""
    if not tables:
        raise ValueError("At least one framework table is required")

    merged: dict[str, FrameworkOverride] = {}
    for table in tables:
        for framework in table.frameworks:
            merged[framework.name] = framework

    return FrameworkTable(version=tables[-1].version, frameworks=list(merged.values()))
