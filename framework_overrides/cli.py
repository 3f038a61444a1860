"""CLI entry point for framework test overrides."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from framework_overrides.config import HarnessConfig
from framework_overrides.definition_loader import (
    load_builtin_table,
    load_framework_table,
)
from framework_overrides.discovery import UnsupportedDiscoveryModeError, discover_tests
from framework_overrides.models.framework import FrameworkOverride, FrameworkTable
from framework_overrides.models.invocation import TestInvocation
from framework_overrides.registry import (
    FrameworkNotFoundError,
    merge_tables,
    resolve_framework,
)

RUNTIME_BUILD_ENV = "HHVM_BIN"

EXIT_OK = 0
EXIT_NO_TESTS = 1
EXIT_CONFIG_ERROR = 2

log = logging.getLogger("framework_overrides")


async def load_table(extra_tables: Sequence[Path] = ()) -> FrameworkTable:
    """Load the built-in table and merge extra tables over it."""
    tables = [await load_builtin_table()]
    for path in extra_tables:
        log.info("Loading framework table: %s", path)
        tables.append(await load_framework_table(path))
    return merge_tables(*tables)


def describe_framework(
    framework: FrameworkOverride, config: HarnessConfig
) -> dict[str, Any]:
    """Format a framework override for JSON output."""
    return {
        "name": framework.name,
        "test_command": framework.test_command(config),
        "discovery_mode": str(framework.discovery_mode),
        "env_vars": dict(framework.env_vars) if framework.env_vars else None,
        "args_for_tests": (
            dict(framework.args_for_tests) if framework.args_for_tests else None
        ),
        "parallel": framework.parallel,
    }


def log_plan_summary(
    log: logging.Logger,
    framework: FrameworkOverride,
    invocations: Sequence[TestInvocation],
) -> None:
    """Log a short summary of the planned invocations."""
    log.info("=" * 80)
    log.info("Plan for %s:", framework.name)
    log.info("=" * 80)
    log.info("Discovery mode: %s", framework.discovery_mode)
    log.info("Tests: %d", len(invocations))
    log.info("Parallel: %s", "yes" if framework.parallel else "no")
    if framework.env_vars:
        log.info("Environment: %s", ", ".join(sorted(framework.env_vars)))


async def run(
    command: str,
    name: str | None = None,
    extra_tables: Sequence[Path] = (),
    runtime_build: str | None = None,
    root: Path | None = None,
    frameworks_dir: Path | None = None,
) -> int:
    """Run a CLI command and return the exit code."""
    try:
        table = await load_table(extra_tables)

        if command == "list":
            for framework in table.frameworks:
                print(f"{framework.name}\t{framework.discovery_mode}")
            return EXIT_OK

        if name is None:
            raise ValueError(f"Command '{command}' requires a framework name")

        framework = resolve_framework(table, name)
        config = HarnessConfig(
            runtime_build=runtime_build or "",
            root=root or Path.cwd(),
            frameworks_dir=frameworks_dir,
        )

        if command == "show":
            print(json.dumps(describe_framework(framework, config), indent=2))
            return EXIT_OK

        if command != "plan":
            raise ValueError(f"Unknown command: {command}")

        tests = await discover_tests(framework, config)
        invocations = framework.to_invocations(config, tests)
    except (
        FrameworkNotFoundError,
        UnsupportedDiscoveryModeError,
        OSError,
        ValueError,
    ) as e:
        log.error("%s", e)
        return EXIT_CONFIG_ERROR

    log_plan_summary(log, framework, invocations)

    output = {
        "framework": describe_framework(framework, config),
        "total": len(invocations),
        "invocations": [invocation.to_dict() for invocation in invocations],
    }
    print(json.dumps(output, indent=2))

    if not invocations:
        log.warning("No tests discovered for %s", framework.name)
        return EXIT_NO_TESTS
    return EXIT_OK


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Show test commands and plans for PHP framework test suites"
    )
    parser.add_argument(
        "--table",
        dest="tables",
        type=Path,
        action="append",
        default=[],
        help="Extra framework table merged over the built-in one (repeatable)",
    )
    parser.add_argument(
        "--runtime-build",
        default=os.environ.get(RUNTIME_BUILD_ENV),
        help=f"Path to the runtime binary (default: ${RUNTIME_BUILD_ENV})",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Harness root that test binaries resolve against (default: cwd)",
    )
    parser.add_argument(
        "--frameworks-dir",
        type=Path,
        default=None,
        help="Directory holding framework checkouts (default: <root>/frameworks)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="List known frameworks")
    show_parser = subparsers.add_parser("show", help="Show a framework override")
    show_parser.add_argument("name", help="Framework name")
    plan_parser = subparsers.add_parser(
        "plan", help="Discover tests and print the invocation plan"
    )
    plan_parser.add_argument("name", help="Framework name")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            command=args.command,
            name=getattr(args, "name", None),
            extra_tables=args.tables,
            runtime_build=args.runtime_build,
            root=args.root,
            frameworks_dir=args.frameworks_dir,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
