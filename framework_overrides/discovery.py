"""Enumerate the tests of a framework checkout."""

import asyncio
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from framework_overrides.config import HarnessConfig
from framework_overrides.models.framework import DiscoveryMode, FrameworkOverride
from framework_overrides.models.invocation import DiscoveredTest

logger = logging.getLogger(__name__)

# Comments and string literals, dropped before looking for class declarations.
# `#[` starts an attribute, not a comment. Heredoc and nowdoc bodies run up to
# their closing label.
_NOISE_RE = re.compile(
    r"<<<[ \t]*(?P<quote>[\"']?)(?P<label>[A-Za-z_]\w*)(?P=quote)\r?\n"
    r".*?^[ \t]*(?P=label)\b"
    r"|//[^\n]*"
    r"|#(?!\[)[^\n]*"
    r"|/\*.*?\*/"
    r"|'(?:\\.|[^'\\])*'"
    r'|"(?:\\.|[^"\\])*"',
    re.DOTALL | re.MULTILINE,
)
_NAMESPACE_RE = re.compile(
    r"\bnamespace(?:\s+(?P<name>[A-Za-z_][\w\\]*))?\s*[;{]"
)
_CLASS_RE = re.compile(
    r"(?P<modifiers>(?:\b(?:abstract|final|readonly)\s+)*)"
    r"\bclass\s+(?P<name>[A-Za-z_]\w*)\s+extends\s+[A-Za-z_\\][\w\\]*"
)


class UnsupportedDiscoveryModeError(Exception):
    """Raised when a discovery mode cannot be served without running the runtime."""


async def discover_tests(
    framework: FrameworkOverride, config: HarnessConfig
) -> Sequence[DiscoveredTest]:
    """Find the tests of a framework using its discovery mode.

    Args:
        framework: Framework override to discover tests for
        config: Harness configuration locating the framework checkout

    Returns:
        Discovered tests sorted by path and class name.

    Raises:
        FileNotFoundError: If the test directory does not exist
        UnsupportedDiscoveryModeError: For reflection discovery

    """
    checkout = config.framework_dir(framework.name)
    test_dir = checkout / framework.test_path

    if framework.discovery_mode is DiscoveryMode.REFLECTION:
        raise UnsupportedDiscoveryModeError(
            f"Discovery mode '{framework.discovery_mode}' of framework "
            f"'{framework.name}' requires executing the runtime"
        )

    if not test_dir.is_dir():
        raise FileNotFoundError(f"Test directory not found: {test_dir}")

    logger.info(
        "Discovering %s tests for %s in %s",
        framework.discovery_mode,
        framework.name,
        test_dir,
    )

    if framework.discovery_mode is DiscoveryMode.TOKEN:
        tests = await asyncio.to_thread(
            find_token_tests, checkout, test_dir, framework.test_file_suffix
        )
    else:
        tests = await asyncio.to_thread(find_phpt_tests, checkout, test_dir)

    logger.info("Discovered %d test(s) for %s", len(tests), framework.name)
    return tests


def find_token_tests(
    checkout: Path, test_dir: Path, suffix: str
) -> Sequence[DiscoveredTest]:
    """Collect test-case classes from files ending in ``suffix``."""
    tests: list[DiscoveredTest] = []
    for file_path in sorted(test_dir.rglob(f"*{suffix}")):
        if not file_path.is_file():
            continue
        source = file_path.read_text(encoding="utf-8", errors="replace")
        relative = file_path.relative_to(checkout).as_posix()
        tests.extend(
            DiscoveredTest(path=relative, class_name=class_name)
            for class_name in extract_test_classes(source)
        )
    return sorted(tests)


def find_phpt_tests(checkout: Path, test_dir: Path) -> Sequence[DiscoveredTest]:
    """Collect every .phpt file below ``test_dir``."""
    return sorted(
        DiscoveredTest(path=file_path.relative_to(checkout).as_posix())
        for file_path in test_dir.rglob("*.phpt")
        if file_path.is_file()
    )


def extract_test_classes(source: str) -> Sequence[str]:
    """Return fully qualified names of concrete classes that extend another class.

    Args:
        source: PHP source code

    Returns:
        Class names in declaration order, each prefixed with the namespace
        declared before it

    """
    code = _NOISE_RE.sub(" ", source)

    # (offset, name) of every namespace declaration, in source order
    namespaces = [
        (match.start(), (match.group("name") or "").strip("\\"))
        for match in _NAMESPACE_RE.finditer(code)
    ]

    classes: list[str] = []
    for match in _CLASS_RE.finditer(code):
        if "abstract" in match.group("modifiers").split():
            continue
        namespace = ""
        for offset, name in namespaces:
            if offset > match.start():
                break
            namespace = name
        class_name = match.group("name")
        classes.append(f"{namespace}\\{class_name}" if namespace else class_name)
    return classes
