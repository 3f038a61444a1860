"""Models for discovered tests and the invocations planned for them."""

import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True, kw_only=True, order=True)
class DiscoveredTest:
    """A single test found in a framework checkout.

    ``path`` is relative to the framework checkout. ``class_name`` is the fully
    qualified test-case class for token discovery and ``None`` for phpt files.
    """

    path: str
    class_name: str | None = None

    @property
    def id(self) -> str:
        if self.class_name is None:
            return self.path
        return f"{self.path}::{self.class_name}"


@dataclass(frozen=True, kw_only=True)
class TestInvocation:
    """Command an external launcher should run for one test."""

    __test__ = False

    framework: str
    test_id: str
    argv: Sequence[str]
    cwd: Path
    env: Mapping[str, str] = field(default_factory=dict)
    parallel: bool = True

    @property
    def command(self) -> str:
        return shlex.join(self.argv)

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "test": self.test_id,
            "command": self.command,
            "argv": list(self.argv),
            "cwd": str(self.cwd),
            "env": dict(self.env),
            "parallel": self.parallel,
        }
