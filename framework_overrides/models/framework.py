"""Models for the framework table loaded from frameworks.yaml files."""

import re
import shlex
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Self

from pydantic import Field, model_validator

from framework_overrides.config import HarnessConfig
from framework_overrides.models.base import Model, OptionMapping, StrMapping
from framework_overrides.models.invocation import DiscoveredTest, TestInvocation


class DiscoveryMode(StrEnum):
    """Strategy used to enumerate the individual tests of a framework."""

    TOKEN = "token"
    PHPT = "phpt"
    REFLECTION = "reflection"


def _format_value(value: int | str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RuntimeCommand(Model):
    """Runtime flags and the test binary they launch."""

    runtime_options: OptionMapping = Field(
        default_factory=dict,
        validate_default=True,
        description="Runtime settings passed as -v Key=Value, in table order",
    )
    test_binary: str = Field(
        default="vendor/bin/phpunit",
        min_length=1,
        description="Test binary path, relative paths resolve against the harness root",
    )

    @model_validator(mode="after")
    def _check_option_names(self) -> Self:
        for key in self.runtime_options:
            if not key or any(c.isspace() or c == "=" for c in key):
                raise ValueError(f"Invalid runtime option name: {key!r}")
        return self

    def binary_path(self, root: Path) -> Path:
        path = Path(self.test_binary)
        return path if path.is_absolute() else root / path

    def argv(self, runtime_build: str, root: Path) -> tuple[str, ...]:
        """Build the command as an argument vector."""
        args = [runtime_build]
        for key, value in self.runtime_options.items():
            args.extend(("-v", f"{key}={_format_value(value)}"))
        args.append(str(self.binary_path(root)))
        return tuple(args)

    def render(self, runtime_build: str, root: Path) -> str:
        """Build the command as a shell string.

        Example: ``hhvm -v Eval.JitASize=104857600 /root/vendor/bin/phpunit``.
        """
        return shlex.join(self.argv(runtime_build, root))


class FrameworkOverride(Model):
    """Test settings for a single framework."""

    name: str = Field(
        ..., pattern=r"^[a-z0-9][a-z0-9_-]*$", description="Framework identifier"
    )
    command: RuntimeCommand = Field(default_factory=RuntimeCommand)
    discovery_mode: DiscoveryMode = DiscoveryMode.PHPT
    env_vars: StrMapping | None = Field(
        default=None, description="Environment overrides for the launched process"
    )
    args_for_tests: StrMapping | None = Field(
        default=None, description="Extra command-line arguments keyed by test id"
    )
    parallel: bool = Field(
        default=True, description="Whether the harness may run tests concurrently"
    )
    test_path: str = Field(
        default=".", description="Test directory relative to the framework checkout"
    )
    test_file_suffix: str = Field(default="Test.php", min_length=1)

    def test_command(self, config: HarnessConfig) -> str:
        """Render the command that runs this framework's tests."""
        return self.command.render(config.runtime_build, config.root)

    def to_invocations(
        self, config: HarnessConfig, tests: Sequence[DiscoveredTest]
    ) -> Sequence[TestInvocation]:
        """Plan one invocation per discovered test.

        The test path is appended last, after any extra arguments registered for
        the test id in ``args_for_tests``. Tests found by class get a
        ``--filter`` selecting that class, so a file declaring several test
        classes yields one distinct command per class.
        """
        base_argv = self.command.argv(config.runtime_build, config.root)
        extra_args = self.args_for_tests or {}
        cwd = config.framework_dir(self.name)
        env = MappingProxyType(dict(self.env_vars or {}))

        invocations: list[TestInvocation] = []
        for test in tests:
            extra = shlex.split(extra_args.get(test.id, ""))
            if test.class_name is not None:
                extra.extend(("--filter", class_filter(test.class_name)))
            invocations.append(
                TestInvocation(
                    framework=self.name,
                    test_id=test.id,
                    argv=(*base_argv, *extra, test.path),
                    cwd=cwd,
                    env=env,
                    parallel=self.parallel,
                )
            )
        return invocations


def class_filter(class_name: str) -> str:
    """Return a phpunit ``--filter`` pattern matching every test of a class.

    phpunit matches the pattern against ``Class::method``.
    """
    return f"^{re.escape(class_name)}::"


class FrameworkTable(Model):
    """Complete framework table loaded from a frameworks.yaml file."""

    version: str = Field(..., description="Framework table schema version")
    frameworks: tuple[FrameworkOverride, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_unique_names(self) -> Self:
        seen: set[str] = set()
        for framework in self.frameworks:
            if framework.name in seen:
                raise ValueError(f"Duplicate framework name: {framework.name}")
            seen.add(framework.name)
        return self

    @property
    def names(self) -> Sequence[str]:
        return [framework.name for framework in self.frameworks]
