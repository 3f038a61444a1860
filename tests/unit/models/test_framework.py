"""Tests for framework table models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from framework_overrides.config import HarnessConfig
from framework_overrides.models.framework import (
    DiscoveryMode,
    FrameworkOverride,
    FrameworkTable,
    RuntimeCommand,
)
from framework_overrides.models.invocation import DiscoveredTest
from framework_overrides.testing.factories import FrameworkOverrideFactory


@pytest.fixture
def config(tmp_path: Path) -> HarnessConfig:
    """Create harness config rooted in a temporary directory."""
    return HarnessConfig(runtime_build="/opt/hhvm/bin/hhvm", root=tmp_path)


def test_render_keeps_option_order(config: HarnessConfig) -> None:
    """Renders runtime options as -v flags in declaration order."""
    command = RuntimeCommand(
        runtime_options={"Eval.B": 2, "Eval.A": 1},
        test_binary="vendor/bin/phpunit",
    )

    rendered = command.render(config.runtime_build, config.root)

    assert rendered == (
        f"/opt/hhvm/bin/hhvm -v Eval.B=2 -v Eval.A=1 {config.root}/vendor/bin/phpunit"
    )


def test_render_without_options(config: HarnessConfig) -> None:
    """Renders runtime followed by the test binary when no options are set."""
    rendered = RuntimeCommand().render(config.runtime_build, config.root)

    assert rendered == f"/opt/hhvm/bin/hhvm {config.root}/vendor/bin/phpunit"


def test_render_formats_booleans(config: HarnessConfig) -> None:
    """Booleans render as lowercase true/false."""
    command = RuntimeCommand(runtime_options={"Eval.Jit": True, "Eval.Debug": False})

    argv = command.argv(config.runtime_build, config.root)

    assert argv[1:5] == ("-v", "Eval.Jit=true", "-v", "Eval.Debug=false")


def test_absolute_test_binary_is_not_rebased(config: HarnessConfig) -> None:
    """Absolute test binary paths are used as-is."""
    command = RuntimeCommand(test_binary="/usr/local/bin/phpunit")

    argv = command.argv(config.runtime_build, config.root)

    assert argv[-1] == "/usr/local/bin/phpunit"


def test_render_quotes_paths_with_spaces() -> None:
    """Shell-quotes paths that contain spaces."""
    rendered = RuntimeCommand().render("/opt/my hhvm/hhvm", Path("/srv/root"))

    assert rendered == "'/opt/my hhvm/hhvm' /srv/root/vendor/bin/phpunit"


def test_rejects_option_name_with_equals() -> None:
    """Option names cannot contain '=' or whitespace."""
    with pytest.raises(ValidationError, match="Invalid runtime option name"):
        RuntimeCommand(runtime_options={"Eval.A=1": 2})


def test_defaults() -> None:
    """Unset slots keep the base defaults."""
    framework = FrameworkOverride(name="laravel")

    assert framework.discovery_mode is DiscoveryMode.PHPT
    assert framework.env_vars is None
    assert framework.args_for_tests is None
    assert framework.parallel is True
    assert framework.command == RuntimeCommand()


@pytest.mark.parametrize("name", ["", "PhpMyAdmin", "php myadmin", "-leading"])
def test_rejects_invalid_names(name: str) -> None:
    """Framework names are lowercase identifiers."""
    with pytest.raises(ValidationError):
        FrameworkOverride(name=name)


def test_rejects_unknown_keys() -> None:
    """Unknown keys are rejected."""
    with pytest.raises(ValidationError):
        FrameworkOverride.model_validate({"name": "slim", "tset_path": "tests"})


def test_is_immutable() -> None:
    """Records cannot be modified after construction."""
    framework = FrameworkOverrideFactory.build()

    with pytest.raises(ValidationError):
        framework.name = "other"  # type: ignore[misc]


def test_table_rejects_duplicate_names() -> None:
    """Duplicate framework names fail validation."""
    with pytest.raises(ValidationError, match="Duplicate framework name: slim"):
        FrameworkTable(
            version="1.0",
            frameworks=[FrameworkOverride(name="slim"), FrameworkOverride(name="slim")],
        )


def test_to_invocations_appends_test_path(config: HarnessConfig) -> None:
    """Each invocation runs the framework command against one test."""
    framework = FrameworkOverrideFactory.build(
        name="slim",
        command=RuntimeCommand(runtime_options={"Eval.JitASize": 1}),
        env_vars={"APP_ENV": "testing"},
        parallel=False,
    )
    tests = [DiscoveredTest(path="tests/AppTest.php", class_name="App\\AppTest")]

    invocations = framework.to_invocations(config, tests)

    assert len(invocations) == 1
    invocation = invocations[0]
    assert invocation.framework == "slim"
    assert invocation.test_id == "tests/AppTest.php::App\\AppTest"
    assert invocation.argv == (
        "/opt/hhvm/bin/hhvm",
        "-v",
        "Eval.JitASize=1",
        str(config.root / "vendor/bin/phpunit"),
        "--filter",
        "^App\\\\AppTest::",
        "tests/AppTest.php",
    )
    assert invocation.cwd == config.root / "frameworks" / "slim"
    assert invocation.env == {"APP_ENV": "testing"}
    assert invocation.parallel is False


def test_to_invocations_inserts_extra_args(config: HarnessConfig) -> None:
    """Extra arguments registered for a test id precede the test path."""
    framework = FrameworkOverrideFactory.build(
        args_for_tests={"tests/a.phpt": "--group slow --stop-on-failure"},
    )
    tests = [DiscoveredTest(path="tests/a.phpt"), DiscoveredTest(path="tests/b.phpt")]

    invocations = framework.to_invocations(config, tests)

    assert invocations[0].argv[-4:] == (
        "--group",
        "slow",
        "--stop-on-failure",
        "tests/a.phpt",
    )
    assert invocations[1].argv[-2:] == (
        str(config.root / "vendor/bin/phpunit"),
        "tests/b.phpt",
    )


def test_to_invocations_empty(config: HarnessConfig) -> None:
    """No tests means no invocations."""
    framework = FrameworkOverrideFactory.build()

    assert framework.to_invocations(config, []) == []


def test_to_invocations_selects_each_class_of_a_file(config: HarnessConfig) -> None:
    """Classes sharing a file get distinct commands filtered by class."""
    framework = FrameworkOverrideFactory.build()
    tests = [
        DiscoveredTest(path="tests/PairTest.php", class_name="Ns\\FirstTest"),
        DiscoveredTest(path="tests/PairTest.php", class_name="Ns\\SecondTest"),
    ]

    invocations = framework.to_invocations(config, tests)

    assert invocations[0].command != invocations[1].command
    assert invocations[0].argv[-3:] == (
        "--filter",
        "^Ns\\\\FirstTest::",
        "tests/PairTest.php",
    )
    assert invocations[1].argv[-3:] == (
        "--filter",
        "^Ns\\\\SecondTest::",
        "tests/PairTest.php",
    )


def test_relative_root_plans_absolute_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Relative harness paths are made absolute before planning."""
    monkeypatch.chdir(tmp_path)
    config = HarnessConfig(
        runtime_build="hhvm", root=Path("harness"), frameworks_dir=Path("checkouts")
    )
    framework = FrameworkOverrideFactory.build(name="pear")

    invocation = framework.to_invocations(config, [DiscoveredTest(path="a.phpt")])[0]

    assert invocation.cwd == tmp_path / "checkouts" / "pear"
    assert invocation.argv[1] == str(tmp_path / "harness" / "vendor/bin/phpunit")


def test_mappings_are_read_only() -> None:
    """Mapping fields cannot be mutated through a frozen record."""
    framework = FrameworkOverride(
        name="slim",
        env_vars={"APP_ENV": "testing"},
        command=RuntimeCommand(runtime_options={"Eval.JitASize": 1}),
    )

    with pytest.raises(TypeError):
        framework.env_vars["APP_ENV"] = "prod"  # type: ignore[index]
    with pytest.raises(TypeError):
        framework.command.runtime_options["Eval.JitASize"] = 2  # type: ignore[index]
    assert framework.model_dump()["env_vars"] == {"APP_ENV": "testing"}


def test_mappings_are_copied_from_input() -> None:
    """Changing the source dict after construction leaves the record intact."""
    env = {"APP_ENV": "testing"}
    framework = FrameworkOverride(name="slim", env_vars=env)

    env["APP_ENV"] = "prod"

    assert framework.env_vars == {"APP_ENV": "testing"}


def test_table_frameworks_are_a_tuple() -> None:
    """The framework list of a table cannot be appended to."""
    table = FrameworkTable(version="1.0", frameworks=[FrameworkOverride(name="slim")])

    assert isinstance(table.frameworks, tuple)
