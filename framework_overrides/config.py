"""Configuration for a harness run."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class HarnessConfig(BaseModel):
    """Where the runtime build, the test binaries and framework checkouts live."""

    runtime_build: str = Field(..., min_length=1)
    root: Path = Field(default_factory=Path.cwd)
    # Defaults to <root>/frameworks
    frameworks_dir: Path | None = None

    @field_validator("root", "frameworks_dir")
    @classmethod
    def _make_absolute(cls, value: Path | None) -> Path | None:
        # Always absolute, invocations run with cwd set to the checkout
        return value.absolute() if value is not None else None

    def framework_dir(self, name: str) -> Path:
        """Return the checkout directory of a framework."""
        base = self.frameworks_dir or self.root / "frameworks"
        return base / name
