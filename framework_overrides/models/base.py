"""Base model shared by every framework table record."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer


def _freeze(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


class Model(BaseModel):
    """Immutable record that rejects keys it does not declare."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# Read-only mappings for frozen models, serialized back to plain dicts
StrMapping = Annotated[
    Mapping[str, str],
    AfterValidator(_freeze),
    PlainSerializer(dict, return_type=dict[str, str]),
]
OptionMapping = Annotated[
    Mapping[str, int | bool | str],
    AfterValidator(_freeze),
    PlainSerializer(dict, return_type=dict[str, int | bool | str]),
]
