"""Shared base model and lenient field types for oracle-produced data."""

from enum import Enum
from typing import Annotated, Any, Callable, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

E = TypeVar("E", bound=Enum)


class CamelModel(BaseModel):
    """Base for persisted records.

    Fields are snake_case in Python and camelCase on the wire. Unknown keys
    returned by the oracle are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    def to_dict(self) -> dict:
        """Serialize with camelCase keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def coerce_enum(enum_cls: type[E], default: Optional[E]) -> Callable[[Any], Optional[E]]:
    """Build a validator mapping unknown enum values to a default."""

    def _validate(value: Any) -> Optional[E]:
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            try:
                return enum_cls(value.strip().lower().replace(" ", "_"))
            except ValueError:
                return default
        return default

    return _validate


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    return value


def _as_text(value: Any) -> Any:
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    return value


# Oracle output frequently uses null or a bare string where a list is expected
StrList = Annotated[list[str], BeforeValidator(_as_list)]
Text = Annotated[Optional[str], BeforeValidator(_as_text)]


def lenient_list(item_type: type) -> Any:
    """List type accepting null or a single item."""
    return Annotated[list[item_type], BeforeValidator(_as_list)]
