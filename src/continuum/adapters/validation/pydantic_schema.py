from __future__ import annotations

import json
from typing import Any, Protocol, cast

from continuum.domain.errors import ConfigurationError, ValidationError


class _TypeAdapterProtocol(Protocol):
    def __init__(self, python_type: Any) -> None: ...

    def validate_python(self, value: object, /) -> object: ...


_PYDANTIC_CHECKED: bool = False
_TYPE_ADAPTER: type[_TypeAdapterProtocol] | None = None


def _get_pydantic_type_adapter() -> type[_TypeAdapterProtocol] | None:
    global _PYDANTIC_CHECKED, _TYPE_ADAPTER  # noqa: PLW0603

    if not _PYDANTIC_CHECKED:
        try:
            from pydantic import TypeAdapter  # noqa: PLC0415 - optional dep

            _TYPE_ADAPTER = cast("type[_TypeAdapterProtocol]", TypeAdapter)
        except ImportError:
            _TYPE_ADAPTER = None
        _PYDANTIC_CHECKED = True

    return _TYPE_ADAPTER


def has_pydantic() -> bool:
    return _get_pydantic_type_adapter() is not None


class PydanticSchemaValidator:
    """
    JSON payload validator backed by a pydantic `TypeAdapter`.

    `schema` is any type pydantic can adapt: a `BaseModel` subclass, a
    `TypedDict`, `list[Model]`, `dict[str, int]` and so on. Instances are
    callables matching `JsonValidator`, so they plug straight into
    `JsonMerger(validator=...)`.
    """

    __slots__ = ("_adapter", "_schema")

    def __init__(self, schema: Any) -> None:
        type_adapter_cls = _get_pydantic_type_adapter()
        if type_adapter_cls is None:
            raise ConfigurationError(
                "JSON schema validation requires pydantic. Install continuum[pydantic]."
            )
        self._schema = schema
        self._adapter = type_adapter_cls(schema)

    @property
    def schema(self) -> Any:
        return self._schema

    def __call__(self, payload: object, /) -> object:
        try:
            return self._adapter.validate_python(payload)
        except Exception as exc:  # noqa: BLE001 - surface as domain ValidationError
            raise ValidationError(f"Merged JSON failed schema validation: {exc}") from exc


def validate_json_text(text: str, schema: Any, /) -> object:
    """Parse `text` and validate it against `schema` in one step."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Payload is not valid JSON: {exc}") from exc
    return PydanticSchemaValidator(schema)(payload)
