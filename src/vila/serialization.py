"""Conversion between wire payloads and typed values using pydantic."""

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from vila.errors import DeserializationError, RequestBuildError
from vila.request import DataKind, EmptyResponse, RequestData

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", repr(target_type))


def to_wire(value: Any, *, exclude_none: bool = False) -> Any:
    """Convert a mapping, dataclass or pydantic model to JSON-compatible data."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and all(isinstance(item, tuple) and len(item) == 2 for item in value):
        # Ordered key/value pairs pass through as-is
        return [(key, item) for key, item in value if not (exclude_none and item is None)]
    if exclude_none and isinstance(value, Mapping):
        value = {key: item for key, item in value.items() if item is not None}
    try:
        return _adapter(type(value)).dump_python(value, mode="json", exclude_none=exclude_none)
    except Exception as e:
        raise RequestBuildError(f"Cannot serialize request data of type {_type_name(type(value))}: {e}") from e


def _flat_pairs(value: Any, kind: DataKind) -> Any:
    wire = to_wire(value, exclude_none=True)
    if wire is None:
        return None
    if not isinstance(wire, (Mapping, list)):
        raise RequestBuildError(f"{kind.value} data must serialize to key/value pairs, got {type(wire).__name__}")
    return wire


def encode_request_data(data: RequestData) -> dict[str, Any]:
    """Translate request data into keyword arguments for ``httpx.build_request``."""
    if data.kind is DataKind.EMPTY:
        return {}
    if data.kind is DataKind.JSON:
        return {"json": to_wire(data.value)}
    if data.kind is DataKind.QUERY:
        return {"params": _flat_pairs(data.value, data.kind)}
    if data.kind is DataKind.FORM:
        form = _flat_pairs(data.value, data.kind)
        if isinstance(form, list):
            # httpx only takes form data as a mapping; repeated keys become lists
            grouped: dict[str, list[Any]] = {}
            for key, item in form:
                grouped.setdefault(key, []).append(item)
            form = grouped
        return {"data": form}
    raise RequestBuildError(f"Unsupported request data kind: {data.kind!r}")


def decode_response(response: httpx.Response, response_type: Any) -> Any:
    """Decode a successful response body into ``response_type``.

    Raises:
        DeserializationError: If the body does not match the declared type.
    """
    if response_type is EmptyResponse:
        return EmptyResponse()

    try:
        return _adapter(response_type).validate_json(response.content)
    except PydanticValidationError as e:
        body = response.text
        logger.debug(f"Response body did not match {_type_name(response_type)}: {body[:200]}")
        raise DeserializationError(
            f"Failed to deserialize response into {_type_name(response_type)}: {e}",
            target_type=response_type,
            body=body,
            response=response,
            validation_error=e,
        ) from e
