"""
JSON codec for request entities and response bodies.

Encoding turns pydantic models, dataclasses, mappings and sequences into a
JSON body. Decoding validates a body against a target shape with pydantic,
so any type pydantic understands (models, dataclasses, ``List[...]``,
``Dict[...]``, scalars) can be requested from a response.
"""

import dataclasses
import json
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from restclient.shared.exceptions import RestClientDecodeError


@dataclass(frozen=True)
class SerializerOptions:
    """How entities are written to a JSON body."""
    camel_case: bool = True
    exclude_none: bool = True
    datetime_format: Optional[str] = None


# Settings for .NET-style REST services
DOTNET_CAMELCASE = SerializerOptions(camel_case=True, exclude_none=True)

# Settings for Java-style REST services: second-precision local timestamps
JAVA_CAMELCASE = SerializerOptions(camel_case=True, exclude_none=True, datetime_format="%Y-%m-%dT%H:%M:%S")

_SCALAR_ZEROS = {int: 0, float: 0.0, bool: False, str: ""}


def zero_value(shape: Any) -> Any:
    """Value an empty body decodes to for the given shape."""
    return _SCALAR_ZEROS.get(shape)


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or str(shape)


class JsonCodec:
    """Encodes entities to JSON and decodes JSON bodies into target shapes."""

    def encode(self, entity: Any, options: SerializerOptions = DOTNET_CAMELCASE) -> str:
        prepared = self._prepare(entity, options)
        return json.dumps(to_jsonable_python(prepared), ensure_ascii=False, separators=(",", ":"))

    def decode(self, body: Optional[str], shape: Any) -> Any:
        if body is None or not body.strip():
            return zero_value(shape)
        if shape is str:
            return body

        try:
            return _adapter(shape).validate_json(body)
        except ValidationError as e:
            raise RestClientDecodeError(
                f"Could not decode response into {_shape_name(shape)}: {e.error_count()} error(s)",
                target=_shape_name(shape),
                body=body,
                details={"errors": e.errors(include_url=False)},
            ) from e

    def _prepare(self, value: Any, options: SerializerOptions) -> Any:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="python", by_alias=True, exclude_none=options.exclude_none)
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            value = dataclasses.asdict(value)

        if isinstance(value, dict):
            prepared = {}
            for key, item in value.items():
                if item is None and options.exclude_none:
                    continue
                if isinstance(key, str) and options.camel_case:
                    key = to_camel(key)
                prepared[key] = self._prepare(item, options)
            return prepared
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._prepare(item, options) for item in value]
        if isinstance(value, datetime) and options.datetime_format:
            return value.strftime(options.datetime_format)
        return value


default_codec = JsonCodec()
