"""Lenient JSON decoding shared across the process.

Models decoded through :class:`JsonCodec` ignore unknown keys and accept
explicit ``null`` values for optional fields; malformed input surfaces as
:class:`DecodeError` so callers can decide whether it is fatal.
"""
from __future__ import annotations

import json
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


class DecodeError(ValueError):
    """Raised when a payload cannot be decoded into the requested model."""


class JsonCodec:
    def decode(self, model: Type[ModelT], payload: str | bytes) -> ModelT:
        try:
            return model.model_validate_json(payload)
        except ValidationError as exc:
            raise DecodeError(f"invalid {model.__name__} payload") from exc

    def decode_obj(self, model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise DecodeError(f"invalid {model.__name__} payload") from exc

    def loads(self, payload: str | bytes) -> Any:
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise DecodeError("invalid json") from exc

    def dumps(self, obj: Any) -> str:
        if isinstance(obj, BaseModel):
            return obj.model_dump_json()
        return json.dumps(obj, ensure_ascii=False, sort_keys=True)


__all__ = ["DecodeError", "JsonCodec"]
