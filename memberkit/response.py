"""Decoding of API responses returned by cluster members."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping, Union


class StatusError(Exception):
    """An error that carries the HTTP status code it was reported with."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        return self.message


class ResponseType(str, enum.Enum):
    """The kind of an API response."""

    SYNC = "sync"
    ASYNC = "async"
    ERROR = "error"


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _integer(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return value


def _response_type(value: str) -> Union[ResponseType, str]:
    try:
        return ResponseType(value)
    except ValueError:
        return value


@dataclass
class ApiResponse:
    """A decoded API response envelope."""

    type: Union[ResponseType, str] = ""
    status: str = ""
    status_code: int = 0
    operation: str = ""
    error_code: int = 0
    error: str = ""
    metadata: Any = None

    @classmethod
    def _from_value(cls, value: Any) -> "ApiResponse":
        if value is None:
            return cls()
        if not isinstance(value, Mapping):
            raise ValueError(f"Cannot decode {type(value).__name__} as a response")
        return cls(
            type=_response_type(_string(value, "type")),
            status=_string(value, "status"),
            status_code=_integer(value, "status_code"),
            operation=_string(value, "operation"),
            error_code=_integer(value, "error_code"),
            error=_string(value, "error"),
            metadata=value.get("metadata"),
        )


def parse_response(
    status_code: int, body: Union[str, bytes], url: str, status: str
) -> ApiResponse:
    """Decode the first JSON value of a response body.

    Raises StatusError when the response reports an error, and ValueError
    when the body cannot be decoded.
    """
    try:
        text = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
        value, _ = json.JSONDecoder().raw_decode(text.lstrip())
        response = ApiResponse._from_value(value)
    except ValueError:
        if status_code != HTTPStatus.OK:
            raise ValueError(f'Failed to fetch "{url}": "{status}"') from None
        raise

    if response.type == ResponseType.ERROR:
        raise StatusError(status_code, response.error)

    return response