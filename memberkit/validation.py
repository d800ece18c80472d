"""Validation of host names and fully qualified domain names."""

from __future__ import annotations

import re
from http import HTTPStatus

from .response import StatusError

_LABEL = re.compile(r"[-a-zA-Z0-9]+", re.ASCII)
_DIGITS = re.compile(r"[0-9]+", re.ASCII)
_MAX_UINT64 = 2**64 - 1


def validate_hostname(label: str) -> str:
    """Check a single host name label and return it; raises ValueError."""
    if not 1 <= len(label.encode("utf-8")) <= 63:
        raise ValueError("Name must be 1-63 characters long")
    if label.startswith("-"):
        raise ValueError('Name must not start with "-" character')
    if label.endswith("-"):
        raise ValueError('Name must not end with "-" character')
    if _DIGITS.fullmatch(label) and int(label) <= _MAX_UINT64:
        raise ValueError("Name cannot be a number")
    if not _LABEL.fullmatch(label):
        raise ValueError("Name can only contain alphanumeric and hyphen characters")
    return label


def validate_fqdn(name: str) -> str:
    """Check a fully qualified domain name and return it; raises StatusError (400)."""
    if not 1 <= len(name.encode("utf-8")) <= 255:
        raise StatusError(HTTPStatus.BAD_REQUEST, "Name must be 1-255 characters long")

    for label in name.split("."):
        try:
            validate_hostname(label)
        except ValueError as exc:
            raise StatusError(HTTPStatus.BAD_REQUEST, str(exc)) from None

    return name