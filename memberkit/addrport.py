"""IP address and port pairs with text and JSON forms."""

from __future__ import annotations

import ipaddress
import json
import random
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_PORT = re.compile(r"[0-9]+\Z")
_MAX_PORT = 65535


@dataclass(frozen=True)
class AddrPort:
    """An IPv4 or IPv6 address with a port. The default value is the empty address."""

    addr: Optional[IPAddress] = None
    port: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.port <= _MAX_PORT:
            raise ValueError(f"Port {self.port} out of range")
        if self.addr is None and self.port:
            raise ValueError("A port requires an address")

    def is_empty(self) -> bool:
        """Return True if this is the empty address."""
        return self.addr is None

    def __str__(self) -> str:
        if self.addr is None:
            return ""
        if isinstance(self.addr, ipaddress.IPv6Address):
            return f"[{_format_ipv6(self.addr)}]:{self.port}"
        return f"{self.addr}:{self.port}"

    def to_json(self) -> str:
        """Return the JSON text for this address: a quoted string."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "AddrPort":
        """Parse the JSON text of an address string."""
        value = json.loads(data)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"Cannot decode {type(value).__name__} as an address")
        return parse_addr_port(value)


def _format_ipv6(addr: ipaddress.IPv6Address) -> str:
    mapped = addr.ipv4_mapped
    if mapped is not None and getattr(addr, "scope_id", None) is None:
        return f"::ffff:{mapped}"
    return str(addr)


def parse_addr_port(text: str) -> AddrPort:
    """Parse "ip:port" or "[ipv6]:port". The empty string gives the empty address."""
    if text == "":
        return AddrPort()

    host, sep, port_text = text.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid ip:port {text!r}: missing port")

    bracketed = host.startswith("[")
    if bracketed:
        if len(host) < 2 or not host.endswith("]"):
            raise ValueError(f"Invalid ip:port {text!r}: unbalanced brackets")
        host = host[1:-1]

    if not _PORT.match(port_text) or int(port_text) > _MAX_PORT:
        raise ValueError(f"Invalid port {port_text!r} parsing {text!r}")

    try:
        addr = ipaddress.ip_address(host)
    except ValueError as exc:
        raise ValueError(f"Invalid ip:port {text!r}: {exc}") from None

    if bracketed and isinstance(addr, ipaddress.IPv4Address):
        raise ValueError(
            f"Invalid ip:port {text!r}: square brackets can only be used with IPv6 addresses"
        )
    if not bracketed and isinstance(addr, ipaddress.IPv6Address):
        raise ValueError(
            f"Invalid ip:port {text!r}: IPv6 addresses must be surrounded by square brackets"
        )

    return AddrPort(addr, int(port_text))


class AddrPorts(list):
    """A list of AddrPort values."""

    def strings(self) -> list[str]:
        """Return the text form of every address."""
        return [str(addr_port) for addr_port in self]

    def select_random(self) -> AddrPort:
        """Return one address picked at random; raises IndexError if empty."""
        return random.choice(self)


def parse_addr_ports(texts: Iterable[str]) -> AddrPorts:
    """Parse each string into an AddrPort."""
    return AddrPorts(parse_addr_port(text) for text in texts)