"""Records describing cluster members, daemon configuration and statuses."""

from __future__ import annotations

import datetime
import enum
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .addrport import AddrPort, parse_addr_port
from .certificate import X509Certificate, parse_x509_certificate

_UTC = datetime.timezone.utc
_ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=_UTC)
_TIME = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})\Z"
)
_MAX_UINT64 = 2**64 - 1


class MemberStatus(str, enum.Enum):
    """The online status of a cluster member."""

    ONLINE = "ONLINE"
    UNREACHABLE = "UNREACHABLE"
    NOT_TRUSTED = "NOT TRUSTED"
    NOT_FOUND = "NOT FOUND"
    UPGRADING = "UPGRADING"
    NEEDS_UPGRADE = "NEEDS UPGRADE"


class DatabaseStatus(str, enum.Enum):
    """The current status of the database."""

    READY = "Database is online"
    WAITING = "Database is waiting for an upgrade"
    STARTING = "Database is still starting"
    NOT_READY = "Database is not yet initialized"
    OFFLINE = "Database is offline"


class EndpointPrefix(str):
    """The endpoint prefix on which a resource is served."""


@dataclass(frozen=True)
class RoleStatus:
    """The previous and current role of a cluster member."""

    old: str = ""
    new: str = ""

    def role_changed(self) -> bool:
        """Return whether the role has changed."""
        return self.old != self.new


def _format_time(moment: datetime.datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=_UTC)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or datetime.timedelta(0)
    minutes = int(offset.total_seconds()) // 60
    if minutes == 0:
        return text + "Z"
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _parse_time(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot decode {type(value).__name__} as a time")
    match = _TIME.match(value)
    if match is None:
        raise ValueError(f"Invalid time {value!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int((fraction or "")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tzinfo = _UTC
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = datetime.timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tzinfo = datetime.timezone(sign * offset)
    return datetime.datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second),
        microsecond, tzinfo=tzinfo,
    )


def _uint64(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key) or 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    if not 0 <= value <= _MAX_UINT64:
        raise ValueError(f"{key} out of range: {value}")
    return value


def _certificate(data: Mapping[str, Any]) -> X509Certificate:
    if "certificate" not in data:
        return X509Certificate()
    value = data["certificate"]
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValueError("certificate must be a PEM string")
    return parse_x509_certificate(value)


def _member_status(value: Any) -> Union[MemberStatus, str]:
    value = value or ""
    try:
        return MemberStatus(value)
    except ValueError:
        return str(value)


def _local_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": data.get("name") or "",
        "address": parse_addr_port(data.get("address") or ""),
        "certificate": _certificate(data),
    }


@dataclass
class ClusterMemberLocal:
    """Local information about a cluster member."""

    name: str = ""
    address: AddrPort = field(default_factory=AddrPort)
    certificate: X509Certificate = field(default_factory=X509Certificate)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form."""
        return {
            "name": self.name,
            "address": str(self.address),
            "certificate": self.certificate.to_pem(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClusterMemberLocal":
        """Build from the JSON-ready form."""
        return cls(**_local_fields(data))


@dataclass
class ClusterMember(ClusterMemberLocal):
    """Information about a database cluster member."""

    role: str = ""
    schema_internal_version: int = 0
    schema_external_version: int = 0
    last_heartbeat: datetime.datetime = _ZERO_TIME
    status: Union[MemberStatus, str] = ""
    extensions: list = field(default_factory=list)
    secret: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form."""
        status = self.status.value if isinstance(self.status, MemberStatus) else self.status
        return {
            **super().to_dict(),
            "role": self.role,
            "schema_internal_version": self.schema_internal_version,
            "schema_external_version": self.schema_external_version,
            "last_heartbeat": _format_time(self.last_heartbeat),
            "status": status,
            "extensions": list(self.extensions),
            "secret": self.secret,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClusterMember":
        """Build from the JSON-ready form."""
        heartbeat = data.get("last_heartbeat")
        return cls(
            **_local_fields(data),
            role=data.get("role") or "",
            schema_internal_version=_uint64(data, "schema_internal_version"),
            schema_external_version=_uint64(data, "schema_external_version"),
            last_heartbeat=_ZERO_TIME if heartbeat is None else _parse_time(heartbeat),
            status=_member_status(data.get("status")),
            extensions=list(data.get("extensions") or []),
            secret=data.get("secret") or "",
        )


@dataclass
class ServerConfig:
    """The mutable fields of an additional network listener."""

    address: AddrPort = field(default_factory=AddrPort)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form."""
        return {"address": str(self.address)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerConfig":
        """Build from the JSON-ready form."""
        return cls(address=parse_addr_port(data.get("address") or ""))


@dataclass
class DaemonConfig:
    """The in-memory form of the local daemon configuration file."""

    name: str = ""
    address: AddrPort = field(default_factory=AddrPort)
    servers: dict[str, ServerConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form."""
        return {
            "name": self.name,
            "address": str(self.address),
            "servers": {name: server.to_dict() for name, server in self.servers.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DaemonConfig":
        """Build from the JSON-ready form."""
        servers = data.get("servers") or {}
        return cls(
            name=data.get("name") or "",
            address=parse_addr_port(data.get("address") or ""),
            servers={name: ServerConfig.from_dict(value or {}) for name, value in servers.items()},
        )