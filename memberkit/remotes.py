"""The set of trusted cluster members kept as YAML files in a directory."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import os
import random
import tempfile
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import yaml

from .addrport import AddrPort, parse_addr_port
from .certificate import X509Certificate, parse_x509_certificate

_log = logging.getLogger(__name__)

_SUFFIX = ".yaml"
_FILE_MODE = 0o644

PathLike = Union[str, "os.PathLike[str]"]


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{key} must be a string")


@dataclass
class Location:
    """Identifying information about a remote."""

    name: str = ""
    address: AddrPort = field(default_factory=AddrPort)


@dataclass
class Remote(Location):
    """A trusted cluster member with its certificate."""

    certificate: X509Certificate = field(default_factory=X509Certificate)

    def url(self) -> str:
        """Return the HTTPS URL of the remote."""
        host = str(self.address)
        return f"https://{host}" if host else "https:"

    def to_dict(self) -> dict[str, Any]:
        """Return the form stored in the YAML file."""
        return {
            "name": self.name,
            "address": str(self.address),
            "certificate": self.certificate.to_pem(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Remote":
        """Build from the form stored in the YAML file."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Cannot decode {type(data).__name__} as a remote")
        if data.get("certificate") is None:
            certificate = X509Certificate()
        else:
            certificate = parse_x509_certificate(_text(data, "certificate"))
        return cls(
            name=_text(data, "name"),
            address=parse_addr_port(_text(data, "address")),
            certificate=certificate,
        )


def _remote_path(directory: str, name: str) -> str:
    return os.path.join(directory, os.path.basename(name + _SUFFIX))


def _dump(remote: Remote) -> bytes:
    return yaml.safe_dump(remote.to_dict(), sort_keys=False).encode("utf-8")


def _write_atomic(path: str, content: bytes) -> None:
    fd, temp_path = tempfile.mkstemp(
        dir=os.path.dirname(path) or ".", prefix=".", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, _FILE_MODE)
        os.replace(temp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(temp_path)
        raise


def _empty_certificate(name: str) -> ValueError:
    return ValueError(f'Failed to parse local record "{name}". Found empty certificate')


class Remotes:
    """A thread-safe collection of remotes keyed by name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Remote] = {}

    def load(self, directory: PathLike) -> None:
        """Read every YAML file in directory and replace the remotes with them.

        An empty result is ignored when remotes are already known.
        """
        directory = os.fspath(directory)
        with self._lock:
            try:
                with os.scandir(directory) as entries:
                    files = sorted(entries, key=lambda entry: entry.name)
            except OSError as exc:
                raise OSError(f'Unable to read trust directory: "{directory}": {exc}') from exc

            remote_data: dict[str, Remote] = {}
            for entry in files:
                if entry.is_dir(follow_symlinks=False) or not entry.name.endswith(_SUFFIX):
                    continue

                try:
                    with open(os.path.join(directory, entry.name), "rb") as handle:
                        content = handle.read()
                except OSError as exc:
                    raise OSError(f'Unable to read file "{entry.name}": {exc}') from exc

                try:
                    remote = Remote.from_dict(yaml.safe_load(content))
                except (yaml.YAMLError, ValueError) as exc:
                    raise ValueError(f'Unable to parse yaml for "{entry.name}": {exc}') from exc

                if remote.certificate.is_empty():
                    raise _empty_certificate(remote.name)

                remote_data[remote.name] = remote

            if not remote_data and self._data:
                _log.warning("Failed to parse new remotes from truststore")
                return

            self._data = remote_data

    def add(self, directory: PathLike, *remotes: Remote) -> None:
        """Write a new file for each remote and track it at once."""
        directory = os.fspath(directory)
        with self._lock:
            for remote in remotes:
                if remote.certificate.is_empty():
                    raise _empty_certificate(remote.name)

                if remote.name in self._data:
                    raise ValueError(f'A remote with name "{remote.name}" already exists')

                content = _dump(remote)
                path = _remote_path(directory, remote.name)
                try:
                    os.stat(path)
                except FileNotFoundError:
                    pass
                except OSError as exc:
                    raise OSError(f'Failed to check remote path "{path}": {exc}') from exc
                else:
                    raise FileExistsError(f'Remote at "{path}" already exists')

                try:
                    _write_atomic(path, content)
                except OSError as exc:
                    raise OSError(f'Failed to write "{path}": {exc}') from exc

                self._data[remote.name] = remote

    def replace(self, directory: PathLike, *members: Any) -> None:
        """Replace the remotes and their files with the given cluster members.

        Files of remotes not among the members are removed.
        """
        directory = os.fspath(directory)
        with self._lock:
            if not members:
                raise ValueError("Received empty remotes")

            remote_data: dict[str, Remote] = {}
            for member in members:
                remote = Remote(
                    name=member.name, address=member.address, certificate=member.certificate
                )
                if remote.certificate.is_empty():
                    raise _empty_certificate(member.name)

                path = _remote_path(directory, member.name)
                try:
                    _write_atomic(path, _dump(remote))
                except OSError as exc:
                    raise OSError(f'Failed to write "{path}": {exc}') from exc

                remote_data[member.name] = remote

            for entry_name in os.listdir(directory):
                if not entry_name.endswith(_SUFFIX):
                    continue
                if entry_name[: -len(_SUFFIX)] not in remote_data:
                    os.remove(os.path.join(directory, os.path.basename(entry_name)))

            self._data = remote_data

    def select_random(self) -> Remote:
        """Return a remote picked at random; raises IndexError if there are none."""
        with self._lock:
            return random.choice(list(self._data.values()))

    def addresses(self) -> dict[str, AddrPort]:
        """Return the address of every remote keyed by name."""
        with self._lock:
            return {remote.name: remote.address for remote in self._data.values()}

    def remote_by_address(self, addr_port: AddrPort) -> Optional[Remote]:
        """Return the remote with the given address, or None."""
        wanted = str(addr_port)
        with self._lock:
            for remote in self._data.values():
                if str(remote.address) == wanted:
                    return dataclasses.replace(remote)
        return None

    def remote_by_certificate_fingerprint(self, fingerprint: str) -> Optional[Remote]:
        """Return the remote whose certificate has the given fingerprint, or None."""
        with self._lock:
            for remote in self._data.values():
                if fingerprint == remote.certificate.fingerprint():
                    return dataclasses.replace(remote)
        return None

    def certificates(self) -> dict[str, X509Certificate]:
        """Return the certificates of the remotes keyed by fingerprint."""
        with self._lock:
            return {
                remote.certificate.fingerprint(): remote.certificate
                for remote in self._data.values()
            }

    def count(self) -> int:
        """Return the number of remotes."""
        with self._lock:
            return len(self._data)

    def remotes_by_name(self) -> dict[str, Remote]:
        """Return a copy of the remotes keyed by name."""
        with self._lock:
            return dict(self._data)