"""Descriptions of the API endpoints and additional listeners a daemon serves."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from .types import EndpointPrefix, ServerConfig

Handler = Callable[[Any, Any], Any]
AccessHandler = Callable[[Any, Any], Tuple[bool, Any]]


@dataclass
class EndpointAlias:
    """An alternative path for an endpoint."""

    name: str = ""
    path: str = ""


@dataclass
class EndpointAction:
    """What happens for one HTTP method on an endpoint."""

    handler: Optional[Handler] = None
    access_handler: Optional[AccessHandler] = None
    allow_untrusted: bool = False
    proxy_target: bool = False


@dataclass
class Endpoint:
    """A URL of the API with its actions."""

    name: str = ""
    path: str = ""
    aliases: list[EndpointAlias] = field(default_factory=list)
    get: EndpointAction = field(default_factory=EndpointAction)
    put: EndpointAction = field(default_factory=EndpointAction)
    post: EndpointAction = field(default_factory=EndpointAction)
    delete: EndpointAction = field(default_factory=EndpointAction)
    patch: EndpointAction = field(default_factory=EndpointAction)
    allowed_during_shutdown: bool = False
    allowed_before_init: bool = False

    def action(self, method: str) -> EndpointAction:
        """Return the action for an HTTP method; raises ValueError if unsupported."""
        actions = {
            "GET": self.get,
            "PUT": self.put,
            "POST": self.post,
            "DELETE": self.delete,
            "PATCH": self.patch,
        }
        try:
            return actions[method.upper()]
        except KeyError:
            raise ValueError(f"Unsupported method {method!r}") from None

    def paths(self) -> list[str]:
        """Return the endpoint path followed by the paths of its aliases."""
        return [self.path, *(alias.path for alias in self.aliases)]


@dataclass
class Resources:
    """The endpoints served under one path prefix."""

    path_prefix: EndpointPrefix = field(default_factory=EndpointPrefix)
    endpoints: list[Endpoint] = field(default_factory=list)


@dataclass
class Server(ServerConfig):
    """An additional listener and the resources it serves."""

    core_api: bool = False
    pre_init: bool = False
    serve_unix: bool = False
    dedicated_certificate: bool = False
    resources: list[Resources] = field(default_factory=list)
    drain_connections_timeout: datetime.timedelta = datetime.timedelta(0)