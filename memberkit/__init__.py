"""Cluster member types, a YAML trust store of peers and REST helpers for clustered daemons."""

__version__ = "0.1.0"

__all__ = [
    "addrport",
    "certificate",
    "types",
    "response",
    "validation",
    "remotes",
    "truststore",
    "endpoints",
]