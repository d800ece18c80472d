# memberkit

Building blocks for a small clustered daemon: the records its members
exchange, a YAML-backed trust store of peers, and helpers for its REST layer.

## Install

```
pip install memberkit
```

For the test suite:

```
pip install "memberkit[test]"
pytest
```

## Modules

- `memberkit.addrport`: `AddrPort` is an immutable IPv4/IPv6 address with a
  port. `parse_addr_port` accepts `ip:port` or `[ipv6]:port`, and the empty
  string parses to the empty address (`is_empty()`). `AddrPort.to_json` and
  `AddrPort.from_json` use a quoted string. `AddrPorts` is a list with
  `strings()` and `select_random()`; `parse_addr_ports` builds one.
- `memberkit.certificate`: `X509Certificate` optionally holds a parsed
  certificate. It has `to_pem()`, `fingerprint()` (SHA-256 of the DER bytes,
  lowercase hex), `is_empty()`, `to_json()` and `from_json()`.
  `parse_x509_certificate` reads the first PEM block of a string. The module
  also defines the `KeyPair` and `ClusterCertificatePut` records and the
  `CertificateName` enum (`cluster`, `server`).
- `memberkit.types`: `ClusterMemberLocal` and `ClusterMember` records with
  `to_dict()`/`from_dict()`, the `MemberStatus` and `DatabaseStatus` enums,
  `RoleStatus.role_changed()`, `ServerConfig`, `DaemonConfig` and
  `EndpointPrefix`. Heartbeat times are written as RFC 3339 text.
- `memberkit.response`: `parse_response(status_code, body, url, status)`
  decodes a JSON reply into an `ApiResponse`. It raises `StatusError` (which
  carries `status_code`) when the reply has type `error`, and `ValueError`
  when the body cannot be decoded.
- `memberkit.validation`: `validate_hostname` checks one label and raises
  `ValueError`. `validate_fqdn` checks a whole name and raises `StatusError`
  with status 400.
- `memberkit.remotes`: `Remotes` is a thread-safe set of `Remote` peers kept
  as one `<name>.yaml` file each in a directory. It has `load`, `add`,
  `replace` (takes objects with `name`, `address` and `certificate`, such as
  `ClusterMember`, and removes files of peers no longer listed),
  `select_random`, `addresses`, `remote_by_address`,
  `remote_by_certificate_fingerprint`, `certificates`, `count` and
  `remotes_by_name`. Files are written atomically.
- `memberkit.truststore`: `Store(directory, watcher=None)` loads a `Remotes`
  set from a directory. `refresh()` reloads it. If a watcher object is given,
  its `watch(directory, ".yaml", callback)` method is called so that changes
  trigger a refresh.
- `memberkit.endpoints`: `Endpoint`, `EndpointAction`, `EndpointAlias`,
  `Resources` and `Server` describe an API. `Endpoint.action(method)` returns
  the action for an HTTP method, and `Endpoint.paths()` returns the path and
  the paths of its aliases.

## Example

```python
from memberkit.addrport import parse_addr_port
from memberkit.truststore import Store
from memberkit.validation import validate_fqdn

validate_fqdn("node1.example.com")

addr = parse_addr_port("10.0.0.5:9443")
print(str(addr))            # 10.0.0.5:9443

store = Store("/var/lib/mydaemon/truststore")
remotes = store.remotes()
print(remotes.count(), remotes.addresses())
```

A peer file that `Remotes.load` reads can look like this:

```yaml
name: node1
address: 10.0.0.5:9443
certificate: |
  -----BEGIN CERTIFICATE-----
  ...
  -----END CERTIFICATE-----
```

## What it does not do

memberkit is a library of parts. It has no command-line tool and does not run
a daemon. It does not serve HTTP and has no HTTP client: the endpoint classes
only describe handlers, and `parse_response` only decodes a body it is given.
It keeps no database of members. It does not watch the file system itself:
`Store` reloads only when `refresh()` is called or when a watcher you supply
calls back.